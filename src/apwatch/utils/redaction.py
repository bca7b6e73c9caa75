from __future__ import annotations

from dataclasses import dataclass, field

from yarl import URL

from apwatch.models import normalize_address


@dataclass
class Redactor:
    enabled: bool = True
    _mac_map: dict[str, int] = field(default_factory=dict)
    _mac_counter: int = 0

    def redact_mac(self, mac: str | None) -> str:
        if mac is None:
            return ""
        if not self.enabled:
            return mac
        normalized = normalize_address(mac)
        if len(normalized) != 12:
            return mac
        counter = self._mac_map.get(normalized)
        if counter is None:
            self._mac_counter += 1
            counter = self._mac_counter
            self._mac_map[normalized] = counter
        prefix = ":".join(normalized[i : i + 2] for i in range(0, 6, 2))
        return f"{prefix}:xx:xx:{counter:02d}"

    def redact_url(self, url: str | None) -> str:
        if url is None:
            return ""
        if not self.enabled:
            return url
        parsed = URL(url)
        if not parsed.host:
            return url
        return str(parsed.with_host("x.x.x.x"))

    def redact_ssid(self, ssid: str | None) -> str:
        if ssid is None:
            return ""
        if not self.enabled or len(ssid) <= 2:
            return ssid
        return f"{ssid[0]}***{ssid[-1]}"
