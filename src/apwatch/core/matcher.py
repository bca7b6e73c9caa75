"""Match an observed BSSID against the access point roster.

A UniFi radio advertises one BSSID per broadcast network. These differ from
the radio's base MAC address in a few low-order bits, so only the base BSSID
ever matches exactly. The remaining ones are matched by counting identical
octets: at most two octets may differ, the highest count wins and ties go to
the entry listed first.
"""

from __future__ import annotations

import string

from apwatch.models import AccessPoint, Roster, normalize_address

ADDRESS_LENGTH = 12
OCTET_COUNT = ADDRESS_LENGTH // 2
MIN_MATCHING_OCTETS = 4


def is_well_formed(normalized: str) -> bool:
    return len(normalized) == ADDRESS_LENGTH and all(
        char in string.hexdigits for char in normalized
    )


def matching_octets(left: str, right: str) -> int:
    """Count identical octets of two normalized 12 character addresses."""
    return sum(
        1
        for index in range(0, ADDRESS_LENGTH, 2)
        if left[index : index + 2] == right[index : index + 2]
    )


def match_access_point(observed: str, roster: Roster) -> AccessPoint | None:
    normalized = normalize_address(observed)

    for access_point in roster:
        if access_point.normalized_address == normalized:
            return access_point

    if not is_well_formed(normalized):
        return None

    best: AccessPoint | None = None
    best_score = MIN_MATCHING_OCTETS - 1
    for access_point in roster:
        candidate = access_point.normalized_address
        if not is_well_formed(candidate):
            continue
        score = matching_octets(normalized, candidate)
        if score > best_score:
            best, best_score = access_point, score
    return best
