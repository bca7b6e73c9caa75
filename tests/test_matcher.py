"""Tests for BSSID matching."""

from __future__ import annotations

from conftest import make_access_point

from apwatch.core.matcher import (
    MIN_MATCHING_OCTETS,
    is_well_formed,
    match_access_point,
    matching_octets,
)
from apwatch.models import Roster


def test_exact_match_ignores_case_and_separators():
    office = make_access_point("aabbccddeeff", name="Office")
    roster = Roster([make_access_point("112233445566"), office])

    assert match_access_point("AA:BB:CC:DD:EE:FF", roster) is office
    assert match_access_point("aa-bb-cc-dd-ee-ff", roster) is office


def test_fuzzy_match_accepts_two_differing_octets():
    office = make_access_point("aa:bb:cc:dd:ee:00")
    roster = Roster([office])

    assert match_access_point("aa:bb:cc:dd:ee:ff", roster) is office
    assert match_access_point("aa:bb:cc:dd:01:02", roster) is office


def test_fuzzy_match_rejects_three_differing_octets():
    roster = Roster([make_access_point("aa:bb:cc:00:11:22")])

    assert match_access_point("aa:bb:cc:dd:ee:ff", roster) is None


def test_highest_score_wins():
    four = make_access_point("aa:bb:cc:dd:00:00", name="four")
    five = make_access_point("aa:bb:cc:dd:ee:00", name="five")
    roster = Roster([four, five])

    assert match_access_point("aa:bb:cc:dd:ee:ff", roster) is five


def test_tie_keeps_first_entry():
    first = make_access_point("aa:bb:cc:dd:ee:01", name="first")
    second = make_access_point("aa:bb:cc:dd:ee:02", name="second")

    assert match_access_point("aa:bb:cc:dd:ee:ff", Roster([first, second])) is first
    assert match_access_point("aa:bb:cc:dd:ee:ff", Roster([second, first])) is second


def test_exact_match_beats_earlier_fuzzy_candidate():
    near = make_access_point("aa:bb:cc:dd:ee:00")
    exact = make_access_point("aa:bb:cc:dd:ee:ff")

    assert match_access_point("aa:bb:cc:dd:ee:ff", Roster([near, exact])) is exact


def test_malformed_address_only_matches_exactly():
    odd = make_access_point("aa:bb:cc:dd:ee", name="short")
    roster = Roster([odd, make_access_point("aa:bb:cc:dd:ee:ff")])

    assert match_access_point("aa:bb:cc:dd:ee", roster) is odd
    assert match_access_point("aa:bb:cc:dd:e", roster) is None
    assert match_access_point("zz:bb:cc:dd:ee:ff", roster) is None


def test_malformed_roster_entries_are_skipped_for_fuzzy_matching():
    roster = Roster([make_access_point("aa:bb:cc:dd:ee:f")])

    assert match_access_point("aa:bb:cc:dd:ee:ff", roster) is None


def test_empty_roster():
    assert match_access_point("aa:bb:cc:dd:ee:ff", Roster()) is None


def test_helpers():
    assert MIN_MATCHING_OCTETS == 4
    assert is_well_formed("aabbccddeeff")
    assert not is_well_formed("aabbccddeefg")
    assert matching_octets("aabbccddeeff", "aabbcc001122") == 3
