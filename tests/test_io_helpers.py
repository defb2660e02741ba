from __future__ import annotations

import pytest

from survivor_sim.data import EventType
from survivor_sim.io import (
    _bool,
    _int,
    _str,
    parse_manual_picks,
    parse_point_overrides,
    parse_raw_castaway,
    parse_raw_vote,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, True),
        (False, False),
        (1, True),
        (0, False),
        ("TRUE", True),
        ("false", False),
        (" yes ", True),
        (None, False),
    ],
)
def test_bool_accepts_export_spellings(value, expected) -> None:
    assert _bool({"k": value}, "k") is expected


def test_int_defaults_for_missing_and_blank() -> None:
    assert _int({}, "k") == 0
    assert _int({"k": ""}, "k", default=5) == 5
    assert _int({"k": "7"}, "k") == 7


def test_str_maps_none_to_empty() -> None:
    assert _str({"k": None}, "k") == ""
    assert _str({"k": 12}, "k") == "12"


def test_parse_raw_vote() -> None:
    vote = parse_raw_vote(
        {"season": "3", "episode": 2, "castaway_id": "A", "vote_id": "B", "voted_out_id": "B", "nullified": "true"}
    )
    assert vote.season == 3
    assert vote.castaway_id == "A"
    assert vote.nullified is True
    assert vote.vote_event == ""


def test_parse_raw_castaway_requires_placement() -> None:
    with pytest.raises(KeyError):
        parse_raw_castaway({"season": 1, "castaway_id": "A"})


def test_parse_point_overrides() -> None:
    assert parse_point_overrides("WINNER:30, finalist:15,") == {
        EventType.WINNER: 30,
        EventType.FINALIST: 15,
    }
    assert parse_point_overrides("") == {}


@pytest.mark.parametrize("value", ["WINNER", "WINNER:", "WINNER:abc", "NOT_A_TYPE:3"])
def test_parse_point_overrides_raises_on_bad_part(value: str) -> None:
    with pytest.raises(ValueError):
        parse_point_overrides(value)


def test_parse_manual_picks() -> None:
    assert parse_manual_picks("0:US0701, US0705; 1:US0703") == {
        0: ["US0701", "US0705"],
        1: ["US0703"],
    }


@pytest.mark.parametrize("value", ["US0701", "x:US0701", ":US0701"])
def test_parse_manual_picks_raises_on_bad_part(value: str) -> None:
    with pytest.raises(ValueError):
        parse_manual_picks(value)
