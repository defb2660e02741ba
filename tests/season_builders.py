from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from survivor_sim.data import BASE_EVENT_POINTS, Contestant, EventType, ScoringEvent, Season


def make_event(event_type: EventType, contestant_id: str, episode: int = 1) -> ScoringEvent:
    return ScoringEvent(
        event_type=event_type,
        contestant_id=contestant_id,
        episode=episode,
        base_points=BASE_EVENT_POINTS[event_type],
    )


def make_contestants(n: int, *, winner: int | None = 0) -> Tuple[Contestant, ...]:
    """``n`` contestants C1..Cn with placements 1..n (C1 wins unless ``winner`` is None)."""

    return tuple(
        Contestant(
            contestant_id=f"C{i + 1}",
            name=f"Contestant {i + 1}",
            tribe="Tribe",
            placement=i + 1,
            made_final=i < 2,
            made_jury=i < 5,
            is_winner=winner is not None and i == winner,
        )
        for i in range(n)
    )


def make_season(
    events: Iterable[Tuple[EventType, str, int]] = (),
    *,
    n: int = 6,
    season_number: int = 1,
    contestants: Sequence[Contestant] | None = None,
) -> Season:
    cs = tuple(contestants) if contestants is not None else make_contestants(n)
    return Season(
        season_number=season_number,
        name=f"Season {season_number}",
        contestant_count=len(cs),
        episode_count=13,
        contestants=cs,
        events=tuple(make_event(t, cid, ep) for t, cid, ep in events),
    )


def example_season() -> Season:
    """C1 wins with two immunity wins; C2 is the other finalist."""

    return make_season(
        [
            (EventType.INDIVIDUAL_IMMUNITY_WIN, "C1", 10),
            (EventType.INDIVIDUAL_IMMUNITY_WIN, "C1", 11),
            (EventType.WINNER, "C1", 13),
            (EventType.FINALIST, "C1", 13),
            (EventType.FINALIST, "C2", 13),
        ],
        n=4,
    )


def varied_season(season_number: int = 1) -> Season:
    """Eight contestants with a spread of events across several episodes."""

    return make_season(
        [
            (EventType.TEAM_CHALLENGE_WIN, "C1", 1),
            (EventType.TEAM_CHALLENGE_WIN, "C2", 1),
            (EventType.TEAM_CHALLENGE_WIN, "C5", 1),
            (EventType.CORRECT_VOTE, "C1", 2),
            (EventType.CORRECT_VOTE, "C3", 2),
            (EventType.ZERO_VOTES_RECEIVED, "C4", 2),
            (EventType.SURVIVED_WITH_VOTES, "C2", 3),
            (EventType.IDOL_FIND, "C3", 3),
            (EventType.IDOL_PLAY_SUCCESS, "C3", 5),
            (EventType.INDIVIDUAL_IMMUNITY_WIN, "C1", 7),
            (EventType.REWARD_CHALLENGE_WIN, "C2", 7),
            (EventType.QUIT, "C8", 4),
            (EventType.VOTED_OUT_WITH_IDOL, "C6", 6),
            (EventType.MADE_JURY, "C3", 9),
            (EventType.MADE_JURY, "C4", 9),
            (EventType.FINALIST, "C1", 13),
            (EventType.FINALIST, "C2", 13),
            (EventType.WINNER, "C1", 13),
        ],
        n=8,
        season_number=season_number,
    )


def raw_export_tables() -> Dict[str, List[Dict[str, Any]]]:
    """A tiny survivoR export: season 1 has three castaways, season 2 has none."""

    def vote(voter: str, target: str) -> Dict[str, Any]:
        return {
            "season": 1,
            "episode": 3,
            "castaway": voter,
            "castaway_id": voter,
            "vote": target,
            "vote_id": target,
            "voted_out": "C",
            "voted_out_id": "C",
            "nullified": False,
            "vote_event": None,
        }

    return {
        "vote_history.json": [
            vote("A", "C"),
            vote("B", "C"),
            vote("C", "A"),
            {"season": 1, "episode": 4, "castaway": "A", "castaway_id": None, "vote": "B"},
        ],
        "challenge_results.json": [
            {
                "season": 1,
                "episode": 1,
                "castaway": "Alpha",
                "castaway_id": "A",
                "result": "Won",
                "won_individual_immunity": "TRUE",
                "won_individual_reward": 0,
            },
        ],
        "advantage_movement.json": [
            {
                "season": 1,
                "episode": 2,
                "castaway": "Bravo",
                "castaway_id": "B",
                "advantage_type": "Hidden Immunity Idol",
                "event": "Found",
                "votes_nullified": None,
            },
        ],
        "castaways.json": [
            {"season": 1, "castaway": "Alpha", "castaway_id": "A", "placement": 1, "tribe": "Red",
             "jury": False, "finalist": True, "result": "Sole Survivor"},
            {"season": 1, "castaway": "Bravo", "castaway_id": "B", "placement": 2, "tribe": None,
             "jury": False, "finalist": True, "result": "Runner-up"},
            {"season": 1, "castaway": "Charlie", "castaway_id": "C", "placement": 3, "tribe": "Blue",
             "jury": True, "finalist": False, "result": "3rd voted out"},
            {"season": 1, "castaway": "Ghost", "castaway_id": "G", "placement": None},
        ],
        "boot_mapping.json": [
            {"season": 1, "episode": 3, "castaway": "Charlie", "castaway_id": "C", "boot_order": 1},
        ],
        "season_summary.json": [
            {"season": 1, "season_name": "Survivor: Test", "num_castaways": 3, "num_episodes": 13},
            {"season": 2, "season_name": "Survivor: Empty", "num_castaways": 0, "num_episodes": 0},
        ],
    }


def write_raw_export(raw_dir: Path) -> Path:
    raw_dir.mkdir(parents=True, exist_ok=True)
    for name, rows in raw_export_tables().items():
        (raw_dir / name).write_text(json.dumps(rows), encoding="utf-8")
    return raw_dir
