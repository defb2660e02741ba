"""Score rosters and contestants under a point scheme.

Scoring is a pure function of ``(season, scheme)``: event point values come
from the scheme, never from :attr:`ScoringEvent.base_points`, and nothing here
mutates its inputs.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .data import (
    DEFAULT_SCHEME,
    ContestantScore,
    DraftResult,
    EventType,
    PointScheme,
    Roster,
    ScoringEvent,
    Season,
    SimulationResult,
    TeamScore,
)


def _score_events(events: Sequence[ScoringEvent], scheme: PointScheme) -> Tuple[int, Dict[EventType, int]]:
    total = 0
    breakdown: Dict[EventType, int] = {}
    for event in events:
        pts = scheme.event_points(event)
        total += pts
        breakdown[event.event_type] = breakdown.get(event.event_type, 0) + pts
    return total, breakdown


def score_contestant(season: Season, contestant_id: str, scheme: Optional[PointScheme] = None) -> ContestantScore:
    """Score one contestant. Unknown ids score zero and are named by their id."""

    scheme = scheme or DEFAULT_SCHEME
    total, breakdown = _score_events(season.events_for(contestant_id), scheme)
    contestant = season.contestants_by_id.get(contestant_id)
    return ContestantScore(
        contestant_id=contestant_id,
        name=contestant.name if contestant is not None else contestant_id,
        placement=contestant.placement if contestant is not None else 0,
        score=total,
        breakdown=breakdown,
    )


def contestant_totals(season: Season, scheme: Optional[PointScheme] = None) -> Dict[str, int]:
    """Contestant id -> total fantasy points, in season order."""

    scheme = scheme or DEFAULT_SCHEME
    return {
        cid: sum(scheme.event_points(e) for e in season.events_for(cid))
        for cid in season.contestant_ids
    }


def score_all_contestants(season: Season, scheme: Optional[PointScheme] = None) -> List[ContestantScore]:
    """Score every contestant in the season, without any roster grouping."""

    scheme = scheme or DEFAULT_SCHEME
    return [score_contestant(season, c.contestant_id, scheme) for c in season.contestants]


def score_team(
    season: Season,
    player_index: int,
    contestant_ids: Sequence[str],
    scheme: Optional[PointScheme] = None,
) -> TeamScore:
    scheme = scheme or DEFAULT_SCHEME

    contestant_scores = tuple(score_contestant(season, cid, scheme) for cid in contestant_ids)

    score_by_episode: Dict[int, int] = {}
    for cid in contestant_ids:
        for event in season.events_for(cid):
            score_by_episode[event.episode] = score_by_episode.get(event.episode, 0) + scheme.event_points(event)

    return TeamScore(
        player_index=player_index,
        total_score=sum(c.score for c in contestant_scores),
        contestants=contestant_scores,
        score_by_episode=dict(sorted(score_by_episode.items())),
    )


def rank_players(scores: Sequence[TeamScore]) -> Tuple[int, ...]:
    """Player indices by total score descending; ties keep their input order."""

    return tuple(s.player_index for s in sorted(scores, key=lambda s: -s.total_score))


def score_roster(
    season: Season,
    roster: Roster | DraftResult,
    scheme: Optional[PointScheme] = None,
) -> SimulationResult:
    """Score every player's roster.

    Parameters
    ----------
    roster:
        Mapping of player index -> contestant ids, or a full
        :class:`~survivor_sim.data.DraftResult` (whose pick log is kept on the
        returned result).

    Returns
    -------
    SimulationResult
        Team scores in player-index order plus the ranking.
    """

    scheme = scheme or DEFAULT_SCHEME
    draft = roster if isinstance(roster, DraftResult) else DraftResult(roster=roster, picks=())
    teams: Mapping[int, Sequence[str]] = draft.roster

    scores = tuple(score_team(season, idx, teams[idx], scheme) for idx in sorted(teams))

    return SimulationResult(
        season_number=season.season_number,
        draft=draft,
        scores=scores,
        rankings=rank_players(scores),
    )
