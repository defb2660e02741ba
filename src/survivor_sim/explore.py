"""Cross-season aggregation of contestant scoring.

Everything here is derived from :func:`survivor_sim.scoring.score_all_contestants`
and is deterministic for a given set of seasons and point scheme. Sorts are
stable, so ties keep season / contestant order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_LEADERBOARD_SIZE
from .data import DEFAULT_SCHEME, EVENT_CATEGORIES, ContestantScore, EventType, PointScheme, Season
from .scoring import score_all_contestants


@dataclass(frozen=True, slots=True)
class EventTypeBreakdown:
    event_type: EventType
    count: int
    total_points: int

    # share of the season's net points
    percentage: float


@dataclass(frozen=True, slots=True)
class SeasonStats:
    avg_points: float
    median_points: float
    top_points: int
    bottom_points: int
    event_type_breakdown: Tuple[EventTypeBreakdown, ...]


@dataclass(frozen=True, slots=True)
class EpisodeTrendEntry:
    """Cumulative points of every contestant after one episode."""

    episode: int
    cumulative: Mapping[str, int]


@dataclass(frozen=True, slots=True)
class SeasonScoring:
    season_number: int
    name: str
    contestant_count: int
    episode_count: int
    stats: SeasonStats
    contestants: Tuple[ContestantScore, ...]
    contestant_trends: Tuple[EpisodeTrendEntry, ...]


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    contestant_id: str
    name: str
    season_number: int
    season_name: str
    placement: int
    total_points: int
    breakdown: Mapping[EventType, int]


@dataclass(frozen=True, slots=True)
class EventTrendEntry:
    season_number: int

    # category name -> percentage (0-100, 1 dp) of the season's net points
    shares: Mapping[str, float]


@dataclass(frozen=True, slots=True)
class PlayerSeasonAppearance:
    season_number: int
    season_name: str
    placement: int
    is_winner: bool
    is_finalist: bool
    is_jury: bool
    total_points: int
    breakdown: Mapping[EventType, int]

    # (episode, cumulative points) in episode order
    episode_trend: Tuple[Tuple[int, int], ...]


@dataclass(frozen=True, slots=True)
class PlayerProfile:
    contestant_id: str
    name: str
    appearances: Tuple[PlayerSeasonAppearance, ...]
    career_points: int
    seasons_played: int
    best_placement: int


def _median(values: Sequence[int]) -> float:
    if not values:
        return 0.0
    return float(np.median(values))


def _episode_points(season: Season, scheme: PointScheme) -> Dict[int, Dict[str, int]]:
    by_episode: Dict[int, Dict[str, int]] = {}
    for event in season.events:
        ep = by_episode.setdefault(event.episode, {})
        ep[event.contestant_id] = ep.get(event.contestant_id, 0) + scheme.event_points(event)
    return by_episode


def _contestant_trends(season: Season, scheme: PointScheme) -> Tuple[EpisodeTrendEntry, ...]:
    by_episode = _episode_points(season, scheme)
    running = {cid: 0 for cid in season.contestant_ids}
    out: List[EpisodeTrendEntry] = []
    for episode in sorted(by_episode):
        earned = by_episode[episode]
        for cid in running:
            running[cid] += earned.get(cid, 0)
        out.append(EpisodeTrendEntry(episode=episode, cumulative=dict(running)))
    return tuple(out)


def aggregate_season_scoring(season: Season, scheme: Optional[PointScheme] = None) -> SeasonScoring:
    """Scoring summary for one season.

    The event-type breakdown only lists types that occur, sorted by net
    points (highest first). Percentages are shares of the season's net total
    and are 0 when that total is not positive.
    """

    scheme = scheme or DEFAULT_SCHEME
    contestants = score_all_contestants(season, scheme)
    scores = [c.score for c in contestants]
    season_total = sum(scores)

    counts: Dict[EventType, int] = {}
    points: Dict[EventType, int] = {}
    for event in season.events:
        counts[event.event_type] = counts.get(event.event_type, 0) + 1
        points[event.event_type] = points.get(event.event_type, 0) + scheme.event_points(event)

    breakdown = sorted(
        (
            EventTypeBreakdown(
                event_type=t,
                count=counts[t],
                total_points=points[t],
                percentage=points[t] / season_total if season_total > 0 else 0.0,
            )
            for t in EventType
            if counts.get(t, 0) > 0
        ),
        key=lambda b: -b.total_points,
    )

    stats = SeasonStats(
        avg_points=round(season_total / len(scores), 2) if scores else 0.0,
        median_points=round(_median(scores), 2),
        top_points=max(scores) if scores else 0,
        bottom_points=min(scores) if scores else 0,
        event_type_breakdown=tuple(breakdown),
    )

    return SeasonScoring(
        season_number=season.season_number,
        name=season.name,
        contestant_count=season.contestant_count,
        episode_count=season.episode_count,
        stats=stats,
        contestants=tuple(sorted(contestants, key=lambda c: -c.score)),
        contestant_trends=_contestant_trends(season, scheme),
    )


def build_cross_season_leaderboard(
    seasons: Iterable[Season],
    scheme: Optional[PointScheme] = None,
    top_n: int = DEFAULT_LEADERBOARD_SIZE,
) -> List[LeaderboardEntry]:
    """Top ``top_n`` single-season contestant totals across all ``seasons``."""

    scheme = scheme or DEFAULT_SCHEME
    entries = [
        LeaderboardEntry(
            contestant_id=c.contestant_id,
            name=c.name,
            season_number=season.season_number,
            season_name=season.name,
            placement=c.placement,
            total_points=c.score,
            breakdown=c.breakdown,
        )
        for season in seasons
        for c in score_all_contestants(season, scheme)
    ]
    entries.sort(key=lambda e: -e.total_points)
    return entries[:top_n]


def build_event_trend_data(
    seasons: Iterable[Season],
    scheme: Optional[PointScheme] = None,
) -> List[EventTrendEntry]:
    """Per-season percentage of net points contributed by each event category."""

    scheme = scheme or DEFAULT_SCHEME
    category_of = {t: cat for cat, types in EVENT_CATEGORIES.items() for t in types}

    out: List[EventTrendEntry] = []
    for season in sorted(seasons, key=lambda s: s.season_number):
        by_category = {cat: 0 for cat in EVENT_CATEGORIES}
        total = 0
        for event in season.events:
            pts = scheme.event_points(event)
            total += pts
            by_category[category_of[event.event_type]] += pts

        shares = {
            cat: (round(pts / total * 1000) / 10 if total > 0 else 0.0)
            for cat, pts in by_category.items()
        }
        out.append(EventTrendEntry(season_number=season.season_number, shares=shares))
    return out


def build_player_index(
    seasons: Iterable[Season],
    scheme: Optional[PointScheme] = None,
) -> List[PlayerProfile]:
    """Group contestants by id across seasons into career profiles.

    Profiles are sorted by career points (highest first); appearances within a
    profile are sorted by season number.
    """

    scheme = scheme or DEFAULT_SCHEME
    names: Dict[str, str] = {}
    appearances: Dict[str, List[PlayerSeasonAppearance]] = {}

    for season in seasons:
        by_episode = _episode_points(season, scheme)
        episodes = sorted(by_episode)

        for scored in score_all_contestants(season, scheme):
            cid = scored.contestant_id
            contestant = season.contestants_by_id[cid]

            running = 0
            trend: List[Tuple[int, int]] = []
            for episode in episodes:
                if cid in by_episode[episode]:
                    running += by_episode[episode][cid]
                    trend.append((episode, running))

            names.setdefault(cid, scored.name)
            appearances.setdefault(cid, []).append(
                PlayerSeasonAppearance(
                    season_number=season.season_number,
                    season_name=season.name,
                    placement=contestant.placement,
                    is_winner=contestant.is_winner,
                    is_finalist=contestant.made_final,
                    is_jury=contestant.made_jury,
                    total_points=scored.score,
                    breakdown=scored.breakdown,
                    episode_trend=tuple(trend),
                )
            )

    profiles = []
    for cid, apps in appearances.items():
        apps.sort(key=lambda a: a.season_number)
        profiles.append(
            PlayerProfile(
                contestant_id=cid,
                name=names[cid],
                appearances=tuple(apps),
                career_points=sum(a.total_points for a in apps),
                seasons_played=len(apps),
                best_placement=min(a.placement for a in apps),
            )
        )
    profiles.sort(key=lambda p: -p.career_points)
    return profiles


def find_player_profiles(profiles: Iterable[PlayerProfile], query: str) -> List[PlayerProfile]:
    """Profiles whose name contains ``query`` (case-insensitive), in input order."""

    needle = query.strip().lower()
    if not needle:
        return list(profiles)
    return [p for p in profiles if needle in p.name.lower()]
