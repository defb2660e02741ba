"""Domain data model for the Survivor draft balance simulator.

This module is intentionally *pure*: it defines the core enums and dataclasses
used throughout the project, with no dependency on input file formats.

Raw-record parsing lives in :mod:`survivor_sim.io`; the translation of raw
records into :class:`ScoringEvent` objects lives in :mod:`survivor_sim.mapper`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .constants import DEFAULT_MAX_OWNERS_PER_CONTESTANT


class EventType(str, Enum):
    """Point-bearing in-game occurrences."""

    INDIVIDUAL_IMMUNITY_WIN = "INDIVIDUAL_IMMUNITY_WIN"
    REWARD_CHALLENGE_WIN = "REWARD_CHALLENGE_WIN"
    TEAM_CHALLENGE_WIN = "TEAM_CHALLENGE_WIN"
    CORRECT_VOTE = "CORRECT_VOTE"
    IDOL_PLAY_SUCCESS = "IDOL_PLAY_SUCCESS"
    IDOL_FIND = "IDOL_FIND"
    FIRE_MAKING_WIN = "FIRE_MAKING_WIN"
    ZERO_VOTES_RECEIVED = "ZERO_VOTES_RECEIVED"
    SURVIVED_WITH_VOTES = "SURVIVED_WITH_VOTES"
    CAUSED_BLINDSIDE = "CAUSED_BLINDSIDE"
    MADE_JURY = "MADE_JURY"
    FINALIST = "FINALIST"
    WINNER = "WINNER"
    VOTED_OUT_WITH_IDOL = "VOTED_OUT_WITH_IDOL"
    QUIT = "QUIT"


BASE_EVENT_POINTS: Mapping[EventType, int] = MappingProxyType(
    {
        # Challenge performance
        EventType.INDIVIDUAL_IMMUNITY_WIN: 5,
        EventType.REWARD_CHALLENGE_WIN: 3,
        EventType.TEAM_CHALLENGE_WIN: 1,
        # Tribal council & strategy
        EventType.CORRECT_VOTE: 2,
        EventType.IDOL_PLAY_SUCCESS: 5,
        EventType.IDOL_FIND: 3,
        EventType.FIRE_MAKING_WIN: 5,
        # Social
        EventType.ZERO_VOTES_RECEIVED: 1,
        EventType.SURVIVED_WITH_VOTES: 2,
        EventType.CAUSED_BLINDSIDE: 2,
        # Endgame
        EventType.MADE_JURY: 5,
        EventType.FINALIST: 10,
        EventType.WINNER: 20,
        # Deductions
        EventType.VOTED_OUT_WITH_IDOL: -3,
        EventType.QUIT: -10,
    }
)


EVENT_CATEGORIES: Mapping[str, Tuple[EventType, ...]] = MappingProxyType(
    {
        "Challenges": (
            EventType.INDIVIDUAL_IMMUNITY_WIN,
            EventType.REWARD_CHALLENGE_WIN,
            EventType.TEAM_CHALLENGE_WIN,
            EventType.FIRE_MAKING_WIN,
        ),
        "Tribal": (
            EventType.CORRECT_VOTE,
            EventType.ZERO_VOTES_RECEIVED,
            EventType.SURVIVED_WITH_VOTES,
            EventType.CAUSED_BLINDSIDE,
        ),
        "Idols": (EventType.IDOL_FIND, EventType.IDOL_PLAY_SUCCESS),
        "Endgame": (EventType.MADE_JURY, EventType.FINALIST, EventType.WINNER),
        "Penalties": (EventType.VOTED_OUT_WITH_IDOL, EventType.QUIT),
    }
)


def parse_event_type(value: str) -> EventType:
    """Parse an event type name, case-insensitively."""

    v = value.strip().upper()
    try:
        return EventType(v)
    except ValueError as e:
        raise ValueError(f"Unknown event type: {value!r}") from e


# ============================================================================
# Season data
# ============================================================================


@dataclass(frozen=True, slots=True)
class Contestant:
    """One contestant's appearance in one season."""

    contestant_id: str
    name: str
    tribe: str
    placement: int
    made_jury: bool = False
    made_final: bool = False
    is_winner: bool = False

    def __post_init__(self) -> None:
        if not self.contestant_id:
            raise ValueError("Contestant.contestant_id must be non-empty")
        if self.placement < 1:
            raise ValueError("Contestant.placement must be >= 1")


@dataclass(frozen=True, slots=True)
class ScoringEvent:
    """A single point-bearing occurrence attributed to one contestant."""

    event_type: EventType
    contestant_id: str
    episode: int
    base_points: int
    description: str = ""

    def __post_init__(self) -> None:
        if self.episode < 0:
            # 0 is used for placement events whose elimination episode is unknown
            raise ValueError("ScoringEvent.episode must be >= 0")


@dataclass(frozen=True)
class Season:
    """A fully mapped season: contestants plus their scoring events.

    Seasons are read-only once built. Lookups used in hot loops (events by
    contestant, contestant by id) are memoised.
    """

    season_number: int
    name: str
    contestant_count: int
    episode_count: int
    contestants: Tuple[Contestant, ...]
    events: Tuple[ScoringEvent, ...] = ()

    def __post_init__(self) -> None:
        if self.contestant_count < 0:
            raise ValueError("Season.contestant_count must be >= 0")
        if self.episode_count < 0:
            raise ValueError("Season.episode_count must be >= 0")
        ids = [c.contestant_id for c in self.contestants]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Season {self.season_number} has duplicate contestant ids")

    @cached_property
    def contestant_ids(self) -> Sequence[str]:
        return tuple(c.contestant_id for c in self.contestants)

    @cached_property
    def contestants_by_id(self) -> Mapping[str, Contestant]:
        return {c.contestant_id: c for c in self.contestants}

    @cached_property
    def events_by_contestant(self) -> Mapping[str, Tuple[ScoringEvent, ...]]:
        """Contestant id -> that contestant's events, in season order."""

        grouped: Dict[str, List[ScoringEvent]] = {}
        for event in self.events:
            grouped.setdefault(event.contestant_id, []).append(event)
        return {cid: tuple(evs) for cid, evs in grouped.items()}

    @property
    def winner(self) -> Optional[Contestant]:
        for c in self.contestants:
            if c.is_winner:
                return c
        return None

    def contestant_name(self, contestant_id: str) -> str:
        c = self.contestants_by_id.get(contestant_id)
        return c.name if c is not None else contestant_id

    def events_for(self, contestant_id: str) -> Tuple[ScoringEvent, ...]:
        return self.events_by_contestant.get(contestant_id, ())


# ============================================================================
# Point schemes
# ============================================================================


@dataclass(frozen=True)
class PointScheme:
    """A total mapping of event type -> point value.

    Build one with :meth:`from_overrides`; a partial override mapping is laid
    over :data:`BASE_EVENT_POINTS`. Changing a value produces a new scheme.
    """

    points: Mapping[EventType, int] = field(default_factory=lambda: BASE_EVENT_POINTS)

    def __post_init__(self) -> None:
        missing = set(EventType) - set(self.points)
        if missing:
            raise ValueError(f"PointScheme missing event types: {sorted(t.value for t in missing)}")
        object.__setattr__(self, "points", {t: int(self.points[t]) for t in EventType})

    def __hash__(self) -> int:
        return hash(tuple(self.points[t] for t in EventType))

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[EventType | str, int]] = None) -> "PointScheme":
        merged: Dict[EventType, int] = dict(BASE_EVENT_POINTS)
        for key, value in (overrides or {}).items():
            event_type = key if isinstance(key, EventType) else parse_event_type(key)
            merged[event_type] = int(value)
        return cls(points=merged)

    def __getitem__(self, event_type: EventType) -> int:
        return self.points[event_type]

    def with_points(self, event_type: EventType, value: int) -> "PointScheme":
        updated = dict(self.points)
        updated[event_type] = int(value)
        return PointScheme(points=updated)

    @property
    def overrides(self) -> Dict[EventType, int]:
        """Only the values that differ from the base table."""

        return {t: v for t, v in self.points.items() if BASE_EVENT_POINTS[t] != v}

    def event_points(self, event: ScoringEvent) -> int:
        return self.points[event.event_type]


DEFAULT_SCHEME = PointScheme()


# ============================================================================
# Draft
# ============================================================================


class DraftMode(str, Enum):
    RANDOM = "random"
    MANUAL = "manual"
    HYBRID = "hybrid"


# player index -> ordered contestant ids
Roster = Dict[int, List[str]]


@dataclass(frozen=True, slots=True)
class DraftConfig:
    """Draft settings for one simulated league."""

    player_count: int
    picks_per_player: int
    max_owners_per_contestant: int = DEFAULT_MAX_OWNERS_PER_CONTESTANT
    mode: DraftMode = DraftMode.RANDOM
    manual_picks: Mapping[int, Sequence[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.player_count < 1:
            raise ValueError("DraftConfig.player_count must be >= 1")
        if self.picks_per_player < 1:
            raise ValueError("DraftConfig.picks_per_player must be >= 1")
        if self.max_owners_per_contestant < 1:
            raise ValueError("DraftConfig.max_owners_per_contestant must be >= 1")
        for idx in self.manual_picks:
            if not 0 <= idx < self.player_count:
                raise ValueError(f"DraftConfig.manual_picks has unknown player index {idx}")

    @property
    def total_picks(self) -> int:
        return self.player_count * self.picks_per_player


@dataclass(frozen=True, slots=True)
class Pick:
    """One entry of the draft log."""

    round_number: int
    pick_in_round: int
    player_index: int
    contestant_id: str


@dataclass(frozen=True, slots=True)
class DraftResult:
    roster: Roster
    picks: Tuple[Pick, ...]


# ============================================================================
# Scores
# ============================================================================


@dataclass(frozen=True, slots=True)
class ContestantScore:
    contestant_id: str
    name: str
    placement: int
    score: int
    breakdown: Mapping[EventType, int]


@dataclass(frozen=True, slots=True)
class TeamScore:
    player_index: int
    total_score: int
    contestants: Tuple[ContestantScore, ...]

    # episode -> points earned in that episode
    score_by_episode: Mapping[int, int]

    @property
    def cumulative_by_episode(self) -> Dict[int, int]:
        """Episode -> running total up to and including that episode."""

        running = 0
        out: Dict[int, int] = {}
        for episode in sorted(self.score_by_episode):
            running += self.score_by_episode[episode]
            out[episode] = running
        return out


@dataclass(frozen=True, slots=True)
class SimulationResult:
    season_number: int
    draft: DraftResult
    scores: Tuple[TeamScore, ...]

    # player indices sorted by total score descending
    rankings: Tuple[int, ...]

    def rank_of(self, player_index: int) -> int:
        """1-based finishing rank of a player."""

        return self.rankings.index(player_index) + 1


# ============================================================================
# Balance / Monte Carlo
# ============================================================================


@dataclass(frozen=True, slots=True)
class BalanceMetrics:
    gini: float
    spread: float
    event_contribution: Mapping[EventType, float]
    winner_advantage: float
    longevity_correlation: float


@dataclass(frozen=True, slots=True)
class AdjustmentSuggestion:
    event_type: EventType
    current_points: int
    suggested_points: int
    new_gini: float


@dataclass(frozen=True, slots=True)
class ScoreDistribution:
    mean: float
    median: float
    std_dev: float
    min: float
    max: float
    p25: float
    p75: float


@dataclass(frozen=True, slots=True)
class ContestantDraftStats:
    contestant_id: str
    name: str
    total_points: int
    avg_team_rank: float

    # fraction of all draft slots (players * picks * sims) taken by this contestant
    draft_rate: float


@dataclass(frozen=True, slots=True)
class PinnedPicks:
    """Force one player's roster to the same contestants in every simulation."""

    player_index: int
    contestant_ids: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MonteCarloConfig:
    num_simulations: int
    draft_config: DraftConfig
    scheme: PointScheme = DEFAULT_SCHEME
    pinned_picks: Optional[PinnedPicks] = None
    workers: int = 1

    def __post_init__(self) -> None:
        if self.num_simulations < 1:
            raise ValueError("MonteCarloConfig.num_simulations must be >= 1")
        if self.workers < 1:
            raise ValueError("MonteCarloConfig.workers must be >= 1")
        if self.pinned_picks is not None and not 0 <= self.pinned_picks.player_index < self.draft_config.player_count:
            raise ValueError("PinnedPicks.player_index is outside the draft's player range")


@dataclass(frozen=True, slots=True)
class MonteCarloResult:
    season_number: int
    num_simulations: int
    player_count: int
    picks_per_player: int
    contestant_stats: Tuple[ContestantDraftStats, ...]
    score_distribution: ScoreDistribution
    balance: BalanceMetrics


@dataclass(frozen=True, slots=True)
class SchemeComparison:
    label_a: str
    label_b: str
    scheme_a: PointScheme
    scheme_b: PointScheme
    result_a: MonteCarloResult
    result_b: MonteCarloResult
