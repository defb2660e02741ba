"""Translate raw survivoR records into canonical :class:`~survivor_sim.data.ScoringEvent` objects.

The raw record types mirror the survivoR data export (one row per vote, per
challenge participant, per advantage movement, ...). Parsing them from JSON is
handled by :mod:`survivor_sim.io`; this module performs no I/O.

Rules implemented
-----------------
Tribal councils (votes grouped by episode + vote-event label):
- CORRECT_VOTE: the voter's target is the eliminated contestant and the vote
  was not nullified.
- ZERO_VOTES_RECEIVED: an attendee who received no non-nullified votes and
  was not eliminated.
- SURVIVED_WITH_VOTES: a contestant who received votes but was not eliminated.
- Fire-making councils (label contains "fire") skip the three rules above and
  award FIRE_MAKING_WIN to every attendee except the eliminated one.

Challenges, idols and placement are handled per record; see
:func:`map_season_events`.

CAUSED_BLINDSIDE is never produced: it needs a human judgement call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .constants import UNKNOWN_TRIBE, WINNER_RESULT
from .data import BASE_EVENT_POINTS, Contestant, EventType, ScoringEvent, Season
from .exceptions import SeasonNotFoundError

BLINDSIDE_WARNING = (
    "CAUSED_BLINDSIDE events are not included (requires subjective judgment). "
    "Simulated scores will slightly undercount."
)

FIRE_MAKING_MARKER = "fire"


# ============================================================================
# Raw record types
# ============================================================================


@dataclass(frozen=True, slots=True)
class RawVote:
    season: int
    episode: int
    castaway: str
    castaway_id: str
    vote: str = ""
    vote_id: str = ""
    voted_out: str = ""
    voted_out_id: str = ""
    nullified: bool = False
    vote_event: str = ""
    tribe_status: str = ""


@dataclass(frozen=True, slots=True)
class RawChallengeResult:
    season: int
    episode: int
    castaway: str
    castaway_id: str
    result: str
    challenge_type: str = ""
    tribe: str = ""
    won_individual_immunity: bool = False
    won_individual_reward: bool = False


@dataclass(frozen=True, slots=True)
class RawAdvantageMovement:
    season: int
    episode: int
    castaway: str
    castaway_id: str
    advantage_type: str
    event: str
    votes_nullified: int = 0

    @property
    def is_idol(self) -> bool:
        t = (self.advantage_type or "").lower()
        return "idol" in t or "hidden immunity" in t


@dataclass(frozen=True, slots=True)
class RawCastaway:
    season: int
    castaway: str
    castaway_id: str
    placement: int
    tribe: str = ""
    jury: bool = False
    finalist: bool = False
    result: str = ""

    @property
    def is_winner(self) -> bool:
        return self.result == WINNER_RESULT

    @property
    def quit(self) -> bool:
        return "quit" in (self.result or "").lower()


@dataclass(frozen=True, slots=True)
class RawBootMapping:
    season: int
    episode: int
    castaway: str
    castaway_id: str
    boot_order: int = 0


@dataclass(frozen=True, slots=True)
class RawSeasonSummary:
    season: int
    season_name: str
    num_castaways: int
    num_episodes: int


@dataclass(frozen=True, slots=True)
class RawDataset:
    """Every raw table of a survivoR export, across all seasons."""

    vote_history: Tuple[RawVote, ...] = ()
    challenge_results: Tuple[RawChallengeResult, ...] = ()
    advantage_movement: Tuple[RawAdvantageMovement, ...] = ()
    castaways: Tuple[RawCastaway, ...] = ()
    boot_mapping: Tuple[RawBootMapping, ...] = ()
    season_summary: Tuple[RawSeasonSummary, ...] = ()

    @property
    def season_numbers(self) -> List[int]:
        return sorted({s.season for s in self.season_summary})


@dataclass(frozen=True, slots=True)
class MapperInput:
    season_number: int
    vote_history: Sequence[RawVote] = ()
    challenge_results: Sequence[RawChallengeResult] = ()
    advantage_movement: Sequence[RawAdvantageMovement] = ()
    castaways: Sequence[RawCastaway] = ()
    boot_mapping: Sequence[RawBootMapping] = ()

    @classmethod
    def from_dataset(cls, dataset: RawDataset, season_number: int) -> "MapperInput":
        return cls(
            season_number=season_number,
            vote_history=dataset.vote_history,
            challenge_results=dataset.challenge_results,
            advantage_movement=dataset.advantage_movement,
            castaways=dataset.castaways,
            boot_mapping=dataset.boot_mapping,
        )


@dataclass(slots=True)
class MapperOutput:
    events: List[ScoringEvent] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


# ============================================================================
# Helpers
# ============================================================================


def _event(event_type: EventType, contestant_id: str, episode: int, description: str) -> ScoringEvent:
    return ScoringEvent(
        event_type=event_type,
        contestant_id=contestant_id,
        episode=episode,
        base_points=BASE_EVENT_POINTS[event_type],
        description=description,
    )


def is_fire_making(vote_event: Optional[str]) -> bool:
    """Whether a vote-event label marks a fire-making tiebreak.

    This is a substring heuristic on free text; labels that describe fire
    without the word (or use it for something else) are misclassified.
    """

    return FIRE_MAKING_MARKER in (vote_event or "").lower()


def _group_tribal_councils(votes: Iterable[RawVote]) -> Dict[Tuple[int, str], List[RawVote]]:
    councils: Dict[Tuple[int, str], List[RawVote]] = {}
    for v in votes:
        councils.setdefault((v.episode, v.vote_event or ""), []).append(v)
    return councils


def _map_tribal_council(votes: Sequence[RawVote]) -> List[ScoringEvent]:
    events: List[ScoringEvent] = []
    episode = votes[0].episode
    voted_out_id = votes[0].voted_out_id

    # dict keeps first-seen order
    attendees: Dict[str, None] = dict.fromkeys(v.castaway_id for v in votes)

    if is_fire_making(votes[0].vote_event):
        for pid in attendees:
            if pid != voted_out_id:
                events.append(_event(EventType.FIRE_MAKING_WIN, pid, episode, "Won fire-making challenge"))
        return events

    votes_received: Dict[str, int] = {}
    for v in votes:
        if v.vote_id and not v.nullified:
            votes_received[v.vote_id] = votes_received.get(v.vote_id, 0) + 1

    for v in votes:
        if v.vote_id and v.vote_id == voted_out_id and not v.nullified:
            events.append(_event(EventType.CORRECT_VOTE, v.castaway_id, episode, f"Voted correctly for {v.voted_out}"))

    for pid in attendees:
        if pid == voted_out_id:
            continue
        if votes_received.get(pid, 0) == 0:
            events.append(
                _event(EventType.ZERO_VOTES_RECEIVED, pid, episode, "Received zero votes at tribal council")
            )

    for target_id, count in votes_received.items():
        if target_id != voted_out_id and count > 0:
            events.append(
                _event(
                    EventType.SURVIVED_WITH_VOTES,
                    target_id,
                    episode,
                    f"Survived tribal despite receiving {count} vote(s)",
                )
            )

    return events


def _map_challenge(c: RawChallengeResult) -> Optional[ScoringEvent]:
    if c.result != "Won":
        return None
    if c.won_individual_immunity:
        return _event(EventType.INDIVIDUAL_IMMUNITY_WIN, c.castaway_id, c.episode, "Won individual immunity")
    if c.won_individual_reward:
        return _event(EventType.REWARD_CHALLENGE_WIN, c.castaway_id, c.episode, "Won individual reward challenge")
    return _event(EventType.TEAM_CHALLENGE_WIN, c.castaway_id, c.episode, "Won team/tribal challenge")


def _map_idols(movements: Sequence[RawAdvantageMovement]) -> List[ScoringEvent]:
    # One logical action is repeated once per affected player in the raw data.
    events: List[ScoringEvent] = []
    seen: Set[Tuple[str, int, str]] = set()
    for a in movements:
        if not a.is_idol:
            continue
        key = (a.castaway_id, a.episode, a.event)
        if key in seen:
            continue
        seen.add(key)

        if a.event == "Found":
            events.append(_event(EventType.IDOL_FIND, a.castaway_id, a.episode, "Found a hidden immunity idol"))
        elif a.event == "Played" and (a.votes_nullified or 0) > 0:
            events.append(
                _event(
                    EventType.IDOL_PLAY_SUCCESS,
                    a.castaway_id,
                    a.episode,
                    f"Successfully played idol, nullified {a.votes_nullified} vote(s)",
                )
            )
    return events


def _idol_holders_at_elimination(movements: Sequence[RawAdvantageMovement]) -> Set[str]:
    found: Set[str] = set()
    relinquished: Set[str] = set()
    for a in movements:
        if not a.is_idol:
            continue
        if a.event == "Found":
            found.add(a.castaway_id)
        elif a.event in ("Played", "Transferred"):
            relinquished.add(a.castaway_id)
    return found - relinquished


def _season_castaways(castaways: Iterable[RawCastaway], season: int) -> List[RawCastaway]:
    # A castaway who re-entered the game has one row per stint; keep the best finish.
    best: Dict[str, RawCastaway] = {}
    for c in castaways:
        if c.season != season:
            continue
        prev = best.get(c.castaway_id)
        if prev is None or c.placement < prev.placement:
            best[c.castaway_id] = c
    return list(best.values())


def _map_placement(
    c: RawCastaway,
    *,
    last_episode: int,
    held_idol: bool,
) -> List[ScoringEvent]:
    events: List[ScoringEvent] = []
    cid = c.castaway_id
    if c.is_winner:
        events.append(_event(EventType.WINNER, cid, last_episode, "Won the game"))
    if c.finalist:
        events.append(_event(EventType.FINALIST, cid, last_episode, "Made it to Final Tribal Council"))
    if c.jury:
        events.append(_event(EventType.MADE_JURY, cid, last_episode, "Made the jury"))
    if c.quit:
        events.append(_event(EventType.QUIT, cid, last_episode, "Quit the game"))
    if held_idol and not c.is_winner and not c.finalist:
        events.append(_event(EventType.VOTED_OUT_WITH_IDOL, cid, last_episode, "Voted out while holding an idol"))
    return events


# ============================================================================
# Public API
# ============================================================================


def map_season_events(mapper_input: MapperInput) -> MapperOutput:
    """Map one season's raw records to scoring events.

    Every raw table in ``mapper_input`` may hold rows from several seasons;
    only rows for ``mapper_input.season_number`` are used. Event point values
    are the base values; re-pricing happens at scoring time.
    """

    season = mapper_input.season_number
    out = MapperOutput()

    eliminated_in_episode: Dict[str, int] = {
        bm.castaway_id: bm.episode for bm in mapper_input.boot_mapping if bm.season == season
    }
    advantages = [a for a in mapper_input.advantage_movement if a.season == season]

    votes = [v for v in mapper_input.vote_history if v.season == season]
    for council_votes in _group_tribal_councils(votes).values():
        out.events.extend(_map_tribal_council(council_votes))

    for c in mapper_input.challenge_results:
        if c.season != season:
            continue
        event = _map_challenge(c)
        if event is not None:
            out.events.append(event)

    out.events.extend(_map_idols(advantages))

    holders = _idol_holders_at_elimination(advantages)
    for c in _season_castaways(mapper_input.castaways, season):
        out.events.extend(
            _map_placement(
                c,
                last_episode=eliminated_in_episode.get(c.castaway_id, 0),
                held_idol=c.castaway_id in holders,
            )
        )

    out.warnings.append(BLINDSIDE_WARNING)
    return out


def build_season(dataset: RawDataset, season_number: int) -> tuple[Season, List[str]]:
    """Assemble a :class:`~survivor_sim.data.Season` from a raw export.

    Raises
    ------
    SeasonNotFoundError
        If the export has no summary row or no castaways for the season.
    """

    summary = next((s for s in dataset.season_summary if s.season == season_number), None)
    if summary is None:
        raise SeasonNotFoundError(season_number, "no season_summary row")

    raw_castaways = _season_castaways(dataset.castaways, season_number)
    if not raw_castaways:
        raise SeasonNotFoundError(season_number, "no castaways")

    mapped = map_season_events(MapperInput.from_dataset(dataset, season_number))

    contestants = tuple(
        Contestant(
            contestant_id=c.castaway_id,
            name=c.castaway,
            tribe=c.tribe or UNKNOWN_TRIBE,
            placement=c.placement,
            made_jury=bool(c.jury),
            made_final=bool(c.finalist),
            is_winner=c.is_winner,
        )
        for c in raw_castaways
    )

    season = Season(
        season_number=season_number,
        name=summary.season_name,
        contestant_count=summary.num_castaways,
        episode_count=summary.num_episodes,
        contestants=contestants,
        events=tuple(mapped.events),
    )
    return season, mapped.warnings
