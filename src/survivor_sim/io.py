"""I/O utilities for building the simulator's domain objects.

This module owns:
- file format knowledge (raw survivoR JSON exports, processed season JSON,
  config JSON, CLI strings)
- downloading raw exports over HTTP
- season loaders used by the CLI

Keeping this separate from :mod:`survivor_sim.data` keeps the engine free of
any file or network access.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, TypeVar

import requests

from .constants import (
    DEFAULT_MAX_OWNERS_PER_CONTESTANT,
    HTTP_TIMEOUT_SECONDS,
    RAW_ADVANTAGE_MOVEMENT_FILE,
    RAW_BOOT_MAPPING_FILE,
    RAW_CASTAWAYS_FILE,
    RAW_CHALLENGE_RESULTS_FILE,
    RAW_SEASON_SUMMARY_FILE,
    RAW_VOTE_HISTORY_FILE,
    SEASON_FILE_PREFIX,
    SEASON_FILE_SUFFIX,
    UNKNOWN_TRIBE,
)
from .data import (
    Contestant,
    DraftConfig,
    DraftMode,
    EventType,
    ScoringEvent,
    Season,
    parse_event_type,
)
from .exceptions import SeasonNotFoundError
from .mapper import (
    RawAdvantageMovement,
    RawBootMapping,
    RawCastaway,
    RawChallengeResult,
    RawDataset,
    RawSeasonSummary,
    RawVote,
    build_season,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================================
# Raw survivoR export
# ============================================================================


def _str(rec: Mapping[str, Any], key: str) -> str:
    value = rec.get(key)
    return "" if value is None else str(value)


def _int(rec: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = rec.get(key)
    if value is None or value == "":
        return default
    return int(value)


def _bool(rec: Mapping[str, Any], key: str) -> bool:
    """Exports use true/false, 0/1 and occasionally "TRUE"/"FALSE"."""

    value = rec.get(key)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def parse_raw_vote(rec: Mapping[str, Any]) -> RawVote:
    return RawVote(
        season=int(rec["season"]),
        episode=_int(rec, "episode"),
        castaway=_str(rec, "castaway"),
        castaway_id=_str(rec, "castaway_id"),
        vote=_str(rec, "vote"),
        vote_id=_str(rec, "vote_id"),
        voted_out=_str(rec, "voted_out"),
        voted_out_id=_str(rec, "voted_out_id"),
        nullified=_bool(rec, "nullified"),
        vote_event=_str(rec, "vote_event"),
        tribe_status=_str(rec, "tribe_status"),
    )


def parse_raw_challenge_result(rec: Mapping[str, Any]) -> RawChallengeResult:
    return RawChallengeResult(
        season=int(rec["season"]),
        episode=_int(rec, "episode"),
        castaway=_str(rec, "castaway"),
        castaway_id=_str(rec, "castaway_id"),
        result=_str(rec, "result"),
        challenge_type=_str(rec, "challenge_type"),
        tribe=_str(rec, "tribe"),
        won_individual_immunity=_bool(rec, "won_individual_immunity"),
        won_individual_reward=_bool(rec, "won_individual_reward"),
    )


def parse_raw_advantage_movement(rec: Mapping[str, Any]) -> RawAdvantageMovement:
    return RawAdvantageMovement(
        season=int(rec["season"]),
        episode=_int(rec, "episode"),
        castaway=_str(rec, "castaway"),
        castaway_id=_str(rec, "castaway_id"),
        advantage_type=_str(rec, "advantage_type"),
        event=_str(rec, "event"),
        votes_nullified=_int(rec, "votes_nullified"),
    )


def parse_raw_castaway(rec: Mapping[str, Any]) -> RawCastaway:
    return RawCastaway(
        season=int(rec["season"]),
        castaway=_str(rec, "castaway"),
        castaway_id=_str(rec, "castaway_id"),
        placement=int(rec["placement"]),
        tribe=_str(rec, "tribe"),
        jury=_bool(rec, "jury"),
        finalist=_bool(rec, "finalist"),
        result=_str(rec, "result"),
    )


def parse_raw_boot_mapping(rec: Mapping[str, Any]) -> RawBootMapping:
    return RawBootMapping(
        season=int(rec["season"]),
        episode=_int(rec, "episode"),
        castaway=_str(rec, "castaway"),
        castaway_id=_str(rec, "castaway_id"),
        boot_order=_int(rec, "boot_order"),
    )


def parse_raw_season_summary(rec: Mapping[str, Any]) -> RawSeasonSummary:
    return RawSeasonSummary(
        season=int(rec["season"]),
        season_name=_str(rec, "season_name"),
        num_castaways=_int(rec, "num_castaways"),
        num_episodes=_int(rec, "num_episodes"),
    )


def _parse_records(
    raw: Any,
    parse: Callable[[Mapping[str, Any]], T],
    *,
    source: str,
    required: Sequence[str] = ("season", "castaway_id"),
) -> tuple[T, ...]:
    if not isinstance(raw, list):
        raise ValueError(f"{source} must be a JSON list")

    out: List[T] = []
    skipped = 0
    for rec in raw:
        if not isinstance(rec, dict):
            continue
        # Rows without an id (e.g. votes at councils with no elimination) carry no usable data.
        if any(rec.get(key) in (None, "") for key in required):
            skipped += 1
            continue
        out.append(parse(rec))
    if skipped:
        logger.debug("Skipped %d incomplete rows in %s", skipped, source)
    return tuple(out)


def raw_dataset_from_json(tables: Mapping[str, Any]) -> RawDataset:
    """Build a :class:`RawDataset` from already-decoded JSON tables keyed by file name."""

    def table(name: str) -> Any:
        try:
            return tables[name]
        except KeyError as e:
            raise ValueError(f"Raw dataset is missing {name}") from e

    return RawDataset(
        vote_history=_parse_records(table(RAW_VOTE_HISTORY_FILE), parse_raw_vote, source=RAW_VOTE_HISTORY_FILE),
        challenge_results=_parse_records(
            table(RAW_CHALLENGE_RESULTS_FILE), parse_raw_challenge_result, source=RAW_CHALLENGE_RESULTS_FILE
        ),
        advantage_movement=_parse_records(
            table(RAW_ADVANTAGE_MOVEMENT_FILE), parse_raw_advantage_movement, source=RAW_ADVANTAGE_MOVEMENT_FILE
        ),
        castaways=_parse_records(
            table(RAW_CASTAWAYS_FILE),
            parse_raw_castaway,
            source=RAW_CASTAWAYS_FILE,
            required=("season", "castaway_id", "placement"),
        ),
        boot_mapping=_parse_records(table(RAW_BOOT_MAPPING_FILE), parse_raw_boot_mapping, source=RAW_BOOT_MAPPING_FILE),
        season_summary=_parse_records(
            table(RAW_SEASON_SUMMARY_FILE),
            parse_raw_season_summary,
            source=RAW_SEASON_SUMMARY_FILE,
            required=("season",),
        ),
    )


RAW_FILES: tuple[str, ...] = (
    RAW_VOTE_HISTORY_FILE,
    RAW_CHALLENGE_RESULTS_FILE,
    RAW_ADVANTAGE_MOVEMENT_FILE,
    RAW_CASTAWAYS_FILE,
    RAW_BOOT_MAPPING_FILE,
    RAW_SEASON_SUMMARY_FILE,
)


def load_raw_dataset(raw_dir: str | Path) -> RawDataset:
    """Load a survivoR export from a directory of JSON files.

    Raises
    ------
    FileNotFoundError
        If any of the six export files is missing.
    """

    raw_dir = Path(raw_dir)
    tables: Dict[str, Any] = {}
    for name in RAW_FILES:
        path = raw_dir / name
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}. Export the survivoR data first.")
        tables[name] = json.loads(path.read_text(encoding="utf-8"))
    logger.info("Loaded raw dataset from %s", raw_dir)
    return raw_dataset_from_json(tables)


def fetch_raw_dataset(
    base_url: str,
    *,
    save_dir: str | Path | None = None,
    session: Optional[requests.Session] = None,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> RawDataset:
    """Download a survivoR export (the six JSON files) from ``base_url``.

    Parameters
    ----------
    save_dir:
        If provided, each downloaded table is also written there so later runs
        can use :func:`load_raw_dataset`.
    session:
        Optional :class:`requests.Session` (connection reuse, auth, tests).

    Raises
    ------
    requests.RequestException
        If any request fails.
    """

    get = session.get if session is not None else requests.get
    base = base_url.rstrip("/")

    tables: Dict[str, Any] = {}
    for name in RAW_FILES:
        url = f"{base}/{name}"
        logger.info("Fetching %s", url)
        response = get(url, timeout=timeout)
        response.raise_for_status()
        tables[name] = response.json()

    if save_dir is not None:
        out = Path(save_dir)
        out.mkdir(parents=True, exist_ok=True)
        for name, table in tables.items():
            (out / name).write_text(json.dumps(table), encoding="utf-8")
        logger.info("Saved raw dataset to %s", out)

    return raw_dataset_from_json(tables)


# ============================================================================
# Processed season JSON
# ============================================================================


def season_file_path(data_dir: str | Path, season_number: int) -> Path:
    return Path(data_dir) / f"{SEASON_FILE_PREFIX}{season_number}{SEASON_FILE_SUFFIX}"


def season_to_json_dict(season: Season) -> Dict[str, Any]:
    return {
        "season": season.season_number,
        "name": season.name,
        "num_castaways": season.contestant_count,
        "num_episodes": season.episode_count,
        "castaways": [
            {
                "id": c.contestant_id,
                "name": c.name,
                "tribe": c.tribe,
                "placement": c.placement,
                "is_jury": c.made_jury,
                "is_finalist": c.made_final,
                "is_winner": c.is_winner,
            }
            for c in season.contestants
        ],
        "events": [
            {
                "type": e.event_type.value,
                "castaway_id": e.contestant_id,
                "episode": e.episode,
                "points": e.base_points,
                "description": e.description,
            }
            for e in season.events
        ],
    }


def season_from_json_dict(raw: Mapping[str, Any]) -> Season:
    """Inverse of :func:`season_to_json_dict`."""

    contestants = tuple(
        Contestant(
            contestant_id=str(c["id"]),
            name=str(c.get("name", c["id"])),
            tribe=str(c.get("tribe") or UNKNOWN_TRIBE),
            placement=int(c["placement"]),
            made_jury=bool(c.get("is_jury", False)),
            made_final=bool(c.get("is_finalist", False)),
            is_winner=bool(c.get("is_winner", False)),
        )
        for c in raw.get("castaways", [])
    )
    events = tuple(
        ScoringEvent(
            event_type=parse_event_type(str(e["type"])),
            contestant_id=str(e["castaway_id"]),
            episode=int(e.get("episode", 0)),
            base_points=int(e.get("points", 0)),
            description=str(e.get("description", "")),
        )
        for e in raw.get("events", [])
    )
    return Season(
        season_number=int(raw["season"]),
        name=str(raw.get("name", "")),
        contestant_count=int(raw.get("num_castaways", len(contestants))),
        episode_count=int(raw.get("num_episodes", 0)),
        contestants=contestants,
        events=events,
    )


def write_season_json(season: Season, data_dir: str | Path) -> Path:
    path = season_file_path(data_dir, season.season_number)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(season_to_json_dict(season), indent=2), encoding="utf-8")
    return path


def load_season_json(path: str | Path) -> Season:
    path = Path(path)
    return season_from_json_dict(json.loads(path.read_text(encoding="utf-8")))


def import_seasons(dataset: RawDataset, out_dir: str | Path) -> List[Path]:
    """Map every season in ``dataset`` and write one ``season-<n>.json`` per season.

    Seasons without castaways are skipped with a warning. Mapper warnings are
    logged once per season.
    """

    written: List[Path] = []
    total_events = 0
    for season_number in dataset.season_numbers:
        try:
            season, warnings = build_season(dataset, season_number)
        except SeasonNotFoundError as e:
            logger.warning("%s, skipping", e)
            continue

        path = write_season_json(season, out_dir)
        written.append(path)
        total_events += len(season.events)
        logger.info(
            "Season %d (%s): %d castaways, %d events",
            season_number,
            season.name,
            len(season.contestants),
            len(season.events),
        )
        for w in warnings:
            logger.info("Season %d note: %s", season_number, w)

    logger.info("Imported %d seasons, %d total events mapped", len(written), total_events)
    return written


# ============================================================================
# Season loaders
# ============================================================================


class SeasonLoader(Protocol):
    def available_seasons(self) -> List[int]:
        ...

    def load_season(self, season_number: int) -> Season:
        ...

    def load_all_seasons(self) -> List[Season]:
        ...


class DirectorySeasonLoader:
    """Load processed ``season-<n>.json`` files from a directory.

    Each season is parsed once per loader instance.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self._cache: Dict[int, Season] = {}

    def available_seasons(self) -> List[int]:
        if not self.data_dir.is_dir():
            return []
        numbers = []
        for path in self.data_dir.glob(f"{SEASON_FILE_PREFIX}*{SEASON_FILE_SUFFIX}"):
            stem = path.name[len(SEASON_FILE_PREFIX) : -len(SEASON_FILE_SUFFIX)]
            if stem.isdigit():
                numbers.append(int(stem))
        return sorted(numbers)

    def load_season(self, season_number: int) -> Season:
        if season_number in self._cache:
            return self._cache[season_number]

        path = season_file_path(self.data_dir, season_number)
        if not path.exists():
            raise SeasonNotFoundError(season_number, f"no file at {path}; run the import command first")

        season = load_season_json(path)
        self._cache[season_number] = season
        logger.debug("Loaded season %d from %s", season_number, path)
        return season

    def load_all_seasons(self) -> List[Season]:
        numbers = self.available_seasons()
        if not numbers:
            raise FileNotFoundError(f"No season files found in {self.data_dir}; run the import command first")
        return [self.load_season(n) for n in numbers]

    def clear_cache(self) -> None:
        self._cache.clear()


class InMemorySeasonLoader:
    """Serve already-built seasons (tests, notebooks)."""

    def __init__(self, seasons: Sequence[Season]) -> None:
        self._seasons: Dict[int, Season] = {s.season_number: s for s in seasons}

    def available_seasons(self) -> List[int]:
        return sorted(self._seasons)

    def load_season(self, season_number: int) -> Season:
        try:
            return self._seasons[season_number]
        except KeyError:
            raise SeasonNotFoundError(season_number) from None

    def load_all_seasons(self) -> List[Season]:
        return [self._seasons[n] for n in self.available_seasons()]


# ============================================================================
# Config files and CLI strings
# ============================================================================


def _parse_manual_picks_obj(obj: Mapping[str, Any]) -> Dict[int, List[str]]:
    return {int(k): [str(cid) for cid in v] for k, v in obj.items()}


def load_draft_config_from_json(path: str | Path) -> DraftConfig:
    """Load a :class:`~survivor_sim.data.DraftConfig` from JSON.

    Expected format::

        {"player_count": 8, "picks_per_player": 2, "max_owners_per_contestant": 2,
         "mode": "hybrid", "manual_picks": {"0": ["US0701", "US0705"]}}
    """

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Draft config must be a JSON object")

    mode_str = str(raw.get("mode", DraftMode.RANDOM.value)).strip().lower()
    try:
        mode = DraftMode(mode_str)
    except ValueError as e:
        raise ValueError(f"Unknown draft mode: {mode_str!r}") from e

    return DraftConfig(
        player_count=int(raw["player_count"]),
        picks_per_player=int(raw["picks_per_player"]),
        max_owners_per_contestant=int(raw.get("max_owners_per_contestant", DEFAULT_MAX_OWNERS_PER_CONTESTANT)),
        mode=mode,
        manual_picks=_parse_manual_picks_obj(raw.get("manual_picks", {}) or {}),
    )


def load_point_overrides_from_json(path: str | Path) -> Dict[EventType, int]:
    """Load a partial ``{"EVENT_TYPE": points}`` mapping."""

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Point overrides must be a JSON object")
    return {parse_event_type(k): int(v) for k, v in raw.items()}


def parse_point_overrides(value: str) -> Dict[EventType, int]:
    """Parse ``"WINNER:30,FINALIST:15"`` into a partial override mapping."""

    overrides: Dict[EventType, int] = {}
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, points = part.partition(":")
        if not sep or not points.strip():
            raise ValueError(f"Invalid point override {part!r}; expected TYPE:POINTS")
        try:
            overrides[parse_event_type(name)] = int(points.strip())
        except ValueError as e:
            raise ValueError(f"Invalid point override {part!r}: {e}") from e
    return overrides


def parse_manual_picks(value: str) -> Dict[int, List[str]]:
    """Parse ``"0:US0701,US0705;1:US0703"`` into player index -> contestant ids."""

    picks: Dict[int, List[str]] = {}
    for part in value.split(";"):
        part = part.strip()
        if not part:
            continue
        idx, sep, ids = part.partition(":")
        if not sep or not idx.strip().isdigit():
            raise ValueError(f"Invalid manual picks {part!r}; expected INDEX:ID,ID")
        picks[int(idx)] = [cid.strip() for cid in ids.split(",") if cid.strip()]
    return picks
