"""Snake draft simulation.

Players pick in snake order (round 1 forward, round 2 reversed, ...). Each
contestant may be owned by up to ``max_owners_per_contestant`` players, never
twice by the same player.

Random picks are weighted by the contestant's season value under the active
point scheme plus uniform noise, so strong contestants go early without the
draft being deterministic.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from .constants import MIN_PICK_WEIGHT, PICK_WEIGHT_NOISE, PICK_WEIGHT_OFFSET
from .data import DraftConfig, DraftMode, DraftResult, Pick, PointScheme, Season
from .exceptions import DraftCapacityError, DraftExhaustionError
from .scoring import contestant_totals

logger = logging.getLogger(__name__)


def snake_order(player_count: int, picks_per_player: int) -> List[int]:
    """Player index for every pick of the draft, in pick order."""

    forward = list(range(player_count))
    order: List[int] = []
    for round_idx in range(picks_per_player):
        order.extend(forward if round_idx % 2 == 0 else forward[::-1])
    return order


def check_capacity(season: Season, config: DraftConfig) -> None:
    """Raise :class:`DraftCapacityError` if the draft cannot possibly complete."""

    n = len(season.contestants)
    slots = n * config.max_owners_per_contestant
    if slots < config.total_picks:
        raise DraftCapacityError(
            f"Not enough draft slots: {n} contestants x {config.max_owners_per_contestant} max owners = "
            f"{slots} slots, but need {config.total_picks} picks "
            f"({config.player_count} players x {config.picks_per_player} picks)"
        )
    if config.picks_per_player > n:
        raise DraftCapacityError(
            f"Each player needs {config.picks_per_player} distinct contestants but the season only has {n}"
        )


def _weighted_pick(
    available: Sequence[str],
    values: Mapping[str, int],
    rng: np.random.Generator,
) -> str:
    base = np.array([values.get(cid, 0) for cid in available], dtype=float)
    noise = rng.uniform(-PICK_WEIGHT_NOISE, PICK_WEIGHT_NOISE, size=len(available))
    weights = np.maximum(MIN_PICK_WEIGHT, base + noise + PICK_WEIGHT_OFFSET)
    idx = rng.choice(len(available), p=weights / weights.sum())
    return available[int(idx)]


def simulate_draft(
    season: Season,
    config: DraftConfig,
    scheme: Optional[PointScheme] = None,
    *,
    rng: Optional[np.random.Generator] = None,
) -> DraftResult:
    """Run one snake draft.

    Parameters
    ----------
    season:
        Season whose contestants form the draft pool.
    config:
        Draft settings. In ``MANUAL`` mode every pick comes from
        ``config.manual_picks``; ``HYBRID`` uses manual picks where a player has
        a usable one and a weighted random pick otherwise.
    scheme:
        Point scheme used to value contestants for random picks.
    rng:
        Source of randomness; pass a seeded generator for reproducible drafts.

    Raises
    ------
    DraftCapacityError
        If the pool cannot fill every roster.
    DraftExhaustionError
        If a manual-mode player has no usable manual pick left.
    """

    check_capacity(season, config)
    rng = rng if rng is not None else np.random.default_rng()

    cap = config.max_owners_per_contestant
    manual = config.mode in (DraftMode.MANUAL, DraftMode.HYBRID)
    values = contestant_totals(season, scheme) if config.mode != DraftMode.MANUAL else {}

    roster: Dict[int, List[str]] = {i: [] for i in range(config.player_count)}
    owners: Dict[str, int] = {}
    picks: List[Pick] = []

    for pick_idx, player in enumerate(snake_order(config.player_count, config.picks_per_player)):
        team = roster[player]

        def draftable(cid: str) -> bool:
            return owners.get(cid, 0) < cap and cid not in team

        chosen: Optional[str] = None
        wanted = config.manual_picks.get(player, ()) if manual else ()
        if wanted:
            chosen = next((cid for cid in wanted if draftable(cid)), None)
            if chosen is None and config.mode == DraftMode.MANUAL:
                raise DraftExhaustionError(f"No more manual picks available for player {player}")
        elif config.mode == DraftMode.MANUAL:
            raise DraftExhaustionError(f"No manual picks specified for player {player}")

        if chosen is None:
            available = [cid for cid in season.contestant_ids if draftable(cid)]
            if not available:
                raise DraftCapacityError(f"No contestants available to draft for player {player}")
            chosen = _weighted_pick(available, values, rng)

        owners[chosen] = owners.get(chosen, 0) + 1
        team.append(chosen)
        picks.append(
            Pick(
                round_number=pick_idx // config.player_count + 1,
                pick_in_round=pick_idx % config.player_count + 1,
                player_index=player,
                contestant_id=chosen,
            )
        )

    logger.debug("Drafted %d picks for season %d", len(picks), season.season_number)
    return DraftResult(roster=roster, picks=tuple(picks))
