"""Monte Carlo runner: many drafts of one season under one point scheme.

Each iteration drafts a league and scores it. Draft counts, finishing ranks
and team totals are accumulated across iterations and summarised into a
:class:`~survivor_sim.data.MonteCarloResult`.

With ``workers > 1`` the iterations are partitioned into chunks that run in
separate processes, each with a child generator seeded from the caller's
generator. Partial accumulators are merged in chunk order, so a given seed
and worker count always produce the same result.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from .balance import analyze_balance
from .data import (
    BalanceMetrics,
    ContestantDraftStats,
    DraftConfig,
    DraftMode,
    EventType,
    MonteCarloConfig,
    MonteCarloResult,
    ScoreDistribution,
    Season,
    SimulationResult,
)
from .draft import check_capacity, simulate_draft
from .scoring import contestant_totals, score_roster

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Accumulator:
    """Running totals for one chunk of simulations."""

    draft_counts: Dict[str, int] = field(default_factory=dict)
    rank_sums: Dict[str, int] = field(default_factory=dict)
    rank_counts: Dict[str, int] = field(default_factory=dict)
    team_totals: List[int] = field(default_factory=list)
    last_result: Optional[SimulationResult] = None

    def add(self, result: SimulationResult) -> None:
        for team in result.scores:
            rank = result.rank_of(team.player_index)
            self.team_totals.append(team.total_score)
            for c in team.contestants:
                cid = c.contestant_id
                self.draft_counts[cid] = self.draft_counts.get(cid, 0) + 1
                self.rank_sums[cid] = self.rank_sums.get(cid, 0) + rank
                self.rank_counts[cid] = self.rank_counts.get(cid, 0) + 1
        self.last_result = result

    def merge(self, other: "_Accumulator") -> None:
        for cid, n in other.draft_counts.items():
            self.draft_counts[cid] = self.draft_counts.get(cid, 0) + n
        for cid, n in other.rank_sums.items():
            self.rank_sums[cid] = self.rank_sums.get(cid, 0) + n
        for cid, n in other.rank_counts.items():
            self.rank_counts[cid] = self.rank_counts.get(cid, 0) + n
        self.team_totals.extend(other.team_totals)
        if other.last_result is not None:
            self.last_result = other.last_result


def _effective_draft_config(config: MonteCarloConfig) -> DraftConfig:
    pinned = config.pinned_picks
    if pinned is None:
        return config.draft_config
    return replace(
        config.draft_config,
        mode=DraftMode.HYBRID,
        manual_picks={pinned.player_index: list(pinned.contestant_ids)},
    )


def _run_chunk(
    season: Season,
    config: MonteCarloConfig,
    num_simulations: int,
    rng: np.random.Generator | int,
) -> _Accumulator:
    # Worker processes receive an integer seed.
    if not isinstance(rng, np.random.Generator):
        rng = np.random.default_rng(rng)

    draft_config = _effective_draft_config(config)
    acc = _Accumulator()
    for _ in range(num_simulations):
        draft = simulate_draft(season, draft_config, config.scheme, rng=rng)
        acc.add(score_roster(season, draft, config.scheme))
    return acc


def _chunk_sizes(total: int, chunks: int) -> List[int]:
    base, extra = divmod(total, chunks)
    return [base + 1 if i < extra else base for i in range(chunks)]


def score_distribution(values: Sequence[float]) -> ScoreDistribution:
    """Summarise a pooled sample of team totals.

    Percentiles use the nearest rank at index ``floor(n * q)`` of the sorted
    sample without interpolation; the standard deviation is the population one.
    """

    arr = np.sort(np.asarray(values, dtype=float))
    n = arr.size
    if n == 0:
        raise ValueError("score_distribution requires at least one value")
    return ScoreDistribution(
        mean=round(float(arr.mean()), 2),
        median=float(arr[n // 2]),
        std_dev=round(float(arr.std()), 2),
        min=float(arr[0]),
        max=float(arr[-1]),
        p25=float(arr[int(np.floor(n * 0.25))]),
        p75=float(arr[int(np.floor(n * 0.75))]),
    )


def run_monte_carlo(
    season: Season,
    config: MonteCarloConfig,
    *,
    rng: Optional[np.random.Generator] = None,
) -> MonteCarloResult:
    """Run ``config.num_simulations`` drafts and summarise them.

    Parameters
    ----------
    season:
        Season to draft from.
    config:
        Simulation count, draft settings, point scheme, optional pinned picks
        and worker count.
    rng:
        Source of randomness. With ``workers > 1`` it only supplies the child
        seeds, so results differ from a single-process run with the same seed.

    Returns
    -------
    MonteCarloResult
        Contestant stats sorted by total points (best first), the pooled
        team-total distribution, and balance metrics of the final simulation.
    """

    rng = rng if rng is not None else np.random.default_rng()
    draft_config = config.draft_config
    check_capacity(season, draft_config)

    workers = min(config.workers, config.num_simulations)
    logger.info(
        "Running %d simulations for season %d (%d players x %d picks, %d worker(s))",
        config.num_simulations,
        season.season_number,
        draft_config.player_count,
        draft_config.picks_per_player,
        workers,
    )

    if workers == 1:
        acc = _run_chunk(season, config, config.num_simulations, rng)
    else:
        sizes = _chunk_sizes(config.num_simulations, workers)
        seeds = [int(s) for s in rng.integers(0, 2**63 - 1, size=len(sizes))]
        with ProcessPoolExecutor(max_workers=workers) as executor:
            partials = list(
                executor.map(_run_chunk, [season] * len(sizes), [config] * len(sizes), sizes, seeds)
            )
        acc = _Accumulator()
        for partial in partials:
            acc.merge(partial)

    totals = contestant_totals(season, config.scheme)
    total_slots = draft_config.player_count * draft_config.picks_per_player * config.num_simulations

    stats = []
    for c in season.contestants:
        cid = c.contestant_id
        n_ranks = acc.rank_counts.get(cid, 0)
        avg_rank = acc.rank_sums[cid] / n_ranks if n_ranks else 0.0
        stats.append(
            ContestantDraftStats(
                contestant_id=cid,
                name=c.name,
                total_points=totals[cid],
                avg_team_rank=round(avg_rank, 2),
                draft_rate=round(acc.draft_counts.get(cid, 0) / total_slots, 3),
            )
        )
    stats.sort(key=lambda s: -s.total_points)

    assert acc.last_result is not None
    return MonteCarloResult(
        season_number=season.season_number,
        num_simulations=config.num_simulations,
        player_count=draft_config.player_count,
        picks_per_player=draft_config.picks_per_player,
        contestant_stats=tuple(stats),
        score_distribution=score_distribution(acc.team_totals),
        balance=analyze_balance(season, acc.last_result, config.scheme),
    )


def average_balance_metrics(metrics: Sequence[BalanceMetrics]) -> BalanceMetrics:
    """Mean of each balance metric across several seasons.

    Event types absent from a season count as a 0 share for that season.
    """

    if not metrics:
        raise ValueError("average_balance_metrics requires at least one BalanceMetrics")

    n = len(metrics)
    contribution: Dict[EventType, float] = {}
    for m in metrics:
        for event_type, share in m.event_contribution.items():
            contribution[event_type] = contribution.get(event_type, 0.0) + share

    return BalanceMetrics(
        gini=round(float(np.mean([m.gini for m in metrics])), 4),
        spread=round(float(np.mean([m.spread for m in metrics])), 2),
        event_contribution={t: round(v / n, 4) for t, v in contribution.items()},
        winner_advantage=round(float(np.mean([m.winner_advantage for m in metrics])), 2),
        longevity_correlation=round(float(np.mean([m.longevity_correlation for m in metrics])), 4),
    )
