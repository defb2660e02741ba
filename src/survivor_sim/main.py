from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from survivor_sim.balance import analyze_balance, suggest_adjustments
from survivor_sim.data import (
    DEFAULT_SCHEME,
    AdjustmentSuggestion,
    BalanceMetrics,
    DraftConfig,
    MonteCarloConfig,
    MonteCarloResult,
    PinnedPicks,
    PointScheme,
    SchemeComparison,
    Season,
    SimulationResult,
)
from survivor_sim.draft import simulate_draft
from survivor_sim.io import SeasonLoader, fetch_raw_dataset, import_seasons, load_raw_dataset
from survivor_sim.monte_carlo import average_balance_metrics, run_monte_carlo
from survivor_sim.scoring import score_roster


def configure_logging(*, level: int = logging.INFO) -> None:
    """Configure a simple root logger that writes to stdout.

    This is safe to call multiple times.
    """

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
    else:
        root.setLevel(level)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SingleDraftResult:
    season: Season
    result: SimulationResult
    balance: BalanceMetrics


@dataclass(frozen=True, slots=True)
class BatchResult:
    results: Tuple[MonteCarloResult, ...]

    # mean balance metrics across ``results``; None for a single season
    average: Optional[BalanceMetrics]


def run_import(
    *,
    out_dir: str | Path,
    raw_dir: str | Path | None = None,
    raw_url: str | None = None,
) -> List[Path]:
    """Map a raw survivoR export into processed season files.

    Exactly one of ``raw_dir`` / ``raw_url`` must be given. A downloaded export
    is also saved next to the processed files under ``raw/``.
    """

    if (raw_dir is None) == (raw_url is None):
        raise ValueError("Provide exactly one of raw_dir or raw_url")

    if raw_url is not None:
        logger.info("Downloading raw data from %s", raw_url)
        dataset = fetch_raw_dataset(raw_url, save_dir=Path(out_dir) / "raw")
    else:
        logger.info("Reading raw data from %s", raw_dir)
        dataset = load_raw_dataset(raw_dir)

    logger.info("Writing processed seasons to %s", out_dir)
    return import_seasons(dataset, out_dir)


def run_single_draft(
    season: Season,
    config: DraftConfig,
    scheme: Optional[PointScheme] = None,
    *,
    rng: Optional[np.random.Generator] = None,
) -> SingleDraftResult:
    """Draft one league, score it and measure its balance."""

    scheme = scheme or DEFAULT_SCHEME
    logger.info(
        "Simulating %s draft for season %d: %d players x %d picks (max owners %d)",
        config.mode.value,
        season.season_number,
        config.player_count,
        config.picks_per_player,
        config.max_owners_per_contestant,
    )
    draft = simulate_draft(season, config, scheme, rng=rng)
    result = score_roster(season, draft, scheme)
    balance = analyze_balance(season, result, scheme)
    logger.info("Draft complete: gini=%.4f spread=%s", balance.gini, balance.spread)
    return SingleDraftResult(season=season, result=result, balance=balance)


def run_suggestions(
    season: Season,
    config: DraftConfig,
    scheme: Optional[PointScheme] = None,
    *,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[SingleDraftResult, List[AdjustmentSuggestion]]:
    """Draft one league and search point tweaks that would have made it more even."""

    single = run_single_draft(season, config, scheme, rng=rng)
    suggestions = suggest_adjustments(season, single.result, scheme)
    logger.info("Found %d point adjustments that lower the gini", len(suggestions))
    return single, suggestions


def run_batch(
    seasons: Sequence[Season],
    *,
    num_simulations: int,
    draft_config: DraftConfig,
    scheme: Optional[PointScheme] = None,
    pinned_picks: Optional[PinnedPicks] = None,
    workers: int = 1,
    rng: Optional[np.random.Generator] = None,
) -> BatchResult:
    """Run a Monte Carlo batch for every season in ``seasons``.

    One generator is shared across seasons, so a seed reproduces the whole
    batch.
    """

    if not seasons:
        raise ValueError("run_batch requires at least one season")

    rng = rng if rng is not None else np.random.default_rng()
    config = MonteCarloConfig(
        num_simulations=num_simulations,
        draft_config=draft_config,
        scheme=scheme or DEFAULT_SCHEME,
        pinned_picks=pinned_picks,
        workers=workers,
    )

    results = []
    for season in seasons:
        result = run_monte_carlo(season, config, rng=rng)
        logger.info("Season %d done (gini %.4f)", season.season_number, result.balance.gini)
        results.append(result)

    average = average_balance_metrics([r.balance for r in results]) if len(results) > 1 else None
    if average is not None:
        logger.info(
            "Cross-season averages: gini=%.4f spread=%.1f longevity=%.4f",
            average.gini,
            average.spread,
            average.longevity_correlation,
        )
    return BatchResult(results=tuple(results), average=average)


def compare_point_schemes(
    season: Season,
    *,
    draft_config: DraftConfig,
    scheme_a: PointScheme,
    scheme_b: PointScheme,
    num_simulations: int,
    label_a: str = "A",
    label_b: str = "B",
    workers: int = 1,
    rng: Optional[np.random.Generator] = None,
) -> SchemeComparison:
    """Run the same Monte Carlo batch under two point schemes."""

    rng = rng if rng is not None else np.random.default_rng()
    logger.info("Comparing schemes %r and %r on season %d", label_a, label_b, season.season_number)

    results = []
    for label, scheme in ((label_a, scheme_a), (label_b, scheme_b)):
        logger.info("Running scheme %r", label)
        config = MonteCarloConfig(
            num_simulations=num_simulations,
            draft_config=draft_config,
            scheme=scheme,
            workers=workers,
        )
        results.append(run_monte_carlo(season, config, rng=rng))

    return SchemeComparison(
        label_a=label_a,
        label_b=label_b,
        scheme_a=scheme_a,
        scheme_b=scheme_b,
        result_a=results[0],
        result_b=results[1],
    )


def load_seasons(loader: SeasonLoader, season: str | int) -> List[Season]:
    """Resolve a ``--season`` argument (a number or ``"all"``) to seasons."""

    if isinstance(season, str) and season.strip().lower() == "all":
        seasons = loader.load_all_seasons()
        logger.info("Loaded %d seasons", len(seasons))
        return seasons
    return [loader.load_season(int(season))]
