"""Command-line entry point for :mod:`survivor_sim`.

Example
-------
survivor-sim import --raw-dir ./data/survivor-raw
survivor-sim batch --season 46 --sims 1000 --seed 7
survivor-sim compare --season 46 --b "WINNER:30,FINALIST:15"
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np

from .constants import (
    DEFAULT_COMPARE_SIMULATIONS,
    DEFAULT_DATA_DIR,
    DEFAULT_LEADERBOARD_SIZE,
    DEFAULT_MAX_OWNERS_PER_CONTESTANT,
    DEFAULT_NUM_SIMULATIONS,
    DEFAULT_PICKS_PER_PLAYER,
    DEFAULT_PLAYER_COUNT,
    DEFAULT_SEASON,
)
from .data import DraftConfig, DraftMode, EventType, PinnedPicks, PointScheme
from .exceptions import SimulationError
from .explore import aggregate_season_scoring, build_cross_season_leaderboard, build_event_trend_data
from .io import (
    DirectorySeasonLoader,
    load_draft_config_from_json,
    load_point_overrides_from_json,
    parse_manual_picks,
    parse_point_overrides,
)
from .main import (
    compare_point_schemes,
    configure_logging,
    load_seasons,
    run_batch,
    run_import,
    run_single_draft,
    run_suggestions,
)
from .report import (
    dumps_pretty,
    render_batch_summary,
    render_comparison,
    render_event_trends,
    render_leaderboard,
    render_monte_carlo,
    render_preview,
    render_season_scoring,
    render_simulation,
    render_suggestions,
)
from .scoring import score_all_contestants

logger = logging.getLogger(__name__)


def _add_scheme_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--override",
        default="",
        help='Point overrides, e.g. "WINNER:30,FINALIST:15" (applied after --overrides-json)',
    )
    parser.add_argument(
        "--overrides-json",
        type=Path,
        default=None,
        help='JSON file of point overrides, e.g. {"WINNER": 30}',
    )


def _add_draft_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--players", type=int, default=DEFAULT_PLAYER_COUNT, help="Number of fantasy players")
    parser.add_argument(
        "--picks-per-player", type=int, default=DEFAULT_PICKS_PER_PLAYER, help="Contestants drafted per player"
    )
    parser.add_argument(
        "--max-owners",
        type=int,
        default=DEFAULT_MAX_OWNERS_PER_CONTESTANT,
        help="Max players that may own the same contestant",
    )
    parser.add_argument(
        "--draft-config",
        type=Path,
        default=None,
        help="JSON draft config; replaces --players/--picks-per-player/--max-owners/--picks",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-sim", description="Survivor fantasy draft balance simulator")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path(DEFAULT_DATA_DIR),
        help=f"Directory of processed season-<n>.json files (default: ./{DEFAULT_DATA_DIR})",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON instead of tables")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Map a raw survivoR export into season files")
    src = p_import.add_mutually_exclusive_group(required=True)
    src.add_argument("--raw-dir", type=Path, help="Directory holding the raw export JSON files")
    src.add_argument("--raw-url", help="Base URL serving the raw export JSON files")

    p_preview = sub.add_parser("preview", help="Contestant point totals for one season")
    p_preview.add_argument("--season", type=int, default=DEFAULT_SEASON)
    _add_scheme_args(p_preview)

    p_sim = sub.add_parser("simulate", help="Run one draft and score it")
    p_sim.add_argument("--season", type=int, default=DEFAULT_SEASON)
    p_sim.add_argument("--picks", default="", help='Manual picks, e.g. "0:US0701,US0705;1:US0703" (hybrid draft)')
    _add_draft_args(p_sim)
    _add_scheme_args(p_sim)

    p_batch = sub.add_parser("batch", help="Monte Carlo balance analysis")
    p_batch.add_argument("--season", default=str(DEFAULT_SEASON), help='Season number or "all"')
    p_batch.add_argument("--sims", type=int, default=DEFAULT_NUM_SIMULATIONS)
    p_batch.add_argument("--workers", type=int, default=1, help="Worker processes (default: 1)")
    p_batch.add_argument(
        "--pin",
        default="",
        help='Pin one player\'s roster in every run, e.g. "0:US0701,US0705"',
    )
    _add_draft_args(p_batch)
    _add_scheme_args(p_batch)

    p_cmp = sub.add_parser("compare", help="Compare two point schemes with Monte Carlo")
    p_cmp.add_argument("--season", type=int, default=DEFAULT_SEASON)
    p_cmp.add_argument("--sims", type=int, default=DEFAULT_COMPARE_SIMULATIONS)
    p_cmp.add_argument("--workers", type=int, default=1)
    p_cmp.add_argument("--a", dest="scheme_a", default="default", help='Scheme A overrides or "default"')
    p_cmp.add_argument("--b", dest="scheme_b", required=True, help='Scheme B overrides, e.g. "WINNER:30"')
    _add_draft_args(p_cmp)

    p_suggest = sub.add_parser("suggest", help="Suggest point tweaks that even out one draft")
    p_suggest.add_argument("--season", type=int, default=DEFAULT_SEASON)
    _add_draft_args(p_suggest)
    _add_scheme_args(p_suggest)

    p_explore = sub.add_parser("explore", help="Season scoring, leaderboard and event trends")
    p_explore.add_argument("--season", default="all", help='Season number or "all" (default: all)')
    p_explore.add_argument("--top", type=int, default=DEFAULT_LEADERBOARD_SIZE, help="Leaderboard size")
    _add_scheme_args(p_explore)

    return parser


def _scheme_from_args(args: argparse.Namespace) -> PointScheme:
    overrides: Dict[EventType, int] = {}
    if getattr(args, "overrides_json", None) is not None:
        overrides.update(load_point_overrides_from_json(args.overrides_json))
    overrides.update(parse_point_overrides(getattr(args, "override", "") or ""))
    return PointScheme.from_overrides(overrides)


def _draft_config_from_args(args: argparse.Namespace, *, manual_picks: str = "") -> DraftConfig:
    if args.draft_config is not None:
        return load_draft_config_from_json(args.draft_config)
    picks = parse_manual_picks(manual_picks)
    return DraftConfig(
        player_count=args.players,
        picks_per_player=args.picks_per_player,
        max_owners_per_contestant=args.max_owners,
        mode=DraftMode.HYBRID if picks else DraftMode.RANDOM,
        manual_picks=picks,
    )


def _pinned_from_args(value: str) -> PinnedPicks | None:
    picks = parse_manual_picks(value)
    if not picks:
        return None
    if len(picks) > 1:
        raise ValueError("--pin accepts a single player's picks")
    idx, ids = next(iter(picks.items()))
    return PinnedPicks(player_index=idx, contestant_ids=tuple(ids))


def _emit(args: argparse.Namespace, data: object, text: str) -> None:
    print(dumps_pretty(data) if args.json else text)


def _run(args: argparse.Namespace) -> int:
    if args.command == "import":
        written = run_import(out_dir=args.data_dir, raw_dir=args.raw_dir, raw_url=args.raw_url)
        print(f"Wrote {len(written)} season files to {args.data_dir}")
        return 0

    loader = DirectorySeasonLoader(args.data_dir)
    rng = np.random.default_rng(getattr(args, "seed", None))

    if args.command == "preview":
        season = loader.load_season(args.season)
        scores = score_all_contestants(season, _scheme_from_args(args))
        _emit(args, scores, render_preview(season, scores))
        return 0

    if args.command == "simulate":
        season = loader.load_season(args.season)
        single = run_single_draft(
            season,
            _draft_config_from_args(args, manual_picks=args.picks),
            _scheme_from_args(args),
            rng=rng,
        )
        _emit(args, single, render_simulation(season, single.result, single.balance))
        return 0

    if args.command == "batch":
        seasons = load_seasons(loader, args.season)
        batch = run_batch(
            seasons,
            num_simulations=args.sims,
            draft_config=_draft_config_from_args(args),
            scheme=_scheme_from_args(args),
            pinned_picks=_pinned_from_args(args.pin),
            workers=args.workers,
            rng=rng,
        )
        text: List[str] = [render_monte_carlo(r) for r in batch.results]
        if batch.average is not None:
            text.append(render_batch_summary(batch.average))
        _emit(args, batch, "\n\n".join(text))
        return 0

    if args.command == "compare":
        season = loader.load_season(args.season)
        scheme_a = (
            PointScheme() if args.scheme_a == "default" else PointScheme.from_overrides(parse_point_overrides(args.scheme_a))
        )
        scheme_b = PointScheme.from_overrides(parse_point_overrides(args.scheme_b))
        comparison = compare_point_schemes(
            season,
            draft_config=_draft_config_from_args(args),
            scheme_a=scheme_a,
            scheme_b=scheme_b,
            num_simulations=args.sims,
            label_a=args.scheme_a,
            label_b=args.scheme_b,
            workers=args.workers,
            rng=rng,
        )
        _emit(args, comparison, render_comparison(comparison))
        return 0

    if args.command == "suggest":
        season = loader.load_season(args.season)
        single, suggestions = run_suggestions(season, _draft_config_from_args(args), _scheme_from_args(args), rng=rng)
        text_out = render_simulation(season, single.result, single.balance) + "\n\n"
        text_out += render_suggestions(single.balance.gini, suggestions)
        _emit(args, {"draft": single, "suggestions": suggestions}, text_out)
        return 0

    if args.command == "explore":
        scheme = _scheme_from_args(args)
        seasons = load_seasons(loader, args.season)
        if len(seasons) == 1:
            scoring = aggregate_season_scoring(seasons[0], scheme)
            _emit(args, scoring, render_season_scoring(scoring))
        else:
            leaderboard = build_cross_season_leaderboard(seasons, scheme, top_n=args.top)
            trends = build_event_trend_data(seasons, scheme)
            _emit(
                args,
                {"leaderboard": leaderboard, "event_trends": trends},
                render_leaderboard(leaderboard) + "\n\n" + render_event_trends(trends),
            )
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(level=getattr(logging, args.log_level))

    try:
        return _run(args)
    except (SimulationError, ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
