"""Survivor fantasy draft balance simulator.

Maps historical Survivor season data into scoring events, simulates snake
drafts of a fantasy league over a season, and measures how evenly a point
scheme spreads fantasy points across the league's players.
"""

from .balance import analyze_balance, gini, pearson_correlation, suggest_adjustments
from .data import (
    BASE_EVENT_POINTS,
    DEFAULT_SCHEME,
    DraftConfig,
    DraftMode,
    EventType,
    MonteCarloConfig,
    PinnedPicks,
    PointScheme,
    Season,
)
from .draft import simulate_draft, snake_order
from .exceptions import DraftCapacityError, DraftExhaustionError, SeasonNotFoundError, SimulationError
from .explore import (
    aggregate_season_scoring,
    build_cross_season_leaderboard,
    build_event_trend_data,
    build_player_index,
    find_player_profiles,
)
from .mapper import MapperInput, build_season, map_season_events
from .monte_carlo import average_balance_metrics, run_monte_carlo
from .scoring import score_all_contestants, score_roster

__all__ = [
    "BASE_EVENT_POINTS",
    "DEFAULT_SCHEME",
    "DraftConfig",
    "DraftMode",
    "EventType",
    "MonteCarloConfig",
    "PinnedPicks",
    "PointScheme",
    "Season",
    "SimulationError",
    "DraftCapacityError",
    "DraftExhaustionError",
    "SeasonNotFoundError",
    "MapperInput",
    "map_season_events",
    "build_season",
    "score_roster",
    "score_all_contestants",
    "simulate_draft",
    "snake_order",
    "run_monte_carlo",
    "average_balance_metrics",
    "gini",
    "pearson_correlation",
    "analyze_balance",
    "suggest_adjustments",
    "aggregate_season_scoring",
    "build_cross_season_leaderboard",
    "build_event_trend_data",
    "build_player_index",
    "find_player_profiles",
]
