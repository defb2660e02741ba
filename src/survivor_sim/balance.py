"""Balance metrics for a point scheme.

A scheme is "balanced" when simulated team totals are close together (low
Gini) and points are not dominated by a single event type or by whoever wins
the season.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from .constants import ADJUSTMENT_DELTAS
from .data import (
    DEFAULT_SCHEME,
    AdjustmentSuggestion,
    BalanceMetrics,
    EventType,
    PointScheme,
    Season,
    SimulationResult,
)
from .scoring import contestant_totals, score_roster

logger = logging.getLogger(__name__)


def gini(values: Sequence[float]) -> float:
    """Gini coefficient, ``sum|xi - xj| / (2 n^2 mean)``, rounded to 4 dp.

    Returns 0 for an empty sample or a zero mean. 0 means perfectly equal.
    """

    x = np.asarray(values, dtype=float)
    n = x.size
    if n == 0:
        return 0.0
    mean = x.mean()
    if mean == 0:
        return 0.0
    total_diff = np.abs(x[:, None] - x[None, :]).sum()
    return round(float(total_diff / (2 * n * n * mean)), 4)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation rounded to 4 dp.

    Returns 0 when the lengths differ, fewer than two points are given, or
    either series has zero variance.
    """

    if len(x) != len(y) or len(x) < 2:
        return 0.0
    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    denom = float(np.sqrt((dx * dx).sum() * (dy * dy).sum()))
    if denom == 0:
        return 0.0
    return round(float((dx * dy).sum()) / denom, 4)


def event_contribution(season: Season, scheme: Optional[PointScheme] = None) -> Dict[EventType, float]:
    """Share of absolute season points produced by each event type (4 dp).

    Only event types that occur in the season appear. If every occurring
    type is worth 0 points the shares are left at 0.
    """

    scheme = scheme or DEFAULT_SCHEME
    totals: Dict[EventType, float] = {}
    for event in season.events:
        totals[event.event_type] = totals.get(event.event_type, 0) + abs(scheme.event_points(event))

    grand_total = sum(totals.values())
    if grand_total == 0:
        return totals
    return {t: round(v / grand_total, 4) for t, v in totals.items()}


def winner_advantage(season: Season, scheme: Optional[PointScheme] = None) -> float:
    """Season winner's points minus the mean contestant total (2 dp); 0 with no winner."""

    winner = season.winner
    totals = contestant_totals(season, scheme)
    if winner is None or not totals:
        return 0.0
    mean = float(np.mean(list(totals.values())))
    return round(totals[winner.contestant_id] - mean, 2)


def longevity_correlation(season: Season, scheme: Optional[PointScheme] = None) -> float:
    """Correlation between how long contestants lasted and their fantasy points."""

    totals = contestant_totals(season, scheme)
    lasted = [season.contestant_count - c.placement + 1 for c in season.contestants]
    points = [totals[c.contestant_id] for c in season.contestants]
    return pearson_correlation(lasted, points)


def analyze_balance(
    season: Season,
    result: SimulationResult,
    scheme: Optional[PointScheme] = None,
) -> BalanceMetrics:
    """Compute :class:`BalanceMetrics` for one simulated league."""

    scheme = scheme or DEFAULT_SCHEME
    team_totals = [s.total_score for s in result.scores]

    return BalanceMetrics(
        gini=gini(team_totals),
        spread=float(max(team_totals) - min(team_totals)) if team_totals else 0.0,
        event_contribution=event_contribution(season, scheme),
        winner_advantage=winner_advantage(season, scheme),
        longevity_correlation=longevity_correlation(season, scheme),
    )


def suggest_adjustments(
    season: Season,
    result: SimulationResult,
    scheme: Optional[PointScheme] = None,
) -> List[AdjustmentSuggestion]:
    """Search single-event-type tweaks that lower the Gini of ``result``'s league.

    For every event type, each delta in :data:`ADJUSTMENT_DELTAS` is tried on
    its own and the league's rosters are re-scored under the adjusted scheme.
    The delta giving the lowest Gini (strictly below the current one) is kept.
    Types are searched independently, so combined tweaks are not explored.

    Returns
    -------
    list[AdjustmentSuggestion]
        Sorted by new Gini, best first.
    """

    scheme = scheme or DEFAULT_SCHEME
    current_gini = gini([s.total_score for s in score_roster(season, result.draft.roster, scheme).scores])

    suggestions: List[AdjustmentSuggestion] = []
    for event_type in EventType:
        current_val = scheme[event_type]
        best_gini = current_gini
        best_val = current_val

        for delta in ADJUSTMENT_DELTAS:
            test_scheme = scheme.with_points(event_type, current_val + delta)
            rescored = score_roster(season, result.draft.roster, test_scheme)
            test_gini = gini([s.total_score for s in rescored.scores])
            if test_gini < best_gini:
                best_gini = test_gini
                best_val = current_val + delta

        if best_val != current_val:
            suggestions.append(
                AdjustmentSuggestion(
                    event_type=event_type,
                    current_points=current_val,
                    suggested_points=best_val,
                    new_gini=best_gini,
                )
            )

    logger.debug("Found %d adjustment suggestions (current gini %.4f)", len(suggestions), current_gini)
    return sorted(suggestions, key=lambda s: s.new_gini)
