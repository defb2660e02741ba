"""Text tables and JSON serialisation of simulation results.

Everything here is presentation only: functions take finished result objects
and return strings.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from survivor_sim.data import (
    AdjustmentSuggestion,
    BalanceMetrics,
    ContestantScore,
    MonteCarloResult,
    SchemeComparison,
    Season,
    SimulationResult,
)
from survivor_sim.explore import EventTrendEntry, LeaderboardEntry, SeasonScoring


# ============================================================================
# JSON
# ============================================================================


def to_json_dict(obj: Any) -> Any:
    """Convert result dataclasses (possibly nested in lists / dicts) into JSON-ready primitives.

    Enum keys and values become their string values; integer keys (player
    indices, episodes) become strings.
    """

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_json_dict(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Mapping):
        return {(k.value if isinstance(k, Enum) else str(k)): to_json_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_dict(v) for v in obj]
    return obj


def dumps_pretty(obj: Any) -> str:
    return json.dumps(to_json_dict(obj), indent=2, sort_keys=False)


# ============================================================================
# Tables
# ============================================================================


@dataclass(frozen=True, slots=True)
class Column:
    header: str
    width: int
    align_right: bool = False


def _fit(value: str, width: int, *, right: bool) -> str:
    if len(value) >= width:
        return value[:width]
    return value.rjust(width) if right else value.ljust(width)


def format_table(columns: Sequence[Column], rows: Iterable[Sequence[str]]) -> str:
    """Render a boxed fixed-width table. Over-long cells are truncated."""

    separator = "+" + "+".join("-" * (c.width + 2) for c in columns) + "+"
    lines = [separator, "|" + "|".join(f" {_fit(c.header, c.width, right=False)} " for c in columns) + "|", separator]
    for row in rows:
        cells = []
        for i, c in enumerate(columns):
            value = row[i] if i < len(row) else ""
            cells.append(f" {_fit(value, c.width, right=c.align_right)} ")
        lines.append("|" + "|".join(cells) + "|")
    lines.append(separator)
    return "\n".join(lines)


def signed(points: float) -> str:
    """``+5`` / ``-3`` / ``0``."""

    if points > 0:
        return f"+{points}"
    return str(points)


def _pct(share: float) -> str:
    return f"{share * 100:.1f}%"


# ============================================================================
# Command renderers
# ============================================================================


def render_preview(season: Season, scores: Sequence[ContestantScore]) -> str:
    cols = [
        Column("#", 3, True),
        Column("Contestant", 25),
        Column("Place", 5, True),
        Column("Points", 7, True),
        Column("Top events", 40),
    ]
    rows = []
    for rank, c in enumerate(sorted(scores, key=lambda s: -s.score), start=1):
        top = sorted(c.breakdown.items(), key=lambda kv: -abs(kv[1]))[:3]
        rows.append(
            [
                str(rank),
                c.name,
                str(c.placement),
                str(c.score),
                ", ".join(f"{t.value} {signed(v)}" for t, v in top),
            ]
        )
    header = f"=== SEASON {season.season_number}: {season.name} ({len(season.contestants)} contestants) ==="
    return header + "\n" + format_table(cols, rows)


def render_balance(balance: BalanceMetrics) -> str:
    lines = [
        "--- Balance Metrics ---",
        f"  Gini coefficient:      {balance.gini}",
        f"  Spread (max-min):      {balance.spread}",
        f"  Winner advantage:      {balance.winner_advantage}",
        f"  Longevity correlation: {balance.longevity_correlation}",
    ]
    if balance.event_contribution:
        lines.append("")
        lines.append("--- Event Type Contribution ---")
        rows = [
            [t.value, _pct(share)]
            for t, share in sorted(balance.event_contribution.items(), key=lambda kv: -kv[1])
        ]
        lines.append(format_table([Column("Event Type", 25), Column("%", 7, True)], rows))
    return "\n".join(lines)


def render_simulation(season: Season, result: SimulationResult, balance: Optional[BalanceMetrics] = None) -> str:
    out: List[str] = [f"=== DRAFT (Season {season.season_number}: {season.name}) ==="]

    pick_cols = [Column("Rnd", 3, True), Column("Pick", 4, True), Column("Player", 6, True), Column("Contestant", 25)]
    pick_rows = [
        [str(p.round_number), str(p.pick_in_round), str(p.player_index + 1), season.contestant_name(p.contestant_id)]
        for p in result.draft.picks
    ]
    out.append(format_table(pick_cols, pick_rows))

    out.append("")
    out.append("=== TEAM SCORES ===")
    by_player = {s.player_index: s for s in result.scores}
    team_cols = [Column("Rank", 4, True), Column("Player", 6, True), Column("Points", 7, True), Column("Roster", 50)]
    team_rows = []
    for rank, idx in enumerate(result.rankings, start=1):
        team = by_player[idx]
        roster = ", ".join(f"{c.name} ({c.score})" for c in team.contestants)
        team_rows.append([str(rank), str(idx + 1), str(team.total_score), roster])
    out.append(format_table(team_cols, team_rows))

    if balance is not None:
        out.append("")
        out.append(render_balance(balance))
    return "\n".join(out)


def render_monte_carlo(result: MonteCarloResult, *, top: int = 15) -> str:
    sd = result.score_distribution
    out = [
        f"=== MONTE CARLO RESULTS (Season {result.season_number}) ===",
        f"Simulations: {result.num_simulations} | Players: {result.player_count} | Picks: {result.picks_per_player}",
        "",
        "--- Score Distribution ---",
        f"  Mean:   {sd.mean}",
        f"  Median: {sd.median}",
        f"  StdDev: {sd.std_dev}",
        f"  Range:  {sd.min} - {sd.max}",
        f"  IQR:    {sd.p25} - {sd.p75}",
        "",
        render_balance(result.balance),
        "",
        "--- Top Contestants (by fantasy value) ---",
    ]
    cols = [Column("Contestant", 25), Column("Points", 7, True), Column("Avg Rank", 8, True), Column("Draft %", 7, True)]
    rows = [
        [c.name, str(c.total_points), str(c.avg_team_rank), _pct(c.draft_rate)]
        for c in result.contestant_stats[:top]
    ]
    out.append(format_table(cols, rows))
    return "\n".join(out)


def render_batch_summary(average: BalanceMetrics) -> str:
    return "\n".join(
        [
            "=== CROSS-SEASON SUMMARY ===",
            f"  Avg Gini:       {average.gini:.4f}",
            f"  Avg Spread:     {average.spread:.1f}",
            f"  Avg Longevity:  {average.longevity_correlation:.4f}",
        ]
    )


def _delta(a: float, b: float) -> str:
    d = b - a
    return f"+{d:.2f}" if d > 0 else f"{d:.2f}"


def render_comparison(comparison: SchemeComparison) -> str:
    a = comparison.result_a
    b = comparison.result_b
    metrics: List[Tuple[str, float, float]] = [
        ("Gini", a.balance.gini, b.balance.gini),
        ("Spread", a.balance.spread, b.balance.spread),
        ("Winner Advantage", a.balance.winner_advantage, b.balance.winner_advantage),
        ("Longevity Corr.", a.balance.longevity_correlation, b.balance.longevity_correlation),
        ("Score Mean", a.score_distribution.mean, b.score_distribution.mean),
        ("Score StdDev", a.score_distribution.std_dev, b.score_distribution.std_dev),
        ("Score Min", a.score_distribution.min, b.score_distribution.min),
        ("Score Max", a.score_distribution.max, b.score_distribution.max),
    ]
    cols = [
        Column("Metric", 22),
        Column(f"A: {comparison.label_a}", 14, True),
        Column(f"B: {comparison.label_b}", 14, True),
        Column("Delta", 10, True),
    ]
    out = ["=== COMPARISON ===", format_table(cols, [[n, str(x), str(y), _delta(x, y)] for n, x, y in metrics])]

    types = sorted(set(a.balance.event_contribution) | set(b.balance.event_contribution), key=lambda t: t.value)
    event_rows = []
    for t in types:
        sa = a.balance.event_contribution.get(t, 0.0)
        sb = b.balance.event_contribution.get(t, 0.0)
        d = sb - sa
        event_rows.append([t.value, _pct(sa), _pct(sb), ("+" if d > 0 else "") + _pct(d)])
    out.append("")
    out.append("--- Event Contribution Comparison ---")
    out.append(
        format_table(
            [Column("Event Type", 25), Column("A", 8, True), Column("B", 8, True), Column("Delta", 8, True)],
            event_rows,
        )
    )
    return "\n".join(out)


def render_suggestions(current_gini: float, suggestions: Sequence[AdjustmentSuggestion]) -> str:
    if not suggestions:
        return f"No single-value adjustment lowers the gini below {current_gini}."
    cols = [Column("Event Type", 25), Column("Current", 7, True), Column("Suggested", 9, True), Column("New Gini", 8, True)]
    rows = [[s.event_type.value, str(s.current_points), str(s.suggested_points), str(s.new_gini)] for s in suggestions]
    return f"=== SUGGESTED ADJUSTMENTS (current gini {current_gini}) ===\n" + format_table(cols, rows)


def render_season_scoring(scoring: SeasonScoring, *, top: int = 10) -> str:
    st = scoring.stats
    out = [
        f"=== SEASON {scoring.season_number}: {scoring.name} ===",
        f"  Avg: {st.avg_points}  Median: {st.median_points}  Top: {st.top_points}  Bottom: {st.bottom_points}",
        "",
        format_table(
            [Column("Event Type", 25), Column("Count", 5, True), Column("Points", 7, True), Column("Share", 7, True)],
            [[b.event_type.value, str(b.count), str(b.total_points), _pct(b.percentage)] for b in st.event_type_breakdown],
        ),
        "",
        format_table(
            [Column("Contestant", 25), Column("Place", 5, True), Column("Points", 7, True)],
            [[c.name, str(c.placement), str(c.score)] for c in scoring.contestants[:top]],
        ),
    ]
    return "\n".join(out)


def render_leaderboard(entries: Sequence[LeaderboardEntry]) -> str:
    cols = [
        Column("#", 3, True),
        Column("Contestant", 25),
        Column("Season", 6, True),
        Column("Place", 5, True),
        Column("Points", 7, True),
    ]
    rows = [
        [str(i), e.name, str(e.season_number), str(e.placement), str(e.total_points)]
        for i, e in enumerate(entries, start=1)
    ]
    return "=== CROSS-SEASON LEADERBOARD ===\n" + format_table(cols, rows)


def render_event_trends(trends: Sequence[EventTrendEntry]) -> str:
    if not trends:
        return ""
    categories = list(trends[0].shares)
    cols = [Column("Season", 6, True)] + [Column(cat, 10, True) for cat in categories]
    rows = [[str(t.season_number)] + [f"{t.shares[cat]}%" for cat in categories] for t in trends]
    return "=== EVENT CATEGORY TRENDS ===\n" + format_table(cols, rows)
