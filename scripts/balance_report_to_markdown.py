from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence


def _format_number(value: Any) -> str:
    # Keep integers as integers for readability.
    try:
        f = float(value)
    except (TypeError, ValueError):
        return str(value)
    if abs(f - round(f)) < 1e-9:
        return str(int(round(f)))
    return f"{f:.4f}".rstrip("0").rstrip(".")


def _format_pct(share: Any) -> str:
    return f"{float(share) * 100:.1f}%"


def _md_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines = ["| " + " | ".join(headers) + " |", "|" + "|".join("---" for _ in headers) + "|"]
    for row in rows:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def _balance_lines(balance: Mapping[str, Any]) -> List[str]:
    return [
        f"- **Gini**: {_format_number(balance.get('gini', 0))}",
        f"- **Spread**: {_format_number(balance.get('spread', 0))}",
        f"- **Winner advantage**: {_format_number(balance.get('winner_advantage', 0))}",
        f"- **Longevity correlation**: {_format_number(balance.get('longevity_correlation', 0))}",
    ]


def _contribution_table(balance: Mapping[str, Any]) -> str:
    contribution: Mapping[str, Any] = balance.get("event_contribution") or {}
    rows = [
        [event_type, _format_pct(share)]
        for event_type, share in sorted(contribution.items(), key=lambda kv: -float(kv[1]))
    ]
    return _md_table(["Event type", "Share"], rows)


def _season_section(result: Mapping[str, Any], *, top: int) -> str:
    out: List[str] = []
    out.append(f"## Season {result.get('season_number')}")
    out.append("")
    out.append(
        f"{result.get('num_simulations')} simulations, {result.get('player_count')} players, "
        f"{result.get('picks_per_player')} picks each."
    )
    out.append("")

    sd: Mapping[str, Any] = result.get("score_distribution") or {}
    out.append("### Team score distribution")
    out.append("")
    out.append(
        _md_table(
            ["Mean", "Median", "Std dev", "Min", "P25", "P75", "Max"],
            [[_format_number(sd.get(k, "")) for k in ("mean", "median", "std_dev", "min", "p25", "p75", "max")]],
        )
    )
    out.append("")

    balance: Mapping[str, Any] = result.get("balance") or {}
    out.append("### Balance")
    out.append("")
    out.extend(_balance_lines(balance))
    out.append("")
    out.append(_contribution_table(balance))
    out.append("")

    stats = list(result.get("contestant_stats") or [])[:top]
    if stats:
        out.append("### Top contestants")
        out.append("")
        out.append(
            _md_table(
                ["Contestant", "Points", "Avg team rank", "Draft rate"],
                [
                    [
                        str(s.get("name", "")),
                        _format_number(s.get("total_points", 0)),
                        _format_number(s.get("avg_team_rank", 0)),
                        _format_pct(s.get("draft_rate", 0)),
                    ]
                    for s in stats
                ],
            )
        )
        out.append("")

    return "\n".join(out)


def balance_report_to_markdown(report: Mapping[str, Any], *, top: int = 10) -> str:
    """Render the JSON written by ``survivor-sim --json batch`` as markdown.

    Accepts either a batch payload (``{"results": [...], "average": ...}``) or a
    single Monte Carlo result.
    """

    results: List[Mapping[str, Any]] = list(report["results"]) if "results" in report else [report]

    lines: List[str] = ["# Survivor Draft – Balance Report", ""]
    seasons = [str(r.get("season_number")) for r in results]
    lines.append(f"- **Seasons**: {', '.join(seasons)}")
    lines.append("")

    average: Optional[Mapping[str, Any]] = report.get("average") if "results" in report else None
    if average:
        lines.append("## Cross-season averages")
        lines.append("")
        lines.extend(_balance_lines(average))
        lines.append("")

    for r in results:
        lines.append(_season_section(r, top=top))

    return "\n".join(lines) + "\n"


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Convert a balance report JSON to markdown")
    parser.add_argument("report_json", type=Path, help="Path to the JSON written by `survivor-sim --json batch`")
    parser.add_argument("--out", type=Path, default=None, help="Optional output markdown path")
    parser.add_argument("--top", type=int, default=10, help="Contestants listed per season (default: 10)")

    args = parser.parse_args(argv)

    report = json.loads(args.report_json.read_text(encoding="utf-8-sig"))
    md = balance_report_to_markdown(report, top=args.top)

    if args.out is None:
        print(md)
    else:
        args.out.write_text(md, encoding="utf-8")


if __name__ == "__main__":
    main()
