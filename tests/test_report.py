from __future__ import annotations

import json

import numpy as np

from survivor_sim.balance import analyze_balance, suggest_adjustments
from survivor_sim.data import DraftConfig, EventType
from survivor_sim.draft import simulate_draft
from survivor_sim.explore import aggregate_season_scoring, build_cross_season_leaderboard, build_event_trend_data
from survivor_sim.report import (
    Column,
    dumps_pretty,
    format_table,
    render_event_trends,
    render_leaderboard,
    render_preview,
    render_season_scoring,
    render_simulation,
    render_suggestions,
    signed,
    to_json_dict,
)
from survivor_sim.scoring import score_all_contestants, score_roster

from season_builders import varied_season


def test_format_table_pads_aligns_and_truncates() -> None:
    table = format_table(
        [Column("Name", 5), Column("Pts", 4, align_right=True)],
        [["Al", "7"], ["Bartholomew", "-12"]],
    )

    assert table.splitlines() == [
        "+-------+------+",
        "| Name  | Pts  |",
        "+-------+------+",
        "| Al    |    7 |",
        "| Barth |  -12 |",
        "+-------+------+",
    ]


def test_signed() -> None:
    assert signed(5) == "+5"
    assert signed(-3) == "-3"
    assert signed(0) == "0"


def test_to_json_dict_converts_enums_and_keys() -> None:
    season = varied_season()
    result = score_roster(season, {0: ["C1"], 1: ["C2"]})
    data = to_json_dict(result)

    assert data["rankings"] == [0, 1]
    assert set(data["draft"]["roster"]) == {"0", "1"}
    c1 = data["scores"][0]["contestants"][0]
    assert c1["breakdown"]["WINNER"] == 20
    assert data["scores"][0]["score_by_episode"]["13"] == 30


def test_to_json_dict_handles_dataclasses_inside_mappings() -> None:
    season = varied_season()
    result = score_roster(season, {0: ["C1", "C5"], 1: ["C2", "C6"]})
    payload = {"suggestions": suggest_adjustments(season, result)}

    data = json.loads(dumps_pretty(payload))
    assert all(isinstance(s["event_type"], str) for s in data["suggestions"])


def test_render_preview_lists_contestants_by_points() -> None:
    season = varied_season()
    text = render_preview(season, score_all_contestants(season))

    assert text.startswith("=== SEASON 1: Season 1 (8 contestants) ===")
    lines = [line for line in text.splitlines() if line.startswith("|")]
    assert "Contestant 1" in lines[1]
    assert "WINNER +20" in lines[1]
    assert "Contestant 8" in lines[-1]


def test_render_simulation_includes_picks_teams_and_balance() -> None:
    season = varied_season()
    draft = simulate_draft(season, DraftConfig(2, 2), rng=np.random.default_rng(0))
    result = score_roster(season, draft)
    text = render_simulation(season, result, analyze_balance(season, result))

    assert "=== DRAFT (Season 1: Season 1) ===" in text
    assert "=== TEAM SCORES ===" in text
    assert "Gini coefficient" in text


def test_render_suggestions_without_suggestions() -> None:
    assert render_suggestions(0.0, []) == "No single-value adjustment lowers the gini below 0.0."


def test_render_explore_views() -> None:
    seasons = [varied_season(1), varied_season(2)]

    scoring_text = render_season_scoring(aggregate_season_scoring(seasons[0]))
    assert EventType.FINALIST.value in scoring_text

    board_text = render_leaderboard(build_cross_season_leaderboard(seasons, top_n=2))
    assert board_text.count("Contestant 1") == 2

    trends_text = render_event_trends(build_event_trend_data(seasons))
    assert "Endgame" in trends_text
    assert "79.4%" in trends_text
    assert render_event_trends([]) == ""
