from __future__ import annotations

import json
from pathlib import Path

import pytest

from survivor_sim.cli import main
from survivor_sim.io import write_season_json

from season_builders import varied_season, write_raw_export


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    out = tmp_path / "seasons"
    write_season_json(varied_season(1), out)
    write_season_json(varied_season(2), out)
    return out


def _run_json(capsys: pytest.CaptureFixture[str], data_dir: Path, *argv: str):
    code = main(["--data-dir", str(data_dir), "--json", "--log-level", "WARNING", *argv])
    assert code == 0
    return json.loads(capsys.readouterr().out)


def test_preview_json(capsys, data_dir: Path) -> None:
    scores = _run_json(capsys, data_dir, "preview", "--season", "1")

    assert len(scores) == 8
    assert scores[0]["contestant_id"] == "C1"
    assert scores[0]["score"] == 38
    assert scores[0]["breakdown"]["WINNER"] == 20


def test_preview_applies_override(capsys, data_dir: Path) -> None:
    scores = _run_json(capsys, data_dir, "preview", "--season", "1", "--override", "WINNER:0")
    assert scores[0]["score"] == 18


def test_preview_text(capsys, data_dir: Path) -> None:
    assert main(["--data-dir", str(data_dir), "preview", "--season", "2"]) == 0
    assert "=== SEASON 2: Season 2 (8 contestants) ===" in capsys.readouterr().out


def test_simulate_with_manual_picks(capsys, data_dir: Path) -> None:
    single = _run_json(
        capsys,
        data_dir,
        "simulate",
        "--season",
        "1",
        "--players",
        "4",
        "--picks-per-player",
        "2",
        "--picks",
        "0:C8",
        "--seed",
        "5",
    )

    assert single["result"]["draft"]["roster"]["0"][0] == "C8"
    assert len(single["result"]["scores"]) == 4
    assert "gini" in single["balance"]


def test_simulate_with_draft_config_file(capsys, data_dir: Path, tmp_path: Path) -> None:
    cfg = tmp_path / "draft_config.json"
    cfg.write_text(
        json.dumps({"player_count": 2, "picks_per_player": 1, "mode": "manual", "manual_picks": {"0": ["C3"], "1": ["C4"]}}),
        encoding="utf-8",
    )
    single = _run_json(capsys, data_dir, "simulate", "--season", "1", "--draft-config", str(cfg))
    assert single["result"]["draft"]["roster"] == {"0": ["C3"], "1": ["C4"]}


def test_batch_all_seasons_reports_average(capsys, data_dir: Path) -> None:
    batch = _run_json(
        capsys, data_dir, "batch", "--season", "all", "--sims", "20", "--players", "4", "--seed", "3"
    )

    assert [r["season_number"] for r in batch["results"]] == [1, 2]
    assert batch["average"] is not None
    assert batch["results"][0]["num_simulations"] == 20


def test_batch_is_reproducible_with_seed(capsys, data_dir: Path) -> None:
    argv = ("batch", "--season", "1", "--sims", "15", "--players", "4", "--seed", "9")
    first = _run_json(capsys, data_dir, *argv)
    second = _run_json(capsys, data_dir, *argv)
    assert first == second
    assert first["average"] is None


def test_batch_with_pinned_roster(capsys, data_dir: Path) -> None:
    batch = _run_json(
        capsys,
        data_dir,
        "batch",
        "--season",
        "1",
        "--sims",
        "10",
        "--players",
        "3",
        "--picks-per-player",
        "1",
        "--max-owners",
        "1",
        "--pin",
        "0:C8",
        "--seed",
        "1",
    )
    stats = {s["contestant_id"]: s for s in batch["results"][0]["contestant_stats"]}
    assert stats["C8"]["draft_rate"] == 0.333


def test_batch_text_output(capsys, data_dir: Path) -> None:
    code = main(["--data-dir", str(data_dir), "batch", "--season", "all", "--sims", "5", "--players", "2"])
    out = capsys.readouterr().out

    assert code == 0
    assert out.count("=== MONTE CARLO RESULTS") == 2
    assert "=== CROSS-SEASON SUMMARY ===" in out


def test_compare(capsys, data_dir: Path) -> None:
    comparison = _run_json(
        capsys, data_dir, "compare", "--season", "1", "--sims", "10", "--players", "4", "--b", "WINNER:40", "--seed", "2"
    )

    assert comparison["label_a"] == "default"
    assert comparison["label_b"] == "WINNER:40"
    assert comparison["scheme_b"]["points"]["WINNER"] == 40
    assert comparison["result_a"]["contestant_stats"][0]["total_points"] == 38
    assert comparison["result_b"]["contestant_stats"][0]["total_points"] == 58


def test_suggest(capsys, data_dir: Path) -> None:
    payload = _run_json(capsys, data_dir, "suggest", "--season", "1", "--players", "4", "--seed", "4")

    gini = payload["draft"]["balance"]["gini"]
    assert all(s["new_gini"] < gini for s in payload["suggestions"])


def test_explore_single_season(capsys, data_dir: Path) -> None:
    scoring = _run_json(capsys, data_dir, "explore", "--season", "1")
    assert scoring["stats"]["top_points"] == 38
    assert scoring["contestant_trends"][-1]["cumulative"]["C8"] == -10


def test_explore_all_seasons(capsys, data_dir: Path) -> None:
    payload = _run_json(capsys, data_dir, "explore", "--top", "3")
    assert len(payload["leaderboard"]) == 3
    assert [t["season_number"] for t in payload["event_trends"]] == [1, 2]


def test_import_from_raw_dir(capsys, tmp_path: Path) -> None:
    raw_dir = write_raw_export(tmp_path / "raw")
    out_dir = tmp_path / "seasons"

    code = main(["--data-dir", str(out_dir), "import", "--raw-dir", str(raw_dir)])

    assert code == 0
    assert (out_dir / "season-1.json").exists()
    assert not (out_dir / "season-2.json").exists()
    assert "Wrote 1 season files" in capsys.readouterr().out


def test_missing_season_returns_error_code(data_dir: Path) -> None:
    assert main(["--data-dir", str(data_dir), "preview", "--season", "99"]) == 1


def test_capacity_error_returns_error_code(data_dir: Path) -> None:
    argv = ["--data-dir", str(data_dir), "simulate", "--season", "1", "--players", "20", "--max-owners", "1"]
    assert main(argv) == 1


def test_bad_override_returns_error_code(data_dir: Path) -> None:
    assert main(["--data-dir", str(data_dir), "preview", "--season", "1", "--override", "BONUS:3"]) == 1


def test_empty_data_dir_returns_error_code(tmp_path: Path) -> None:
    assert main(["--data-dir", str(tmp_path), "batch", "--season", "all", "--sims", "1"]) == 1
