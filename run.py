from __future__ import annotations

import json
from pathlib import Path

import numpy as np

from survivor_sim.constants import DEFAULT_NUM_SIMULATIONS, DEFAULT_PICKS_PER_PLAYER, DEFAULT_PLAYER_COUNT
from survivor_sim.data import DraftConfig, PointScheme
from survivor_sim.io import DirectorySeasonLoader, load_draft_config_from_json, load_point_overrides_from_json
from survivor_sim.main import configure_logging, run_batch
from survivor_sim.report import dumps_pretty


def main() -> None:
    configure_logging()

    repo_root = Path(__file__).resolve().parent
    data_dir = repo_root / "data"
    output_dir = repo_root / "output"
    output_dir.mkdir(parents=True, exist_ok=True)

    # Optional draft settings; draft_config.json format:
    #   {"player_count": 8, "picks_per_player": 2, "max_owners_per_contestant": 2}
    draft_config_path = data_dir / "draft_config.json"
    if draft_config_path.exists():
        draft_config = load_draft_config_from_json(draft_config_path)
    else:
        draft_config = DraftConfig(player_count=DEFAULT_PLAYER_COUNT, picks_per_player=DEFAULT_PICKS_PER_PLAYER)

    overrides_path = data_dir / "point_overrides.json"
    overrides = load_point_overrides_from_json(overrides_path) if overrides_path.exists() else {}

    # Optional run settings; run_settings.json format:
    #   {"num_simulations": 1000, "seed": 7, "workers": 4}
    settings_path = data_dir / "run_settings.json"
    settings = json.loads(settings_path.read_text(encoding="utf-8-sig")) if settings_path.exists() else {}

    seasons = DirectorySeasonLoader(data_dir / "survivor-seasons").load_all_seasons()
    batch = run_batch(
        seasons,
        num_simulations=int(settings.get("num_simulations", DEFAULT_NUM_SIMULATIONS)),
        draft_config=draft_config,
        scheme=PointScheme.from_overrides(overrides),
        workers=int(settings.get("workers", 1)),
        rng=np.random.default_rng(settings.get("seed")),
    )

    # Write to output file.
    out_path = output_dir / "balance_report.json"
    out_path.write_text(dumps_pretty(batch), encoding="utf-8")

    # Pretty JSON to stdout.
    print(dumps_pretty(batch))


if __name__ == "__main__":
    main()
