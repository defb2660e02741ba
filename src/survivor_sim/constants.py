"""Project-wide constants for :mod:`survivor_sim`.

This module keeps literal values and default assumptions centralized so the
CLI, the loaders and the engine agree on them.
"""

from __future__ import annotations

# Draft / simulation defaults
DEFAULT_PLAYER_COUNT: int = 8
DEFAULT_PICKS_PER_PLAYER: int = 2
DEFAULT_MAX_OWNERS_PER_CONTESTANT: int = 2
DEFAULT_NUM_SIMULATIONS: int = 1000
DEFAULT_COMPARE_SIMULATIONS: int = 500
DEFAULT_SEASON: int = 46

# Weighted random pick: weight = max(MIN_PICK_WEIGHT, value + U(-NOISE, NOISE) + OFFSET)
PICK_WEIGHT_NOISE: float = 10.0
PICK_WEIGHT_OFFSET: float = 30.0
MIN_PICK_WEIGHT: float = 1.0

# Local search over single event-type point values
ADJUSTMENT_DELTAS: tuple[int, ...] = (-3, -2, -1, 1, 2, 3)

DEFAULT_LEADERBOARD_SIZE: int = 50

# Data directories (relative to the working directory)
DEFAULT_DATA_DIR: str = "data/survivor-seasons"
DEFAULT_RAW_DATA_DIR: str = "data/survivor-raw"

SEASON_FILE_PREFIX: str = "season-"
SEASON_FILE_SUFFIX: str = ".json"

# Raw survivoR export files
RAW_VOTE_HISTORY_FILE: str = "vote_history.json"
RAW_CHALLENGE_RESULTS_FILE: str = "challenge_results.json"
RAW_ADVANTAGE_MOVEMENT_FILE: str = "advantage_movement.json"
RAW_CASTAWAYS_FILE: str = "castaways.json"
RAW_BOOT_MAPPING_FILE: str = "boot_mapping.json"
RAW_SEASON_SUMMARY_FILE: str = "season_summary.json"

HTTP_TIMEOUT_SECONDS: int = 30

WINNER_RESULT: str = "Sole Survivor"
UNKNOWN_TRIBE: str = "Unknown"
