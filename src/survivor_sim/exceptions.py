"""Typed failures raised by the simulation engine.

Each error also subclasses the builtin exception callers would otherwise
expect (``ValueError`` for bad configuration, ``KeyError`` for missing data),
so existing ``except ValueError`` handlers keep working.
"""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for all engine failures."""


class DraftCapacityError(SimulationError, ValueError):
    """The draft configuration cannot be satisfied by the available contestants."""


class DraftExhaustionError(SimulationError, ValueError):
    """A manual-mode player ran out of draftable picks."""


class SeasonNotFoundError(SimulationError, KeyError):
    """A requested season is not available from the loader."""

    def __init__(self, season_number: int, detail: str = "") -> None:
        self.season_number = season_number
        self.detail = detail
        super().__init__(season_number)

    def __str__(self) -> str:
        msg = f"Season {self.season_number} not found"
        if self.detail:
            msg += f": {self.detail}"
        return msg
