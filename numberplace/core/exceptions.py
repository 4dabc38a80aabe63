"""Custom exception hierarchy for the puzzle engine."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple


class NumberPlaceError(Exception):
    """Base exception for engine failures."""


class InvalidGrid(NumberPlaceError, ValueError):
    """Raised when a grid has the wrong length, a bad digit or a duplicate."""


class NotUniqueError(InvalidGrid):
    """Raised when a puzzle does not have exactly one solution."""


class ConflictError(NumberPlaceError):
    """Raised when a placement would break a row, column or box rule."""


class Contradiction(NumberPlaceError):
    """Raised inside propagation when the working grid cannot be completed."""


class BudgetExceeded(NumberPlaceError):
    """Raised when a search runs out of its node or time budget."""

    def __init__(self, message: str, nodes: int = 0, solutions: Optional[Sequence] = None) -> None:
        super().__init__(message)
        self.nodes = nodes
        self.solutions: Tuple = tuple(solutions or ())


class GenerationError(NumberPlaceError):
    """Raised when the generator cannot meet its targets within the retry limit."""


class GeneratorInvariantError(NumberPlaceError):
    """Raised when construction produced a grid that is not uniquely solvable."""


class ValidationError(NumberPlaceError):
    """Raised when the grid integrity checks fail."""
