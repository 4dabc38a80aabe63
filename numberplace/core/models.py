"""Data models supporting the puzzle engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from .constants import Difficulty, ENCODE_BLANK, SYMBOLS

if TYPE_CHECKING:
    from ..engine.grid import Grid


@dataclass(frozen=True)
class Cell:
    """Read-only view of one grid position."""

    row: int
    col: int
    digit: Optional[int] = None

    def is_empty(self) -> bool:
        return self.digit is None


@dataclass(frozen=True)
class Puzzle:
    """A uniquely solvable grid with at least one empty cell."""

    order: int
    givens: Tuple[Optional[int], ...]
    solution: Tuple[int, ...]
    difficulty: Difficulty
    seed: Optional[int] = None
    score: Optional[int] = None

    def __post_init__(self) -> None:
        side = self.order * self.order
        if len(self.givens) != side * side or len(self.solution) != side * side:
            raise ValueError("Puzzle givens and solution must cover the whole grid")
        if all(value is not None for value in self.givens):
            raise ValueError("A puzzle needs at least one empty cell")

    @property
    def side(self) -> int:
        return self.order * self.order

    @property
    def empty_count(self) -> int:
        return sum(1 for value in self.givens if value is None)

    @property
    def clue_count(self) -> int:
        return len(self.givens) - self.empty_count

    def grid(self) -> Grid:
        from ..engine.grid import Grid

        return Grid(self.order, self.givens)

    def solution_grid(self) -> Grid:
        from ..engine.grid import Grid

        return Grid(self.order, self.solution)

    def encode(self) -> str:
        return "".join(ENCODE_BLANK if value is None else SYMBOLS[value - 1] for value in self.givens)
