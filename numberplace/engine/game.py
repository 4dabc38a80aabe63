"""In-progress game state over a generated or imported puzzle."""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.constants import DEFAULT_ORDER, Difficulty
from ..core.exceptions import ConflictError
from ..core.models import Puzzle
from ..utils.logger import get_logger
from .candidates import CandidateTracker
from .generator import GeneratorConfig, PuzzleGenerator


LOGGER = get_logger(__name__)


class Game:
    """Tracks the player's grid against the puzzle's givens and solution."""

    def __init__(self, puzzle: Puzzle) -> None:
        self.puzzle = puzzle
        self.problem = puzzle.grid()
        self.current = puzzle.grid()
        self.solution = puzzle.solution_grid()
        self.tracker = CandidateTracker(self.current)
        self.moves = 0

    @classmethod
    def new(
        cls,
        order: int = DEFAULT_ORDER,
        difficulty: Optional[Difficulty] = None,
        seed: Optional[int] = None,
    ) -> "Game":
        config = GeneratorConfig(order=order, seed=seed, target_difficulty=difficulty)
        return cls(PuzzleGenerator(config).generate())

    def _index(self, row: int, col: int) -> int:
        if not self.current.dimensions.contains(row, col):
            raise IndexError(f"Cell {(row, col)} outside the grid")
        return self.current.dimensions.index(row, col)

    def relevant_points(self, row: int, col: int) -> List[Tuple[int, int]]:
        """Coordinates sharing a row, column or box with ``(row, col)``."""
        dimensions = self.current.dimensions
        return [dimensions.coords(peer) for peer in self.current.regions.peers[self._index(row, col)]]

    def is_mutable(self, row: int, col: int) -> bool:
        return self.problem[row, col] is None

    def insertion_is_correct(self, row: int, col: int, digit: int) -> bool:
        return self.solution[row, col] == digit

    def candidates(self, row: int, col: int) -> List[int]:
        return self.tracker.digits(self._index(row, col))

    def insert(self, row: int, col: int, digit: int) -> None:
        """Write ``digit``, replacing any previous player entry in that cell."""

        index = self._index(row, col)
        if not self.is_mutable(row, col):
            raise ConflictError(f"Cell {(row, col)} is a given")
        if not 1 <= digit <= self.current.side:
            raise ConflictError(f"Digit {digit} is outside 1..{self.current.side}")
        for peer in self.current.regions.peers[index]:
            if self.current.value_at(peer) == digit:
                raise ConflictError(
                    f"Digit {digit} at {(row, col)} conflicts with {divmod(peer, self.current.side)}"
                )
        if self.current.value_at(index):
            self.tracker.remove(index)
        self.tracker.assign(index, digit)
        self.moves += 1

    def remove(self, row: int, col: int) -> Optional[int]:
        index = self._index(row, col)
        if not self.is_mutable(row, col):
            raise ConflictError(f"Cell {(row, col)} is a given")
        self.moves += 1
        return self.tracker.remove(index)

    def is_solved(self) -> bool:
        return self.current == self.solution
