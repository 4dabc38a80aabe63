"""Shared constants and enumerations for the puzzle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Tuple


MIN_ORDER = 2
MAX_ORDER = 5
DEFAULT_ORDER = 3

# Digit d is written as SYMBOLS[d - 1]; 25 symbols cover the largest order.
SYMBOLS = "123456789ABCDEFGHIJKLMNOP"
BLANK_MARKERS = frozenset(".0_")
ENCODE_BLANK = "."


class SolutionCount(str, Enum):
    """How many solutions a search proved to exist."""

    ZERO = "ZERO"
    ONE = "ONE"
    MANY = "MANY"


class SearchMode(str, Enum):
    """How far the search engine explores before stopping."""

    FIRST = "FIRST"
    UNIQUE = "UNIQUE"
    ALL = "ALL"


class PropagationStatus(str, Enum):
    SOLVED = "SOLVED"
    STALLED = "STALLED"
    CONTRADICTION = "CONTRADICTION"


class Technique(str, Enum):
    """Logical elimination rules understood by the propagator."""

    NAKED_SINGLE = "NAKED_SINGLE"
    HIDDEN_SINGLE = "HIDDEN_SINGLE"
    POINTING = "POINTING"
    CLAIMING = "CLAIMING"


class Difficulty(IntEnum):
    """Puzzle difficulty labels, ordered from easiest to hardest."""

    TRIVIAL = 0
    EASY = 1
    MEDIUM = 2
    HARD = 3
    EXPERT = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, value: str) -> "Difficulty":
        try:
            return cls[value.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown difficulty '{value}'") from exc


ALL_TECHNIQUES: Tuple[Technique, ...] = (
    Technique.NAKED_SINGLE,
    Technique.HIDDEN_SINGLE,
    Technique.POINTING,
    Technique.CLAIMING,
)

# Each tier enables every technique of the tiers below it. EXPERT has no
# entry: it is what remains when propagation alone cannot finish a puzzle.
DIFFICULTY_TIERS: Tuple[Tuple[Difficulty, Tuple[Technique, ...]], ...] = (
    (Difficulty.TRIVIAL, ALL_TECHNIQUES[:1]),
    (Difficulty.EASY, ALL_TECHNIQUES[:2]),
    (Difficulty.MEDIUM, ALL_TECHNIQUES[:3]),
    (Difficulty.HARD, ALL_TECHNIQUES[:4]),
)


@dataclass(frozen=True)
class Dimensions:
    """Size helper derived from the box order."""

    order: int

    @property
    def side(self) -> int:
        return self.order * self.order

    @property
    def cell_count(self) -> int:
        return self.side * self.side

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.side and 0 <= col < self.side

    def index(self, row: int, col: int) -> int:
        return row * self.side + col

    def coords(self, index: int) -> Tuple[int, int]:
        return divmod(index, self.side)


def order_for_length(length: int) -> int:
    """Return the box order whose grid holds ``length`` cells."""

    for order in range(MIN_ORDER, MAX_ORDER + 1):
        if order ** 4 == length:
            return order
    raise ValueError(f"No supported grid has {length} cells")
