"""Validity-preserving symmetry transforms over grids and puzzles.

Every transform is a pair of bijections: one over cell positions and one over
digit labels. Both are stored as lookup tuples so applying, inverting and
composing them needs no search.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Callable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from ..core.constants import DEFAULT_ORDER
from ..core.models import Puzzle
from .grid import Grid


@dataclass(frozen=True)
class Transform:
    """``cell_map[dst]`` is the source index feeding ``dst``; ``digit_map[d]`` relabels ``d``."""

    order: int
    cell_map: Tuple[int, ...]
    digit_map: Tuple[int, ...]

    def __post_init__(self) -> None:
        side = self.order * self.order
        if sorted(self.cell_map) != list(range(side * side)):
            raise ValueError("cell_map must be a permutation of all cell indices")
        if len(self.digit_map) != side + 1 or self.digit_map[0] != 0 or sorted(self.digit_map) != list(range(side + 1)):
            raise ValueError("digit_map must fix 0 and permute 1..side")

    def _check(self, order: int) -> None:
        if order != self.order:
            raise ValueError(f"Transform for order {self.order} applied to order {order}")

    def apply_values(self, values: Sequence[Optional[int]]) -> Tuple[Optional[int], ...]:
        digits = self.digit_map
        return tuple(
            digits[values[source]] if values[source] else None for source in self.cell_map
        )

    def apply(self, grid: Grid) -> Grid:
        self._check(grid.order)
        return Grid(grid.order, self.apply_values(grid.values))

    def apply_puzzle(self, puzzle: Puzzle) -> Puzzle:
        """Map givens and solution; the difficulty carries over.

        ``score`` follows the search path, which depends on cell order, and
        ``seed`` no longer reproduces the result, so both are dropped.
        """

        self._check(puzzle.order)
        return replace(
            puzzle,
            givens=self.apply_values(puzzle.givens),
            solution=self.apply_values(puzzle.solution),
            seed=None,
            score=None,
        )

    def inverse(self) -> "Transform":
        cells = [0] * len(self.cell_map)
        for dst, source in enumerate(self.cell_map):
            cells[source] = dst
        digits = [0] * len(self.digit_map)
        for digit, label in enumerate(self.digit_map):
            digits[label] = digit
        return Transform(self.order, tuple(cells), tuple(digits))

    def then(self, other: "Transform") -> "Transform":
        """The transform equivalent to applying ``self`` and then ``other``."""

        self._check(other.order)
        cells = tuple(self.cell_map[source] for source in other.cell_map)
        digits = tuple(other.digit_map[label] for label in self.digit_map)
        return Transform(self.order, cells, digits)


# ----------------------------------------------------------------------
# Constructors
# ----------------------------------------------------------------------
def _from_coords(order: int, source_of: Callable[[int, int], Tuple[int, int]]) -> Transform:
    side = order * order
    cells = []
    for row in range(side):
        for col in range(side):
            src_row, src_col = source_of(row, col)
            cells.append(src_row * side + src_col)
    return Transform(order, tuple(cells), tuple(range(side + 1)))


def _check_permutation(perm: Sequence[int], size: int, what: str) -> List[int]:
    values = list(perm)
    if sorted(values) != list(range(size)):
        raise ValueError(f"{what} must be a permutation of 0..{size - 1}, got {values}")
    return values


def identity(order: int = DEFAULT_ORDER) -> Transform:
    return _from_coords(order, lambda r, c: (r, c))


def transpose(order: int = DEFAULT_ORDER) -> Transform:
    return _from_coords(order, lambda r, c: (c, r))


def reflect_horizontal(order: int = DEFAULT_ORDER) -> Transform:
    """Mirror left to right."""
    last = order * order - 1
    return _from_coords(order, lambda r, c: (r, last - c))


def reflect_vertical(order: int = DEFAULT_ORDER) -> Transform:
    """Mirror top to bottom."""
    last = order * order - 1
    return _from_coords(order, lambda r, c: (last - r, c))


def rotate(order: int = DEFAULT_ORDER, quarter_turns: int = 1) -> Transform:
    """Rotate clockwise by ``quarter_turns`` * 90 degrees."""

    last = order * order - 1
    turns = quarter_turns % 4
    if turns == 0:
        return identity(order)
    if turns == 1:
        return _from_coords(order, lambda r, c: (last - c, r))
    if turns == 2:
        return _from_coords(order, lambda r, c: (last - r, last - c))
    return _from_coords(order, lambda r, c: (c, last - r))


def permute_bands(order: int, perm: Sequence[int]) -> Transform:
    """Band ``i`` of the result is band ``perm[i]`` of the source."""

    bands = _check_permutation(perm, order, "Band permutation")
    return _from_coords(order, lambda r, c: (bands[r // order] * order + r % order, c))


def permute_stacks(order: int, perm: Sequence[int]) -> Transform:
    stacks = _check_permutation(perm, order, "Stack permutation")
    return _from_coords(order, lambda r, c: (r, stacks[c // order] * order + c % order))


def permute_rows(order: int, band: int, perm: Sequence[int]) -> Transform:
    """Reorder the rows inside one band."""

    if not 0 <= band < order:
        raise ValueError(f"Band {band} outside 0..{order - 1}")
    rows = _check_permutation(perm, order, "Row permutation")

    def source(r: int, c: int) -> Tuple[int, int]:
        if r // order != band:
            return r, c
        return band * order + rows[r % order], c

    return _from_coords(order, source)


def permute_columns(order: int, stack: int, perm: Sequence[int]) -> Transform:
    if not 0 <= stack < order:
        raise ValueError(f"Stack {stack} outside 0..{order - 1}")
    cols = _check_permutation(perm, order, "Column permutation")

    def source(r: int, c: int) -> Tuple[int, int]:
        if c // order != stack:
            return r, c
        return r, stack * order + cols[c % order]

    return _from_coords(order, source)


def relabel(order: int, mapping: Union[Mapping[int, int], Sequence[int]]) -> Transform:
    """Rename digits; ``mapping`` sends each old digit to its new label.

    A sequence is read as ``mapping[d - 1]`` being the new label of ``d``.
    """

    side = order * order
    if isinstance(mapping, Mapping):
        labels = [mapping.get(digit, 0) for digit in range(1, side + 1)]
    else:
        labels = list(mapping)
    if sorted(labels) != list(range(1, side + 1)):
        raise ValueError(f"Relabeling must be a bijection over 1..{side}")
    cells = tuple(range(side * side))
    return Transform(order, cells, (0, *labels))


def random_transform(order: int = DEFAULT_ORDER, rng: Optional[random.Random] = None) -> Transform:
    """Compose random band/stack/row/column permutations, an optional transpose and a relabeling."""

    rng = rng or random.Random()
    side = order * order

    def shuffled(size: int) -> List[int]:
        items = list(range(size))
        rng.shuffle(items)
        return items

    result = permute_bands(order, shuffled(order)).then(permute_stacks(order, shuffled(order)))
    for index in range(order):
        result = result.then(permute_rows(order, index, shuffled(order)))
        result = result.then(permute_columns(order, index, shuffled(order)))
    if rng.random() < 0.5:
        result = result.then(transpose(order))
    labels = [digit + 1 for digit in shuffled(side)]
    return result.then(relabel(order, labels))


T = TypeVar("T", Grid, Puzzle)


def transform(target: T, operation: Transform) -> T:
    """Apply ``operation`` to a grid or a puzzle, returning the same kind of value."""

    if isinstance(target, Puzzle):
        return operation.apply_puzzle(target)
    return operation.apply(target)
