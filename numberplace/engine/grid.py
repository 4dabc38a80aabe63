"""Grid representation, canonical encoding and placement helpers."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..core.constants import (BLANK_MARKERS, DEFAULT_ORDER, ENCODE_BLANK, SYMBOLS,
                              Dimensions, order_for_length)
from ..core.exceptions import ConflictError, InvalidGrid
from ..core.models import Cell
from ..utils.logger import get_logger
from .regions import Regions, regions_for


LOGGER = get_logger(__name__)

Token = Union[int, str, None]


def unit_name(unit: int, side: int) -> str:
    kind, number = divmod(unit, side)
    return f"{('row', 'column', 'box')[kind]} {number}"


def find_violations(values: Sequence[int], regions: Regions) -> List[str]:
    """Describe every duplicated digit, unit by unit.

    ``values`` is a row-major list of ints with ``0`` for empty cells; digits
    are assumed to be in range already.
    """

    messages: List[str] = []
    for unit_index, unit in enumerate(regions.units):
        seen: Dict[int, int] = {}
        for index in unit:
            digit = values[index]
            if not digit:
                continue
            if digit in seen:
                first = divmod(seen[digit], regions.side)
                second = divmod(index, regions.side)
                messages.append(
                    f"Digit {digit} repeated in {unit_name(unit_index, regions.side)} "
                    f"at {first} and {second}"
                )
            else:
                seen[digit] = index
    return messages


class Grid:
    """A square grid of ``side * side`` cells holding digits ``1..side`` or nothing.

    The constructor validates lengths, digit ranges and region uniqueness, so a
    ``Grid`` instance always satisfies the puzzle rules. ``place`` keeps that
    promise by refusing conflicting digits.
    """

    def __init__(self, order: int = DEFAULT_ORDER, values: Optional[Iterable[Optional[int]]] = None) -> None:
        try:
            self.regions = regions_for(order)
        except ValueError as exc:
            raise InvalidGrid(str(exc)) from exc
        self.dimensions = Dimensions(order)
        cell_count = self.regions.cell_count
        if values is None:
            self._values: List[int] = [0] * cell_count
            return

        raw = list(values)
        if len(raw) != cell_count:
            raise InvalidGrid(f"Expected {cell_count} cells for order {order}, got {len(raw)}")
        self._values = [self._checked_digit(value, index) for index, value in enumerate(raw)]
        violations = find_violations(self._values, self.regions)
        if violations:
            raise InvalidGrid(violations[0])

    @classmethod
    def from_values(cls, values: Sequence[Optional[int]]) -> "Grid":
        """Build a grid, inferring its order from the number of values."""

        try:
            order = order_for_length(len(values))
        except ValueError as exc:
            raise InvalidGrid(str(exc)) from exc
        return cls(order, values)

    def _checked_digit(self, value: Optional[int], index: int) -> int:
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidGrid(f"Cell {divmod(index, self.side)} holds non-integer value {value!r}")
        if value == 0:
            return 0
        if not 1 <= value <= self.side:
            raise InvalidGrid(f"Digit {value} at {divmod(index, self.side)} is outside 1..{self.side}")
        return value

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def order(self) -> int:
        return self.regions.order

    @property
    def side(self) -> int:
        return self.regions.side

    @property
    def values(self) -> Tuple[Optional[int], ...]:
        return tuple(value or None for value in self._values)

    def value_at(self, index: int) -> int:
        """Raw value at a row-major index, ``0`` when empty."""
        return self._values[index]

    def cell(self, row: int, col: int) -> Cell:
        index = self._index(row, col)
        return Cell(row=row, col=col, digit=self._values[index] or None)

    def __getitem__(self, key: Tuple[int, int]) -> Optional[int]:
        row, col = key
        return self._values[self._index(row, col)] or None

    def cells(self) -> Iterator[Cell]:
        for index, value in enumerate(self._values):
            row, col = divmod(index, self.side)
            yield Cell(row=row, col=col, digit=value or None)

    def rows(self) -> List[List[Optional[int]]]:
        side = self.side
        return [[value or None for value in self._values[r * side:(r + 1) * side]] for r in range(side)]

    def empty_indices(self) -> List[int]:
        return [index for index, value in enumerate(self._values) if not value]

    @property
    def empty_count(self) -> int:
        return self._values.count(0)

    @property
    def filled_count(self) -> int:
        return len(self._values) - self.empty_count

    def is_complete(self) -> bool:
        return 0 not in self._values

    def is_empty(self) -> bool:
        return not any(self._values)

    def _index(self, row: int, col: int) -> int:
        if not self.dimensions.contains(row, col):
            raise IndexError(f"Cell {(row, col)} outside {self.side}x{self.side} grid")
        return self.dimensions.index(row, col)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def can_place(self, row: int, col: int, digit: int) -> bool:
        index = self._index(row, col)
        if self._values[index] or not 1 <= digit <= self.side:
            return False
        return all(self._values[peer] != digit for peer in self.regions.peers[index])

    def place(self, row: int, col: int, digit: int) -> None:
        index = self._index(row, col)
        if self._values[index]:
            raise ConflictError(f"Cell {(row, col)} already holds {self._values[index]}")
        if not 1 <= digit <= self.side:
            raise ConflictError(f"Digit {digit} is outside 1..{self.side}")
        for peer in self.regions.peers[index]:
            if self._values[peer] == digit:
                raise ConflictError(
                    f"Digit {digit} at {(row, col)} conflicts with {divmod(peer, self.side)}"
                )
        self._values[index] = digit

    def clear(self, row: int, col: int) -> Optional[int]:
        index = self._index(row, col)
        previous = self._values[index]
        self._values[index] = 0
        return previous or None

    def _set(self, index: int, digit: int) -> None:
        # Unchecked write reserved for working copies driven by the tracker.
        self._values[index] = digit

    def copy(self) -> "Grid":
        clone = Grid.__new__(Grid)
        clone.regions = self.regions
        clone.dimensions = self.dimensions
        clone._values = list(self._values)
        return clone

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def encode(self) -> str:
        return "".join(SYMBOLS[value - 1] if value else ENCODE_BLANK for value in self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.order == other.order and self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Grid(order={self.order}, encoded={self.encode()!r})"

    def __str__(self) -> str:
        from ..utils.pretty import format_grid

        return format_grid(self)


def decode_token(token: Token) -> Optional[int]:
    if token is None:
        return None
    if isinstance(token, bool):
        raise InvalidGrid(f"Unsupported cell value {token!r}")
    if isinstance(token, int):
        return token or None
    if isinstance(token, str):
        text = token.strip()
        if len(text) == 1:
            if text in BLANK_MARKERS:
                return None
            position = SYMBOLS.find(text.upper())
            if position >= 0:
                return position + 1
        elif text.isascii() and text.isdigit():
            return int(text) or None
    raise InvalidGrid(f"Unrecognized cell symbol {token!r}")


def parse(sequence: Union[str, Iterable[Token], Grid], order: Optional[int] = None) -> Grid:
    """Build a grid from the flat row-major encoding.

    Strings are read symbol by symbol with whitespace ignored; other iterables
    may mix ints, symbols and ``None``.
    """

    if isinstance(sequence, Grid):
        return sequence.copy()
    if isinstance(sequence, str):
        tokens: List[Token] = [ch for ch in sequence if not ch.isspace()]
    else:
        tokens = list(sequence)
    if order is None:
        try:
            order = order_for_length(len(tokens))
        except ValueError as exc:
            raise InvalidGrid(f"Cannot infer grid size: {exc}") from exc
    grid = Grid(order, [decode_token(token) for token in tokens])
    LOGGER.debug("Parsed %sx%s grid with %s givens", grid.side, grid.side, grid.filled_count)
    return grid


def encode(grid: Grid) -> str:
    return grid.encode()
