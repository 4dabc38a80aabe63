"""Per-cell candidate bitmasks with an undo trail for backtracking."""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.exceptions import ConflictError
from .grid import Grid


def bit(digit: int) -> int:
    return 1 << (digit - 1)


def digits_of(mask: int) -> List[int]:
    """Ascending digits whose bits are set in ``mask``."""
    digits: List[int] = []
    while mask:
        low = mask & -mask
        digits.append(low.bit_length())
        mask ^= low
    return digits


def single_digit(mask: int) -> int:
    return mask.bit_length()


class CandidateTracker:
    """Tracks which digits every empty cell of a working grid may still take.

    Placements done through :meth:`assign` and eliminations done through
    :meth:`eliminate` are journaled so :meth:`rollback` can restore the exact
    prior state without copying the grid.
    """

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.regions = grid.regions
        self.masks: List[int] = []
        # (index, previous mask, previous value)
        self._trail: List[Tuple[int, int, int]] = []
        self.recompute()

    # ------------------------------------------------------------------
    # Bulk computation
    # ------------------------------------------------------------------
    def recompute(self, grid: Optional[Grid] = None) -> None:
        if grid is not None:
            self.grid = grid
            self.regions = grid.regions
        regions = self.regions
        used = [0] * len(regions.units)
        for unit_index, unit in enumerate(regions.units):
            mask = 0
            for index in unit:
                value = self.grid.value_at(index)
                if value:
                    mask |= bit(value)
            used[unit_index] = mask

        full = regions.full_mask
        masks = [0] * regions.cell_count
        for index in range(regions.cell_count):
            if self.grid.value_at(index):
                continue
            row_unit, col_unit, box_unit = regions.units_of[index]
            masks[index] = full & ~(used[row_unit] | used[col_unit] | used[box_unit])
        self.masks = masks
        self._trail.clear()

    def _scan(self, index: int) -> int:
        if self.grid.value_at(index):
            return 0
        taken = 0
        for peer in self.regions.peers[index]:
            value = self.grid.value_at(peer)
            if value:
                taken |= bit(value)
        return self.regions.full_mask & ~taken

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def candidates(self, index: int) -> int:
        return self.masks[index]

    def mask(self, row: int, col: int) -> int:
        return self.masks[row * self.regions.side + col]

    def digits(self, index: int) -> List[int]:
        return digits_of(self.masks[index])

    def count(self, index: int) -> int:
        return self.masks[index].bit_count()

    def empty_indices(self) -> List[int]:
        return self.grid.empty_indices()

    def is_solved(self) -> bool:
        return self.grid.is_complete()

    # ------------------------------------------------------------------
    # Journaled mutation
    # ------------------------------------------------------------------
    def assign(self, index: int, digit: int) -> None:
        """Place ``digit`` and strike it from every peer's candidates."""

        if self.grid.value_at(index):
            raise ConflictError(f"Cell {divmod(index, self.regions.side)} is already filled")
        flag = bit(digit)
        if not self.masks[index] & flag:
            raise ConflictError(
                f"Digit {digit} is not a candidate for {divmod(index, self.regions.side)}"
            )
        trail = self._trail
        masks = self.masks
        trail.append((index, masks[index], 0))
        masks[index] = 0
        self.grid._set(index, digit)
        for peer in self.regions.peers[index]:
            if masks[peer] & flag:
                trail.append((peer, masks[peer], self.grid.value_at(peer)))
                masks[peer] &= ~flag

    def eliminate(self, index: int, bits: int) -> bool:
        current = self.masks[index]
        if not current & bits:
            return False
        self._trail.append((index, current, self.grid.value_at(index)))
        self.masks[index] = current & ~bits
        return True

    def checkpoint(self) -> int:
        return len(self._trail)

    def rollback(self, mark: int) -> None:
        trail = self._trail
        while len(trail) > mark:
            index, mask, value = trail.pop()
            self.masks[index] = mask
            self.grid._set(index, value)

    # ------------------------------------------------------------------
    # Unjournaled removal
    # ------------------------------------------------------------------
    def remove(self, index: int) -> Optional[int]:
        """Clear a filled cell and rebuild the candidates it affected.

        A peer may still be blocked from the freed digit by another region,
        so every affected mask is rescanned rather than patched.
        """

        previous = self.grid.value_at(index)
        if not previous:
            return None
        self.grid._set(index, 0)
        self.masks[index] = self._scan(index)
        for peer in self.regions.peers[index]:
            if not self.grid.value_at(peer):
                self.masks[peer] = self._scan(peer)
        self._trail.clear()
        return previous
