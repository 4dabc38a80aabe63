"""Read-only region tables shared by every component for a given order."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple

from ..core.constants import MAX_ORDER, MIN_ORDER


Unit = Tuple[int, ...]


@dataclass(frozen=True)
class Segment:
    """Cells where one box crosses one row or column.

    ``box_rest`` and ``line_rest`` hold the remaining cells of the box and of
    the line; locked-candidate rules eliminate from one of them.
    """

    box: int
    line: int
    cells: Unit
    box_rest: Unit
    line_rest: Unit


@dataclass(frozen=True)
class Regions:
    order: int
    side: int
    cell_count: int
    full_mask: int
    rows: Tuple[Unit, ...]
    cols: Tuple[Unit, ...]
    boxes: Tuple[Unit, ...]
    units: Tuple[Unit, ...]
    units_of: Tuple[Tuple[int, int, int], ...]
    peers: Tuple[Unit, ...]
    segments: Tuple[Segment, ...]

    def box_of(self, index: int) -> int:
        row, col = divmod(index, self.side)
        return (row // self.order) * self.order + col // self.order


@lru_cache(maxsize=None)
def regions_for(order: int) -> Regions:
    """Build (once per order) the unit, peer and segment tables."""

    if not MIN_ORDER <= order <= MAX_ORDER:
        raise ValueError(f"Unsupported order {order}; expected {MIN_ORDER}..{MAX_ORDER}")
    side = order * order
    cell_count = side * side

    rows = tuple(tuple(r * side + c for c in range(side)) for r in range(side))
    cols = tuple(tuple(r * side + c for r in range(side)) for c in range(side))
    boxes: List[Unit] = []
    for band in range(order):
        for stack in range(order):
            boxes.append(
                tuple(
                    (band * order + dr) * side + stack * order + dc
                    for dr in range(order)
                    for dc in range(order)
                )
            )
    units = rows + cols + tuple(boxes)

    units_of: List[Tuple[int, int, int]] = []
    peers: List[Unit] = []
    for index in range(cell_count):
        row, col = divmod(index, side)
        box = (row // order) * order + col // order
        units_of.append((row, side + col, 2 * side + box))
        members = set(rows[row]) | set(cols[col]) | set(boxes[box])
        members.discard(index)
        peers.append(tuple(sorted(members)))

    segments: List[Segment] = []
    for box_index, box_cells in enumerate(boxes):
        box_set = set(box_cells)
        for line_index, line_cells in enumerate(rows + cols):
            shared = tuple(i for i in line_cells if i in box_set)
            if not shared:
                continue
            segments.append(
                Segment(
                    box=2 * side + box_index,
                    line=line_index,
                    cells=shared,
                    box_rest=tuple(i for i in box_cells if i not in shared),
                    line_rest=tuple(i for i in line_cells if i not in box_set),
                )
            )

    return Regions(
        order=order,
        side=side,
        cell_count=cell_count,
        full_mask=(1 << side) - 1,
        rows=rows,
        cols=cols,
        boxes=tuple(boxes),
        units=units,
        units_of=tuple(units_of),
        peers=tuple(peers),
        segments=tuple(segments),
    )
