"""Pretty-print helpers for puzzle grids."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

from ..core.constants import ENCODE_BLANK, SYMBOLS

if TYPE_CHECKING:
    from ..core.models import Puzzle
    from ..engine.grid import Grid
    from ..engine.rating import RatingReport


def cell_symbol(value: Optional[int]) -> str:
    return SYMBOLS[value - 1] if value else ENCODE_BLANK


def format_grid(grid: Grid) -> str:
    """Render the grid with box separators, e.g. ``5 3 . | . 7 . | . . .``."""

    order, side = grid.order, grid.side
    divider = "-+-".join(["-" * (2 * order - 1)] * order)
    lines = []
    for r in range(side):
        if r and r % order == 0:
            lines.append(divider)
        groups = []
        for stack in range(order):
            groups.append(
                " ".join(cell_symbol(grid[r, stack * order + c]) for c in range(order))
            )
        lines.append(" | ".join(groups))
    return "\n".join(lines)


def pretty_print_grid(grid: Grid, *, label: str | None = None, stream=None) -> None:
    """Print the grid in a human-friendly format."""

    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(format_grid(grid), file=stream)


def print_puzzle_stats(
    puzzle: Puzzle,
    report: Optional[RatingReport] = None,
    *,
    stream=None,
) -> None:
    """Print puzzle, solution and rating details."""

    stream = stream or sys.stdout
    print(format_grid(puzzle.grid()), file=stream)
    print("", file=stream)
    print(f"Clues: {puzzle.clue_count}  Empty: {puzzle.empty_count}", file=stream)
    print(f"Difficulty: {puzzle.difficulty.label}", file=stream)
    if puzzle.seed is not None:
        print(f"Seed: {puzzle.seed}", file=stream)
    if report is not None:
        used = ", ".join(
            f"{technique.value.lower()}={count}" for technique, count in report.techniques.items() if count
        )
        print(f"Score: {report.score}  Techniques: {used or 'none'}", file=stream)
        print(f"Search nodes: {report.nodes}  Backtracks: {report.backtracks}", file=stream)
