"""CP-SAT cross-check solver using OR-Tools.

The backtracking engine in :mod:`.search` is the production solver; this
module models the same rules as an all-different CP-SAT problem so uniqueness
claims can be confirmed by an independent implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ortools.sat.python import cp_model

from ..core.constants import SolutionCount
from ..core.exceptions import BudgetExceeded
from ..utils.logger import get_logger
from .grid import Grid


LOGGER = get_logger(__name__)


@dataclass
class CpSatResult:
    count: SolutionCount
    solutions: List[Grid] = field(default_factory=list)
    status: str = ""

    @property
    def solution(self) -> Optional[Grid]:
        return self.solutions[0] if self.solutions else None


class _SolutionCollector(cp_model.CpSolverSolutionCallback):
    """Records solutions and stops the search once ``limit`` are known."""

    def __init__(self, cell_vars: List[cp_model.IntVar], order: int, limit: Optional[int]) -> None:
        super().__init__()
        self._cell_vars = cell_vars
        self._order = order
        self._limit = limit
        self.solutions: List[Grid] = []

    def on_solution_callback(self) -> None:
        values = [self.value(var) for var in self._cell_vars]
        self.solutions.append(Grid(self._order, values))
        if self._limit is not None and len(self.solutions) >= self._limit:
            self.stop_search()


def solve_with_cpsat(grid: Grid, limit: Optional[int] = 2, timeout: float = 10.0) -> CpSatResult:
    """Count solutions of ``grid`` up to ``limit`` (``None`` enumerates all).

    Args:
        grid: Grid to solve; never mutated.
        limit: Stop after this many solutions. ``2`` answers the uniqueness
            question, ``1`` only existence.
        timeout: Solver time limit in seconds.

    Returns:
        A :class:`CpSatResult`. When the time limit hits before the count is
        settled, :class:`BudgetExceeded` is raised instead.
    """

    regions = grid.regions
    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell variables (givens get a fixed domain)
    # ------------------------------------------------------------------
    cell_vars: List[cp_model.IntVar] = []
    for index in range(regions.cell_count):
        row, col = divmod(index, regions.side)
        given = grid.value_at(index)
        if given:
            cell_vars.append(model.new_int_var(given, given, f"C_{row}_{col}"))
        else:
            cell_vars.append(model.new_int_var(1, regions.side, f"C_{row}_{col}"))

    # ------------------------------------------------------------------
    # Step 2: One all-different constraint per row, column and box
    # ------------------------------------------------------------------
    for unit in regions.units:
        model.add_all_different([cell_vars[index] for index in unit])

    # ------------------------------------------------------------------
    # Step 3: Enumerate up to the limit
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.enumerate_all_solutions = True
    solver.parameters.num_workers = 1

    LOGGER.info(
        "CP-SAT: %d empty cells, %d units, solving (limit=%s, timeout=%0.1fs)...",
        grid.empty_count, len(regions.units), limit, timeout,
    )
    collector = _SolutionCollector(cell_vars, grid.order, limit)
    status = solver.solve(model, collector)
    status_name = solver.status_name(status)
    found = len(collector.solutions)

    if found >= 2:
        count = SolutionCount.MANY
    elif found == 1 and (limit == 1 or status == cp_model.OPTIMAL):
        count = SolutionCount.ONE
    elif found == 0 and status == cp_model.INFEASIBLE:
        count = SolutionCount.ZERO
    else:
        LOGGER.warning("CP-SAT: count unsettled (status=%s, found=%d)", status_name, found)
        raise BudgetExceeded(
            f"CP-SAT stopped with status {status_name} after {found} solution(s)",
            solutions=collector.solutions,
        )

    LOGGER.info("CP-SAT: %s (status=%s) in %.2fs", count.value, status_name, solver.wall_time)
    return CpSatResult(count=count, solutions=collector.solutions, status=status_name)
