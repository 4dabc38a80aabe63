"""Backtracking search with propagation, fewest-candidates branching and budgets."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from ..core.constants import PropagationStatus, SearchMode, SolutionCount, Technique
from ..core.exceptions import BudgetExceeded
from ..utils.logger import get_logger
from .candidates import CandidateTracker
from .grid import Grid, parse
from .propagator import Propagator


LOGGER = get_logger(__name__)

_LIMITS = {SearchMode.FIRST: 1, SearchMode.UNIQUE: 2, SearchMode.ALL: None}


@dataclass
class SearchConfig:
    """Propagation rules used at each node plus optional budgets."""

    techniques: Tuple[Technique, ...] = (Technique.NAKED_SINGLE, Technique.HIDDEN_SINGLE)
    node_budget: Optional[int] = None
    time_budget: Optional[float] = None

    def __post_init__(self) -> None:
        if self.node_budget is not None and self.node_budget < 1:
            raise ValueError("node_budget must be a positive integer")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError("time_budget must be positive seconds")
        self.techniques = tuple(self.techniques)


@dataclass
class SearchResult:
    count: SolutionCount
    solutions: List[Grid] = field(default_factory=list)
    nodes: int = 0
    backtracks: int = 0
    max_depth: int = 0
    branch_score: int = 0

    @property
    def solution(self) -> Optional[Grid]:
        return self.solutions[0] if self.solutions else None

    @property
    def unique(self) -> bool:
        return self.count == SolutionCount.ONE


@dataclass
class _SearchRun:
    limit: Optional[int]
    node_budget: Optional[int]
    deadline: Optional[float]
    solutions: List[Grid] = field(default_factory=list)
    nodes: int = 0
    backtracks: int = 0
    max_depth: int = 0
    branch_score: int = 0

    @property
    def done(self) -> bool:
        return self.limit is not None and len(self.solutions) >= self.limit

    def enter(self, depth: int) -> None:
        self.nodes += 1
        self.max_depth = max(self.max_depth, depth)
        if self.node_budget is not None and self.nodes > self.node_budget:
            raise BudgetExceeded(
                f"Search exceeded node budget of {self.node_budget}",
                nodes=self.nodes - 1,
                solutions=self.solutions,
            )
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise BudgetExceeded("Search exceeded its time budget", nodes=self.nodes, solutions=self.solutions)

    def record(self, grid: Grid, path_score: int) -> None:
        if not self.solutions:
            self.branch_score = path_score
        self.solutions.append(grid)


class SearchEngine:
    """Depth-first search over a private working copy of the grid."""

    def __init__(self, config: Optional[SearchConfig] = None) -> None:
        self.config = config or SearchConfig()
        self.propagator = Propagator(self.config.techniques)

    def search(self, grid: Union[Grid, str], mode: SearchMode = SearchMode.UNIQUE) -> SearchResult:
        if not isinstance(grid, Grid):
            grid = parse(grid)
        tracker = CandidateTracker(grid.copy())
        deadline = None
        if self.config.time_budget is not None:
            deadline = time.monotonic() + self.config.time_budget
        run = _SearchRun(limit=_LIMITS[mode], node_budget=self.config.node_budget, deadline=deadline)

        self._explore(tracker, run, depth=0, path_score=0)

        found = len(run.solutions)
        if found == 0:
            count = SolutionCount.ZERO
        elif found == 1:
            count = SolutionCount.ONE
        else:
            count = SolutionCount.MANY
        LOGGER.debug(
            "Search %s: %s after %s nodes (%s backtracks, depth %s)",
            mode.value, count.value, run.nodes, run.backtracks, run.max_depth,
        )
        return SearchResult(
            count=count,
            solutions=run.solutions,
            nodes=run.nodes,
            backtracks=run.backtracks,
            max_depth=run.max_depth,
            branch_score=run.branch_score,
        )

    def _explore(self, tracker: CandidateTracker, run: _SearchRun, depth: int, path_score: int) -> None:
        run.enter(depth)
        mark = tracker.checkpoint()
        status = self.propagator.run(tracker)
        if status == PropagationStatus.CONTRADICTION:
            run.backtracks += 1
            tracker.rollback(mark)
            return
        if status == PropagationStatus.SOLVED:
            run.record(tracker.grid.copy(), path_score)
            tracker.rollback(mark)
            return

        index = select_cell(tracker)
        options = tracker.digits(index)
        branch = (len(options) - 1) ** 2
        for digit in options:
            inner = tracker.checkpoint()
            tracker.assign(index, digit)
            self._explore(tracker, run, depth + 1, path_score + branch)
            tracker.rollback(inner)
            if run.done:
                break
        tracker.rollback(mark)


def select_cell(tracker: CandidateTracker) -> int:
    """Empty cell with the fewest candidates, lowest index on ties; ``-1`` if none."""

    best_index = -1
    best_count = tracker.regions.side + 1
    masks = tracker.masks
    for index in tracker.empty_indices():
        count = masks[index].bit_count()
        if count < best_count:
            best_index, best_count = index, count
            if count <= 1:
                break
    return best_index


def solve(
    grid: Union[Grid, str],
    mode: SearchMode = SearchMode.UNIQUE,
    config: Optional[SearchConfig] = None,
) -> SearchResult:
    """Solve ``grid`` and report how many solutions exist (up to the mode's limit)."""

    return SearchEngine(config).search(grid, mode)
