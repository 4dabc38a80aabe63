"""Main puzzle generator orchestration.

Two-phase approach:
  1. Construction: fill an empty grid by randomized fewest-candidates backtracking,
     propagating singles after every random assignment.
  2. Digging: clear cells in random order, keeping each removal only while the
     search engine still proves a unique solution.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.constants import (DEFAULT_ORDER, Difficulty, PropagationStatus, SearchMode, SolutionCount,
                              Technique)
from ..core.exceptions import BudgetExceeded, GenerationError, GeneratorInvariantError
from ..core.models import Puzzle
from ..utils.logger import get_logger
from .candidates import CandidateTracker
from .grid import Grid
from .propagator import Propagator
from .rating import DifficultyEstimator
from .regions import regions_for
from .search import SearchConfig, SearchEngine, select_cell
from .transform import random_transform


LOGGER = get_logger(__name__)

# Construction restarts from a fresh first box once a branch tree grows past
# CONSTRUCTION_NODE_FACTOR * cell_count nodes.
CONSTRUCTION_NODE_FACTOR = 4
CONSTRUCTION_RESTARTS = 20


@dataclass
class GeneratorConfig:
    order: int = DEFAULT_ORDER
    seed: Optional[int] = None
    target_empty_cells: Optional[int] = None
    target_difficulty: Optional[Difficulty] = None
    retry_limit: int = 3
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self) -> None:
        cell_count = regions_for(self.order).cell_count
        if self.target_empty_cells is not None and not 1 <= self.target_empty_cells <= cell_count:
            raise ValueError(f"target_empty_cells must be within 1..{cell_count}")
        if self.retry_limit < 1:
            raise ValueError("retry_limit must be at least 1")
        if self.target_difficulty is not None:
            self.target_difficulty = Difficulty(self.target_difficulty)


class PuzzleGenerator:
    """High-level orchestrator: complete grid construction then digging."""

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self.config = config or GeneratorConfig()
        self.rng = random.Random(self.config.seed)
        self.regions = regions_for(self.config.order)
        self.engine = SearchEngine(self.config.search)
        self.estimator = DifficultyEstimator(self.config.search)
        self.propagator = Propagator((Technique.NAKED_SINGLE, Technique.HIDDEN_SINGLE))
        self._nodes = 0

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(self) -> Puzzle:
        target = self.config.target_difficulty
        for attempt in range(1, self.config.retry_limit + 1):
            LOGGER.info("Generation attempt %s/%s", attempt, self.config.retry_limit)
            solution = self.build_solution()
            puzzle = self.dig(solution)
            report = self.estimator.estimate(puzzle)
            if target is not None and report.difficulty != target:
                LOGGER.warning(
                    "Attempt produced %s puzzle, wanted %s", report.difficulty.label, target.label
                )
                continue
            LOGGER.info(
                "Generated %s puzzle with %s empty cells (score %s)",
                report.difficulty.label, puzzle.empty_count, report.score,
            )
            return Puzzle(
                order=self.config.order,
                givens=puzzle.values,
                solution=tuple(value or 0 for value in solution.values),
                difficulty=report.difficulty,
                seed=self.config.seed,
                score=report.score,
            )
        raise GenerationError(
            f"Unable to generate a {target.label if target is not None else ''} puzzle "
            f"after {self.config.retry_limit} attempts"
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def build_solution(self) -> Grid:
        """Return a random complete grid."""

        node_limit = CONSTRUCTION_NODE_FACTOR * self.regions.cell_count
        for attempt in range(1, CONSTRUCTION_RESTARTS + 1):
            grid = Grid(self.config.order)
            digits = list(range(1, self.regions.side + 1))
            self.rng.shuffle(digits)
            # Any permutation is legal in the first box, so it is seeded without search.
            for index, digit in zip(self.regions.boxes[0], digits):
                grid._set(index, digit)

            tracker = CandidateTracker(grid)
            self._nodes = 0
            try:
                filled = self._fill(tracker, node_limit)
            except BudgetExceeded as exc:
                LOGGER.debug("Construction attempt %s restarted: %s", attempt, exc)
                continue
            if not filled:
                raise GeneratorInvariantError("Construction exhausted every branch from a legal first box")
            LOGGER.debug("Constructed complete grid %s", grid.encode())
            return grid
        raise GeneratorInvariantError(
            f"Construction did not finish within {CONSTRUCTION_RESTARTS} restarts"
        )

    def _fill(self, tracker: CandidateTracker, node_limit: int) -> bool:
        self._nodes += 1
        if self._nodes > node_limit:
            raise BudgetExceeded(f"Construction exceeded {node_limit} nodes", nodes=node_limit)
        mark = tracker.checkpoint()
        status = self.propagator.run(tracker)
        if status == PropagationStatus.SOLVED:
            return True
        if status == PropagationStatus.CONTRADICTION:
            tracker.rollback(mark)
            return False

        index = select_cell(tracker)
        options = tracker.digits(index)
        self.rng.shuffle(options)
        for digit in options:
            inner = tracker.checkpoint()
            tracker.assign(index, digit)
            if self._fill(tracker, node_limit):
                return True
            tracker.rollback(inner)
        tracker.rollback(mark)
        return False

    # ------------------------------------------------------------------
    # Digging
    # ------------------------------------------------------------------
    def dig(self, solution: Grid) -> Grid:
        """Clear cells greedily while the puzzle stays uniquely solvable.

        The removal order is random, so the result is a local optimum: some
        other order may clear more cells.
        """

        puzzle = solution.copy()
        baseline = self.engine.search(puzzle, SearchMode.UNIQUE)
        if baseline.count != SolutionCount.ONE:
            raise GeneratorInvariantError(
                f"Constructed grid reports {baseline.count.value} solutions instead of one"
            )

        target_empty = self.config.target_empty_cells or self.regions.cell_count
        max_difficulty = self.config.target_difficulty
        positions = list(range(self.regions.cell_count))
        self.rng.shuffle(positions)
        side = self.regions.side

        for index in positions:
            if puzzle.empty_count >= target_empty:
                break
            row, col = divmod(index, side)
            digit = puzzle.clear(row, col)
            if digit is None:
                continue
            try:
                result = self.engine.search(puzzle, SearchMode.UNIQUE)
                keep = result.count == SolutionCount.ONE
                if result.count == SolutionCount.ZERO:
                    raise GeneratorInvariantError(
                        f"Clearing {(row, col)} left a grid with no solution"
                    )
                if keep and max_difficulty is not None:
                    keep = self.estimator.rate(puzzle) <= max_difficulty
            except BudgetExceeded as exc:
                LOGGER.debug("Budget exhausted checking %s: %s", (row, col), exc)
                keep = False
            if not keep:
                puzzle.place(row, col, digit)

        LOGGER.info(
            "Dug %s of %s cells (target %s)", puzzle.empty_count, self.regions.cell_count, target_empty
        )
        return puzzle

    # ------------------------------------------------------------------
    # Cheap variants
    # ------------------------------------------------------------------
    def variants(self, puzzle: Puzzle, count: int) -> List[Puzzle]:
        """Equivalent puzzles obtained through random symmetry transforms."""

        return [random_transform(puzzle.order, self.rng).apply_puzzle(puzzle) for _ in range(count)]


def generate(
    seed: Optional[int] = None,
    target_empty_cells: Optional[int] = None,
    *,
    order: int = DEFAULT_ORDER,
    target_difficulty: Optional[Difficulty] = None,
    retry_limit: int = 3,
) -> Puzzle:
    """Generate a uniquely solvable puzzle; identical arguments give identical puzzles."""

    config = GeneratorConfig(
        order=order,
        seed=seed,
        target_empty_cells=target_empty_cells,
        target_difficulty=target_difficulty,
        retry_limit=retry_limit,
    )
    return PuzzleGenerator(config).generate()
