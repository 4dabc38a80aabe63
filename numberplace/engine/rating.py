"""Difficulty classification by replaying propagation tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..core.constants import DIFFICULTY_TIERS, Difficulty, SearchMode, SolutionCount, Technique
from ..core.exceptions import NotUniqueError
from ..core.models import Puzzle
from ..utils.logger import get_logger
from .grid import Grid
from .propagator import propagate
from .search import SearchConfig, SearchEngine


LOGGER = get_logger(__name__)


@dataclass
class RatingReport:
    difficulty: Difficulty
    techniques: Dict[Technique, int] = field(default_factory=dict)
    nodes: int = 0
    backtracks: int = 0
    branch_score: int = 0
    score: int = 0


def score_multiplier(cell_count: int) -> int:
    """First power of ten strictly greater than the number of cells."""

    multiplier = 1
    while multiplier <= cell_count:
        multiplier *= 10
    return multiplier


class DifficultyEstimator:
    """Finds the cheapest technique tier that solves a puzzle without guessing.

    Tiers come from ``DIFFICULTY_TIERS``; a puzzle none of them can finish is
    ``EXPERT``. The numeric ``score`` follows ``branch_score * C + E`` where
    ``branch_score`` sums ``(B - 1) ** 2`` over the branching factors met on
    the search path to the solution, ``C`` is the first power of ten above the
    cell count and ``E`` the number of empty cells.
    """

    def __init__(self, search_config: Optional[SearchConfig] = None) -> None:
        self.engine = SearchEngine(search_config)

    def estimate(self, puzzle: Union[Puzzle, Grid]) -> RatingReport:
        grid = puzzle.grid() if isinstance(puzzle, Puzzle) else puzzle
        result = self.engine.search(grid, SearchMode.UNIQUE)
        if result.count != SolutionCount.ONE:
            raise NotUniqueError(f"Puzzle has {result.count.value} solutions; rating needs exactly one")

        score = result.branch_score * score_multiplier(grid.regions.cell_count) + grid.empty_count
        difficulty = Difficulty.EXPERT
        techniques: Dict[Technique, int] = {}
        for tier, tier_techniques in DIFFICULTY_TIERS:
            outcome = propagate(grid, tier_techniques)
            techniques = outcome.counts
            if outcome.solved:
                difficulty = tier
                break
        LOGGER.debug(
            "Rated puzzle %s (score=%s, nodes=%s, backtracks=%s)",
            difficulty.label, score, result.nodes, result.backtracks,
        )
        return RatingReport(
            difficulty=difficulty,
            techniques=techniques,
            nodes=result.nodes,
            backtracks=result.backtracks,
            branch_score=result.branch_score,
            score=score,
        )

    def rate(self, puzzle: Union[Puzzle, Grid]) -> Difficulty:
        return self.estimate(puzzle).difficulty


def rate(puzzle: Union[Puzzle, Grid], search_config: Optional[SearchConfig] = None) -> Difficulty:
    """Classify ``puzzle`` into a :class:`Difficulty` label."""

    return DifficultyEstimator(search_config).rate(puzzle)
