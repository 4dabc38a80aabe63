"""Number-place puzzle engine: solving, generation, rating and transforms.

This package exposes the public API surface via:

- ``numberplace.engine.grid``: ``parse`` / ``encode`` and the ``Grid`` model.
- ``numberplace.engine.search``: ``solve`` and the ``SearchEngine``.
- ``numberplace.engine.generator``: ``generate`` and the ``PuzzleGenerator``.
- ``numberplace.engine.rating``: ``rate`` and the ``DifficultyEstimator``.
- ``numberplace.engine.transform``: ``transform`` and the symmetry constructors.
"""

from .core.constants import Difficulty, SearchMode, SolutionCount, Technique
from .core.exceptions import (BudgetExceeded, ConflictError, InvalidGrid, NotUniqueError,
                              NumberPlaceError)
from .core.models import Cell, Puzzle
from .engine.generator import GeneratorConfig, PuzzleGenerator, generate
from .engine.grid import Grid, encode, parse
from .engine.rating import DifficultyEstimator, rate
from .engine.search import SearchConfig, SearchEngine, SearchResult, solve
from .engine.transform import Transform, transform

__all__ = [
    "BudgetExceeded",
    "Cell",
    "ConflictError",
    "Difficulty",
    "DifficultyEstimator",
    "GeneratorConfig",
    "Grid",
    "InvalidGrid",
    "NotUniqueError",
    "NumberPlaceError",
    "Puzzle",
    "PuzzleGenerator",
    "SearchConfig",
    "SearchEngine",
    "SearchMode",
    "SearchResult",
    "SolutionCount",
    "Technique",
    "Transform",
    "encode",
    "generate",
    "parse",
    "rate",
    "solve",
    "transform",
]

__version__ = "0.1.0"
