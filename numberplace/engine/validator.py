"""Deterministic rule validation for grids and puzzles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from ..core.constants import SearchMode, SolutionCount, order_for_length
from ..core.exceptions import InvalidGrid, ValidationError
from ..utils.logger import get_logger
from .grid import Grid, Token, decode_token, find_violations
from .regions import regions_for
from .search import SearchConfig, SearchEngine
from .solver import solve_with_cpsat


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class GridValidator:
    """Reports every rule violation instead of stopping at the first one.

    With ``cross_check`` enabled the CP-SAT model is solved as well and must
    agree with the backtracking engine on the solution count.
    """

    def __init__(
        self,
        cross_check: bool = False,
        search_config: Optional[SearchConfig] = None,
        cpsat_timeout: float = 10.0,
    ) -> None:
        self.cross_check = cross_check
        self.engine = SearchEngine(search_config)
        self.cpsat_timeout = cpsat_timeout

    def validate(self, source: Union[Grid, str, Iterable[Token]], require_unique: bool = False) -> ValidationResult:
        messages: List[str] = []
        try:
            order, values = self._check_shape(source)
            messages.extend(self._check_digits(values, order * order))
            if not messages:
                messages.extend(find_violations(values, regions_for(order)))
            if messages:
                raise ValidationError(f"{len(messages)} rule violation(s)")
            if require_unique or self.cross_check:
                self._check_solutions(Grid(order, values), require_unique)
        except ValidationError as exc:
            if not messages:
                messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    @staticmethod
    def _check_shape(source: Union[Grid, str, Iterable[Token]]) -> Tuple[int, List[int]]:
        if isinstance(source, Grid):
            return source.order, [source.value_at(i) for i in range(source.regions.cell_count)]
        if isinstance(source, str):
            tokens: List[Token] = [ch for ch in source if not ch.isspace()]
        else:
            tokens = list(source)
        try:
            order = order_for_length(len(tokens))
            values = [decode_token(token) or 0 for token in tokens]
        except (ValueError, InvalidGrid) as exc:
            raise ValidationError(str(exc)) from exc
        return order, values

    @staticmethod
    def _check_digits(values: List[int], side: int) -> List[str]:
        return [
            f"Digit {value} at {divmod(index, side)} is outside 1..{side}"
            for index, value in enumerate(values)
            if value and not 1 <= value <= side
        ]

    def _check_solutions(self, grid: Grid, require_unique: bool) -> None:
        result = self.engine.search(grid, SearchMode.UNIQUE)
        if require_unique and result.count != SolutionCount.ONE:
            raise ValidationError(f"Expected a unique solution, search found {result.count.value}")
        if not self.cross_check:
            return
        reference = solve_with_cpsat(grid, limit=2, timeout=self.cpsat_timeout)
        if reference.count != result.count:
            raise ValidationError(
                f"CP-SAT reports {reference.count.value} solutions but search reports {result.count.value}"
            )
        if result.count == SolutionCount.ONE and reference.solution != result.solution:
            raise ValidationError("CP-SAT and search disagree on the unique solution")
