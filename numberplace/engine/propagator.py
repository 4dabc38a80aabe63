"""Constraint propagation to a fixpoint using interchangeable elimination rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from ..core.constants import ALL_TECHNIQUES, PropagationStatus, Technique
from ..core.exceptions import Contradiction
from ..utils.logger import get_logger
from .candidates import CandidateTracker, bit, digits_of, single_digit
from .grid import Grid, unit_name


LOGGER = get_logger(__name__)


class PropagationRule(Protocol):
    """One elimination pass over the tracker; returns how many changes it made."""

    technique: Technique

    def apply(self, tracker: CandidateTracker) -> int:
        """Mutate ``tracker`` and return the number of placements/eliminations."""


class NakedSingle:
    """Fill every empty cell that has exactly one candidate left."""

    technique = Technique.NAKED_SINGLE

    def apply(self, tracker: CandidateTracker) -> int:
        placed = 0
        masks = tracker.masks
        for index in tracker.empty_indices():
            mask = masks[index]
            if mask and not mask & (mask - 1):
                tracker.assign(index, single_digit(mask))
                placed += 1
            elif not mask and not tracker.grid.value_at(index):
                # An earlier placement in this pass emptied the cell.
                raise Contradiction(f"No candidates left for {divmod(index, tracker.regions.side)}")
        return placed


class HiddenSingle:
    """Fill a digit that fits in only one cell of some row, column or box."""

    technique = Technique.HIDDEN_SINGLE

    def apply(self, tracker: CandidateTracker) -> int:
        placed = 0
        masks = tracker.masks
        side = tracker.regions.side
        for unit_index, unit in enumerate(tracker.regions.units):
            once = twice = 0
            for index in unit:
                mask = masks[index]
                twice |= once & mask
                once |= mask
            singles = once & ~twice
            if not singles:
                continue
            for digit in digits_of(singles):
                flag = bit(digit)
                target = next((i for i in unit if masks[i] & flag), None)
                if target is None:
                    if any(tracker.grid.value_at(i) == digit for i in unit):
                        continue
                    raise Contradiction(f"Digit {digit} has no place left in {unit_name(unit_index, side)}")
                tracker.assign(target, digit)
                placed += 1
        return placed


class PointingCandidates:
    """A digit confined to one line inside a box is removed from the rest of that line."""

    technique = Technique.POINTING

    def apply(self, tracker: CandidateTracker) -> int:
        return _locked(tracker, pointing=True)


class ClaimingCandidates:
    """A digit confined to one box inside a line is removed from the rest of that box."""

    technique = Technique.CLAIMING

    def apply(self, tracker: CandidateTracker) -> int:
        return _locked(tracker, pointing=False)


def _locked(tracker: CandidateTracker, pointing: bool) -> int:
    masks = tracker.masks
    eliminated = 0
    for segment in tracker.regions.segments:
        inside = 0
        for index in segment.cells:
            inside |= masks[index]
        if not inside:
            continue
        # Digits absent from the "source" remainder are locked in the segment.
        source, target = (segment.box_rest, segment.line_rest) if pointing else (segment.line_rest, segment.box_rest)
        outside = 0
        for index in source:
            outside |= masks[index]
        locked = inside & ~outside
        if not locked:
            continue
        for index in target:
            if tracker.eliminate(index, locked):
                eliminated += 1
    return eliminated


RULES: Dict[Technique, PropagationRule] = {
    Technique.NAKED_SINGLE: NakedSingle(),
    Technique.HIDDEN_SINGLE: HiddenSingle(),
    Technique.POINTING: PointingCandidates(),
    Technique.CLAIMING: ClaimingCandidates(),
}


@dataclass
class PropagationResult:
    status: PropagationStatus
    grid: Grid
    counts: Dict[Technique, int] = field(default_factory=dict)

    @property
    def solved(self) -> bool:
        return self.status == PropagationStatus.SOLVED


class Propagator:
    """Applies a rule set to a fixpoint, cheapest rule first."""

    def __init__(
        self,
        techniques: Iterable[Technique] = ALL_TECHNIQUES,
        rules: Optional[Sequence[PropagationRule]] = None,
    ) -> None:
        if rules is None:
            wanted = set(techniques)
            rules = [RULES[technique] for technique in ALL_TECHNIQUES if technique in wanted]
        self.rules: List[PropagationRule] = list(rules)

    @property
    def techniques(self) -> List[Technique]:
        return [rule.technique for rule in self.rules]

    def run(self, tracker: CandidateTracker, counts: Optional[Dict[Technique, int]] = None) -> PropagationStatus:
        """Propagate in place; ``counts`` (if given) accumulates rule usage."""

        try:
            while True:
                self.check(tracker)
                if tracker.is_solved():
                    return PropagationStatus.SOLVED
                for rule in self.rules:
                    changed = rule.apply(tracker)
                    if changed:
                        if counts is not None:
                            counts[rule.technique] = counts.get(rule.technique, 0) + changed
                        break
                else:
                    return PropagationStatus.STALLED
        except Contradiction as exc:
            LOGGER.debug("Propagation contradiction: %s", exc)
            return PropagationStatus.CONTRADICTION

    @staticmethod
    def check(tracker: CandidateTracker) -> None:
        """Raise :class:`Contradiction` if the working grid cannot be completed."""

        regions = tracker.regions
        masks = tracker.masks
        grid = tracker.grid
        for index in range(regions.cell_count):
            if not masks[index] and not grid.value_at(index):
                raise Contradiction(f"No candidates left for {divmod(index, regions.side)}")
        full = regions.full_mask
        for unit_index, unit in enumerate(regions.units):
            covered = 0
            for index in unit:
                value = grid.value_at(index)
                covered |= bit(value) if value else masks[index]
            if covered != full:
                missing = digits_of(full & ~covered)
                raise Contradiction(
                    f"{unit_name(unit_index, regions.side).capitalize()} cannot hold digit(s) {missing}"
                )


def propagate(grid: Grid, techniques: Iterable[Technique] = ALL_TECHNIQUES) -> PropagationResult:
    """Run the propagator on a copy of ``grid`` and report the outcome."""

    working = grid.copy()
    tracker = CandidateTracker(working)
    counts: Dict[Technique, int] = {}
    status = Propagator(techniques).run(tracker, counts)
    return PropagationResult(status=status, grid=working, counts=counts)
