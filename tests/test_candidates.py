import unittest

from numberplace.core.exceptions import ConflictError
from numberplace.engine.candidates import CandidateTracker, bit, digits_of, single_digit
from numberplace.engine.grid import parse


PUZZLE = (
    "53..7...."
    "6..195..."
    ".98....6."
    "8...6...3"
    "4..8.3..1"
    "7...2...6"
    ".6....28."
    "...419..5"
    "....8..79"
)


class BitHelperTests(unittest.TestCase):
    def test_bit_layout(self) -> None:
        self.assertEqual(bit(1), 0b1)
        self.assertEqual(bit(9), 0b100000000)
        self.assertEqual(digits_of(0b1011), [1, 2, 4])
        self.assertEqual(digits_of(0), [])
        self.assertEqual(single_digit(bit(7)), 7)


class CandidateTrackerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.grid = parse(PUZZLE)
        self.tracker = CandidateTracker(self.grid)

    def test_initial_candidates(self) -> None:
        self.assertEqual(self.tracker.digits(2), [1, 2, 4])
        self.assertEqual(self.tracker.mask(0, 2), bit(1) | bit(2) | bit(4))
        self.assertEqual(self.tracker.count(2), 3)
        self.assertEqual(self.tracker.candidates(0), 0)

    def test_assign_strikes_digit_from_peers(self) -> None:
        self.tracker.assign(2, 4)
        self.assertEqual(self.grid[0, 2], 4)
        self.assertEqual(self.tracker.candidates(2), 0)
        for peer in self.grid.regions.peers[2]:
            self.assertFalse(self.tracker.candidates(peer) & bit(4))

    def test_assign_rejects_non_candidate(self) -> None:
        before = list(self.tracker.masks)
        with self.assertRaises(ConflictError):
            self.tracker.assign(2, 5)
        with self.assertRaises(ConflictError):
            self.tracker.assign(0, 1)
        self.assertEqual(self.tracker.masks, before)
        self.assertIsNone(self.grid[0, 2])

    def test_rollback_restores_exact_state(self) -> None:
        masks = list(self.tracker.masks)
        values = self.grid.values
        mark = self.tracker.checkpoint()
        self.tracker.assign(2, 4)
        self.tracker.eliminate(3, bit(2))
        self.tracker.assign(5, 8)
        self.tracker.rollback(mark)
        self.assertEqual(self.tracker.masks, masks)
        self.assertEqual(self.grid.values, values)

    def test_eliminate_reports_change(self) -> None:
        self.assertTrue(self.tracker.eliminate(2, bit(1)))
        self.assertFalse(self.tracker.eliminate(2, bit(1)))
        self.assertEqual(self.tracker.digits(2), [2, 4])

    def test_remove_rescans_affected_cells(self) -> None:
        fresh = list(self.tracker.masks)
        self.tracker.assign(2, 4)
        self.assertEqual(self.tracker.remove(2), 4)
        self.assertEqual(self.tracker.masks, fresh)
        self.assertIsNone(self.tracker.remove(2))

    def test_recompute_binds_new_grid(self) -> None:
        other = parse("." * 16)
        self.tracker.recompute(other)
        self.assertIs(self.tracker.grid, other)
        self.assertEqual(self.tracker.digits(0), [1, 2, 3, 4])
        self.assertFalse(self.tracker.is_solved())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
