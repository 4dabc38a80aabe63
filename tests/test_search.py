import unittest

from numberplace.core.constants import SearchMode, SolutionCount
from numberplace.core.exceptions import BudgetExceeded, InvalidGrid
from numberplace.engine.candidates import CandidateTracker
from numberplace.engine.grid import parse
from numberplace.engine.search import SearchConfig, SearchEngine, select_cell, solve


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
SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)
HARD = (
    "8........"
    "..36....."
    ".7..9.2.."
    ".5...7..."
    "....457.."
    "...1...3."
    "..1....68"
    "..85...1."
    ".9....4.."
)
DEAD_CELL = "12345678." + "........9" + "." * 63


class SolveTests(unittest.TestCase):
    def test_complete_grid_is_its_own_solution(self) -> None:
        result = solve(SOLUTION)
        self.assertEqual(result.count, SolutionCount.ONE)
        self.assertEqual(result.solution, parse(SOLUTION))
        self.assertEqual(result.nodes, 1)

    def test_unique_puzzle(self) -> None:
        grid = parse(PUZZLE)
        result = solve(grid)
        self.assertTrue(result.unique)
        self.assertEqual(result.solution.encode(), SOLUTION)
        self.assertEqual(grid.encode(), PUZZLE)

    def test_hard_puzzle_needs_branching(self) -> None:
        result = solve(HARD)
        self.assertEqual(result.count, SolutionCount.ONE)
        self.assertGreater(result.nodes, 1)
        self.assertGreater(result.branch_score, 0)
        solution = result.solution
        self.assertTrue(solution.is_complete())
        # Re-validating the solution through the constructor checks every unit.
        parse(solution.encode())
        for index, given in enumerate(parse(HARD).values):
            if given:
                self.assertEqual(solution.value_at(index), given)

    def test_empty_grid_has_many_solutions(self) -> None:
        result = solve("." * 81)
        self.assertEqual(result.count, SolutionCount.MANY)
        self.assertEqual(len(result.solutions), 2)
        self.assertNotEqual(result.solutions[0], result.solutions[1])

    def test_first_mode_stops_at_one(self) -> None:
        result = solve("." * 81, SearchMode.FIRST)
        self.assertEqual(result.count, SolutionCount.ONE)
        self.assertTrue(result.solution.is_complete())

    def test_all_mode_enumerates_small_grid(self) -> None:
        result = solve("." * 16, SearchMode.ALL)
        self.assertEqual(result.count, SolutionCount.MANY)
        self.assertEqual(len(result.solutions), 288)
        self.assertEqual(len({solution.encode() for solution in result.solutions}), 288)

    def test_contradiction_reports_zero(self) -> None:
        result = solve(DEAD_CELL)
        self.assertEqual(result.count, SolutionCount.ZERO)
        self.assertIsNone(result.solution)
        self.assertEqual(result.nodes, 1)
        self.assertEqual(result.backtracks, 1)

    def test_invalid_input_is_rejected(self) -> None:
        with self.assertRaises(InvalidGrid):
            solve("1" * 81)

    def test_search_is_deterministic(self) -> None:
        first = solve("." * 81, SearchMode.FIRST)
        second = solve("." * 81, SearchMode.FIRST)
        self.assertEqual(first.solution, second.solution)
        self.assertEqual(first.nodes, second.nodes)


class BudgetTests(unittest.TestCase):
    def test_node_budget_raises(self) -> None:
        engine = SearchEngine(SearchConfig(node_budget=5))
        with self.assertRaises(BudgetExceeded) as ctx:
            engine.search(HARD)
        self.assertEqual(ctx.exception.nodes, 5)

    def test_time_budget_raises(self) -> None:
        engine = SearchEngine(SearchConfig(time_budget=1e-9))
        with self.assertRaises(BudgetExceeded) as ctx:
            engine.search(HARD)
        self.assertIn("time budget", str(ctx.exception))
        self.assertGreaterEqual(ctx.exception.nodes, 1)

    def test_budget_is_not_hit_without_branching(self) -> None:
        engine = SearchEngine(SearchConfig(node_budget=5))
        self.assertTrue(engine.search("." + SOLUTION[1:]).unique)

    def test_invalid_config(self) -> None:
        with self.assertRaises(ValueError):
            SearchConfig(node_budget=0)
        with self.assertRaises(ValueError):
            SearchConfig(time_budget=-1.0)


class SelectCellTests(unittest.TestCase):
    def test_prefers_fewest_candidates(self) -> None:
        tracker = CandidateTracker(parse("." * 36 + "1234.5678" + "." * 36))
        self.assertEqual(select_cell(tracker), 40)

    def test_ties_go_to_lowest_index(self) -> None:
        tracker = CandidateTracker(parse("." * 81))
        self.assertEqual(select_cell(tracker), 0)

    def test_complete_grid_has_no_cell(self) -> None:
        tracker = CandidateTracker(parse(SOLUTION))
        self.assertEqual(select_cell(tracker), -1)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
