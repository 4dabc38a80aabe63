import unittest

from numberplace.core.constants import Difficulty
from numberplace.core.exceptions import ConflictError
from numberplace.core.models import Puzzle
from numberplace.engine.game import Game
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


class GameTests(unittest.TestCase):
    def setUp(self) -> None:
        puzzle = Puzzle(
            order=3,
            givens=parse(PUZZLE).values,
            solution=parse(SOLUTION).values,
            difficulty=Difficulty.EASY,
        )
        self.game = Game(puzzle)

    def test_relevant_points(self) -> None:
        points = self.game.relevant_points(4, 4)
        self.assertEqual(len(points), 20)
        self.assertIn((4, 0), points)
        self.assertIn((0, 4), points)
        self.assertIn((3, 3), points)
        self.assertNotIn((4, 4), points)

    def test_givens_are_immutable(self) -> None:
        self.assertFalse(self.game.is_mutable(0, 0))
        self.assertTrue(self.game.is_mutable(0, 2))
        with self.assertRaises(ConflictError):
            self.game.insert(0, 0, 5)
        with self.assertRaises(ConflictError):
            self.game.remove(0, 0)

    def test_insert_updates_candidates(self) -> None:
        self.assertEqual(self.game.candidates(0, 2), [1, 2, 4])
        self.game.insert(0, 2, 4)
        self.assertEqual(self.game.current[0, 2], 4)
        self.assertTrue(self.game.insertion_is_correct(0, 2, 4))
        self.assertNotIn(4, self.game.candidates(0, 3))
        self.assertEqual(self.game.moves, 1)

    def test_insert_replaces_previous_entry(self) -> None:
        self.assertEqual(self.game.candidates(2, 0), [1, 2])
        self.game.insert(0, 2, 1)
        self.assertFalse(self.game.insertion_is_correct(0, 2, 1))
        self.assertEqual(self.game.candidates(2, 0), [2])
        self.game.insert(0, 2, 4)
        self.assertEqual(self.game.current[0, 2], 4)
        self.assertEqual(self.game.candidates(2, 0), [1, 2])
        self.assertEqual(self.game.moves, 2)

    def test_conflicting_insert_has_no_side_effect(self) -> None:
        before = self.game.current.values
        with self.assertRaises(ConflictError):
            self.game.insert(0, 2, 5)
        with self.assertRaises(ConflictError):
            self.game.insert(0, 2, 10)
        self.assertEqual(self.game.current.values, before)
        self.assertEqual(self.game.moves, 0)

    def test_remove_restores_candidates(self) -> None:
        self.game.insert(0, 2, 4)
        self.assertEqual(self.game.remove(0, 2), 4)
        self.assertEqual(self.game.candidates(0, 2), [1, 2, 4])
        self.assertIsNone(self.game.current[0, 2])

    def test_filling_solution_solves_game(self) -> None:
        solution = parse(SOLUTION)
        for row in range(9):
            for col in range(9):
                if self.game.is_mutable(row, col):
                    self.game.insert(row, col, solution[row, col])
        self.assertTrue(self.game.is_solved())

    def test_out_of_bounds(self) -> None:
        with self.assertRaises(IndexError):
            self.game.relevant_points(9, 0)


class NewGameTests(unittest.TestCase):
    def test_new_game_from_generator(self) -> None:
        game = Game.new(order=2, seed=3)
        self.assertEqual(game.current, game.problem)
        self.assertFalse(game.is_solved())
        self.assertEqual(len(game.relevant_points(0, 0)), 7)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
