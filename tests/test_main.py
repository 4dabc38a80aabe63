import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from main import main, read_grid_file


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


def run_cli(*argv: str):
    stdout, stderr = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        code = main(list(argv))
    return code, stdout.getvalue(), stderr.getvalue()


class CliTests(unittest.TestCase):
    def test_solve(self) -> None:
        code, out, _ = run_cli("solve", PUZZLE)
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["count"], "ONE")
        self.assertEqual(payload["solutions"], [SOLUTION])

    def test_solve_with_verification(self) -> None:
        code, out, _ = run_cli("solve", "--verify", PUZZLE)
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(out)["verified"])

    def test_rate(self) -> None:
        code, out, _ = run_cli("rate", "." + SOLUTION[1:])
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["difficulty"], "TRIVIAL")
        self.assertEqual(payload["score"], 1)

    def test_generate_small(self) -> None:
        code, out, _ = run_cli("generate", "--order", "2", "--seed", "4", "--variants", "2")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(len(payload["puzzle"]), 16)
        self.assertEqual(len(payload["variants"]), 2)
        self.assertEqual(payload["seed"], 4)

    def test_generate_accepts_difficulty_label(self) -> None:
        code, out, _ = run_cli("generate", "--order", "2", "--seed", "4", "--difficulty", "trivial")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["difficulty"], "TRIVIAL")

    def test_show_prints_readable_grid(self) -> None:
        code, _, err = run_cli("--show", "solve", PUZZLE)
        self.assertEqual(code, 0)
        self.assertIn("Solution:", err)
        self.assertIn("5 3 4 | 6 7 8 | 9 1 2", err)

    def test_transform_transpose(self) -> None:
        code, out, _ = run_cli("transform", "--op", "transpose", SOLUTION)
        self.assertEqual(code, 0)
        grid = json.loads(out)["grid"]
        self.assertEqual(grid[:9], "".join(SOLUTION[r * 9] for r in range(9)))

    def test_invalid_grid_exits_non_zero(self) -> None:
        code, out, err = run_cli("solve", "1" * 81)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("error:", err)

    def test_budget_exceeded_is_reported(self) -> None:
        code, out, _ = run_cli("--node-budget", "1", "solve", "." * 81)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["error"], "budget_exceeded")

    def test_grid_file_skips_comments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "puzzle.txt"
            rows = [PUZZLE[r * 9:(r + 1) * 9] for r in range(9)]
            path.write_text("# classic\n" + "\n".join(rows) + "\n\n", encoding="utf-8")
            self.assertEqual(read_grid_file(path), PUZZLE)
            code, out, _ = run_cli("solve", "--input", str(path))
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["count"], "ONE")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
