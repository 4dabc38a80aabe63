"""CLI entrypoint for the number-place puzzle engine."""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, Dict

from numberplace.core.constants import DEFAULT_ORDER, Difficulty, SearchMode
from numberplace.core.exceptions import BudgetExceeded, NumberPlaceError
from numberplace.engine import transform as transforms
from numberplace.engine.generator import GeneratorConfig, PuzzleGenerator
from numberplace.engine.grid import Grid, parse
from numberplace.engine.rating import DifficultyEstimator
from numberplace.engine.search import SearchConfig, SearchEngine
from numberplace.engine.validator import GridValidator
from numberplace.utils.logger import configure_logging
from numberplace.utils.pretty import pretty_print_grid, print_puzzle_stats


TRANSFORMS = {
    "transpose": lambda order, rng: transforms.transpose(order),
    "reflect-h": lambda order, rng: transforms.reflect_horizontal(order),
    "reflect-v": lambda order, rng: transforms.reflect_vertical(order),
    "rotate90": lambda order, rng: transforms.rotate(order, 1),
    "rotate180": lambda order, rng: transforms.rotate(order, 2),
    "rotate270": lambda order, rng: transforms.rotate(order, 3),
    "random": lambda order, rng: transforms.random_transform(order, rng),
}


def read_grid_file(path: Path) -> str:
    """Read a grid from a file. Blank lines and # comments are skipped."""
    lines = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        lines.append(line)
    return "".join(lines)


def load_grid(args: argparse.Namespace) -> Grid:
    if args.grid:
        text = args.grid
    elif args.input:
        text = read_grid_file(args.input)
    else:
        text = sys.stdin.read()
    return parse(text)


def _add_grid_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("grid", nargs="?", help="Flat grid encoding ('.' or '0' for blanks)")
    parser.add_argument("--input", type=Path, help="File holding the grid (defaults to stdin)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate, solve, rate and transform number-place puzzles",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument("--node-budget", type=int, help="Abort searches after this many nodes")
    parser.add_argument("--time-budget", type=float, help="Abort searches after this many seconds")
    parser.add_argument("--show", action="store_true", help="Also print grids to stderr in a readable layout")
    commands = parser.add_subparsers(dest="command", required=True)

    solve = commands.add_parser("solve", help="Solve a grid and report its solution count")
    _add_grid_source(solve)
    solve.add_argument(
        "--mode",
        type=str,
        choices=[mode.value.lower() for mode in SearchMode],
        default="unique",
        help="first: any solution, unique: stop at two, all: enumerate",
    )
    solve.add_argument("--verify", action="store_true", help="Cross-check the count with CP-SAT")

    rate = commands.add_parser("rate", help="Classify a uniquely solvable puzzle")
    _add_grid_source(rate)

    generate = commands.add_parser("generate", help="Generate a uniquely solvable puzzle")
    generate.add_argument("--order", type=int, default=DEFAULT_ORDER, help="Box size (3 for 9x9)")
    generate.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    generate.add_argument("--empty", type=int, default=None, help="Target number of empty cells")
    generate.add_argument(
        "--difficulty",
        type=Difficulty.from_label,
        default=None,
        help="Required difficulty label (" + ", ".join(d.label for d in Difficulty) + ")",
    )
    generate.add_argument("--retry-limit", type=int, default=3, help="Fresh grids to try for a difficulty")
    generate.add_argument("--variants", type=int, default=0, help="Also emit N transformed equivalents")

    transform = commands.add_parser("transform", help="Apply a symmetry transform")
    _add_grid_source(transform)
    transform.add_argument("--op", choices=sorted(TRANSFORMS), default="random", help="Transform to apply")
    transform.add_argument("--seed", type=int, default=None, help="Seed for the random transform")
    return parser


def run(args: argparse.Namespace) -> Dict[str, Any]:
    search_config = SearchConfig(node_budget=args.node_budget, time_budget=args.time_budget)

    if args.command == "solve":
        grid = load_grid(args)
        result = SearchEngine(search_config).search(grid, SearchMode(args.mode.upper()))
        if args.show and result.solution is not None:
            pretty_print_grid(result.solution, label="Solution:", stream=sys.stderr)
        payload: Dict[str, Any] = {
            "count": result.count.value,
            "solutions": [solution.encode() for solution in result.solutions],
            "nodes": result.nodes,
            "backtracks": result.backtracks,
        }
        if args.verify:
            validation = GridValidator(cross_check=True, search_config=search_config).validate(grid)
            payload["verified"] = validation.ok
            payload["validation"] = validation.messages
        return payload

    if args.command == "rate":
        grid = load_grid(args)
        report = DifficultyEstimator(search_config).estimate(grid)
        if args.show:
            pretty_print_grid(grid, label=f"Rated {report.difficulty.label}:", stream=sys.stderr)
        return {
            "difficulty": report.difficulty.name,
            "score": report.score,
            "techniques": {technique.value: count for technique, count in report.techniques.items()},
            "nodes": report.nodes,
            "backtracks": report.backtracks,
        }

    if args.command == "generate":
        config = GeneratorConfig(
            order=args.order,
            seed=args.seed,
            target_empty_cells=args.empty,
            target_difficulty=args.difficulty,
            retry_limit=args.retry_limit,
            search=search_config,
        )
        generator = PuzzleGenerator(config)
        puzzle = generator.generate()
        if args.show:
            print_puzzle_stats(puzzle, generator.estimator.estimate(puzzle), stream=sys.stderr)
        return {
            "puzzle": puzzle.encode(),
            "solution": puzzle.solution_grid().encode(),
            "difficulty": puzzle.difficulty.name,
            "score": puzzle.score,
            "empty_cells": puzzle.empty_count,
            "seed": puzzle.seed,
            "variants": [variant.encode() for variant in generator.variants(puzzle, args.variants)],
        }

    grid = load_grid(args)
    operation = TRANSFORMS[args.op](grid.order, random.Random(args.seed))
    moved = operation.apply(grid)
    if args.show:
        pretty_print_grid(moved, label=f"{args.op}:", stream=sys.stderr)
    return {"grid": moved.encode(), "op": args.op}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.WARNING)
    configure_logging(level)

    try:
        payload = run(args)
    except BudgetExceeded as exc:
        payload = {"error": "budget_exceeded", "message": str(exc), "nodes": exc.nodes}
    except (NumberPlaceError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
