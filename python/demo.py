#!/usr/bin/env python3
"""
Demo for guard patrol analysis.
Parse a patrol map, count the positions the guard covers and the positions
where one extra obstacle would trap it in a loop.

Usage:
    python demo.py [FILE] [--redact] [--render] [--workers N] [--chunk-size N]
                   [--exhaustive] [--verbose]

With no FILE the map is read from stdin, or the built-in example is used when
stdin is a terminal.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ascii_render import format_analysis, render_patrol
from grid_parser import parse_patrol_grid
from grid_types import Grid, GuardState
from paradox import CandidatePool, PatrolAnalysis, SearchConfig, analyze_patrol

LAYOUTS = dict(
    example="\n".join(
        [
            "....#.....",
            ".........#",
            "..........",
            "..#.......",
            ".......#..",
            "..........",
            ".#..^.....",
            "........#.",
            "#.........",
            "......#...",
        ]
    ),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze a guard patrol map.")
    parser.add_argument("file", nargs="?", help="patrol map file (default: stdin)")
    parser.add_argument("--redact", action="store_true", help="mask the numbers in the report")
    parser.add_argument("--render", action="store_true", help="draw the map with path and paradox points")
    parser.add_argument("--workers", type=int, default=None, help="worker processes (default: one per CPU)")
    parser.add_argument("--chunk-size", type=int, default=256, help="candidates per worker task")
    parser.add_argument(
        "--exhaustive",
        action="store_true",
        help="test every open cell instead of only the patrol path",
    )
    parser.add_argument("--verbose", action="store_true", help="log search progress")
    return parser


def read_map(path: str | None) -> str:
    if path is not None:
        with open(path, encoding="utf-8") as f:
            return f.read()
    if sys.stdin.isatty():
        return LAYOUTS["example"]
    return sys.stdin.read()


def generate_display(
    grid: Grid,
    guard: GuardState,
    analysis: PatrolAnalysis,
    redact: bool,
    render: bool,
) -> Panel:
    """Build the report panel, optionally with the rendered map."""
    body = Text()
    body.append(format_analysis(analysis, redact=redact), style="bold")

    if render and redact:
        # Path and paradox cells would give the numbers away
        body.append("\n\n")
        body.append(Text.from_ansi(render_patrol(grid, guard)))
    elif render:
        grid_text = render_patrol(
            grid, guard, analysis.visited_positions, analysis.paradox_positions
        )
        body.append("\n\n")
        body.append(Text.from_ansi(grid_text))
        body.append("\n\n")
        body.append("X", style="yellow")
        body.append(" visited   ")
        body.append("O", style="bright_red")
        body.append(" paradox point")

    return Panel(body, title="Guard Patrol Analysis", border_style="green")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        config = SearchConfig(
            workers=args.workers,
            chunk_size=args.chunk_size,
            pool=CandidatePool.ALL if args.exhaustive else CandidatePool.VISITED,
        )
        grid, guard = parse_patrol_grid(read_map(args.file))
    except (ValueError, OSError) as e:  # InvalidInput is a ValueError
        console.print(Panel(Text(str(e), style="bold red"), title="Error", border_style="red"))
        return 1

    analysis = analyze_patrol(grid, guard, config)
    console.print(generate_display(grid, guard, analysis, args.redact, args.render))
    return 0


if __name__ == "__main__":
    sys.exit(main())
