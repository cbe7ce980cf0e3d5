"""
ASCII rendering for guard patrols.

Draws the patrol map with the guard's path and any paradox points overlaid,
and formats the analysis report (optionally redacted for display).
"""

from __future__ import annotations

from typing import Callable, Iterable

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_parser import FLOOR, OBSTACLE
from grid_types import HEADING_GLYPHS, Grid, GuardState, Position
from paradox import PatrolAnalysis

VISITED = "X"
PARADOX = "O"
REDACTED = "*****"

_START_GLYPHS = {heading: glyph for glyph, heading in HEADING_GLYPHS.items()}


def render_patrol(
    grid: Grid,
    guard: GuardState,
    visited: Iterable[Position] = (),
    paradox_points: Iterable[Position] = (),
    color: bool = True,
) -> str:
    """
    Render a patrol map, one text line per grid row.

    Legend:
    - '#': obstacle
    - 'X': visited by the guard
    - 'O': paradox point (an obstacle here would trap the guard)
    - '^', '>', 'v', '<': the guard's start and heading
    - '.': untouched floor

    Args:
        grid: The grid to render
        guard: The guard's starting state
        visited: Positions to mark as visited
        paradox_points: Positions to mark as paradox points (drawn over visited)
        color: If False, emit plain text with no ANSI codes

    Returns:
        Rendered map with rows separated by newlines
    """
    visited_set = set(visited)
    paradox_set = set(paradox_points)

    plain: Callable[[str], str] = lambda s: s
    colors: dict[str, Callable[[str], str]] = {
        OBSTACLE: chalk.white if color else plain,
        VISITED: chalk.yellow if color else plain,
        PARADOX: chalk.redBright if color else plain,
        FLOOR: chalk.blue if color else plain,
    }
    start_color = chalk.bgWhite.black if color else plain

    lines: list[str] = []
    for row in range(grid.height):
        line_parts: list[str] = []
        for col in range(grid.width):
            pos = (row, col)
            if pos == guard.position:
                line_parts.append(start_color(_START_GLYPHS[guard.heading]))
                continue

            if grid.is_blocked(pos):
                char = OBSTACLE
            elif pos in paradox_set:
                char = PARADOX
            elif pos in visited_set:
                char = VISITED
            else:
                char = FLOOR
            line_parts.append(colors[char](char))
        lines.append("".join(line_parts))

    return "\n".join(lines)


def format_analysis(analysis: PatrolAnalysis, redact: bool = False) -> str:
    """
    Format an analysis as a short two-line report.

    With redact=True both numbers are masked. The analysis itself is untouched.
    """
    coverage = REDACTED if redact else f"{analysis.coverage} positions"
    paradox = REDACTED if redact else f"{analysis.paradox_points} positions"
    return f"Patrol coverage: {coverage}\nParadox points: {paradox}"
