"""
Grid parsing utilities for guard patrol maps.

Format (one row per line):
- '#': obstacle
- '.': open floor
- '^', '>', 'v', '<': the guard's start, facing N, E, S or W respectively

Exactly one start marker must be present and all rows must be the same length.
"""

from __future__ import annotations

from grid_types import HEADING_GLYPHS, Grid, GuardState, InvalidInput, Position

__all__ = ["parse_patrol_grid", "OBSTACLE", "FLOOR"]

OBSTACLE = "#"
FLOOR = "."


def parse_patrol_grid(text: str) -> tuple[Grid, GuardState]:
    """
    Parse a patrol map into a grid and the guard's starting state.

    Example:
        \"\"\"
        ..#.
        .^..
        ....
        \"\"\"
        Creates a 4x3 grid with an obstacle at (0, 2) and the guard at (1, 1)
        facing north.

    Args:
        text: Map text. Surrounding blank lines and '\\r' are ignored.

    Returns:
        (grid, guard) tuple

    Raises:
        InvalidInput: On ragged rows, a missing or repeated start marker,
            or an unknown character
    """
    row_strings = [line.rstrip("\r") for line in text.strip("\r\n").split("\n")]
    if not row_strings or not row_strings[0]:
        raise InvalidInput("Empty patrol map: expected at least one row")

    # Validate all rows have same length
    cols = len(row_strings[0])
    mismatched = [(i, len(row)) for i, row in enumerate(row_strings) if len(row) != cols]
    if mismatched:
        error_msg = (
            f"Inconsistent row lengths in patrol map\n"
            f"  Expected: {cols} columns (from row 0)\n"
            f"  Mismatched rows:\n"
        )
        for row_idx, actual_cols in mismatched:
            error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx]}\"\n"
        error_msg += "  All rows must have the same number of cells"
        raise InvalidInput(error_msg)

    obstacles: set[Position] = set()
    starts: list[GuardState] = []

    for row_idx, row_str in enumerate(row_strings):
        for col_idx, char in enumerate(row_str):
            if char == OBSTACLE:
                obstacles.add((row_idx, col_idx))
            elif char in HEADING_GLYPHS:
                starts.append(GuardState((row_idx, col_idx), HEADING_GLYPHS[char]))
            elif char != FLOOR:
                raise InvalidInput(
                    f"Invalid character '{char}' in patrol map\n"
                    f"  Row {row_idx}, column {col_idx}: \"{row_str}\"\n"
                    f"  Valid characters: '{OBSTACLE}' (obstacle), '{FLOOR}' (floor), "
                    f"{', '.join(repr(g) for g in HEADING_GLYPHS)} (guard start)"
                )

    if not starts:
        raise InvalidInput(
            "No guard start marker in patrol map\n"
            f"  Expected exactly one of {', '.join(repr(g) for g in HEADING_GLYPHS)}"
        )
    if len(starts) > 1:
        locations = ", ".join(f"row {s.position[0]} col {s.position[1]}" for s in starts)
        raise InvalidInput(
            f"Multiple guard start markers in patrol map ({len(starts)} found)\n"
            f"  At: {locations}\n"
            f"  Exactly one start marker is allowed"
        )

    guard = starts[0]
    grid = Grid(
        width=cols,
        height=len(row_strings),
        obstacles=frozenset(obstacles),
        guard_start=guard.position,
    )
    return grid, guard
