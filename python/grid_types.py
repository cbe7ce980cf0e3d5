"""
Shared type definitions for the guard patrol system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

Position = tuple[int, int]  # (row, col)


class InvalidInput(ValueError):
    """Structural problem in a patrol grid (or a request it cannot satisfy)."""


class Heading(Enum):
    """Cardinal heading of the guard."""

    N = "N"  # Up (decreasing row)
    E = "E"  # Right (increasing col)
    S = "S"  # Down (increasing row)
    W = "W"  # Left (decreasing col)

    @property
    def delta(self) -> Position:
        """(row_delta, col_delta) of one forward step."""
        return _DELTAS[self]

    @property
    def index(self) -> int:
        """Position of this heading in the N -> E -> S -> W rotation."""
        return _INDEX[self]

    def turn_right(self) -> Heading:
        return _ROTATION[(self.index + 1) % 4]


_ROTATION = (Heading.N, Heading.E, Heading.S, Heading.W)
_INDEX = {heading: i for i, heading in enumerate(_ROTATION)}

_DELTAS = {
    Heading.N: (-1, 0),
    Heading.E: (0, 1),
    Heading.S: (1, 0),
    Heading.W: (0, -1),
}

# Start marker glyph for each heading
HEADING_GLYPHS = {
    "^": Heading.N,
    ">": Heading.E,
    "v": Heading.S,
    "<": Heading.W,
}


@dataclass(frozen=True)
class GuardState:
    """Where the guard stands and which way it faces."""

    position: Position
    heading: Heading

    def ahead(self) -> Position:
        dr, dc = self.heading.delta
        return (self.position[0] + dr, self.position[1] + dc)

    def turned(self) -> GuardState:
        return GuardState(self.position, self.heading.turn_right())

    def moved(self) -> GuardState:
        return GuardState(self.ahead(), self.heading)


# =============================================================================
# Grid Definition Types
# =============================================================================


@dataclass(frozen=True)
class Grid:
    """A bounded 2D obstacle map."""

    width: int
    height: int
    obstacles: frozenset[Position]
    guard_start: Position  # Never blockable

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 0 <= row < self.height and 0 <= col < self.width

    def is_blocked(self, pos: Position) -> bool:
        return pos in self.obstacles

    def open_positions(self) -> Iterator[Position]:
        """Yield every unblocked position in row-major order."""
        for row in range(self.height):
            for col in range(self.width):
                if (row, col) not in self.obstacles:
                    yield (row, col)

    def with_obstacle(self, pos: Position) -> AugmentedGrid:
        """
        Derive a view of this grid with one extra obstacle.

        The base grid is shared, not copied.

        Raises:
            InvalidInput: If pos is the guard's start or lies outside the grid
        """
        if pos == self.guard_start:
            raise InvalidInput(f"Cannot place an obstacle on the guard start {pos}")
        if not self.in_bounds(pos):
            raise InvalidInput(
                f"Obstacle {pos} is outside the {self.height}x{self.width} grid"
            )
        return AugmentedGrid(self, pos)


@dataclass(frozen=True)
class AugmentedGrid:
    """A grid plus one hypothetical obstacle, checked before the base."""

    base: Grid
    extra: Position

    @property
    def width(self) -> int:
        return self.base.width

    @property
    def height(self) -> int:
        return self.base.height

    @property
    def guard_start(self) -> Position:
        return self.base.guard_start

    def in_bounds(self, pos: Position) -> bool:
        return self.base.in_bounds(pos)

    def is_blocked(self, pos: Position) -> bool:
        return pos == self.extra or self.base.is_blocked(pos)


GridView = Grid | AugmentedGrid
