"""
Dense visit tracking for patrol runs.

Two views are kept side by side:
- positions seen (coverage and paradox candidates)
- (position, heading) pairs seen (cycle detection)

Both are bytearrays indexed by row * width + col, the pair view having four
slots per cell, one per heading.
"""

from __future__ import annotations

from typing import Iterator

from grid_types import GuardState, Position


class VisitedTracker:
    """Records the guard's visited positions and states during one run."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._positions = bytearray(width * height)
        self._states = bytearray(width * height * 4)
        self._coverage = 0

    def _cell(self, pos: Position) -> int:
        return pos[0] * self.width + pos[1]

    def record(self, state: GuardState) -> None:
        cell = self._cell(state.position)
        self._states[cell * 4 + state.heading.index] = 1
        if not self._positions[cell]:
            self._positions[cell] = 1
            self._coverage += 1

    def seen(self, state: GuardState) -> bool:
        """True if this exact (position, heading) pair was recorded."""
        return bool(self._states[self._cell(state.position) * 4 + state.heading.index])

    __contains__ = seen

    @property
    def coverage(self) -> int:
        """Number of distinct positions visited."""
        return self._coverage

    def positions(self) -> Iterator[Position]:
        """Yield visited positions in row-major order."""
        for cell, flag in enumerate(self._positions):
            if flag:
                yield divmod(cell, self.width)

    def candidates(self, exclude: Position) -> Iterator[Position]:
        """Visited positions other than `exclude` (the guard's start)."""
        return (pos for pos in self.positions() if pos != exclude)

    def reset(self) -> None:
        """Forget everything, keeping the allocated buffers."""
        self._positions[:] = bytes(len(self._positions))
        self._states[:] = bytes(len(self._states))
        self._coverage = 0
