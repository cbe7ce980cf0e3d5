"""
Deterministic guard patrol simulation.

Each step the guard looks at the cell directly ahead:
- outside the grid: the guard walks off and the patrol ends
- blocked: the guard turns 90 degrees right in place
- otherwise: the guard moves forward one cell

Before every step the current (position, heading) pair is checked against the
ones already seen. A repeat means the guard is stuck in a loop. There are at
most width * height * 4 such pairs, so every patrol terminates.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from grid_types import GridView, GuardState, Position
from visited import VisitedTracker

logger = logging.getLogger(__name__)


class TerminationReason(Enum):
    """Reason why a patrol ended."""

    EXITED = "exited"  # Next forward move would leave the grid
    LOOP_DETECTED = "loop_detected"  # A (position, heading) pair repeated


@dataclass(frozen=True)
class Exited:
    """The guard walked off the grid."""

    visited_positions: frozenset[Position]
    step_count: int


@dataclass(frozen=True)
class LoopDetected:
    """The guard revisited a (position, heading) pair."""

    steps_to_detection: int
    visited_positions: frozenset[Position] = frozenset()


PatrolOutcome = Exited | LoopDetected


class PatrolWalk:
    """
    Iterator over the guard's states that tracks why the patrol ended.

    Usage:
        patrol = walk(grid, guard)
        for state in patrol:
            print(state)
        print(patrol.termination_reason)  # Why the patrol ended
    """

    def __init__(self, grid: GridView, guard: GuardState, tracker: VisitedTracker) -> None:
        self.grid = grid
        self.guard = guard
        self.tracker = tracker
        self.termination_reason: TerminationReason | None = None
        self.steps = 0
        self._iterator = self._generate()

    def __iter__(self) -> Iterator[GuardState]:
        return self

    def __next__(self) -> GuardState:
        return next(self._iterator)

    def run(self) -> TerminationReason:
        """Drive the patrol to its end and return the termination reason."""
        deque(self._iterator, maxlen=0)
        return self.termination_reason  # type: ignore[return-value]  # Always set once drained

    def _generate(self) -> Iterator[GuardState]:
        grid = self.grid
        tracker = self.tracker
        state = self.guard

        while True:
            if tracker.seen(state):
                self.termination_reason = TerminationReason.LOOP_DETECTED
                return
            tracker.record(state)
            yield state

            ahead = state.ahead()
            if not grid.in_bounds(ahead):
                self.termination_reason = TerminationReason.EXITED
                return

            # Turning and moving are separate steps
            if grid.is_blocked(ahead):
                state = state.turned()
            else:
                state = state.moved()
            self.steps += 1


def walk(
    grid: GridView,
    guard: GuardState,
    tracker: VisitedTracker | None = None,
) -> PatrolWalk:
    """
    Walk the guard through the grid, yielding each state it occupies.

    The starting state is yielded first, then one state per step. The state
    that closes a loop is not yielded again.

    Args:
        grid: Grid (or augmented grid) to patrol
        guard: Starting position and heading
        tracker: Optional tracker to record into. Must be fresh or reset().

    Returns:
        PatrolWalk iterator exposing termination_reason and steps once exhausted
    """
    if tracker is None:
        tracker = VisitedTracker(grid.width, grid.height)
    return PatrolWalk(grid, guard, tracker)


def simulate(
    grid: GridView,
    guard: GuardState,
    tracker: VisitedTracker | None = None,
) -> PatrolOutcome:
    """Run a patrol to completion and return its terminal outcome."""
    patrol = walk(grid, guard, tracker)
    reason = patrol.run()
    visited = frozenset(patrol.tracker.positions())

    logger.debug(
        "simulate: %s after %d steps, %d positions visited",
        reason.value,
        patrol.steps,
        len(visited),
    )
    if reason is TerminationReason.LOOP_DETECTED:
        return LoopDetected(steps_to_detection=patrol.steps, visited_positions=visited)
    return Exited(visited_positions=visited, step_count=patrol.steps)
