"""
Paradox search: which single added obstacle traps the guard in a loop?

Only positions on the unmodified patrol can change it, so those are the
default candidates. Every candidate is tested independently against an
overlay of the shared base grid, which lets chunks of candidates run in
separate worker processes with the per-chunk results merged at the end.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from grid_types import Grid, GuardState, Position
from patrol import Exited, TerminationReason, simulate, walk
from visited import VisitedTracker

logger = logging.getLogger(__name__)


class CandidatePool(Enum):
    """Which positions to try an extra obstacle at."""

    VISITED = "visited"  # Positions on the baseline patrol (minus the start)
    ALL = "all"  # Every open position (minus the start); same count, slower


@dataclass(frozen=True)
class SearchConfig:
    """Settings governing the paradox search."""

    workers: int | None = None  # None = one per CPU
    chunk_size: int = 256
    pool: CandidatePool = CandidatePool.VISITED

    def __post_init__(self) -> None:
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")

    def resolved_workers(self) -> int:
        return self.workers if self.workers is not None else (os.cpu_count() or 1)


@dataclass(frozen=True)
class PatrolAnalysis:
    """Result of a full patrol analysis."""

    coverage: int  # Distinct positions visited by the unmodified patrol
    paradox_points: int  # Positions where one extra obstacle causes a loop
    visited_positions: frozenset[Position] = field(default=frozenset(), compare=False, repr=False)
    paradox_positions: frozenset[Position] = field(default=frozenset(), compare=False, repr=False)


# =============================================================================
# Single Candidate
# =============================================================================


def is_paradox_point(
    grid: Grid,
    guard: GuardState,
    pos: Position,
    tracker: VisitedTracker | None = None,
) -> bool:
    """
    Test whether an obstacle at pos makes the guard loop forever.

    The start position, positions outside the grid and positions that are
    already blocked are never paradox points.

    Args:
        grid: The unmodified grid
        guard: The guard's starting state
        pos: Where to place the hypothetical obstacle
        tracker: Optional scratch tracker, reset before use
    """
    if pos == guard.position or not grid.in_bounds(pos) or grid.is_blocked(pos):
        return False

    if tracker is None:
        tracker = VisitedTracker(grid.width, grid.height)
    else:
        tracker.reset()

    patrol = walk(grid.with_obstacle(pos), guard, tracker)
    return patrol.run() is TerminationReason.LOOP_DETECTED


def _search_chunk(task: tuple[Grid, GuardState, list[Position]]) -> list[Position]:
    """Find the paradox points in one chunk of candidates. Runs in a worker."""
    grid, guard, chunk = task
    tracker = VisitedTracker(grid.width, grid.height)
    return [pos for pos in chunk if is_paradox_point(grid, guard, pos, tracker)]


# =============================================================================
# Search
# =============================================================================


def candidate_positions(
    grid: Grid,
    guard: GuardState,
    baseline: VisitedTracker,
    pool: CandidatePool = CandidatePool.VISITED,
) -> list[Position]:
    """
    List the positions to test, in row-major order.

    Args:
        grid: The unmodified grid
        guard: The guard's starting state
        baseline: Tracker filled by the unmodified patrol
        pool: VISITED for baseline positions, ALL for every open cell

    Returns:
        Candidate positions, never including the guard's start
    """
    if pool is CandidatePool.ALL:
        return [pos for pos in grid.open_positions() if pos != guard.position]
    return list(baseline.candidates(exclude=guard.position))


def _search(
    grid: Grid,
    guard: GuardState,
    candidates: Iterable[Position],
    config: SearchConfig,
) -> list[list[Position]]:
    """
    Split candidates into chunks and test each chunk with its own tracker.

    Returns the paradox points found per chunk. Chunk order does not matter
    to any caller: they only count or union the results.
    """
    positions = list(candidates)
    size = config.chunk_size
    tasks = [(grid, guard, positions[i : i + size]) for i in range(0, len(positions), size)]
    workers = min(config.resolved_workers(), len(tasks))

    logger.info(
        "paradox search: %d candidates in %d chunks, %d workers",
        len(positions),
        len(tasks),
        workers,
    )

    if workers <= 1:
        return [_search_chunk(task) for task in tasks]

    with ProcessPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_search_chunk, tasks))


def count_paradox_points(
    grid: Grid,
    guard: GuardState,
    candidates: Iterable[Position],
    config: SearchConfig | None = None,
) -> int:
    """
    Count candidates where an extra obstacle traps the guard in a loop.

    Args:
        grid: The unmodified grid
        guard: The guard's starting state
        candidates: Positions to test
        config: Worker count and chunk size (defaults to SearchConfig())

    Returns:
        Number of paradox points among the candidates
    """
    return sum(len(found) for found in _search(grid, guard, candidates, config or SearchConfig()))


def find_paradox_points(
    grid: Grid,
    guard: GuardState,
    candidates: Iterable[Position],
    config: SearchConfig | None = None,
) -> frozenset[Position]:
    """Return the paradox points among the candidates themselves."""
    found = _search(grid, guard, candidates, config or SearchConfig())
    return frozenset(pos for chunk in found for pos in chunk)


def analyze_patrol(
    grid: Grid,
    guard: GuardState,
    config: SearchConfig | None = None,
) -> PatrolAnalysis:
    """
    Run the baseline patrol, then the paradox search.

    If the unmodified patrol already loops, coverage counts the positions seen
    before the loop was detected and no paradox search is done.

    Args:
        grid: Parsed grid
        guard: The guard's starting state
        config: Search settings (defaults to SearchConfig())

    Returns:
        PatrolAnalysis with the counts, plus the positions behind them
    """
    if config is None:
        config = SearchConfig()

    tracker = VisitedTracker(grid.width, grid.height)
    baseline = simulate(grid, guard, tracker)
    coverage = tracker.coverage

    if not isinstance(baseline, Exited):
        logger.warning(
            "analyze_patrol: baseline patrol loops after %d steps; skipping paradox search",
            baseline.steps_to_detection,
        )
        return PatrolAnalysis(
            coverage=coverage,
            paradox_points=0,
            visited_positions=baseline.visited_positions,
        )

    logger.info(
        "analyze_patrol: baseline exited after %d steps covering %d positions",
        baseline.step_count,
        coverage,
    )

    candidates = candidate_positions(grid, guard, tracker, config.pool)
    paradox_positions = find_paradox_points(grid, guard, candidates, config)

    logger.info("analyze_patrol: %d paradox points", len(paradox_positions))
    return PatrolAnalysis(
        coverage=coverage,
        paradox_points=len(paradox_positions),
        visited_positions=baseline.visited_positions,
        paradox_positions=paradox_positions,
    )
