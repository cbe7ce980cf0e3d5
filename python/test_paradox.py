"""
Tests for the paradox search.
"""

import pytest

from grid_parser import parse_patrol_grid
from paradox import (
    CandidatePool,
    PatrolAnalysis,
    SearchConfig,
    analyze_patrol,
    candidate_positions,
    count_paradox_points,
    find_paradox_points,
    is_paradox_point,
)
from patrol import Exited, simulate
from test_patrol import LOOP_MAP, REFERENCE_MAP, random_map
from visited import VisitedTracker

SERIAL = SearchConfig(workers=1)

# Known paradox points of the reference map
REFERENCE_PARADOX_POINTS = frozenset({(6, 3), (7, 6), (7, 7), (8, 1), (8, 3), (9, 7)})

# Baseline loops over 10 cells; an obstacle at (1, 3) would still trap the guard
LOOPING_BASELINE_MAP = "\n".join(
    [
        ".#....",
        ".....#",
        ".^....",
        "#.....",
        "#...#.",
        "..#...",
    ]
)


def baseline_tracker(grid, guard) -> VisitedTracker:
    """Tracker filled by the unmodified patrol."""
    tracker = VisitedTracker(grid.width, grid.height)
    simulate(grid, guard, tracker)
    return tracker


class TestIsParadoxPoint:
    """Tests for single-candidate checks."""

    def test_next_to_start(self) -> None:
        """Blocking the cell west of the start traps the reference guard."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert is_paradox_point(grid, guard, (6, 3))

    def test_harmless_position(self) -> None:
        """A position on the path that only reroutes the guard is not a paradox point."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert not is_paradox_point(grid, guard, (5, 4))

    def test_start_never_counts(self) -> None:
        """The start can never take an obstacle."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert not is_paradox_point(grid, guard, guard.position)

    def test_existing_obstacle_and_outside(self) -> None:
        """Already-blocked and out-of-bounds positions are skipped."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert not is_paradox_point(grid, guard, (0, 4))
        assert not is_paradox_point(grid, guard, (-1, 0))
        assert not is_paradox_point(grid, guard, (10, 10))

    def test_tracker_reused(self) -> None:
        """A shared scratch tracker gives the same answers as fresh ones."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        tracker = VisitedTracker(grid.width, grid.height)

        for pos in grid.open_positions():
            assert is_paradox_point(grid, guard, pos, tracker) == is_paradox_point(grid, guard, pos)

    def test_base_grid_untouched(self) -> None:
        """Testing a candidate does not change the grid."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        obstacles = grid.obstacles
        is_paradox_point(grid, guard, (6, 3))

        assert grid.obstacles == obstacles
        assert not grid.is_blocked((6, 3))


class TestCandidates:
    """Tests for candidate enumeration."""

    def test_visited_pool_excludes_start(self) -> None:
        """Baseline candidates are the path minus the start."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))

        assert len(candidates) == 40
        assert guard.position not in candidates
        assert candidates == sorted(candidates)

    def test_all_pool(self) -> None:
        """The exhaustive pool holds every open cell but the start."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(
            grid, guard, baseline_tracker(grid, guard), CandidatePool.ALL
        )

        assert len(candidates) == 100 - 8 - 1
        assert guard.position not in candidates

    def test_visited_pool_comes_from_tracker(self) -> None:
        """The path-only pool is exactly the tracker's positions minus the start."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        tracker = baseline_tracker(grid, guard)

        expected = [pos for pos in tracker.positions() if pos != guard.position]
        assert candidate_positions(grid, guard, tracker) == expected


class TestCountParadoxPoints:
    """Tests for the counting search."""

    def test_reference_count(self) -> None:
        """The documented example has 6 paradox points."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))

        assert count_paradox_points(grid, guard, candidates, SERIAL) == 6

    def test_reference_positions(self) -> None:
        """The paradox points themselves match the documented example."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))

        assert find_paradox_points(grid, guard, candidates, SERIAL) == REFERENCE_PARADOX_POINTS

    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 256])
    def test_chunking_does_not_change_count(self, chunk_size: int) -> None:
        """Any chunk size sums to the same count."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))
        config = SearchConfig(workers=1, chunk_size=chunk_size)

        assert count_paradox_points(grid, guard, candidates, config) == 6

    def test_parallel_matches_serial(self) -> None:
        """Worker processes reduce to the same count as a serial run."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))
        config = SearchConfig(workers=2, chunk_size=8)

        assert count_paradox_points(grid, guard, candidates, config) == 6

    def test_order_does_not_matter(self) -> None:
        """Reversed candidates give the same count."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        candidates = candidate_positions(grid, guard, baseline_tracker(grid, guard))

        assert count_paradox_points(grid, guard, reversed(candidates), SERIAL) == 6

    def test_no_candidates(self) -> None:
        """An empty candidate list counts zero without starting workers."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert count_paradox_points(grid, guard, [], SearchConfig(workers=4)) == 0


class TestCandidatePoolSoundness:
    """The path-only pool must agree with testing every cell."""

    def test_reference_grid(self) -> None:
        """Both pools give 6 on the reference map."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        baseline = baseline_tracker(grid, guard)

        visited = candidate_positions(grid, guard, baseline, CandidatePool.VISITED)
        everything = candidate_positions(grid, guard, baseline, CandidatePool.ALL)

        assert count_paradox_points(grid, guard, visited, SERIAL) == count_paradox_points(
            grid, guard, everything, SERIAL
        )

    @pytest.mark.parametrize("seed", range(12))
    def test_generated_grids(self, seed: int) -> None:
        """Both pools agree on generated grids whose patrol exits."""
        grid, guard = parse_patrol_grid(random_map(seed, 9, 7, density=0.15))
        baseline = VisitedTracker(grid.width, grid.height)
        if not isinstance(simulate(grid, guard, baseline), Exited):
            pytest.skip("baseline patrol loops")

        visited = candidate_positions(grid, guard, baseline, CandidatePool.VISITED)
        everything = candidate_positions(grid, guard, baseline, CandidatePool.ALL)

        assert find_paradox_points(grid, guard, visited, SERIAL) == find_paradox_points(
            grid, guard, everything, SERIAL
        )


class TestAnalyzePatrol:
    """Tests for the full pipeline."""

    def test_reference_scenario(self) -> None:
        """Coverage 41, paradox points 6."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        assert analyze_patrol(grid, guard, SERIAL) == PatrolAnalysis(coverage=41, paradox_points=6)

    def test_exhaustive_pool(self) -> None:
        """The exhaustive pool gives the same analysis."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        config = SearchConfig(workers=1, pool=CandidatePool.ALL)

        assert analyze_patrol(grid, guard, config) == PatrolAnalysis(coverage=41, paradox_points=6)

    def test_edge_start_facing_out(self) -> None:
        """A guard leaving at once covers one cell and has no paradox points."""
        grid, guard = parse_patrol_grid("..^..\n.....\n.....")
        assert analyze_patrol(grid, guard, SERIAL) == PatrolAnalysis(coverage=1, paradox_points=0)

    def test_looping_baseline(self) -> None:
        """A baseline that already loops reports its coverage and no paradox points."""
        grid, guard = parse_patrol_grid(LOOP_MAP)
        assert analyze_patrol(grid, guard, SERIAL) == PatrolAnalysis(coverage=4, paradox_points=0)

    def test_positions_match_counts(self) -> None:
        """The analysis carries the positions behind both counts."""
        grid, guard = parse_patrol_grid(REFERENCE_MAP)
        analysis = analyze_patrol(grid, guard, SERIAL)

        assert len(analysis.visited_positions) == 41
        assert guard.position in analysis.visited_positions
        assert analysis.paradox_positions == REFERENCE_PARADOX_POINTS

    def test_looping_baseline_has_no_paradox_positions(self) -> None:
        """No paradox positions are reported once the baseline loops."""
        grid, guard = parse_patrol_grid(LOOPING_BASELINE_MAP)
        assert is_paradox_point(grid, guard, (1, 3))

        analysis = analyze_patrol(grid, guard, SERIAL)

        assert analysis.coverage == 10
        assert len(analysis.visited_positions) == 10
        assert analysis.paradox_points == 0
        assert analysis.paradox_positions == frozenset()


class TestSearchConfig:
    """Tests for search settings."""

    def test_defaults(self) -> None:
        """Defaults use every CPU and the path-only pool."""
        config = SearchConfig()
        assert config.workers is None
        assert config.resolved_workers() >= 1
        assert config.chunk_size == 256
        assert config.pool is CandidatePool.VISITED

    @pytest.mark.parametrize("kwargs", [{"workers": 0}, {"chunk_size": 0}, {"workers": -2}])
    def test_rejects_bad_values(self, kwargs: dict[str, int]) -> None:
        """Non-positive worker counts and chunk sizes are rejected."""
        with pytest.raises(ValueError):
            SearchConfig(**kwargs)
