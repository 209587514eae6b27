import pytest
from loguru import logger

from lattice_reach.core.config import DEFAULT_LATTICE_TILE_LIMIT, SolveConfig
from lattice_reach.core.direct_solver import count_direct
from lattice_reach.core.errors import UnsupportedInputError
from lattice_reach.core.lattice_explorer import LatticeExplorer, estimated_tiles
from lattice_reach.core.solver import choose_strategy, solve, solve_with_report

DIRECT = SolveConfig(strategy="direct")
LATTICE = SolveConfig(strategy="lattice")
CLOSED = SolveConfig(strategy="closed_form")


def test_small_fixture(example_grid):
    assert solve(example_grid, 6) == 16


@pytest.mark.parametrize("steps, expected", [(6, 16), (10, 50), (50, 1594), (100, 6536)])
def test_known_counts_on_example(example_grid, steps, expected):
    assert solve(example_grid, steps) == expected
    assert solve(example_grid, steps, DIRECT) == expected


@pytest.mark.parametrize("steps", [10, 50, 100])
def test_lattice_agrees_with_brute_force(example_grid, steps):
    assert solve(example_grid, steps, LATTICE) == count_direct(example_grid, steps)


@pytest.mark.slow
@pytest.mark.parametrize("steps, expected", [(500, 167004), (1000, 668697)])
def test_large_budgets(example_grid, steps, expected):
    assert solve(example_grid, steps) == expected


@pytest.mark.parametrize("steps", [27, 38, 49])
def test_all_strategies_agree_when_computable(open_grid, steps):
    counts = {s: solve(open_grid, steps, SolveConfig(strategy=s)) for s in ("direct", "lattice", "closed_form", "auto")}
    assert len(set(counts.values())) == 1, counts


def test_monotone_for_fixed_parity(example_grid):
    counts = [solve(example_grid, n, DIRECT) for n in range(0, 64)]
    for n in range(len(counts) - 2):
        assert counts[n] <= counts[n + 2]


def test_monotone_on_lattice_path(open_grid):
    previous = {0: 0, 1: 0}
    for n in range(20, 90, 7):
        count = solve(open_grid, n, LATTICE)
        assert count >= previous[n % 2]
        previous[n % 2] = count


def test_blocked_border_rejects_fast_paths(walled_grid):
    with pytest.raises(UnsupportedInputError):
        solve(walled_grid, 100, LATTICE)
    with pytest.raises(UnsupportedInputError):
        solve(walled_grid, 104, CLOSED)
    with pytest.raises(UnsupportedInputError):
        solve(walled_grid, 100)


def test_blocked_border_direct_still_works(walled_grid):
    assert solve(walled_grid, 6) == count_direct(walled_grid, 6)
    assert solve(walled_grid, 30, DIRECT) == count_direct(walled_grid, 30)
    assert solve_with_report(walled_grid, 6).strategy == "direct"


def test_closed_form_on_unaligned_budget(open_grid):
    with pytest.raises(UnsupportedInputError, match="not aligned"):
        solve(open_grid, 100, CLOSED)


def test_idempotent(example_grid, open_grid):
    assert solve(example_grid, 77) == solve(example_grid, 77)
    first = solve_with_report(open_grid, 60)
    second = solve_with_report(open_grid, 60)
    assert first == second
    assert first.cache_misses > 0


@pytest.mark.parametrize(
    "fixture, steps, strategy",
    [
        ("example_grid", 6, "direct"),
        ("example_grid", 11, "direct"),
        ("example_grid", 50, "lattice"),
        ("open_grid", 60, "closed_form"),
        ("open_grid", 61, "lattice"),
        ("walled_grid", 60, "lattice"),
    ],
)
def test_auto_strategy(request, fixture, steps, strategy):
    grid = request.getfixturevalue(fixture)
    assert choose_strategy(grid, steps, SolveConfig()) == strategy


def test_direct_limit_override(open_grid):
    config = SolveConfig(direct_step_limit=100)
    assert choose_strategy(open_grid, 60, config) == "direct"
    assert solve_with_report(open_grid, 60, config).count == solve(open_grid, 60)


def test_report_counts_tiles(open_grid):
    report = solve_with_report(open_grid, 71)
    assert report.strategy == "closed_form"
    assert report.tiles_settled > 0
    assert report.tile_searches >= report.tiles_settled
    assert report.cache_hits + report.cache_misses == report.tile_searches


def test_negative_steps(example_grid):
    with pytest.raises(ValueError):
        solve(example_grid, -1)


def test_unaligned_huge_budget_is_rejected_not_searched(open_grid):
    assert estimated_tiles(open_grid, 26501366) > DEFAULT_LATTICE_TILE_LIMIT
    with pytest.raises(UnsupportedInputError, match="not aligned"):
        solve(open_grid, 26501366)


def test_aligned_huge_budget_still_uses_closed_form(open_grid):
    assert choose_strategy(open_grid, 26501370, SolveConfig()) == "closed_form"


def test_lattice_fallback_respects_tile_limit(open_grid):
    tiles = estimated_tiles(open_grid, 61)
    assert choose_strategy(open_grid, 61, SolveConfig(lattice_tile_limit=tiles)) == "lattice"
    with pytest.raises(UnsupportedInputError, match="limit"):
        choose_strategy(open_grid, 61, SolveConfig(lattice_tile_limit=tiles - 1))
    # an explicit strategy is not capped
    assert choose_strategy(open_grid, 61, SolveConfig("lattice", lattice_tile_limit=1)) == "lattice"


def test_estimate_bounds_settled_tiles(example_grid):
    for steps in (11, 40, 97):
        explorer = LatticeExplorer(example_grid, steps)
        explorer.run()
        assert len(explorer.results) <= estimated_tiles(example_grid, steps)


def test_library_use_does_not_log(example_grid):
    messages = []
    sink = logger.add(messages.append, level="TRACE")
    try:
        solve(example_grid, 50)
    finally:
        logger.remove(sink)
    assert messages == []
