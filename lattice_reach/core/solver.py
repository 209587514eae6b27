# lattice_reach/core/solver.py
#!/usr/bin/env python3
"""
solve(grid, steps) -> number of cells where a walk of exactly `steps` moves
can end on the repeated plane.

Strategies:
- direct       bounded search over the plane; exact for any tile, O(steps^2)
- lattice      tile-level search with the boundary-profile cache; needs an open border
- closed_form  RangeAggregator; needs every closed-form precondition
- auto         direct for small budgets, else closed_form when it applies, else lattice
               while the tile count stays under config.lattice_tile_limit
"""

from typing import Optional

from loguru import logger

from lattice_reach.core.boundary_cache import BoundaryCache
from lattice_reach.core.config import SolveConfig
from lattice_reach.core.direct_solver import count_direct
from lattice_reach.core.errors import UnsupportedInputError
from lattice_reach.core.lattice_explorer import LatticeExplorer, estimated_tiles
from lattice_reach.core.range_aggregator import RangeAggregator, check_closed_form
from lattice_reach.core.types import GridModel, SolveReport


def choose_strategy(grid: GridModel, steps: int, config: SolveConfig) -> str:
    if config.strategy != "auto":
        return config.strategy
    if steps <= config.direct_limit_for(grid.width, grid.height):
        return "direct"
    reason = check_closed_form(grid, steps)
    if reason is None:
        return "closed_form"
    tiles = estimated_tiles(grid, steps)
    if tiles > config.lattice_tile_limit:
        raise UnsupportedInputError(
            f"Closed-form count unavailable: {reason}; the tile-level search would settle "
            f"up to {tiles} tiles (limit {config.lattice_tile_limit})"
        )
    logger.debug(f"closed form skipped: {reason}")
    return "lattice"


def _require_open_border(grid: GridModel, strategy: str) -> None:
    if not grid.open_border():
        raise UnsupportedInputError(
            f"Strategy '{strategy}' needs an obstacle-free tile border; use the direct solver instead"
        )


def solve_with_report(grid: GridModel, steps: int, config: Optional[SolveConfig] = None) -> SolveReport:
    if steps < 0:
        raise ValueError("steps must be non-negative")
    config = config or SolveConfig()
    strategy = choose_strategy(grid, steps, config)
    logger.debug(f"solve: {grid.width}x{grid.height} tile, steps={steps}, strategy={strategy}")

    if strategy == "direct":
        return SolveReport(count=count_direct(grid, steps), strategy=strategy, steps=steps)

    _require_open_border(grid, strategy)
    cache = BoundaryCache()

    if strategy == "lattice":
        explorer = LatticeExplorer(grid, steps, cache=cache)
        explorer.run()
        count = explorer.total()
    elif strategy == "closed_form":
        aggregator = RangeAggregator(grid, steps, cache=cache)
        count = aggregator.run()
        explorer = aggregator.explorer
    else:
        raise ValueError(f"Unknown strategy {strategy!r}")

    return SolveReport(
        count=count,
        strategy=strategy,
        steps=steps,
        tiles_settled=len(explorer.results),
        tile_searches=explorer.tile_searches,
        cache_hits=cache.hits,
        cache_misses=cache.misses,
    )


def solve(grid: GridModel, steps: int, config: Optional[SolveConfig] = None) -> int:
    return solve_with_report(grid, steps, config).count
