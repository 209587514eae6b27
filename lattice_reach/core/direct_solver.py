# lattice_reach/core/direct_solver.py
#!/usr/bin/env python3
"""
Direct solver: one bounded search over the repeated plane.

Exact for every tile, obstacle layout and step budget, but its cost grows
with the area of the reachable diamond (about 2 * N^2 cells), so it is only
used for small budgets and as the reference in tests.
"""

from typing import Set

from loguru import logger

from lattice_reach.core.tile_search import PeriodicPlaneView, TileSearch
from lattice_reach.core.types import Coord, DistanceMap, GridModel


def plane_distances(grid: GridModel, steps: int) -> DistanceMap:
    """Absolute-coordinate distances of every cell within `steps` of the start."""
    if steps < 0:
        raise ValueError("steps must be non-negative")
    search = TileSearch(PeriodicPlaneView(grid, radius=steps), name="DirectSolver")
    return search.run({grid.start: 0}, limit=steps)


def reachable_cells(grid: GridModel, steps: int) -> Set[Coord]:
    """Cells (absolute coords) where a walk of exactly `steps` moves can end."""
    parity = steps % 2
    return {c for c, d in plane_distances(grid, steps).items() if d % 2 == parity}


def count_direct(grid: GridModel, steps: int) -> int:
    dist = plane_distances(grid, steps)
    parity = steps % 2
    count = sum(1 for d in dist.values() if d % 2 == parity)
    logger.debug(f"[direct] steps={steps} searched={len(dist)} reachable={count}")
    return count
