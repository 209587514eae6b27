# lattice_reach/core/tile_search.py
#!/usr/bin/env python3
"""
Multi-source uniform-cost search over a grid view.

A view only has to answer two questions, like the workshop Grid did:
- in_bounds(c) -> bool
- is_block(c) -> bool

Every edge costs 1, but entries may start at different distances, so the
frontier is a heap of (g, cell) rather than a plain BFS queue.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple
import heapq
from math import inf

from loguru import logger

from lattice_reach.core.types import NEIGHBOR_OFFSETS, Coord, DistanceMap, GridModel


class TileView:
    """One tile instance, tile-local coordinates."""

    def __init__(self, grid: GridModel):
        self.grid = grid

    def in_bounds(self, c: Coord) -> bool:
        return self.grid.in_bounds(c)

    def is_block(self, c: Coord) -> bool:
        return self.grid.is_block(c)


class PeriodicPlaneView:
    """The repeated plane in absolute coordinates, clipped to a Manhattan ball."""

    def __init__(self, grid: GridModel, radius: int, center: Optional[Coord] = None):
        self.grid = grid
        self.radius = radius
        self.center = grid.start if center is None else center

    def in_bounds(self, c: Coord) -> bool:
        cx, cy = self.center
        return abs(c[0] - cx) + abs(c[1] - cy) <= self.radius

    def is_block(self, c: Coord) -> bool:
        return self.grid.is_block_periodic(c)


@dataclass
class TileSearch:
    view: object
    name: str = "TileSearch"

    open_pq: List[Tuple[int, Coord]] = field(default_factory=list)   # (g, cell)
    g: Dict[Coord, int] = field(default_factory=dict)
    popped_count: int = 0

    def _neighbors4(self, c: Coord) -> List[Coord]:
        x, y = c
        out: List[Coord] = []
        for dx, dy in NEIGHBOR_OFFSETS:
            n = (x + dx, y + dy)
            if self.view.in_bounds(n) and not self.view.is_block(n):
                out.append(n)
        return out

    def run(self, entries: Mapping[Coord, int], limit: Optional[int] = None) -> DistanceMap:
        """Distances from the cheapest entry to every reachable cell.

        Entries that are blocked or out of bounds are ignored. With `limit`,
        cells further than it are neither recorded nor expanded.
        """
        self.open_pq.clear()
        self.g.clear()
        self.popped_count = 0

        for c, d in entries.items():
            if d < 0:
                raise ValueError(f"Entry {c} has negative distance {d}")
            if limit is not None and d > limit:
                continue
            if not self.view.in_bounds(c) or self.view.is_block(c):
                continue
            if d < self.g.get(c, inf):
                self.g[c] = d
                heapq.heappush(self.open_pq, (d, c))

        done: DistanceMap = {}
        while self.open_pq:
            g_u, u = heapq.heappop(self.open_pq)
            if g_u != self.g.get(u, inf) or u in done:
                continue
            done[u] = g_u
            self.popped_count += 1

            alt = g_u + 1
            if limit is not None and alt > limit:
                continue
            for v in self._neighbors4(u):
                if alt < self.g.get(v, inf):
                    self.g[v] = alt
                    heapq.heappush(self.open_pq, (alt, v))

        logger.trace(f"[{self.name}] {len(entries)} entries -> {len(done)} cells, popped={self.popped_count}")
        return done


def search_tile(grid: GridModel, entries: Mapping[Coord, int]) -> DistanceMap:
    return TileSearch(TileView(grid)).run(entries)
