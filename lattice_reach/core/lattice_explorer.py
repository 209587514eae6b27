# lattice_reach/core/lattice_explorer.py
#!/usr/bin/env python3
"""
Tile-level Dijkstra over the repeated plane.

Each tile instance (TileCoord) is settled by one TileSearch seeded with the
cells its neighbours hand over across the shared edge. Per-tile state moves
UNVISITED -> FRONTIER -> SETTLED; the heap priority is the cheapest entry
distance of the tile.

A settled tile is re-opened when a neighbour settled later offers a strictly
shorter entry. Offers from every side are kept, so at the fixed point each
tile holds the exact plane distances (restricted to <= steps).

Entry sets are normalised into boundary profiles and looked up in the
BoundaryCache before searching, so the number of actual tile searches is the
number of distinct profiles, not the number of tiles.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple
import heapq
from math import inf

from loguru import logger

from lattice_reach.core.boundary_cache import BoundaryCache, make_profile
from lattice_reach.core.errors import LatticeInvariantError
from lattice_reach.core.tile_search import TileSearch, TileView
from lattice_reach.core.types import (
    NEIGHBOR_OFFSETS,
    BoundaryProfile,
    Coord,
    GridModel,
    TileCoord,
    TileState,
    TileTypeResult,
)

ORIGIN: TileCoord = (0, 0)
START_SIDE: Coord = (0, 0)  # pseudo-side holding {start: 0} for the origin tile


def facing_pairs(grid: GridModel, direction: Coord) -> List[Tuple[Coord, Coord]]:
    """(cell on this tile's edge, matching cell in the neighbour) for one direction."""
    w, h = grid.width, grid.height
    if direction == (1, 0):
        return [((w - 1, y), (0, y)) for y in range(h)]
    if direction == (-1, 0):
        return [((0, y), (w - 1, y)) for y in range(h)]
    if direction == (0, 1):
        return [((x, h - 1), (x, 0)) for x in range(w)]
    if direction == (0, -1):
        return [((x, 0), (x, h - 1)) for x in range(w)]
    raise ValueError(f"Not a unit direction: {direction}")


def max_tile_hops(grid: GridModel, steps: int) -> int:
    """Manhattan tile distance beyond which no tile can be entered within `steps`."""
    side = min(grid.width, grid.height)
    return -(-steps // side) + 1


def estimated_tiles(grid: GridModel, steps: int) -> int:
    """Upper bound on the tiles a LatticeExplorer run can settle: the diamond of
    radius max_tile_hops."""
    r = max_tile_hops(grid, steps)
    return 2 * r * (r + 1) + 1


@dataclass
class LatticeExplorer:
    grid: GridModel
    steps: int
    cache: BoundaryCache = field(default_factory=BoundaryCache)
    name: str = "LatticeExplorer"

    open_pq: List[Tuple[int, TileCoord]] = field(default_factory=list)   # (min entry, tile)
    state: Dict[TileCoord, TileState] = field(default_factory=dict)
    best: Dict[TileCoord, int] = field(default_factory=dict)
    entries: Dict[TileCoord, Dict[Coord, Dict[Coord, int]]] = field(default_factory=dict)  # tile -> side -> offers
    results: Dict[TileCoord, TileTypeResult] = field(default_factory=dict)
    tile_searches: int = 0
    reopened: int = 0
    done: bool = False

    def __post_init__(self):
        if self.steps < 0:
            raise ValueError("steps must be non-negative")
        self._facing = {d: facing_pairs(self.grid, d) for d in NEIGHBOR_OFFSETS}
        self._max_hops = max_tile_hops(self.grid, self.steps)
        self._search = TileSearch(TileView(self.grid), name=f"{self.name}.tile")
        self._counts: Dict[Tuple[BoundaryProfile, int], int] = {}

    # -------------------- lifecycle --------------------

    def reset(self) -> None:
        self.open_pq.clear()
        self.state.clear()
        self.best.clear()
        self.entries.clear()
        self.results.clear()
        self.tile_searches = 0
        self.reopened = 0
        self.done = False

        self.entries[ORIGIN] = {START_SIDE: {self.grid.start: 0}}
        self.best[ORIGIN] = 0
        self.state[ORIGIN] = TileState.FRONTIER
        heapq.heappush(self.open_pq, (0, ORIGIN))

    def run(self) -> Dict[TileCoord, TileTypeResult]:
        self.reset()
        while self.open_pq:
            d, t = heapq.heappop(self.open_pq)
            if self.state.get(t) is not TileState.FRONTIER or d != self.best[t]:
                continue
            self._settle(t)
            self._offer_to_neighbors(t)

        for res in self.results.values():
            res.count = self._count(res)
        self.done = True
        logger.debug(
            f"[{self.name}] steps={self.steps} tiles={len(self.results)} searches={self.tile_searches} "
            f"reopened={self.reopened} profiles={len(self.cache)} hits={self.cache.hits} misses={self.cache.misses}"
        )
        return self.results

    # -------------------- expansion --------------------

    def tile_state(self, t: TileCoord) -> TileState:
        return self.state.get(t, TileState.UNVISITED)

    def _merged_entries(self, t: TileCoord) -> Dict[Coord, int]:
        merged: Dict[Coord, int] = {}
        for offers in self.entries.get(t, {}).values():
            for c, d in offers.items():
                if d < merged.get(c, inf):
                    merged[c] = d
        return merged

    def _settle(self, t: TileCoord) -> None:
        entries = self._merged_entries(t)
        if not entries:
            raise LatticeInvariantError(f"Frontier tile {t} has no entry cells")

        profile, base = make_profile(entries)
        relative = self.cache.get_or_compute(profile, self._search.run)
        self.results[t] = TileTypeResult(tile=t, relative=relative, offset=base, profile=profile)
        self.state[t] = TileState.SETTLED
        self.tile_searches += 1

    def _offer_to_neighbors(self, t: TileCoord) -> None:
        res = self.results[t]
        tx, ty = t
        for (dx, dy), pairs in self._facing.items():
            n = (tx + dx, ty + dy)
            if abs(n[0]) + abs(n[1]) > self._max_hops:
                continue

            offer: Dict[Coord, int] = {}
            for here, there in pairs:
                d = res.distance(here)
                if d is not None and d + 1 <= self.steps:
                    offer[there] = d + 1
            if not offer:
                continue

            side = (-dx, -dy)
            sides = self.entries.setdefault(n, {})
            current = sides.get(side, {})
            improved = False
            merged = dict(current)
            for c, d in offer.items():
                if d < merged.get(c, inf):
                    merged[c] = d
                    improved = True
            if not improved:
                continue

            sides[side] = merged
            entry_min = min(min(o.values()) for o in sides.values())
            if self.state.get(n) is TileState.SETTLED:
                self.reopened += 1
            self.best[n] = entry_min
            self.state[n] = TileState.FRONTIER
            heapq.heappush(self.open_pq, (entry_min, n))

    # -------------------- results --------------------

    def _count(self, res: TileTypeResult) -> int:
        budget = self.steps - res.offset
        key = (res.profile, budget)
        cached = self._counts.get(key)
        if cached is None:
            cached = sum(1 for d in res.relative.values() if d <= budget and (budget - d) % 2 == 0)
            self._counts[key] = cached
        return cached

    def count_for(self, t: TileCoord) -> int:
        res = self.results.get(t)
        return 0 if res is None else res.count

    def total(self) -> int:
        return sum(res.count for res in self.results.values())

    def reachable_cells(self, t: TileCoord) -> Set[Coord]:
        """Absolute coords in tile `t` where a walk of exactly `steps` moves can end."""
        res = self.results.get(t)
        if res is None:
            return set()
        ox, oy = t[0] * self.grid.width, t[1] * self.grid.height
        parity = self.steps % 2
        return {
            (x + ox, y + oy)
            for (x, y), d in res.absolute().items()
            if d <= self.steps and d % 2 == parity
        }

    def iter_reachable(self) -> Iterator[Coord]:
        for t in sorted(self.results):
            yield from sorted(self.reachable_cells(t))
