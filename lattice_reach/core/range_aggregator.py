# lattice_reach/core/range_aggregator.py
#!/usr/bin/env python3
"""
Closed-form count for very large step budgets.

With an open tile border and an open start row/column, every border cell
sits at its Manhattan distance from the start, so the reachable region grows
as a diamond of whole tiles. For a square tile of odd side W with the start
at its centre and N = k*W + W//2:

- tiles with Manhattan tile distance d <= k-1 are fully covered; their count
  only depends on the parity of d,
- the four axis tiles at d = k are cardinal tips,
- off-axis tiles at d = k reach all but one outer corner (inner diagonals,
  k-1 of them per quadrant),
- off-axis tiles at d = k+1 reach only one inner corner (outer diagonals,
  k of them per quadrant).

The per-role counts are read off a LatticeExplorer run at the reduced budget
k'*W + W//2 (k' = 2 or 3, matching the parity of k), and multiplied by the
closed-form multiplicities below.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from loguru import logger

from lattice_reach.core.boundary_cache import BoundaryCache
from lattice_reach.core.errors import UnsupportedInputError
from lattice_reach.core.lattice_explorer import LatticeExplorer
from lattice_reach.core.types import GridModel, TileCoord, TileRole

QUADRANTS: Dict[str, Tuple[int, int]] = {"NE": (1, -1), "NW": (-1, -1), "SE": (1, 1), "SW": (-1, 1)}


def role_tiles(reduced_radius: int) -> Dict[TileRole, TileCoord]:
    """Representative tile of each role in a run at radius k'."""
    r = reduced_radius
    tiles = {
        TileRole.CENTER_EVEN: (0, 0),
        TileRole.CENTER_ODD: (0, 1),
        TileRole.TIP_N: (0, -r),
        TileRole.TIP_E: (r, 0),
        TileRole.TIP_S: (0, r),
        TileRole.TIP_W: (-r, 0),
    }
    for q, (sx, sy) in QUADRANTS.items():
        tiles[TileRole[f"INNER_{q}"]] = (sx, sy * (r - 1))
        tiles[TileRole[f"OUTER_{q}"]] = (sx, sy * r)
    return tiles


def role_multiplicities(radius: int) -> Dict[TileRole, int]:
    """How many tiles of each role lie within a budget of radius*W + W//2."""
    m = radius - 1
    e = m // 2
    o = (m + 1) // 2
    mult = {
        TileRole.CENTER_EVEN: 1 + 4 * e * (e + 1),
        TileRole.CENTER_ODD: 4 * o * o,
    }
    for tip in (TileRole.TIP_N, TileRole.TIP_E, TileRole.TIP_S, TileRole.TIP_W):
        mult[tip] = 1
    for q in QUADRANTS:
        mult[TileRole[f"INNER_{q}"]] = radius - 1
        mult[TileRole[f"OUTER_{q}"]] = radius
    return mult


def check_closed_form(grid: GridModel, steps: int) -> Optional[str]:
    """Reason the closed form does not apply, or None."""
    w = grid.width
    if grid.width != grid.height:
        return f"tile is not square ({grid.width}x{grid.height})"
    if w % 2 == 0:
        return f"tile side {w} is even"
    if grid.start != (w // 2, w // 2):
        return f"start {grid.start} is not the tile centre"
    if not grid.open_border():
        return "tile border contains an obstacle"
    if not grid.open_start_lines():
        return "start row or column contains an obstacle"
    if steps % w != w // 2:
        return f"steps {steps} is not aligned to an edge midpoint ({steps} mod {w} != {w // 2})"
    if steps // w < 2:
        return f"steps {steps} spans fewer than two tile radii"
    return None


@dataclass
class RangeAggregator:
    grid: GridModel
    steps: int
    cache: BoundaryCache = field(default_factory=BoundaryCache)
    name: str = "RangeAggregator"

    explorer: Optional[LatticeExplorer] = None
    role_counts: Dict[TileRole, int] = field(default_factory=dict)
    multiplicities: Dict[TileRole, int] = field(default_factory=dict)

    @property
    def radius(self) -> int:
        return self.steps // self.grid.width

    @property
    def reduced_radius(self) -> int:
        return 2 if self.radius % 2 == 0 else 3

    def validate(self) -> None:
        reason = check_closed_form(self.grid, self.steps)
        if reason is not None:
            raise UnsupportedInputError(f"Closed-form count unavailable: {reason}")

    def run(self) -> int:
        self.validate()
        w = self.grid.width
        r = self.reduced_radius
        reduced_steps = r * w + w // 2

        self.explorer = LatticeExplorer(self.grid, reduced_steps, cache=self.cache, name=f"{self.name}.lattice")
        self.explorer.run()
        self._check_full_tiles()

        tiles = role_tiles(r)
        self.role_counts = {role: self.explorer.count_for(t) for role, t in tiles.items()}
        self.multiplicities = role_multiplicities(self.radius)

        total = sum(self.role_counts[role] * self.multiplicities[role] for role in TileRole)
        logger.debug(
            f"[{self.name}] steps={self.steps} radius={self.radius} reduced={reduced_steps} "
            f"full even/odd={self.role_counts[TileRole.CENTER_EVEN]}/{self.role_counts[TileRole.CENTER_ODD]} "
            f"total={total}"
        )
        return total

    def _check_full_tiles(self) -> None:
        # (0,0) and (0,1) stand in for every interior tile, so the whole
        # reduced interior must be covered.
        inner = self.reduced_radius - 1
        for t, res in self.explorer.results.items():
            if abs(t[0]) + abs(t[1]) > inner:
                continue
            if max(res.relative.values()) + res.offset > self.explorer.steps:
                raise UnsupportedInputError(
                    f"Closed-form count unavailable: interior tile {t} is not fully covered"
                )
