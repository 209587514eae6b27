# lattice_reach/core/types.py
#!/usr/bin/env python3
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from loguru import logger

# Quiet when used as a library; the CLI and the viewer enable it.
logger.disable("lattice_reach")

Coord = Tuple[int, int]  # (col, row)
TileCoord = Tuple[int, int]  # (tile col, tile row); (0, 0) holds the start
DistanceMap = Dict[Coord, int]
BoundaryProfile = Tuple[Tuple[Coord, int], ...]

NEIGHBOR_OFFSETS: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass(frozen=True)
class GridModel:
    width: int
    height: int
    obstacles: FrozenSet[Coord]
    start: Coord

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Tile must have a positive size")
        if not self.in_bounds(self.start):
            raise ValueError(f"Start {self.start} outside the tile")
        if self.start in self.obstacles:
            raise ValueError("Start cell is an obstacle")

    def in_bounds(self, c: Coord) -> bool:
        x, y = c
        return 0 <= x < self.width and 0 <= y < self.height

    def is_block(self, c: Coord) -> bool:
        return c in self.obstacles

    def is_block_periodic(self, c: Coord) -> bool:
        """Obstacle lookup for an absolute plane coordinate."""
        x, y = c
        return (x % self.width, y % self.height) in self.obstacles

    def tile_of(self, c: Coord) -> TileCoord:
        x, y = c
        return (x // self.width, y // self.height)

    def is_border(self, c: Coord) -> bool:
        x, y = c
        return x in (0, self.width - 1) or y in (0, self.height - 1)

    def open_border(self) -> bool:
        return not any(self.is_border(c) for c in self.obstacles)

    def open_start_lines(self) -> bool:
        sx, sy = self.start
        return not any(x == sx or y == sy for (x, y) in self.obstacles)

    def open_cell_count(self) -> int:
        return self.width * self.height - len(self.obstacles)


class TileState(Enum):
    UNVISITED = "unvisited"
    FRONTIER = "frontier"
    SETTLED = "settled"


class TileRole(Enum):
    CENTER_EVEN = "center-even"
    CENTER_ODD = "center-odd"
    TIP_N = "tip-n"
    TIP_E = "tip-e"
    TIP_S = "tip-s"
    TIP_W = "tip-w"
    INNER_NE = "inner-ne"
    INNER_NW = "inner-nw"
    INNER_SE = "inner-se"
    INNER_SW = "inner-sw"
    OUTER_NE = "outer-ne"
    OUTER_NW = "outer-nw"
    OUTER_SE = "outer-se"
    OUTER_SW = "outer-sw"


@dataclass
class TileTypeResult:
    tile: TileCoord
    relative: DistanceMap          # shared with the cache, never mutate
    offset: int
    profile: BoundaryProfile
    count: int = 0

    def distance(self, c: Coord) -> Optional[int]:
        d = self.relative.get(c)
        return None if d is None else d + self.offset

    def absolute(self) -> DistanceMap:
        return {c: d + self.offset for c, d in self.relative.items()}


@dataclass
class SolveReport:
    count: int
    strategy: str
    steps: int
    tiles_settled: int = 0
    tile_searches: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
