# lattice_reach/core/parsing.py
#!/usr/bin/env python3
from pathlib import Path
from typing import Optional, Set, Union

from loguru import logger

from lattice_reach.core.errors import ParseError
from lattice_reach.core.types import Coord, DistanceMap, GridModel

OPEN = "."
BLOCK = "#"
START = "S"


def parse_grid(text: str) -> GridModel:
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise ParseError("Grid is empty")

    width = len(lines[0])
    obstacles: Set[Coord] = set()
    start: Optional[Coord] = None

    for y, row in enumerate(lines):
        if len(row) != width:
            raise ParseError(f"Ragged row: expected {width} columns, got {len(row)}", line=y + 1)
        for x, ch in enumerate(row):
            if ch == BLOCK:
                obstacles.add((x, y))
            elif ch == START:
                if start is not None:
                    raise ParseError(f"Duplicate start marker, first one at {start}", line=y + 1, column=x + 1)
                start = (x, y)
            elif ch != OPEN:
                raise ParseError(f"Unrecognised character {ch!r}", line=y + 1, column=x + 1)

    if start is None:
        raise ParseError("No start marker 'S' in grid")

    grid = GridModel(width, len(lines), frozenset(obstacles), start)
    logger.debug(f"Parsed {grid.width}x{grid.height} tile, {len(obstacles)} obstacles, start={start}")
    return grid


def load_grid(path: Union[str, Path]) -> GridModel:
    with open(path, "r") as f:
        return parse_grid(f.read())


def render_grid(grid: GridModel) -> str:
    rows = []
    for y in range(grid.height):
        row = []
        for x in range(grid.width):
            if (x, y) == grid.start:
                row.append(START)
            elif grid.is_block((x, y)):
                row.append(BLOCK)
            else:
                row.append(OPEN)
        rows.append("".join(row))
    return "\n".join(rows) + "\n"


def render_distances(grid: GridModel, distances: DistanceMap) -> str:
    """Tile-local distance table: numbers right-aligned, '#' obstacle, '.' unreachable."""
    width = max((len(str(d)) for d in distances.values()), default=1)
    rows = []
    for y in range(grid.height):
        row = []
        for x in range(grid.width):
            d = distances.get((x, y))
            if grid.is_block((x, y)):
                row.append(BLOCK.rjust(width))
            elif d is None:
                row.append(OPEN.rjust(width))
            else:
                row.append(str(d).rjust(width))
        rows.append(" ".join(row))
    return "\n".join(rows) + "\n"
