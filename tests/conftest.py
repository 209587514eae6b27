import sys
from pathlib import Path

import pytest
from loguru import logger

from lattice_reach.core.parsing import load_grid

MAP_DIR = Path(__file__).resolve().parents[1] / "maps"


@pytest.fixture
def example_grid():
    """11x11, open border, obstacles on the start row and column."""
    return load_grid(MAP_DIR / "example.txt")


@pytest.fixture
def open_grid():
    """11x11, open border and open start row/column, start at the centre."""
    return load_grid(MAP_DIR / "open_lanes.txt")


@pytest.fixture
def walled_grid():
    """Like open_lanes but with obstacles on the top and bottom border."""
    return load_grid(MAP_DIR / "walled.txt")


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)
    logger.disable("lattice_reach")
