from pathlib import Path

import pytest

from lattice_reach.core.errors import ParseError
from lattice_reach.core.parsing import load_grid, parse_grid, render_distances, render_grid
from lattice_reach.core.tile_search import search_tile

MAP_DIR = Path(__file__).resolve().parents[1] / "maps"


def test_parse_example(example_grid):
    assert (example_grid.width, example_grid.height) == (11, 11)
    assert example_grid.start == (5, 5)
    assert (5, 1) in example_grid.obstacles
    assert example_grid.open_border()
    assert not example_grid.open_start_lines()


def test_parse_tolerates_crlf_and_trailing_blank_lines():
    grid = parse_grid("..#\r\n.S.\r\n...\r\n\r\n")
    assert (grid.width, grid.height) == (3, 3)
    assert grid.obstacles == frozenset({(2, 0)})
    assert grid.start == (1, 1)
    assert grid.open_cell_count() == 8


def test_render_matches_source_text(open_grid):
    assert render_grid(open_grid) == (MAP_DIR / "open_lanes.txt").read_text()


@pytest.mark.parametrize(
    "text, line, column",
    [
        ("...\n.S\n...", 2, None),
        ("S..\n..S\n...", 2, 3),
        ("...\n.x.\n.S.", 2, 2),
    ],
)
def test_malformed_rows_report_position(text, line, column):
    with pytest.raises(ParseError) as ei:
        parse_grid(text)
    assert ei.value.line == line
    assert ei.value.column == column


def test_missing_start():
    with pytest.raises(ParseError, match="No start"):
        parse_grid("...\n...\n")


def test_empty_input():
    with pytest.raises(ParseError, match="empty"):
        parse_grid("\n\n")


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_grid("#")


def test_load_grid_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_grid(tmp_path / "nope.txt")


def test_render_distances_from_start():
    grid = parse_grid("...\n.S.\n..#\n")
    table = render_distances(grid, search_tile(grid, {grid.start: 0}))
    assert table == "2 1 2\n1 0 1\n2 1 #\n"


def test_render_distances_marks_unreachable_cells():
    grid = parse_grid("S#.\n##.\n...\n")
    table = render_distances(grid, search_tile(grid, {grid.start: 0}))
    assert table == "0 # .\n# # .\n. . .\n"


def test_render_distances_pads_to_widest_value(example_grid):
    table = render_distances(example_grid, search_tile(example_grid, {example_grid.start: 0}))
    rows = table.splitlines()
    assert len(rows) == 11
    assert len({len(r) for r in rows}) == 1
    assert rows[5].split()[5] == "0"
