# lattice_reach/app/cli.py
#!/usr/bin/env python3
"""
Command line wrapper:

    lattice-reach maps/example.txt 6 10 50
    lattice-reach maps/open_lanes.txt 26501370 --strategy=closed_form --stats
    lattice-reach maps/example.txt 6 --distances

Prints one count per step budget. Exit code 2 on unreadable or unsupported input.
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger

from lattice_reach.core.config import DEFAULT_STEPS, STRATEGIES, resolve_config, with_overrides
from lattice_reach.core.errors import ParseError, UnsupportedInputError
from lattice_reach.core.parsing import load_grid, render_distances
from lattice_reach.core.solver import solve_with_report
from lattice_reach.core.tile_search import search_tile

EXIT_OK = 0
EXIT_BAD_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lattice-reach",
        description="Count cells reachable in exactly N steps on an infinitely repeated tile.",
    )
    p.add_argument("grid", help="tile file: '#' obstacle, '.' open, 'S' start")
    p.add_argument("steps", nargs="*", type=int, help=f"step budgets (default {DEFAULT_STEPS})")
    p.add_argument("--strategy", choices=[s.replace("_", "-") for s in STRATEGIES] + list(STRATEGIES),
                   help="override LATTICE_REACH_STRATEGY (default auto)")
    p.add_argument("--direct-limit", type=int, default=None,
                   help="largest budget the auto strategy hands to the direct solver")
    p.add_argument("--lattice-limit", type=int, default=None,
                   help="largest tile count the auto strategy hands to the tile-level search")
    p.add_argument("--distances", action="store_true", help="print the start tile's distance table first")
    p.add_argument("--stats", action="store_true", help="print strategy and cache statistics")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v debug, -vv trace")
    return p


def configure_logging(verbosity: int) -> None:
    level = {0: "WARNING", 1: "DEBUG"}.get(verbosity, "TRACE")
    logger.enable("lattice_reach")
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <7}</level> {name}:{line} - {message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = with_overrides(resolve_config(argv=[]), args.strategy, args.direct_limit, args.lattice_limit)
        grid = load_grid(args.grid)
        if args.distances:
            print(render_distances(grid, search_tile(grid, {grid.start: 0})), end="")
        for steps in args.steps or [DEFAULT_STEPS]:
            report = solve_with_report(grid, steps, config)
            if args.stats:
                print(
                    f"{steps}\t{report.count}\tstrategy={report.strategy} tiles={report.tiles_settled} "
                    f"searches={report.tile_searches} cache_hits={report.cache_hits} "
                    f"cache_misses={report.cache_misses}"
                )
            else:
                print(report.count)
    except FileNotFoundError as ex:
        logger.error(f"Grid file not found: {ex.filename}")
        return EXIT_BAD_INPUT
    except ParseError as ex:
        logger.error(f"Failed to parse {args.grid}: {ex}")
        return EXIT_BAD_INPUT
    except UnsupportedInputError as ex:
        logger.error(str(ex))
        return EXIT_BAD_INPUT
    except ValueError as ex:
        logger.error(str(ex))
        return EXIT_BAD_INPUT
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
