# lattice_reach/core/config.py
#!/usr/bin/env python3
import os
import sys
from dataclasses import dataclass, replace
from typing import List, Optional

STRATEGIES = ("auto", "direct", "lattice", "closed_form")
DEFAULT_STEPS = 64
DEFAULT_LATTICE_TILE_LIMIT = 250_000

ENV_STRATEGY = "LATTICE_REACH_STRATEGY"
ENV_DIRECT_LIMIT = "LATTICE_REACH_DIRECT_LIMIT"
ENV_LATTICE_LIMIT = "LATTICE_REACH_LATTICE_LIMIT"


@dataclass(frozen=True)
class SolveConfig:
    strategy: str = "auto"
    direct_step_limit: Optional[int] = None   # None -> the larger tile side
    lattice_tile_limit: int = DEFAULT_LATTICE_TILE_LIMIT   # auto -> lattice cap, in tiles

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {self.strategy!r}, expected one of {', '.join(STRATEGIES)}")
        if self.direct_step_limit is not None and self.direct_step_limit < 0:
            raise ValueError("direct_step_limit must be non-negative")
        if self.lattice_tile_limit < 1:
            raise ValueError("lattice_tile_limit must be positive")

    def direct_limit_for(self, width: int, height: int) -> int:
        if self.direct_step_limit is None:
            return max(width, height)
        return self.direct_step_limit


def _int_or_none(raw: Optional[str]) -> Optional[int]:
    return int(raw) if raw not in (None, "") else None


def resolve_config(argv: Optional[List[str]] = None, env: Optional[dict] = None) -> SolveConfig:
    """Defaults <- environment <- `--strategy=`/`--direct-limit=`/`--lattice-limit=` arguments."""
    env = os.environ if env is None else env
    argv = sys.argv if argv is None else argv

    strategy = env.get(ENV_STRATEGY, "auto").lower()
    limit_raw = env.get(ENV_DIRECT_LIMIT)
    tiles_raw = env.get(ENV_LATTICE_LIMIT)
    for arg in argv:
        if arg.startswith("--strategy="):
            strategy = arg.split("=", 1)[1].lower()
        elif arg.startswith("--direct-limit="):
            limit_raw = arg.split("=", 1)[1]
        elif arg.startswith("--lattice-limit="):
            tiles_raw = arg.split("=", 1)[1]

    tiles = _int_or_none(tiles_raw)
    return SolveConfig(
        strategy=strategy.replace("-", "_"),
        direct_step_limit=_int_or_none(limit_raw),
        lattice_tile_limit=DEFAULT_LATTICE_TILE_LIMIT if tiles is None else tiles,
    )


def with_overrides(config: SolveConfig, strategy: Optional[str] = None,
                   direct_step_limit: Optional[int] = None,
                   lattice_tile_limit: Optional[int] = None) -> SolveConfig:
    changes = {}
    if strategy is not None:
        changes["strategy"] = strategy.replace("-", "_")
    if direct_step_limit is not None:
        changes["direct_step_limit"] = direct_step_limit
    if lattice_tile_limit is not None:
        changes["lattice_tile_limit"] = lattice_tile_limit
    return replace(config, **changes) if changes else config
