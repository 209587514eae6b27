# lattice_reach/core/boundary_cache.py
#!/usr/bin/env python3
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Mapping, Tuple

from lattice_reach.core.types import BoundaryProfile, Coord, DistanceMap


def make_profile(entries: Mapping[Coord, int]) -> Tuple[BoundaryProfile, int]:
    """Normalise an entry set: (sorted (coord, d - min) pairs, min)."""
    if not entries:
        raise ValueError("Cannot build a boundary profile from no entries")
    base = min(entries.values())
    profile = tuple(sorted((c, d - base) for c, d in entries.items()))
    return profile, base


@dataclass
class BoundaryCache:
    """Profile -> distance map relative to the profile's zero.

    Lifetime is one solve. Lookups take a lock and insert only if absent, so
    one cache may be shared by threads computing different profiles.
    """

    _maps: Dict[BoundaryProfile, DistanceMap] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)
    hits: int = 0
    misses: int = 0

    def __len__(self) -> int:
        return len(self._maps)

    def __contains__(self, profile: BoundaryProfile) -> bool:
        return profile in self._maps

    def get(self, profile: BoundaryProfile):
        with self._lock:
            return self._maps.get(profile)

    def get_or_compute(
        self,
        profile: BoundaryProfile,
        compute: Callable[[Mapping[Coord, int]], DistanceMap],
    ) -> DistanceMap:
        with self._lock:
            found = self._maps.get(profile)
            if found is not None:
                self.hits += 1
                return found
        relative = compute(dict(profile))
        with self._lock:
            found = self._maps.setdefault(profile, relative)
            if found is relative:
                self.misses += 1
            else:
                self.hits += 1
        return found

    def items(self) -> List[Tuple[BoundaryProfile, DistanceMap]]:
        with self._lock:
            return list(self._maps.items())

    def clear(self) -> None:
        with self._lock:
            self._maps.clear()
            self.hits = 0
            self.misses = 0
