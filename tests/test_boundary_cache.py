import pytest

from lattice_reach.core.boundary_cache import BoundaryCache, make_profile
from lattice_reach.core.lattice_explorer import LatticeExplorer
from lattice_reach.core.tile_search import search_tile


def test_profile_collapses_constant_offsets():
    a, base_a = make_profile({(0, 3): 5, (0, 4): 7})
    b, base_b = make_profile({(0, 4): 12, (0, 3): 10})
    assert a == b == (((0, 3), 0), ((0, 4), 2))
    assert (base_a, base_b) == (5, 10)


def test_profile_needs_entries():
    with pytest.raises(ValueError):
        make_profile({})


def test_get_or_compute_computes_once():
    cache = BoundaryCache()
    calls = []

    def compute(entries):
        calls.append(dict(entries))
        return {c: d for c, d in entries.items()}

    profile, _ = make_profile({(1, 1): 4})
    first = cache.get_or_compute(profile, compute)
    second = cache.get_or_compute(profile, compute)

    assert first is second
    assert calls == [{(1, 1): 0}]
    assert (cache.hits, cache.misses) == (1, 1)
    assert profile in cache and len(cache) == 1
    assert cache.get(profile) is first


def test_clear_resets_counters():
    cache = BoundaryCache()
    profile, _ = make_profile({(0, 0): 0})
    cache.get_or_compute(profile, lambda e: dict(e))
    cache.clear()
    assert len(cache) == 0
    assert (cache.hits, cache.misses) == (0, 0)
    assert cache.get(profile) is None


def test_cached_maps_equal_fresh_searches(example_grid):
    cache = BoundaryCache()
    LatticeExplorer(example_grid, 60, cache=cache).run()
    assert len(cache) > 1
    for profile, relative in cache.items():
        assert relative == search_tile(example_grid, dict(profile))


def test_requery_after_shift_gives_same_map(open_grid):
    entries = {(0, y): 20 + abs(y - 5) for y in range(11)}
    profile, base = make_profile(entries)
    cache = BoundaryCache()
    cached = cache.get_or_compute(profile, lambda e: search_tile(open_grid, e))

    fresh = search_tile(open_grid, entries)
    assert {c: d + base for c, d in cached.items()} == fresh


def test_losing_an_insert_race_counts_as_hit():
    cache = BoundaryCache()
    profile, _ = make_profile({(2, 0): 1})
    winner, loser = {(2, 0): 0}, {(2, 0): 0}

    def slow_compute(entries):
        # another caller stores the same profile while this one is computing
        cache.get_or_compute(profile, lambda e: winner)
        return loser

    assert cache.get_or_compute(profile, slow_compute) is winner
    assert (cache.hits, cache.misses) == (1, 1)
    assert len(cache) == 1
