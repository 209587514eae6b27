import pytest

from lattice_reach.core.config import DEFAULT_LATTICE_TILE_LIMIT, SolveConfig, resolve_config, with_overrides


def test_defaults():
    config = resolve_config(argv=[], env={})
    assert config == SolveConfig()
    assert config.direct_limit_for(11, 7) == 11


def test_environment_then_arguments():
    env = {"LATTICE_REACH_STRATEGY": "lattice", "LATTICE_REACH_DIRECT_LIMIT": "5"}
    assert resolve_config(argv=[], env=env) == SolveConfig("lattice", 5)

    config = resolve_config(argv=["viewer", "--strategy=closed-form", "--direct-limit=0"], env=env)
    assert config.strategy == "closed_form"
    assert config.direct_limit_for(11, 11) == 0


def test_overrides_leave_unset_fields():
    base = SolveConfig("direct", 3)
    assert with_overrides(base) is base
    assert with_overrides(base, strategy="closed-form") == SolveConfig("closed_form", 3)
    assert with_overrides(base, direct_step_limit=9) == SolveConfig("direct", 9)


@pytest.mark.parametrize("kwargs", [{"strategy": "bfs"}, {"direct_step_limit": -1}])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        SolveConfig(**kwargs)


def test_invalid_environment():
    with pytest.raises(ValueError):
        resolve_config(argv=[], env={"LATTICE_REACH_STRATEGY": "astar"})


def test_lattice_limit_from_environment_and_arguments():
    env = {"LATTICE_REACH_LATTICE_LIMIT": "500"}
    assert resolve_config(argv=[], env=env).lattice_tile_limit == 500
    assert resolve_config(argv=["--lattice-limit=20"], env=env).lattice_tile_limit == 20
    assert resolve_config(argv=[], env={}).lattice_tile_limit == DEFAULT_LATTICE_TILE_LIMIT
    assert with_overrides(SolveConfig(), lattice_tile_limit=7).lattice_tile_limit == 7


def test_lattice_limit_must_be_positive():
    with pytest.raises(ValueError):
        SolveConfig(lattice_tile_limit=0)
