"""Test the configuration module functionality."""

import pytest

from gasnet.config import DEFAULT_CONFIG, NetworkConfig, format_diameters, load_config
from gasnet.errors import ValidationError


def test_defaults():
    config = NetworkConfig()
    assert config.pipe_capacities == {500: 1000.0, 700: 2500.0, 1000: 5000.0, 1400: 10000.0}
    assert config.capacity_adjustment == 0.01
    assert config.station_capacity_factor == 1000.0
    assert config.flow_tolerance == 1e-9
    assert config.bottleneck_threshold == 1.0
    assert config.allowed_diameters == frozenset({500, 700, 1000, 1400})
    assert DEFAULT_CONFIG == config


def test_instances_do_not_share_tables():
    first = NetworkConfig()
    first.pipe_capacities[600] = 1.0
    assert 600 not in NetworkConfig().pipe_capacities


def test_base_capacity():
    assert NetworkConfig().base_capacity(700) == 2500.0
    with pytest.raises(ValidationError, match="500, 700, 1000, 1400"):
        NetworkConfig().base_capacity(800)


def test_format_diameters():
    assert format_diameters(frozenset({1400, 500})) == "500, 1400"


def test_load_config(tmp_path):
    path = tmp_path / "gasnet.yaml"
    path.write_text(
        "pipe_capacities:\n"
        "  500: 800\n"
        "  900: 4000\n"
        "capacity_adjustment: 0.05\n"
        "bottleneck_threshold: 0\n"
    )
    config = load_config(path)
    assert config.pipe_capacities == {500: 800.0, 900: 4000.0}
    assert config.capacity_adjustment == 0.05
    assert config.bottleneck_threshold == 0.0
    assert config.flow_tolerance == 1e-9


def test_load_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == NetworkConfig()


@pytest.mark.parametrize(
    "text,message",
    [
        ("- 1\n- 2\n", "must contain a mapping"),
        ("speed: 3\n", "Unknown configuration keys: speed"),
        ("capacity_adjustment: fast\n", "must be a number"),
        ("pipe_capacities: {}\n", "non-empty mapping"),
        ("pipe_capacities:\n  500: -1\n", "must be positive"),
        ("pipe_capacities:\n  wide: 10\n", "Invalid pipe_capacities entry"),
        ("a: [1\n", "Invalid YAML"),
    ],
)
def test_invalid_config(tmp_path, text, message):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    with pytest.raises(ValidationError, match=message):
        load_config(path)
