import math

import pytest

from gasnet.config import NetworkConfig
from gasnet.errors import ValidationError
from gasnet.model.capacity import pipe_capacity, pipe_weight, station_capacity
from gasnet.model.entities import CompressorStation, Pipe


def make_pipe(diameter=1000, length=1.0, under_repair=False):
    return Pipe(id=1, name="P", length=length, diameter=diameter, under_repair=under_repair)


def test_capacity_formula():
    # 5000 * 0.01 * sqrt(1.0**5 / 1000)
    assert pipe_capacity(make_pipe(1000, 1.0)) == pytest.approx(50 / math.sqrt(1000))


@pytest.mark.parametrize("diameter", [500, 700, 1000, 1400])
def test_capacity_zero_and_weight_infinite_only_under_repair(diameter):
    working = make_pipe(diameter, 25.0)
    broken = make_pipe(diameter, 25.0, under_repair=True)

    assert pipe_capacity(working) > 0
    assert pipe_weight(working) == 25.0
    assert pipe_capacity(broken) == 0
    assert math.isinf(pipe_weight(broken))


def test_capacity_grows_with_diameter_and_falls_with_length():
    capacities = [pipe_capacity(make_pipe(d, 10.0)) for d in (500, 700, 1000, 1400)]
    assert capacities == sorted(capacities)
    assert pipe_capacity(make_pipe(700, 10.0)) > pipe_capacity(make_pipe(700, 40.0))


def test_capacity_uses_config():
    config = NetworkConfig(capacity_adjustment=0.02)
    assert pipe_capacity(make_pipe(), config) == pytest.approx(
        2 * pipe_capacity(make_pipe())
    )


def test_capacity_unknown_diameter():
    with pytest.raises(ValidationError):
        pipe_capacity(make_pipe(600))


def test_station_capacity():
    station = CompressorStation(
        id=1, name="S", total_workshops=5, active_workshops=2, station_class=3
    )
    assert station_capacity(station) == 6000.0
    assert station_capacity(station, NetworkConfig(station_capacity_factor=10)) == 60.0
