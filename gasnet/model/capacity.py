"""Capacity and weight derived from physical attributes.

Nothing here is stored on the entities; values are recomputed whenever a graph
is built so that repair toggles and edits are always reflected.
"""

from __future__ import annotations

import math

from gasnet.config import DEFAULT_CONFIG, NetworkConfig
from gasnet.model.entities import CompressorStation, Pipe


def pipe_capacity(pipe: Pipe, config: NetworkConfig = DEFAULT_CONFIG) -> float:
    """Transport capacity of a pipe.

    ``base(diameter) * k * sqrt(d**5 / L)`` with the diameter in metres and the
    length in metres; zero while the pipe is under repair.

    Args:
        pipe: The pipe to evaluate.
        config: Capacity table and scale factor.

    Returns:
        Capacity in conventional units.
    """
    if pipe.under_repair:
        return 0.0
    base = config.base_capacity(pipe.diameter)
    diameter_m = pipe.diameter / 1000.0
    length_m = pipe.length * 1000.0
    return base * config.capacity_adjustment * math.sqrt(diameter_m**5 / length_m)


def pipe_weight(pipe: Pipe) -> float:
    """Path weight of a pipe: its length in km, or ``inf`` while under repair."""
    if pipe.under_repair:
        return math.inf
    return pipe.length


def station_capacity(
    station: CompressorStation, config: NetworkConfig = DEFAULT_CONFIG
) -> float:
    """Throughput of a station: active workshops times class times a constant."""
    return station.active_workshops * station.station_class * config.station_capacity_factor
