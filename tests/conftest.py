"""Shared fixtures: small networks built through the public store API.

Capacities follow the default configuration, so tests compare against
``pipe_capacity`` rather than hard-coded numbers.
"""

from __future__ import annotations

import pytest

from gasnet.logging import reset_logging, setup_root_logger
from gasnet.model.connect import connect
from gasnet.model.store import EntityStore


@pytest.fixture
def empty_store():
    return EntityStore()


@pytest.fixture
def triangle_store():
    # Stations, lengths in km, diameters in mm:
    #
    #   A --[1000, 50]--> B --[700, 80]--> C
    #   |                                  ^
    #   +-------------[500, 200]-----------+
    #
    # Pipes 1, 2, 3 are created by connect() in that order.
    store = EntityStore()
    a = store.add_station("Alpha", 4, 4, 1)
    b = store.add_station("Bravo", 3, 2, 2)
    c = store.add_station("Charlie", 2, 0, 1)
    connect(store, a.ref, b.ref, 1000, length=50.0)
    connect(store, b.ref, c.ref, 700, length=80.0)
    connect(store, a.ref, c.ref, 500, length=200.0)
    return store


@pytest.fixture
def islands_store():
    # Two components: A -> B and C -> D, all 500 mm, 10 km.
    store = EntityStore()
    ids = [store.add_station(name, 2, 1, 1).id for name in ("A", "B", "C", "D")]
    connect(store, ids[0], ids[1], 500, length=10.0)
    connect(store, ids[2], ids[3], 500, length=10.0)
    return store


@pytest.fixture
def pipe_node_store():
    # A pipe used as a network node, sharing id 1 with a station:
    #
    #   S1 Inlet --[pipe 2]--> P1 Header --[pipe 3]--> S2 Outlet
    #
    # All pipes are 700 mm; the header is 10 km, the links 5 km each.
    store = EntityStore()
    header = store.add_pipe("Header", 10.0, 700)
    inlet = store.add_station("Inlet", 2, 2, 1)
    outlet = store.add_station("Outlet", 2, 2, 1)
    connect(store, inlet.ref, header.ref, 700, length=5.0)
    connect(store, header.ref, outlet.ref, 700, length=5.0)
    return store


@pytest.fixture
def fresh_logging():
    reset_logging()
    setup_root_logger()
    yield
    reset_logging()
    setup_root_logger()
