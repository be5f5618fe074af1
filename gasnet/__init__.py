"""gasnet: gas pipeline network modeling and analysis.

Compressor stations and pipes are kept in an ``EntityStore`` and linked by
directed, pipe-mediated connections. Queries build a fresh graph from the store
and run one of four algorithms: reachability (BFS), shortest path (Dijkstra),
maximum flow (Edmonds-Karp) and topological order of stations (Kahn).

Example:
    from gasnet import EntityStore, analysis, connect

    store = EntityStore()
    a = store.add_station("A", 4, 4, 1)
    b = store.add_station("B", 2, 1, 2)
    connect(store, a.ref, b.ref, 700, length=120.0)

    flow = analysis.max_flow(store, a.ref, b.ref)
    route = analysis.shortest(store, a.ref, b.ref)
"""

from __future__ import annotations

from gasnet import analysis, cli, logging
from gasnet._version import __version__
from gasnet.algorithms import FlowSummary, PathResult, TopologicalOrder
from gasnet.config import DEFAULT_CONFIG, NetworkConfig, load_config
from gasnet.errors import (
    ConnectionRejected,
    EntityNotFoundError,
    GasNetError,
    NoPathError,
    NodeNotInGraphError,
    OperationRefused,
    PersistenceError,
    ValidationError,
)
from gasnet.graph.builder import NetworkGraph, build_graph
from gasnet.io import load_store, save_store
from gasnet.model import (
    CompressorStation,
    EntityStore,
    Pipe,
    PipeRef,
    StationRef,
    check_connection,
    connect,
    disconnect,
)

__all__ = [
    "__version__",
    "analysis",
    "cli",
    "logging",
    "CompressorStation",
    "ConnectionRejected",
    "DEFAULT_CONFIG",
    "EntityNotFoundError",
    "EntityStore",
    "FlowSummary",
    "GasNetError",
    "NetworkConfig",
    "NetworkGraph",
    "NoPathError",
    "NodeNotInGraphError",
    "OperationRefused",
    "PathResult",
    "PersistenceError",
    "Pipe",
    "PipeRef",
    "StationRef",
    "TopologicalOrder",
    "ValidationError",
    "build_graph",
    "check_connection",
    "connect",
    "disconnect",
    "load_config",
    "load_store",
    "save_store",
]
