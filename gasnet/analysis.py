"""Query facade over the Entity Store.

Each call builds a fresh graph from the store, resolves the endpoints and runs
one algorithm. Nothing is cached between calls, so edits to the store are
always reflected.
"""

from __future__ import annotations

from gasnet.algorithms import (
    FlowSummary,
    PathResult,
    TopologicalOrder,
    calc_max_flow,
    find_path,
    shortest_path,
    topological_order,
)
from gasnet.errors import EntityNotFoundError
from gasnet.graph.builder import build_graph
from gasnet.logging import get_logger
from gasnet.model.connect import Endpoint, resolve_endpoint
from gasnet.model.entities import EntityRef
from gasnet.model.store import EntityStore

logger = get_logger(__name__)


def resolve(store: EntityStore, endpoint: Endpoint) -> EntityRef:
    """Resolve an endpoint to an existing entity.

    Raises:
        EntityNotFoundError: If no such station or pipe exists.
    """
    ref = resolve_endpoint(store, endpoint)
    if ref is None:
        label = f"id {endpoint}" if isinstance(endpoint, int) else str(endpoint)
        raise EntityNotFoundError(f"No station or pipe with {label}")
    return ref


def path(store: EntityStore, start: Endpoint, end: Endpoint) -> PathResult:
    """Fewest-hops route from ``start`` to ``end``.

    Raises:
        EntityNotFoundError: If an endpoint does not exist.
        NodeNotInGraphError: If an endpoint is not connected.
        NoPathError: If ``end`` is unreachable.
    """
    start_ref, end_ref = resolve(store, start), resolve(store, end)
    graph = build_graph(store)
    logger.debug(
        "BFS %s -> %s on %d nodes, %d edges",
        start_ref.label,
        end_ref.label,
        len(graph),
        graph.edge_count(),
    )
    return find_path(graph, start_ref, end_ref)


def shortest(store: EntityStore, start: Endpoint, end: Endpoint) -> PathResult:
    """Minimum-length route; unreachable targets give ``cost == inf``."""
    start_ref, end_ref = resolve(store, start), resolve(store, end)
    graph = build_graph(store)
    logger.debug(
        "Dijkstra %s -> %s on %d nodes, %d edges",
        start_ref.label,
        end_ref.label,
        len(graph),
        graph.edge_count(),
    )
    result = shortest_path(graph, start_ref, end_ref)
    if not result.found:
        logger.debug("No weighted route from %s to %s", start_ref, end_ref)
    return result


def max_flow(store: EntityStore, source: Endpoint, sink: Endpoint) -> FlowSummary:
    """Maximum flow between two entities with the store's tolerances."""
    src_ref, dst_ref = resolve(store, source), resolve(store, sink)
    graph = build_graph(store)
    logger.debug(
        "Max flow %s -> %s on %d nodes, %d edges",
        src_ref.label,
        dst_ref.label,
        len(graph),
        graph.edge_count(),
    )
    summary = calc_max_flow(
        graph,
        src_ref,
        dst_ref,
        tolerance=store.config.flow_tolerance,
        bottleneck_threshold=store.config.bottleneck_threshold,
    )
    logger.debug(
        "Max flow %.6g, %d bottleneck edges", summary.total_flow, len(summary.bottlenecks)
    )
    return summary


def station_order(store: EntityStore) -> TopologicalOrder:
    """Topological order of all stations, or the stations caught in a cycle."""
    graph = build_graph(store)
    result = topological_order(graph, list(store.stations))
    if result.cycle:
        logger.debug("Station graph has a cycle: %s", list(result.cycle))
    return result
