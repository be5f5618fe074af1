"""Topological order of compressor stations (Kahn's algorithm).

Only station-to-station connections take part; pipes acting as nodes are
ignored. Every station in the store counts, including isolated ones, which are
emitted with in-degree zero.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from gasnet.algorithms.types import TopologicalOrder
from gasnet.graph.builder import NetworkGraph
from gasnet.model.entities import StationRef


def _station_successors(graph: NetworkGraph) -> Dict[int, List[int]]:
    """Station id -> downstream station ids, in connection order."""
    successors: Dict[int, List[int]] = {}
    for u, edge in graph.forward_edges():
        start = graph.nodes[u]
        end = graph.nodes[edge.to]
        if isinstance(start, StationRef) and isinstance(end, StationRef):
            successors.setdefault(start.id, []).append(end.id)
    return successors


def topological_order(graph: NetworkGraph, station_ids: Sequence[int]) -> TopologicalOrder:
    """Order stations so that every connection points forward.

    The worklist starts with the in-degree-zero stations in ascending id order
    and is consumed last-in first-out; successors are visited in connection
    order.

    Args:
        graph: Graph built from the store.
        station_ids: Every station id, in store order.

    Returns:
        The order when the station graph is acyclic. Otherwise the stations
        that were never emitted, in store order, and no order.
    """
    successors = _station_successors(graph)
    indegree = {sid: 0 for sid in station_ids}
    for targets in successors.values():
        for target in targets:
            if target in indegree:
                indegree[target] += 1

    stack = sorted(sid for sid, deg in indegree.items() if deg == 0)
    order: List[int] = []
    while stack:
        sid = stack.pop()
        order.append(sid)
        for target in successors.get(sid, ()):
            if target not in indegree:
                continue
            indegree[target] -= 1
            if indegree[target] == 0:
                stack.append(target)

    if len(order) < len(indegree):
        emitted = set(order)
        return TopologicalOrder(cycle=tuple(s for s in station_ids if s not in emitted))
    return TopologicalOrder(order=tuple(order))
