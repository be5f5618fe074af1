"""Weighted shortest path (Dijkstra) over pipe lengths.

Pipes under repair carry an infinite weight and never relax a neighbour, so
they are effectively absent from the search.
"""

from __future__ import annotations

import math
from heapq import heappop, heappush
from typing import List, Optional, Tuple

from gasnet.algorithms.common import trace_path
from gasnet.algorithms.types import PathResult
from gasnet.graph.builder import GraphEdge, NetworkGraph
from gasnet.model.entities import EntityRef

NO_PATH = PathResult(nodes=(), pipes=(), cost=math.inf)


def shortest_path(graph: NetworkGraph, start: EntityRef, end: EntityRef) -> PathResult:
    """Minimum total length route from ``start`` to ``end``.

    The search stops as soon as ``end`` is popped from the heap. Relaxation is
    strict, so among equal-cost routes the first relaxing edge in adjacency
    order is kept; heap ties break on node index.

    Args:
        graph: Graph to search.
        start: Start node.
        end: End node.

    Returns:
        The route and its total length, or a result with ``cost == inf`` and no
        nodes when ``end`` is unreachable.

    Raises:
        NodeNotInGraphError: If either endpoint is not part of the graph.
    """
    src = graph.index_of(start)
    dst = graph.index_of(end)

    n = len(graph)
    dist = [math.inf] * n
    parent = [-1] * n
    parent_edge: List[Optional[GraphEdge]] = [None] * n
    dist[src] = 0.0
    heap: List[Tuple[float, int]] = [(0.0, src)]

    while heap:
        d, node = heappop(heap)
        if d > dist[node]:
            continue
        if node == dst:
            break
        for edge in graph.adjacency[node]:
            if edge.residual or math.isinf(edge.weight):
                continue
            candidate = d + edge.weight
            if candidate < dist[edge.to]:
                dist[edge.to] = candidate
                parent[edge.to] = node
                parent_edge[edge.to] = edge
                heappush(heap, (candidate, edge.to))

    if math.isinf(dist[dst]):
        return NO_PATH
    route = trace_path(graph, parent, parent_edge, src, dst)
    return PathResult(nodes=route.nodes, pipes=route.pipes, cost=dist[dst])
