"""Unweighted reachability search.

Breadth-first search over forward edges. Capacity and repair state are
ignored: a pipe under repair still links its endpoints for reachability.
"""

from __future__ import annotations

from collections import deque
from typing import List, Optional

from gasnet.algorithms.common import trace_path
from gasnet.algorithms.types import PathResult
from gasnet.errors import NoPathError
from gasnet.graph.builder import GraphEdge, NetworkGraph
from gasnet.model.entities import EntityRef


def find_path(graph: NetworkGraph, start: EntityRef, end: EntityRef) -> PathResult:
    """Find a route with the fewest hops from ``start`` to ``end``.

    A node's parent is fixed when it is first discovered, so among equally
    short routes the one using earlier-inserted edges wins.

    Args:
        graph: Graph to search.
        start: Start node.
        end: End node.

    Returns:
        The route; its cost is the sum of pipe lengths along it.

    Raises:
        NodeNotInGraphError: If either endpoint is not part of the graph.
        NoPathError: If ``end`` cannot be reached from ``start``.
    """
    src = graph.index_of(start)
    dst = graph.index_of(end)

    n = len(graph)
    visited = [False] * n
    parent = [-1] * n
    parent_edge: List[Optional[GraphEdge]] = [None] * n
    visited[src] = True
    queue = deque([src])

    while queue:
        node = queue.popleft()
        if node == dst:
            return trace_path(graph, parent, parent_edge, src, dst)
        for edge in graph.adjacency[node]:
            if edge.residual or visited[edge.to]:
                continue
            visited[edge.to] = True
            parent[edge.to] = node
            parent_edge[edge.to] = edge
            queue.append(edge.to)

    raise NoPathError(start, end)
