"""Helpers shared by the path searches."""

from __future__ import annotations

from typing import List, Optional, Sequence

from gasnet.algorithms.types import PathResult
from gasnet.graph.builder import GraphEdge, NetworkGraph


def trace_path(
    graph: NetworkGraph,
    parent: Sequence[int],
    parent_edge: Sequence[Optional[GraphEdge]],
    src: int,
    dst: int,
) -> PathResult:
    """Walk parent links back from ``dst`` and build a ``PathResult``.

    Args:
        graph: Graph the search ran on.
        parent: Predecessor index per node, -1 when undiscovered.
        parent_edge: Edge used to reach each node.
        src: Source index.
        dst: Destination index; must have been reached.

    Returns:
        The route with its total pipe length as cost.
    """
    indices: List[int] = [dst]
    edges: List[GraphEdge] = []
    node = dst
    while node != src:
        edge = parent_edge[node]
        assert edge is not None
        edges.append(edge)
        node = parent[node]
        indices.append(node)
    indices.reverse()
    edges.reverse()
    return PathResult(
        nodes=tuple(graph.nodes[i] for i in indices),
        pipes=tuple(edge.pipe_id for edge in edges),
        cost=sum(edge.length for edge in edges),
    )
