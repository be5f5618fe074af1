"""Maximum flow via Edmonds-Karp.

Augmenting paths are found by breadth-first search over edges whose residual
capacity exceeds a tolerance; each path is saturated by its bottleneck, with
the forward edge gaining and its sibling losing the same amount. Residual
capacity at or below the tolerance counts as no edge.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from gasnet.algorithms.types import EdgeKey, FlowSummary
from gasnet.graph.builder import GraphEdge, NetworkGraph
from gasnet.model.entities import EntityRef

DEFAULT_TOLERANCE = 1e-9
DEFAULT_BOTTLENECK_THRESHOLD = 1.0


def _augmenting_path(
    graph: NetworkGraph, src: int, dst: int, tolerance: float
) -> Optional[List[GraphEdge]]:
    """Shortest (in hops) augmenting path as a list of edges, or None."""
    parent_edge: List[Optional[GraphEdge]] = [None] * len(graph)
    parent = [-1] * len(graph)
    visited = [False] * len(graph)
    visited[src] = True
    queue = deque([src])
    while queue:
        node = queue.popleft()
        for edge in graph.adjacency[node]:
            if visited[edge.to] or edge.residual_capacity <= tolerance:
                continue
            visited[edge.to] = True
            parent[edge.to] = node
            parent_edge[edge.to] = edge
            if edge.to == dst:
                path: List[GraphEdge] = []
                cur = dst
                while cur != src:
                    step = parent_edge[cur]
                    assert step is not None
                    path.append(step)
                    cur = parent[cur]
                path.reverse()
                return path
            queue.append(edge.to)
    return None


def _reachable(graph: NetworkGraph, src: int, tolerance: float) -> Set[int]:
    seen = {src}
    queue = deque([src])
    while queue:
        node = queue.popleft()
        for edge in graph.adjacency[node]:
            if edge.to not in seen and edge.residual_capacity > tolerance:
                seen.add(edge.to)
                queue.append(edge.to)
    return seen


def calc_max_flow(
    graph: NetworkGraph,
    src_node: EntityRef,
    dst_node: EntityRef,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    bottleneck_threshold: float = DEFAULT_BOTTLENECK_THRESHOLD,
    copy_graph: bool = True,
) -> FlowSummary:
    """Compute the maximum flow from ``src_node`` to ``dst_node``.

    Args:
        graph: Graph to analyse. Flows are reset before the computation.
        src_node: Flow source.
        dst_node: Flow sink.
        tolerance: Residual capacity at or below this value is treated as zero.
        bottleneck_threshold: Edges with positive capacity and residual below
            this value are reported as bottlenecks.
        copy_graph: Work on a copy so that ``graph`` keeps zero flows. When
            False, the final flows are left on ``graph``.

    Returns:
        FlowSummary with the total flow and per-edge details. Source equal to
        sink yields a total of 0.

    Raises:
        NodeNotInGraphError: If either endpoint is not part of the graph.
    """
    src = graph.index_of(src_node)
    dst = graph.index_of(dst_node)

    work = graph.copy() if copy_graph else graph
    work.reset_flow()

    total = 0.0
    if src != dst:
        while True:
            path = _augmenting_path(work, src, dst, tolerance)
            if path is None:
                break
            bottleneck = min(edge.residual_capacity for edge in path)
            for edge in path:
                edge.flow += bottleneck
                work.sibling(edge).flow -= bottleneck
            total += bottleneck

    reachable_idx = _reachable(work, src, tolerance)

    edge_flow: Dict[EdgeKey, float] = {}
    capacity: Dict[EdgeKey, float] = {}
    pipe_ids: Dict[EdgeKey, int] = {}
    residual_cap: Dict[EdgeKey, float] = {}
    min_cut: List[EdgeKey] = []
    bottlenecks: List[Tuple[EdgeKey, float]] = []

    for u, edge in work.forward_edges():
        if edge.capacity <= 0:
            continue
        key = (work.nodes[u], work.nodes[edge.to])
        residual = edge.residual_capacity
        edge_flow[key] = edge.flow
        capacity[key] = edge.capacity
        pipe_ids[key] = edge.pipe_id
        residual_cap[key] = residual
        if src != dst and u in reachable_idx and edge.to not in reachable_idx:
            min_cut.append(key)
        if residual < bottleneck_threshold:
            bottlenecks.append((key, residual))

    bottlenecks.sort(key=lambda item: item[1])

    return FlowSummary(
        source=src_node,
        sink=dst_node,
        total_flow=total,
        edge_flow=edge_flow,
        capacity=capacity,
        pipe_ids=pipe_ids,
        residual_cap=residual_cap,
        reachable={work.nodes[i] for i in reachable_idx},
        min_cut=min_cut,
        bottlenecks=bottlenecks,
    )
