"""Directed graph projected from the Entity Store.

``NetworkGraph`` keeps one adjacency list per dense node index. Every
connection contributes a forward edge ``start -> end`` and a residual edge
``end -> start`` with zero capacity; each edge stores the list position of its
sibling so max-flow can update both in O(1).

The graph is rebuilt from the store for every query and never cached.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from gasnet.errors import NodeNotInGraphError
from gasnet.model.capacity import pipe_capacity, pipe_weight
from gasnet.model.entities import EntityRef, ref_sort_key
from gasnet.model.store import EntityStore


@dataclass
class GraphEdge:
    """One directed arc of the graph.

    Attributes:
        to: Index of the head node.
        pipe_id: Mediating pipe.
        capacity: Transport capacity; 0 for residual edges.
        weight: Path weight (pipe length, ``inf`` under repair).
        length: Pipe length in km.
        flow: Flow currently assigned; negative on residual edges.
        rev: Position of the sibling edge in ``adjacency[to]``.
        residual: True for the reverse edge paired with a forward edge.
    """

    to: int
    pipe_id: int
    capacity: float
    weight: float
    length: float
    flow: float = 0.0
    rev: int = -1
    residual: bool = False

    @property
    def residual_capacity(self) -> float:
        return self.capacity - self.flow


class NetworkGraph:
    """Adjacency-list graph over entity references.

    Attributes:
        nodes: Node reference per index.
        id_to_index: Node reference -> dense index.
        adjacency: Outgoing edges per index, in insertion order.
    """

    def __init__(self) -> None:
        self.nodes: List[EntityRef] = []
        self.id_to_index: Dict[EntityRef, int] = {}
        self.adjacency: List[List[GraphEdge]] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, ref: object) -> bool:
        return ref in self.id_to_index

    def add_node(self, ref: EntityRef) -> int:
        """Add a node and return its index.

        Raises:
            ValueError: If the node already exists.
        """
        if ref in self.id_to_index:
            raise ValueError(f"Node '{ref}' already exists in this graph.")
        index = len(self.nodes)
        self.nodes.append(ref)
        self.id_to_index[ref] = index
        self.adjacency.append([])
        return index

    def add_edge(
        self,
        start: EntityRef,
        end: EntityRef,
        pipe_id: int,
        capacity: float,
        weight: float,
        length: float = 0.0,
    ) -> Tuple[GraphEdge, GraphEdge]:
        """Add a forward edge and its paired residual edge.

        Both nodes must already exist; nodes are never created implicitly.

        Returns:
            The forward edge and the residual edge.

        Raises:
            ValueError: If either node does not exist, or on a self-loop.
        """
        if start == end:
            raise ValueError(f"Self-loop on '{start}' is not allowed.")
        if start not in self.id_to_index:
            raise ValueError(f"Source node '{start}' does not exist.")
        if end not in self.id_to_index:
            raise ValueError(f"Target node '{end}' does not exist.")
        u = self.id_to_index[start]
        v = self.id_to_index[end]

        forward = GraphEdge(
            to=v, pipe_id=pipe_id, capacity=capacity, weight=weight, length=length
        )
        backward = GraphEdge(
            to=u, pipe_id=pipe_id, capacity=0.0, weight=weight, length=length, residual=True
        )
        forward.rev = len(self.adjacency[v])
        backward.rev = len(self.adjacency[u])
        self.adjacency[u].append(forward)
        self.adjacency[v].append(backward)
        return forward, backward

    def index_of(self, ref: EntityRef) -> int:
        """Dense index of ``ref``.

        Raises:
            NodeNotInGraphError: If the node is not part of the graph.
        """
        try:
            return self.id_to_index[ref]
        except KeyError:
            raise NodeNotInGraphError(ref) from None

    def sibling(self, edge: GraphEdge) -> GraphEdge:
        """Paired edge of ``edge``."""
        return self.adjacency[edge.to][edge.rev]

    def forward_edges(self) -> Iterator[Tuple[int, GraphEdge]]:
        """Yield ``(tail_index, edge)`` for every forward edge, by tail index."""
        for u, edges in enumerate(self.adjacency):
            for edge in edges:
                if not edge.residual:
                    yield u, edge

    def edge_count(self) -> int:
        return sum(1 for _ in self.forward_edges())

    def reset_flow(self) -> None:
        for edges in self.adjacency:
            for edge in edges:
                edge.flow = 0.0

    def copy(self) -> NetworkGraph:
        """Deep copy; flows on the copy do not affect the original."""
        return copy.deepcopy(self)


def build_graph(store: EntityStore) -> NetworkGraph:
    """Project the store's connections into a ``NetworkGraph``.

    Every endpoint of a connection becomes a node, indexed in ascending id
    order with stations before pipes on equal ids. Edges follow connection
    order. Capacity and weight are recomputed from the mediating pipe.

    Args:
        store: Current entity records.

    Returns:
        A fresh graph with all flows at zero.
    """
    graph = NetworkGraph()
    refs = set()
    for conn in store.connections:
        refs.add(conn.start_ref)
        refs.add(conn.end_ref)
    for ref in sorted(refs, key=ref_sort_key):
        graph.add_node(ref)

    for conn in store.connections:
        pipe = store.pipes.get(conn.pipe_id)
        if pipe is None:
            continue
        graph.add_edge(
            conn.start_ref,
            conn.end_ref,
            pipe_id=pipe.id,
            capacity=pipe_capacity(pipe, store.config),
            weight=pipe_weight(pipe),
            length=pipe.length,
        )
    return graph
