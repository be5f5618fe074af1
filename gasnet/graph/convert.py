"""Graph conversion from NetworkGraph to NetworkX.

Only forward edges are exported; residual edges exist solely for max-flow.
Nodes are labelled ``S<id>`` for stations and ``P<id>`` for pipes so that the
two id spaces stay distinct.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

import networkx as nx

from gasnet.graph.builder import NetworkGraph
from gasnet.model.store import EntityStore


def to_digraph(
    graph: NetworkGraph, store: Optional[EntityStore] = None
) -> nx.DiGraph:
    """Convert a NetworkGraph to a NetworkX DiGraph.

    Edge attributes: ``pipe_id``, ``capacity``, ``weight``, ``length`` and
    ``flow``. Node attributes: ``kind`` and ``entity_id``, plus ``name`` when a
    store is given.

    Args:
        graph: Built graph.
        store: Optional store used to attach entity names.

    Returns:
        A DiGraph with one edge per connection.
    """
    nx_graph = nx.DiGraph()
    for ref in graph.nodes:
        attrs: Dict[str, Any] = {
            "kind": "station" if ref.is_station else "pipe",
            "entity_id": ref.id,
        }
        if store is not None and store.exists(ref):
            attrs["name"] = store.entity_name(ref)
        nx_graph.add_node(ref.label, **attrs)

    for u, edge in graph.forward_edges():
        nx_graph.add_edge(
            graph.nodes[u].label,
            graph.nodes[edge.to].label,
            pipe_id=edge.pipe_id,
            capacity=edge.capacity,
            weight=edge.weight,
            length=edge.length,
            flow=edge.flow,
        )
    return nx_graph


def to_node_link(
    graph: NetworkGraph, store: Optional[EntityStore] = None
) -> Dict[str, Any]:
    """Return a JSON-ready node-link dictionary for ``graph``.

    Infinite weights (pipes under repair) are written as ``None``.
    """
    nx_graph = to_digraph(graph, store)
    for _, _, data in nx_graph.edges(data=True):
        if math.isinf(data["weight"]):
            data["weight"] = None
    return nx.node_link_data(nx_graph, edges="links")
