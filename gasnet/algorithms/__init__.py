"""Graph algorithms over ``NetworkGraph``."""

from gasnet.algorithms.bfs import find_path
from gasnet.algorithms.max_flow import calc_max_flow
from gasnet.algorithms.spf import shortest_path
from gasnet.algorithms.topo import topological_order
from gasnet.algorithms.types import FlowSummary, PathResult, TopologicalOrder

__all__ = [
    "FlowSummary",
    "PathResult",
    "TopologicalOrder",
    "calc_max_flow",
    "find_path",
    "shortest_path",
    "topological_order",
]
