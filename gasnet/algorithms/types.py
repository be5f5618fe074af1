"""Result containers returned by the graph algorithms.

All containers are immutable and hold entity references or ids only, so they
can be rendered or journaled after the graph that produced them is gone.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from gasnet.model.entities import EntityRef

#: Directed node pair ``(from_ref, to_ref)`` identifying one connection.
EdgeKey = Tuple[EntityRef, EntityRef]


@dataclass(frozen=True)
class PathResult:
    """A route through the network.

    Attributes:
        nodes: Entity references from start to end, inclusive.
        pipes: Mediating pipe ids, one per hop.
        cost: Total length in km, or ``inf`` when no route exists.
    """

    nodes: Tuple[EntityRef, ...]
    pipes: Tuple[int, ...]
    cost: float

    @property
    def found(self) -> bool:
        return bool(self.nodes) and not math.isinf(self.cost)

    @property
    def hops(self) -> int:
        return len(self.pipes)

    def describe(self) -> str:
        if not self.found:
            return "no path"
        route = " -> ".join(ref.label for ref in self.nodes)
        unit = "pipe" if self.hops == 1 else "pipes"
        return f"{route}, {self.hops} {unit}, {self.cost:.2f} km"


@dataclass(frozen=True)
class FlowSummary:
    """Summary of a max-flow computation.

    Attributes:
        source: Flow source.
        sink: Flow sink.
        total_flow: Maximum flow value achieved.
        edge_flow: Flow per forward edge with positive capacity.
        capacity: Original capacity per such edge.
        pipe_ids: Mediating pipe per such edge.
        residual_cap: Remaining capacity per such edge.
        reachable: Nodes reachable from the source in the final residual graph.
        min_cut: Saturated edges crossing from the reachable set to the rest.
        bottlenecks: Edges with positive capacity whose residual is below the
            reporting threshold, ascending by residual.
    """

    source: EntityRef
    sink: EntityRef
    total_flow: float
    edge_flow: Dict[EdgeKey, float] = field(default_factory=dict)
    capacity: Dict[EdgeKey, float] = field(default_factory=dict)
    pipe_ids: Dict[EdgeKey, int] = field(default_factory=dict)
    residual_cap: Dict[EdgeKey, float] = field(default_factory=dict)
    reachable: Set[EntityRef] = field(default_factory=set)
    min_cut: List[EdgeKey] = field(default_factory=list)
    bottlenecks: List[Tuple[EdgeKey, float]] = field(default_factory=list)

    def utilization(self, edge: EdgeKey) -> float:
        """Share of the edge's capacity in use, in percent."""
        cap = self.capacity.get(edge, 0.0)
        if cap <= 0:
            return 0.0
        return 100.0 * self.edge_flow.get(edge, 0.0) / cap

    def describe(self) -> str:
        return f"{self.source.label} -> {self.sink.label}, max flow {self.total_flow:.4g}"


@dataclass(frozen=True)
class TopologicalOrder:
    """Outcome of ordering the station subgraph.

    Exactly one of ``order`` and ``cycle`` is non-empty unless there are no
    stations at all.

    Attributes:
        order: Station ids in topological order when the subgraph is acyclic.
        cycle: Stations never emitted: members of a cycle or downstream of one.
    """

    order: Tuple[int, ...] = ()
    cycle: Tuple[int, ...] = ()

    @property
    def is_acyclic(self) -> bool:
        return not self.cycle

    def describe(self) -> str:
        if self.cycle:
            return "cycle among stations " + ", ".join(str(s) for s in self.cycle)
        if not self.order:
            return "no stations"
        return "order " + ", ".join(str(s) for s in self.order)
