"""Plain-text rendering of entities and analysis results.

Every function returns a string; printing is left to the caller.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional

from gasnet.algorithms.types import FlowSummary, PathResult, TopologicalOrder
from gasnet.model.capacity import pipe_capacity, station_capacity
from gasnet.model.entities import CompressorStation, EntityRef, Pipe, StationRef
from gasnet.model.store import EntityStore


def format_table(
    headers: List[str],
    rows: List[List[Any]],
    min_width: int = 4,
    max_col_width: Optional[int] = None,
) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers.
        rows: Data rows.
        min_width: Minimum column width.
        max_col_width: Cells longer than this are clipped with "...".

    Returns:
        Formatted table string, or an empty string when there are no rows.
    """
    if not rows:
        return ""

    def clip(val: Any) -> str:
        s = str(val)
        if max_col_width is not None and len(s) > max_col_width:
            return s[: max_col_width - 3] + "..."
        return s

    clipped_headers = [clip(h) for h in headers]
    clipped_rows = [[clip(item) for item in row] for row in rows]

    all_data = [clipped_headers] + clipped_rows
    col_widths = []
    for col_idx in range(len(clipped_headers)):
        max_width = max(len(row[col_idx]) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[str]) -> str:
        return "   " + " | ".join(
            f"{item:<{col_widths[i]}}" for i, item in enumerate(row_data)
        ).rstrip()

    lines = [format_row(clipped_headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in clipped_rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def format_number(value: float) -> str:
    """Number with up to three decimals and thousands separators.

    Examples:
        0.1 -> "0.1"; 10.0 -> "10"; 1234.567 -> "1,234.567"; inf -> "inf".
    """
    if math.isinf(value):
        return "inf"
    s = f"{value:,.3f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _node(store: EntityStore, ref: EntityRef) -> str:
    if store.exists(ref):
        return f"{ref.label} {store.entity_name(ref)}"
    return ref.label


def pipes_table(store: EntityStore, pipes: Optional[Iterable[Pipe]] = None) -> str:
    """Table of pipes; all pipes in store order by default."""
    selected = list(store.pipes.values() if pipes is None else pipes)
    if not selected:
        return "No pipes."
    rows = []
    for pipe in selected:
        link = f"{pipe.start_ref.label} -> {pipe.end_ref.label}" if pipe.in_use else "-"
        rows.append(
            [
                pipe.id,
                pipe.name,
                format_number(pipe.length),
                pipe.diameter,
                _yes_no(pipe.under_repair),
                link,
                format_number(pipe_capacity(pipe, store.config)),
            ]
        )
    return format_table(
        ["ID", "Name", "Length km", "Diam mm", "Repair", "Connects", "Capacity"],
        rows,
        max_col_width=32,
    )


def stations_table(
    store: EntityStore, stations: Optional[Iterable[CompressorStation]] = None
) -> str:
    """Table of stations; all stations in store order by default."""
    selected = list(store.stations.values() if stations is None else stations)
    if not selected:
        return "No stations."
    rows = [
        [
            st.id,
            st.name,
            f"{st.active_workshops}/{st.total_workshops}",
            st.station_class,
            f"{st.inactive_percent:.1f}%",
            format_number(station_capacity(st, store.config)),
        ]
        for st in selected
    ]
    return format_table(
        ["ID", "Name", "Workshops", "Class", "Idle", "Capacity"],
        rows,
        max_col_width=32,
    )


def network_table(store: EntityStore) -> str:
    """Connections in creation order followed by network statistics."""
    stats = store.network_stats()
    summary = (
        f"Connections: {stats.connections}; "
        f"stations connected: {stats.connected_stations}/{stats.total_stations}; "
        f"pipes connected: {stats.connected_pipes}/{stats.total_pipes}"
    )
    if not store.connections:
        return "Network is empty.\n" + summary
    rows = []
    for conn in store.connections:
        pipe = store.pipes.get(conn.pipe_id)
        rows.append(
            [
                _node(store, conn.start_ref),
                _node(store, conn.end_ref),
                conn.pipe_id,
                pipe.diameter if pipe else "?",
                conn.start_type.label,
                format_number(pipe_capacity(pipe, store.config)) if pipe else "?",
            ]
        )
    table = format_table(
        ["From", "To", "Pipe", "Diam mm", "Type", "Capacity"], rows, max_col_width=32
    )
    return table + "\n" + summary


def path_report(store: EntityStore, result: PathResult) -> str:
    """Hop-by-hop listing of a route."""
    if not result.found:
        return "No path found."
    if not result.pipes:
        return f"Start and end coincide: {_node(store, result.nodes[0])}"
    rows = []
    for i, pipe_id in enumerate(result.pipes):
        pipe = store.pipes.get(pipe_id)
        rows.append(
            [
                i + 1,
                _node(store, result.nodes[i]),
                _node(store, result.nodes[i + 1]),
                pipe_id,
                format_number(pipe.length) if pipe else "?",
            ]
        )
    table = format_table(["Hop", "From", "To", "Pipe", "Length km"], rows)
    return (
        table
        + f"\nTotal: {format_number(result.cost)} km over {result.hops} "
        + ("pipe" if result.hops == 1 else "pipes")
    )


def flow_report(store: EntityStore, summary: FlowSummary) -> str:
    """Flow distribution, minimum cut and bottlenecks of a max-flow run."""
    lines = [
        f"Maximum flow from {_node(store, summary.source)} to "
        f"{_node(store, summary.sink)}: {format_number(summary.total_flow)}"
    ]
    rows = [
        [
            edge[0].label,
            edge[1].label,
            summary.pipe_ids[edge],
            format_number(flow),
            format_number(summary.capacity[edge]),
            f"{summary.utilization(edge):.1f}%",
        ]
        for edge, flow in summary.edge_flow.items()
        if flow > 0
    ]
    if rows:
        lines.append("")
        lines.append("Flow distribution:")
        lines.append(
            format_table(["From", "To", "Pipe", "Flow", "Capacity", "Used"], rows)
        )
    if summary.min_cut:
        cut = ", ".join(f"{a.label}->{b.label}" for a, b in summary.min_cut)
        lines.append("")
        lines.append(f"Minimum cut: {cut}")
    if summary.bottlenecks:
        lines.append("")
        lines.append("Bottlenecks:")
        lines.append(
            format_table(
                ["From", "To", "Pipe", "Residual"],
                [
                    [a.label, b.label, summary.pipe_ids[(a, b)], format_number(residual)]
                    for (a, b), residual in summary.bottlenecks
                ],
            )
        )
    return "\n".join(lines)


def topo_report(store: EntityStore, result: TopologicalOrder) -> str:
    """Station order, or the stations caught in a cycle."""
    if result.cycle:
        names = ", ".join(_node(store, StationRef(sid)) for sid in result.cycle)
        return f"Station graph contains a cycle. Stations not ordered: {names}"
    if not result.order:
        return "No stations."
    rows = [
        [pos + 1, sid, store.stations[sid].name if sid in store.stations else "?"]
        for pos, sid in enumerate(result.order)
    ]
    return "Topological order of stations:\n" + format_table(["#", "ID", "Name"], rows)
