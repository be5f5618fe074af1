"""Command-line interface for gasnet."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from gasnet import analysis, report
from gasnet.config import NetworkConfig, load_config
from gasnet.errors import GasNetError, OperationRefused
from gasnet.graph.builder import build_graph
from gasnet.graph.convert import to_node_link
from gasnet.io import load_store, save_store
from gasnet.journal import OperationJournal
from gasnet.logging import get_logger, level_for_flags, set_global_log_level
from gasnet.model.connect import Endpoint, connect, disconnect
from gasnet.model.entities import PipeRef, StationRef
from gasnet.model.store import EntityStore, PercentComparison

logger = get_logger(__name__)


def parse_endpoint(text: str) -> Endpoint:
    """Parse ``s<id>``, ``p<id>`` or a bare id (station preferred).

    Raises:
        argparse.ArgumentTypeError: If the text is not a valid endpoint.
    """
    value = text.strip().lower()
    kind = None
    if value[:1] in ("s", "p"):
        kind, value = value[0], value[1:]
    try:
        entity_id = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid endpoint '{text}': use s<id>, p<id> or a number"
        ) from None
    if entity_id <= 0:
        raise argparse.ArgumentTypeError(f"invalid endpoint '{text}': id must be positive")
    if kind == "s":
        return StationRef(entity_id)
    if kind == "p":
        return PipeRef(entity_id)
    return entity_id


#: Id selection keyword standing for every pipe or station in store order.
ALL = "all"


def parse_id_selection(text: str) -> Union[int, str]:
    """Parse a positive id or the keyword ``all``.

    Raises:
        argparse.ArgumentTypeError: If the text is neither.
    """
    value = text.strip().lower()
    if value == ALL:
        return ALL
    try:
        entity_id = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid id '{text}': use a number or '{ALL}'"
        ) from None
    if entity_id <= 0:
        raise argparse.ArgumentTypeError(f"invalid id '{text}': id must be positive")
    return entity_id


def _selected_ids(
    selection: Sequence[Union[int, str]], existing: Iterable[int]
) -> List[int]:
    if ALL in selection:
        return list(existing)
    return [int(entity_id) for entity_id in selection]


def _yes_no(text: str) -> bool:
    value = text.strip().lower()
    if value in ("yes", "y", "true", "1"):
        return True
    if value in ("no", "n", "false", "0"):
        return False
    raise argparse.ArgumentTypeError(f"expected yes or no, got '{text}'")


@dataclass
class _Session:
    """Per-invocation state shared by the command handlers."""

    config: NetworkConfig
    journal: Optional[OperationJournal] = None

    def record(self, action: str, details: str = "") -> None:
        if self.journal is not None:
            self.journal.record(action, details)


#: Handler signature: (args, store, session) -> journal details.
Handler = Callable[[argparse.Namespace, EntityStore, _Session], str]


#
# Entity commands
#
def _add_pipe(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    pipe = store.add_pipe(args.name, args.length, args.diameter, under_repair=args.repair)
    print(f"✅ Added pipe {pipe.id} ({pipe.name})")
    return f"id {pipe.id}, {pipe.name}, {pipe.length} km, {pipe.diameter} mm"


def _add_station(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    active = args.workshops if args.active is None else args.active
    station = store.add_station(args.name, args.workshops, active, args.station_class)
    print(f"✅ Added station {station.id} ({station.name})")
    return (
        f"id {station.id}, {station.name}, "
        f"{station.active_workshops}/{station.total_workshops} workshops, "
        f"class {station.station_class}"
    )


def _edit_pipe(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    details = []
    ids = _selected_ids(args.ids, store.pipes)
    for pipe_id in ids:
        store.get_pipe(pipe_id)
    for pipe_id in ids:
        pipe = store.update_pipe(
            pipe_id, name=args.name, length=args.length, diameter=args.diameter
        )
        if args.toggle_repair:
            store.toggle_repair(pipe_id)
        state = "under repair" if pipe.under_repair else "in service"
        print(f"✅ Pipe {pipe.id} ({pipe.name}) updated, {state}")
        details.append(f"id {pipe.id} {state}")
    return "; ".join(details)


def _edit_station(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    station = store.update_station(
        args.id,
        name=args.name,
        total_workshops=args.workshops,
        station_class=args.station_class,
    )
    for _ in range(args.start):
        store.start_workshop(args.id)
    for _ in range(args.stop):
        store.stop_workshop(args.id)
    print(
        f"✅ Station {station.id} ({station.name}): "
        f"{station.active_workshops}/{station.total_workshops} workshops running"
    )
    return f"id {station.id}, {station.active_workshops}/{station.total_workshops}"


def _print_deletion(kind: str, deleted: List[int], skipped: Dict[int, str]) -> str:
    for entity_id in deleted:
        print(f"✅ Deleted {kind} {entity_id}")
    for entity_id, reason in skipped.items():
        print(f"⚠️  Skipped {kind} {entity_id}: {reason}")
    return f"deleted {deleted}, skipped {sorted(skipped)}"


def _delete_pipe(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    result = store.delete_pipes(_selected_ids(args.ids, store.pipes))
    return _print_deletion("pipe", result.deleted, result.skipped)


def _delete_station(
    args: argparse.Namespace, store: EntityStore, session: _Session
) -> str:
    result = store.delete_stations(_selected_ids(args.ids, store.stations))
    return _print_deletion("station", result.deleted, result.skipped)


#
# Network commands
#
def _connect(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    outcome = connect(
        store,
        args.start,
        args.end,
        args.diameter,
        name=args.name,
        length=args.length,
    )
    print(f"✅ Connected {outcome.describe()}")
    return outcome.describe()


def _disconnect(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    removed = disconnect(store, args.pipe_id)
    for conn in removed:
        print(f"✅ Removed {conn.start_ref} -> {conn.end_ref} (pipe {conn.pipe_id})")
    return f"pipe {args.pipe_id}, {len(removed)} connection(s)"


#
# Read-only commands
#
def _show(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    sections = []
    if args.what in ("all", "pipes"):
        sections.append("Pipes:\n" + report.pipes_table(store))
    if args.what in ("all", "stations"):
        sections.append("Stations:\n" + report.stations_table(store))
    if args.what in ("all", "network"):
        sections.append("Network:\n" + report.network_table(store))
    print("\n\n".join(sections))
    return args.what


def _search_pipes(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    matches = list(store.pipes.values())
    criteria = []
    if args.name is not None:
        found = {p.id for p in store.find_pipes_by_name(args.name)}
        matches = [p for p in matches if p.id in found]
        criteria.append(f"name '{args.name}'")
    if args.repair is not None:
        found = {p.id for p in store.find_pipes_by_repair(args.repair)}
        matches = [p for p in matches if p.id in found]
        criteria.append(f"repair {args.repair}")
    if args.in_use is not None:
        found = {p.id for p in store.find_pipes_by_use(args.in_use)}
        matches = [p for p in matches if p.id in found]
        criteria.append(f"in use {args.in_use}")
    print(f"Found {len(matches)} pipe(s)")
    if matches:
        print(report.pipes_table(store, matches))
    return f"{', '.join(criteria) or 'all'}: {len(matches)} found"


def _search_stations(
    args: argparse.Namespace, store: EntityStore, session: _Session
) -> str:
    matches = list(store.stations.values())
    criteria = []
    if args.name is not None:
        found = {s.id for s in store.find_stations_by_name(args.name)}
        matches = [s for s in matches if s.id in found]
        criteria.append(f"name '{args.name}'")
    if args.idle is not None:
        comparison = PercentComparison.from_string(args.compare)
        found = {
            s.id for s in store.find_stations_by_inactive_percent(args.idle, comparison)
        }
        matches = [s for s in matches if s.id in found]
        criteria.append(f"idle {args.compare} {args.idle}%")
    print(f"Found {len(matches)} station(s)")
    if matches:
        print(report.stations_table(store, matches))
    return f"{', '.join(criteria) or 'all'}: {len(matches)} found"


def _path(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    result = analysis.path(store, args.start, args.end)
    print(report.path_report(store, result))
    return result.describe()


def _shortest(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    result = analysis.shortest(store, args.start, args.end)
    print(report.path_report(store, result))
    return result.describe()


def _maxflow(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    summary = analysis.max_flow(store, args.source, args.sink)
    print(report.flow_report(store, summary))
    return summary.describe()


def _toposort(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    result = analysis.station_order(store)
    print(report.topo_report(store, result))
    return result.describe()


def _export(args: argparse.Namespace, store: EntityStore, session: _Session) -> str:
    data = to_node_link(build_graph(store), store)
    text = json.dumps(data, indent=2)
    if args.output is None:
        print(text)
        return "stdout"
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(text + "\n", encoding="utf-8")
    print(f"✅ Graph written to: {args.output}")
    return str(args.output)


#: Command name -> (handler, saves the network afterwards).
_COMMANDS: Dict[str, Tuple[Handler, bool]] = {
    "add-pipe": (_add_pipe, True),
    "add-station": (_add_station, True),
    "edit-pipe": (_edit_pipe, True),
    "edit-station": (_edit_station, True),
    "delete-pipe": (_delete_pipe, True),
    "delete-station": (_delete_station, True),
    "connect": (_connect, True),
    "disconnect": (_disconnect, True),
    "show": (_show, False),
    "search-pipes": (_search_pipes, False),
    "search-stations": (_search_stations, False),
    "path": (_path, False),
    "shortest": (_shortest, False),
    "maxflow": (_maxflow, False),
    "toposort": (_toposort, False),
    "export": (_export, False),
}


def _init_network(path: Path, force: bool, session: _Session) -> None:
    if path.exists() and not force:
        raise OperationRefused(f"{path} already exists; use --force to overwrite")
    save_store(EntityStore(config=session.config), path)
    print(f"✅ Created empty network: {path}")
    session.record("init", str(path))


def _run_command(args: argparse.Namespace, session: _Session) -> None:
    if args.command == "init":
        _init_network(args.network, args.force, session)
        return

    handler, mutates = _COMMANDS[args.command]
    store = load_store(args.network, session.config)
    logger.debug(
        "Loaded %s: %d pipes, %d stations, %d connections",
        args.network,
        len(store.pipes),
        len(store.stations),
        len(store.connections),
    )
    details = handler(args, store, session)
    if mutates:
        save_store(store, args.network)
        logger.debug("Saved %s", args.network)
    session.record(args.command, details)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gasnet",
        description="Manage and analyse gas pipeline networks.",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML file overriding constants"
    )
    parser.add_argument(
        "--journal",
        type=Path,
        default=None,
        help="Append an operation journal to this file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="COMMAND",
        help="Available commands",
    )

    def add(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("network", type=Path, help="Network file")
        return sub

    p = add("init", "Create an empty network file")
    p.add_argument("--force", action="store_true", help="Overwrite an existing file")

    p = add("add-pipe", "Add a pipe")
    p.add_argument("--name", required=True)
    p.add_argument("--length", type=float, required=True, help="Length in km")
    p.add_argument("--diameter", type=int, required=True, help="Diameter in mm")
    p.add_argument("--repair", action="store_true", help="Mark as under repair")

    p = add("add-station", "Add a compressor station")
    p.add_argument("--name", required=True)
    p.add_argument("--workshops", type=int, required=True, help="Total workshops")
    p.add_argument(
        "--active", type=int, default=None, help="Running workshops (default: all)"
    )
    p.add_argument("--class", dest="station_class", type=int, default=1)

    p = add("edit-pipe", "Edit one or more pipes")
    p.add_argument(
        "ids", type=parse_id_selection, nargs="+", help="Pipe ids or 'all'"
    )
    p.add_argument("--toggle-repair", action="store_true")
    p.add_argument("--name")
    p.add_argument("--length", type=float)
    p.add_argument("--diameter", type=int)

    p = add("edit-station", "Edit a compressor station")
    p.add_argument("id", type=int, help="Station id")
    p.add_argument("--name")
    p.add_argument("--workshops", type=int, help="New total workshops")
    p.add_argument("--class", dest="station_class", type=int)
    p.add_argument(
        "--start", type=int, default=0, metavar="N", help="Start N workshops"
    )
    p.add_argument("--stop", type=int, default=0, metavar="N", help="Stop N workshops")

    p = add("delete-pipe", "Delete pipes not used in the network")
    p.add_argument(
        "ids", type=parse_id_selection, nargs="+", help="Pipe ids or 'all'"
    )

    p = add("delete-station", "Delete stations and their connections")
    p.add_argument(
        "ids", type=parse_id_selection, nargs="+", help="Station ids or 'all'"
    )

    p = add("connect", "Connect two entities through a pipe")
    p.add_argument("start", type=parse_endpoint, help="s<id>, p<id> or id")
    p.add_argument("end", type=parse_endpoint, help="s<id>, p<id> or id")
    p.add_argument("--diameter", type=int, required=True, help="Pipe diameter in mm")
    p.add_argument("--name", help="Name for a newly built pipe")
    p.add_argument("--length", type=float, help="Length for a newly built pipe")

    p = add("disconnect", "Remove the connection mediated by a pipe")
    p.add_argument("pipe_id", type=int)

    p = add("show", "Show pipes, stations and connections")
    p.add_argument(
        "--what", choices=["all", "pipes", "stations", "network"], default="all"
    )

    p = add("search-pipes", "Search pipes")
    p.add_argument("--name", help="Case-insensitive name substring")
    p.add_argument("--repair", type=_yes_no, help="yes or no")
    p.add_argument("--in-use", dest="in_use", type=_yes_no, help="yes or no")

    p = add("search-stations", "Search compressor stations")
    p.add_argument("--name", help="Case-insensitive name substring")
    p.add_argument("--idle", type=float, help="Idle workshop percentage")
    p.add_argument(
        "--compare",
        choices=[c.name.lower() for c in PercentComparison],
        default="equal",
    )

    for name, help_text in (
        ("path", "Find a route with the fewest pipes"),
        ("shortest", "Find the shortest route by length"),
    ):
        p = add(name, help_text)
        p.add_argument("start", type=parse_endpoint)
        p.add_argument("end", type=parse_endpoint)

    p = add("maxflow", "Compute the maximum flow between two entities")
    p.add_argument("source", type=parse_endpoint)
    p.add_argument("sink", type=parse_endpoint)

    add("toposort", "Order stations topologically")

    p = add("export", "Export the network graph as node-link JSON")
    p.add_argument("--output", "-o", type=Path, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``gasnet`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = _build_parser()

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    set_global_log_level(level_for_flags(args.verbose, args.quiet))
    logger.debug("Debug logging enabled")

    session = _Session(config=NetworkConfig())
    try:
        if args.config is not None:
            session.config = load_config(args.config)
        if args.journal is not None:
            session.journal = OperationJournal(args.journal)
        _run_command(args, session)
    except (GasNetError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        session.record(f"{args.command} failed", str(e))
        print(f"❌ ERROR: {e}")
        sys.exit(1)
    finally:
        if session.journal is not None:
            session.journal.close()


if __name__ == "__main__":
    main()
