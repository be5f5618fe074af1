"""Entity Store: pipes, stations, connections and their id allocators.

The store holds records only. Graph construction and analysis live in
``gasnet.graph`` and ``gasnet.algorithms``; connection rules live in
``gasnet.model.connect``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

from gasnet.config import NetworkConfig, format_diameters
from gasnet.errors import EntityNotFoundError, OperationRefused, ValidationError
from gasnet.model.entities import (
    CompressorStation,
    EntityRef,
    NetworkConnection,
    Pipe,
    PipeRef,
    StationRef,
    validate_length,
    validate_name,
)

#: Two percentages closer than this compare equal in station search.
PERCENT_EQUAL_TOLERANCE = 0.01


@dataclass
class IdAllocator:
    """Monotonically increasing id source for one entity domain.

    Attributes:
        next_id: Id handed out by the next ``allocate()`` call.
    """

    next_id: int = 1

    def allocate(self) -> int:
        allocated = self.next_id
        self.next_id += 1
        return allocated

    def observe(self, used_id: int) -> None:
        """Keep the counter ahead of an externally supplied id."""
        if used_id >= self.next_id:
            self.next_id = used_id + 1


class PercentComparison(IntEnum):
    """How a station's idle-workshop percentage is compared to a target."""

    GREATER = 1
    LESS = 2
    EQUAL = 3

    @classmethod
    def from_string(cls, value: str) -> PercentComparison:
        """Parse a case-insensitive member name such as ``"greater"``.

        Raises:
            ValueError: If the string doesn't match any member.
        """
        try:
            return cls[value.upper()]
        except KeyError:
            valid = ", ".join(e.name.lower() for e in cls)
            raise ValueError(
                f"Invalid comparison '{value}'. Valid values are: {valid}"
            ) from None


@dataclass
class DeletionReport:
    """Outcome of a bulk delete.

    Attributes:
        deleted: Ids removed, in request order.
        skipped: Ids left in place, mapped to the reason.
    """

    deleted: List[int] = field(default_factory=list)
    skipped: Dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkStats:
    connections: int
    connected_stations: int
    total_stations: int
    connected_pipes: int
    total_pipes: int


@dataclass
class EntityStore:
    """Owner of all entity records for one session.

    Pipes and stations are kept in insertion order, which is the order used
    for display, free-pipe selection and cycle reports.

    Attributes:
        pipes: Pipe id -> Pipe.
        stations: Station id -> CompressorStation.
        connections: Directed connections in creation order.
        pipe_ids: Allocator for new pipe ids.
        station_ids: Allocator for new station ids.
        config: Allowed diameters and capacity constants.
    """

    pipes: Dict[int, Pipe] = field(default_factory=dict)
    stations: Dict[int, CompressorStation] = field(default_factory=dict)
    connections: List[NetworkConnection] = field(default_factory=list)
    pipe_ids: IdAllocator = field(default_factory=IdAllocator)
    station_ids: IdAllocator = field(default_factory=IdAllocator)
    config: NetworkConfig = field(default_factory=NetworkConfig)

    #
    # Creation
    #
    def add_pipe(
        self,
        name: str,
        length: float,
        diameter: int,
        *,
        under_repair: bool = False,
    ) -> Pipe:
        """Create an unconnected pipe with the next free id.

        Raises:
            ValidationError: If the name, length or diameter is invalid.
        """
        self.validate_diameter(diameter)
        pipe = Pipe(
            id=self.pipe_ids.next_id,
            name=name,
            length=float(length),
            diameter=diameter,
            under_repair=under_repair,
        )
        self.pipe_ids.allocate()
        self.pipes[pipe.id] = pipe
        return pipe

    def add_station(
        self,
        name: str,
        total_workshops: int,
        active_workshops: int,
        station_class: int,
    ) -> CompressorStation:
        """Create a station with the next free id.

        Raises:
            ValidationError: If any attribute is out of range.
        """
        # Construct first so that a rejected station does not consume an id
        station = CompressorStation(
            id=self.station_ids.next_id,
            name=name,
            total_workshops=total_workshops,
            active_workshops=active_workshops,
            station_class=station_class,
        )
        self.station_ids.allocate()
        self.stations[station.id] = station
        return station

    def insert_pipe(self, pipe: Pipe) -> None:
        """Insert a fully formed pipe record, e.g. when loading a file."""
        if pipe.id in self.pipes:
            raise ValidationError(f"Duplicate pipe id {pipe.id}")
        self.validate_diameter(pipe.diameter)
        self.pipes[pipe.id] = pipe
        self.pipe_ids.observe(pipe.id)

    def insert_station(self, station: CompressorStation) -> None:
        """Insert a fully formed station record, e.g. when loading a file."""
        if station.id in self.stations:
            raise ValidationError(f"Duplicate station id {station.id}")
        self.stations[station.id] = station
        self.station_ids.observe(station.id)

    def insert_connection(self, connection: NetworkConnection) -> None:
        """Append a connection record without selecting a pipe.

        Raises:
            ValidationError: On a self-loop or a duplicate ordered pair.
        """
        if connection.start_ref == connection.end_ref:
            raise ValidationError(f"Self-connection on {connection.start_ref}")
        if self.connection_between(connection.start_ref, connection.end_ref):
            raise ValidationError(
                f"Duplicate connection {connection.start_ref} -> {connection.end_ref}"
            )
        self.connections.append(connection)

    def validate_diameter(self, diameter: int) -> None:
        if diameter not in self.config.allowed_diameters:
            raise ValidationError(
                f"Diameter {diameter} mm is not allowed; "
                f"allowed: {format_diameters(self.config.allowed_diameters)}"
            )

    #
    # Lookup
    #
    def get_pipe(self, pipe_id: int) -> Pipe:
        try:
            return self.pipes[pipe_id]
        except KeyError:
            raise EntityNotFoundError(f"Pipe with id {pipe_id} not found") from None

    def get_station(self, station_id: int) -> CompressorStation:
        try:
            return self.stations[station_id]
        except KeyError:
            raise EntityNotFoundError(f"Station with id {station_id} not found") from None

    def has_pipe(self, pipe_id: int) -> bool:
        return pipe_id in self.pipes

    def has_station(self, station_id: int) -> bool:
        return station_id in self.stations

    def exists(self, ref: EntityRef) -> bool:
        if ref.is_station:
            return ref.id in self.stations
        return ref.id in self.pipes

    def resolve(self, entity_id: int) -> Optional[EntityRef]:
        """Interpret a bare id, preferring the station reading.

        Returns:
            ``StationRef`` if a station has this id, else ``PipeRef`` if a pipe
            has it, else None.
        """
        if entity_id in self.stations:
            return StationRef(entity_id)
        if entity_id in self.pipes:
            return PipeRef(entity_id)
        return None

    def entity_name(self, ref: EntityRef) -> str:
        if ref.is_station:
            return self.get_station(ref.id).name
        return self.get_pipe(ref.id).name

    def connection_between(
        self, start: EntityRef, end: EntityRef
    ) -> Optional[NetworkConnection]:
        for conn in self.connections:
            if conn.start_ref == start and conn.end_ref == end:
                return conn
        return None

    def connections_for_pipe(self, pipe_id: int) -> List[NetworkConnection]:
        """Connections mediated by ``pipe_id``."""
        return [conn for conn in self.connections if conn.pipe_id == pipe_id]

    def find_free_pipe(
        self, diameter: int, exclude: Iterable[int] = ()
    ) -> Optional[Pipe]:
        """First pipe in store order that can mediate a new connection.

        Args:
            diameter: Required diameter in mm.
            exclude: Pipe ids that must not be picked.
        """
        excluded = set(exclude)
        for pipe in self.pipes.values():
            if pipe.id in excluded:
                continue
            if pipe.diameter == diameter and not pipe.in_use and not pipe.under_repair:
                return pipe
        return None

    #
    # Pipe editing
    #
    def toggle_repair(self, pipe_id: int) -> bool:
        """Flip the repair flag and return the new value."""
        pipe = self.get_pipe(pipe_id)
        pipe.under_repair = not pipe.under_repair
        return pipe.under_repair

    def update_pipe(
        self,
        pipe_id: int,
        *,
        name: Optional[str] = None,
        length: Optional[float] = None,
        diameter: Optional[int] = None,
    ) -> Pipe:
        """Change pipe parameters; ``None`` leaves a field unchanged.

        Raises:
            ValidationError: If a new value is invalid.
            OperationRefused: If the diameter changes while the pipe is in use
                or is the endpoint of a connection.
        """
        pipe = self.get_pipe(pipe_id)
        if name is not None:
            validate_name(name, "Pipe")
        if length is not None:
            validate_length(length)
        if diameter is not None and diameter != pipe.diameter:
            self.validate_diameter(diameter)
            if pipe.in_use:
                raise OperationRefused(
                    f"Pipe {pipe_id} is in use; its diameter cannot be changed"
                )
            ref = PipeRef(pipe_id)
            if any(conn.touches(ref) for conn in self.connections):
                raise OperationRefused(
                    f"Pipe {pipe_id} is an endpoint of a network connection; "
                    "its diameter cannot be changed"
                )

        if name is not None:
            pipe.name = name
        if length is not None:
            pipe.length = float(length)
        if diameter is not None:
            pipe.diameter = diameter
        return pipe

    #
    # Station editing
    #
    def start_workshop(self, station_id: int) -> int:
        """Start one idle workshop and return the new active count."""
        station = self.get_station(station_id)
        if station.active_workshops >= station.total_workshops:
            raise OperationRefused(
                f"All {station.total_workshops} workshops of station {station_id} "
                "are already running"
            )
        station.active_workshops += 1
        return station.active_workshops

    def stop_workshop(self, station_id: int) -> int:
        """Stop one running workshop and return the new active count."""
        station = self.get_station(station_id)
        if station.active_workshops <= 0:
            raise OperationRefused(f"Station {station_id} has no running workshops")
        station.active_workshops -= 1
        return station.active_workshops

    def update_station(
        self,
        station_id: int,
        *,
        name: Optional[str] = None,
        total_workshops: Optional[int] = None,
        station_class: Optional[int] = None,
    ) -> CompressorStation:
        """Change station parameters; ``None`` leaves a field unchanged.

        Lowering ``total_workshops`` below the active count stops the excess
        workshops.
        """
        station = self.get_station(station_id)
        if name is not None:
            validate_name(name, "Station")
        if total_workshops is not None and total_workshops < 1:
            raise ValidationError(
                f"Station must have at least one workshop, got {total_workshops}"
            )
        if station_class is not None and station_class < 1:
            raise ValidationError(f"Station class must be at least 1, got {station_class}")

        if name is not None:
            station.name = name
        if total_workshops is not None:
            station.total_workshops = total_workshops
            station.active_workshops = min(station.active_workshops, total_workshops)
        if station_class is not None:
            station.station_class = station_class
        return station

    #
    # Deletion
    #
    def delete_pipe(self, pipe_id: int) -> Pipe:
        """Remove a pipe that takes no part in the network.

        Raises:
            EntityNotFoundError: If no such pipe exists.
            OperationRefused: If the pipe mediates a connection or is the
                endpoint of one.
        """
        pipe = self.get_pipe(pipe_id)
        if pipe.in_use:
            raise OperationRefused(f"Pipe {pipe_id} is in use in the network")
        ref = PipeRef(pipe_id)
        if any(conn.touches(ref) for conn in self.connections):
            raise OperationRefused(f"Pipe {pipe_id} is an endpoint of a network connection")
        return self.pipes.pop(pipe_id)

    def delete_station(self, station_id: int) -> CompressorStation:
        """Remove a station together with every connection touching it.

        Pipes that mediated those connections go back to the unconnected state.
        """
        station = self.get_station(station_id)
        ref = StationRef(station_id)
        self.connections = [conn for conn in self.connections if not conn.touches(ref)]
        for pipe in self.pipes.values():
            if pipe.in_use and (pipe.start_ref == ref or pipe.end_ref == ref):
                pipe.detach()
        return self.stations.pop(station.id)

    def delete_pipes(self, pipe_ids: Iterable[int]) -> DeletionReport:
        """Delete several pipes, skipping those that cannot be removed."""
        report = DeletionReport()
        for pipe_id in dict.fromkeys(pipe_ids):
            try:
                self.delete_pipe(pipe_id)
            except (EntityNotFoundError, OperationRefused) as exc:
                report.skipped[pipe_id] = str(exc)
            else:
                report.deleted.append(pipe_id)
        return report

    def delete_stations(self, station_ids: Iterable[int]) -> DeletionReport:
        """Delete several stations, skipping unknown ids."""
        report = DeletionReport()
        for station_id in dict.fromkeys(station_ids):
            try:
                self.delete_station(station_id)
            except EntityNotFoundError as exc:
                report.skipped[station_id] = str(exc)
            else:
                report.deleted.append(station_id)
        return report

    #
    # Search
    #
    def find_pipes_by_name(self, text: str) -> List[Pipe]:
        """Pipes whose name contains ``text``, ignoring case."""
        needle = text.lower()
        return [pipe for pipe in self.pipes.values() if needle in pipe.name.lower()]

    def find_pipes_by_repair(self, under_repair: bool) -> List[Pipe]:
        return [pipe for pipe in self.pipes.values() if pipe.under_repair == under_repair]

    def find_pipes_by_use(self, in_use: bool) -> List[Pipe]:
        return [pipe for pipe in self.pipes.values() if pipe.in_use == in_use]

    def find_stations_by_name(self, text: str) -> List[CompressorStation]:
        """Stations whose name contains ``text``, ignoring case."""
        needle = text.lower()
        return [st for st in self.stations.values() if needle in st.name.lower()]

    def find_stations_by_inactive_percent(
        self, percent: float, comparison: PercentComparison
    ) -> List[CompressorStation]:
        """Stations whose idle-workshop percentage compares to ``percent``."""
        result = []
        for station in self.stations.values():
            value = station.inactive_percent
            if comparison is PercentComparison.GREATER:
                match = value > percent
            elif comparison is PercentComparison.LESS:
                match = value < percent
            else:
                match = abs(value - percent) < PERCENT_EQUAL_TOLERANCE
            if match:
                result.append(station)
        return result

    #
    # Statistics
    #
    def network_stats(self) -> NetworkStats:
        stations = set()
        pipes = set()
        for conn in self.connections:
            for ref in (conn.start_ref, conn.end_ref):
                (stations if ref.is_station else pipes).add(ref.id)
        return NetworkStats(
            connections=len(self.connections),
            connected_stations=len(stations),
            total_stations=len(self.stations),
            connected_pipes=len(pipes),
            total_pipes=len(self.pipes),
        )
