"""Entity records: pipes, compressor stations and directed connections.

Stations and pipes draw ids from independent counters, so the same integer can
name one of each. ``StationRef`` and ``PipeRef`` tag an id with its domain;
every graph node and connection endpoint is expressed as one of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

from gasnet.errors import ValidationError


@dataclass(frozen=True)
class StationRef:
    """Reference to a compressor station by id."""

    id: int

    @property
    def is_station(self) -> bool:
        return True

    @property
    def label(self) -> str:
        return f"S{self.id}"

    def __str__(self) -> str:
        return f"station {self.id}"


@dataclass(frozen=True)
class PipeRef:
    """Reference to a pipe used as a network node, by id."""

    id: int

    @property
    def is_station(self) -> bool:
        return False

    @property
    def label(self) -> str:
        return f"P{self.id}"

    def __str__(self) -> str:
        return f"pipe {self.id}"


EntityRef = Union[StationRef, PipeRef]


def ref_sort_key(ref: EntityRef) -> Tuple[int, int]:
    """Ascending id; on equal ids the station comes first."""
    return (ref.id, 0 if ref.is_station else 1)


def make_ref(entity_id: int, is_station: bool) -> EntityRef:
    return StationRef(entity_id) if is_station else PipeRef(entity_id)


class ConnectionType(IntEnum):
    """Role of a connection's endpoints.

    The integer values are the persisted codes.
    """

    STATION_TO_STATION = 0
    STATION_TO_PIPE = 1
    PIPE_TO_STATION = 2
    PIPE_TO_PIPE = 3

    @classmethod
    def from_endpoints(cls, start_is_station: bool, end_is_station: bool) -> ConnectionType:
        """Derive the type from whether each endpoint is a station."""
        if start_is_station and end_is_station:
            return cls.STATION_TO_STATION
        if not start_is_station and not end_is_station:
            return cls.PIPE_TO_PIPE
        if start_is_station:
            return cls.STATION_TO_PIPE
        return cls.PIPE_TO_STATION

    @property
    def start_is_station(self) -> bool:
        return self in (ConnectionType.STATION_TO_STATION, ConnectionType.STATION_TO_PIPE)

    @property
    def end_is_station(self) -> bool:
        return self in (ConnectionType.STATION_TO_STATION, ConnectionType.PIPE_TO_STATION)

    @property
    def label(self) -> str:
        start = "station" if self.start_is_station else "pipe"
        end = "station" if self.end_is_station else "pipe"
        return f"{start}-{end}"


@dataclass
class Pipe:
    """A pipe segment.

    Attributes:
        id: Positive identifier, unique among pipes.
        name: Non-empty display name.
        length: Length in km, strictly positive.
        diameter: Diameter in mm; checked against the configured set by the store.
        under_repair: A pipe under repair carries no flow and cannot be traversed
            by shortest-path search.
        in_use: Whether the pipe currently mediates a connection.
        start_id: Start endpoint id of the mediated connection, 0 when unconnected.
        end_id: End endpoint id of the mediated connection, 0 when unconnected.
        start_type: Connection type tag for the start endpoint.
        end_type: Connection type tag for the end endpoint.
    """

    id: int
    name: str
    length: float
    diameter: int
    under_repair: bool = False
    in_use: bool = False
    start_id: int = 0
    end_id: int = 0
    start_type: ConnectionType = ConnectionType.STATION_TO_STATION
    end_type: ConnectionType = ConnectionType.STATION_TO_STATION

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise ValidationError(f"Pipe id must be positive, got {self.id}")
        validate_name(self.name, "Pipe")
        validate_length(self.length)

    @property
    def ref(self) -> PipeRef:
        return PipeRef(self.id)

    @property
    def start_ref(self) -> EntityRef:
        return make_ref(self.start_id, self.start_type.start_is_station)

    @property
    def end_ref(self) -> EntityRef:
        return make_ref(self.end_id, self.end_type.end_is_station)

    def attach(self, connection: NetworkConnection) -> None:
        """Mark the pipe as mediating ``connection``."""
        self.in_use = True
        self.start_id = connection.start_id
        self.end_id = connection.end_id
        self.start_type = connection.start_type
        self.end_type = connection.end_type

    def detach(self) -> None:
        """Return the pipe to the unconnected state."""
        self.in_use = False
        self.start_id = 0
        self.end_id = 0


@dataclass
class CompressorStation:
    """A compressor station.

    Attributes:
        id: Positive identifier, unique among stations.
        name: Non-empty display name.
        total_workshops: Number of workshops, at least one.
        active_workshops: Running workshops, between 0 and ``total_workshops``.
        station_class: Efficiency class, at least one.
    """

    id: int
    name: str
    total_workshops: int
    active_workshops: int
    station_class: int

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise ValidationError(f"Station id must be positive, got {self.id}")
        validate_name(self.name, "Station")
        if self.total_workshops < 1:
            raise ValidationError(
                f"Station must have at least one workshop, got {self.total_workshops}"
            )
        if not 0 <= self.active_workshops <= self.total_workshops:
            raise ValidationError(
                f"Active workshops must be between 0 and {self.total_workshops}, "
                f"got {self.active_workshops}"
            )
        if self.station_class < 1:
            raise ValidationError(
                f"Station class must be at least 1, got {self.station_class}"
            )

    @property
    def ref(self) -> StationRef:
        return StationRef(self.id)

    @property
    def inactive_percent(self) -> float:
        """Share of idle workshops, in percent."""
        return 100.0 * (self.total_workshops - self.active_workshops) / self.total_workshops


@dataclass(frozen=True)
class NetworkConnection:
    """Directed, pipe-mediated link between two entities.

    The mediating pipe supplies capacity and weight; the connection supplies
    direction and endpoint typing.
    """

    pipe_id: int
    start_id: int
    end_id: int
    start_type: ConnectionType
    end_type: ConnectionType

    @property
    def start_ref(self) -> EntityRef:
        return make_ref(self.start_id, self.start_type.start_is_station)

    @property
    def end_ref(self) -> EntityRef:
        return make_ref(self.end_id, self.end_type.end_is_station)

    @property
    def is_station_to_station(self) -> bool:
        return self.start_ref.is_station and self.end_ref.is_station

    def touches(self, ref: EntityRef) -> bool:
        return self.start_ref == ref or self.end_ref == ref


def validate_name(name: str, kind: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{kind} name must be non-empty")


def validate_length(length: float) -> None:
    if not length > 0:
        raise ValidationError(f"Pipe length must be positive, got {length}")
