"""Entity model: records, derived quantities, store and connection rules."""

from gasnet.model.capacity import pipe_capacity, pipe_weight, station_capacity
from gasnet.model.connect import (
    ConnectOutcome,
    RejectReason,
    Rejection,
    check_connection,
    connect,
    disconnect,
)
from gasnet.model.entities import (
    CompressorStation,
    ConnectionType,
    EntityRef,
    NetworkConnection,
    Pipe,
    PipeRef,
    StationRef,
)
from gasnet.model.store import EntityStore, PercentComparison

__all__ = [
    "CompressorStation",
    "ConnectOutcome",
    "ConnectionType",
    "EntityRef",
    "EntityStore",
    "NetworkConnection",
    "PercentComparison",
    "Pipe",
    "PipeRef",
    "RejectReason",
    "Rejection",
    "StationRef",
    "check_connection",
    "connect",
    "disconnect",
    "pipe_capacity",
    "pipe_weight",
    "station_capacity",
]
