"""Connection Validator and the connect/disconnect mutations.

All checks run before any change to the store, so a rejected request leaves no
partial state behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from gasnet.config import format_diameters
from gasnet.errors import ConnectionRejected, OperationRefused
from gasnet.model.entities import (
    ConnectionType,
    EntityRef,
    NetworkConnection,
    Pipe,
    PipeRef,
    StationRef,
)
from gasnet.model.store import EntityStore

#: A connection endpoint: an explicit reference, or a bare id resolved with
#: station preference.
Endpoint = Union[StationRef, PipeRef, int]


class RejectReason(Enum):
    """Why a connection request was refused."""

    SELF_CONNECTION = "self-connection"
    UNKNOWN_ENTITY = "unknown entity"
    PIPE_UNAVAILABLE = "pipe unavailable"
    DUPLICATE_CONNECTION = "duplicate connection"
    DIAMETER_MISMATCH = "diameter mismatch"
    INVALID_DIAMETER = "invalid diameter"
    NO_FREE_PIPE = "no free pipe"


@dataclass(frozen=True)
class Rejection:
    reason: RejectReason
    message: str

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.message}"


@dataclass(frozen=True)
class ConnectOutcome:
    """Result of a successful ``connect``.

    Attributes:
        connection: The appended connection record.
        pipe: The mediating pipe, now in use.
        created_pipe: True when no free pipe existed and a new one was built.
    """

    connection: NetworkConnection
    pipe: Pipe
    created_pipe: bool

    def describe(self) -> str:
        action = "new pipe" if self.created_pipe else "pipe"
        return (
            f"{self.connection.start_ref} -> {self.connection.end_ref}, "
            f"{action} {self.pipe.id} ({self.pipe.name}, {self.pipe.diameter} mm)"
        )


def resolve_endpoint(store: EntityStore, endpoint: Endpoint) -> Optional[EntityRef]:
    """Turn an endpoint into a reference to an existing entity, or None."""
    if isinstance(endpoint, (StationRef, PipeRef)):
        return endpoint if store.exists(endpoint) else None
    return store.resolve(endpoint)


def _same_endpoint(store: EntityStore, start: Endpoint, end: Endpoint) -> bool:
    if isinstance(start, int) and isinstance(end, int):
        return start == end
    if isinstance(start, int):
        return store.resolve(start) == end
    if isinstance(end, int):
        return start == store.resolve(end)
    return start == end


def _endpoint_label(endpoint: Endpoint) -> str:
    if isinstance(endpoint, int):
        return f"id {endpoint}"
    return str(endpoint)


def connection_type(start: EntityRef, end: EntityRef) -> ConnectionType:
    return ConnectionType.from_endpoints(start.is_station, end.is_station)


def check_connection(
    store: EntityStore, start: Endpoint, end: Endpoint, diameter: int
) -> Optional[Rejection]:
    """Check whether a directed link ``start -> end`` may be created.

    Checks run in a fixed order and the first failure is reported: self
    connection, unknown entity, pipe under repair, duplicate pair, diameter
    mismatch between two pipes, diameter outside the allowed set.

    Args:
        store: Current entity records.
        start: Start endpoint.
        end: End endpoint.
        diameter: Diameter of the mediating pipe in mm.

    Returns:
        None when the connection is allowed, otherwise the rejection.
    """
    if _same_endpoint(store, start, end):
        return Rejection(
            RejectReason.SELF_CONNECTION,
            f"cannot connect {_endpoint_label(start)} to itself",
        )

    start_ref = resolve_endpoint(store, start)
    if start_ref is None:
        return Rejection(
            RejectReason.UNKNOWN_ENTITY, f"{_endpoint_label(start)} does not exist"
        )
    end_ref = resolve_endpoint(store, end)
    if end_ref is None:
        return Rejection(
            RejectReason.UNKNOWN_ENTITY, f"{_endpoint_label(end)} does not exist"
        )

    for ref in (start_ref, end_ref):
        if not ref.is_station and store.get_pipe(ref.id).under_repair:
            return Rejection(RejectReason.PIPE_UNAVAILABLE, f"{ref} is under repair")

    if store.connection_between(start_ref, end_ref) is not None:
        return Rejection(
            RejectReason.DUPLICATE_CONNECTION,
            f"{start_ref} -> {end_ref} is already connected",
        )

    if not start_ref.is_station and not end_ref.is_station:
        start_diameter = store.get_pipe(start_ref.id).diameter
        end_diameter = store.get_pipe(end_ref.id).diameter
        if start_diameter != diameter or end_diameter != diameter:
            return Rejection(
                RejectReason.DIAMETER_MISMATCH,
                f"{start_ref} is {start_diameter} mm, {end_ref} is {end_diameter} mm, "
                f"connecting pipe is {diameter} mm",
            )

    if diameter not in store.config.allowed_diameters:
        return Rejection(
            RejectReason.INVALID_DIAMETER,
            f"{diameter} mm is not one of "
            f"{format_diameters(store.config.allowed_diameters)}",
        )
    return None


def connect(
    store: EntityStore,
    start: Endpoint,
    end: Endpoint,
    diameter: int,
    *,
    name: Optional[str] = None,
    length: Optional[float] = None,
) -> ConnectOutcome:
    """Create a directed connection mediated by a pipe of ``diameter``.

    The first free pipe of that diameter (in store order, never one of the
    endpoints) is used. Without one, a new pipe is created from ``name`` and
    ``length``.

    Args:
        store: Entity records to mutate.
        start: Start endpoint.
        end: End endpoint.
        diameter: Mediating pipe diameter in mm.
        name: Name for a newly created pipe; defaults to one derived from the
            endpoints.
        length: Length in km for a newly created pipe.

    Returns:
        The new connection and its pipe.

    Raises:
        ConnectionRejected: If validation fails, or a new pipe is needed and no
            length was given. Nothing is changed in that case.
    """
    rejection = check_connection(store, start, end, diameter)
    if rejection is not None:
        raise ConnectionRejected(rejection)

    start_ref = resolve_endpoint(store, start)
    end_ref = resolve_endpoint(store, end)
    assert start_ref is not None and end_ref is not None

    endpoint_pipes = [ref.id for ref in (start_ref, end_ref) if not ref.is_station]
    pipe = store.find_free_pipe(diameter, exclude=endpoint_pipes)
    created = pipe is None
    if pipe is None:
        if length is None:
            raise ConnectionRejected(
                Rejection(
                    RejectReason.NO_FREE_PIPE,
                    f"no free {diameter} mm pipe; a length is required to build one",
                )
            )
        pipe = store.add_pipe(
            name or f"{start_ref.label}-{end_ref.label}", length, diameter
        )

    ctype = connection_type(start_ref, end_ref)
    connection = NetworkConnection(
        pipe_id=pipe.id,
        start_id=start_ref.id,
        end_id=end_ref.id,
        start_type=ctype,
        end_type=ctype,
    )
    pipe.attach(connection)
    store.connections.append(connection)
    return ConnectOutcome(connection=connection, pipe=pipe, created_pipe=created)


def disconnect(store: EntityStore, pipe_id: int) -> List[NetworkConnection]:
    """Remove the connections mediated by a pipe and free the pipe.

    Returns:
        The removed connection records.

    Raises:
        EntityNotFoundError: If the pipe does not exist.
        OperationRefused: If the pipe is not in use.
    """
    pipe = store.get_pipe(pipe_id)
    if not pipe.in_use:
        raise OperationRefused(f"Pipe {pipe_id} is not used in the network")
    removed = store.connections_for_pipe(pipe_id)
    store.connections = [conn for conn in store.connections if conn.pipe_id != pipe_id]
    pipe.detach()
    return removed
