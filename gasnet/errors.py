"""Exception hierarchy for gasnet.

Every error raised by the package derives from ``GasNetError`` so callers can
report it and continue with the next operation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gasnet.model.connect import Rejection
    from gasnet.model.entities import EntityRef


class GasNetError(Exception):
    """Base class for all gasnet errors."""


class ValidationError(GasNetError, ValueError):
    """An entity attribute or configuration value is out of range."""


class EntityNotFoundError(GasNetError, KeyError):
    """No pipe or station with the requested id exists."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class OperationRefused(GasNetError):
    """A mutation is not allowed in the entity's current state."""


class ConnectionRejected(ValidationError):
    """The Connection Validator refused a link.

    Attributes:
        rejection: Reason code and human-readable message.
    """

    def __init__(self, rejection: Rejection) -> None:
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def reason(self):
        return self.rejection.reason


class GraphError(GasNetError):
    """A graph query cannot be answered."""


class NodeNotInGraphError(GraphError, KeyError):
    """An endpoint is not part of the built graph (never connected)."""

    def __init__(self, ref: EntityRef) -> None:
        super().__init__(f"{ref} is not connected to the network")
        self.ref = ref

    def __str__(self) -> str:
        return str(self.args[0])


class NoPathError(GraphError):
    """The target cannot be reached from the source."""

    def __init__(self, start: EntityRef, end: EntityRef) -> None:
        super().__init__(f"No path from {start} to {end}")
        self.start = start
        self.end = end


class PersistenceError(GasNetError):
    """A network file cannot be read or written."""
