"""Persistence of an Entity Store as line-oriented text.

Layout, one value per line::

    FORMAT_VERSION 1
    NEXT_PIPE_ID <n>
    NEXT_STATION_ID <n>
    PIPES <count>
    <id> <name> <length> <diameter> <under_repair> <in_use> <start_id> <end_id> <start_type> <end_type>
    STATIONS <count>
    <id> <name> <total> <active> <class>
    NETWORK <count>
    <pipe_id> <start_id> <end_id> <start_type> <end_type>

Older files without ``FORMAT_VERSION`` are accepted. In those the counters and
the ``NETWORK`` section may be missing; counters are then derived from the
highest ids and the network is empty.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from gasnet.config import NetworkConfig
from gasnet.errors import PersistenceError, ValidationError
from gasnet.model.entities import (
    CompressorStation,
    ConnectionType,
    NetworkConnection,
    Pipe,
)
from gasnet.model.store import EntityStore

FORMAT_VERSION = 1


class _LineReader:
    """Sequential reader that reports positions in error messages."""

    def __init__(self, text: str, source: str) -> None:
        self._lines = text.splitlines()
        self._pos = 0
        self._source = source

    def error(self, message: str) -> PersistenceError:
        return PersistenceError(f"{self._source}, line {self._pos}: {message}")

    def _skip_blank(self) -> None:
        while self._pos < len(self._lines) and not self._lines[self._pos].strip():
            self._pos += 1

    def at_end(self) -> bool:
        self._skip_blank()
        return self._pos >= len(self._lines)

    def peek_key(self) -> Optional[str]:
        """First token of the next non-blank line, without consuming it."""
        if self.at_end():
            return None
        return self._lines[self._pos].split()[0]

    def raw(self, what: str) -> str:
        if self._pos >= len(self._lines):
            raise PersistenceError(
                f"{self._source}: unexpected end of file, expected {what}"
            )
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def value(self, what: str) -> str:
        self._skip_blank()
        return self.raw(what).strip()

    def integer(self, what: str) -> int:
        text = self.value(what)
        try:
            return int(text)
        except ValueError:
            raise self.error(f"expected integer {what}, got '{text}'") from None

    def number(self, what: str) -> float:
        text = self.value(what)
        try:
            return float(text)
        except ValueError:
            raise self.error(f"expected number {what}, got '{text}'") from None

    def flag(self, what: str) -> bool:
        value = self.integer(what)
        if value not in (0, 1):
            raise self.error(f"expected 0 or 1 for {what}, got {value}")
        return bool(value)

    def connection_type(self, what: str) -> ConnectionType:
        value = self.integer(what)
        try:
            return ConnectionType(value)
        except ValueError:
            raise self.error(f"unknown connection type {value} for {what}") from None

    def header(self, key: str) -> int:
        line = self.value(f"'{key}' header")
        parts = line.split()
        if len(parts) != 2 or parts[0] != key:
            raise self.error(f"expected '{key} <n>', got '{line}'")
        try:
            return int(parts[1])
        except ValueError:
            raise self.error(f"invalid value in '{line}'") from None


def _check_name(name: str) -> None:
    if "\n" in name or "\r" in name:
        raise PersistenceError(f"Name {name!r} contains a line break and cannot be saved")


def dumps(store: EntityStore) -> str:
    """Serialize a store to text.

    Raises:
        PersistenceError: If a name cannot be represented on one line.
    """
    lines: List[str] = [
        f"FORMAT_VERSION {FORMAT_VERSION}",
        f"NEXT_PIPE_ID {store.pipe_ids.next_id}",
        f"NEXT_STATION_ID {store.station_ids.next_id}",
        f"PIPES {len(store.pipes)}",
    ]
    for pipe in store.pipes.values():
        _check_name(pipe.name)
        lines += [
            str(pipe.id),
            pipe.name,
            repr(pipe.length),
            str(pipe.diameter),
            str(int(pipe.under_repair)),
            str(int(pipe.in_use)),
            str(pipe.start_id),
            str(pipe.end_id),
            str(int(pipe.start_type)),
            str(int(pipe.end_type)),
        ]

    lines.append(f"STATIONS {len(store.stations)}")
    for station in store.stations.values():
        _check_name(station.name)
        lines += [
            str(station.id),
            station.name,
            str(station.total_workshops),
            str(station.active_workshops),
            str(station.station_class),
        ]

    lines.append(f"NETWORK {len(store.connections)}")
    for conn in store.connections:
        lines += [
            str(conn.pipe_id),
            str(conn.start_id),
            str(conn.end_id),
            str(int(conn.start_type)),
            str(int(conn.end_type)),
        ]
    return "\n".join(lines) + "\n"


def _read_pipe(reader: _LineReader) -> Pipe:
    pipe_id = reader.integer("pipe id")
    name = reader.raw("pipe name")
    try:
        return Pipe(
            id=pipe_id,
            name=name,
            length=reader.number("pipe length"),
            diameter=reader.integer("pipe diameter"),
            under_repair=reader.flag("repair flag"),
            in_use=reader.flag("in-use flag"),
            start_id=reader.integer("pipe start id"),
            end_id=reader.integer("pipe end id"),
            start_type=reader.connection_type("pipe start type"),
            end_type=reader.connection_type("pipe end type"),
        )
    except ValidationError as e:
        raise reader.error(str(e)) from e


def _read_station(reader: _LineReader) -> CompressorStation:
    station_id = reader.integer("station id")
    name = reader.raw("station name")
    total = reader.integer("total workshops")
    active = reader.integer("active workshops")
    station_class = reader.integer("station class")
    try:
        return CompressorStation(
            id=station_id,
            name=name,
            total_workshops=total,
            active_workshops=max(0, min(active, total)),
            station_class=station_class,
        )
    except ValidationError as e:
        raise reader.error(str(e)) from e


def _read_connection(reader: _LineReader) -> NetworkConnection:
    return NetworkConnection(
        pipe_id=reader.integer("connection pipe id"),
        start_id=reader.integer("connection start id"),
        end_id=reader.integer("connection end id"),
        start_type=reader.connection_type("connection start type"),
        end_type=reader.connection_type("connection end type"),
    )


def loads(
    text: str, config: Optional[NetworkConfig] = None, *, source: str = "<string>"
) -> EntityStore:
    """Parse text produced by ``dumps`` (or a legacy file) into a new store.

    Args:
        text: File contents.
        config: Configuration for the new store; its diameter set is enforced.
            A fresh default configuration when omitted.
        source: Name used in error messages.

    Returns:
        The loaded store.

    Raises:
        PersistenceError: If the text is malformed.
    """
    reader = _LineReader(text, source)
    store = EntityStore() if config is None else EntityStore(config=config)

    if reader.peek_key() == "FORMAT_VERSION":
        version = reader.header("FORMAT_VERSION")
        if version != FORMAT_VERSION:
            raise reader.error(f"unsupported format version {version}")

    next_pipe = next_station = 1
    if reader.peek_key() == "NEXT_PIPE_ID":
        next_pipe = reader.header("NEXT_PIPE_ID")
        next_station = reader.header("NEXT_STATION_ID")

    try:
        for _ in range(reader.header("PIPES")):
            store.insert_pipe(_read_pipe(reader))
        for _ in range(reader.header("STATIONS")):
            store.insert_station(_read_station(reader))
        if reader.peek_key() == "NETWORK":
            for _ in range(reader.header("NETWORK")):
                store.insert_connection(_read_connection(reader))
    except ValidationError as e:
        raise reader.error(str(e)) from e

    if not reader.at_end():
        raise reader.error(f"unexpected content '{reader.value('end of file')}'")

    store.pipe_ids.next_id = max(store.pipe_ids.next_id, next_pipe)
    store.station_ids.next_id = max(store.station_ids.next_id, next_station)
    return store


def save_store(store: EntityStore, path: Union[str, Path]) -> Path:
    """Write ``store`` to ``path`` and return the path written.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    path = Path(path)
    text = dumps(store)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e
    return path


def load_store(
    path: Union[str, Path], config: Optional[NetworkConfig] = None
) -> EntityStore:
    """Read a store from ``path``.

    Raises:
        PersistenceError: If the file is missing, unreadable or malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise PersistenceError(f"File {path} not found") from None
    except OSError as e:
        raise PersistenceError(f"Cannot read {path}: {e}") from e
    return loads(text, config, source=str(path))
