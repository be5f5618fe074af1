"""Operation journal: an append-only record of user actions.

Each entry is one line ``YYYY-MM-DD HH:MM:SS | action | details``. A session
is framed by timestamped start and end marker lines. The journal writes
through a ``gasnet.journal`` file logger that does not propagate, so entries
never reach the console and ``--quiet`` never drops them.
"""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from types import TracebackType
from typing import Optional, Type, Union

from gasnet.logging import get_file_logger

DEFAULT_JOURNAL_FILE = "pipeline_log.txt"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
SESSION_START = "=== Session started ==="
SESSION_END = "=== Session ended ==="

_instance_ids = itertools.count(1)


class OperationJournal:
    """Append-only journal file.

    Use as a context manager, or call ``close()`` to write the end marker::

        with OperationJournal("pipeline_log.txt") as journal:
            journal.record("Add pipe", "id 1, Main line")

    Args:
        path: Journal file; created if missing, appended to otherwise.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_JOURNAL_FILE) -> None:
        self.path = Path(path)
        logger, handler = get_file_logger(
            f"gasnet.journal.session{next(_instance_ids)}",
            self.path,
            "%(asctime)s | %(message)s",
            datefmt=TIME_FORMAT,
        )
        self._logger = logger
        self._handler: Optional[logging.FileHandler] = handler
        self._write(SESSION_START)

    def _write(self, line: str) -> None:
        if self._handler is None:
            raise RuntimeError(f"Journal {self.path} is closed")
        self._logger.info(line)

    @property
    def closed(self) -> bool:
        return self._handler is None

    def record(self, action: str, details: str = "") -> None:
        """Append one entry; ``details`` is omitted when empty."""
        self._write(f"{action} | {details}" if details else action)

    def close(self) -> None:
        """Write the end marker and release the file. Idempotent."""
        if self._handler is None:
            return
        self._write(SESSION_END)
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def __enter__(self) -> OperationJournal:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
