"""Console levels picked by the CLI and the journal's file logger."""

import logging
from io import StringIO

import pytest

from gasnet import cli
from gasnet.io import save_store
from gasnet.logging import (
    get_file_logger,
    get_logger,
    level_for_flags,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)
from gasnet.model.connect import connect
from gasnet.model.store import EntityStore


@pytest.fixture
def network_file(tmp_path):
    store = EntityStore()
    a = store.add_station("North", 2, 2, 1)
    b = store.add_station("South", 2, 1, 1)
    connect(store, a.ref, b.ref, 700, length=40.0)
    return save_store(store, tmp_path / "net.txt")


def analysis_records(caplog):
    return [r for r in caplog.records if r.name == "gasnet.analysis"]


def test_verbose_shows_analysis_debug(fresh_logging, caplog, network_file):
    cli.main(["--verbose", "path", str(network_file), "s1", "s2"])
    records = analysis_records(caplog)
    assert records
    assert records[0].levelno == logging.DEBUG
    assert records[0].getMessage().startswith("BFS S1 -> S2")


@pytest.mark.parametrize("flags", [["--quiet"], []])
def test_analysis_debug_hidden_without_verbose(
    fresh_logging, caplog, network_file, flags
):
    cli.main(flags + ["maxflow", str(network_file), "s1", "s2"])
    assert analysis_records(caplog) == []


def test_quiet_keeps_the_journal(fresh_logging, caplog, network_file, tmp_path):
    journal = tmp_path / "journal.txt"
    cli.main(["--quiet", "--journal", str(journal), "show", str(network_file)])
    assert "show | all" in journal.read_text(encoding="utf-8")
    assert not [r for r in caplog.records if r.name.startswith("gasnet.journal")]


@pytest.mark.parametrize(
    "verbose,quiet,level",
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_level_for_flags(verbose, quiet, level):
    assert level_for_flags(verbose, quiet) == level


def test_loggers_nest_under_gasnet():
    assert get_logger("gasnet.analysis").name == "gasnet.analysis"
    assert get_logger("gasnet").name == "gasnet"
    assert get_logger("plugin").parent is logging.getLogger("gasnet")


def test_set_global_level_covers_console_handler(fresh_logging):
    set_global_log_level(logging.WARNING)
    root_logger = logging.getLogger("gasnet")
    assert root_logger.level == logging.WARNING
    assert [h.level for h in root_logger.handlers] == [logging.WARNING]


def test_reset_then_custom_console(fresh_logging):
    root_logger = logging.getLogger("gasnet")
    assert setup_root_logger() is setup_root_logger()
    assert len(root_logger.handlers) == 1

    reset_logging()
    assert root_logger.handlers == []
    assert root_logger.level == logging.NOTSET

    capture = StringIO()
    setup_root_logger(level=logging.DEBUG, handler=logging.StreamHandler(capture))
    get_logger("gasnet.analysis").debug("BFS S1 -> S2")
    assert capture.getvalue().endswith(" - gasnet.analysis - DEBUG - BFS S1 -> S2\n")


def test_file_logger_writes_only_to_its_file(fresh_logging, tmp_path, caplog):
    set_global_log_level(logging.WARNING)
    path = tmp_path / "out.log"
    logger, handler = get_file_logger("gasnet.test.file", path, "%(message)s")
    try:
        logger.info("recorded")
    finally:
        logger.removeHandler(handler)
        handler.close()
    assert path.read_text(encoding="utf-8") == "recorded\n"
    assert "recorded" not in caplog.text
