import argparse
import json
import logging

import pytest

from gasnet import cli
from gasnet.config import load_config
from gasnet.io import load_store
from gasnet.model.entities import PipeRef, StationRef


def run(*args):
    cli.main([str(a) for a in args])


def run_failing(capsys, *args):
    with pytest.raises(SystemExit) as exc_info:
        run(*args)
    assert exc_info.value.code == 1
    return capsys.readouterr().out


@pytest.fixture
def network(tmp_path):
    """Network file with stations 1-3 chained by two 700 mm pipes."""
    path = tmp_path / "net.txt"
    run("init", path)
    for name in ("North", "Middle", "South"):
        run("add-station", path, "--name", name, "--workshops", 4, "--active", 2)
    run("connect", path, "s1", "s2", "--diameter", 700, "--length", 40)
    run("connect", path, "s2", "s3", "--diameter", 700, "--length", 60)
    return path


class TestParseEndpoint:
    def test_forms(self):
        assert cli.parse_endpoint("s3") == StationRef(3)
        assert cli.parse_endpoint("P7") == PipeRef(7)
        assert cli.parse_endpoint("4") == 4

    @pytest.mark.parametrize("text", ["x1", "s", "p-2", "0", ""])
    def test_invalid(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_endpoint(text)


class TestParseIdSelection:
    def test_forms(self):
        assert cli.parse_id_selection("3") == 3
        assert cli.parse_id_selection(" ALL ") == cli.ALL

    @pytest.mark.parametrize("text", ["s1", "-2", "0", "every"])
    def test_invalid(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_id_selection(text)


def test_no_arguments_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "usage: gasnet" in capsys.readouterr().out


def test_invalid_endpoint_is_a_usage_error(network):
    with pytest.raises(SystemExit) as exc_info:
        run("path", network, "x1", "s2")
    assert exc_info.value.code == 2


def test_init(tmp_path, capsys):
    path = tmp_path / "new.txt"
    run("init", path)
    assert "Created empty network" in capsys.readouterr().out
    assert load_store(path).pipes == {}

    out = run_failing(capsys, "init", path)
    assert "already exists" in out
    run("init", path, "--force")


def test_add_entities(network, capsys):
    run("add-pipe", network, "--name", "Spare", "--length", 5, "--diameter", 1400)
    assert "✅ Added pipe 3 (Spare)" in capsys.readouterr().out

    store = load_store(network)
    assert store.get_station(1).active_workshops == 2
    assert store.get_pipe(3).diameter == 1400
    assert [c.pipe_id for c in store.connections] == [1, 2]


def test_add_invalid_pipe(network, capsys):
    out = run_failing(
        capsys, "add-pipe", network, "--name", "Bad", "--length", 5, "--diameter", 800
    )
    assert "❌ ERROR: Diameter 800 mm is not allowed" in out
    assert 3 not in load_store(network).pipes


def test_connect_rejections(network, capsys):
    out = run_failing(capsys, "connect", network, "s1", "s1", "--diameter", 700)
    assert "cannot connect station 1 to itself" in out

    out = run_failing(capsys, "connect", network, "s1", "s2", "--diameter", 700)
    assert "already connected" in out

    out = run_failing(capsys, "connect", network, "s3", "s9", "--diameter", 700)
    assert "station 9 does not exist" in out


def test_edit_pipe(network, capsys):
    run("edit-pipe", network, 1, 2, "--toggle-repair")
    store = load_store(network)
    assert store.get_pipe(1).under_repair and store.get_pipe(2).under_repair

    out = run_failing(capsys, "edit-pipe", network, 1, "--diameter", 500)
    assert "diameter cannot be changed" in out


def test_edit_station(network, capsys):
    run("edit-station", network, 1, "--start", 2, "--name", "North Hub")
    station = load_store(network).get_station(1)
    assert (station.name, station.active_workshops) == ("North Hub", 4)

    out = run_failing(capsys, "edit-station", network, 1, "--start", 1)
    assert "already running" in out

    run("edit-station", network, 1, "--workshops", 1)
    assert load_store(network).get_station(1).active_workshops == 1


def test_delete(network, capsys):
    run("delete-pipe", network, 1)
    assert "Skipped pipe 1" in capsys.readouterr().out

    run("delete-station", network, 2)
    store = load_store(network)
    assert 2 not in store.stations
    assert store.connections == []
    assert not store.get_pipe(1).in_use

    run("delete-pipe", network, 1, 2)
    assert load_store(network).pipes == {}


def test_select_all(network, capsys):
    run("edit-pipe", network, "all", "--toggle-repair")
    store = load_store(network)
    assert all(pipe.under_repair for pipe in store.pipes.values())
    capsys.readouterr()

    run("delete-pipe", network, "all")
    out = capsys.readouterr().out
    assert "Skipped pipe 1" in out and "Skipped pipe 2" in out

    run("delete-station", network, "all")
    store = load_store(network)
    assert store.stations == {} and store.connections == []

    run("delete-pipe", network, "all")
    assert load_store(network).pipes == {}


def test_disconnect(network, capsys):
    run("disconnect", network, 2)
    assert "Removed station 2 -> station 3" in capsys.readouterr().out
    assert not load_store(network).get_pipe(2).in_use

    out = run_failing(capsys, "disconnect", network, 2)
    assert "not used in the network" in out


def test_show(network, capsys):
    run("show", network)
    out = capsys.readouterr().out
    assert "Pipes:" in out and "Stations:" in out and "Network:" in out
    assert "S1 North" in out

    run("show", network, "--what", "stations")
    out = capsys.readouterr().out
    assert "Pipes:" not in out
    assert "Middle" in out


def test_search(network, capsys):
    run("add-pipe", network, "--name", "Spare", "--length", 5, "--diameter", 500)
    capsys.readouterr()

    run("search-pipes", network, "--in-use", "no")
    out = capsys.readouterr().out
    assert "Found 1 pipe(s)" in out
    assert "Spare" in out

    run("search-pipes", network, "--name", "s1", "--repair", "no")
    assert "Found 1 pipe(s)" in capsys.readouterr().out

    run("search-stations", network, "--idle", 50, "--compare", "equal")
    assert "Found 3 station(s)" in capsys.readouterr().out

    run("search-stations", network, "--name", "south", "--idle", 60, "--compare", "less")
    out = capsys.readouterr().out
    assert "Found 1 station(s)" in out
    assert "South" in out


def test_routes(network, capsys):
    run("path", network, 1, 3)
    out = capsys.readouterr().out
    assert "Total: 100 km over 2 pipes" in out

    run("shortest", network, "s1", "s3")
    assert "Total: 100 km over 2 pipes" in capsys.readouterr().out

    out = run_failing(capsys, "path", network, 3, 1)
    assert "No path from station 3 to station 1" in out

    run("edit-pipe", network, 2, "--toggle-repair")
    capsys.readouterr()
    run("shortest", network, 1, 3)
    assert "No path found." in capsys.readouterr().out


def test_unconnected_endpoint(network, capsys):
    run("add-station", network, "--name", "Lonely", "--workshops", 1)
    out = run_failing(capsys, "maxflow", network, 1, 4)
    assert "station 4 is not connected to the network" in out


def test_maxflow(network, capsys):
    run("maxflow", network, "s1", "s3")
    out = capsys.readouterr().out
    assert "Maximum flow from S1 North to S3 South" in out
    assert "Minimum cut: S2->S3" in out


def test_toposort(network, capsys):
    run("toposort", network)
    assert "Topological order of stations" in capsys.readouterr().out

    run("connect", network, "s3", "s1", "--diameter", 700, "--length", 10)
    run("toposort", network)
    assert "contains a cycle" in capsys.readouterr().out


def test_export(network, tmp_path, capsys):
    out_file = tmp_path / "out" / "graph.json"
    run("export", network, "--output", out_file)
    data = json.loads(out_file.read_text())
    assert {n["id"] for n in data["nodes"]} == {"S1", "S2", "S3"}
    assert len(data["links"]) == 2

    capsys.readouterr()
    run("export", network)
    assert json.loads(capsys.readouterr().out)["directed"] is True


def test_missing_network_file(tmp_path, capsys):
    out = run_failing(capsys, "show", tmp_path / "nope.txt")
    assert "❌ ERROR: File" in out
    assert "not found" in out


def test_config_option(tmp_path, capsys):
    config = tmp_path / "gasnet.yaml"
    config.write_text("pipe_capacities:\n  600: 3000\n")
    path = tmp_path / "net.txt"
    run("--config", config, "init", path)
    run(
        "--config", config, "add-pipe", path, "--name", "Odd", "--length", 1, "--diameter", 600
    )
    assert load_store(path, load_config(config)).get_pipe(1).diameter == 600

    out = run_failing(capsys, "show", path)
    assert "600 mm is not allowed" in out


def test_journal(network, tmp_path, capsys):
    journal = tmp_path / "journal.txt"
    run(
        "--journal", journal, "connect", network, "s3", "s1", "--diameter", 500, "--length", 1
    )
    run_failing(capsys, "--journal", journal, "disconnect", network, 99)

    lines = journal.read_text().splitlines()
    assert any("| connect | station 3 -> station 1, new pipe 3" in line for line in lines)
    assert any("| disconnect failed | Pipe with id 99 not found" in line for line in lines)
    assert sum("Session started" in line for line in lines) == 2
    assert sum("Session ended" in line for line in lines) == 2


def test_verbose_and_quiet(network):
    run("--verbose", "show", network)
    assert logging.getLogger("gasnet").level == logging.DEBUG
    run("--quiet", "show", network)
    assert logging.getLogger("gasnet").level == logging.WARNING
    run("show", network)
    assert logging.getLogger("gasnet").level == logging.INFO
