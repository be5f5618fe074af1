import pytest

from gasnet.errors import ValidationError
from gasnet.model.entities import (
    CompressorStation,
    ConnectionType,
    NetworkConnection,
    Pipe,
    PipeRef,
    StationRef,
    make_ref,
    ref_sort_key,
)


class TestRefs:
    def test_station_and_pipe_with_same_id_differ(self):
        assert StationRef(3) != PipeRef(3)
        assert len({StationRef(3), PipeRef(3)}) == 2

    def test_labels(self):
        assert StationRef(3).label == "S3"
        assert PipeRef(7).label == "P7"
        assert str(StationRef(3)) == "station 3"
        assert str(PipeRef(7)) == "pipe 7"

    def test_sort_key_puts_station_first_on_equal_id(self):
        refs = [PipeRef(2), StationRef(2), PipeRef(1), StationRef(3)]
        assert sorted(refs, key=ref_sort_key) == [
            PipeRef(1),
            StationRef(2),
            PipeRef(2),
            StationRef(3),
        ]

    def test_make_ref(self):
        assert make_ref(4, True) == StationRef(4)
        assert make_ref(4, False) == PipeRef(4)


class TestConnectionType:
    @pytest.mark.parametrize(
        "start_is_station,end_is_station,expected,code",
        [
            (True, True, ConnectionType.STATION_TO_STATION, 0),
            (True, False, ConnectionType.STATION_TO_PIPE, 1),
            (False, True, ConnectionType.PIPE_TO_STATION, 2),
            (False, False, ConnectionType.PIPE_TO_PIPE, 3),
        ],
    )
    def test_from_endpoints(self, start_is_station, end_is_station, expected, code):
        ctype = ConnectionType.from_endpoints(start_is_station, end_is_station)
        assert ctype is expected
        assert int(ctype) == code
        assert ctype.start_is_station is start_is_station
        assert ctype.end_is_station is end_is_station

    def test_label(self):
        assert ConnectionType.PIPE_TO_STATION.label == "pipe-station"


class TestPipe:
    def test_defaults(self):
        pipe = Pipe(id=1, name="Main", length=12.5, diameter=700)
        assert not pipe.under_repair
        assert not pipe.in_use
        assert pipe.start_id == pipe.end_id == 0
        assert pipe.ref == PipeRef(1)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"id": 0},
            {"name": ""},
            {"name": "   "},
            {"length": 0},
            {"length": -3.0},
        ],
    )
    def test_invalid_attributes(self, kwargs):
        params = {"id": 1, "name": "Main", "length": 10.0, "diameter": 500}
        params.update(kwargs)
        with pytest.raises(ValidationError):
            Pipe(**params)

    def test_attach_and_detach(self):
        pipe = Pipe(id=2, name="Link", length=5.0, diameter=500)
        conn = NetworkConnection(
            pipe_id=2,
            start_id=1,
            end_id=1,
            start_type=ConnectionType.STATION_TO_PIPE,
            end_type=ConnectionType.STATION_TO_PIPE,
        )
        pipe.attach(conn)
        assert pipe.in_use
        assert pipe.start_ref == StationRef(1)
        assert pipe.end_ref == PipeRef(1)

        pipe.detach()
        assert not pipe.in_use
        assert pipe.start_id == pipe.end_id == 0


class TestCompressorStation:
    def test_inactive_percent(self):
        station = CompressorStation(
            id=1, name="North", total_workshops=4, active_workshops=1, station_class=2
        )
        assert station.inactive_percent == pytest.approx(75.0)
        assert station.ref == StationRef(1)

    @pytest.mark.parametrize(
        "total,active,station_class",
        [(0, 0, 1), (3, 4, 1), (3, -1, 1), (3, 2, 0)],
    )
    def test_invalid_attributes(self, total, active, station_class):
        with pytest.raises(ValidationError):
            CompressorStation(
                id=1,
                name="North",
                total_workshops=total,
                active_workshops=active,
                station_class=station_class,
            )


class TestNetworkConnection:
    def test_refs_follow_type_tags(self):
        conn = NetworkConnection(
            pipe_id=9,
            start_id=4,
            end_id=4,
            start_type=ConnectionType.PIPE_TO_STATION,
            end_type=ConnectionType.PIPE_TO_STATION,
        )
        assert conn.start_ref == PipeRef(4)
        assert conn.end_ref == StationRef(4)
        assert not conn.is_station_to_station
        assert conn.touches(PipeRef(4))
        assert conn.touches(StationRef(4))
        assert not conn.touches(StationRef(9))
