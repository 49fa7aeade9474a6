import json
import math

import pytest

from conftest import PARIS, ROME, TOKYO
from travel_quest.stops import (
    Coordinates,
    ResolvedStopSequence,
    StopDataError,
    Transport,
    coordinates_from_geocode,
    load_stops,
    stop_from_dict,
    stops_from_list,
)


class TestPersistedShape:
    def test_parses_full_stop(self):
        stop = stop_from_dict(
            {
                "id": "a1",
                "location": "Lisbon",
                "date": "2024-06-01",
                "transport": "Ship",
                "coordinates": {"lat": 38.72, "lng": -9.14},
                "image": "data:image/png;base64,AAAA",
            }
        )
        assert stop.transport is Transport.SHIP
        assert stop.coordinates == Coordinates(38.72, -9.14)
        assert stop.is_resolved
        assert stop.image == "data:image/png;base64,AAAA"

    def test_round_trip_of_to_dict(self):
        assert stop_from_dict(TOKYO.to_dict()) == TOKYO

    def test_null_coordinates_are_unresolved(self):
        stop = stop_from_dict({"id": "1", "location": "Atlantis", "coordinates": None})
        assert stop.coordinates is None
        assert not stop.is_resolved
        assert "image" not in stop.to_dict()

    def test_non_finite_coordinates_are_unresolved(self):
        stop = stop_from_dict({"id": "1", "coordinates": {"lat": "NaN", "lng": 3}})
        assert not stop.is_resolved
        assert not stop_from_dict({"id": "2", "coordinates": {"lat": 1}}).is_resolved

    def test_unknown_transport_falls_back_to_plane(self, caplog):
        assert stop_from_dict({"id": "1", "transport": "hoverboard"}).transport is Transport.PLANE
        assert "hoverboard" in caplog.text
        assert stop_from_dict({"id": "1"}).transport is Transport.PLANE

    @pytest.mark.parametrize("bad", [{"location": "No id"}, {"id": ""}, "Paris", {"id": "1", "coordinates": [1, 2]}])
    def test_rejects_malformed_stops(self, bad):
        with pytest.raises(StopDataError):
            stop_from_dict(bad)

    def test_stops_must_be_a_list(self):
        with pytest.raises(StopDataError):
            stops_from_list("stops")


class TestGeocodeBoundary:
    def test_success(self):
        assert coordinates_from_geocode({"latitude": 48.85, "longitude": 2.35}) == Coordinates(48.85, 2.35)

    @pytest.mark.parametrize(
        "result",
        [None, {"error": "City not found"}, {"latitude": "x", "longitude": 2}, {"latitude": math.inf, "longitude": 0}],
    )
    def test_any_failure_means_absent(self, result):
        assert coordinates_from_geocode(result) is None


class TestResolvedStopSequence:
    def test_filters_and_keeps_order(self, trip_with_gaps):
        resolved = ResolvedStopSequence(trip_with_gaps)
        assert list(resolved) == [PARIS, ROME, TOKYO]
        assert resolved.segment_count == 2
        assert resolved.segment(1) == (ROME, TOKYO)
        assert resolved.projected(0, 800, 400) == pytest.approx((405.2271, 91.4298), abs=1e-3)

    def test_empty(self):
        resolved = ResolvedStopSequence([])
        assert len(resolved) == 0
        assert resolved.segment_count == 0
        assert resolved.loop_segments == frozenset()

    def test_loop_segments(self):
        resolved = ResolvedStopSequence([PARIS, ROME, PARIS, TOKYO])
        assert resolved.arrives_at_start(1)
        assert not resolved.arrives_at_start(2)
        assert resolved.loop_segments == frozenset({1})


class TestLoaders:
    def test_load_json_list_and_object(self, tmp_path):
        payload = [s.to_dict() for s in (PARIS, ROME, TOKYO)]
        as_list = tmp_path / "stops.json"
        as_list.write_text(json.dumps(payload))
        as_object = tmp_path / "trip.json"
        as_object.write_text(json.dumps({"stops": payload}))
        assert load_stops(as_list) == load_stops(as_object) == [PARIS, ROME, TOKYO]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(StopDataError):
            load_stops(path)

    def test_load_csv(self, tmp_path):
        path = tmp_path / "trip.csv"
        path.write_text(
            "location,latitude,longitude,date,transport\n"
            "Paris,48.8566,2.3522,2024-05-01,plane\n"
            "Atlantis,,,,\n"
            "Rome,41.9028,12.4964,2024-05-04,train\n"
        )
        stops = load_stops(path)
        assert [s.id for s in stops] == ["1", "2", "3"]
        assert stops[0].date == "2024-05-01"
        assert stops[1].coordinates is None
        assert stops[2].transport is Transport.TRAIN
        assert stops[2].coordinates == Coordinates(41.9028, 12.4964)

    def test_csv_missing_columns(self, tmp_path):
        path = tmp_path / "trip.csv"
        path.write_text("city,latitude\nParis,48.8\n")
        with pytest.raises(StopDataError, match="location, longitude"):
            load_stops(path)
