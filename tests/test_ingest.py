"""Tests for raw record ingestion."""

import types
from datetime import datetime, timezone

import pytest

from flightarc.ingest import iter_normalized, normalize, parse_timestamp, playback_window
from flightarc.models import FlightRecord

from conftest import KJFK, KLAX


class TestParseTimestamp:

    def test_offset_string(self):
        assert parse_timestamp("2024-11-18T01:30:00+00:00") == 1731893400

    def test_z_suffix(self):
        assert parse_timestamp("2024-11-18T01:30:00Z") == 1731893400

    def test_other_offset(self):
        assert parse_timestamp("2024-11-17T20:30:00-05:00") == 1731893400

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-11-18T01:30:00") == 1731893400

    def test_fractional_seconds_are_floored(self):
        assert parse_timestamp("2024-11-18T01:30:00.900+00:00") == 1731893400

    def test_datetime(self):
        assert parse_timestamp(datetime(2024, 11, 18, 1, 30, tzinfo=timezone.utc)) == 1731893400

    @pytest.mark.parametrize("value", [None, "", "not a date", 12345])
    def test_unusable(self, value):
        assert parse_timestamp(value) is None


class TestNormalize:

    def test_sample_batch(self, raw_flights, airport_table):
        flights = normalize(raw_flights, airport_table)

        assert [f.label for f in flights] == ["DL445", "EK30"]

    def test_derived_fields(self, raw_flights, airport_table):
        flight = normalize(raw_flights, airport_table)[0]

        assert flight.departure_coord == KJFK
        assert flight.arrival_coord == KLAX
        assert flight.departure_time == 1731893400
        assert flight.arrival_time == 1731907800
        assert flight.duration == 4 * 3600
        assert len(flight.waypoints) == 101
        assert flight.waypoints[0] == KJFK
        assert flight.waypoints[-1] == KLAX

    def test_arrival_before_departure_is_dropped(self, airport_table):
        raw = {
            "departure": {"icao": "RJTT", "estimated": "2024-11-18T04:00:00Z"},
            "arrival": {"icao": "YSSY", "estimated": "2024-11-18T03:00:00Z"},
        }
        assert normalize([raw], airport_table) == []

    def test_zero_duration_is_dropped(self, airport_table):
        raw = {
            "departure": {"icao": "KJFK", "estimated": "2024-11-18T04:00:00Z"},
            "arrival": {"icao": "KLAX", "estimated": "2024-11-18T04:00:00Z"},
        }
        assert normalize([raw], airport_table) == []

    def test_unknown_airport_is_dropped(self, raw_flights, airport_table):
        raw_flights[0]["arrival"]["icao"] = "ZZZZ"
        assert [f.label for f in normalize(raw_flights, airport_table)] == ["EK30"]

    def test_missing_airport_code_is_dropped(self, raw_flights, airport_table):
        raw_flights[1]["departure"]["icao"] = None
        assert [f.label for f in normalize(raw_flights, airport_table)] == ["DL445"]

    def test_missing_estimate_is_dropped(self, raw_flights, airport_table):
        del raw_flights[0]["departure"]["estimated"]
        assert [f.label for f in normalize(raw_flights, airport_table)] == ["EK30"]

    def test_malformed_record_is_dropped(self, raw_flights, airport_table):
        raw_flights.insert(0, {"flight": {"iata": "XX1"}})
        assert [f.label for f in normalize(raw_flights, airport_table)] == ["DL445", "EK30"]

    def test_codes_are_case_insensitive(self, raw_flights, airport_table):
        raw_flights[0]["departure"]["icao"] = " kjfk "
        assert normalize(raw_flights, airport_table)[0].departure_coord == KJFK

    def test_extra_fields_pass_through(self, raw_flights, airport_table):
        flight = normalize(raw_flights, airport_table)[0]
        dumped = flight.model_dump()

        assert dumped["live"] is None
        assert dumped["departure"]["gate"] == "B22"
        assert flight.aircraft["registration"] == "N12345"

    def test_accepts_flight_records(self, raw_flights, airport_table):
        records = [FlightRecord.model_validate(r) for r in raw_flights]
        assert len(normalize(records, airport_table)) == 2

    def test_waypoint_count(self, raw_flights, airport_table):
        flights = normalize(raw_flights, airport_table, waypoint_count=10)
        assert all(len(f.waypoints) == 11 for f in flights)

    def test_normalized_flights_are_immutable(self, raw_flights, airport_table):
        flight = normalize(raw_flights, airport_table)[0]
        with pytest.raises(Exception):
            flight.departure_time = 0

    def test_iter_normalized_is_lazy(self, raw_flights, airport_table):
        it = iter_normalized(raw_flights, airport_table)
        assert isinstance(it, types.GeneratorType)
        assert next(it).label == "DL445"


class TestPlaybackWindow:

    def test_span(self, raw_flights, airport_table):
        flights = normalize(raw_flights, airport_table)
        # EGLL departs 01:00, arrives OMDB 09:00
        assert playback_window(flights) == (
            parse_timestamp("2024-11-18T01:00:00Z"),
            parse_timestamp("2024-11-18T09:00:00Z"),
        )

    def test_empty(self):
        assert playback_window([]) is None
