"""Shared fixtures: airport table and AviationStack-shaped sample records."""

import copy

import pytest

from flightarc.airports import build_airport_table
from flightarc.models import GeoPoint, NormalizedFlight
from flightarc.waypoints import generate_waypoints

KJFK = GeoPoint(longitude=-73.7781, latitude=40.6413)
KLAX = GeoPoint(longitude=-118.4085, latitude=33.9416)

SAMPLE_FLIGHTS = [
    {
        "flight_date": "2024-11-18",
        "flight_status": "active",
        "departure": {
            "airport": "John F. Kennedy International Airport",
            "iata": "JFK",
            "icao": "KJFK",
            "gate": "B22",
            "scheduled": "2024-11-18T01:30:00+00:00",
            "estimated": "2024-11-18T01:30:00+00:00",
        },
        "arrival": {
            "airport": "Los Angeles International Airport",
            "iata": "LAX",
            "icao": "KLAX",
            "scheduled": "2024-11-18T05:30:00+00:00",
            "estimated": "2024-11-18T05:30:00+00:00",
        },
        "airline": {"name": "Delta Air Lines", "iata": "DL", "icao": "DAL"},
        "flight": {"number": "445", "iata": "DL445", "icao": "DAL445"},
        "aircraft": {"registration": "N12345", "icao24": "A00001"},
        "live": None,
    },
    {
        "flight_date": "2024-11-18",
        "flight_status": "active",
        "departure": {"icao": "EGLL", "estimated": "2024-11-18T01:00:00+00:00"},
        "arrival": {"icao": "OMDB", "estimated": "2024-11-18T09:00:00+00:00"},
        "flight": {"number": "30", "iata": "EK30", "icao": "UAE30"},
    },
    {
        # arrival stamped before departure
        "flight_date": "2024-11-18",
        "flight_status": "scheduled",
        "departure": {"icao": "RJTT", "estimated": "2024-11-18T04:00:00Z"},
        "arrival": {"icao": "YSSY", "estimated": "2024-11-18T03:00:00Z"},
        "flight": {"number": "771", "iata": "JL771", "icao": "JAL771"},
    },
]


@pytest.fixture
def airport_table():
    return build_airport_table()


@pytest.fixture
def raw_flights():
    return copy.deepcopy(SAMPLE_FLIGHTS)


def make_flight(departure_time=1000, arrival_time=1100, start=KJFK, end=KLAX, count=100, **extra):
    """NormalizedFlight built directly, bypassing ingestion."""
    return NormalizedFlight(
        departure={"icao": "KJFK"},
        arrival={"icao": "KLAX"},
        departure_coord=start,
        arrival_coord=end,
        waypoints=generate_waypoints(start, end, count),
        departure_time=departure_time,
        arrival_time=arrival_time,
        **extra,
    )
