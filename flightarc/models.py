"""
Data models for flight records and the geometry derived from them.

Raw records follow the AviationStack flight shape. Unknown fields are kept so
that whatever the upstream API sends passes through to the front end untouched.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoPoint(BaseModel):
    """A longitude/latitude pair in degrees."""

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(ge=-180.0, le=180.0)
    latitude: float = Field(ge=-90.0, le=90.0)

    def as_lon_lat(self) -> List[float]:
        return [self.longitude, self.latitude]


class Airport(BaseModel):
    """An airport marker. `role` says whether the batch departs from it, arrives at it, or both."""

    model_config = ConfigDict(frozen=True)

    icao: str
    coordinates: GeoPoint
    name: Optional[str] = None
    role: Optional[Literal['departure', 'arrival', 'both']] = None


class FlightEndpoint(BaseModel):
    """Departure or arrival block of a flight record."""

    model_config = ConfigDict(extra='allow', frozen=True)

    icao: Optional[str] = None
    iata: Optional[str] = None
    airport: Optional[str] = None
    scheduled: Optional[str] = None
    estimated: Optional[str] = None
    actual: Optional[str] = None


class FlightRecord(BaseModel):
    model_config = ConfigDict(extra='allow', frozen=True)

    flight_date: Optional[str] = None
    flight_status: Optional[str] = None
    departure: FlightEndpoint
    arrival: FlightEndpoint
    airline: Optional[Dict[str, Any]] = None
    flight: Optional[Dict[str, Any]] = None
    aircraft: Optional[Dict[str, Any]] = None

    @property
    def label(self) -> str:
        """Short display name: flight IATA, then ICAO, then the airport pair."""
        flight = self.flight or {}
        for key in ('iata', 'icao', 'number'):
            if flight.get(key):
                return str(flight[key])
        return f"{self.departure.icao or '?'}-{self.arrival.icao or '?'}"


class NormalizedFlight(FlightRecord):
    """A flight record with resolved coordinates, a sampled path and unix times.

    Built once per ingestion pass and never mutated afterwards.
    """

    departure_coord: GeoPoint
    arrival_coord: GeoPoint
    waypoints: Tuple[GeoPoint, ...]
    departure_time: int
    arrival_time: int

    @model_validator(mode='after')
    def _check_times(self):
        if self.arrival_time <= self.departure_time:
            raise ValueError(
                f"arrival_time {self.arrival_time} must be after departure_time {self.departure_time}"
            )
        if len(self.waypoints) < 2:
            raise ValueError("a flight path needs at least two way-points")
        return self

    @property
    def duration(self) -> int:
        return self.arrival_time - self.departure_time
