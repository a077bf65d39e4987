"""
Turn raw flight records into NormalizedFlight objects ready for playback.

Upstream data is known to be dirty: unknown airports, missing estimates and
arrivals stamped before departures all show up. Such records are dropped here,
logged, and never raised to the caller.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .config import NUM_WAYPOINTS
from .models import FlightRecord, GeoPoint, NormalizedFlight
from .waypoints import generate_waypoints

logger = logging.getLogger(__name__)

RawFlight = Union[FlightRecord, Dict[str, Any]]


def parse_timestamp(ts: Any) -> Optional[int]:
    """ISO datetime string (or datetime) to unix seconds, floored. None if unusable."""
    if ts is None:
        return None
    if isinstance(ts, str):
        try:
            ts = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(ts, datetime):
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return math.floor(ts.timestamp())


def _lookup(code: Optional[str], airport_table: Mapping[str, GeoPoint]) -> Optional[GeoPoint]:
    if not code:
        return None
    return airport_table.get(str(code).strip().upper())


def _normalize_one(raw: RawFlight, airport_table: Mapping[str, GeoPoint],
                   waypoint_count: int) -> Tuple[Optional[NormalizedFlight], str]:
    """Returns (flight, '') or (None, reason)."""
    try:
        record = raw if isinstance(raw, FlightRecord) else FlightRecord.model_validate(raw)
    except ValidationError as e:
        return None, f"invalid record ({e.error_count()} errors)"

    dep_coord = _lookup(record.departure.icao, airport_table)
    arr_coord = _lookup(record.arrival.icao, airport_table)
    if dep_coord is None or arr_coord is None:
        return None, f"unknown airport {record.departure.icao} -> {record.arrival.icao}"

    departure_time = parse_timestamp(record.departure.estimated)
    arrival_time = parse_timestamp(record.arrival.estimated)
    if departure_time is None or arrival_time is None:
        return None, "missing or unparseable estimated times"

    # the API sometimes reports arrival before departure
    if arrival_time <= departure_time:
        return None, f"non-positive duration ({arrival_time - departure_time}s)"

    fields = record.model_dump()
    fields.update(
        departure_coord=dep_coord,
        arrival_coord=arr_coord,
        waypoints=generate_waypoints(dep_coord, arr_coord, waypoint_count),
        departure_time=departure_time,
        arrival_time=arrival_time,
    )
    return NormalizedFlight(**fields), ''


def iter_normalized(raw_flights: Iterable[RawFlight], airport_table: Mapping[str, GeoPoint],
                    waypoint_count: int = NUM_WAYPOINTS) -> Iterator[NormalizedFlight]:
    """Lazily filter and normalize raw records, preserving input order."""
    for raw in raw_flights:
        flight, reason = _normalize_one(raw, airport_table, waypoint_count)
        if flight is None:
            logger.debug("Dropping flight %s: %s", _describe(raw), reason)
            continue
        yield flight


def normalize(raw_flights: Iterable[RawFlight], airport_table: Mapping[str, GeoPoint],
              waypoint_count: int = NUM_WAYPOINTS) -> List[NormalizedFlight]:
    raw_flights = list(raw_flights)
    flights = list(iter_normalized(raw_flights, airport_table, waypoint_count))
    logger.info("Normalized %d of %d flights (%d dropped)",
                len(flights), len(raw_flights), len(raw_flights) - len(flights))
    return flights


def playback_window(flights: Iterable[NormalizedFlight]) -> Optional[Tuple[int, int]]:
    """(earliest departure, latest arrival) over a batch, or None if it is empty."""
    flights = list(flights)
    if not flights:
        return None
    return (min(f.departure_time for f in flights),
            max(f.arrival_time for f in flights))


def _describe(raw: RawFlight) -> str:
    if isinstance(raw, FlightRecord):
        return raw.label
    if isinstance(raw, dict):
        flight = raw.get('flight') or {}
        if isinstance(flight, dict):
            return str(flight.get('iata') or flight.get('icao') or '<unnamed>')
    return '<unnamed>'
