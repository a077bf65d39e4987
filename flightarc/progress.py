"""
Time-based flight progress: where each flight is at a given simulation time.

This is the only surface the map layer consumes. For a clock value it answers,
per active flight, the current position, heading and the visible path prefix.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .geodesic import calculate_bearing
from .models import GeoPoint, NormalizedFlight


class ClampPolicy(Enum):
    """What happens to a flight once it has landed.

    VISIBLE keeps it drawn at the end of its path; VANISH drops it from the
    active set.
    """

    VISIBLE = 'visible'
    VANISH = 'vanish'

    @classmethod
    def parse(cls, value) -> 'ClampPolicy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ', '.join(p.value for p in cls)
            raise ValueError(f"unknown clamp policy {value!r} (expected one of: {names})") from None


@dataclass(frozen=True)
class ProgressSample:
    progress: float
    visible_waypoint_count: int
    position: GeoPoint
    orientation: Optional[float]  # None until two way-points are visible


def compute_progress(flight: NormalizedFlight, query_time: int,
                     policy: ClampPolicy = ClampPolicy.VISIBLE) -> Optional[ProgressSample]:
    """
    Progress of `flight` at `query_time` (unix seconds).

    Returns None when the flight is not part of the active set, which only
    happens under the VANISH policy once the flight has arrived.
    """
    duration = flight.duration
    if duration <= 0:
        raise ValueError(f"flight {flight.label} has non-positive duration {duration}")

    raw_fraction = (query_time - flight.departure_time) / duration
    if policy is ClampPolicy.VANISH and raw_fraction >= 1:
        return None

    progress = max(0.0, min(1.0, raw_fraction))
    waypoints = flight.waypoints
    n = len(waypoints) - 1
    count = math.floor(progress * n)

    position = waypoints[count - 1] if count >= 1 else flight.departure_coord
    orientation = None
    if count >= 2:
        orientation = calculate_bearing(waypoints[count - 2], waypoints[count - 1])

    return ProgressSample(
        progress=progress,
        visible_waypoint_count=count,
        position=position,
        orientation=orientation,
    )


@dataclass(frozen=True)
class FrameEntry:
    """One flight's state for one rendered frame."""

    flight: NormalizedFlight
    sample: ProgressSample

    @property
    def path(self) -> Tuple[GeoPoint, ...]:
        return self.flight.waypoints[:self.sample.visible_waypoint_count]

    @property
    def position(self) -> GeoPoint:
        return self.sample.position

    @property
    def heading(self) -> Optional[float]:
        return self.sample.orientation

    def _properties(self, query_time) -> Dict[str, Any]:
        return {
            'callsign': self.flight.label,
            'departure': self.flight.departure.icao,
            'arrival': self.flight.arrival.icao,
            'departure_airport': self.flight.departure.airport,
            'arrival_airport': self.flight.arrival.airport,
            'timestamp': query_time,
            'heading': self.heading,
            'progress': float(self.sample.progress),
            'departure_time': self.flight.departure_time,
            'arrival_time': self.flight.arrival_time,
        }

    def to_feature(self, query_time=None) -> Dict[str, Any]:
        """GeoJSON Point feature for the aircraft marker."""
        return {
            'type': 'Feature',
            'geometry': {
                'type': 'Point',
                'coordinates': self.position.as_lon_lat(),
            },
            'properties': self._properties(query_time),
        }

    def to_trail_feature(self, query_time=None) -> Optional[Dict[str, Any]]:
        """GeoJSON LineString of the drawn path, or None if it is shorter than a segment."""
        path = self.path
        if len(path) < 2:
            return None
        return {
            'type': 'Feature',
            'geometry': {
                'type': 'LineString',
                'coordinates': [p.as_lon_lat() for p in path],
            },
            'properties': self._properties(query_time),
        }


def compute_frame(flights: Iterable[NormalizedFlight], query_time: int,
                  policy: ClampPolicy = ClampPolicy.VISIBLE) -> List[FrameEntry]:
    """Frame entries for every active flight at `query_time`, in input order."""
    entries = []
    for flight in flights:
        sample = compute_progress(flight, query_time, policy)
        if sample is not None:
            entries.append(FrameEntry(flight=flight, sample=sample))
    return entries
