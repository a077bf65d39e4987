"""Great-circle flight paths and timelapse playback for flight maps."""

from .clock import ClockState, PlaybackClock
from .geodesic import calculate_bearing, haversine_distance, interpolate_great_circle
from .ingest import iter_normalized, normalize, parse_timestamp, playback_window
from .models import Airport, FlightEndpoint, FlightRecord, GeoPoint, NormalizedFlight
from .progress import ClampPolicy, FrameEntry, ProgressSample, compute_frame, compute_progress
from .waypoints import generate_waypoints

__version__ = '0.1.0'
