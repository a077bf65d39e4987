"""Fixed-resolution way-point sampling along a great-circle route."""

from typing import Tuple

import numpy as np

from .config import NUM_WAYPOINTS
from .geodesic import interpolate_great_circle
from .models import GeoPoint


def generate_waypoints(start: GeoPoint, end: GeoPoint, count: int = NUM_WAYPOINTS) -> Tuple[GeoPoint, ...]:
    """
    Sample `count + 1` evenly spaced points from start to end inclusive.

    `count` trades path smoothness against per-frame rendering cost.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    fractions = np.linspace(0.0, 1.0, count + 1)
    return tuple(interpolate_great_circle(start, end, float(f)) for f in fractions)
