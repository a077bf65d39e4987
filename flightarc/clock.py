"""
Seekable playback clock for the flight timelapse.

The clock has no timer of its own. Whatever drives the frames (a render loop,
a script stepping synthetic times) calls `tick(now)` once per frame.
"""

import logging
import math
import time
from enum import Enum
from typing import Iterable, Optional

from .config import DEFAULT_SPEED_MULTIPLIER, LOOK_BACK_SECONDS
from .ingest import playback_window
from .models import NormalizedFlight

logger = logging.getLogger(__name__)


class ClockState(Enum):
    PAUSED = 'paused'
    PLAYING = 'playing'


class PlaybackClock:
    """Simulation time cursor bounded by [start_bound, end_bound].

    `current` always stays inside the bounds. Playback stops at end_bound and
    does not loop.
    """

    def __init__(self, start_bound: int, end_bound: int, current: Optional[int] = None,
                 speed_multiplier: float = DEFAULT_SPEED_MULTIPLIER):
        if start_bound > end_bound:
            raise ValueError(f"start_bound {start_bound} is after end_bound {end_bound}")
        if speed_multiplier < 0:
            raise ValueError(f"speed_multiplier must be non-negative, got {speed_multiplier}")

        self.start_bound = int(start_bound)
        self.end_bound = int(end_bound)
        self.current = self._clamp(self.start_bound if current is None else current)
        self.speed_multiplier = float(speed_multiplier)
        self.running = False
        self.last_tick_wall_time: Optional[float] = None

    @classmethod
    def for_flights(cls, flights: Iterable[NormalizedFlight], **kwargs) -> 'PlaybackClock':
        """Clock spanning the earliest departure to the latest arrival."""
        window = playback_window(flights)
        if window is None:
            raise ValueError("cannot build a playback window from an empty flight list")
        return cls(window[0], window[1], **kwargs)

    @classmethod
    def look_back(cls, now_unix: Optional[int] = None, window: int = LOOK_BACK_SECONDS,
                  **kwargs) -> 'PlaybackClock':
        """Clock covering the `window` seconds leading up to now."""
        end = int(now_unix if now_unix is not None else time.time())
        return cls(end - window, end, **kwargs)

    @property
    def state(self) -> ClockState:
        return ClockState.PLAYING if self.running else ClockState.PAUSED

    @property
    def is_playing(self) -> bool:
        return self.running

    def _clamp(self, t) -> int:
        return int(max(self.start_bound, min(self.end_bound, t)))

    def play(self, now: Optional[float] = None) -> None:
        if self.running:
            return
        self.running = True
        self.last_tick_wall_time = time.monotonic() if now is None else now
        logger.debug("Playback started at %d (x%s)", self.current, self.speed_multiplier)

    def pause(self) -> None:
        if not self.running:
            return
        self.running = False
        self.last_tick_wall_time = None
        logger.debug("Playback paused at %d", self.current)

    def toggle(self, now: Optional[float] = None) -> None:
        """Play/pause button."""
        if self.running:
            self.pause()
        else:
            self.play(now)

    def seek(self, t, now: Optional[float] = None) -> int:
        """Jump to `t`, clamped into the bounds. Play state is unchanged."""
        self.current = self._clamp(t)
        if self.running:
            # next tick measures from the seek, not from the previous frame
            self.last_tick_wall_time = time.monotonic() if now is None else now
        return self.current

    def set_speed(self, speed_multiplier: float) -> None:
        if speed_multiplier < 0:
            raise ValueError(f"speed_multiplier must be non-negative, got {speed_multiplier}")
        self.speed_multiplier = float(speed_multiplier)

    def tick(self, now: Optional[float] = None) -> int:
        """Advance by the wall time elapsed since the last tick. No-op while paused.

        `now` must share a time base with the value given to `play`/`seek`;
        all three default to `time.monotonic()`.
        """
        if not self.running:
            return self.current
        if now is None:
            now = time.monotonic()

        elapsed = max(0.0, now - self.last_tick_wall_time)
        self.current = self._clamp(self.current + math.floor(elapsed * self.speed_multiplier))
        self.last_tick_wall_time = now

        if self.current >= self.end_bound:
            self.current = self.end_bound
            self.running = False
            self.last_tick_wall_time = None
            logger.debug("Playback reached end bound %d", self.end_bound)

        return self.current

    def snapshot(self) -> dict:
        """Plain copy of the clock state, safe to hand to another thread."""
        return {
            'start_bound': self.start_bound,
            'end_bound': self.end_bound,
            'current': self.current,
            'speed_multiplier': self.speed_multiplier,
            'running': self.running,
            'last_tick_wall_time': self.last_tick_wall_time,
        }

    def __repr__(self):
        return (f"PlaybackClock(current={self.current}, bounds=({self.start_bound}, {self.end_bound}), "
                f"speed={self.speed_multiplier}, state={self.state.value})")
