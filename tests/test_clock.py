"""Tests for the playback clock state machine."""

from types import SimpleNamespace

import pytest

from flightarc import clock as clock_module
from flightarc.clock import ClockState, PlaybackClock

from conftest import make_flight

START = 1_000_000
END = START + 86_400


@pytest.fixture
def clock():
    return PlaybackClock(START, END, speed_multiplier=10)


class TestConstruction:

    def test_defaults_to_start_paused(self, clock):
        assert clock.current == START
        assert clock.state is ClockState.PAUSED
        assert clock.last_tick_wall_time is None

    def test_initial_current_is_clamped(self):
        assert PlaybackClock(START, END, current=END + 50).current == END

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            PlaybackClock(END, START)

    def test_rejects_negative_speed(self):
        with pytest.raises(ValueError):
            PlaybackClock(START, END, speed_multiplier=-1)

    def test_for_flights_spans_the_batch(self):
        flights = [make_flight(500, 900), make_flight(100, 400), make_flight(300, 1200)]
        clock = PlaybackClock.for_flights(flights)

        assert (clock.start_bound, clock.end_bound) == (100, 1200)
        assert clock.current == 100

    def test_for_flights_rejects_empty_batch(self):
        with pytest.raises(ValueError):
            PlaybackClock.for_flights([])

    def test_look_back_window(self):
        clock = PlaybackClock.look_back(now_unix=10_000, window=3_600)
        assert (clock.start_bound, clock.end_bound) == (6_400, 10_000)


class TestSeek:

    def test_clamps_below_start(self, clock):
        assert clock.seek(START - 1000) == START
        assert clock.current == START

    def test_clamps_above_end(self, clock):
        assert clock.seek(END + 1000) == END

    def test_does_not_change_play_state(self, clock):
        clock.seek(START + 500)
        assert clock.state is ClockState.PAUSED

        clock.play(now=0.0)
        clock.seek(START + 100, now=1.0)
        assert clock.state is ClockState.PLAYING

    def test_resets_wall_reference_while_playing(self, clock):
        clock.play(now=0.0)
        clock.seek(START + 100, now=5.0)
        # only the second since the seek counts, not the five before it
        assert clock.tick(6.0) == START + 110


class TestTick:

    def test_advances_by_elapsed_times_speed(self, clock):
        clock.play(now=100.0)
        assert clock.tick(101.5) == START + 15
        assert clock.tick(102.0) == START + 20
        assert clock.last_tick_wall_time == 102.0

    def test_floors_partial_seconds(self):
        clock = PlaybackClock(START, END, speed_multiplier=1)
        clock.play(now=0.0)
        assert clock.tick(0.5) == START

    def test_noop_while_paused(self, clock):
        assert clock.tick(50.0) == START
        assert clock.state is ClockState.PAUSED

    def test_backwards_wall_time_does_not_rewind(self, clock):
        clock.play(now=10.0)
        clock.tick(12.0)
        assert clock.tick(11.0) == START + 20

    def test_stops_at_end_bound(self, clock):
        clock.seek(END - 5)
        clock.play(now=0.0)

        assert clock.tick(10.0) == END
        assert clock.current == END
        assert clock.state is ClockState.PAUSED

        # no looping
        assert clock.tick(20.0) == END

    def test_play_at_end_stops_on_next_tick(self, clock):
        clock.seek(END)
        clock.play(now=0.0)
        clock.tick(0.0)
        assert not clock.is_playing

    def test_defaults_to_monotonic_time(self, clock, monkeypatch):
        readings = iter([500.0, 502.5])
        monkeypatch.setattr(clock_module, 'time', SimpleNamespace(monotonic=lambda: next(readings)))

        clock.play()
        assert clock.tick() == START + 25
        assert clock.is_playing

    def test_speed_change(self, clock):
        clock.play(now=0.0)
        clock.tick(1.0)
        clock.set_speed(1000)
        assert clock.tick(2.0) == START + 10 + 1000

        with pytest.raises(ValueError):
            clock.set_speed(-5)


class TestPlayPause:

    def test_play_pause_transitions(self, clock):
        clock.play(now=3.0)
        assert clock.is_playing
        assert clock.last_tick_wall_time == 3.0

        clock.pause()
        assert clock.state is ClockState.PAUSED

    def test_pause_then_play_does_not_count_paused_time(self, clock):
        clock.play(now=0.0)
        clock.tick(1.0)
        clock.pause()
        clock.play(now=100.0)
        assert clock.tick(101.0) == START + 20

    def test_toggle(self, clock):
        clock.toggle(now=0.0)
        assert clock.is_playing
        clock.toggle()
        assert not clock.is_playing

    def test_snapshot_is_a_copy(self, clock):
        snap = clock.snapshot()
        clock.seek(START + 10)
        assert snap['current'] == START
        assert snap['running'] is False
