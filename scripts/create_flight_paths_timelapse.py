"""
Create timelapse frames from a batch of raw flight records.

Flights are normalized onto great-circle paths, then a playback clock is
stepped with synthetic wall-clock times (one tick per frame) from the earliest
departure to the latest arrival. Every frame's aircraft positions are written
as GeoJSON Point features tagged with their frame number, plus a CSV summary
of each flight.
"""

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from flightarc.airports import build_airport_table, load_airport_table
from flightarc.clock import PlaybackClock
from flightarc.config import CLAMP_POLICY, DEFAULT_SPEED_MULTIPLIER, NUM_WAYPOINTS, configure_logging
from flightarc.geodesic import haversine_distance
from flightarc.ingest import normalize
from flightarc.progress import ClampPolicy, FrameEntry, compute_progress


def load_raw_flights(input_json):
    with open(input_json) as f:
        payload = json.load(f)
    return payload.get('data', []) if isinstance(payload, dict) else payload


def positive_int(value):
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def run_timelapse(flights, speed=DEFAULT_SPEED_MULTIPLIER, fps=30, policy=ClampPolicy.VISIBLE,
                  max_frames=10000):
    """
    Step a clock across the batch and collect per-frame features.

    Returns (features, frames_visible) where frames_visible[i] counts how many
    frames flights[i] appeared in.
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")

    flights = list(flights)
    clock = PlaybackClock.for_flights(flights, speed_multiplier=speed)
    frame_interval = 1.0 / fps

    features = []
    frames_visible = [0] * len(flights)

    wall = 0.0
    clock.play(now=wall)
    frame = 0
    while frame < max_frames:
        for i, flight in enumerate(flights):
            sample = compute_progress(flight, clock.current, policy)
            if sample is None:
                continue
            feature = FrameEntry(flight=flight, sample=sample).to_feature(clock.current)
            feature['properties']['frame'] = frame
            features.append(feature)
            frames_visible[i] += 1

        if not clock.is_playing:
            break
        wall += frame_interval
        clock.tick(wall)
        frame += 1

    return features, frames_visible


def flight_summary(flights, frames_visible):
    rows = []
    for i, f in enumerate(flights):
        rows.append({
            'callsign': f.label,
            'departure': f.departure.icao,
            'arrival': f.arrival.icao,
            'departure_time': f.departure_time,
            'arrival_time': f.arrival_time,
            'duration_s': f.duration,
            'distance_km': round(haversine_distance(f.departure_coord, f.arrival_coord), 1),
            'frames_visible': frames_visible[i],
        })
    return pd.DataFrame(rows)


def create_timelapse(input_json, output_geojson, summary_csv=None, airports_csv=None,
                     speed=DEFAULT_SPEED_MULTIPLIER, fps=30, policy=CLAMP_POLICY,
                     waypoints=NUM_WAYPOINTS, max_frames=10000):
    print(f"Loading flights from {input_json}...")
    raw = load_raw_flights(input_json)
    airport_table = load_airport_table(airports_csv) if airports_csv else build_airport_table()

    flights = normalize(raw, airport_table, waypoints)
    print(f"Found {len(flights)} valid flights out of {len(raw)}")
    if not flights:
        raise ValueError("No valid flights to animate. Check airport codes and timestamps.")

    policy = ClampPolicy.parse(policy)
    print(f"Running playback at x{speed:g}, {fps} fps, policy={policy.value}...")
    features, frames_visible = run_timelapse(flights, speed, fps, policy, max_frames)

    timestamps = [feat['properties']['timestamp'] for feat in features]
    geojson = {
        'type': 'FeatureCollection',
        'features': features,
        'metadata': {
            'total_positions': len(features),
            'total_flights': len(flights),
            'total_frames': max((feat['properties']['frame'] for feat in features), default=-1) + 1,
            'policy': policy.value,
            'min_timestamp': min(timestamps, default=None),
            'max_timestamp': max(timestamps, default=None),
        },
    }

    output_path = Path(output_geojson)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    print(f"\nSaving to {output_path}...")
    with open(output_path, 'w') as f:
        json.dump(geojson, f)

    summary = flight_summary(flights, frames_visible)
    if summary_csv:
        Path(summary_csv).parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(summary_csv, index=False)
        print(f"✓ Flight summary saved to {summary_csv}")

    meta = geojson['metadata']
    print(f"✓ Exported {meta['total_positions']} positions over {meta['total_frames']} frames")
    if meta['min_timestamp'] is not None:
        start = datetime.fromtimestamp(meta['min_timestamp'], tz=timezone.utc)
        end = datetime.fromtimestamp(meta['max_timestamp'], tz=timezone.utc)
        print(f"✓ Time range: {start} to {end}")

    return geojson, summary


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Create flight paths timelapse from raw flight records')
    parser.add_argument('--input', required=True, help='JSON file with raw flight records')
    parser.add_argument('--output', default='data/flight_paths_timelapse.geojson', help='Output GeoJSON file')
    parser.add_argument('--summary', default=None, help='Optional CSV with one row per flight')
    parser.add_argument('--airports', default=None, help='CSV with ICAO codes and coordinates')
    parser.add_argument('--speed', type=float, default=DEFAULT_SPEED_MULTIPLIER, help='Simulated seconds per real second')
    parser.add_argument('--fps', type=positive_int, default=30, help='Frames per real second')
    parser.add_argument('--policy', default=CLAMP_POLICY, choices=[p.value for p in ClampPolicy])
    parser.add_argument('--waypoints', type=int, default=NUM_WAYPOINTS, help='Way-points per flight path')
    parser.add_argument('--max-frames', type=int, default=10000)

    args = parser.parse_args()
    configure_logging()
    create_timelapse(args.input, args.output, args.summary, args.airports, args.speed,
                     args.fps, args.policy, args.waypoints, args.max_frames)
