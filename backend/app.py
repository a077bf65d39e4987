"""
Flask backend serving flight positions for the timelapse map.

The front end owns the playback clock and asks for one frame per timestamp.
Flights are normalized once at startup and handed to `create_app`.
"""

import argparse
import json
import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from flightarc.airports import airports_for, build_airport_table, load_airport_table
from flightarc.clock import PlaybackClock
from flightarc.config import CLAMP_POLICY, NUM_WAYPOINTS, configure_logging
from flightarc.geodesic import haversine_distance
from flightarc.ingest import normalize, playback_window
from flightarc.progress import ClampPolicy, compute_frame
from flightarc.sources import FlightSourceError, FlightStore, today_utc

logger = logging.getLogger(__name__)


def _query_args():
    """Parse timestamp/policy query params. Returns (timestamp, policy, error_response)."""
    timestamp_str = request.args.get('timestamp', type=str)
    if not timestamp_str:
        return None, None, (jsonify({'error': 'timestamp parameter required'}), 400)

    try:
        timestamp = int(float(timestamp_str))
    except (ValueError, TypeError, OverflowError):
        return None, None, (jsonify({'error': 'invalid timestamp format'}), 400)

    policy_str = request.args.get('policy')
    try:
        policy = ClampPolicy.parse(policy_str) if policy_str else None
    except ValueError as e:
        return None, None, (jsonify({'error': str(e)}), 400)

    return timestamp, policy, None


def create_app(flights, airport_table, policy=ClampPolicy.VISIBLE, clock_window=None):
    """
    Build the Flask app around an already-normalized flight batch.

    Args:
        flights: list of NormalizedFlight
        airport_table: ICAO -> GeoPoint mapping used for airport markers
        policy: default ClampPolicy for landed flights
        clock_window: (start, end) playback bounds; defaults to the batch span
    """
    app = Flask(__name__)
    CORS(app)

    flights = list(flights)
    default_policy = ClampPolicy.parse(policy)
    window = clock_window or playback_window(flights)
    airports = airports_for(flights, airport_table)

    @app.route('/api/flights', methods=['GET'])
    def get_flights():
        """Aircraft positions at a timestamp."""
        timestamp, policy, error = _query_args()
        if error:
            return error

        entries = compute_frame(flights, timestamp, policy or default_policy)
        features = [e.to_feature(timestamp) for e in entries]
        return jsonify({
            'type': 'FeatureCollection',
            'features': features,
            'timestamp': timestamp,
            'count': len(features),
        })

    @app.route('/api/trails', methods=['GET'])
    def get_trails():
        """Drawn path prefixes at a timestamp."""
        timestamp, policy, error = _query_args()
        if error:
            return error

        entries = compute_frame(flights, timestamp, policy or default_policy)
        trails = [t for t in (e.to_trail_feature(timestamp) for e in entries) if t is not None]
        return jsonify({
            'type': 'FeatureCollection',
            'features': trails,
            'timestamp': timestamp,
            'count': len(trails),
        })

    @app.route('/api/metadata', methods=['GET'])
    def get_metadata():
        if not flights or window is None:
            return jsonify({
                'status': 'no_data',
                'total_flights': 0,
                'min_timestamp': None,
                'max_timestamp': None,
                'policy': default_policy.value,
            })

        return jsonify({
            'status': 'ok',
            'total_flights': len(flights),
            'min_timestamp': window[0],
            'max_timestamp': window[1],
            'policy': default_policy.value,
            'routes': [
                {
                    'callsign': f.label,
                    'departure': f.departure.icao,
                    'arrival': f.arrival.icao,
                    'distance_km': round(haversine_distance(f.departure_coord, f.arrival_coord), 1),
                    'duration_s': f.duration,
                }
                for f in flights
            ],
        })

    @app.route('/api/airports', methods=['GET'])
    def get_airports():
        return jsonify({
            'type': 'FeatureCollection',
            'features': [
                {
                    'type': 'Feature',
                    'geometry': {'type': 'Point', 'coordinates': a.coordinates.as_lon_lat()},
                    'properties': {'icao': a.icao, 'name': a.name, 'role': a.role},
                }
                for a in airports
            ],
            'count': len(airports),
        })

    return app


def load_raw_flights(input_path=None, flight_date=None):
    """Raw records from a JSON file ({"data": [...]} or a list) or from the store."""
    if input_path:
        with open(input_path) as f:
            payload = json.load(f)
        return payload.get('data', []) if isinstance(payload, dict) else payload

    store = FlightStore.connect()
    day = flight_date or store.latest_day() or today_utc()
    logger.info("Loading flights for %s from MongoDB", day)
    return store.load_day(day)


def look_back_window(seconds, now_unix=None):
    """(start, end) bounds of the trailing `seconds` window ending at `now_unix`."""
    clock = PlaybackClock.look_back(now_unix, window=seconds)
    return clock.start_bound, clock.end_bound


def main(argv=None):
    parser = argparse.ArgumentParser(description='Serve flight timelapse frames')
    parser.add_argument('--input', help='JSON file with raw flight records (default: MongoDB)')
    parser.add_argument('--date', help='Flight date to load from MongoDB (YYYY-MM-DD)')
    parser.add_argument('--airports', help='CSV with ICAO codes and coordinates')
    parser.add_argument('--waypoints', type=int, default=NUM_WAYPOINTS, help='Way-points per flight path')
    parser.add_argument('--policy', default=CLAMP_POLICY, choices=[p.value for p in ClampPolicy])
    parser.add_argument('--look-back', type=int, default=None, metavar='SECONDS',
                        help='Serve the window ending now instead of the batch span (e.g. 86400)')
    parser.add_argument('--port', type=int, default=5001)
    args = parser.parse_args(argv)

    configure_logging()

    airport_table = load_airport_table(args.airports) if args.airports else build_airport_table()

    try:
        raw = load_raw_flights(args.input, args.date)
    except (FlightSourceError, OSError, ValueError) as e:
        # keep serving; the map shows "no data"
        logger.error("Could not load flights: %s", e)
        raw = []

    flights = normalize(raw, airport_table, args.waypoints)
    clock_window = look_back_window(args.look_back) if args.look_back is not None else None
    app = create_app(flights, airport_table, policy=args.policy, clock_window=clock_window)

    print("\nStarting Flask server...")
    print("API endpoints:")
    print("  GET /api/flights?timestamp=<unix_timestamp>[&policy=visible|vanish]")
    print("  GET /api/trails?timestamp=<unix_timestamp>[&policy=visible|vanish]")
    print("  GET /api/metadata")
    print("  GET /api/airports")
    print(f"\nServer running on http://localhost:{args.port}")

    app.run(debug=False, port=args.port, host='0.0.0.0')


if __name__ == '__main__':
    main()
