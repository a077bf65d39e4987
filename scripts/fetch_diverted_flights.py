"""
Fetch diverted flights from AviationStack and store them for today's date.

One document per UTC flight date is upserted into MongoDB, so running this
twice on the same day replaces the batch instead of duplicating it.

Usage:
  export AVIATION_STACK_ACCESS_KEY="..."
  export MONGODB_URI="mongodb+srv://..."
  python scripts/fetch_diverted_flights.py
  python scripts/fetch_diverted_flights.py --output data/diverted.json   # skip MongoDB
"""

import argparse
import json
import sys
from pathlib import Path

from flightarc.config import configure_logging
from flightarc.sources import AviationStackClient, FlightSourceError, FlightStore, today_utc


def fetch_and_save(status='diverted', limit=100, output=None, flight_date=None):
    flight_date = flight_date or today_utc()

    print(f"Fetching up to {limit} '{status}' flights from AviationStack...")
    flights = AviationStackClient().fetch_flights(flight_status=status, limit=limit)
    print(f"✓ Received {len(flights)} flights")

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump({'flight_date': flight_date, 'data': flights}, f, indent=2)
        print(f"✓ Saved to {output_path}")
    else:
        FlightStore.connect().save_day(flight_date, flights)
        print(f"✓ Data for {flight_date} saved successfully.")

    return flights


def main(argv=None):
    parser = argparse.ArgumentParser(description='Fetch flights from AviationStack and store them')
    parser.add_argument('--status', default='diverted', help='AviationStack flight_status filter')
    parser.add_argument('--limit', type=int, default=100, help='Maximum number of flights')
    parser.add_argument('--output', help='Write JSON to this file instead of MongoDB')
    parser.add_argument('--date', help='Flight date key (default: today, UTC)')
    args = parser.parse_args(argv)

    configure_logging()

    try:
        fetch_and_save(args.status, args.limit, args.output, args.date)
    except FlightSourceError as e:
        print(f"✗ Error fetching and saving flight data: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
