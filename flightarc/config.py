"""
Settings for flightarc, read from the environment (and a local .env file).

Values here are defaults only. The Flask app and the scripts pass them into the
engine explicitly.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

# Flight data API (AviationStack)
AVIATION_STACK_ACCESS_KEY = os.getenv('AVIATION_STACK_ACCESS_KEY', '')
AVIATION_STACK_URL = os.getenv('AVIATION_STACK_URL', 'https://api.aviationstack.com/v1/flights')
API_TIMEOUT_S = float(os.getenv('API_TIMEOUT_S', '10'))

# Flight store (MongoDB)
MONGODB_URI = os.getenv('MONGODB_URI', os.getenv('MONGO_ATLAS_URI')) or 'mongodb://localhost:27017/'
MONGODB_DB_NAME = os.getenv('MONGODB_DB_NAME', 'flights')
FLIGHTS_COLLECTION = os.getenv('FLIGHTS_COLLECTION', 'diverted_flights')

# Path resolution: way-points per flight = NUM_WAYPOINTS + 1
NUM_WAYPOINTS = int(os.getenv('NUM_WAYPOINTS', '100'))

# Playback
DEFAULT_SPEED_MULTIPLIER = float(os.getenv('DEFAULT_SPEED_MULTIPLIER', '10000'))  # sim seconds per real second
LOOK_BACK_SECONDS = int(os.getenv('LOOK_BACK_SECONDS', '86400'))  # past 24 hours
CLAMP_POLICY = os.getenv('CLAMP_POLICY', 'visible')

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


def configure_logging(level=None):
    """Set up root logging for scripts and the backend."""
    logging.basicConfig(
        level=getattr(logging, str(level or LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
