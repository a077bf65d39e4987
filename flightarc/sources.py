"""
Where flight batches come from: the AviationStack REST API and a MongoDB
collection holding one batch per flight date.

Both hand back plain AviationStack-shaped dicts; ingestion takes it from there.
Neither retries. A failed fetch shows up as an empty map, not a retry loop.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from .config import (
    API_TIMEOUT_S,
    AVIATION_STACK_ACCESS_KEY,
    AVIATION_STACK_URL,
    FLIGHTS_COLLECTION,
    MONGODB_DB_NAME,
    MONGODB_URI,
)

logger = logging.getLogger(__name__)


class FlightSourceError(Exception):
    """A flight batch could not be fetched or loaded."""


def today_utc() -> str:
    """Today's date in UTC as YYYY-MM-DD."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


class AviationStackClient:
    def __init__(self, access_key: str = AVIATION_STACK_ACCESS_KEY, base_url: str = AVIATION_STACK_URL,
                 timeout: float = API_TIMEOUT_S, session: Optional[requests.Session] = None):
        self.access_key = access_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_flights(self, flight_status: Optional[str] = 'diverted', limit: int = 100,
                      **params) -> List[Dict[str, Any]]:
        """Fetch the `data` array of flight records."""
        if not self.access_key:
            raise FlightSourceError("AVIATION_STACK_ACCESS_KEY is not set")

        query = {'access_key': self.access_key, 'limit': limit}
        if flight_status:
            query['flight_status'] = flight_status
        query.update({k: v for k, v in params.items() if v is not None})

        try:
            response = self.session.get(self.base_url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            raise FlightSourceError(f"AviationStack request failed: {e}") from e

        if response.status_code != 200:
            raise FlightSourceError(f"AviationStack returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FlightSourceError("AviationStack returned invalid JSON") from e

        if isinstance(payload, dict) and payload.get('error'):
            error = payload['error']
            message = error.get('message') if isinstance(error, dict) else error
            raise FlightSourceError(f"AviationStack error: {message}")

        data = payload.get('data') if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise FlightSourceError("AviationStack response has no 'data' array")

        logger.info("Fetched %d flights from AviationStack (status=%s)", len(data), flight_status)
        return data


class FlightStore:
    """One document per flight date: {"flight_date": "YYYY-MM-DD", "data": [...]}."""

    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def connect(cls, uri: str = MONGODB_URI, db_name: str = MONGODB_DB_NAME,
                collection_name: str = FLIGHTS_COLLECTION, timeout_ms: int = 5000) -> 'FlightStore':
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        return cls(client[db_name][collection_name])

    def save_day(self, flight_date: str, flights: List[Dict[str, Any]]) -> None:
        """Insert or replace the batch stored for `flight_date`."""
        try:
            self.collection.update_one(
                {'flight_date': flight_date},
                {'$set': {
                    'flight_date': flight_date,
                    'data': flights,
                    'updated_at': datetime.now(timezone.utc),
                }},
                upsert=True,
            )
        except PyMongoError as e:
            raise FlightSourceError(f"Could not save flights for {flight_date}: {e}") from e
        logger.info("Saved %d flights for %s", len(flights), flight_date)

    def load_day(self, flight_date: str) -> List[Dict[str, Any]]:
        try:
            doc = self.collection.find_one({'flight_date': flight_date})
        except PyMongoError as e:
            raise FlightSourceError(f"Could not load flights for {flight_date}: {e}") from e
        if not doc:
            logger.warning("No stored flights for %s", flight_date)
            return []
        return list(doc.get('data') or [])

    def latest_day(self) -> Optional[str]:
        try:
            doc = self.collection.find_one({}, sort=[('flight_date', DESCENDING)])
        except PyMongoError as e:
            raise FlightSourceError(f"Could not query stored flight dates: {e}") from e
        return doc['flight_date'] if doc else None
