"""
Airport reference table: ICAO code -> coordinates.

The built-in table covers the airports the sample batches use. A larger table
can be loaded from a CSV export (e.g. OurAirports' airports.csv).
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .models import Airport, FlightRecord, GeoPoint

logger = logging.getLogger(__name__)

# ICAO code -> (lat, lon)
AIRPORT_COORDS: Dict[str, Tuple[float, float]] = {
    'KSFO': (37.6213, -122.3790), 'KLAX': (33.9416, -118.4085),
    'KJFK': (40.6413, -73.7781), 'KORD': (41.9742, -87.9073),
    'KDFW': (32.8998, -97.0403), 'KATL': (33.6407, -84.4277),
    'KMIA': (25.7959, -80.2870), 'KSEA': (47.4502, -122.3088),
    'KDEN': (39.8561, -104.6737), 'KBOS': (42.3656, -71.0096),
    'KSAN': (32.7338, -117.1933), 'KPHX': (33.4342, -112.0116),
    'KLAS': (36.0840, -115.1537), 'KMSP': (44.8831, -93.2218),
    'KDTW': (42.2162, -83.3554), 'KPHL': (39.8719, -75.2411),
    'KIAD': (38.9531, -77.4565), 'KCLT': (35.2144, -80.9473),
    'KIAH': (29.9902, -95.3368), 'KMCO': (28.4312, -81.3083),
    'KSLC': (40.7899, -111.9791), 'KPDX': (45.5898, -122.5951),
    'PHNL': (21.3187, -157.9225), 'PANC': (61.1743, -149.9962),
    'CYVR': (49.1947, -123.1792), 'CYYZ': (43.6772, -79.6306),
    'CYUL': (45.4577, -73.7497), 'MMMX': (19.4363, -99.0721),
    'SBGR': (-23.4321, -46.4692), 'SAEZ': (-34.8222, -58.5358),
    'EGLL': (51.4700, -0.4543), 'EGKK': (51.1537, -0.1821),
    'LFPG': (49.0097, 2.5479), 'EDDF': (50.0379, 8.5622),
    'EHAM': (52.3105, 4.7683), 'EBBR': (50.9014, 4.4844),
    'LIRF': (41.8003, 12.2389), 'LEMD': (40.4839, -3.5680),
    'LSZH': (47.4582, 8.5555), 'LTFM': (41.2753, 28.7519),
    'OMDB': (25.2532, 55.3657), 'OTHH': (25.2731, 51.6081),
    'VIDP': (28.5562, 77.1000), 'VHHH': (22.3080, 113.9185),
    'WSSS': (1.3644, 103.9915), 'RJTT': (35.5494, 139.7798),
    'RJAA': (35.7720, 140.3929), 'RKSI': (37.4602, 126.4407),
    'ZBAA': (40.0799, 116.6031), 'YSSY': (-33.9399, 151.1753),
    'NZAA': (-37.0082, 174.7850), 'FAOR': (-26.1392, 28.2460),
}


def build_airport_table(coords: Mapping[str, Tuple[float, float]] = AIRPORT_COORDS) -> Dict[str, GeoPoint]:
    """Turn an ICAO -> (lat, lon) mapping into an ICAO -> GeoPoint table."""
    return {
        code.strip().upper(): GeoPoint(longitude=lon, latitude=lat)
        for code, (lat, lon) in coords.items()
    }


def _find_column(columns, candidates) -> Optional[str]:
    for cand in candidates:
        col = next((c for c in columns if c.lower().strip() == cand), None)
        if col is not None:
            return col
    return next((c for c in columns if any(c.lower().startswith(cand) for cand in candidates)), None)


def load_airport_table(csv_path: Union[str, Path]) -> Dict[str, GeoPoint]:
    """Load an ICAO -> GeoPoint table from CSV.

    Accepts `icao`/`ident`/`code` for the key and `latitude`/`lat*` and
    `longitude`/`lon*` for the coordinates. Rows with missing or out-of-range
    values are skipped.
    """
    df = pd.read_csv(csv_path)

    code_col = _find_column(df.columns, ['icao', 'icao_code', 'ident', 'code'])
    lat_col = _find_column(df.columns, ['latitude', 'latitude_deg', 'lat'])
    lon_col = _find_column(df.columns, ['longitude', 'longitude_deg', 'lon'])
    if not code_col or not lat_col or not lon_col:
        raise ValueError(f"{csv_path}: need code, latitude and longitude columns, got {list(df.columns)}")

    df = df.dropna(subset=[code_col, lat_col, lon_col])
    df = df[df[lat_col].between(-90, 90) & df[lon_col].between(-180, 180)]

    table = {}
    for code, lat, lon in zip(df[code_col], df[lat_col], df[lon_col]):
        code = str(code).strip().upper()
        if code:
            table[code] = GeoPoint(longitude=float(lon), latitude=float(lat))

    logger.info("Loaded %d airports from %s", len(table), csv_path)
    return table


def airports_for(flights: Iterable[FlightRecord], airport_table: Mapping[str, GeoPoint]) -> List[Airport]:
    """Distinct airports referenced by a batch, in first-seen order, tagged with their role."""
    seen = {}
    for flight in flights:
        for role, endpoint in (('departure', flight.departure), ('arrival', flight.arrival)):
            code = (endpoint.icao or '').strip().upper()
            if not code or code not in airport_table:
                continue
            marker = seen.setdefault(code, {'icao': code, 'coordinates': airport_table[code],
                                            'name': None, 'role': role})
            if marker['role'] != role:
                marker['role'] = 'both'
            if marker['name'] is None and endpoint.airport:
                marker['name'] = endpoint.airport
    return [Airport(**marker) for marker in seen.values()]
