"""
Swath GCP Package

Computes a sparse grid of Ground Control Points (GCPs) tying pixel
coordinates of a satellite swath image to longitude/latitude, using a
projection model built from orbital elements (TLE) and per-scanline
timestamps.

Processing Chain:
    TLE + timestamps + config → Projection model → GCP sampling → GCP list

Conventions:
    - Timestamps: Unix seconds (UTC), one per image row, -1 for missing
    - Geographic output: WGS84 longitude in [-180, 180], latitude in [-90, 90]
    - Orbit frame: Forward-Right-Down, down towards the Earth center

Supported Formats:
    - 2-line and 3-line TLE files
    - JSON, CSV and plain-text timestamp files
    - CSV and JSON GCP output
"""

from .config import Config, FilePaths
from .tle import TLE, load_tle, parse_tle_file
from .timestamps import load_timestamps, INVALID_TIMESTAMP
from .projection import (
    SatelliteProjection,
    LineScannerProjection,
    get_sat_proj,
    register_projection,
)
from .gcp_compute import GCP, compute_gcps, sample_gcps, save_gcps_csv, save_gcps_json

__version__ = "1.0.0"
__all__ = [
    "Config",
    "FilePaths",
    "TLE",
    "load_tle",
    "parse_tle_file",
    "load_timestamps",
    "INVALID_TIMESTAMP",
    "SatelliteProjection",
    "LineScannerProjection",
    "get_sat_proj",
    "register_projection",
    "GCP",
    "compute_gcps",
    "sample_gcps",
    "save_gcps_csv",
    "save_gcps_json",
]
