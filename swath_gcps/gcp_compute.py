"""
GCP sampling module.

Walks the pixel grid of a swath image at the projection's GCP spacing and
collects a Ground Control Point for every sampled pixel the projection can
place on the Earth.

Sampling rules:
    - Columns: 0, spacing, 2*spacing, ... below image_width, then
      image_width - 1 appended unconditionally (a duplicate of the last
      stride position is kept)
    - A pixel is attempted when its row is a multiple of the row spacing,
      when it is on the last timestamped scanline, or when the previously
      visited pixel could not be located
    - The "previous pixel failed" flag is carried from the end of one row
      into the start of the next

The result is in scan order (rows, then columns) and may be empty.
"""

import csv
import json
from dataclasses import asdict, astuple, dataclass, fields
from typing import Any, Dict, List, Sequence
import logging

import numpy as np

from .projection import SatelliteProjection, get_sat_proj
from .tle import TLE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GCP:
    """A Ground Control Point: pixel position and its geographic position."""
    pixel_x: float
    pixel_y: float
    longitude: float  # degrees
    latitude: float  # degrees


def column_positions(image_width: int, column_spacing: int) -> List[int]:
    """Column indices sampled on every selected row."""
    values = list(range(0, image_width, column_spacing))
    values.append(image_width - 1)
    return values


def sample_gcps(projection: SatelliteProjection, n_timestamps: int) -> List[GCP]:
    """
    Sample GCPs from an already built projection model.

    Args:
        projection: Projection model (used read-only)
        n_timestamps: Number of scanline timestamps; the row with
            y + 1 == n_timestamps is always sampled

    Returns:
        GCPs in scan order
    """
    gcps: List[GCP] = []
    values = column_positions(projection.image_width, projection.column_spacing)

    last_was_invalid = False
    for y in range(projection.image_height):
        for x in values:
            if y % projection.row_spacing == 0 or y + 1 == n_timestamps or last_was_invalid:
                position = projection.locate(x, y)
                if position is None:
                    last_was_invalid = True
                    continue

                lon, lat = position
                gcps.append(GCP(float(x), float(y), float(lon), float(lat)))

            last_was_invalid = False

    return gcps


def compute_gcps(
    cfg: Dict[str, Any],
    tle: TLE,
    timestamps: Sequence[float],
) -> List[GCP]:
    """
    Compute GCPs for a swath image.

    Args:
        cfg: Projection configuration, passed through to get_sat_proj()
        tle: Orbital elements of the platform
        timestamps: Per-scanline Unix times

    Returns:
        GCPs in scan order, possibly empty

    Raises:
        Whatever get_sat_proj() raises when the model cannot be built
    """
    projection = get_sat_proj(cfg, tle, timestamps)
    gcps = sample_gcps(projection, len(timestamps))

    logger.info(f"Computed {len(gcps)} GCPs")
    if not gcps and projection.image_height > 0:
        logger.warning("No sampled pixel could be located")
    return gcps


def gcps_to_array(gcps: Sequence[GCP]) -> np.ndarray:
    """
    Stack GCPs into an array.

    Returns:
        Nx4 array of (pixel_x, pixel_y, longitude, latitude)
    """
    if not gcps:
        return np.zeros((0, 4))
    return np.array([astuple(gcp) for gcp in gcps], dtype=np.float64)


def save_gcps_csv(gcps: Sequence[GCP], output_path: str) -> None:
    """
    Save GCPs to CSV.

    Args:
        gcps: GCPs to save
        output_path: Path for output CSV file
    """
    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow([field.name for field in fields(GCP)])
        for gcp in gcps:
            writer.writerow(astuple(gcp))

    logger.info(f"{len(gcps)} GCPs saved to {output_path}")


def save_gcps_json(gcps: Sequence[GCP], output_path: str) -> None:
    """
    Save GCPs to JSON as a list of objects.

    Args:
        gcps: GCPs to save
        output_path: Path for output JSON file
    """
    data = {
        'count': len(gcps),
        'gcps': [asdict(gcp) for gcp in gcps],
    }

    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2)

    logger.info(f"{len(gcps)} GCPs saved to {output_path}")
