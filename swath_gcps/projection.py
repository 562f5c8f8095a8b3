"""
Satellite projection models.

A projection model maps pixel coordinates of a swath image to geographic
coordinates. Every model exposes the same capability set:

    image_width, image_height      Pixel extents of the swath
    column_spacing, row_spacing    GCP sampling strides
    locate(x, y)                   (longitude, latitude) or None if unmappable

Models are selected by the "type" key of the projection configuration and
built once per call by get_sat_proj().

Line scanner geometry:
    Each image row is one scan, taken at the row's timestamp. The platform
    position and velocity come from SGP4, and the look direction for column
    x sweeps across-track from -scan_angle/2 to +scan_angle/2 about the
    nadir-pointing Forward-Right-Down orbit frame. Attitude offsets are
    applied as ZYX Euler angles on top of the scan angle.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type
import logging
import math
import numbers

import numpy as np
from sgp4.api import Satrec

from .tle import TLE
from .timestamps import INVALID_TIMESTAMP
from .transforms import (
    ecef_to_geodetic,
    euler_to_rotation_matrix,
    intersect_ellipsoid,
    orbit_frame,
    teme_to_ecef_rotation,
    unix_to_jday,
)

logger = logging.getLogger(__name__)

# Look direction in the orbit frame when all angles are zero (straight down)
NADIR = np.array([0.0, 0.0, 1.0])


class SatelliteProjection(ABC):
    """
    Abstract base class for satellite projection models.

    Subclasses set the four extent/spacing attributes in their constructor
    and implement locate().
    """

    image_width: int
    image_height: int
    column_spacing: int
    row_spacing: int

    @classmethod
    @abstractmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        tle: TLE,
        timestamps: Sequence[float],
    ) -> "SatelliteProjection":
        """Build the model from its configuration mapping."""

    @abstractmethod
    def locate(self, x: int, y: int) -> Optional[Tuple[float, float]]:
        """
        Geographic position of a pixel.

        Args:
            x: Column index
            y: Row (scanline) index

        Returns:
            (longitude, latitude) in degrees, or None if the pixel cannot
            be mapped to the Earth's surface
        """


PROJECTIONS: Dict[str, Type[SatelliteProjection]] = {}


def register_projection(name: str) -> Callable[[Type[SatelliteProjection]], Type[SatelliteProjection]]:
    """Class decorator adding a projection model to the registry under `name`."""
    def decorator(cls: Type[SatelliteProjection]) -> Type[SatelliteProjection]:
        PROJECTIONS[name] = cls
        return cls
    return decorator


def get_supported_projections() -> List[str]:
    """Get list of registered projection types."""
    return list(PROJECTIONS.keys())


def _positive_int(cfg: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    if key not in cfg:
        if default is None:
            raise ValueError(f"Missing projection parameter: '{key}'")
        return default
    value = cfg[key]
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"Projection parameter '{key}' must be an integer, got {value!r}")
    value = int(value)
    if value <= 0:
        raise ValueError(f"Projection parameter '{key}' must be positive, got {cfg[key]}")
    return value


@register_projection('line_scanner')
class LineScannerProjection(SatelliteProjection):
    """
    Single-line cross-track scanner (pushbroom or whiskbroom) on a
    TLE-propagated platform.

    Configuration keys:
        image_width: Pixels per scanline
        scan_angle: Total across-track field of view (degrees)
        gcp_spacing_x: Column sampling stride (default 100)
        gcp_spacing_y: Row sampling stride (default 100)
        timestamp_offset: Seconds added to every scanline time (default 0)
        invert_scan: Scan from right to left (default False)
        roll_offset, pitch_offset, yaw_offset: Attitude biases (degrees)
    """

    def __init__(
        self,
        satellite: Satrec,
        timestamps: Sequence[float],
        image_width: int,
        scan_angle: float,
        column_spacing: int = 100,
        row_spacing: int = 100,
        timestamp_offset: float = 0.0,
        invert_scan: bool = False,
        roll_offset: float = 0.0,
        pitch_offset: float = 0.0,
        yaw_offset: float = 0.0,
    ):
        """
        Initialize the line scanner model.

        Args:
            satellite: SGP4 satellite record
            timestamps: Unix time of each scanline (image_height = len(timestamps))
            image_width: Pixels per scanline
            scan_angle: Total across-track field of view in degrees
            column_spacing: GCP column stride
            row_spacing: GCP row stride
            timestamp_offset: Seconds added to every scanline time
            invert_scan: Whether column 0 is on the right side of the track
            roll_offset: Roll bias in degrees
            pitch_offset: Pitch bias in degrees
            yaw_offset: Yaw bias in degrees
        """
        self.satellite = satellite
        self.timestamps = list(timestamps)
        self.image_width = image_width
        self.image_height = len(self.timestamps)
        self.column_spacing = column_spacing
        self.row_spacing = row_spacing

        self.scan_angle = scan_angle
        self.timestamp_offset = timestamp_offset
        self.invert_scan = invert_scan
        self.attitude_offset = np.deg2rad([roll_offset, pitch_offset, yaw_offset])

        logger.debug(
            f"Line scanner initialized: {self.image_width}x{self.image_height} px, "
            f"scan angle {self.scan_angle} deg"
        )
        logger.debug(f"GCP spacing: x={self.column_spacing}, y={self.row_spacing}")

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        tle: TLE,
        timestamps: Sequence[float],
    ) -> "LineScannerProjection":
        """
        Build the model from a projection configuration mapping.

        Raises:
            ValueError: If a required parameter is missing or invalid
        """
        if 'scan_angle' not in cfg:
            raise ValueError("Missing projection parameter: 'scan_angle'")

        satellite = Satrec.twoline2rv(tle.line1, tle.line2)

        return cls(
            satellite=satellite,
            timestamps=timestamps,
            image_width=_positive_int(cfg, 'image_width'),
            scan_angle=float(cfg['scan_angle']),
            column_spacing=_positive_int(cfg, 'gcp_spacing_x', 100),
            row_spacing=_positive_int(cfg, 'gcp_spacing_y', 100),
            timestamp_offset=float(cfg.get('timestamp_offset', 0.0)),
            invert_scan=bool(cfg.get('invert_scan', False)),
            roll_offset=float(cfg.get('roll_offset', 0.0)),
            pitch_offset=float(cfg.get('pitch_offset', 0.0)),
            yaw_offset=float(cfg.get('yaw_offset', 0.0)),
        )

    def scan_angle_at(self, x: int) -> float:
        """
        Across-track look angle of a column, in degrees.

        Column 0 looks -scan_angle/2, the last column +scan_angle/2
        (mirrored when invert_scan is set).
        """
        if self.image_width > 1:
            fraction = x / (self.image_width - 1) - 0.5
        else:
            fraction = 0.0

        angle = fraction * self.scan_angle
        return -angle if self.invert_scan else angle

    def platform_state(self, y: int) -> Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]]:
        """
        Platform position and velocity for a scanline.

        Args:
            y: Row index

        Returns:
            Tuple of (position_teme_m, velocity_teme_m_s, R_ecef_teme), or
            None if the scanline has no valid time or SGP4 fails
        """
        timestamp = self.timestamps[y]
        if timestamp == INVALID_TIMESTAMP or not math.isfinite(timestamp):
            return None

        jd, fr = unix_to_jday(timestamp + self.timestamp_offset)
        error, position, velocity = self.satellite.sgp4(jd, fr)
        if error != 0:
            logger.debug(f"SGP4 error {error} for scanline {y}")
            return None

        # SGP4 works in km and km/s
        position = np.array(position) * 1000.0
        velocity = np.array(velocity) * 1000.0
        return position, velocity, teme_to_ecef_rotation(jd, fr)

    def locate(self, x: int, y: int) -> Optional[Tuple[float, float]]:
        if not (0 <= x < self.image_width and 0 <= y < self.image_height):
            return None

        state = self.platform_state(y)
        if state is None:
            return None
        position, velocity, R_ecef_teme = state

        # Look direction: positive scan angles look right of track
        roll, pitch, yaw = self.attitude_offset
        roll = roll - np.deg2rad(self.scan_angle_at(x))
        look_orbit = euler_to_rotation_matrix(roll, pitch, yaw) @ NADIR
        look_teme = orbit_frame(position, velocity) @ look_orbit

        ground = intersect_ellipsoid(R_ecef_teme @ position, R_ecef_teme @ look_teme)
        if ground is None:
            return None

        lon, lat, _ = ecef_to_geodetic(ground)
        return lon, lat


def get_sat_proj(
    cfg: Dict[str, Any],
    tle: TLE,
    timestamps: Sequence[float],
) -> SatelliteProjection:
    """
    Build the projection model named by cfg["type"].

    Args:
        cfg: Projection configuration mapping
        tle: Orbital elements of the platform
        timestamps: Per-scanline Unix times

    Returns:
        Initialized projection model

    Raises:
        ValueError: If the projection type is missing or not registered,
            or the model rejects its parameters
    """
    if 'type' not in cfg:
        raise ValueError("Projection configuration has no 'type'")

    projection_type = str(cfg['type']).lower()
    if projection_type not in PROJECTIONS:
        supported = ', '.join(get_supported_projections())
        raise ValueError(
            f"Unsupported projection: '{projection_type}'. "
            f"Supported: {supported}"
        )

    projection = PROJECTIONS[projection_type].from_config(cfg, tle, timestamps)
    logger.info(
        f"Built {projection_type} projection for {tle.name}: "
        f"{projection.image_width}x{projection.image_height} px"
    )
    return projection
