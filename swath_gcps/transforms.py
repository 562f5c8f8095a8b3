"""
Geodesy module for satellite swath projection.

This module handles the coordinate work needed to turn a sensor look
direction into a ground position:
    1. TEME (SGP4 output frame) to ECEF
    2. Platform attitude (ZYX Euler angles) to rotation matrices
    3. Look ray / WGS84 ellipsoid intersection
    4. ECEF to geodetic (longitude, latitude, height)

Coordinate System Definitions:
    - TEME: True Equator Mean Equinox, quasi-inertial frame used by SGP4
    - ECEF: Earth-Centered, Earth-Fixed (X towards 0°lon, Y towards 90°E, Z towards North Pole)
    - Orbit frame: Forward-Right-Down (forward along velocity, down towards Earth center)

Rotation Conventions:
    - All rotations use right-hand rule
    - Euler angles applied in ZYX order (yaw, pitch, roll)
"""

import numpy as np
from typing import Optional, Tuple
import logging

from pyproj import Transformer
from scipy.spatial.transform import Rotation
from sgp4.propagation import gstime

logger = logging.getLogger(__name__)

# WGS84 ellipsoid parameters
WGS84_A = 6378137.0  # Semi-major axis (m)
WGS84_F = 1 / 298.257223563  # Flattening
WGS84_B = WGS84_A * (1 - WGS84_F)  # Semi-minor axis

UNIX_EPOCH_JD = 2440587.5
SECONDS_PER_DAY = 86400.0

# WGS84 geocentric (ECEF) to WGS84 3D geographic
_ECEF_TO_GEODETIC = Transformer.from_crs("epsg:4978", "epsg:4979", always_xy=True)


def unix_to_jday(timestamp: float) -> Tuple[float, float]:
    """
    Split a Unix timestamp into the (whole, fraction) Julian date pair SGP4 expects.

    Args:
        timestamp: Seconds since 1970-01-01T00:00:00 UTC

    Returns:
        Tuple of (jd, fr) with jd ending in .5 and 0 <= fr < 1
    """
    days = timestamp / SECONDS_PER_DAY
    whole = np.floor(days)
    return UNIX_EPOCH_JD + whole, days - whole


def euler_to_rotation_matrix(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Compute rotation matrix from Euler angles (ZYX convention).

    The combined rotation is: R = Rz(yaw) @ Ry(pitch) @ Rx(roll)

    Args:
        roll: Roll angle in radians (about forward axis)
        pitch: Pitch angle in radians (about right axis)
        yaw: Yaw angle in radians (about down axis)

    Returns:
        3x3 rotation matrix
    """
    return Rotation.from_euler("ZYX", [yaw, pitch, roll]).as_matrix()


def teme_to_ecef_rotation(jd: float, fr: float) -> np.ndarray:
    """
    Rotation matrix from TEME to ECEF at the given UT1 Julian date.

    Polar motion is neglected, so this is a pure rotation about Z by
    the Greenwich mean sidereal time.

    Args:
        jd: Whole part of the Julian date
        fr: Fractional part of the Julian date

    Returns:
        3x3 rotation matrix
    """
    theta = gstime(jd + fr)
    ct, st = np.cos(theta), np.sin(theta)
    return np.array([
        [ct, st, 0],
        [-st, ct, 0],
        [0, 0, 1]
    ])


def orbit_frame(position: np.ndarray, velocity: np.ndarray) -> np.ndarray:
    """
    Local orbit frame (Forward-Right-Down) from a position/velocity pair.

    Args:
        position: Satellite position vector
        velocity: Satellite velocity vector (same frame as position)

    Returns:
        3x3 matrix whose columns are the forward, right and down unit vectors
    """
    down = -position / np.linalg.norm(position)
    right = np.cross(down, velocity)
    right /= np.linalg.norm(right)
    forward = np.cross(right, down)
    return np.column_stack((forward, right, down))


def ecef_to_geodetic(point: np.ndarray) -> Tuple[float, float, float]:
    """
    Convert ECEF coordinates to geodetic (WGS84).

    Args:
        point: ECEF coordinates (X, Y, Z) in meters

    Returns:
        Tuple of (longitude, latitude, height) in degrees, degrees, meters
    """
    lon, lat, h = _ECEF_TO_GEODETIC.transform(point[0], point[1], point[2])
    return wrap_longitude(float(lon)), float(lat), float(h)


def intersect_ellipsoid(
    origin: np.ndarray,
    direction: np.ndarray,
) -> Optional[np.ndarray]:
    """
    Intersect a ray with the WGS84 ellipsoid.

    The ellipsoid is scaled to a unit sphere so the intersection reduces
    to a quadratic in the ray parameter.

    Args:
        origin: Ray origin in ECEF (meters)
        direction: Ray direction in ECEF (need not be normalized)

    Returns:
        Nearest intersection point in ECEF, or None if the ray misses
        the ellipsoid or the ellipsoid lies behind the origin
    """
    scale = np.array([1 / WGS84_A, 1 / WGS84_A, 1 / WGS84_B])
    o = origin * scale
    d = direction * scale

    a = d @ d
    b = 2 * (o @ d)
    c = o @ o - 1
    disc = b ** 2 - 4 * a * c

    if disc < 0:
        return None

    sqrt_disc = np.sqrt(disc)
    t = (-b - sqrt_disc) / (2 * a)
    if t < 0:
        t = (-b + sqrt_disc) / (2 * a)
    if t < 0:
        return None

    return origin + t * direction


def wrap_longitude(lon: float) -> float:
    """Wrap a longitude in degrees to [-180, 180]."""
    if -180.0 <= lon <= 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0
