"""
Coordinate transformation module for mission geometry.

This module is the single home of every frame conversion:
    1. Geodetic (WGS84) to/from ECEF
    2. ECEF to/from local ENU, anchored at a mission origin
    3. Local ENU to/from scene (render) space
    4. Local ENU to/from vehicle body frames (Standard and NED)
    5. Heading/pitch/roll to scene rotation

Coordinate System Definitions:
    - ECEF: Earth-Centered, Earth-Fixed (X towards 0°lon, Y towards 90°E, Z towards North Pole)
    - ENU: East-North-Up (local tangent plane at the mission origin)
    - Scene: X=East, Y=Up, Z=-North (right-handed, Y-up)
    - Standard body: Forward-Left-Up
    - NED body: North-East-Down

Operating Envelope:
    The local frame is a tangent plane. Conversions are exact through ECEF,
    so they stay numerically stable for points within a few hundred
    kilometers of the origin. Missions are sub-kilometer; antipodal points
    and origins at the poles are outside the envelope and are not given
    special handling.

Rotation Conventions:
    - All rotations use right-hand rule
    - Scene rotations are intrinsic Tait-Bryan in Y-X-Z order:
      yaw(heading) about Y, then pitch about X, then roll about Z
"""

import logging
import math
from functools import lru_cache
from typing import Iterable

import numpy as np
from pyproj import Transformer
from scipy.spatial.transform import Rotation

from .errors import InvalidInput
from .frames import (
    SCENE_EULER_ORDER,
    BodyFrameConvention,
    BodyFrameCoordinate,
    GeodeticCoordinate,
    LocalCoordinate,
    NedBodyCoordinate,
    Orientation,
    SceneCoordinate,
    SceneRotation,
    StandardBodyCoordinate,
)

logger = logging.getLogger(__name__)

# WGS84 ellipsoid parameters
WGS84_A = 6378137.0  # Semi-major axis (m)
WGS84_F = 1 / 298.257223563  # Flattening
WGS84_B = WGS84_A * (1 - WGS84_F)  # Semi-minor axis
WGS84_E2 = 2 * WGS84_F - WGS84_F ** 2  # First eccentricity squared

# EPSG:4978 is WGS84 geocentric, EPSG:4979 is WGS84 3D geographic
_ecef2llaTransformer = Transformer.from_crs("EPSG:4978", "EPSG:4979", always_xy=True)


def _require_finite(values: Iterable[float], what: str) -> None:
    for value in values:
        if not math.isfinite(value):
            raise InvalidInput(f"{what} has a non-finite component: {value!r}")


def _require_geodetic(point: GeodeticCoordinate, what: str = "geodetic coordinate") -> None:
    _require_finite((point.latitude, point.longitude, point.altitude), what)
    if not -90.0 <= point.latitude <= 90.0:
        raise InvalidInput(f"{what} latitude out of range [-90, 90]: {point.latitude}")
    if not -180.0 <= point.longitude <= 180.0:
        raise InvalidInput(f"{what} longitude out of range [-180, 180]: {point.longitude}")


def _require_local(point: LocalCoordinate) -> None:
    _require_finite((point.east, point.north, point.up), "local coordinate")


def require_scene_coordinate(point: SceneCoordinate) -> None:
    """Raise InvalidInput if any scene component is NaN or infinite."""
    _require_finite((point.x, point.y, point.z), "scene coordinate")


def geodetic_to_ecef(lat: float, lon: float, h: float) -> np.ndarray:
    """
    Convert geodetic coordinates (WGS84) to ECEF.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        h: Ellipsoidal height in meters

    Returns:
        ECEF coordinates as (X, Y, Z) in meters

    Reference:
        NIMA TR8350.2, "Department of Defense World Geodetic System 1984"
    """
    lat_rad = np.deg2rad(lat)
    lon_rad = np.deg2rad(lon)

    # Radius of curvature in the prime vertical
    N = WGS84_A / np.sqrt(1 - WGS84_E2 * np.sin(lat_rad) ** 2)

    X = (N + h) * np.cos(lat_rad) * np.cos(lon_rad)
    Y = (N + h) * np.cos(lat_rad) * np.sin(lon_rad)
    Z = (N * (1 - WGS84_E2) + h) * np.sin(lat_rad)

    return np.array([X, Y, Z])


def ecef_to_geodetic(x: float, y: float, z: float) -> GeodeticCoordinate:
    """
    Convert ECEF coordinates to WGS84 geodetic coordinates.

    Delegates to PROJ, whose geocentric inversion is exact to well below
    a millimeter anywhere near the ellipsoid surface.

    Returns:
        GeodeticCoordinate with latitude/longitude in degrees
    """
    lon, lat, h = _ecef2llaTransformer.transform(x, y, z)
    return GeodeticCoordinate(latitude=float(lat), longitude=float(lon), altitude=float(h))


def enu_rotation(lat: float, lon: float) -> np.ndarray:
    """
    Compute rotation matrix from ECEF to local ENU frame.

    The ENU frame is defined at a point on the Earth's surface:
        - E (East): Tangent to ellipsoid, pointing east
        - N (North): Tangent to ellipsoid, pointing north
        - U (Up): Normal to ellipsoid, pointing away from Earth

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees

    Returns:
        3x3 rotation matrix from ECEF to ENU
    """
    lat_rad = np.deg2rad(lat)
    lon_rad = np.deg2rad(lon)

    clat, slat = np.cos(lat_rad), np.sin(lat_rad)
    clon, slon = np.cos(lon_rad), np.sin(lon_rad)

    # Row 1: East direction in ECEF
    # Row 2: North direction in ECEF
    # Row 3: Up direction in ECEF
    return np.array([
        [-slon, clon, 0],
        [-slat * clon, -slat * slon, clat],
        [clat * clon, clat * slon, slat]
    ])


def validate_rotation_matrix(R: np.ndarray, tol: float = 1e-6) -> bool:
    """
    Validate that a matrix is a proper rotation matrix.

    A proper rotation matrix must:
        1. Be orthogonal: R @ R.T = I
        2. Have determinant = +1 (not a reflection)
    """
    if R.shape != (3, 3):
        return False

    if not np.allclose(R @ R.T, np.eye(3), atol=tol):
        return False

    return bool(np.isclose(np.linalg.det(R), 1.0, atol=tol))


class LocalFrame:
    """
    East-North-Up tangent plane anchored at a mission origin.

    The origin's ECEF position and the ECEF-to-ENU rotation are computed
    once; every conversion against this frame reuses them. A LocalFrame
    holds no mutable state and may be shared between threads.
    """

    def __init__(self, origin: GeodeticCoordinate):
        """
        Initialize the local frame.

        Args:
            origin: Geodetic origin of the frame (typically the takeoff point)

        Raises:
            InvalidInput: If the origin is out of range or not finite
        """
        _require_geodetic(origin, "origin")
        self.origin = origin
        self.origin_ecef = geodetic_to_ecef(origin.latitude, origin.longitude, origin.altitude)
        self.R_enu_ecef = enu_rotation(origin.latitude, origin.longitude)

        logger.debug(f"Local frame anchored at {origin} (ECEF {self.origin_ecef})")

    def __repr__(self) -> str:
        return f"LocalFrame(origin={self.origin!r})"

    def ecef_to_local(self, point_ecef: np.ndarray) -> LocalCoordinate:
        """Express an ECEF position in this frame."""
        east, north, up = self.R_enu_ecef @ (np.asarray(point_ecef, dtype=np.float64) - self.origin_ecef)
        return LocalCoordinate(east=float(east), north=float(north), up=float(up))

    def local_to_ecef(self, point: LocalCoordinate) -> np.ndarray:
        """ECEF position of a point expressed in this frame."""
        _require_local(point)
        return self.origin_ecef + self.R_enu_ecef.T @ point.as_array()

    def to_local(self, point: GeodeticCoordinate) -> LocalCoordinate:
        """
        Project a geodetic point onto this frame.

        Raises:
            InvalidInput: If the point is out of range or not finite
        """
        _require_geodetic(point)
        return self.ecef_to_local(geodetic_to_ecef(point.latitude, point.longitude, point.altitude))

    def to_geodetic(self, point: LocalCoordinate) -> GeodeticCoordinate:
        """
        Geodetic position of a point expressed in this frame.

        Raises:
            InvalidInput: If any component is NaN or infinite
        """
        return ecef_to_geodetic(*self.local_to_ecef(point))


@lru_cache(maxsize=64)
def _frame_for(origin: GeodeticCoordinate) -> LocalFrame:
    return LocalFrame(origin)


def local_frame(origin: GeodeticCoordinate) -> LocalFrame:
    """Return the (cached) local frame for an origin."""
    _require_geodetic(origin, "origin")
    return _frame_for(origin)


def geodetic_to_local(point: GeodeticCoordinate, origin: GeodeticCoordinate) -> LocalCoordinate:
    """
    Convert a geodetic point to local ENU coordinates relative to origin.

    geodetic_to_local(origin, origin) is exactly (0, 0, 0).

    Raises:
        InvalidInput: If either coordinate is out of range or not finite
    """
    return local_frame(origin).to_local(point)


def local_to_geodetic(point: LocalCoordinate, origin: GeodeticCoordinate) -> GeodeticCoordinate:
    """
    Inverse of geodetic_to_local.

    Raises:
        InvalidInput: If the origin is invalid or the point is not finite
    """
    return local_frame(origin).to_geodetic(point)


def rebase_local(
    point: LocalCoordinate,
    from_origin: GeodeticCoordinate,
    to_origin: GeodeticCoordinate,
) -> LocalCoordinate:
    """
    Re-express a local point computed against from_origin in the frame of to_origin.

    The conversion goes through ECEF, so the result is the same as
    converting the point's geodetic position against to_origin.
    """
    return local_frame(to_origin).ecef_to_local(local_frame(from_origin).local_to_ecef(point))


def local_to_scene(point: LocalCoordinate) -> SceneCoordinate:
    """
    Convert local ENU coordinates to scene coordinates.

    ENU East maps to scene X, ENU Up to scene Y, ENU North to scene -Z.
    """
    _require_local(point)
    return SceneCoordinate(x=point.east, y=point.up, z=-point.north)


def scene_to_local(point: SceneCoordinate) -> LocalCoordinate:
    """Inverse of local_to_scene."""
    require_scene_coordinate(point)
    return LocalCoordinate(east=point.x, north=-point.z, up=point.y)


def local_to_standard_body_assuming_north_heading(point: LocalCoordinate) -> StandardBodyCoordinate:
    """
    Express a local point in a forward-left-up body frame of a vehicle facing North.

    forward = north, left = -east, up = up
    """
    _require_local(point)
    return StandardBodyCoordinate(forward=point.north, left=-point.east, up=point.up)


def standard_body_to_local_assuming_north_heading(point: StandardBodyCoordinate) -> LocalCoordinate:
    """Inverse of local_to_standard_body_assuming_north_heading."""
    _require_finite((point.forward, point.left, point.up), "body coordinate")
    return LocalCoordinate(east=-point.left, north=point.forward, up=point.up)


def local_to_standard_body(point: LocalCoordinate, heading_deg: float) -> StandardBodyCoordinate:
    """
    Express a local point in the forward-left-up frame of a vehicle with the given heading.

    Only the heading is applied; the body frame stays level. At heading 0
    this equals local_to_standard_body_assuming_north_heading.

    Args:
        point: Local ENU point
        heading_deg: Vehicle heading, clockwise from North
    """
    _require_local(point)
    _require_finite((heading_deg,), "heading")
    h = math.radians(heading_deg)
    sh, ch = math.sin(h), math.cos(h)
    return StandardBodyCoordinate(
        forward=point.east * sh + point.north * ch,
        left=-point.east * ch + point.north * sh,
        up=point.up,
    )


def standard_body_to_local(point: StandardBodyCoordinate, heading_deg: float) -> LocalCoordinate:
    """Inverse of local_to_standard_body."""
    _require_finite((point.forward, point.left, point.up), "body coordinate")
    _require_finite((heading_deg,), "heading")
    h = math.radians(heading_deg)
    sh, ch = math.sin(h), math.cos(h)
    return LocalCoordinate(
        east=point.forward * sh - point.left * ch,
        north=point.forward * ch + point.left * sh,
        up=point.up,
    )


def local_to_ned_body(point: LocalCoordinate) -> NedBodyCoordinate:
    """north = north, east = east, down = -up"""
    _require_local(point)
    return NedBodyCoordinate(north=point.north, east=point.east, down=-point.up)


def ned_body_to_local(point: NedBodyCoordinate) -> LocalCoordinate:
    """Inverse of local_to_ned_body."""
    _require_finite((point.north, point.east, point.down), "body coordinate")
    return LocalCoordinate(east=point.east, north=point.north, up=-point.down)


def local_to_body(point: LocalCoordinate, convention: BodyFrameConvention) -> BodyFrameCoordinate:
    """
    Express a local point in the body frame of the given convention.

    The Standard convention uses the North-heading form; use
    local_to_standard_body for a heading-aware conversion.
    """
    if convention is BodyFrameConvention.STANDARD:
        return local_to_standard_body_assuming_north_heading(point)
    if convention is BodyFrameConvention.NED:
        return local_to_ned_body(point)
    raise InvalidInput(f"Unknown body frame convention: {convention!r}")


def body_to_local(point: BodyFrameCoordinate) -> LocalCoordinate:
    """Inverse of local_to_body, dispatched on the convention the point carries."""
    if isinstance(point, StandardBodyCoordinate):
        return standard_body_to_local_assuming_north_heading(point)
    if isinstance(point, NedBodyCoordinate):
        return ned_body_to_local(point)
    raise InvalidInput(f"Not a body frame coordinate: {point!r}")


def rotate_orientation_to_scene(orientation: Orientation) -> SceneRotation:
    """
    Convert heading/pitch/roll into a scene rotation.

    Rotation order is intrinsic Y-X-Z: yaw about scene Y first, then pitch
    about the rotated X axis, then roll about the rotated Z axis. The
    unrotated object looks along -Z (North), so:
        - yaw = -heading (clockwise heading is a negative turn about +Y)
        - pitch = +pitch (positive turns -Z towards +Y)
        - roll = -roll (positive lowers the +X side)

    Args:
        orientation: Attitude in degrees

    Returns:
        SceneRotation with Euler angles in radians and the equivalent quaternion
    """
    _require_finite((orientation.heading, orientation.pitch, orientation.roll), "orientation")
    yaw = -math.radians(orientation.heading)
    pitch = math.radians(orientation.pitch)
    roll = -math.radians(orientation.roll)

    rotation = Rotation.from_euler(SCENE_EULER_ORDER, [yaw, pitch, roll])
    qx, qy, qz, qw = rotation.as_quat()
    return SceneRotation(x=pitch, y=yaw, z=roll, quaternion=(float(qx), float(qy), float(qz), float(qw)))


def local_distance(a: LocalCoordinate, b: LocalCoordinate) -> float:
    """Straight-line distance between two points of the same local frame (meters)."""
    _require_local(a)
    _require_local(b)
    return math.sqrt((b.east - a.east) ** 2 + (b.north - a.north) ** 2 + (b.up - a.up) ** 2)


def haversine_distance(a: GeodeticCoordinate, b: GeodeticCoordinate) -> float:
    """
    Great-circle distance between two geodetic points, ignoring altitude.

    Uses a sphere of the WGS84 equatorial radius.
    """
    _require_geodetic(a)
    _require_geodetic(b)
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # rounding can push h past 1 for near-antipodal points
    h = min(h, 1.0)
    return WGS84_A * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
