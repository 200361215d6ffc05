"""
Value types for the reference frames handled by the transform engine.

Frame Definitions:
    - Geodetic: WGS84 latitude/longitude in degrees, ellipsoidal altitude in meters
    - Local (ENU): East-North-Up tangent plane anchored at a mission origin
    - Scene: Y-up, right-handed render space (x=East, y=Up, z=-North)
    - Standard body: ROS convention, x=forward, y=left, z=up
    - NED body: aircraft convention, x=north, y=east, z=down

Orientation Conventions:
    - Heading clockwise from North (0=North, 90=East), in degrees
    - Pitch positive nose/lens up, in degrees
    - Roll positive right side down, in degrees

All types are immutable. None of them validate on construction; the
transform functions check their inputs and raise InvalidInput.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation


@dataclass(frozen=True)
class GeodeticCoordinate:
    """
    WGS84 geodetic position.

    Attributes:
        latitude: Geodetic latitude in degrees [-90, 90]
        longitude: Longitude in degrees [-180, 180]
        altitude: Height above the WGS84 ellipsoid in meters
    """
    latitude: float
    longitude: float
    altitude: float = 0.0


@dataclass(frozen=True)
class LocalCoordinate:
    """
    Position in a local East-North-Up frame, in meters.

    Only meaningful together with the origin it was computed against.
    """
    east: float
    north: float
    up: float

    def as_array(self) -> np.ndarray:
        return np.array([self.east, self.north, self.up], dtype=np.float64)


@dataclass(frozen=True)
class SceneCoordinate:
    """Position in the Y-up render space, in meters."""
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


class BodyFrameConvention(Enum):
    """Axis convention of a vehicle body frame."""
    STANDARD = "standard"  # forward-left-up (ROS REP 103)
    NED = "ned"            # north-east-down


@dataclass(frozen=True)
class StandardBodyCoordinate:
    """Body-frame position, x=forward, y=left, z=up (meters)."""
    forward: float
    left: float
    up: float

    @property
    def convention(self) -> BodyFrameConvention:
        return BodyFrameConvention.STANDARD


@dataclass(frozen=True)
class NedBodyCoordinate:
    """Body-frame position, x=north, y=east, z=down (meters)."""
    north: float
    east: float
    down: float

    @property
    def convention(self) -> BodyFrameConvention:
        return BodyFrameConvention.NED


BodyFrameCoordinate = Union[StandardBodyCoordinate, NedBodyCoordinate]


@dataclass(frozen=True)
class Orientation:
    """
    Heading/pitch/roll attitude in degrees.

    Attributes:
        heading: Clockwise from North (0=North, 90=East)
        pitch: Positive raises the nose/lens
        roll: Positive lowers the right side
    """
    heading: float
    pitch: float = 0.0
    roll: float = 0.0


# Euler sequence used for scene rotations. Uppercase letters are intrinsic
# axes in scipy: yaw about Y, then pitch about the new X, then roll about
# the new Z.
SCENE_EULER_ORDER = "YXZ"


@dataclass(frozen=True)
class SceneRotation:
    """
    Rotation of an object in scene space.

    The unrotated object looks along scene -Z (North) with +Y up and +X
    to its right (East). Angles are intrinsic Tait-Bryan in Y-X-Z order.

    Attributes:
        x: Rotation about the object's X axis (pitch), radians
        y: Rotation about the scene Y axis (yaw), radians
        z: Rotation about the object's Z axis (roll), radians
        quaternion: Same rotation as a unit quaternion (x, y, z, w)
    """
    x: float
    y: float
    z: float
    quaternion: Tuple[float, float, float, float]

    def _rotation(self) -> Rotation:
        return Rotation.from_quat(self.quaternion)

    def as_matrix(self) -> np.ndarray:
        """3x3 matrix taking object-frame vectors into scene space."""
        return self._rotation().as_matrix()

    def apply(self, vector) -> np.ndarray:
        """Rotate a scene-space vector (or Nx3 array of vectors)."""
        return self._rotation().apply(np.asarray(vector, dtype=np.float64))

    def forward(self) -> np.ndarray:
        """Unit look direction of the rotated object in scene space."""
        return self.apply([0.0, 0.0, -1.0])
