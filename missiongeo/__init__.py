"""
Mission Geometry Package

Pure geometric core for drone mission planning: frame conversions between
geodetic, local ENU, scene and body frames, and camera optics (field of
view, footprint and depth of field) for a gimbal-mounted camera.

Coordinate System Chain:
    Geodetic (WGS84) → ECEF → Local ENU → Scene / Body Frame

Conventions:
    - Local frame: East-North-Up at a per-mission origin (the takeoff point)
    - Scene: X=East, Y=Up, Z=-North (right-handed, Y-up)
    - Body frames: Standard Forward-Left-Up, or North-East-Down
    - Heading clockwise from North, pitch positive up, roll positive right-down

Every function is pure and thread-safe. Bad input raises InvalidInput or
InvalidHardwareParameters; nothing is clamped or defaulted.
"""

from .errors import MissionGeometryError, InvalidInput, InvalidHardwareParameters
from .frames import (
    GeodeticCoordinate,
    LocalCoordinate,
    SceneCoordinate,
    BodyFrameConvention,
    StandardBodyCoordinate,
    NedBodyCoordinate,
    Orientation,
    SceneRotation,
)
from .transforms import (
    LocalFrame,
    geodetic_to_local,
    local_to_geodetic,
    rebase_local,
    local_to_scene,
    scene_to_local,
    local_to_body,
    body_to_local,
    local_to_standard_body,
    standard_body_to_local,
    local_to_standard_body_assuming_north_heading,
    standard_body_to_local_assuming_north_heading,
    local_to_ned_body,
    ned_body_to_local,
    rotate_orientation_to_scene,
    local_distance,
    haversine_distance,
)
from .optics import (
    CameraSpec,
    LensSpec,
    FocusState,
    FrustumGeometry,
    DepthOfFieldResult,
    Finite,
    Infinite,
    INFINITE,
    compute_field_of_view,
    compute_depth_of_field,
    depth_of_field_for_focus,
    hyperfocal_distance_m,
    ground_sample_distance_cm,
)
from .planes import PlaneGeometry, focus_planes
from .config import Config, SceneConfig

__version__ = "1.0.0"
__all__ = [
    "MissionGeometryError",
    "InvalidInput",
    "InvalidHardwareParameters",
    "GeodeticCoordinate",
    "LocalCoordinate",
    "SceneCoordinate",
    "BodyFrameConvention",
    "StandardBodyCoordinate",
    "NedBodyCoordinate",
    "Orientation",
    "SceneRotation",
    "LocalFrame",
    "geodetic_to_local",
    "local_to_geodetic",
    "rebase_local",
    "local_to_scene",
    "scene_to_local",
    "local_to_body",
    "body_to_local",
    "local_to_standard_body",
    "standard_body_to_local",
    "local_to_standard_body_assuming_north_heading",
    "standard_body_to_local_assuming_north_heading",
    "local_to_ned_body",
    "ned_body_to_local",
    "rotate_orientation_to_scene",
    "local_distance",
    "haversine_distance",
    "CameraSpec",
    "LensSpec",
    "FocusState",
    "FrustumGeometry",
    "DepthOfFieldResult",
    "Finite",
    "Infinite",
    "INFINITE",
    "compute_field_of_view",
    "compute_depth_of_field",
    "depth_of_field_for_focus",
    "hyperfocal_distance_m",
    "ground_sample_distance_cm",
    "PlaneGeometry",
    "focus_planes",
    "Config",
    "SceneConfig",
]
