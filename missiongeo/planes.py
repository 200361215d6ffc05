"""
Depth-of-field plane geometry in scene space.

Places the near-limit, focus and far-limit planes along the camera's look
axis. The planes are plain numbers (center, normal, size); building meshes
from them is the renderer's job.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from .config import SceneConfig
from .frames import SceneCoordinate, SceneRotation
from .optics import DepthOfFieldResult, FrustumGeometry, meters_to_feet
from .transforms import require_scene_coordinate

logger = logging.getLogger(__name__)

NEAR = 'near'
FOCUS = 'focus'
FAR = 'far'

_LABEL_PREFIX = {
    NEAR: 'Near Focus',
    FOCUS: 'Focus',
    FAR: 'Far Focus',
}


@dataclass(frozen=True)
class PlaneGeometry:
    """
    A rectangle perpendicular to the camera's look axis.

    Attributes:
        kind: 'near', 'focus' or 'far'
        distance_m: Distance from the camera along the look axis
        width_m: Footprint width at that distance
        height_m: Footprint height at that distance
        center: Plane center in scene space
        normal: Unit normal pointing back at the camera
        label: Display text, empty when labels are off
    """
    kind: str
    distance_m: float
    width_m: float
    height_m: float
    center: SceneCoordinate
    normal: Tuple[float, float, float]
    label: str = ''


def format_distance(meters: float, units: str) -> str:
    if units == 'imperial':
        return f"{meters_to_feet(meters):.1f}ft"
    return f"{meters:.1f}m"


def focus_planes(
    camera_position: SceneCoordinate,
    rotation: SceneRotation,
    frustum: FrustumGeometry,
    dof: DepthOfFieldResult,
    scene: SceneConfig = SceneConfig(),
) -> List[PlaneGeometry]:
    """
    Build the enabled DOF planes for a camera pose.

    Args:
        camera_position: Camera position in scene space
        rotation: Camera rotation in scene space
        frustum: Field of view of the camera
        dof: Depth of field for the current focus state
        scene: Which planes and labels to produce

    Returns:
        Planes ordered near, focus, far. The far plane is left out when
        the far limit is infinite.
    """
    require_scene_coordinate(camera_position)

    wanted = []
    if scene.show_near_focus_plane and dof.near_limit_m > 0:
        wanted.append((NEAR, dof.near_limit_m))
    if scene.show_focus_plane:
        wanted.append((FOCUS, dof.focus_distance_m))
    if scene.show_far_focus_plane and not dof.far_limit.is_infinite:
        wanted.append((FAR, dof.far_limit.meters))

    forward = rotation.forward()
    origin = camera_position.as_array()
    normal = tuple(float(v) for v in -forward)

    planes = []
    for kind, distance in wanted:
        cx, cy, cz = origin + distance * forward
        width, height = frustum.footprint_at_distance(distance)
        label = ''
        if scene.show_labels:
            label = f"{_LABEL_PREFIX[kind]}: {format_distance(distance, scene.units)}"
        planes.append(PlaneGeometry(
            kind=kind,
            distance_m=distance,
            width_m=width,
            height_m=height,
            center=SceneCoordinate(x=float(cx), y=float(cy), z=float(cz)),
            normal=normal,
            label=label,
        ))

    logger.debug(f"Built {len(planes)} DOF planes: {[p.kind for p in planes]}")
    return planes
