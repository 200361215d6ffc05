"""
Camera optics module for a gimbal-mounted camera.

Derives field of view, frustum footprint and depth of field from sensor
and lens parameters.

Field of View Model:
    fov = 2 * atan(sensor_size / (2 * f))
    footprint(d) = 2 * d * tan(fov / 2)

Depth of Field Model (hyperfocal method):
    H = f² / (N * c) + f
    s >= H:  near = H / 2, far = infinity
    s <  H:  near = s(H - f) / (H + s - 2f), far = s(H - f) / (H - s)

Units:
    - Sensor and focal length in millimeters
    - Distances in and out in meters; DOF arithmetic runs in millimeters and
      is converted only at the function boundary
    - Circle of confusion is fixed at 0.03 mm (full-frame equivalent). There
      is no per-sensor circle of confusion table, so it is not configurable.
"""

import logging
import math
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional, Tuple, Union

from .errors import InvalidHardwareParameters, InvalidInput

logger = logging.getLogger(__name__)

CIRCLE_OF_CONFUSION_MM = 0.03
MM_PER_M = 1000.0
FEET_PER_METER = 3.28084


@dataclass(frozen=True)
class CameraSpec:
    """
    Physical camera sensor.

    Attributes:
        sensor_width_mm: Sensor width in millimeters
        sensor_height_mm: Sensor height in millimeters
        name: Display name
        image_width_px: Image width in pixels (needed for GSD only)
        image_height_px: Image height in pixels
    """
    sensor_width_mm: float
    sensor_height_mm: float
    name: str = ""
    image_width_px: Optional[int] = None
    image_height_px: Optional[int] = None


@dataclass(frozen=True)
class LensSpec:
    """
    Lens hardware.

    Attributes:
        focal_length_mm: Focal length of a prime lens, or (min, max) for a zoom
        aperture_stops: Available f-numbers, kept sorted ascending
        name: Display name
    """
    focal_length_mm: Union[float, Tuple[float, float]]
    aperture_stops: Tuple[float, ...]
    name: str = ""

    def __post_init__(self):
        # Lists from YAML become tuples so the spec stays hashable
        if isinstance(self.focal_length_mm, (list, tuple)):
            object.__setattr__(self, "focal_length_mm", tuple(float(v) for v in self.focal_length_mm))
        object.__setattr__(self, "aperture_stops", tuple(sorted(float(n) for n in self.aperture_stops)))

    @property
    def is_zoom(self) -> bool:
        return isinstance(self.focal_length_mm, tuple)

    def resolve_focal_length(self, focal_length_mm: Optional[float] = None) -> float:
        """
        Focal length in effect for a computation.

        A prime lens answers with its own focal length. A zoom lens never
        picks an end of its range: the caller must say which focal length
        is set, and it must lie inside the range.

        Raises:
            InvalidHardwareParameters: Missing, non-positive or out-of-range focal length
        """
        if self.is_zoom:
            if len(self.focal_length_mm) != 2:
                raise InvalidHardwareParameters(f"Zoom range must be (min, max): {self.focal_length_mm}")
            f_min, f_max = self.focal_length_mm
            _require_positive(f_min, "focal_length_mm")
            if f_max < f_min:
                raise InvalidHardwareParameters(f"Zoom range is reversed: {self.focal_length_mm}")
            if focal_length_mm is None:
                raise InvalidHardwareParameters(
                    f"Zoom lens {self.name or self.focal_length_mm} needs the focal length in effect"
                )
            _require_positive(focal_length_mm, "focal_length_mm")
            if not f_min <= focal_length_mm <= f_max:
                raise InvalidHardwareParameters(
                    f"Focal length {focal_length_mm} mm outside zoom range [{f_min}, {f_max}]"
                )
            return float(focal_length_mm)

        _require_positive(self.focal_length_mm, "focal_length_mm")
        if focal_length_mm is not None and not math.isclose(focal_length_mm, self.focal_length_mm):
            raise InvalidHardwareParameters(
                f"Prime lens is {self.focal_length_mm} mm, got {focal_length_mm} mm"
            )
        return float(self.focal_length_mm)

    def supports_aperture(self, f_stop: float) -> bool:
        return any(math.isclose(f_stop, stop) for stop in self.aperture_stops)


@dataclass(frozen=True)
class FocusState:
    """Operator-controlled focus distance (meters) and f-number."""
    focus_distance_m: float
    f_stop: float

    def with_focus_distance(self, focus_distance_m: float) -> "FocusState":
        return replace(self, focus_distance_m=focus_distance_m)

    def with_f_stop(self, f_stop: float) -> "FocusState":
        return replace(self, f_stop=f_stop)


@dataclass(frozen=True)
class FrustumGeometry:
    """
    Angular field of view and the footprint it covers at a distance.

    Depends only on sensor size and focal length, not on distance.
    """
    horizontal_fov_rad: float
    vertical_fov_rad: float

    @property
    def horizontal_fov_deg(self) -> float:
        return math.degrees(self.horizontal_fov_rad)

    @property
    def vertical_fov_deg(self) -> float:
        return math.degrees(self.vertical_fov_rad)

    def width_at_distance(self, distance_m: float) -> float:
        """Footprint width in meters at distance_m (0 gives 0)."""
        _require_distance(distance_m)
        return 2.0 * distance_m * math.tan(self.horizontal_fov_rad / 2)

    def height_at_distance(self, distance_m: float) -> float:
        """Footprint height in meters at distance_m (0 gives 0)."""
        _require_distance(distance_m)
        return 2.0 * distance_m * math.tan(self.vertical_fov_rad / 2)

    def footprint_at_distance(self, distance_m: float) -> Tuple[float, float]:
        return self.width_at_distance(distance_m), self.height_at_distance(distance_m)


@dataclass(frozen=True)
class Finite:
    """A finite distance in meters."""
    meters: float

    @property
    def is_infinite(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.meters:.2f}m"


@dataclass(frozen=True)
class Infinite:
    """An unbounded distance (far limit at or beyond hyperfocal)."""

    @property
    def is_infinite(self) -> bool:
        return True

    def __str__(self) -> str:
        return "infinity"


INFINITE = Infinite()
Distance = Union[Finite, Infinite]


@dataclass(frozen=True)
class DepthOfFieldResult:
    """
    Range of acceptable sharpness around the focus distance.

    Attributes:
        focus_distance_m: Focus distance the result was computed for
        hyperfocal_distance_m: Hyperfocal distance for the lens setting
        near_limit_m: Nearest sharp distance
        far_limit: Farthest sharp distance, Finite or INFINITE
        total_depth: far - near, Finite or INFINITE
        circle_of_confusion_mm: Circle of confusion used
    """
    focus_distance_m: float
    hyperfocal_distance_m: float
    near_limit_m: float
    far_limit: Distance
    total_depth: Distance
    circle_of_confusion_mm: float = CIRCLE_OF_CONFUSION_MM

    def describe(self) -> str:
        return f"From {self.near_limit_m:.2f}m to {self.far_limit}"


def _require_positive(value: float, name: str) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidHardwareParameters(f"{name} must be a positive finite number, got {value!r}")


def _require_distance(distance_m: float) -> None:
    if not math.isfinite(distance_m) or distance_m < 0:
        raise InvalidInput(f"Distance must be finite and >= 0, got {distance_m!r}")


def _check_camera(camera: CameraSpec) -> None:
    _require_positive(camera.sensor_width_mm, "sensor_width_mm")
    _require_positive(camera.sensor_height_mm, "sensor_height_mm")


@lru_cache(maxsize=128)
def _field_of_view(sensor_width_mm: float, sensor_height_mm: float, focal_length_mm: float) -> FrustumGeometry:
    frustum = FrustumGeometry(
        horizontal_fov_rad=2 * math.atan(sensor_width_mm / (2 * focal_length_mm)),
        vertical_fov_rad=2 * math.atan(sensor_height_mm / (2 * focal_length_mm)),
    )
    logger.debug(
        f"FOV for {sensor_width_mm}x{sensor_height_mm} mm @ {focal_length_mm} mm: "
        f"{frustum.horizontal_fov_deg:.2f}° x {frustum.vertical_fov_deg:.2f}°"
    )
    return frustum


def compute_field_of_view(
    camera: CameraSpec,
    lens: LensSpec,
    focal_length_mm: Optional[float] = None,
) -> FrustumGeometry:
    """
    Compute the angular field of view of a camera/lens pair.

    Args:
        camera: Sensor dimensions
        lens: Lens; zoom lenses need focal_length_mm
        focal_length_mm: Focal length in effect (required for zoom lenses)

    Returns:
        FrustumGeometry (cached per sensor size and focal length)

    Raises:
        InvalidHardwareParameters: Non-positive sensor size or focal length
    """
    _check_camera(camera)
    f = lens.resolve_focal_length(focal_length_mm)
    return _field_of_view(float(camera.sensor_width_mm), float(camera.sensor_height_mm), f)


def _hyperfocal_mm(focal_length_mm: float, f_stop: float) -> float:
    return focal_length_mm ** 2 / (f_stop * CIRCLE_OF_CONFUSION_MM) + focal_length_mm


def hyperfocal_distance_m(lens: LensSpec, f_stop: float, focal_length_mm: Optional[float] = None) -> float:
    """
    Hyperfocal distance in meters for a lens setting.

    Raises:
        InvalidHardwareParameters: Non-positive f-stop or focal length
    """
    _require_positive(f_stop, "f_stop")
    f = lens.resolve_focal_length(focal_length_mm)
    return _hyperfocal_mm(f, f_stop) / MM_PER_M


def compute_depth_of_field(
    focus_distance_m: float,
    camera: CameraSpec,
    lens: LensSpec,
    f_stop: float,
    focal_length_mm: Optional[float] = None,
) -> DepthOfFieldResult:
    """
    Compute the near/far limits of acceptable sharpness.

    Args:
        focus_distance_m: Focus distance in meters
        camera: Sensor dimensions
        lens: Lens; zoom lenses need focal_length_mm
        f_stop: Aperture f-number
        focal_length_mm: Focal length in effect (required for zoom lenses)

    Returns:
        DepthOfFieldResult; far limit and total depth are INFINITE when
        focusing at or beyond the hyperfocal distance

    Raises:
        InvalidHardwareParameters: Focus distance not beyond the focal length,
            or a non-positive f-stop, focal length or sensor size
    """
    _check_camera(camera)
    _require_positive(focus_distance_m, "focus_distance_m")
    _require_positive(f_stop, "f_stop")
    f = lens.resolve_focal_length(focal_length_mm)

    s = focus_distance_m * MM_PER_M
    if s <= f:
        raise InvalidHardwareParameters(
            f"Focus distance {focus_distance_m} m is not beyond the {f} mm focal length"
        )
    H = _hyperfocal_mm(f, f_stop)

    if s >= H:
        near_mm = H / 2
        far_mm = None
    else:
        near_mm = (s * (H - f)) / (H + s - 2 * f)
        far_mm = (s * (H - f)) / (H - s)

    near_m = near_mm / MM_PER_M
    if far_mm is None:
        far_limit = INFINITE
        total_depth = INFINITE
    else:
        far_m = far_mm / MM_PER_M
        far_limit = Finite(far_m)
        total_depth = Finite(far_m - near_m)

    result = DepthOfFieldResult(
        focus_distance_m=focus_distance_m,
        hyperfocal_distance_m=H / MM_PER_M,
        near_limit_m=near_m,
        far_limit=far_limit,
        total_depth=total_depth,
    )
    logger.debug(f"DOF at {focus_distance_m} m, f/{f_stop}, {f} mm: {result.describe()}")
    return result


def depth_of_field_for_focus(
    focus: FocusState,
    camera: CameraSpec,
    lens: LensSpec,
    focal_length_mm: Optional[float] = None,
) -> DepthOfFieldResult:
    """
    Depth of field for the current focus state.

    Raises:
        InvalidHardwareParameters: If the f-stop is not one the lens offers,
            or any value is non-physical
    """
    if not lens.supports_aperture(focus.f_stop):
        raise InvalidHardwareParameters(
            f"f/{focus.f_stop} is not an aperture stop of this lens {lens.aperture_stops}"
        )
    return compute_depth_of_field(focus.focus_distance_m, camera, lens, focus.f_stop, focal_length_mm)


def ground_sample_distance_cm(
    distance_m: float,
    camera: CameraSpec,
    lens: LensSpec,
    focal_length_mm: Optional[float] = None,
) -> float:
    """
    Ground sample distance in centimeters per pixel at distance_m.

    Raises:
        InvalidHardwareParameters: If the camera has no image width
    """
    _check_camera(camera)
    _require_distance(distance_m)
    if not camera.image_width_px or camera.image_width_px <= 0:
        raise InvalidHardwareParameters("image_width_px is required for ground sample distance")
    f = lens.resolve_focal_length(focal_length_mm)
    return (distance_m * 100 * camera.sensor_width_mm) / (f * camera.image_width_px)


def meters_to_feet(meters: float) -> float:
    return meters * FEET_PER_METER


def feet_to_meters(feet: float) -> float:
    return feet / FEET_PER_METER
