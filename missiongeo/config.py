"""
Configuration module for mission geometry.

Handles loading and validation of configuration from YAML files.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any
import logging

from .frames import GeodeticCoordinate
from .optics import CameraSpec, LensSpec, FocusState, compute_field_of_view, depth_of_field_for_focus
from .transforms import local_frame

logger = logging.getLogger(__name__)

UNITS = ('metric', 'imperial')


@dataclass(frozen=True)
class SceneConfig:
    """
    Settings the renderer reads when placing depth-of-field planes.

    Every field is listed here with its default; there are no optional
    extra keys.
    """
    show_near_focus_plane: bool = True   # Plane at the near DOF limit
    show_far_focus_plane: bool = False   # Plane at the far DOF limit (never shown when infinite)
    show_focus_plane: bool = True        # Image area at the focus distance
    show_labels: bool = True             # Distance labels on the planes
    units: str = 'metric'                # 'metric' or 'imperial' for labels

    def __post_init__(self):
        if self.units not in UNITS:
            raise ValueError(f"units must be one of {UNITS}, got {self.units!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneConfig":
        """Build from a mapping, rejecting keys that are not fields."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown scene settings: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Config:
    """
    Main configuration class for mission geometry.

    Attributes:
        origin: Mission local origin (takeoff point)
        camera: Sensor dimensions
        lens: Lens focal length and aperture stops
        focus: Current focus distance and f-stop
        focal_length_mm: Focal length in effect (zoom lenses only)
        scene: Plane visualization settings
    """
    origin: GeodeticCoordinate
    camera: CameraSpec
    lens: LensSpec
    focus: FocusState
    focal_length_mm: Optional[float] = None
    scene: SceneConfig = field(default_factory=SceneConfig)

    def validate(self) -> None:
        """
        Check that the origin and hardware describe something physical.

        Raises:
            InvalidInput: Origin out of range
            InvalidHardwareParameters: Non-physical camera, lens or focus values,
                or an f-stop the lens does not offer
        """
        local_frame(self.origin)
        compute_field_of_view(self.camera, self.lens, self.focal_length_mm)
        depth_of_field_for_focus(self.focus, self.camera, self.lens, self.focal_length_mm)

    @classmethod
    def from_yaml(cls, config_path: str) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Validated Config object

        Example YAML structure:
            origin:
              latitude: 37.7749
              longitude: -122.4194
              altitude: 0.0
            camera:
              name: Sony Alpha A7 IV
              sensor_width_mm: 36.0
              sensor_height_mm: 24.0
              image_width_px: 7008
              image_height_px: 4672
            lens:
              name: FE 24-70mm
              focal_length_mm: [24, 70]
              aperture_stops: [2.8, 4, 5.6, 8, 11, 16, 22]
            focus:
              focus_distance_m: 10.0
              f_stop: 8
              focal_length_mm: 50
            scene:
              show_near_focus_plane: true
              show_far_focus_plane: false
              show_focus_plane: true
              show_labels: true
              units: metric
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Malformed YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")

        logger.info(f"Loading configuration from {config_path}")

        try:
            origin_data = data['origin']
            origin = GeodeticCoordinate(
                latitude=float(origin_data['latitude']),
                longitude=float(origin_data['longitude']),
                altitude=float(origin_data.get('altitude', 0.0)),
            )

            cam_data = data['camera']
            camera = CameraSpec(
                sensor_width_mm=float(cam_data['sensor_width_mm']),
                sensor_height_mm=float(cam_data['sensor_height_mm']),
                name=cam_data.get('name', ''),
                image_width_px=cam_data.get('image_width_px'),
                image_height_px=cam_data.get('image_height_px'),
            )

            lens_data = data['lens']
            lens = LensSpec(
                focal_length_mm=lens_data['focal_length_mm'],
                aperture_stops=lens_data.get('aperture_stops', []),
                name=lens_data.get('name', ''),
            )

            focus_data = data['focus']
            focus = FocusState(
                focus_distance_m=float(focus_data['focus_distance_m']),
                f_stop=float(focus_data['f_stop']),
            )
        except KeyError as e:
            raise ValueError(f"Missing configuration key: {e}") from e

        focal_length = focus_data.get('focal_length_mm')

        config = cls(
            origin=origin,
            camera=camera,
            lens=lens,
            focus=focus,
            focal_length_mm=float(focal_length) if focal_length is not None else None,
            scene=SceneConfig.from_dict(data.get('scene') or {}),
        )
        config.validate()
        return config

    def to_yaml(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        focal_length = self.lens.focal_length_mm
        data = {
            'origin': {
                'latitude': self.origin.latitude,
                'longitude': self.origin.longitude,
                'altitude': self.origin.altitude,
            },
            'camera': {
                'name': self.camera.name,
                'sensor_width_mm': self.camera.sensor_width_mm,
                'sensor_height_mm': self.camera.sensor_height_mm,
                'image_width_px': self.camera.image_width_px,
                'image_height_px': self.camera.image_height_px,
            },
            'lens': {
                'name': self.lens.name,
                'focal_length_mm': list(focal_length) if self.lens.is_zoom else focal_length,
                'aperture_stops': list(self.lens.aperture_stops),
            },
            'focus': {
                'focus_distance_m': self.focus.focus_distance_m,
                'f_stop': self.focus.f_stop,
                'focal_length_mm': self.focal_length_mm,
            },
            'scene': self.scene.to_dict(),
        }

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")
