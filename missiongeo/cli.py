"""
Command-line interface for mission geometry.

Usage:
    missiongeo optics config.yaml [--focus-distance M] [--f-stop N] [--focal-length MM]
    missiongeo local config.yaml LAT LON [ALT]
"""

import argparse
import logging
import sys

from .config import Config
from .errors import MissionGeometryError
from .frames import GeodeticCoordinate
from .optics import (
    FocusState,
    compute_depth_of_field,
    compute_field_of_view,
    depth_of_field_for_focus,
    ground_sample_distance_cm,
)
from .planes import format_distance
from .transforms import geodetic_to_local, local_to_scene


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def run_optics(config: Config, args: argparse.Namespace) -> int:
    focus_distance = args.focus_distance if args.focus_distance is not None else config.focus.focus_distance_m
    f_stop = args.f_stop if args.f_stop is not None else config.focus.f_stop
    focal_length = args.focal_length if args.focal_length is not None else config.focal_length_mm
    units = config.scene.units

    frustum = compute_field_of_view(config.camera, config.lens, focal_length)
    if args.f_stop is None:
        focus = FocusState(focus_distance_m=focus_distance, f_stop=f_stop)
        dof = depth_of_field_for_focus(focus, config.camera, config.lens, focal_length)
    else:
        # an explicit --f-stop may be any f-number, not only a listed stop
        dof = compute_depth_of_field(focus_distance, config.camera, config.lens, f_stop, focal_length)
    width, height = frustum.footprint_at_distance(focus_distance)

    print("\n" + "=" * 60)
    print("CAMERA OPTICS")
    print("=" * 60)
    print(f"Camera:                 {config.camera.name or '-'}")
    print(f"Lens:                   {config.lens.name or '-'}")
    print(f"Field of view:          {frustum.horizontal_fov_deg:.2f}° x {frustum.vertical_fov_deg:.2f}°")
    print(f"Hyperfocal distance:    {format_distance(dof.hyperfocal_distance_m, units)}")
    print(f"\nDepth of field (focus {format_distance(focus_distance, units)}, f/{f_stop:g}):")
    print(f"  Near limit:           {format_distance(dof.near_limit_m, units)}")
    if dof.far_limit.is_infinite:
        print("  Far limit:            infinity")
        print("  Total depth:          infinity")
    else:
        print(f"  Far limit:            {format_distance(dof.far_limit.meters, units)}")
        print(f"  Total depth:          {format_distance(dof.total_depth.meters, units)}")
    print(f"\nFootprint at focus:     {format_distance(width, units)} x {format_distance(height, units)}")
    if config.camera.image_width_px:
        gsd = ground_sample_distance_cm(focus_distance, config.camera, config.lens, focal_length)
        print(f"Ground sample distance: {gsd:.3f} cm/px")
    print("=" * 60)
    return 0


def run_local(config: Config, args: argparse.Namespace) -> int:
    point = GeodeticCoordinate(latitude=args.lat, longitude=args.lon, altitude=args.alt)
    local = geodetic_to_local(point, config.origin)
    scene = local_to_scene(local)

    print("\n" + "=" * 60)
    print("LOCAL COORDINATES")
    print("=" * 60)
    print(f"Origin:                 {config.origin.latitude:.7f}, {config.origin.longitude:.7f}, "
          f"{config.origin.altitude:.3f} m")
    print(f"Point:                  {point.latitude:.7f}, {point.longitude:.7f}, {point.altitude:.3f} m")
    print(f"\nENU (m):                E {local.east:.3f}  N {local.north:.3f}  U {local.up:.3f}")
    print(f"Scene (m):              x {scene.x:.3f}  y {scene.y:.3f}  z {scene.z:.3f}")
    print("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='missiongeo',
        description='Mission geometry: local frames and camera optics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # Depth of field for the configured focus state
    missiongeo optics mission.yaml

    # Override focus distance and aperture
    missiongeo optics mission.yaml --focus-distance 25 --f-stop 5.6

    # Local ENU coordinates of a point
    missiongeo local mission.yaml 37.7759 -122.4184 30
'''
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    optics = subparsers.add_parser('optics', help='Field of view and depth of field')
    optics.add_argument('config', type=str, help='Path to YAML configuration file')
    optics.add_argument('--focus-distance', type=float, default=None, help='Focus distance in meters')
    optics.add_argument('--f-stop', type=float, default=None, help='Aperture f-number')
    optics.add_argument('--focal-length', type=float, default=None,
                        help='Focal length in effect in mm (zoom lenses)')
    optics.set_defaults(handler=run_optics)

    local = subparsers.add_parser('local', help='Geodetic point to local ENU and scene coordinates')
    local.add_argument('config', type=str, help='Path to YAML configuration file')
    local.add_argument('lat', type=float, help='Latitude in degrees')
    local.add_argument('lon', type=float, help='Longitude in degrees')
    local.add_argument('alt', type=float, nargs='?', default=0.0, help='Ellipsoidal altitude in meters')
    local.set_defaults(handler=run_local)

    return parser


def main(argv=None) -> int:
    """Main entry point for CLI."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = Config.from_yaml(args.config)
        return args.handler(config, args)

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except MissionGeometryError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
