"""
Error types raised by the geometric core.

Both are synchronous, deterministic failures: calling again with the same
input fails the same way, so they are never retried and never replaced by
a default value inside the core.
"""


class MissionGeometryError(ValueError):
    """Base class for all core geometry failures."""


class InvalidInput(MissionGeometryError):
    """Malformed coordinate: NaN/infinite component or out-of-range lat/lon."""


class InvalidHardwareParameters(MissionGeometryError):
    """Non-physical camera, lens, aperture or focus value."""
