"""
Compass angle wrapping and manipulation utilities.

Provides functions for handling compass headings and bearings in degrees,
ensuring they remain within proper bounds ([0, 360) for bearings,
(-180, 180] for signed differences).

Critical for:
- Heading smoothing across the 0°/360° (north) discontinuity
- Movement bearing recovered from step displacements
- Return-to-start bearing

Compass convention: 0° = North, angles increase clockwise (90° = East).
Local plane convention: x = East, y grows towards South (north motion
decreases y), matching screen coordinates of a north-up trail view.
"""

import math

import numpy as np


def normalize_deg(angle: float) -> float:
    """
    Normalize a compass angle to the [0, 360) range.

    Args:
        angle: Angle in degrees (can be any finite value).

    Returns:
        Equivalent angle in range [0, 360).

    Example:
        >>> normalize_deg(370.0)
        10.0
        >>> normalize_deg(-10.0)
        350.0
    """
    wrapped = float(angle) % 360.0
    # -1e-17 % 360 rounds to 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def wrap_deg(angle: float) -> float:
    """
    Wrap a signed angle to the (-180, 180] range.

    Without wrapping, headings near north produce huge differences
    (e.g. 5° - 355° = -350° instead of +10°).

    Args:
        angle: Angle in degrees.

    Returns:
        Wrapped angle in range (-180, 180].

    Example:
        >>> wrap_deg(-350.0)
        10.0
        >>> wrap_deg(-180.0)
        180.0
    """
    wrapped = normalize_deg(angle)
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def angle_diff_deg(angle1: float, angle2: float) -> float:
    """
    Compute the shortest angular difference between two compass angles.

    Returns angle1 - angle2, wrapped to (-180, 180].

    Args:
        angle1: First angle in degrees (e.g. raw heading).
        angle2: Second angle in degrees (e.g. filtered heading).

    Returns:
        Shortest signed difference angle1 - angle2 in (-180, 180].

    Example:
        >>> angle_diff_deg(5.0, 355.0)
        10.0
        >>> angle_diff_deg(355.0, 5.0)
        -10.0
    """
    return wrap_deg(angle1 - angle2)


def compass_bearing(dx: float, dy: float) -> float:
    """
    Compass bearing of a displacement in the local plane.

    The local plane has x = East and y growing southward, so a displacement
    of (0, -1) points north and (1, 0) points east:

        bearing = atan2(dx, -dy)  normalized to [0, 360)

    Args:
        dx: East component of the displacement [m].
        dy: South-positive component of the displacement [m].

    Returns:
        Bearing in degrees, 0 = North, clockwise, in [0, 360).

    Example:
        >>> compass_bearing(0.0, -1.0)  # north
        0.0
        >>> compass_bearing(1.0, 0.0)  # east
        90.0
    """
    return normalize_deg(math.degrees(math.atan2(dx, -dy)))


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp value into [lo, hi]."""
    return max(lo, min(hi, value))


def degrees_to_radians(degrees: float) -> float:
    """Convert degrees to radians."""
    return float(np.deg2rad(degrees))


def radians_to_degrees(radians: float) -> float:
    """Convert radians to degrees."""
    return float(np.rad2deg(radians))
