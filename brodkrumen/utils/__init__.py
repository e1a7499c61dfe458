"""
Utility functions for the dead-reckoning engine.

This module provides common utility functions used across the codebase,
chiefly compass-angle operations in degrees.
"""

from .angles import (
    normalize_deg,
    wrap_deg,
    angle_diff_deg,
    compass_bearing,
    clamp,
    degrees_to_radians,
    radians_to_degrees,
)

__all__ = [
    'normalize_deg',
    'wrap_deg',
    'angle_diff_deg',
    'compass_bearing',
    'clamp',
    'degrees_to_radians',
    'radians_to_degrees',
]
