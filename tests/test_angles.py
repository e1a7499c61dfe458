"""
Unit tests for brodkrumen/utils/angles.py (compass angle helpers).

Tests cover:
    - Normalization to [0, 360)
    - Signed wrapping to (-180, 180]
    - Shortest angular difference across north
    - Compass bearing of local-plane displacements (x = East, y = South)

Run with: pytest tests/test_angles.py -v
"""

import math
import unittest
import numpy as np

from brodkrumen.utils.angles import (
    angle_diff_deg,
    clamp,
    compass_bearing,
    degrees_to_radians,
    normalize_deg,
    radians_to_degrees,
    wrap_deg,
)


class TestNormalizeDeg(unittest.TestCase):
    """Test suite for normalize_deg."""

    def test_normalize_in_range_unchanged(self) -> None:
        assert normalize_deg(0.0) == 0.0
        assert normalize_deg(123.5) == 123.5

    def test_normalize_wraps_positive_and_negative(self) -> None:
        """Test values outside [0, 360) are brought back into range."""
        assert np.isclose(normalize_deg(370.0), 10.0)
        assert np.isclose(normalize_deg(-10.0), 350.0)
        assert np.isclose(normalize_deg(720.0), 0.0)

    def test_normalize_never_returns_360(self) -> None:
        """Tiny negative values must not round to 360.0."""
        value = normalize_deg(-1e-17)
        assert 0.0 <= value < 360.0


class TestWrapDeg(unittest.TestCase):
    """Test suite for wrap_deg and angle_diff_deg."""

    def test_wrap_range(self) -> None:
        """Test wrapping into (-180, 180]."""
        assert np.isclose(wrap_deg(-350.0), 10.0)
        assert np.isclose(wrap_deg(190.0), -170.0)
        assert wrap_deg(180.0) == 180.0
        assert wrap_deg(-180.0) == 180.0

    def test_angle_diff_across_north(self) -> None:
        """Test the shortest difference is used near 0°/360°."""
        assert np.isclose(angle_diff_deg(5.0, 355.0), 10.0)
        assert np.isclose(angle_diff_deg(355.0, 5.0), -10.0)

    def test_angle_diff_opposite(self) -> None:
        """Opposite headings differ by exactly 180°."""
        assert np.isclose(abs(angle_diff_deg(0.0, 180.0)), 180.0)


class TestCompassBearing(unittest.TestCase):
    """Test suite for compass_bearing (x = East, y = South)."""

    def test_cardinal_directions(self) -> None:
        """Test the four cardinal displacements."""
        assert np.isclose(compass_bearing(0.0, -1.0), 0.0)    # north
        assert np.isclose(compass_bearing(1.0, 0.0), 90.0)    # east
        assert np.isclose(compass_bearing(0.0, 1.0), 180.0)   # south
        assert np.isclose(compass_bearing(-1.0, 0.0), 270.0)  # west

    def test_diagonal(self) -> None:
        """North-east displacement has bearing 45°."""
        assert np.isclose(compass_bearing(1.0, -1.0), 45.0)

    def test_result_in_range(self) -> None:
        for dx, dy in [(-1e-12, -1.0), (-3.0, 4.0), (0.5, 0.5)]:
            bearing = compass_bearing(dx, dy)
            assert 0.0 <= bearing < 360.0


class TestHelpers(unittest.TestCase):
    """Test suite for clamp and unit conversions."""

    def test_clamp(self) -> None:
        assert clamp(2.0, 0.3, 1.5) == 1.5
        assert clamp(0.1, 0.3, 1.5) == 0.3
        assert clamp(0.75, 0.3, 1.5) == 0.75

    def test_degree_radian_conversion(self) -> None:
        assert np.isclose(degrees_to_radians(180.0), math.pi)
        assert np.isclose(radians_to_degrees(math.pi / 2), 90.0)
