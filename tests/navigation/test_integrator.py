"""
Unit tests for brodkrumen/navigation/integrator.py (position integration).

Tests cover:
    - Step displacement in the x = East, y = South plane
    - Step length clamping at the point of use
    - Path, odometry and movement bearing bookkeeping
    - Altitude proxy from pitch, with climb clamp and baseline snap
    - Pause policies ('freeze' and 'track')
    - Restore recomputing the return vector

Run with: pytest tests/navigation/test_integrator.py -v
"""

import math
import unittest
import numpy as np

from brodkrumen.navigation.integrator import (
    PositionIntegrator,
    altitude_step,
    step_displacement,
)


class TestStepDisplacement(unittest.TestCase):
    """Test suite for a single step displacement."""

    def test_north(self) -> None:
        """Heading 0° moves by (0, -s)."""
        np.testing.assert_allclose(step_displacement(0.7, 0.0), [0.0, -0.7], atol=1e-12)

    def test_east(self) -> None:
        """Heading 90° moves by (s, 0)."""
        np.testing.assert_allclose(step_displacement(0.7, 90.0), [0.7, 0.0], atol=1e-12)

    def test_south_west(self) -> None:
        d = step_displacement(1.0, 225.0)
        np.testing.assert_allclose(d, [-math.sqrt(0.5), math.sqrt(0.5)], atol=1e-12)


class TestAltitudeStep(unittest.TestCase):
    """Test suite for the altitude proxy."""

    def test_small_pitch_ignored(self) -> None:
        """|pitch| ≤ 0.17 rad leaves altitude unchanged."""
        assert altitude_step(1.0, 0.75, 0.1) == 1.0
        assert altitude_step(1.0, 0.75, -0.17) == 1.0

    def test_climb(self) -> None:
        """30° pitch climbs s · sin(30°)."""
        assert np.isclose(altitude_step(1.0, 0.75, math.radians(30.0)), 1.375)

    def test_climb_clamped(self) -> None:
        """A near-vertical pitch climbs at most 0.8 s per step."""
        assert np.isclose(altitude_step(1.0, 0.75, math.pi / 2), 1.6)
        assert np.isclose(altitude_step(1.0, 0.75, -math.pi / 2), 0.4)

    def test_snap_to_baseline(self) -> None:
        """Altitude within 0.05 m of 1 m snaps to exactly 1 m."""
        # 1.2 + 0.3 sin(-0.7) ≈ 1.0067
        assert altitude_step(1.2, 0.3, -0.7) == 1.0

    def test_snap_disabled(self) -> None:
        value = altitude_step(1.2, 0.3, -0.7, snap_tolerance_m=0.0)
        assert np.isclose(value, 1.2 + 0.3 * math.sin(-0.7))


class TestPositionIntegrator(unittest.TestCase):
    """Test suite for PositionIntegrator."""

    def test_initial_state(self) -> None:
        integ = PositionIntegrator()

        assert not integ.origin_set
        assert integ.path == []
        assert integ.altitude_m == 0.0
        assert integ.return_vector.distance == 0.0

    def test_start(self) -> None:
        """Start sets the origin, one path point and the 1 m baseline."""
        integ = PositionIntegrator()
        integ.start()

        assert integ.origin_set
        assert len(integ.path) == 1
        np.testing.assert_array_equal(integ.path[0], [0.0, 0.0])
        assert integ.altitude_m == 1.0
        assert integ.step_count == 0

    def test_step_north(self) -> None:
        """A northward step, bookkeeping and return vector."""
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 0.0, t=2.0)

        np.testing.assert_allclose(integ.position, [0.0, -0.75], atol=1e-12)
        assert len(integ.path) == 3
        np.testing.assert_array_equal(integ.path[1], [0.0, 0.0])
        np.testing.assert_allclose(integ.path[2], [0.0, -0.75], atol=1e-12)
        assert integ.step_count == 1
        assert np.isclose(integ.total_distance, 0.75)
        assert np.isclose(integ.movement_bearing_deg, 0.0)
        assert integ.last_step_time == 2.0
        # d = (0, 0.75): 90° - atan2(0.75, 0) = 0°
        assert np.isclose(integ.return_vector.distance, 0.75)
        assert np.isclose(integ.return_vector.bearing_deg, 0.0)

    def test_step_east(self) -> None:
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 90.0)

        np.testing.assert_allclose(integ.position, [0.75, 0.0], atol=1e-12)
        assert np.isclose(integ.movement_bearing_deg, 90.0)
        assert np.isclose(integ.return_vector.bearing_deg, 270.0)

    def test_step_length_clamped(self) -> None:
        """Configured lengths outside [0.3, 1.5] m are clamped."""
        integ = PositionIntegrator()
        integ.start()
        integ.advance(5.0, 90.0)
        assert np.isclose(integ.position[0], 1.5)

        integ.advance(0.1, 90.0)
        assert np.isclose(integ.position[0], 1.8)
        assert np.isclose(integ.total_distance, 1.8)

    def test_missing_heading_is_north(self) -> None:
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, None)

        np.testing.assert_allclose(integ.position, [0.0, -0.75], atol=1e-12)

    def test_square_walk_returns_home(self) -> None:
        """N, E, S, W legs of equal length close the loop."""
        integ = PositionIntegrator()
        integ.start()
        for heading in (0.0, 90.0, 180.0, 270.0):
            for _ in range(4):
                integ.advance(0.75, heading)

        np.testing.assert_allclose(integ.position, [0.0, 0.0], atol=1e-9)
        assert integ.step_count == 16
        assert np.isclose(integ.total_distance, 12.0)
        assert integ.return_vector.distance < 1e-9

    def test_altitude_follows_pitch(self) -> None:
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 0.0, pitch_rad=math.radians(30.0))

        assert np.isclose(integ.altitude_m, 1.375)

    def test_pause_freeze(self) -> None:
        """Paused steps under 'freeze' change nothing."""
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 0.0)
        before = integ.position.copy()

        integ.advance(0.75, 90.0, pitch_rad=1.0, paused=True, pause_policy="freeze")

        np.testing.assert_array_equal(integ.position, before)
        assert len(integ.path) == 3
        assert integ.step_count == 1
        assert integ.altitude_m == 1.0

    def test_pause_track(self) -> None:
        """Paused steps under 'track' move position but not path or odometry."""
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 90.0, pitch_rad=math.radians(30.0),
                      paused=True, pause_policy="track")

        np.testing.assert_allclose(integ.position, [0.75, 0.0], atol=1e-12)
        assert len(integ.path) == 1
        assert integ.step_count == 0
        assert integ.total_distance == 0.0
        assert np.isclose(integ.altitude_m, 1.375)
        assert np.isclose(integ.return_vector.distance, 0.75)

    def test_segments(self) -> None:
        integ = PositionIntegrator()
        integ.start()
        integ.advance(1.0, 0.0)
        integ.advance(1.0, 90.0)

        segments = integ.segments()

        assert len(segments) == 2
        np.testing.assert_array_equal(segments[0][0], [0.0, 0.0])
        np.testing.assert_allclose(segments[1][1], [1.0, -1.0], atol=1e-12)

    def test_clear(self) -> None:
        integ = PositionIntegrator()
        integ.start()
        integ.advance(0.75, 0.0)
        integ.clear()

        assert not integ.origin_set
        assert integ.path == []
        assert integ.step_count == 0
        assert integ.altitude_m == 0.0
        assert integ.movement_bearing_deg is None

    def test_restore_recomputes_return_vector(self) -> None:
        integ = PositionIntegrator()
        integ.restore(
            origin_set=True,
            position=np.array([3.0, -4.0]),
            path=[np.zeros(2), np.zeros(2), np.array([3.0, -4.0])],
            total_distance=5.0,
            step_count=7,
            altitude_m=1.2,
        )

        assert integ.origin_set
        assert integ.step_count == 7
        assert np.isclose(integ.return_vector.distance, 5.0)
        assert np.isclose(integ.return_vector.bearing_deg, 323.1301024)
