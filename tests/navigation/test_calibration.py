"""
Unit tests for brodkrumen/navigation/calibration.py (step-length calibration).

Tests cover:
    - L = v · T / n with whole-second elapsed time
    - Zero observed steps keeping the previous length
    - Duration clamping to [5, 120] s
    - Automatic stop at the deadline and manual stop, each exactly once
    - Live step counter and status

Run with: pytest tests/navigation/test_calibration.py -v
"""

import unittest
import numpy as np

from brodkrumen.navigation.calibration import (
    CalibrationSession,
    CalibrationState,
    calibrated_step_length,
    round_half_up,
)


class TestCalibratedStepLength(unittest.TestCase):
    """Test suite for the step-length formula."""

    def test_formula(self) -> None:
        """12 steps in 15 s at 1.4 m/s give 1.75 m."""
        assert np.isclose(calibrated_step_length(12, 15), 1.75)

    def test_zero_steps(self) -> None:
        assert calibrated_step_length(0, 15) is None

    def test_non_finite_speed(self) -> None:
        assert calibrated_step_length(10, 15, float("nan")) is None

    def test_round_half_up(self) -> None:
        assert round_half_up(14.5) == 15
        assert round_half_up(14.49) == 14
        assert round_half_up(0.2) == 0


class TestCalibrationSession(unittest.TestCase):
    """Test suite for the calibration state machine."""

    def test_manual_stop(self) -> None:
        """Start at 10 steps, stop after 15 s at 22 steps → 1.75 m."""
        session = CalibrationSession()
        assert session.start(t=100.0, current_steps=10)
        assert session.running

        result = session.stop(t=115.0, current_steps=22)

        assert result.observed_steps == 12
        assert result.elapsed_s == 15
        assert np.isclose(result.step_length_m, 1.75)
        assert not result.automatic
        assert session.state is CalibrationState.IDLE

    def test_zero_steps_gives_no_length(self) -> None:
        session = CalibrationSession()
        session.start(t=0.0, current_steps=5)
        result = session.stop(t=15.0, current_steps=5)

        assert result.observed_steps == 0
        assert result.step_length_m is None

    def test_elapsed_at_least_one_second(self) -> None:
        session = CalibrationSession()
        session.start(t=0.0, current_steps=0)
        result = session.stop(t=0.2, current_steps=1)

        assert result.elapsed_s == 1
        assert np.isclose(result.step_length_m, 1.4)

    def test_elapsed_rounded(self) -> None:
        session = CalibrationSession()
        session.start(t=0.0, current_steps=0)
        result = session.stop(t=14.5, current_steps=10)

        assert result.elapsed_s == 15

    def test_duration_clamped(self) -> None:
        session = CalibrationSession()
        session.start(t=0.0, current_steps=0, duration_s=1.0)
        assert session.duration_s == 5.0
        session.stop(t=1.0, current_steps=0)

        session.start(t=0.0, current_steps=0, duration_s=500.0)
        assert session.duration_s == 120.0
        session.stop(t=1.0, current_steps=0)

        session.start(t=0.0, current_steps=0, duration_s=float("nan"))
        assert session.duration_s == 15.0

    def test_start_while_running_is_ignored(self) -> None:
        session = CalibrationSession()
        session.start(t=0.0, current_steps=3, duration_s=30.0)

        assert not session.start(t=5.0, current_steps=8, duration_s=10.0)
        assert session.start_time == 0.0
        assert session.start_step_count == 3
        assert session.duration_s == 30.0

    def test_poll_before_deadline(self) -> None:
        session = CalibrationSession()
        session.start(t=10.0, current_steps=0, duration_s=15.0)

        assert session.poll(t=24.9, current_steps=20) is None
        assert session.running

    def test_auto_stop_at_deadline(self) -> None:
        """A late poll still measures exactly the configured duration."""
        session = CalibrationSession()
        session.start(t=10.0, current_steps=0, duration_s=15.0)

        result = session.poll(t=27.3, current_steps=20)

        assert result is not None
        assert result.automatic
        assert result.elapsed_s == 15
        assert np.isclose(result.step_length_m, 1.4 * 15 / 20)
        assert session.last_result is result

    def test_auto_then_manual_stop(self) -> None:
        """Once stopped automatically, a manual stop is a no-op."""
        session = CalibrationSession()
        session.start(t=0.0, current_steps=0, duration_s=5.0)
        assert session.poll(t=5.0, current_steps=7) is not None

        assert session.stop(t=6.0, current_steps=9) is None
        assert session.poll(t=7.0, current_steps=9) is None

    def test_manual_then_auto_stop(self) -> None:
        """Once stopped manually, the deadline no longer fires."""
        session = CalibrationSession()
        session.start(t=0.0, current_steps=0, duration_s=5.0)
        assert session.stop(t=3.0, current_steps=4) is not None

        assert session.poll(t=10.0, current_steps=8) is None
        assert session.deadline is None

    def test_stop_when_idle(self) -> None:
        assert CalibrationSession().stop(t=1.0, current_steps=1) is None

    def test_live_steps_and_status(self) -> None:
        session = CalibrationSession()
        session.start(t=2.0, current_steps=4, duration_s=20.0)

        assert session.observe(7) == 3
        status = session.status()
        assert status.state is CalibrationState.RUNNING
        assert status.live_steps == 3
        assert status.duration_s == 20.0
        assert status.started_at == 2.0
        assert session.deadline == 22.0

        session.stop(t=10.0, current_steps=9)
        status = session.status()
        assert status.state is CalibrationState.IDLE
        assert status.live_steps == 5
        assert status.started_at is None
