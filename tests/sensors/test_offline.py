"""
Unit tests for brodkrumen/sensors/offline.py (batch step detection).

Tests cover:
    - Magnitude of an accelerometer series
    - Replaying a recording through the streaming detector
    - Look-ahead peak detection with scipy
    - Input validation

Run with: pytest tests/sensors/test_offline.py -v
"""

import unittest
import numpy as np
import pytest

from brodkrumen.sensors.offline import (
    accel_magnitudes,
    detect_steps_batch,
    detect_steps_streaming,
)

DT = 0.02  # 50 Hz


def _spike_series(n: int, spike_indices):
    t = np.arange(n) * DT
    accel = np.zeros((n, 3))
    accel[:, 2] = 10.0
    accel[spike_indices, 2] = 14.0
    return t, accel


class TestAccelMagnitudes(unittest.TestCase):
    """Test suite for accel_magnitudes."""

    def test_magnitudes(self) -> None:
        accel = np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 9.81]])
        np.testing.assert_allclose(accel_magnitudes(accel), [5.0, 9.81])

    def test_invalid_shape(self) -> None:
        with pytest.raises(ValueError, match=r"\(N, 3\)"):
            accel_magnitudes(np.zeros((10, 2)))


class TestDetectStepsStreaming(unittest.TestCase):
    """Test suite for replaying recordings through the live detector."""

    def test_spikes_detected(self) -> None:
        """Spikes every 0.5 s after warm-up are all found."""
        spikes = list(range(30, 300, 25))
        t, accel = _spike_series(300, spikes)

        indices = detect_steps_streaming(t, accel)

        np.testing.assert_array_equal(indices, spikes)

    def test_stationary_gives_no_steps(self) -> None:
        t, accel = _spike_series(200, [])
        assert len(detect_steps_streaming(t, accel)) == 0

    def test_mismatched_lengths(self) -> None:
        t, accel = _spike_series(50, [])
        with pytest.raises(ValueError, match="t must have shape"):
            detect_steps_streaming(t[:-1], accel)


class TestDetectStepsBatch(unittest.TestCase):
    """Test suite for the look-ahead peak detector."""

    def test_sinusoidal_walk(self) -> None:
        """A 2 Hz gait oscillation over 10 s gives about 20 peaks."""
        t = np.arange(0.0, 10.0, DT)
        accel = np.zeros((len(t), 3))
        accel[:, 2] = 9.81 + 2.0 * np.sin(2 * np.pi * 2.0 * t)

        indices, processed = detect_steps_batch(t, accel)

        assert processed.shape == t.shape
        assert 19 <= len(indices) <= 20
        assert np.isclose(np.median(np.diff(t[indices])), 0.5, atol=0.05)

    def test_minimum_spacing_enforced(self) -> None:
        """Peaks closer than min_peak_distance are merged."""
        t, accel = _spike_series(200, [50, 55, 150])

        indices, _ = detect_steps_batch(t, accel, lowpass_cutoff=None)

        assert len(indices) == 2
        assert indices[-1] == 150

    def test_too_short_series(self) -> None:
        indices, processed = detect_steps_batch(np.array([0.0]), np.zeros((1, 3)))

        assert len(indices) == 0
        assert processed.shape == (1,)

    def test_invalid_peak_distance(self) -> None:
        t, accel = _spike_series(50, [])
        with pytest.raises(ValueError, match="min_peak_distance"):
            detect_steps_batch(t, accel, min_peak_distance=0.0)
