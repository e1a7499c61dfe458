"""
Streaming step detection from acceleration magnitude.

This module implements the real-time half of step-and-heading pedestrian
dead reckoning:
    - Acceleration magnitude buffering (bounded ring buffer)
    - Adaptive peak detection with a refractory period

The detector runs once per motion sample on the most recent window of the
buffer:

    μ = mean(window),  σ = std(window)           (population std)
    σ < σ_min                  → stationary jitter, no step
    τ = μ + max(τ_min, σ)      adaptive threshold
    step  ⇔  a_prev ≤ τ  ∧  a_k > τ  ∧  a_k - a_ref > Δ_min  ∧  t_k - t_last > T_r

Unlike the batch peak finder in brodkrumen.sensors.offline, nothing here looks
ahead: a step fires on the rising edge of the sample that crosses the
threshold, which is what a live trail needs.

Defaults (see StepDetectorParams):
    capacity 64, window 20, warm-up 12 samples, σ_min = 0.6 m/s²,
    τ_min = 0.7 m/s², Δ_min = 0.6 m/s², T_r = 0.4 s.
"""

from collections import deque
from typing import Optional

import numpy as np

from brodkrumen.config import StepDetectorParams
from brodkrumen.sensors.types import AccelSample, MotionSample, StepEvent


class AccelerationSampler:
    """
    Bounded ring buffer of timestamped acceleration magnitudes.

    Attributes:
        capacity: Maximum number of buffered samples. When exceeded, the
                  oldest sample is evicted.

    Example:
        >>> sampler = AccelerationSampler(capacity=3)
        >>> for k in range(5):
        ...     sampler.append(AccelSample(t=0.02 * k, magnitude=9.8 + k))
        >>> sampler.window(3)
        array([11.8, 12.8, 13.8])
    """

    def __init__(self, capacity: int = 64):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, sample: AccelSample) -> None:
        self._samples.append(sample)

    def latest(self) -> Optional[AccelSample]:
        return self._samples[-1] if self._samples else None

    def window(self, n: int) -> np.ndarray:
        """Magnitudes of the n most recent samples, oldest first."""
        recent = list(self._samples)[-n:] if n > 0 else []
        return np.array([s.magnitude for s in recent], dtype=float)

    def clear(self) -> None:
        self._samples.clear()


class StepDetector:
    """
    Adaptive-threshold rising-edge step detector.

    Consumes motion samples one at a time, buffers their magnitude and
    returns a StepEvent when a step fires.

    State:
        last_step_time: Time of the last accepted step (None before the
                        first one; the first step skips the refractory check).
        last_above: Whether the previous evaluated sample was above threshold.
        last_magnitude: Reference magnitude for the rising-edge jump test.

    Notes:
        - Samples rejected by the warm-up gate or as stationary jitter leave
          last_above and last_magnitude untouched.
        - A sample that crosses the threshold inside the refractory period
          still updates last_above, so a long peak cannot fire twice.

    Example:
        >>> import numpy as np
        >>> detector = StepDetector()
        >>> events = []
        >>> for k in range(100):
        ...     mag = 14.0 if k % 25 == 0 and k >= 25 else 10.0
        ...     sample = MotionSample(np.array([0.0, 0.0, mag]), t=0.02 * k)
        ...     event = detector.update(sample)
        ...     if event is not None:
        ...         events.append(event.t)
        >>> len(events)
        3
    """

    def __init__(self, params: Optional[StepDetectorParams] = None):
        self.params = params if params is not None else StepDetectorParams()
        self.sampler = AccelerationSampler(self.params.buffer_capacity)
        self.last_step_time: Optional[float] = None
        self.last_above = False
        self.last_magnitude = 0.0

    def update(self, sample: MotionSample) -> Optional[StepEvent]:
        """
        Buffer a motion sample and run detection on it.

        Args:
            sample: Motion sample (acceleration including gravity).

        Returns:
            StepEvent if this sample fired a step, otherwise None.
        """
        self.sampler.append(AccelSample(t=sample.t, magnitude=sample.magnitude))
        return self.detect()

    def detect(self) -> Optional[StepEvent]:
        """
        Evaluate the most recent buffered sample.

        Returns:
            StepEvent if a step fires, otherwise None.
        """
        p = self.params
        if len(self.sampler) < p.warmup:
            return None

        recent = self.sampler.window(p.window)
        mean = float(np.mean(recent))
        std = float(np.std(recent))
        if std < p.min_std_mps2:
            return None

        threshold = mean + max(p.min_threshold_offset_mps2, std)
        last = self.sampler.latest()
        above = last.magnitude > threshold
        rising_edge = (
            not self.last_above
            and above
            and (last.magnitude - self.last_magnitude) > p.min_rise_mps2
        )
        self.last_above = above

        if rising_edge and self._outside_refractory(last.t):
            self.last_step_time = last.t
            self.last_magnitude = last.magnitude
            return StepEvent(t=last.t, magnitude=last.magnitude, threshold=threshold)

        self.last_magnitude = last.magnitude
        return None

    def _outside_refractory(self, t: float) -> bool:
        if self.last_step_time is None:
            return True
        return (t - self.last_step_time) > self.params.refractory_s

    def reset(self) -> None:
        """Drop buffered samples and detection state."""
        self.sampler.clear()
        self.last_step_time = None
        self.last_above = False
        self.last_magnitude = 0.0
