"""
Data structures for motion and orientation sensor input.

This module defines the shared value types consumed by the step detector,
the orientation filters and the engine:
    - Acceleration-magnitude samples held in the ring buffer
    - Motion samples (3-axis acceleration including gravity)
    - Orientation samples (compass heading and forward/back tilt)
    - Step events emitted by the detector

Device sensor payloads are loosely typed: fields may be missing, null or
NaN depending on the platform. Everything is normalized here, at the
boundary, into fixed-shape frozen dataclasses. Heading and pitch use None
as the explicit "absent" variant so integration code never has to do ad hoc
presence checks.

Time Base Convention:
    All timestamps are float seconds on a monotonic clock.

Angle Conventions:
    - Heading: degrees, 0 = North, clockwise, [0, 360)
    - Pitch: degrees at the boundary (device beta), radians after filtering
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np


def _finite_or_none(value: Any) -> Optional[float]:
    """Return value as float if it is a finite number, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class AccelSample:
    """
    Timestamped acceleration magnitude held in the sampler ring buffer.

    Attributes:
        t: Timestamp in seconds (monotonic).
        magnitude: Acceleration magnitude ||a|| including gravity. Units: m/s².
    """

    t: float
    magnitude: float


@dataclass(frozen=True)
class MotionSample:
    """
    Single accelerometer reading from the motion stream.

    Attributes:
        accel: Acceleration including gravity in the device frame.
               Shape: (3,). Units: m/s².
        t: Timestamp in seconds (monotonic).

    Notes:
        - Only the magnitude is used for step detection, which removes the
          dependence on device orientation.
        - Use from_components() for raw platform payloads where axes may
          be missing.

    Example:
        >>> sample = MotionSample.from_components(0.0, 0.0, 9.81, t=0.02)
        >>> round(sample.magnitude, 2)
        9.81
    """

    accel: np.ndarray
    t: float

    def __post_init__(self) -> None:
        """Validate the acceleration vector shape."""
        if self.accel.shape != (3,):
            raise ValueError(
                f"MotionSample.accel must have shape (3,), got {self.accel.shape}"
            )

    @property
    def magnitude(self) -> float:
        """Acceleration magnitude ||a|| = sqrt(ax² + ay² + az²)."""
        return float(np.linalg.norm(self.accel))

    @classmethod
    def from_components(cls, x: Any, y: Any, z: Any, t: float) -> "MotionSample":
        """
        Build a sample from possibly missing axis values.

        Missing or non-finite components are treated as 0, as device motion
        events may deliver partial vectors.
        """
        components = [_finite_or_none(v) or 0.0 for v in (x, y, z)]
        return cls(accel=np.array(components, dtype=float), t=float(t))


@dataclass(frozen=True)
class OrientationSample:
    """
    Orientation reading from the compass/tilt stream.

    Attributes:
        heading_deg: Compass heading in degrees (0 = North, clockwise), or
                     None when the platform did not provide one.
        pitch_deg: Forward/back tilt in degrees, or None when absent.
                   Typically device beta in [-180, 180].

    Example:
        >>> OrientationSample(heading_deg=float('nan'), pitch_deg=12.0).heading_deg is None
        True
    """

    heading_deg: Optional[float] = None
    pitch_deg: Optional[float] = None

    def __post_init__(self) -> None:
        """Normalize non-finite readings to the absent variant."""
        object.__setattr__(self, "heading_deg", _finite_or_none(self.heading_deg))
        object.__setattr__(self, "pitch_deg", _finite_or_none(self.pitch_deg))

    @property
    def has_heading(self) -> bool:
        return self.heading_deg is not None

    @property
    def has_pitch(self) -> bool:
        return self.pitch_deg is not None

    @classmethod
    def from_device_orientation(
        cls,
        alpha: Any = None,
        beta: Any = None,
        compass_heading: Any = None,
    ) -> "OrientationSample":
        """
        Map a device-orientation event to an orientation sample.

        A native compass heading (0 = North, clockwise) is preferred. Without
        it the heading falls back to 360 - alpha, since alpha rotates
        counter-clockwise. This fallback is not reliable on every device.

        Args:
            alpha: Rotation about the vertical axis in degrees, or None.
            beta: Front/back tilt in degrees, or None.
            compass_heading: Native compass heading in degrees, or None.

        Returns:
            Normalized OrientationSample.
        """
        heading = _finite_or_none(compass_heading)
        if heading is None:
            alpha_value = _finite_or_none(alpha)
            heading = None if alpha_value is None else 360.0 - alpha_value
        return cls(heading_deg=heading, pitch_deg=_finite_or_none(beta))


@dataclass(frozen=True)
class StepEvent:
    """
    Step detected by the streaming step detector.

    Attributes:
        t: Timestamp of the sample that fired the step (seconds).
        magnitude: Acceleration magnitude at the step. Units: m/s².
        threshold: Adaptive threshold in effect when the step fired. Units: m/s².
    """

    t: float
    magnitude: float
    threshold: float
