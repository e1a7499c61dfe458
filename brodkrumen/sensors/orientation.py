"""
Heading and tilt smoothing filters.

Both filters are first-order low-pass filters (exponential moving average):

    x_k = x_{k-1} + α (z_k - x_{k-1})

Compass heading is a circular quantity, so the innovation z_k - x_{k-1} is
wrapped into (-180°, 180°] before it is applied. Without this, a heading
that crosses north (e.g. 355° → 5°) would be pulled the long way round
through 180°.

Pitch (forward/back tilt) is bounded to [-90°, 90°] before filtering, so no
wrap handling is needed. It is filtered in radians and used downstream as an
altitude proxy (walking up or down a slope tilts the device).

Both filters live for the whole process and are independent of start point
and reset: the compass keeps settling whether or not a trail is recorded.
"""

import math
from typing import Optional

from brodkrumen.utils.angles import angle_diff_deg, clamp, normalize_deg


def smooth_measurement(x_prev: float, z: float, alpha: float) -> float:
    """
    Exponential smoothing of a scalar measurement.

        x_k = (1 - α) x_{k-1} + α z_k

    Args:
        x_prev: Previous smoothed estimate.
        z: Current raw measurement (same units as x_prev).
        alpha: Smoothing factor in (0, 1]. Small α → heavy smoothing.

    Returns:
        Smoothed estimate x_k.
    """
    if not (0 < alpha <= 1):
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")
    return x_prev + alpha * (z - x_prev)


class HeadingFilter:
    """
    Wrap-aware exponential smoothing of compass heading.

    The first valid sample seeds the filter directly. Every later sample
    moves the estimate by α times the shortest signed difference. Absent
    samples (None) leave the state unchanged.

    Attributes:
        alpha: Smoothing factor. Default: 0.15.
        value: Smoothed heading in [0, 360), or None before the first sample.

    Example:
        >>> f = HeadingFilter()
        >>> [round(f.update(h), 2) for h in (350.0, 355.0, 5.0, 10.0)]
        [350.0, 350.75, 352.89, 355.45]
    """

    def __init__(self, alpha: float = 0.15):
        if not (0 < alpha <= 1):
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.value: Optional[float] = None

    def update(self, heading_deg: Optional[float]) -> Optional[float]:
        """
        Feed one raw heading.

        Args:
            heading_deg: Raw compass heading in degrees (any range), or None.

        Returns:
            Smoothed heading in [0, 360), or None if never seeded.
        """
        if heading_deg is None or not math.isfinite(heading_deg):
            return self.value

        raw = normalize_deg(heading_deg)
        if self.value is None:
            self.value = raw
            return self.value

        diff = angle_diff_deg(raw, self.value)
        self.value = normalize_deg(self.value + self.alpha * diff)
        return self.value

    def reset(self) -> None:
        self.value = None


class PitchFilter:
    """
    Exponential smoothing of device forward/back tilt.

    Raw tilt is clamped to [-90°, 90°], converted to radians and smoothed.
    The estimate starts at 0 rad (level device).

    Attributes:
        alpha: Smoothing factor. Default: 0.15.
        value: Smoothed pitch in radians, within [-π/2, π/2].

    Example:
        >>> f = PitchFilter()
        >>> round(f.update(120.0), 4)  # clamped to 90°
        0.2356
    """

    def __init__(self, alpha: float = 0.15):
        if not (0 < alpha <= 1):
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.value = 0.0

    def update(self, pitch_deg: Optional[float]) -> float:
        """
        Feed one raw tilt reading.

        Args:
            pitch_deg: Forward/back tilt in degrees, or None.

        Returns:
            Smoothed pitch in radians.
        """
        if pitch_deg is None or not math.isfinite(pitch_deg):
            return self.value
        pitch_rad = math.radians(clamp(pitch_deg, -90.0, 90.0))
        self.value = smooth_measurement(self.value, pitch_rad, self.alpha)
        return self.value

    def reset(self) -> None:
        self.value = 0.0
