"""
Motion and orientation sensor processing.

This package turns raw device sensor streams into the two inputs of
step-and-heading dead reckoning: discrete step events and a smoothed heading
(plus a smoothed tilt used as an altitude proxy).

Modules:
    types: Normalized sensor value types (motion, orientation, step events)
    step_detection: Ring buffer and adaptive-threshold streaming step detector
    orientation: Wrap-aware heading filter and pitch filter
    offline: Batch step detection over recorded sessions

Design principles:
    - Sensor payloads are normalized at the boundary; absent heading or
      pitch is an explicit None
    - Dataclasses are frozen (immutable) for sensor packets
    - Filters and detectors are small stateful classes updated per sample
    - Timestamps are float seconds on a monotonic clock

Example:
    >>> from brodkrumen.sensors import (
    ...     HeadingFilter, MotionSample, OrientationSample, StepDetector,
    ... )
    >>> detector = StepDetector()
    >>> heading = HeadingFilter()
    >>> heading.update(OrientationSample(heading_deg=355.0).heading_deg)
    355.0
    >>> detector.update(MotionSample.from_components(0.0, 0.0, 9.81, t=0.0)) is None
    True
"""

from brodkrumen.sensors.types import (
    AccelSample,
    MotionSample,
    OrientationSample,
    StepEvent,
)

from brodkrumen.sensors.step_detection import (
    AccelerationSampler,
    StepDetector,
)

from brodkrumen.sensors.orientation import (
    HeadingFilter,
    PitchFilter,
    smooth_measurement,
)

from brodkrumen.sensors.offline import (
    accel_magnitudes,
    detect_steps_streaming,
    detect_steps_batch,
)

__all__ = [
    # Data types
    "AccelSample",
    "MotionSample",
    "OrientationSample",
    "StepEvent",
    # Step detection
    "AccelerationSampler",
    "StepDetector",
    # Orientation filters
    "HeadingFilter",
    "PitchFilter",
    "smooth_measurement",
    # Offline processing
    "accel_magnitudes",
    "detect_steps_streaming",
    "detect_steps_batch",
]
