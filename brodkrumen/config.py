"""
Engine configuration with explicit units in field names.

Two frozen dataclasses hold every tunable of the engine:
    - StepDetectorParams: ring buffer, window and adaptive-threshold constants
    - EngineConfig: step length, smoothing factors, calibration and policies

Nothing is ever rejected. Step length and calibration duration
are clamped where they are used (see effective_step_length() and
effective_calibration_duration()), so a calibrated step length outside the
usual range is stored as-is and only bounded when a step is integrated.

Configuration files are plain JSON objects keyed by field name. Unknown keys
are ignored and values of the wrong type fall back to the default for that
field. Smoothing factors outside (0, 1] and detector buffer, window or
warm-up sizes below 1 cannot drive the filters, so they also fall back to
the default.
"""

import json
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Union

from brodkrumen.utils.angles import clamp

STEP_LENGTH_MIN_M = 0.3
STEP_LENGTH_MAX_M = 1.5
CALIBRATION_MIN_S = 5.0
CALIBRATION_MAX_S = 120.0
DEFAULT_CALIBRATION_S = 15.0

PAUSE_POLICIES = ("freeze", "track")


@dataclass(frozen=True)
class StepDetectorParams:
    """
    Constants of the streaming adaptive peak detector.

    Attributes:
        buffer_capacity: Ring buffer size (samples). Oldest evicted first.
        window: Number of most recent samples used for mean/std.
        warmup: Minimum buffered samples before detection runs.
        min_std_mps2: Window standard deviation below which the signal is
                      treated as stationary jitter (m/s²).
        min_threshold_offset_mps2: Lower bound of the threshold offset above
                                   the window mean (m/s²).
        min_rise_mps2: Minimum jump from the previous reference magnitude
                       for a rising edge to count (m/s²).
        refractory_s: Minimum time between two accepted steps (s).
    """

    buffer_capacity: int = 64
    window: int = 20
    warmup: int = 12
    min_std_mps2: float = 0.6
    min_threshold_offset_mps2: float = 0.7
    min_rise_mps2: float = 0.6
    refractory_s: float = 0.4


@dataclass(frozen=True)
class EngineConfig:
    """
    Dead-reckoning engine configuration.

    Attributes:
        step_length_m: Configured step length (m). Default 0.75.
                       Effective bound [0.3, 1.5], applied at point of use.
        heading_alpha: Smoothing factor of the wrap-aware heading filter.
        pitch_alpha: Smoothing factor of the pitch (tilt) filter.
        assumed_walking_speed_mps: Average walking speed assumed by the
                                   step-length calibration (m/s).
        calibration_duration_s: Default calibration duration (s).
                                Effective bound [5, 120].
        pause_policy: 'freeze' (paused steps move nothing) or 'track'
                      (paused steps still move position and altitude, but
                      not path or odometry). Default: freeze.
        altitude_snap_tolerance_m: Altitude within this distance of the 1 m
                                   baseline snaps to exactly 1 m. 0 disables.
        detector: Step detector constants.

    Example:
        >>> cfg = EngineConfig(step_length_m=2.0)
        >>> effective_step_length(cfg)
        1.5
    """

    step_length_m: float = 0.75
    heading_alpha: float = 0.15
    pitch_alpha: float = 0.15
    assumed_walking_speed_mps: float = 1.4
    calibration_duration_s: float = DEFAULT_CALIBRATION_S
    pause_policy: str = "freeze"
    altitude_snap_tolerance_m: float = 0.05
    detector: StepDetectorParams = field(default_factory=StepDetectorParams)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict suitable for json.dump()."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "EngineConfig":
        """
        Build a config from a (possibly partial or malformed) dict.

        Each field is taken from data when it has a usable value and falls
        back to its default otherwise, including smoothing factors outside
        (0, 1] and detector sizes below 1. Nothing is raised.
        """
        if not isinstance(data, dict):
            return cls()

        defaults = cls()
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "detector" or f.name not in data:
                continue
            default = getattr(defaults, f.name)
            if f.name == "pause_policy":
                if data[f.name] in PAUSE_POLICIES:
                    values[f.name] = data[f.name]
                continue
            number = _usable(f.name, data[f.name])
            if number is not None:
                values[f.name] = type(default)(number)

        detector_data = data.get("detector")
        if isinstance(detector_data, dict):
            values["detector"] = _detector_from_dict(detector_data)

        return cls(**values)

    def format_summary(self) -> str:
        """
        Human-readable summary for demo output.

        Example:
            >>> print(EngineConfig().format_summary())
            Engine configuration:
              Step length:     0.75 m (effective 0.75 m)
              Smoothing:       heading α=0.15, pitch α=0.15
              Calibration:     15 s at 1.40 m/s
              Pause policy:    freeze
        """
        lines = [
            "Engine configuration:",
            f"  Step length:     {self.step_length_m:.2f} m "
            f"(effective {effective_step_length(self):.2f} m)",
            f"  Smoothing:       heading α={self.heading_alpha:.2f}, "
            f"pitch α={self.pitch_alpha:.2f}",
            f"  Calibration:     "
            f"{effective_calibration_duration(self.calibration_duration_s):.0f} s "
            f"at {self.assumed_walking_speed_mps:.2f} m/s",
            f"  Pause policy:    {self.pause_policy}",
        ]
        return "\n".join(lines)


def _number_or_none(value: Any):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _is_smoothing_factor(value: float) -> bool:
    return 0 < value <= 1


def _is_count(value: float) -> bool:
    return value >= 1


# Values the filters and the ring buffer cannot run with
_FIELD_CHECKS = {
    "heading_alpha": _is_smoothing_factor,
    "pitch_alpha": _is_smoothing_factor,
    "buffer_capacity": _is_count,
    "window": _is_count,
    "warmup": _is_count,
}


def _usable(name: str, value: Any):
    number = _number_or_none(value)
    if number is None:
        return None
    check = _FIELD_CHECKS.get(name)
    if check is not None and not check(number):
        return None
    return number


def _detector_from_dict(data: Dict[str, Any]) -> StepDetectorParams:
    defaults = StepDetectorParams()
    values: Dict[str, Any] = {}
    for f in fields(StepDetectorParams):
        if f.name not in data:
            continue
        number = _usable(f.name, data[f.name])
        if number is not None:
            values[f.name] = type(getattr(defaults, f.name))(number)
    return StepDetectorParams(**values)


def effective_step_length(config: Union[EngineConfig, float]) -> float:
    """
    Step length actually used for integration, clamped to [0.3, 1.5] m.

    Args:
        config: EngineConfig or a raw step length in meters.

    Returns:
        Clamped step length in meters. Non-finite input gives the default.
    """
    raw = config.step_length_m if isinstance(config, EngineConfig) else config
    number = _number_or_none(raw)
    if number is None:
        number = EngineConfig.step_length_m
    return clamp(number, STEP_LENGTH_MIN_M, STEP_LENGTH_MAX_M)


def effective_calibration_duration(duration_s: Any) -> float:
    """
    Calibration duration clamped to [5, 120] s; unusable input gives 15 s.
    """
    number = _number_or_none(duration_s)
    if number is None:
        number = DEFAULT_CALIBRATION_S
    return clamp(number, CALIBRATION_MIN_S, CALIBRATION_MAX_S)


def load_config(path: Union[str, Path]) -> EngineConfig:
    """
    Load an EngineConfig from a JSON file.

    A missing or unreadable file gives the default configuration, the same
    way a missing dataset config.json is treated by the demos.

    Args:
        path: Path to a JSON object with EngineConfig field names as keys.

    Returns:
        EngineConfig with defaults for any field not usable in the file.
    """
    config_path = Path(path)
    if not config_path.exists():
        return EngineConfig()
    try:
        with open(config_path) as f:
            data = json.load(f)
    except (OSError, ValueError):
        return EngineConfig()
    return EngineConfig.from_dict(data)


def save_config(config: EngineConfig, path: Union[str, Path]) -> None:
    """Write an EngineConfig as an indented JSON object."""
    with open(Path(path), "w") as f:
        json.dump(config.to_dict(), f, indent=2)
