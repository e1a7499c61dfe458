"""
Persisted-state record of a tracking session.

The engine does not read or write storage itself. It defines the record a
host saves between runs and rehydrates position, path, odometry, altitude
and return vector from it:

    {
      "path": [{"x": 0.0, "y": 0.0}, ...],
      "originSet": true,
      "currentPosition": {"x": 1.2, "y": -3.4},
      "totalDistance": 12.75,
      "stepCount": 17,
      "backToStart": {"distance": 3.6, "bearingDeg": 340.6},
      "altitudeMeters": 1.0
    }

Heading filter, pitch filter and calibration state are deliberately not part
of the record; they start fresh with every process.

Restoring never fails. Each field that is missing or malformed falls back to
its own default (empty path, origin unset, position (0, 0), zero distance and
steps, zero altitude) and the defaulted fields are reported with a
RuntimeWarning. Records written by older versions stored the path under
"pathPoints"; that key is still accepted.
"""

import json
import math
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from brodkrumen.navigation.return_vector import ReturnVector


def _point_to_dict(p: np.ndarray) -> Dict[str, float]:
    return {"x": float(p[0]), "y": float(p[1])}


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _point_from_dict(data: Any) -> Optional[np.ndarray]:
    if not isinstance(data, dict):
        return None
    x = _finite(data.get("x"))
    y = _finite(data.get("y"))
    if x is None or y is None:
        return None
    return np.array([x, y])


@dataclass
class PersistedState:
    """
    Snapshot of the trail for external save/restore.

    Attributes:
        path: Segment endpoints, oldest first. Each shape (2,), meters.
        origin_set: Whether a start point was set.
        current_position: Position [x, y] in meters. Shape (2,).
        total_distance: Odometry distance [m].
        step_count: Odometry step count.
        back_to_start: Return vector at save time.
        altitude_m: Altitude proxy [m].
    """

    path: List[np.ndarray] = field(default_factory=list)
    origin_set: bool = False
    current_position: np.ndarray = field(default_factory=lambda: np.zeros(2))
    total_distance: float = 0.0
    step_count: int = 0
    back_to_start: ReturnVector = field(default_factory=ReturnVector)
    altitude_m: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Wire record with the persisted key names."""
        return {
            "path": [_point_to_dict(p) for p in self.path],
            "originSet": bool(self.origin_set),
            "currentPosition": _point_to_dict(self.current_position),
            "totalDistance": float(self.total_distance),
            "stepCount": int(self.step_count),
            "backToStart": self.back_to_start.to_dict(),
            "altitudeMeters": float(self.altitude_m),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> "PersistedState":
        """
        Parse a wire record, defaulting each malformed field independently.

        Args:
            data: Decoded record (normally a dict).

        Returns:
            PersistedState. Never raises; emits a RuntimeWarning naming the
            fields that had to be defaulted.
        """
        if not isinstance(data, dict):
            warnings.warn(
                f"Persisted state is not an object ({type(data).__name__}); "
                f"starting from defaults",
                RuntimeWarning,
            )
            return cls()

        state = cls()
        defaulted = []

        raw_path = data["path"] if "path" in data else data.get("pathPoints")
        points = None
        if isinstance(raw_path, list):
            points = [_point_from_dict(p) for p in raw_path]
        if points is not None and all(p is not None for p in points):
            state.path = points
        else:
            defaulted.append("path")

        if isinstance(data.get("originSet"), bool):
            state.origin_set = data["originSet"]
        else:
            defaulted.append("originSet")

        position = _point_from_dict(data.get("currentPosition"))
        if position is not None:
            state.current_position = position
        else:
            defaulted.append("currentPosition")

        total_distance = _finite(data.get("totalDistance"))
        if total_distance is not None and total_distance >= 0:
            state.total_distance = total_distance
        else:
            defaulted.append("totalDistance")

        step_count = _finite(data.get("stepCount"))
        if step_count is not None and step_count >= 0:
            state.step_count = int(step_count)
        else:
            defaulted.append("stepCount")

        if isinstance(data.get("backToStart"), dict):
            state.back_to_start = ReturnVector.from_dict(data["backToStart"])
        else:
            defaulted.append("backToStart")

        altitude = _finite(data.get("altitudeMeters"))
        if altitude is not None:
            state.altitude_m = altitude
        else:
            defaulted.append("altitudeMeters")

        if defaulted:
            warnings.warn(
                f"Persisted state fields defaulted: {', '.join(defaulted)}",
                RuntimeWarning,
            )
        return state

    @classmethod
    def from_json(cls, text: str) -> "PersistedState":
        """Parse a JSON record; unparseable text gives the default state."""
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            warnings.warn(
                "Persisted state is not valid JSON; starting from defaults",
                RuntimeWarning,
            )
            return cls()
        return cls.from_dict(data)
