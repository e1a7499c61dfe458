"""
Return-to-start vector.

After every position update the engine recomputes the distance and bearing
from the current position back to the fixed origin (0, 0):

    d = -p
    distance = ||d||
    bearing  = (90° - atan2(d_y, d_x)) mod 360

The bearing uses the screen-angle form on the raw (x, y) components, so it
is the value stored as backToStart.bearingDeg in persisted records. With
y growing southward it is north/south mirrored with respect to the
movement bearing of each step (compass_bearing()).

At the origin itself the direction is undefined and the bearing is 0.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

import numpy as np

from brodkrumen.utils.angles import normalize_deg


@dataclass(frozen=True)
class ReturnVector:
    """
    Distance and compass bearing from the current position to the origin.

    Attributes:
        distance: Euclidean distance to the origin [m].
        bearing_deg: Bearing 90° - atan2(d_y, d_x) in [0, 360).
    """

    distance: float = 0.0
    bearing_deg: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"distance": float(self.distance), "bearingDeg": float(self.bearing_deg)}

    @classmethod
    def from_dict(cls, data: Any) -> "ReturnVector":
        if not isinstance(data, dict):
            return cls()
        distance = _as_float(data.get("distance"))
        bearing = _as_float(data.get("bearingDeg"))
        return cls(distance=distance, bearing_deg=normalize_deg(bearing))


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def compute_return_vector(position: np.ndarray) -> ReturnVector:
    """
    Vector from the current position back to the origin.

    Args:
        position: Current position [x, y] in the local plane (x = East,
                  y = South). Shape: (2,). Units: m.

    Returns:
        ReturnVector with distance [m] and bearing [deg].

    Example:
        >>> # 3 m east and 4 m north of the start
        >>> rv = compute_return_vector(np.array([3.0, -4.0]))
        >>> rv.distance
        5.0
        >>> round(rv.bearing_deg, 2)
        323.13
    """
    position = np.asarray(position, dtype=float)
    if position.shape != (2,):
        raise ValueError(f"position must have shape (2,), got {position.shape}")

    d = -position
    distance = float(np.hypot(d[0], d[1]))
    if distance == 0.0:
        return ReturnVector(distance=0.0, bearing_deg=0.0)

    bearing = normalize_deg(90.0 - math.degrees(math.atan2(d[1], d[0])))
    return ReturnVector(distance=distance, bearing_deg=bearing)
