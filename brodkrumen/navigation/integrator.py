"""
Step-and-heading position integration with an altitude proxy.

On every accepted step the integrator advances the 2D position by one step
length in the direction of the current smoothed compass heading:

    ψ  = heading · π/180
    Δx =  sin(ψ) · s          (East)
    Δy = -cos(ψ) · s          (y grows southward, so North is -y)
    p_k = p_{k-1} + [Δx, Δy]

so a step heading north (ψ = 0) moves by (0, -s) and a step heading east
(ψ = 90°) moves by (s, 0).

Altitude is estimated from the smoothed device pitch p. When the device is
tilted by more than ~10° (|p| > 0.17 rad) each step climbs or descends:

    Δz = clamp(s · sin(p), -0.8 s, 0.8 s)

starting from a 1 m baseline. Values within a small tolerance of the
baseline snap back to exactly 1 m, which damps the slow drift from
alternating small tilts.

The step length is clamped to [0.3, 1.5] m here, at the point of use, no
matter what was configured or calibrated.

Frame Conventions:
    - Local plane, origin = start point, x = East, y = South (meters)
    - Heading and bearings: degrees, 0 = North, clockwise
"""

import math
from typing import List, Optional, Tuple

import numpy as np

from brodkrumen.config import effective_step_length
from brodkrumen.navigation.return_vector import ReturnVector, compute_return_vector
from brodkrumen.utils.angles import clamp, compass_bearing

ALTITUDE_BASELINE_M = 1.0
ALTITUDE_MIN_PITCH_RAD = 0.17
ALTITUDE_MAX_CLIMB_RATIO = 0.8


def step_displacement(step_len: float, heading_deg: float) -> np.ndarray:
    """
    Displacement of one step in the local plane.

    Args:
        step_len: Step length. Units: m.
        heading_deg: Compass heading (0 = North, clockwise). Units: degrees.

    Returns:
        Displacement [Δx, Δy]. Shape: (2,). Units: m.

    Example:
        >>> step_displacement(0.7, 0.0)  # north
        array([ 0. , -0.7])
    """
    rad = math.radians(heading_deg)
    return np.array([math.sin(rad) * step_len, -math.cos(rad) * step_len])


def altitude_step(
    altitude_m: float,
    step_len: float,
    pitch_rad: float,
    snap_tolerance_m: float = 0.05,
) -> float:
    """
    Update the altitude proxy for one step.

    Args:
        altitude_m: Current altitude estimate. Units: m.
        step_len: Step length actually walked. Units: m.
        pitch_rad: Smoothed device pitch. Units: radians.
        snap_tolerance_m: Snap to the 1 m baseline when closer than this.
                          0 disables snapping.

    Returns:
        New altitude estimate. Unchanged when |pitch| ≤ 0.17 rad.

    Example:
        >>> round(altitude_step(1.0, 0.75, math.radians(30.0)), 3)
        1.375
    """
    if abs(pitch_rad) <= ALTITUDE_MIN_PITCH_RAD:
        return altitude_m

    limit = ALTITUDE_MAX_CLIMB_RATIO * step_len
    dz = clamp(step_len * math.sin(pitch_rad), -limit, limit)
    altitude_m += dz
    if abs(altitude_m - ALTITUDE_BASELINE_M) < snap_tolerance_m:
        altitude_m = ALTITUDE_BASELINE_M
    return altitude_m


class PositionIntegrator:
    """
    Owns the trail: position, path, odometry, altitude and return vector.

    The path is a flat, append-only list of segment endpoints. After start()
    it holds only the origin; every integrated step appends the pair
    (position before, position after).

    Attributes:
        origin_set: Whether a start point has been set.
        position: Current position [x, y] in meters.
        path: Segment endpoints, oldest first.
        total_distance: Sum of integrated step lengths [m].
        step_count: Number of integrated steps.
        altitude_m: Altitude proxy [m]; 1.0 at start, 0.0 when cleared.
        movement_bearing_deg: Bearing of the last step displacement, or None.
        last_step_time: Timestamp of the last step that moved the position.
        return_vector: Distance and bearing back to the origin.
    """

    def __init__(self, snap_tolerance_m: float = 0.05):
        self.snap_tolerance_m = snap_tolerance_m
        self.clear()

    def clear(self) -> None:
        """Drop the trail entirely (no origin)."""
        self.origin_set = False
        self.position = np.zeros(2)
        self.path: List[np.ndarray] = []
        self.total_distance = 0.0
        self.step_count = 0
        self.altitude_m = 0.0
        self.movement_bearing_deg: Optional[float] = None
        self.last_step_time: Optional[float] = None
        self.return_vector = ReturnVector()

    def start(self) -> None:
        """Set the start point at the current location."""
        self.clear()
        self.origin_set = True
        self.path = [np.zeros(2)]
        self.altitude_m = ALTITUDE_BASELINE_M

    def advance(
        self,
        step_len: float,
        heading_deg: Optional[float],
        pitch_rad: float = 0.0,
        paused: bool = False,
        pause_policy: str = "freeze",
        t: Optional[float] = None,
    ) -> np.ndarray:
        """
        Integrate one step.

        Args:
            step_len: Configured step length [m]; clamped to [0.3, 1.5].
            heading_deg: Smoothed heading in degrees, or None (treated as
                         North until the compass delivers a reading).
            pitch_rad: Smoothed pitch in radians.
            paused: Whether tracking is paused.
            pause_policy: 'freeze' ignores paused steps entirely; 'track'
                          keeps moving position and altitude while path and
                          odometry stand still.
            t: Step timestamp in seconds (optional, for display helpers).

        Returns:
            Current position after the step. Shape: (2,).
        """
        if paused and pause_policy == "freeze":
            return self.position.copy()

        s = effective_step_length(step_len)
        heading = 0.0 if heading_deg is None else heading_deg
        delta = step_displacement(s, heading)
        new_position = self.position + delta

        self.movement_bearing_deg = compass_bearing(delta[0], delta[1])

        if not paused:
            self.path.append(self.position.copy())
            self.path.append(new_position.copy())
            self.total_distance += s
            self.step_count += 1

        self.position = new_position
        self.last_step_time = t

        self.altitude_m = altitude_step(
            self.altitude_m, s, pitch_rad, self.snap_tolerance_m
        )
        self.return_vector = compute_return_vector(self.position)
        return self.position.copy()

    def segments(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        """Path as (start, end) pairs, skipping the leading origin point."""
        points = self.path[1:] if len(self.path) % 2 == 1 else self.path
        return [(points[i], points[i + 1]) for i in range(0, len(points) - 1, 2)]

    def restore(
        self,
        origin_set: bool,
        position: np.ndarray,
        path: List[np.ndarray],
        total_distance: float,
        step_count: int,
        altitude_m: float,
    ) -> None:
        """Rehydrate the trail from persisted values."""
        self.clear()
        self.origin_set = origin_set
        self.position = np.array(position, dtype=float)
        self.path = [np.array(p, dtype=float) for p in path]
        self.total_distance = float(total_distance)
        self.step_count = int(step_count)
        self.altitude_m = float(altitude_m)
        self.return_vector = compute_return_vector(self.position)
