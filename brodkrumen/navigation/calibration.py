"""
Timed step-length calibration.

The user walks normally for a fixed time while the step detector keeps
counting. Assuming an average walking speed v, the distance covered is
v · T and the step length follows as

    L = v · T / n

where T is the elapsed time in whole seconds (at least 1) and n the number
of steps observed during the session. With n = 0 nothing is learned and the
previous step length is kept.

The session is a two-state machine, Idle → Running → Idle. It stops either
manually or automatically once its duration has elapsed. There is no
independent timer: the engine calls poll() with the timestamp of every
incoming event, and the automatic stop is evaluated against that clock.
Whichever stop path runs first returns the session to Idle, which turns the
other into a no-op.

The calibrated value is not clamped. A result outside [0.3, 1.5] m is stored
as-is and only bounded when a step is integrated.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from brodkrumen.config import DEFAULT_CALIBRATION_S, effective_calibration_duration


class CalibrationState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class CalibrationResult:
    """
    Outcome of a finished calibration session.

    Attributes:
        observed_steps: Steps detected while the session was running.
        elapsed_s: Elapsed time in whole seconds (≥ 1).
        step_length_m: Derived step length, or None when no steps were seen.
        automatic: True when the session stopped because its duration elapsed.
    """

    observed_steps: int
    elapsed_s: int
    step_length_m: Optional[float]
    automatic: bool = False


@dataclass(frozen=True)
class CalibrationStatus:
    """Read-only view of a session for snapshots."""

    state: CalibrationState
    live_steps: int
    duration_s: float
    started_at: Optional[float]


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for x ≥ 0."""
    return int(math.floor(x + 0.5))


def calibrated_step_length(
    observed_steps: int,
    elapsed_s: float,
    walking_speed_mps: float = 1.4,
) -> Optional[float]:
    """
    Step length from a timed walk at an assumed speed.

    Args:
        observed_steps: Number of steps counted.
        elapsed_s: Walking time. Units: s.
        walking_speed_mps: Assumed average speed. Units: m/s. Default: 1.4.

    Returns:
        Step length in meters, or None when no steps were counted or the
        speed is not a finite number.

    Example:
        >>> calibrated_step_length(12, 15)
        1.75
    """
    if observed_steps <= 0 or not math.isfinite(walking_speed_mps):
        return None
    return walking_speed_mps * elapsed_s / observed_steps


class CalibrationSession:
    """
    Step-length calibration state machine.

    Attributes:
        state: CalibrationState.IDLE or CalibrationState.RUNNING.
        start_step_count: Detector step count when the session started.
        start_time: Session start time in seconds.
        duration_s: Clamped session duration in seconds.
        live_steps: Steps observed so far in the running session.
        walking_speed_mps: Assumed average walking speed.
        last_result: Result of the most recent finished session.

    Example:
        >>> session = CalibrationSession()
        >>> session.start(t=100.0, current_steps=10)
        True
        >>> session.stop(t=115.0, current_steps=22).step_length_m
        1.75
    """

    def __init__(self, walking_speed_mps: float = 1.4):
        self.walking_speed_mps = walking_speed_mps
        self.state = CalibrationState.IDLE
        self.start_step_count = 0
        self.start_time: Optional[float] = None
        self.duration_s = DEFAULT_CALIBRATION_S
        self.live_steps = 0
        self.last_result: Optional[CalibrationResult] = None

    @property
    def running(self) -> bool:
        return self.state is CalibrationState.RUNNING

    @property
    def deadline(self) -> Optional[float]:
        if not self.running or self.start_time is None:
            return None
        return self.start_time + self.duration_s

    def start(
        self,
        t: float,
        current_steps: int,
        duration_s: float = DEFAULT_CALIBRATION_S,
    ) -> bool:
        """
        Start a session.

        Args:
            t: Current time in seconds.
            current_steps: Detector step count right now.
            duration_s: Requested duration; clamped to [5, 120] s.

        Returns:
            True if the session started, False if one is already running.
        """
        if self.running:
            return False
        self.state = CalibrationState.RUNNING
        self.start_step_count = current_steps
        self.start_time = t
        self.duration_s = effective_calibration_duration(duration_s)
        self.live_steps = 0
        return True

    def observe(self, current_steps: int) -> int:
        """Update the live step counter; returns it."""
        if self.running:
            self.live_steps = max(0, current_steps - self.start_step_count)
        return self.live_steps

    def poll(self, t: float, current_steps: int) -> Optional[CalibrationResult]:
        """
        Stop automatically if the duration has elapsed by time t.

        The automatic stop is dated at the deadline, not at t, so a late
        event does not stretch the measured walking time.

        Returns:
            CalibrationResult if the session stopped now, otherwise None.
        """
        deadline = self.deadline
        if deadline is None or t < deadline:
            return None
        return self._finish(deadline, current_steps, automatic=True)

    def stop(self, t: float, current_steps: int) -> Optional[CalibrationResult]:
        """
        Stop the session manually.

        Returns:
            CalibrationResult, or None if no session was running.
        """
        if not self.running:
            return None
        return self._finish(t, current_steps, automatic=False)

    def _finish(
        self, t: float, current_steps: int, automatic: bool
    ) -> CalibrationResult:
        self.state = CalibrationState.IDLE
        elapsed_s = max(1, round_half_up(t - self.start_time))
        observed = max(0, current_steps - self.start_step_count)
        self.live_steps = observed
        result = CalibrationResult(
            observed_steps=observed,
            elapsed_s=elapsed_s,
            step_length_m=calibrated_step_length(
                observed, elapsed_s, self.walking_speed_mps
            ),
            automatic=automatic,
        )
        self.last_result = result
        return result

    def status(self) -> CalibrationStatus:
        return CalibrationStatus(
            state=self.state,
            live_steps=self.live_steps,
            duration_s=self.duration_s,
            started_at=self.start_time if self.running else None,
        )
