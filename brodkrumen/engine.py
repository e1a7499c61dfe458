"""
Dead-reckoning engine: compass heading + step events → trail.

DeadReckoningEngine owns every piece of mutable state (detector, filters,
integrator, calibration session, configuration) and exposes three kinds of
entry points:

    Event intake:  on_motion(), on_orientation(), tick()
    Commands:      set_start_point(), reset(), pause(), resume(),
                   start_calibration(), stop_calibration(), set_step_length()
    Queries:       snapshot(), to_persisted_state(), restore()

Data flow:

    motion samples ──► StepDetector ──► step event ──► PositionIntegrator ──► ReturnVector
                                             │                ▲
                                             ▼                │ latest heading / pitch
                                    CalibrationSession   HeadingFilter / PitchFilter ◄── orientation samples

Everything is single-threaded and synchronous: each call runs to completion
before the next one, and snapshots are immutable values taken between calls.
A step always uses the most recent filtered heading and pitch, which may lag
the true orientation by up to one orientation sample.

The engine never raises on sensor input, configuration values or persisted
state. Missing sensors simply produce no updates and out-of-range settings
are clamped where they are used.
"""

import dataclasses
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

from brodkrumen.config import EngineConfig
from brodkrumen.navigation.calibration import (
    CalibrationResult,
    CalibrationSession,
    CalibrationStatus,
)
from brodkrumen.navigation.integrator import PositionIntegrator
from brodkrumen.navigation.persistence import PersistedState
from brodkrumen.navigation.return_vector import ReturnVector
from brodkrumen.sensors.orientation import HeadingFilter, PitchFilter
from brodkrumen.sensors.step_detection import StepDetector
from brodkrumen.sensors.types import MotionSample, OrientationSample, StepEvent


@dataclass(frozen=True)
class EngineSnapshot:
    """
    Read-only view of the engine between two events.

    Attributes:
        position: Current position [x, y] in meters. Shape (2,).
        path: Segment endpoints, oldest first. Each shape (2,).
        heading_deg: Smoothed compass heading, or None before the first
                     compass reading.
        pitch_rad: Smoothed pitch in radians.
        step_count: Odometry step count.
        total_distance: Odometry distance [m].
        altitude_m: Altitude proxy [m].
        return_vector: Distance/bearing back to the origin.
        origin_set: Whether a start point is set.
        paused: Whether tracking is paused.
        movement_bearing_deg: Bearing of the last step, or None.
        last_step_time: Time of the last step that moved the position.
        step_length_m: Configured (unclamped) step length.
        detected_steps: Steps detected since the process started.
        calibration: Calibration session status.
    """

    position: np.ndarray
    path: Tuple[np.ndarray, ...]
    heading_deg: Optional[float]
    pitch_rad: float
    step_count: int
    total_distance: float
    altitude_m: float
    return_vector: ReturnVector
    origin_set: bool
    paused: bool
    movement_bearing_deg: Optional[float]
    last_step_time: Optional[float]
    step_length_m: float
    detected_steps: int
    calibration: CalibrationStatus


class DeadReckoningEngine:
    """
    Single-hypothesis pedestrian dead-reckoning estimator.

    Args:
        config: Engine configuration. Default: EngineConfig().
        clock: Monotonic clock in seconds, used by commands called without
               an explicit timestamp. Default: time.monotonic.

    Example:
        >>> engine = DeadReckoningEngine()
        >>> engine.on_orientation(OrientationSample(heading_deg=90.0))
        >>> engine.set_start_point()
        >>> snap = engine.snapshot()
        >>> snap.step_count, snap.altitude_m, len(snap.path)
        (0, 1.0, 1)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config if config is not None else EngineConfig()
        self.clock = clock

        self.detector = StepDetector(self.config.detector)
        self.heading_filter = HeadingFilter(self.config.heading_alpha)
        self.pitch_filter = PitchFilter(self.config.pitch_alpha)
        self.integrator = PositionIntegrator(self.config.altitude_snap_tolerance_m)
        self.calibration = CalibrationSession(self.config.assumed_walking_speed_mps)

        self.paused = False
        self.detected_steps = 0

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------

    def on_motion(self, sample: MotionSample) -> Optional[StepEvent]:
        """
        Process one accelerometer sample.

        A calibration whose duration elapsed before this sample is stopped
        first, so the sample's step does not count towards it.

        Returns:
            StepEvent if the sample fired a step, otherwise None.
        """
        self.tick(sample.t)

        event = self.detector.update(sample)
        if event is None:
            return None

        self.detected_steps += 1
        if self.integrator.origin_set:
            self.integrator.advance(
                self.config.step_length_m,
                self.heading_filter.value,
                self.pitch_filter.value,
                paused=self.paused,
                pause_policy=self.config.pause_policy,
                t=event.t,
            )
        self.calibration.observe(self.detected_steps)
        return event

    def on_orientation(self, sample: OrientationSample) -> None:
        """Process one orientation sample (absent fields are ignored)."""
        self.heading_filter.update(sample.heading_deg)
        self.pitch_filter.update(sample.pitch_deg)

    def tick(self, t: Optional[float] = None) -> Optional[CalibrationResult]:
        """
        Advance the engine clock without sensor data.

        Fires the calibration auto-stop when its duration has elapsed.

        Returns:
            CalibrationResult if a calibration stopped, otherwise None.
        """
        now = self.clock() if t is None else t
        result = self.calibration.poll(now, self.detected_steps)
        if result is not None:
            self._apply_calibration(result)
        return result

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_start_point(self) -> None:
        """Start a new trail at the current location."""
        self.integrator.start()
        self.paused = False

    def reset(self) -> None:
        """Discard the trail. Filters and calibration are kept."""
        self.integrator.clear()
        self.paused = False

    def pause(self) -> None:
        if self.integrator.origin_set:
            self.paused = True

    def resume(self) -> None:
        if self.integrator.origin_set:
            self.paused = False

    def set_step_length(self, step_length_m: float) -> None:
        """Configure the step length (stored as-is, clamped when used)."""
        self.config = dataclasses.replace(self.config, step_length_m=step_length_m)

    def start_calibration(
        self,
        duration_s: Optional[float] = None,
        t: Optional[float] = None,
    ) -> bool:
        """
        Start a step-length calibration session.

        Args:
            duration_s: Session duration in seconds, clamped to [5, 120].
                        Default: config.calibration_duration_s.
            t: Start time. Default: the engine clock.

        Returns:
            True if started, False if a session is already running.
        """
        now = self.clock() if t is None else t
        if duration_s is None:
            duration_s = self.config.calibration_duration_s
        return self.calibration.start(now, self.detected_steps, duration_s)

    def stop_calibration(
        self, t: Optional[float] = None
    ) -> Optional[CalibrationResult]:
        """
        Stop the running calibration session manually.

        Returns:
            CalibrationResult, or None if no session was running (for
            example because it already stopped automatically).
        """
        now = self.clock() if t is None else t
        result = self.calibration.stop(now, self.detected_steps)
        if result is not None:
            self._apply_calibration(result)
        return result

    def _apply_calibration(self, result: CalibrationResult) -> None:
        if result.step_length_m is not None:
            self.set_step_length(result.step_length_m)

    # ------------------------------------------------------------------
    # Queries and persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> EngineSnapshot:
        integ = self.integrator
        return EngineSnapshot(
            position=integ.position.copy(),
            path=tuple(p.copy() for p in integ.path),
            heading_deg=self.heading_filter.value,
            pitch_rad=self.pitch_filter.value,
            step_count=integ.step_count,
            total_distance=integ.total_distance,
            altitude_m=integ.altitude_m,
            return_vector=integ.return_vector,
            origin_set=integ.origin_set,
            paused=self.paused,
            movement_bearing_deg=integ.movement_bearing_deg,
            last_step_time=integ.last_step_time,
            step_length_m=self.config.step_length_m,
            detected_steps=self.detected_steps,
            calibration=self.calibration.status(),
        )

    def to_persisted_state(self) -> PersistedState:
        integ = self.integrator
        return PersistedState(
            path=[p.copy() for p in integ.path],
            origin_set=integ.origin_set,
            current_position=integ.position.copy(),
            total_distance=integ.total_distance,
            step_count=integ.step_count,
            back_to_start=integ.return_vector,
            altitude_m=integ.altitude_m,
        )

    def restore(self, state: Union[PersistedState, Any]) -> None:
        """
        Rehydrate the trail from a persisted record.

        Args:
            state: PersistedState, or a decoded wire dict (malformed fields
                   default independently).

        Notes:
            The return vector is recomputed from the restored position so it
            always measures against the true origin.
        """
        if not isinstance(state, PersistedState):
            state = PersistedState.from_dict(state)
        self.integrator.restore(
            origin_set=state.origin_set,
            position=state.current_position,
            path=state.path,
            total_distance=state.total_distance,
            step_count=state.step_count,
            altitude_m=state.altitude_m,
        )
        self.paused = False


def arrow_bearing(
    snapshot: EngineSnapshot,
    now: float,
    hold_s: float = 3.0,
) -> Optional[float]:
    """
    Bearing a trail display should point its heading arrow at.

    Right after a step the arrow follows the direction actually walked; once
    no step happened for hold_s seconds it falls back to the compass.

    Args:
        snapshot: Engine snapshot.
        now: Current time in seconds (same clock as the samples).
        hold_s: How long the movement bearing is preferred. Default: 3 s.

    Returns:
        Bearing in degrees, or None if neither is known.
    """
    if (
        snapshot.movement_bearing_deg is not None
        and snapshot.last_step_time is not None
        and now - snapshot.last_step_time < hold_s
    ):
        return snapshot.movement_bearing_deg
    return snapshot.heading_deg
