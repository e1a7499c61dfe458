"""
Trail integration, return vector, calibration and persisted state.

Modules:
    integrator: Step-and-heading position update, path/odometry, altitude proxy
    return_vector: Distance and compass bearing back to the origin
    calibration: Timed step-length calibration state machine
    persistence: Save/restore record of the trail

Primary data structures:
    PositionIntegrator: Owns position, path, odometry and altitude
    ReturnVector: Distance/bearing to the origin
    CalibrationSession, CalibrationResult: Step-length calibration
    PersistedState: Record for external save/restore
"""

from brodkrumen.navigation.return_vector import (
    ReturnVector,
    compute_return_vector,
)

from brodkrumen.navigation.integrator import (
    PositionIntegrator,
    step_displacement,
    altitude_step,
    ALTITUDE_BASELINE_M,
)

from brodkrumen.navigation.calibration import (
    CalibrationSession,
    CalibrationState,
    CalibrationResult,
    CalibrationStatus,
    calibrated_step_length,
)

from brodkrumen.navigation.persistence import PersistedState

__all__ = [
    # Return vector
    "ReturnVector",
    "compute_return_vector",
    # Integration
    "PositionIntegrator",
    "step_displacement",
    "altitude_step",
    "ALTITUDE_BASELINE_M",
    # Calibration
    "CalibrationSession",
    "CalibrationState",
    "CalibrationResult",
    "CalibrationStatus",
    "calibrated_step_length",
    # Persistence
    "PersistedState",
]
