"""
Batch step detection for recorded walking sessions.

The engine detects steps sample by sample (brodkrumen.sensors.step_detection).
For recorded datasets it is useful to run the same detector over the whole
recording at once, and to compare it with a look-ahead peak finder:

    - accel_magnitudes(): ||a_k|| for an (N, 3) accelerometer series
    - detect_steps_streaming(): indices where the streaming detector fires
    - detect_steps_batch(): reference peaks via scipy.signal.find_peaks,
      optionally on a Butterworth low-passed magnitude

The batch detector sees the full signal (it can look ahead and filter with
zero phase), so it is an upper bound on what the live detector can achieve
on the same data.
"""

from typing import Optional, Tuple

import numpy as np
from scipy import signal

from brodkrumen.config import StepDetectorParams
from brodkrumen.sensors.step_detection import StepDetector
from brodkrumen.sensors.types import MotionSample


def accel_magnitudes(accel_series: np.ndarray) -> np.ndarray:
    """
    Acceleration magnitude for every sample of a series.

    Args:
        accel_series: Accelerometer series including gravity.
                      Shape: (N, 3). Units: m/s².

    Returns:
        Magnitudes ||a_k||. Shape: (N,). Units: m/s².
    """
    if accel_series.ndim != 2 or accel_series.shape[1] != 3:
        raise ValueError(
            f"accel_series must have shape (N, 3), got {accel_series.shape}"
        )
    return np.linalg.norm(accel_series, axis=1)


def detect_steps_streaming(
    t: np.ndarray,
    accel_series: np.ndarray,
    params: Optional[StepDetectorParams] = None,
) -> np.ndarray:
    """
    Replay a recording through the streaming step detector.

    Args:
        t: Sample timestamps in seconds. Shape: (N,).
        accel_series: Accelerometer series. Shape: (N, 3). Units: m/s².
        params: Detector constants. Default: StepDetectorParams().

    Returns:
        Indices of samples on which a step fired. Shape: (n_steps,).
    """
    if accel_series.ndim != 2 or accel_series.shape[1] != 3:
        raise ValueError(
            f"accel_series must have shape (N, 3), got {accel_series.shape}"
        )
    if t.shape != (accel_series.shape[0],):
        raise ValueError(
            f"t must have shape ({accel_series.shape[0]},), got {t.shape}"
        )

    detector = StepDetector(params)
    indices = []
    for k in range(len(t)):
        event = detector.update(MotionSample(accel=accel_series[k], t=float(t[k])))
        if event is not None:
            indices.append(k)
    return np.array(indices, dtype=int)


def detect_steps_batch(
    t: np.ndarray,
    accel_series: np.ndarray,
    min_prominence: float = 1.0,
    min_peak_distance: float = 0.4,
    lowpass_cutoff: Optional[float] = 5.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Reference step detection with a look-ahead peak finder.

    1. Compute acceleration magnitude
    2. Optionally low-pass filter it (4th order Butterworth, zero phase)
    3. Find peaks with a minimum prominence and spacing

    Args:
        t: Sample timestamps in seconds (assumed uniform). Shape: (N,).
        accel_series: Accelerometer series. Shape: (N, 3). Units: m/s².
        min_prominence: Minimum peak prominence. Units: m/s². Default: 1.0.
        min_peak_distance: Minimum time between peaks (refractory period).
                           Units: seconds. Default: 0.4 s.
        lowpass_cutoff: Low-pass cutoff in Hz, None to disable. Default: 5 Hz.

    Returns:
        Tuple of (step_indices, magnitude_processed):
            step_indices: Indices of detected peaks. Shape: (n_steps,).
            magnitude_processed: Magnitude after optional filtering. Shape: (N,).
    """
    magnitude = accel_magnitudes(accel_series)
    if len(t) != len(magnitude):
        raise ValueError(
            f"t must have {len(magnitude)} samples, got {len(t)}"
        )
    if len(t) < 2:
        return np.array([], dtype=int), magnitude
    if min_peak_distance <= 0:
        raise ValueError(f"min_peak_distance must be positive, got {min_peak_distance}")

    dt = float(np.median(np.diff(t)))
    if dt <= 0:
        raise ValueError(f"timestamps must be increasing, got median dt={dt}")

    processed = magnitude
    if lowpass_cutoff is not None:
        normalized_cutoff = lowpass_cutoff / (0.5 / dt)
        # filtfilt needs more than 3 * max(len(a), len(b)) samples
        if normalized_cutoff < 1.0 and len(magnitude) > 15:
            b, a = signal.butter(4, normalized_cutoff, btype='low')
            processed = signal.filtfilt(b, a, magnitude)

    min_distance_samples = max(1, int(round(min_peak_distance / dt)))
    peak_indices, _ = signal.find_peaks(
        processed,
        prominence=min_prominence,
        distance=min_distance_samples,
    )
    return peak_indices, processed
