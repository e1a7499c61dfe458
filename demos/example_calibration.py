"""
Example: Timed Step-Length Calibration

Walks of different true step lengths are simulated at the assumed average
speed (1.4 m/s), so the step frequency is f = 1.4 / L. A calibration session
runs on each walk and derives

    L = v · T / n

from the number of steps the streaming detector counted in T seconds.

Can run with:
    python demos/example_calibration.py
    python demos/example_calibration.py --duration 30 --manual-stop 20

Key Insight: The result is only as good as the assumed walking speed. A
            walker 10% slower than 1.4 m/s is calibrated 10% long.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from brodkrumen import DeadReckoningEngine, EngineConfig
from brodkrumen.navigation.calibration import CalibrationResult
from brodkrumen.sensors import MotionSample


def synth_walk_accel(
    duration: float,
    step_freq: float,
    dt: float = 0.02,
    accel_noise: float = 0.15,
    rng: Optional[np.random.Generator] = None,
):
    """Accelerometer of a steady walk: gravity plus one pulse per step.

    Args:
        duration: Walk duration in seconds (1 s standing before the first step).
        step_freq: Step frequency in Hz.
        dt: Sample period in seconds.
        accel_noise: Accel noise std dev in m/s^2.
        rng: Random generator.

    Returns:
        Tuple of (t, accel) with t [N] in seconds and accel [N, 3] in m/s^2.
    """
    if rng is None:
        rng = np.random.default_rng()

    t = np.arange(0.0, duration, dt)
    accel = np.zeros((len(t), 3))
    accel[:, 2] = 9.81
    for ts in np.arange(1.0, duration, 1.0 / step_freq):
        accel[:, 2] += 3.5 * np.exp(-0.5 * ((t - ts) / 0.04) ** 2)
    accel += rng.normal(0, accel_noise, accel.shape)
    return t, accel


def calibrate_on_walk(
    true_step_length: float,
    duration_s: float,
    walking_speed: float = 1.4,
    manual_stop_s: Optional[float] = None,
    rng: Optional[np.random.Generator] = None,
) -> CalibrationResult:
    """Run one calibration session on a synthetic walk.

    The walker moves at walking_speed with steps of true_step_length. The
    session starts just before the first step and stops either automatically after
    duration_s, or manually after manual_stop_s seconds.
    """
    step_freq = walking_speed / true_step_length
    walk_duration = 1.0 + max(duration_s, manual_stop_s or 0.0) + 3.0
    t, accel = synth_walk_accel(walk_duration, step_freq, rng=rng)

    engine = DeadReckoningEngine(EngineConfig())
    start_t = 0.9
    engine.start_calibration(duration_s=duration_s, t=start_t)

    result = None
    for k in range(len(t)):
        if manual_stop_s is not None and t[k] >= start_t + manual_stop_s:
            result = engine.stop_calibration(t=start_t + manual_stop_s)
            break
        engine.on_motion(MotionSample(accel=accel[k], t=float(t[k])))
    if result is None:
        result = engine.calibration.last_result
    return result


def run_calibration_sweep(
    step_lengths: List[float],
    duration_s: float,
    manual_stop_s: Optional[float],
    seed: int,
    plot: bool = True,
) -> None:
    """Calibrate on walks with several true step lengths and report."""
    rng = np.random.default_rng(seed)

    print("\n" + "="*70)
    print("Timed Step-Length Calibration")
    print("="*70)
    mode = f"manual stop after {manual_stop_s:.0f} s" if manual_stop_s else "automatic stop"
    print(f"\nSession: {duration_s:.0f} s requested, {mode}")
    print(f"Assumed walking speed: {EngineConfig().assumed_walking_speed_mps:.2f} m/s\n")

    print(f"{'True L [m]':>12} {'Freq [Hz]':>10} {'Steps':>7} {'T [s]':>7} "
          f"{'Calibrated [m]':>15} {'Error':>8}")
    print("-" * 64)

    calibrated = []
    for true_length in step_lengths:
        result = calibrate_on_walk(
            true_length, duration_s, manual_stop_s=manual_stop_s, rng=rng
        )
        if result is None or result.step_length_m is None:
            calibrated.append(np.nan)
            print(f"{true_length:>12.2f} {'-':>10} {'0':>7} {'-':>7} {'(no steps)':>15}")
            continue
        calibrated.append(result.step_length_m)
        error = (result.step_length_m - true_length) / true_length * 100
        print(f"{true_length:>12.2f} {1.4 / true_length:>10.2f} {result.observed_steps:>7d} "
              f"{result.elapsed_s:>7d} {result.step_length_m:>15.3f} {error:>7.1f}%")

    if plot:
        figs_dir = Path(__file__).parent / 'figs'
        figs_dir.mkdir(exist_ok=True)

        fig, ax = plt.subplots(figsize=(8, 6))
        ax.plot(step_lengths, step_lengths, 'k--', linewidth=1.5, label='Ideal')
        ax.plot(step_lengths, calibrated, 'bo-', linewidth=2, label='Calibrated')
        ax.axhspan(0.3, 1.5, color='g', alpha=0.05, label='Usable range [0.3, 1.5] m')
        ax.set_xlabel('True step length [m]')
        ax.set_ylabel('Calibrated step length [m]')
        ax.set_title(f'Step-Length Calibration ({duration_s:.0f} s session)')
        ax.legend()
        ax.grid(True, alpha=0.3)

        output_file = figs_dir / 'calibration_sweep.svg'
        fig.savefig(output_file, dpi=300, bbox_inches='tight')
        print(f"\n  [OK] Saved: {output_file}")
        plt.close('all')

    print("\n" + "="*70)
    print("KEY INSIGHT: Whole-second timing and whole-step counts limit the")
    print("             resolution; longer sessions give finer step lengths.")
    print("="*70)


def main():
    """Main execution with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Timed step-length calibration example",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default 15 s sessions with automatic stop
  python demos/example_calibration.py

  # Longer sessions, stopped manually after 20 s
  python demos/example_calibration.py --duration 60 --manual-stop 20
        """
    )
    parser.add_argument(
        "--duration", type=float, default=15.0,
        help="Calibration duration in seconds, clamped to [5, 120] (default: 15)"
    )
    parser.add_argument(
        "--manual-stop", type=float, default=None,
        help="Stop manually after this many seconds instead of waiting"
    )
    parser.add_argument(
        "--seed", type=int, default=42, help="Random seed (default: 42)"
    )
    parser.add_argument(
        "--no-plot", action="store_true", help="Skip figure generation"
    )

    args = parser.parse_args()

    run_calibration_sweep(
        step_lengths=[0.6, 0.7, 0.8, 0.9, 1.0],
        duration_s=args.duration,
        manual_stop_s=args.manual_stop,
        seed=args.seed,
        plot=not args.no_plot,
    )


if __name__ == "__main__":
    main()
