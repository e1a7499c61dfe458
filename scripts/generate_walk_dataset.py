"""Generate a synthetic phone-in-hand walking dataset.

Creates a walk made of straight legs joined by standing turns, sampled the way
a phone delivers it to the dead-reckoning engine:
    - Accelerometer (including gravity) with one pulse per step
    - Compass heading (degrees, 0 = North, clockwise) with noise
    - Device pitch (degrees), optionally tilted on a climbing leg
    - Ground-truth positions in the local plane (x = East, y = South)

Saves to: data/sim/walk_square/

Usage:
    python scripts/generate_walk_dataset.py --preset square
    python scripts/generate_walk_dataset.py --legs 0,90 --steps-per-leg 30
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from brodkrumen.navigation.integrator import step_displacement
from brodkrumen.sensors.offline import accel_magnitudes, detect_steps_streaming
from brodkrumen.utils.angles import angle_diff_deg, normalize_deg


GRAVITY = 9.81
TURN_DURATION = 1.5  # standing turn between legs (s)
WARMUP_DURATION = 2.0  # standing still before the first step (s)


# ============================================================================
# PRESET CONFIGURATIONS
# ============================================================================

PRESETS = {
    'square': {
        'description': 'Closed 4-leg square walk, moderate compass noise',
        'legs': [0.0, 90.0, 180.0, 270.0],
        'steps_per_leg': 20,
        'heading_noise': 3.0,
        'accel_noise': 0.15,
        'climb_pitch': 0.0,
    },
    'noisy': {
        'description': 'Same square with a disturbed compass and shaky hand',
        'legs': [0.0, 90.0, 180.0, 270.0],
        'steps_per_leg': 20,
        'heading_noise': 10.0,
        'accel_noise': 0.35,
        'climb_pitch': 0.0,
    },
    'stairs': {
        'description': 'Two legs, phone tilted up on the last one (altitude proxy)',
        'legs': [0.0, 90.0],
        'steps_per_leg': 16,
        'heading_noise': 3.0,
        'accel_noise': 0.15,
        'climb_pitch': 25.0,
    },
    'out_and_back': {
        'description': 'Walk north-east and return along the same line',
        'legs': [45.0, 225.0],
        'steps_per_leg': 30,
        'heading_noise': 3.0,
        'accel_noise': 0.15,
        'climb_pitch': 0.0,
    },
}


# ============================================================================
# DATA GENERATION FUNCTIONS
# ============================================================================

def generate_walk(
    legs: List[float],
    steps_per_leg: int = 20,
    step_length: float = 0.75,
    step_freq: float = 2.0,
    dt: float = 0.02,
    climb_pitch: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, List[float]]:
    """
    Generate the true walk: heading, pitch, position and step times.

    Args:
        legs: Heading of each straight leg in degrees (0 = North, clockwise).
        steps_per_leg: Steps taken on each leg.
        step_length: True step length in meters.
        step_freq: Step frequency in Hz.
        dt: Sample period in seconds.
        climb_pitch: Pitch held on the last leg in degrees (0 = level).

    Returns:
        Tuple of (t, heading, pitch, pos, step_times):
            - t: Time array [N] in seconds
            - heading: True heading [N] in degrees, [0, 360)
            - pitch: True device pitch [N] in degrees
            - pos: True positions [N, 2] in meters (x = East, y = South)
            - step_times: Step occurrence times in seconds
    """
    step_period = 1.0 / step_freq
    leg_duration = steps_per_leg * step_period

    # Schedule of (start, end, heading_from, heading_to, walking, pitch)
    segments = [(0.0, WARMUP_DURATION, legs[0], legs[0], False, 0.0)]
    clock = WARMUP_DURATION
    for i, heading in enumerate(legs):
        if i > 0:
            segments.append((clock, clock + TURN_DURATION, legs[i - 1], heading, False, 0.0))
            clock += TURN_DURATION
        pitch = climb_pitch if i == len(legs) - 1 else 0.0
        segments.append((clock, clock + leg_duration, heading, heading, True, pitch))
        clock += leg_duration
    segments.append((clock, clock + WARMUP_DURATION, legs[-1], legs[-1], False, 0.0))
    total_duration = clock + WARMUP_DURATION

    t = np.arange(0.0, total_duration, dt)
    N = len(t)
    heading_true = np.zeros(N)
    pitch_true = np.zeros(N)
    pos = np.zeros((N, 2))
    step_times = []

    position = np.zeros(2)
    seg_idx = 0
    next_step = None
    for k in range(N):
        while seg_idx < len(segments) - 1 and t[k] >= segments[seg_idx][1]:
            seg_idx += 1
            next_step = None
        start, end, h_from, h_to, walking, pitch = segments[seg_idx]

        # Turns rotate along the shortest direction
        progress = min(1.0, (t[k] - start) / (end - start))
        heading = normalize_deg(h_from + progress * angle_diff_deg(h_to, h_from))

        if walking:
            if next_step is None:
                next_step = start + 0.5 * step_period
            if t[k] >= next_step and next_step < end:
                step_times.append(float(t[k]))
                position = position + step_displacement(step_length, heading)
                next_step += step_period

        heading_true[k] = heading
        pitch_true[k] = pitch
        pos[k] = position

    return t, heading_true, pitch_true, pos, step_times


def generate_accel(
    t: np.ndarray,
    step_times: List[float],
    pulse_amplitude: float = 3.5,
    pulse_width: float = 0.04,
) -> np.ndarray:
    """
    Accelerometer including gravity with a Gaussian pulse per step.

    Args:
        t: Time array [N] in seconds.
        step_times: Step occurrence times in seconds.
        pulse_amplitude: Peak of the step pulse above gravity (m/s^2).
        pulse_width: Standard deviation of the pulse in time (s).

    Returns:
        Accelerometer [N, 3] in m/s^2 (device z axis vertical).
    """
    accel = np.zeros((len(t), 3))
    accel[:, 2] = GRAVITY
    for ts in step_times:
        accel[:, 2] += pulse_amplitude * np.exp(-0.5 * ((t - ts) / pulse_width) ** 2)
    return accel


def add_sensor_noise(
    accel_true: np.ndarray,
    heading_true: np.ndarray,
    pitch_true: np.ndarray,
    accel_noise: float = 0.15,
    heading_noise: float = 3.0,
    pitch_noise: float = 1.0,
    rng: np.random.Generator = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Add white noise to accelerometer, compass and pitch.

    Args:
        accel_true: True accelerometer [N, 3] m/s^2.
        heading_true: True heading [N] degrees.
        pitch_true: True pitch [N] degrees.
        accel_noise: Accel noise std dev (m/s^2).
        heading_noise: Compass noise std dev (degrees).
        pitch_noise: Pitch noise std dev (degrees).
        rng: Random generator.

    Returns:
        Tuple of (accel_meas, heading_meas, pitch_meas). Headings are
        normalized to [0, 360).
    """
    if rng is None:
        rng = np.random.default_rng()

    accel_meas = accel_true + rng.normal(0, accel_noise, accel_true.shape)
    heading_meas = np.mod(heading_true + rng.normal(0, heading_noise, heading_true.shape), 360.0)
    pitch_meas = pitch_true + rng.normal(0, pitch_noise, pitch_true.shape)
    return accel_meas, heading_meas, pitch_meas


def save_dataset(
    output_dir: Path,
    t: np.ndarray,
    pos_true: np.ndarray,
    heading_true: np.ndarray,
    accel_meas: np.ndarray,
    heading_meas: np.ndarray,
    pitch_meas: np.ndarray,
    step_times: List[float],
    config: Dict,
) -> None:
    """Save dataset to disk."""
    output_dir.mkdir(parents=True, exist_ok=True)

    np.savetxt(output_dir / "time.txt", t, fmt="%.6f", header="time (s)")
    np.savetxt(
        output_dir / "ground_truth_position.txt",
        pos_true,
        fmt="%.6f",
        header="x east (m), y south (m)",
    )
    np.savetxt(
        output_dir / "ground_truth_heading.txt",
        heading_true,
        fmt="%.6f",
        header="heading (deg, 0 = North, clockwise)",
    )
    np.savetxt(
        output_dir / "accel.txt",
        accel_meas,
        fmt="%.6f",
        header="ax (m/s^2), ay (m/s^2), az (m/s^2)",
    )
    np.savetxt(
        output_dir / "heading.txt",
        heading_meas,
        fmt="%.6f",
        header="compass heading (deg)",
    )
    np.savetxt(
        output_dir / "pitch.txt",
        pitch_meas,
        fmt="%.6f",
        header="device pitch (deg)",
    )
    np.savetxt(
        output_dir / "step_times.txt",
        np.array(step_times),
        fmt="%.6f",
        header="step occurrence times (s)",
    )

    with open(output_dir / "config.json", "w") as f:
        json.dump(config, f, indent=2)

    print(f"\n  Saved dataset to: {output_dir}")
    print(f"    Files: 8 files (time, GT x2, accel, heading, pitch, steps, config)")
    print(f"    Samples: {len(t)}")
    print(f"    Steps: {len(step_times)}")


def generate_dataset(
    output_dir: str = "data/sim/walk_square",
    seed: int = 42,
    legs: List[float] = None,
    steps_per_leg: int = 20,
    step_length: float = 0.75,
    step_freq: float = 2.0,
    dt: float = 0.02,
    accel_noise: float = 0.15,
    heading_noise: float = 3.0,
    pitch_noise: float = 1.0,
    climb_pitch: float = 0.0,
    preset: str = None,
) -> None:
    """Generate and save a walking dataset.

    Args:
        output_dir: Output directory path.
        seed: Random seed for reproducibility.
        legs: Leg headings in degrees. Default: square (0, 90, 180, 270).
        steps_per_leg: Steps per leg.
        step_length: True step length (m).
        step_freq: Step frequency (Hz).
        dt: Sample period (s).
        accel_noise: Accel noise std dev (m/s^2).
        heading_noise: Compass noise std dev (deg).
        pitch_noise: Pitch noise std dev (deg).
        climb_pitch: Pitch held on the last leg (deg).
        preset: Name of the preset used, stored in config.json.
    """
    if legs is None:
        legs = [0.0, 90.0, 180.0, 270.0]
    rng = np.random.default_rng(seed)

    print(f"\n{'='*70}")
    print(f"Generating Walking Dataset: {Path(output_dir).name}")
    print(f"{'='*70}")

    # 1. Ground truth
    print(f"\n1. Generating walk...")
    t, heading_true, pitch_true, pos_true, step_times = generate_walk(
        legs=legs,
        steps_per_leg=steps_per_leg,
        step_length=step_length,
        step_freq=step_freq,
        dt=dt,
        climb_pitch=climb_pitch,
    )
    total_distance = len(step_times) * step_length

    print(f"   Legs: {', '.join(f'{h:.0f} deg' for h in legs)}")
    print(f"   Duration: {t[-1]:.1f} s")
    print(f"   Distance: {total_distance:.1f} m")
    print(f"   True steps: {len(step_times)}")

    # 2. Sensors
    print(f"\n2. Generating sensor measurements...")
    accel_true = generate_accel(t, step_times)
    accel_meas, heading_meas, pitch_meas = add_sensor_noise(
        accel_true,
        heading_true,
        pitch_true,
        accel_noise=accel_noise,
        heading_noise=heading_noise,
        pitch_noise=pitch_noise,
        rng=rng,
    )
    magnitude = accel_magnitudes(accel_meas)
    print(f"   Accel noise: {accel_noise:.3f} m/s^2")
    print(f"   Compass noise: {heading_noise:.1f} deg")
    print(f"   Magnitude range: {magnitude.min():.2f} .. {magnitude.max():.2f} m/s^2")

    # 3. Sanity check with the streaming detector
    print(f"\n3. Checking step detectability...")
    detected = detect_steps_streaming(t, accel_meas)
    print(f"   Streaming detector: {len(detected)}/{len(step_times)} steps")

    config = {
        "dataset": "walk",
        "preset": preset,
        "trajectory": {
            "type": "legs_with_standing_turns",
            "legs_deg": [float(h) for h in legs],
            "steps_per_leg": steps_per_leg,
            "total_distance_m": float(total_distance),
            "duration_s": float(t[-1]),
            "climb_pitch_deg": climb_pitch,
        },
        "pedestrian": {
            "step_length_m": step_length,
            "step_freq_hz": step_freq,
            "num_steps": len(step_times),
        },
        "dt_s": dt,
        "sample_rate_hz": 1.0 / dt,
        "num_samples": len(t),
        "sensors": {
            "accel_noise_std_m_s2": accel_noise,
            "heading_noise_std_deg": heading_noise,
            "pitch_noise_std_deg": pitch_noise,
        },
        "detectability": {
            "streaming_steps_detected": int(len(detected)),
        },
        "coordinate_frame": {
            "description": "local plane, x = East, y = South",
            "origin": "start point",
            "units": "meters",
        },
        "seed": seed,
    }

    save_dataset(
        Path(output_dir),
        t,
        pos_true,
        heading_true,
        accel_meas,
        heading_meas,
        pitch_meas,
        step_times,
        config,
    )

    print(f"\n{'='*70}")
    print(f"Dataset generation complete!")
    print(f"{'='*70}")


# ============================================================================
# COMMAND-LINE INTERFACE
# ============================================================================

def _parse_legs(text: str) -> List[float]:
    try:
        return [float(v) for v in text.split(",") if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"legs must be comma separated degrees, got '{text}'")


def main():
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Generate a synthetic walking dataset for the dead-reckoning engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate with default parameters (square walk)
  python %(prog)s

  # Use a preset configuration
  python %(prog)s --preset stairs --output data/sim/walk_stairs

  # Custom walk
  python %(prog)s --legs 0,90,0 --steps-per-leg 12 --heading-noise 5

Available presets: """ + ", ".join(PRESETS.keys())
    )

    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (overrides individual parameters)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='data/sim/walk_square',
        help='Output directory (default: data/sim/walk_square)'
    )
    parser.add_argument(
        '--seed', type=int, default=42, help='Random seed (default: 42)'
    )

    traj_group = parser.add_argument_group('Walk Parameters')
    traj_group.add_argument(
        '--legs', type=_parse_legs, default=[0.0, 90.0, 180.0, 270.0],
        help='Comma separated leg headings in degrees (default: 0,90,180,270)'
    )
    traj_group.add_argument(
        '--steps-per-leg', type=int, default=20, help='Steps per leg (default: 20)'
    )
    traj_group.add_argument(
        '--step-length', type=float, default=0.75, help='True step length in meters (default: 0.75)'
    )
    traj_group.add_argument(
        '--step-freq', type=float, default=2.0, help='Step frequency in Hz (default: 2.0)'
    )
    traj_group.add_argument(
        '--dt', type=float, default=0.02, help='Sample period in seconds (default: 0.02)'
    )
    traj_group.add_argument(
        '--climb-pitch', type=float, default=0.0,
        help='Phone pitch on the last leg in degrees (default: 0.0)'
    )

    noise_group = parser.add_argument_group('Sensor Noise Parameters')
    noise_group.add_argument(
        '--accel-noise', type=float, default=0.15, help='Accel noise std dev in m/s^2 (default: 0.15)'
    )
    noise_group.add_argument(
        '--heading-noise', type=float, default=3.0, help='Compass noise std dev in deg (default: 3.0)'
    )
    noise_group.add_argument(
        '--pitch-noise', type=float, default=1.0, help='Pitch noise std dev in deg (default: 1.0)'
    )

    args = parser.parse_args()

    if args.preset:
        preset_config = PRESETS[args.preset]
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {preset_config['description']}")
        for key, value in preset_config.items():
            if key != 'description':
                setattr(args, key, value)

    if not args.legs:
        parser.error("At least one leg is required")
    if args.steps_per_leg <= 0:
        parser.error("Steps per leg must be positive")
    if args.dt <= 0 or args.step_freq <= 0:
        parser.error("Sample period and step frequency must be positive")

    generate_dataset(
        output_dir=args.output,
        seed=args.seed,
        legs=args.legs,
        steps_per_leg=args.steps_per_leg,
        step_length=args.step_length,
        step_freq=args.step_freq,
        dt=args.dt,
        accel_noise=args.accel_noise,
        heading_noise=args.heading_noise,
        pitch_noise=args.pitch_noise,
        climb_pitch=args.climb_pitch,
        preset=args.preset,
    )


if __name__ == "__main__":
    main()
