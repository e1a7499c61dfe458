"""
Runnable demonstrations of the dead-reckoning engine.

Examples:
    - example_walk.py: Replay a walking dataset (or an inline walk) through
      the engine and plot the trail, the return vector and step detection
    - example_calibration.py: Timed step-length calibration on synthetic walks
"""

__all__ = []
