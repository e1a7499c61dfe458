"""Compass and step based pedestrian dead reckoning.

This package estimates a walker's position relative to a start point from a
compass-heading stream and accelerometer step events, without satellite
positioning:
- sensors: Sample types, streaming step detection, heading/pitch filters
- navigation: Position integration, return vector, calibration, persisted state
- engine: DeadReckoningEngine tying the pieces together
- config: EngineConfig and detector parameters
"""

from brodkrumen.config import EngineConfig, StepDetectorParams, load_config
from brodkrumen.engine import DeadReckoningEngine, EngineSnapshot, arrow_bearing

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "StepDetectorParams",
    "load_config",
    "DeadReckoningEngine",
    "EngineSnapshot",
    "arrow_bearing",
]
