"""
Core modules of the target-lock engine.
Provides the vector type, configuration and frame-rate bookkeeping.
The control loop lives in core.control_loop and is imported from there.
"""

from .vector import Vector3
from .config import KalmanConfig, TrackingConfig, load_config
from .performance import PerformanceMonitor

__all__ = [
    'Vector3',
    'KalmanConfig',
    'TrackingConfig',
    'load_config',
    'PerformanceMonitor',
]
