"""
Perception modules: target state estimation, short-horizon prediction,
and candidate target selection.
"""

from .state_estimator import AxisEstimator, PositionEstimator
from .motion_predictor import MotionPredictor, HistorySample
from .target_registry import TargetRegistry, TrackedEntity

__all__ = [
    # State Estimator
    'AxisEstimator',
    'PositionEstimator',

    # Motion Predictor
    'MotionPredictor',
    'HistorySample',

    # Target Registry
    'TargetRegistry',
    'TrackedEntity',
]
