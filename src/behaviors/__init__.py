"""
Behaviors package for the target-lock engine.

- motion_controller: Smoothed pointing toward the aim point
- action_trigger: Rate-limited action fired on a stable lock
"""

from .motion_controller import MotionController
from .action_trigger import ActionTrigger

__all__ = [
    'MotionController',
    'ActionTrigger',
]
