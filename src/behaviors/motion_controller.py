"""
Smoothed pointing controller.

Turns a desired aim point into the next commanded observer position. The
velocity is blended toward a distance-proportional target velocity with a
fixed per-tick smoothing factor (not scaled by dt, so the response depends
on the tick rate), and a snap override jumps straight onto the target once
close and slow enough.
"""

import logging

from core.config import TrackingConfig
from core.vector import Vector3


class MotionController:
    """Drag-lock style controller with snap override and recoil compensation."""

    def __init__(self, config: TrackingConfig):
        """
        Args:
            config: Tracking configuration (drag, smoothing and snap settings)
        """
        self.config = config
        self.logger = logging.getLogger("MotionController")

        self.velocity = Vector3.zero()
        self.last_position = Vector3.zero()

    def compute_next(self, current: Vector3, target: Vector3, dt: float) -> Vector3:
        """
        Compute the next commanded position.

        Args:
            current: Current observer position
            target: Desired aim point
            dt: Tick duration in seconds

        Returns:
            Next position (exactly target when snapping)
        """
        delta = target - current
        distance = delta.length()

        force = self.config.drag_force
        if distance > self.config.max_distance:
            force *= self.config.long_range_multiplier

        desired_velocity = delta * force
        self.velocity = self.velocity.lerp(desired_velocity, self.config.smoothing_factor)

        candidate = current + self.velocity * dt

        if (distance < self.config.snap_threshold and
                self.velocity.length() < self.config.velocity_threshold and
                self.config.enable_snap):
            return target

        if not (candidate.is_finite() and self.velocity.is_finite()):
            self.logger.warning("Non-finite motion command, holding position")
            self.velocity = Vector3.zero()
            return current

        self.last_position = candidate
        return candidate

    def apply_compensation(self, position: Vector3, offset: Vector3) -> Vector3:
        """
        Counter an external disturbance such as recoil.

        Args:
            position: Position to correct
            offset: Disturbance vector

        Returns:
            position - offset * recoil_factor, or position if disabled
        """
        if not self.config.recoil_compensation:
            return position
        return position + offset * (-self.config.recoil_factor)

    def reset(self):
        self.velocity = Vector3.zero()
