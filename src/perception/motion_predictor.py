"""
Short-horizon position prediction from recent target history.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from core.vector import Vector3


@dataclass(frozen=True)
class HistorySample:
    """Position of the tracked target at a point in time."""
    position: Vector3
    timestamp: float


class MotionPredictor:
    """
    Extrapolates the tracked target from its averaged recent velocity.

    Only the currently tracked target is kept in history; the control loop
    resets the predictor whenever tracking is lost.
    """

    def __init__(self, max_history: int = 10, velocity_window: int = 3):
        """
        Args:
            max_history: Number of samples kept, oldest evicted first
            velocity_window: Number of most recent samples used for velocity
        """
        self.max_history = max_history
        self.velocity_window = velocity_window
        self.history: Deque[HistorySample] = deque(maxlen=max_history)

    def add_sample(self, position: Vector3, timestamp: float):
        self.history.append(HistorySample(position, timestamp))

    def predict(self, time_ahead: float) -> Vector3:
        """
        Predict target position time_ahead seconds after the latest sample.

        Args:
            time_ahead: Prediction horizon in seconds

        Returns:
            Predicted position (zero vector without history)
        """
        if len(self.history) == 0:
            return Vector3.zero()
        if len(self.history) == 1:
            return self.history[0].position

        recent = list(self.history)[-self.velocity_window:]

        # Pairs with non-positive dt contribute nothing but still count
        avg_velocity = Vector3.zero()
        for prev, curr in zip(recent, recent[1:]):
            dt = curr.timestamp - prev.timestamp
            if dt > 0:
                velocity = (curr.position - prev.position) * (1.0 / dt)
                avg_velocity = avg_velocity + velocity
        avg_velocity = avg_velocity * (1.0 / (len(recent) - 1))

        return recent[-1].position + avg_velocity * time_ahead

    @property
    def latest(self) -> Optional[HistorySample]:
        return self.history[-1] if self.history else None

    def __len__(self) -> int:
        return len(self.history)

    def reset(self):
        self.history.clear()
