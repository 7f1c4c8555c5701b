"""
Per-axis state estimation for tracked targets.

Each axis runs a small constant-velocity recursive filter; three of them
make up the 3D PositionEstimator used by the control loop. Elapsed time is
always supplied by the caller so runs are repeatable.

Note: the covariance propagation below is a simplified form, not the
textbook F P F^T + Q. Process noise is added to P00 and P11 on predict
only, and the cross terms are propagated asymmetrically. Tuning in the
field was done against this form, so it is kept as is.
"""

import logging
import math
from typing import Tuple

import numpy as np

from core.vector import Vector3


logger = logging.getLogger("StateEstimator")


class AxisEstimator:
    """
    1D recursive filter for smoothing one coordinate of a target position.

    State vector: [position, velocity]
    Measurement: [position]
    """

    def __init__(
        self,
        measurement_noise: float = 0.01,
        process_noise_q: float = 0.09,
        process_noise: float = 0.1
    ):
        """
        Initialize 1D filter.

        Args:
            measurement_noise: Measurement noise (R)
            process_noise_q: Process noise Q (not used by the propagation)
            process_noise: Additive noise injected on every predict
        """
        self.R = measurement_noise
        self.Q = process_noise_q
        self.process_noise = process_noise

        self.x = np.array([0.0, 0.0])
        self.P = np.eye(2)
        self.initialized = False

    def predict(self, dt: float):
        """
        Prediction step.

        Args:
            dt: Time delta since last update (seconds)
        """
        if not self.initialized:
            return

        dt = _safe_dt(dt)
        P = self.P

        self.x = np.array([self.x[0] + self.x[1] * dt, self.x[1]])
        self.P = np.array([
            [P[0, 0] + dt * P[1, 0] + dt * P[0, 1] + self.process_noise,
             P[0, 1] + dt * P[1, 1]],
            [P[1, 0],
             P[1, 1] + self.process_noise]
        ])

    def update(self, measurement: float, dt: float) -> float:
        """
        Update step with new measurement.

        Args:
            measurement: Measured position
            dt: Seconds since this filter's previous update

        Returns:
            Filtered position
        """
        if not math.isfinite(measurement):
            logger.warning(f"Ignoring non-finite measurement: {measurement}")
            return self.extrapolate(0.0)

        if not self.initialized:
            # First sample passes through unfiltered
            self.x = np.array([float(measurement), 0.0])
            self.P = np.eye(2)
            self.initialized = True
            return float(measurement)

        prev_x, prev_P = self.x.copy(), self.P.copy()
        self.predict(dt)

        P = self.P
        S = P[0, 0] + self.R
        if not math.isfinite(S) or S <= 0:
            return float(self.x[0])

        K = np.array([P[0, 0] / S, P[1, 0] / S])
        residual = measurement - self.x[0]

        x = self.x + K * residual
        new_P = np.array([
            [(1 - K[0]) * P[0, 0], (1 - K[0]) * P[0, 1]],
            [P[1, 0] - K[1] * P[0, 0], P[1, 1] - K[1] * P[0, 1]]
        ])

        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(new_P))):
            logger.warning(f"Discarding non-finite update (measurement={measurement}, dt={dt})")
            self.x, self.P = prev_x, prev_P
            return float(self.x[0])

        self.x = x
        self.P = new_P
        return float(self.x[0])

    def extrapolate(self, time_ahead: float) -> float:
        """
        Position expected after time_ahead seconds, without changing state.
        """
        if not self.initialized:
            return 0.0
        return float(self.x[0] + self.x[1] * time_ahead)

    @property
    def velocity(self) -> float:
        return float(self.x[1]) if self.initialized else 0.0

    def get_state(self) -> Tuple[float, float]:
        """
        Get current state estimate.

        Returns:
            Tuple of (position, velocity)
        """
        return float(self.x[0]), float(self.x[1])

    def reset(self):
        """Reset filter to initial state."""
        self.x = np.array([0.0, 0.0])
        self.P = np.eye(2)
        self.initialized = False


class PositionEstimator:
    """
    Three independent axis estimators combined into a 3D position filter.
    """

    def __init__(
        self,
        measurement_noise: float = 0.01,
        process_noise_q: float = 0.09,
        process_noise: float = 0.1
    ):
        self.kf_x = AxisEstimator(measurement_noise, process_noise_q, process_noise)
        self.kf_y = AxisEstimator(measurement_noise, process_noise_q, process_noise)
        self.kf_z = AxisEstimator(measurement_noise, process_noise_q, process_noise)

    @property
    def initialized(self) -> bool:
        return self.kf_x.initialized and self.kf_y.initialized and self.kf_z.initialized

    def update(self, position: Vector3, dt: float) -> Vector3:
        return Vector3(
            self.kf_x.update(position.x, dt),
            self.kf_y.update(position.y, dt),
            self.kf_z.update(position.z, dt)
        )

    def extrapolate(self, time_ahead: float) -> Vector3:
        return Vector3(
            self.kf_x.extrapolate(time_ahead),
            self.kf_y.extrapolate(time_ahead),
            self.kf_z.extrapolate(time_ahead)
        )

    @property
    def velocity(self) -> Vector3:
        return Vector3(self.kf_x.velocity, self.kf_y.velocity, self.kf_z.velocity)

    def reset(self):
        """Reset all filters to initial state."""
        self.kf_x.reset()
        self.kf_y.reset()
        self.kf_z.reset()


def _safe_dt(dt: float) -> float:
    if dt is None or not math.isfinite(dt) or dt < 0:
        return 0.0
    return float(dt)
