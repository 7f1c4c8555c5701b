"""
3D vector value type used across the tracking pipeline.

Positions, velocities and offsets are all passed around as immutable
Vector3 values; every operation returns a new instance.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector with double precision components."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Vector3":
        """
        Build a vector from any 3-element sequence or numpy array.

        Args:
            values: Iterable with exactly three numeric components

        Returns:
            New Vector3
        """
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, s: float) -> "Vector3":
        return Vector3(self.x * s, self.y * s, self.z * s)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> "Vector3":
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length > 0:
            return self.scale(1.0 / length)
        return Vector3.zero()

    def lerp(self, other: "Vector3", t: float) -> "Vector3":
        """
        Linear interpolation toward another vector.

        t is not clamped, values outside [0, 1] extrapolate.
        """
        return self.add(other.subtract(self).scale(t))

    def distance_to(self, other: "Vector3") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return math.sqrt(dx * dx + dy * dy + dz * dz)

    def equals(self, other: "Vector3", tolerance: float = 0.001) -> bool:
        """Per-component absolute comparison (not a Euclidean distance test)."""
        return (
            abs(self.x - other.x) < tolerance and
            abs(self.y - other.y) < tolerance and
            abs(self.z - other.z) < tolerance
        )

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def as_tuple(self) -> Tuple[float, float, float]:
        """Return vector as tuple."""
        return (self.x, self.y, self.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def __add__(self, other: "Vector3") -> "Vector3":
        return self.add(other)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return self.subtract(other)

    def __mul__(self, s: float) -> "Vector3":
        return self.scale(s)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return self.scale(-1.0)
