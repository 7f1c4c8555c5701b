"""
Unit tests for the Vector3 value type.
"""

import pytest
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.vector import Vector3


class TestArithmetic:
    """Test basic vector arithmetic."""

    def test_add_and_subtract(self):
        """Test component-wise addition and subtraction."""
        a = Vector3(1.0, 2.0, 3.0)
        b = Vector3(0.5, -1.0, 2.0)
        assert a.add(b) == Vector3(1.5, 1.0, 5.0)
        assert a.subtract(b) == Vector3(0.5, 3.0, 1.0)
        assert a + b == a.add(b)
        assert a - b == a.subtract(b)

    def test_scale(self):
        """Test scaling by a scalar."""
        v = Vector3(1.0, -2.0, 0.5)
        assert v.scale(2.0) == Vector3(2.0, -4.0, 1.0)
        assert v * 2.0 == v.scale(2.0)
        assert 2.0 * v == v.scale(2.0)
        assert -v == Vector3(-1.0, 2.0, -0.5)

    def test_operations_return_new_instances(self):
        """Test that operations never mutate the operands."""
        a = Vector3(1.0, 1.0, 1.0)
        b = a.add(Vector3(1.0, 0.0, 0.0))
        assert a == Vector3(1.0, 1.0, 1.0)
        assert b is not a
        with pytest.raises(Exception):
            a.x = 5.0

    def test_dot_and_cross(self):
        """Test dot and cross products."""
        x = Vector3(1.0, 0.0, 0.0)
        y = Vector3(0.0, 1.0, 0.0)
        assert x.dot(y) == 0.0
        assert Vector3(1.0, 2.0, 3.0).dot(Vector3(4.0, 5.0, 6.0)) == 32.0
        assert x.cross(y) == Vector3(0.0, 0.0, 1.0)
        assert y.cross(x) == Vector3(0.0, 0.0, -1.0)


class TestGeometry:
    """Test length, distance and normalization."""

    def test_length_and_distance(self):
        """Test Euclidean length and distance."""
        assert Vector3(3.0, 4.0, 0.0).length() == pytest.approx(5.0)
        assert Vector3(1.0, 1.0, 1.0).distance_to(Vector3(1.0, 1.0, 3.0)) == pytest.approx(2.0)

    def test_normalize(self):
        """Test normalization to unit length."""
        n = Vector3(0.0, 3.0, 4.0).normalize()
        assert n.length() == pytest.approx(1.0)
        assert n.y == pytest.approx(0.6)

    def test_normalize_zero_vector(self):
        """Test that the zero vector normalizes to itself."""
        n = Vector3.zero().normalize()
        assert n == Vector3.zero()
        assert n.is_finite()


class TestLerp:
    """Test linear interpolation."""

    def test_lerp_endpoints(self):
        """Test t=0 returns self and t=1 returns other."""
        a = Vector3(1.0, 2.0, 3.0)
        b = Vector3(-4.0, 0.5, 10.0)
        assert a.lerp(b, 0.0) == a
        assert a.lerp(b, 1.0) == b

    def test_lerp_midpoint(self):
        """Test interpolation halfway."""
        mid = Vector3(0.0, 0.0, 0.0).lerp(Vector3(2.0, 4.0, -2.0), 0.5)
        assert mid == Vector3(1.0, 2.0, -1.0)

    def test_lerp_extrapolates(self):
        """Test that t outside [0, 1] is not clamped."""
        v = Vector3(0.0, 0.0, 0.0).lerp(Vector3(1.0, 0.0, 0.0), 2.0)
        assert v.x == pytest.approx(2.0)
        v = Vector3(0.0, 0.0, 0.0).lerp(Vector3(1.0, 0.0, 0.0), -1.0)
        assert v.x == pytest.approx(-1.0)


class TestEquality:
    """Test approximate equality."""

    def test_equals_within_tolerance(self):
        """Test per-component tolerance."""
        a = Vector3(1.0, 1.0, 1.0)
        assert a.equals(Vector3(1.0005, 0.9995, 1.0009))
        assert not a.equals(Vector3(1.002, 1.0, 1.0))

    def test_equals_is_per_component(self):
        """Test that the check is not a Euclidean distance."""
        a = Vector3(0.0, 0.0, 0.0)
        # Euclidean distance ~0.00156 > 0.001, each component 0.0009 < 0.001
        b = Vector3(0.0009, 0.0009, 0.0009)
        assert a.distance_to(b) > 0.001
        assert a.equals(b)

    def test_custom_tolerance(self):
        """Test a caller-supplied tolerance."""
        assert Vector3(0.0, 0.0, 0.0).equals(Vector3(0.05, 0.0, 0.0), tolerance=0.1)


class TestConversions:
    """Test conversions to and from tuples and numpy arrays."""

    def test_from_iterable(self):
        """Test construction from sequences and arrays."""
        assert Vector3.from_iterable([1, 2, 3]) == Vector3(1.0, 2.0, 3.0)
        assert Vector3.from_iterable(np.array([0.5, 0.0, -1.0])) == Vector3(0.5, 0.0, -1.0)

    def test_as_tuple_and_array(self):
        """Test export helpers."""
        v = Vector3(1.0, 2.0, 3.0)
        assert v.as_tuple() == (1.0, 2.0, 3.0)
        assert np.allclose(v.as_array(), [1.0, 2.0, 3.0])

    def test_is_finite(self):
        """Test finiteness check."""
        assert Vector3(1.0, 2.0, 3.0).is_finite()
        assert not Vector3(float('nan'), 0.0, 0.0).is_finite()
        assert not Vector3(0.0, float('inf'), 0.0).is_finite()
