"""Unit tests for QST transforms."""

import math

import pytest

from spatium.core.constants import Axis
from spatium.core.quat import IDENTITY_QUAT, Quaternion
from spatium.core.rotator import Rotator
from spatium.core.transform import IDENTITY_TRANSFORM, Transform, blend, compose
from spatium.core.vector import Vector3, ZERO_VECTOR
from spatium.core.vector4 import Vector4

Z_AXIS = Vector3(0.0, 0.0, 1.0)


def _uniform(angle: float, translation: Vector3, scale: float) -> Transform:
    axis = Vector3(1.0, -2.0, 0.5).safe_normal()
    return Transform(
        Quaternion.from_axis_angle(axis, angle), translation, Vector3(scale, scale, scale)
    )


class TestTransformPoints:
    """Tests for mapping points and directions."""

    def test_translate_and_scale(self) -> None:
        """Test scale is applied before translation."""
        t = Transform(IDENTITY_QUAT, Vector3(1.0, 2.0, 3.0), Vector3(2.0, 2.0, 2.0))
        assert t.transform_position(Vector3(1.0, 0.0, 0.0)) == Vector3(3.0, 2.0, 3.0)

    def test_rotation_after_scale(self) -> None:
        """Test non-uniform scale happens in local space before rotation."""
        t = Transform(
            Quaternion.from_axis_angle(Z_AXIS, math.pi / 2),
            Vector3(0.0, 0.0, 1.0),
            Vector3(3.0, 1.0, 1.0),
        )
        result = t.transform_position(Vector3(1.0, 0.0, 0.0))
        assert result.equals(Vector3(0.0, 3.0, 1.0), 1e-12)

    def test_transform_vector_ignores_translation(self, sample_transform) -> None:
        """Test directions are not translated."""
        v = Vector3(1.0, 0.0, 0.0)
        expected = sample_transform.transform_position(v) - sample_transform.translation
        assert sample_transform.transform_vector(v).equals(expected, 1e-12)

    def test_transform_vector4_uses_w(self, sample_transform) -> None:
        """Test w selects position or direction and passes through."""
        v = Vector3(1.0, 2.0, 3.0)
        as_point = sample_transform.transform_vector4(Vector4.from_vector3(v, 1.0))
        as_dir = sample_transform.transform_vector4(Vector4.from_vector3(v, 0.0))
        assert as_point.w == 1.0
        assert as_dir.w == 0.0
        assert as_point.to_vector3().equals(sample_transform.transform_position(v), 1e-12)
        assert as_dir.to_vector3().equals(sample_transform.transform_vector(v), 1e-12)

    def test_inverse_transform_position(self, sample_transform) -> None:
        """Test the inverse mapping undoes the forward mapping."""
        p = Vector3(-3.0, 7.0, 2.5)
        back = sample_transform.inverse_transform_position(sample_transform.transform_position(p))
        assert back.equals(p, 1e-9)

    def test_inverse_with_zero_scale_axis(self) -> None:
        """Test a zero scale axis collapses that coordinate instead of dividing by zero."""
        t = Transform(IDENTITY_QUAT, ZERO_VECTOR, Vector3(1.0, 0.0, 1.0))
        back = t.inverse_transform_position(Vector3(1.0, 5.0, 1.0))
        assert back == Vector3(1.0, 0.0, 1.0)

    def test_matches_matrix(self, sample_transform) -> None:
        """Test the matrix form maps points identically."""
        p = Vector3(0.5, -1.5, 4.0)
        m = sample_transform.to_matrix_with_scale()
        assert m.transform_position(p).equals(sample_transform.transform_position(p), 1e-9)


class TestTransformCompose:
    """Tests for composition and relative transforms."""

    def test_identity_is_neutral(self, sample_transform) -> None:
        """Test composing with the identity on either side."""
        assert compose(IDENTITY_TRANSFORM, sample_transform).equals(sample_transform, 1e-12)
        assert compose(sample_transform, IDENTITY_TRANSFORM).equals(sample_transform, 1e-12)

    def test_compose_applies_first_then_second(self) -> None:
        """Test composition equals applying the transforms in order."""
        a = _uniform(0.4, Vector3(1.0, 2.0, 3.0), 2.0)
        b = _uniform(-1.1, Vector3(-4.0, 0.0, 1.0), 0.5)
        p = Vector3(3.0, -1.0, 2.0)
        expected = b.transform_position(a.transform_position(p))
        assert compose(a, b).transform_position(p).equals(expected, 1e-9)

    def test_compose_is_associative(self) -> None:
        """Test grouping does not change the composite."""
        a = _uniform(0.4, Vector3(1.0, 2.0, 3.0), 1.0)
        b = _uniform(1.3, Vector3(-4.0, 0.0, 1.0), 1.0)
        c = _uniform(-0.8, Vector3(0.0, 5.0, -2.0), 1.0)
        assert compose(compose(a, b), c).equals(compose(a, compose(b, c)), 1e-9)

    def test_relative_transform(self, sample_transform) -> None:
        """Test the relative transform composes back onto its parent."""
        parent = Transform(
            Quaternion.from_axis_angle(Z_AXIS, 0.9), Vector3(1.0, 1.0, 1.0), Vector3(2.0, 0.5, 1.0)
        )
        relative = sample_transform.get_relative_transform(parent)
        assert compose(relative, parent).equals(sample_transform, 1e-9)

    def test_relative_transform_unnormalized_parent(self, sample_transform) -> None:
        """Test an unnormalized parent rotation yields the identity."""
        parent = Transform(Quaternion(0.0, 0.0, 0.0, 2.0), ZERO_VECTOR, Vector3(1.0, 1.0, 1.0))
        assert sample_transform.get_relative_transform(parent) == IDENTITY_TRANSFORM

    def test_relative_transform_negative_scale(self) -> None:
        """Test the mirrored path recovers the transform against the identity."""
        t = Transform(
            Quaternion.from_axis_angle(Z_AXIS, 0.6), Vector3(1.0, 2.0, 3.0), Vector3(-1.0, 2.0, 1.0)
        )
        relative = t.get_relative_transform(IDENTITY_TRANSFORM)
        assert relative.equals(t, 1e-9)

    def test_relative_transform_reverse(self, sample_transform) -> None:
        """Test compose(self, reverse) reproduces the other transform."""
        base = _uniform(0.3, Vector3(2.0, 0.0, -1.0), 2.0)
        relative = base.get_relative_transform_reverse(sample_transform)
        assert compose(base, relative).equals(sample_transform, 1e-9)


class TestTransformMatrix:
    """Tests for matrix conversion and inversion."""

    def test_matrix_round_trip(self, sample_transform) -> None:
        """Test decomposing the matrix recovers the transform."""
        recovered = Transform.from_matrix(sample_transform.to_matrix_with_scale())
        assert recovered.equals(sample_transform, 1e-9)

    def test_mirrored_matrix_maps_points_the_same(self) -> None:
        """Test a negative-determinant matrix decomposes to an equivalent transform."""
        t = Transform(
            Quaternion.from_axis_angle(Z_AXIS, 0.5), Vector3(1.0, 0.0, 0.0), Vector3(1.0, -2.0, 1.0)
        )
        recovered = Transform.from_matrix(t.to_matrix_with_scale())
        p = Vector3(1.0, 2.0, 3.0)
        assert recovered.transform_position(p).equals(t.transform_position(p), 1e-9)
        assert recovered.get_determinant() == pytest.approx(-2.0)

    def test_matrix_no_scale(self, sample_transform) -> None:
        """Test the unscaled matrix keeps rotation and translation only."""
        m = sample_transform.to_matrix_no_scale()
        point = Vector3(1.0, -2.0, 0.5)
        assert m.transform_position(point).equals(
            sample_transform.transform_position_no_scale(point), 1e-9
        )
        assert m.get_scale_vector().equals(Vector3(1.0, 1.0, 1.0), 1e-9)
        assert m.get_origin().equals(sample_transform.translation, 1e-12)

    def test_inverse_safe(self) -> None:
        """Test the inverse undoes a uniformly scaled transform."""
        t = _uniform(0.7, Vector3(3.0, -1.0, 2.0), 2.0)
        p = Vector3(1.0, 1.0, 1.0)
        assert t.inverse_safe().transform_position(t.transform_position(p)).equals(p, 1e-9)

    def test_inverse_safe_of_zero_scale_is_identity(self) -> None:
        """Test a zero-scale transform inverts to the identity."""
        t = Transform(IDENTITY_QUAT, Vector3(1.0, 2.0, 3.0), ZERO_VECTOR)
        inverse = t.inverse_safe()
        assert not inverse.contains_nan()
        assert inverse.equals(IDENTITY_TRANSFORM)

    def test_from_rotator(self) -> None:
        """Test building from an Euler rotation."""
        t = Transform.from_rotator(Rotator(0.0, 90.0, 0.0), Vector3(1.0, 0.0, 0.0))
        assert t.transform_position(Vector3(1.0, 0.0, 0.0)).equals(Vector3(1.0, 1.0, 0.0), 1e-12)
        assert t.to_rotator().equals(Rotator(0.0, 90.0, 0.0), 1e-6)


class TestTransformHelpers:
    """Tests for axes, scale helpers, blending and validity."""

    def test_axes(self) -> None:
        """Test scaled and unit axes."""
        t = Transform(
            Quaternion.from_axis_angle(Z_AXIS, math.pi / 2), ZERO_VECTOR, Vector3(2.0, 1.0, 1.0)
        )
        assert t.get_scaled_axis(Axis.X).equals(Vector3(0.0, 2.0, 0.0), 1e-12)
        assert t.get_unit_axis(Axis.X).equals(Vector3(0.0, 1.0, 0.0), 1e-12)
        assert t.get_maximum_axis_scale() == 2.0
        assert t.get_minimum_axis_scale() == 1.0

    def test_copy_helpers(self, sample_transform) -> None:
        """Test the copy-with helpers return new transforms."""
        moved = sample_transform.add_to_translation(Vector3(1.0, 0.0, 0.0))
        assert moved.translation == sample_transform.translation + Vector3(1.0, 0.0, 0.0)
        assert moved.rotation == sample_transform.rotation
        assert sample_transform.with_scale3d(Vector3(1.0, 1.0, 1.0)).scale3d == Vector3(1.0, 1.0, 1.0)
        assert sample_transform.remove_scaling().scale3d == Vector3(1.0, 1.0, 1.0)
        assert sample_transform.get_scaled(2.0).scale3d == sample_transform.scale3d * 2.0

    def test_blend_endpoints_and_midpoint(self) -> None:
        """Test blending returns the ends exactly and lerps in between."""
        a = Transform(IDENTITY_QUAT, ZERO_VECTOR, Vector3(1.0, 1.0, 1.0))
        b = Transform(
            Quaternion.from_axis_angle(Z_AXIS, math.pi / 2), Vector3(2.0, 0.0, 0.0), Vector3(3.0, 3.0, 3.0)
        )
        assert blend(a, b, 0.0) is a
        assert blend(a, b, 1.0) is b
        mid = a.blend_with(b, 0.5)
        assert mid.translation.equals(Vector3(1.0, 0.0, 0.0))
        assert mid.scale3d.equals(Vector3(2.0, 2.0, 2.0))
        assert IDENTITY_QUAT.angular_distance(mid.rotation) == pytest.approx(math.pi / 4)

    def test_accumulate(self) -> None:
        """Test additive layering of an atom."""
        base = Transform(IDENTITY_QUAT, Vector3(1.0, 0.0, 0.0), Vector3(2.0, 2.0, 2.0))
        atom = Transform(
            Quaternion.from_axis_angle(Z_AXIS, 0.5), Vector3(0.0, 1.0, 0.0), Vector3(0.5, 1.0, 1.0)
        )
        result = base.accumulate(atom)
        assert result.translation == Vector3(1.0, 1.0, 0.0)
        assert result.scale3d == Vector3(1.0, 2.0, 2.0)
        assert result.rotation.equals(atom.rotation, 1e-12)

    def test_accumulate_with_shortest_rotation_either_hemisphere(self) -> None:
        """Test a delta rotation of either sign accumulates in the same hemisphere."""
        base = Transform(IDENTITY_QUAT, Vector3(1.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0))
        q = Quaternion.from_axis_angle(Z_AXIS, 0.5)
        delta = Transform(q, Vector3(0.0, 2.0, 0.0), Vector3(0.5, 0.5, 0.5))

        near = base.accumulate_with_shortest_rotation(delta, 0.5)
        far = base.accumulate_with_shortest_rotation(delta.with_rotation(-q), 0.5)

        assert near.rotation == far.rotation
        assert near.rotation.w == pytest.approx(1.0 + 0.5 * q.w)
        assert near.rotation.z == pytest.approx(0.5 * q.z)
        assert near.translation == Vector3(1.0, 1.0, 0.0)
        assert near.scale3d == Vector3(1.25, 1.25, 1.25)

    def test_blend_from_identity_and_accumulate(self) -> None:
        """Test the source is blended from the identity before layering."""
        base = Transform(IDENTITY_QUAT, Vector3(1.0, 0.0, 0.0), Vector3(2.0, 2.0, 2.0))
        source = Transform(
            Quaternion.from_axis_angle(Z_AXIS, 1.0), Vector3(0.0, 4.0, 0.0), Vector3(3.0, 3.0, 3.0)
        )

        half = base.blend_from_identity_and_accumulate(source, 0.5)
        assert half.rotation.equals(Quaternion.from_axis_angle(Z_AXIS, 0.5), 1e-9)
        assert half.translation.equals(Vector3(1.0, 2.0, 0.0))
        assert half.scale3d.equals(Vector3(4.0, 4.0, 4.0))

        full = base.blend_from_identity_and_accumulate(source, 1.0)
        assert full.equals(base.accumulate(source), 1e-12)

    def test_weighted_sum(self) -> None:
        """Test weighting and summing components."""
        t = Transform(IDENTITY_QUAT, Vector3(2.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0))
        total = t * 0.5 + t * 0.5
        assert total.translation == Vector3(2.0, 0.0, 0.0)
        assert total.rotation == IDENTITY_QUAT

    def test_is_valid(self, sample_transform) -> None:
        """Test validity requires finite values and a unit rotation."""
        assert sample_transform.is_valid()
        assert not sample_transform.with_rotation(Quaternion(0.0, 0.0, 0.0, 2.0)).is_valid()
        assert not sample_transform.with_translation(Vector3(math.nan, 0.0, 0.0)).is_valid()
