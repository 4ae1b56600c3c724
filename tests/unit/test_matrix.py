"""Unit tests for Matrix and the matrix builders."""

import math

import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal

from spatium.core.constants import Axis
from spatium.core.matrix import IDENTITY_MATRIX, Matrix, compose, compose_all
from spatium.core.matrix_builders import (
    basis_vector_matrix,
    look_at_matrix,
    make_from_x,
    make_from_xy,
    make_from_z,
    make_from_zx,
    ortho_matrix,
    quat_rotation_matrix,
    rotation_matrix,
    scale_matrix,
    scale_rotation_translation_matrix,
    translation_matrix,
)
from spatium.core.plane import Plane
from spatium.core.quat import Quaternion
from spatium.core.rotator import Rotator
from spatium.core.vector import Vector3
from spatium.core.vector4 import Vector4


class TestMatrixBasics:
    """Tests for construction, equality and vector transforms."""

    def test_default_is_identity(self) -> None:
        """Test the default matrix is the identity."""
        assert Matrix() == IDENTITY_MATRIX

    def test_array_is_read_only(self) -> None:
        """Test the stored array cannot be mutated in place."""
        m = Matrix()
        with pytest.raises(ValueError):
            m.m[0, 0] = 5.0

    def test_translation_moves_positions_not_vectors(self) -> None:
        """Test translation only applies to points."""
        m = translation_matrix(Vector3(1.0, 2.0, 3.0))
        assert m.transform_position(Vector3(1.0, 1.0, 1.0)) == Vector3(2.0, 3.0, 4.0)
        assert m.transform_vector(Vector3(1.0, 1.0, 1.0)) == Vector3(1.0, 1.0, 1.0)

    def test_transform_vector4_keeps_w(self) -> None:
        """Test homogeneous transform of a direction."""
        m = translation_matrix(Vector3(1.0, 2.0, 3.0))
        assert m.transform_vector4(Vector4(1.0, 0.0, 0.0, 0.0)) == Vector4(1.0, 0.0, 0.0, 0.0)

    def test_from_axes_layout(self) -> None:
        """Test axes occupy rows and the origin the last row."""
        m = Matrix.from_axes(
            Vector3(1.0, 2.0, 3.0),
            Vector3(4.0, 5.0, 6.0),
            Vector3(7.0, 8.0, 9.0),
            Vector3(10.0, 11.0, 12.0),
        )
        assert m.get_scaled_axis(Axis.Y) == Vector3(4.0, 5.0, 6.0)
        assert m.get_origin() == Vector3(10.0, 11.0, 12.0)
        assert m.get_column(0) == Vector3(1.0, 4.0, 7.0)
        assert m.get_scaled_axis(Axis.NONE) == Vector3(0.0, 0.0, 0.0)

    def test_set_axis_out_of_range(self) -> None:
        """Test only rows 0-2 can be replaced."""
        with pytest.raises(IndexError):
            Matrix().set_axis(3, Vector3(1.0, 0.0, 0.0))


class TestMatrixAlgebra:
    """Tests for multiplication, composition and inverses."""

    def test_compose_applies_first_then_second(self) -> None:
        """Test scale then translate versus translate then scale."""
        scale = scale_matrix(Vector3(2.0, 2.0, 2.0))
        move = translation_matrix(Vector3(1.0, 0.0, 0.0))
        p = Vector3(1.0, 0.0, 0.0)
        assert compose(scale, move).transform_position(p) == Vector3(3.0, 0.0, 0.0)
        assert compose(move, scale).transform_position(p) == Vector3(4.0, 0.0, 0.0)

    def test_compose_all(self) -> None:
        """Test folding several matrices left to right."""
        move = translation_matrix(Vector3(1.0, 0.0, 0.0))
        result = compose_all(move, move, move)
        assert result.get_origin() == Vector3(3.0, 0.0, 0.0)
        assert compose_all() == IDENTITY_MATRIX

    def test_identity_is_neutral(self) -> None:
        """Test multiplying by the identity changes nothing."""
        m = scale_rotation_translation_matrix(
            Vector3(1.0, 2.0, 3.0), Rotator(10.0, 20.0, 30.0), Vector3(4.0, 5.0, 6.0)
        )
        assert m.multiply(IDENTITY_MATRIX) == m
        assert IDENTITY_MATRIX.multiply(m) == m

    def test_determinant(self) -> None:
        """Test the determinant of a scale matrix."""
        assert scale_matrix(Vector3(2.0, 3.0, 4.0)).determinant() == pytest.approx(24.0)
        assert rotation_matrix(Rotator(10.0, 20.0, 30.0)).rot_determinant() == pytest.approx(1.0)

    def test_inverse(self) -> None:
        """Test M times its inverse is the identity."""
        m = scale_rotation_translation_matrix(
            Vector3(1.0, 2.0, 3.0), Rotator(10.0, 20.0, 30.0), Vector3(4.0, 5.0, 6.0)
        )
        assert m.multiply(m.inverse()).equals(IDENTITY_MATRIX, 1e-9)
        assert_array_almost_equal(m.inverse().m, np.linalg.inv(m.m))

    def test_inverse_slow_matches_inverse(self) -> None:
        """Test the reference inverse agrees with the fast one."""
        m = scale_rotation_translation_matrix(
            Vector3(0.5, 2.0, 1.5), Rotator(-40.0, 75.0, 12.0), Vector3(-1.0, 7.0, 2.0)
        )
        assert m.inverse_slow().equals(m.inverse(), 1e-9)

    def test_inverse_safe_of_singular_is_identity(self) -> None:
        """Test a singular matrix inverts to the identity without nan."""
        singular = Matrix(np.zeros((4, 4)))
        assert singular.inverse_safe() == IDENTITY_MATRIX
        assert singular.inverse_slow() == IDENTITY_MATRIX

    def test_fast_inverse_of_singular_does_not_raise(self) -> None:
        """Test the fast inverse yields non-finite values for a singular matrix."""
        singular = Matrix(np.zeros((4, 4)))
        assert singular.inverse().contains_nan()

    def test_inverse_transform_position(self) -> None:
        """Test the inverse transform undoes the transform."""
        m = scale_rotation_translation_matrix(
            Vector3(2.0, 2.0, 2.0), Rotator(0.0, 90.0, 0.0), Vector3(1.0, 0.0, 0.0)
        )
        p = Vector3(3.0, -2.0, 5.0)
        assert m.inverse_transform_position(m.transform_position(p)).equals(p, 1e-9)


class TestMatrixScale:
    """Tests for scale extraction and axis helpers."""

    def test_extract_scaling(self) -> None:
        """Test per-axis scale is split from the rotation."""
        m = scale_rotation_translation_matrix(
            Vector3(2.0, 3.0, 4.0), Rotator(10.0, 20.0, 30.0), Vector3(0.0, 0.0, 0.0)
        )
        scale, unit = m.extract_scaling()
        assert scale.equals(Vector3(2.0, 3.0, 4.0), 1e-9)
        assert unit.equals(rotation_matrix(Rotator(10.0, 20.0, 30.0)), 1e-9)
        assert m.get_scale_vector().equals(scale, 1e-12)
        assert m.get_maximum_axis_scale() == pytest.approx(4.0)

    def test_zero_axis_reports_zero_scale(self) -> None:
        """Test a collapsed axis is left alone and reports zero."""
        m = scale_matrix(Vector3(2.0, 0.0, 1.0))
        scale, _ = m.extract_scaling()
        assert scale == Vector3(2.0, 0.0, 1.0)

    def test_transpose_adjoint_of_rotation_is_rotation(self) -> None:
        """Test the transpose-adjoint of a pure rotation is itself."""
        m = rotation_matrix(Rotator(15.0, -30.0, 45.0))
        assert m.transpose_adjoint().equals(m, 1e-9)

    def test_mirror(self) -> None:
        """Test mirroring negates a column and flips a row."""
        m = translation_matrix(Vector3(1.0, 2.0, 3.0)).mirror(Axis.X, Axis.X)
        assert m.get_origin() == Vector3(-1.0, 2.0, 3.0)
        assert m.get_scaled_axis(Axis.X) == Vector3(1.0, 0.0, 0.0)


class TestFrustumPlanes:
    """Tests for extracting clip planes from a projection matrix."""

    @pytest.fixture
    def projection(self) -> Matrix:
        """Clip x to [-0.5, 0.5], y to [-0.25, 0.25] and z to [0, 2]."""
        return Matrix(np.diag([2.0, 4.0, 0.5, 1.0]))

    @pytest.mark.parametrize(
        "getter,expected",
        [
            ("get_frustum_near_plane", Plane(0.0, 0.0, -1.0, 0.0)),
            ("get_frustum_far_plane", Plane(0.0, 0.0, 1.0, 2.0)),
            ("get_frustum_left_plane", Plane(1.0, 0.0, 0.0, -0.5)),
            ("get_frustum_right_plane", Plane(-1.0, 0.0, 0.0, -0.5)),
            ("get_frustum_top_plane", Plane(0.0, -1.0, 0.0, -0.25)),
            ("get_frustum_bottom_plane", Plane(0.0, 1.0, 0.0, -0.25)),
        ],
    )
    def test_planes(self, projection: Matrix, getter: str, expected: Plane) -> None:
        """Test each plane is normalized and sits on the clip boundary."""
        plane = getattr(projection, getter)()
        assert plane is not None
        assert plane.equals(expected, 1e-12)
        assert plane.normal.is_normalized()

    def test_degenerate_plane_is_none(self) -> None:
        """Test a zero clip column gives no near plane."""
        flat = Matrix(np.diag([1.0, 1.0, 0.0, 1.0]))
        assert flat.get_frustum_near_plane() is None
        assert flat.get_frustum_left_plane() is not None


class TestMatrixConversions:
    """Tests for rotator and quaternion conversions."""

    def test_rotator_round_trip(self) -> None:
        """Test matrix to rotator recovers the angles."""
        rot = Rotator(10.0, 20.0, 30.0)
        assert rotation_matrix(rot).to_rotator().equals(rot, 1e-6)

    def test_quat_round_trip(self) -> None:
        """Test matrix to quaternion recovers the rotation."""
        q = Quaternion.from_axis_angle(Vector3(1.0, 1.0, 0.0).safe_normal(), 1.1)
        assert quat_rotation_matrix(q).to_quat().equals(q, 1e-9)

    def test_rotator_and_quat_agree(self) -> None:
        """Test both rotation encodings produce the same matrix."""
        rot = Rotator(-25.0, 140.0, 60.0)
        assert rotation_matrix(rot).equals(quat_rotation_matrix(rot.to_quat()), 1e-9)

    def test_yaw_rotates_x_towards_y(self) -> None:
        """Test positive yaw turns +X toward +Y."""
        m = rotation_matrix(Rotator(0.0, 90.0, 0.0))
        assert m.transform_vector(Vector3(1.0, 0.0, 0.0)).equals(Vector3(0.0, 1.0, 0.0))


class TestBuilders:
    """Tests for projection, basis and axis-constrained builders."""

    def test_ortho_zero_size_uses_one(self) -> None:
        """Test a zero width or height does not divide by zero."""
        m = ortho_matrix(0.0, 0.0, 1.0, 0.0)
        assert not m.contains_nan()
        assert m.m[0, 0] == 1.0
        assert m.m[1, 1] == 1.0

    def test_ortho_scales(self) -> None:
        """Test width and height map to the unit range."""
        m = ortho_matrix(10.0, 5.0, 0.5, 2.0)
        p = m.transform_position(Vector3(10.0, 5.0, 0.0))
        assert p.equals(Vector3(1.0, 1.0, 1.0))

    def test_basis_vector_matrix_projects_onto_axes(self) -> None:
        """Test a point maps to its projections onto the basis."""
        m = basis_vector_matrix(
            Vector3(0.0, 1.0, 0.0),
            Vector3(0.0, 0.0, 1.0),
            Vector3(1.0, 0.0, 0.0),
            Vector3(0.0, 0.0, 0.0),
        )
        assert m.transform_position(Vector3(1.0, 2.0, 3.0)) == Vector3(2.0, 3.0, 1.0)

    def test_look_at(self) -> None:
        """Test the eye maps to the origin and the target onto +Z."""
        eye = Vector3(-5.0, 0.0, 0.0)
        m = look_at_matrix(eye, Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, 1.0))
        assert m.transform_position(eye).equals(Vector3(0.0, 0.0, 0.0))
        assert m.transform_position(Vector3(0.0, 0.0, 0.0)).equals(Vector3(0.0, 0.0, 5.0))

    def test_make_from_x(self) -> None:
        """Test the X axis is kept and the basis is right-handed."""
        m = make_from_x(Vector3(0.0, 2.0, 0.0))
        assert m.get_scaled_axis(Axis.X).equals(Vector3(0.0, 1.0, 0.0))
        assert m.rot_determinant() == pytest.approx(1.0)

    def test_make_from_z_parallel_to_up(self) -> None:
        """Test a Z axis along world up still gives a valid basis."""
        m = make_from_z(Vector3(0.0, 0.0, 3.0))
        assert m.get_scaled_axis(Axis.Z).equals(Vector3(0.0, 0.0, 1.0))
        assert not m.contains_nan()
        assert m.rot_determinant() == pytest.approx(1.0)

    def test_make_from_xy(self) -> None:
        """Test the secondary axis is orthogonalized."""
        m = make_from_xy(Vector3(1.0, 0.0, 0.0), Vector3(1.0, 1.0, 0.0))
        assert m.get_scaled_axis(Axis.X).equals(Vector3(1.0, 0.0, 0.0))
        assert m.get_scaled_axis(Axis.Y).equals(Vector3(0.0, 1.0, 0.0))
        assert m.get_scaled_axis(Axis.Z).equals(Vector3(0.0, 0.0, 1.0))

    def test_make_from_zx_parallel_inputs(self) -> None:
        """Test parallel primary and secondary axes fall back to a reference."""
        m = make_from_zx(Vector3(1.0, 0.0, 0.0), Vector3(2.0, 0.0, 0.0))
        assert not m.contains_nan()
        assert m.get_scaled_axis(Axis.Z).equals(Vector3(1.0, 0.0, 0.0))
        assert m.rot_determinant() == pytest.approx(1.0)
        assert math.isclose(m.get_scaled_axis(Axis.X).size(), 1.0)
