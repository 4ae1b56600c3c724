"""
Composite scale-rotation-translation transform for Spatium.

A Transform maps a point as ``P' = R * (S * P) + T``: scale first, then
rotate, then translate. Composition keeps that form, and the relative
transform helpers invert it without going through a matrix when the
scales allow.
"""

from dataclasses import dataclass, replace
from typing import Union

from spatium.core import scalar
from spatium.core.constants import (
    Axis,
    DELTA,
    KINDA_SMALL_NUMBER,
    SMALL_NUMBER,
    ZERO_ANIMWEIGHT_THRESH,
)
from spatium.core.matrix import Matrix
from spatium.core.matrix_builders import scale_quat_translation_matrix
from spatium.core.quat import IDENTITY_QUAT, Quaternion, fast_lerp
from spatium.core.rotator import Rotator
from spatium.core.vector import ONE_VECTOR, ZERO_VECTOR, Vector3
from spatium.core.vector4 import Vector4
from spatium.logging.setup import get_logger

logger = get_logger(__name__)


def _safe_scale_reciprocal(scale: Vector3) -> Vector3:
    # A zero scale axis maps to 0 rather than infinity.
    return Vector3(
        0.0 if scale.x == 0.0 else 1.0 / scale.x,
        0.0 if scale.y == 0.0 else 1.0 / scale.y,
        0.0 if scale.z == 0.0 else 1.0 / scale.z,
    )


def _is_rotation_significant(rotation: Quaternion) -> bool:
    return rotation.w * rotation.w < 1.0 - DELTA * DELTA


@dataclass(frozen=True)
class Transform:
    """
    Immutable QST transform.

    Attributes:
        rotation: Unit quaternion rotation.
        translation: Translation applied last.
        scale3d: Per-axis scale applied first.
    """

    rotation: Quaternion = IDENTITY_QUAT
    translation: Vector3 = ZERO_VECTOR
    scale3d: Vector3 = ONE_VECTOR

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_translation(cls, translation: Vector3) -> "Transform":
        return cls(IDENTITY_QUAT, translation, ONE_VECTOR)

    @classmethod
    def from_rotation(cls, rotation: Quaternion) -> "Transform":
        return cls(rotation, ZERO_VECTOR, ONE_VECTOR)

    @classmethod
    def from_rotator(
        cls,
        rotator: Rotator,
        translation: Vector3 = ZERO_VECTOR,
        scale3d: Vector3 = ONE_VECTOR,
    ) -> "Transform":
        return cls(rotator.to_quat(), translation, scale3d)

    @classmethod
    def from_matrix(cls, m: Matrix) -> "Transform":
        """
        Decompose an affine matrix.

        A mirrored basis (negative determinant) is expressed by negating
        the X scale and the X axis before extracting the rotation. Which
        axis carries the sign does not change the mapped points.

        Args:
            m: Affine matrix without shear.

        Returns:
            Transform with a normalized rotation.
        """
        scale, rotation_part = m.extract_scaling()

        if m.determinant() < 0.0:
            scale = Vector3(-scale.x, scale.y, scale.z)
            rotation_part = rotation_part.set_axis(0, -rotation_part.get_scaled_axis(Axis.X))

        rotation = Quaternion.from_matrix(rotation_part).normalized()
        return cls(rotation, m.get_origin(), scale)

    @classmethod
    def from_axes(
        cls, x_axis: Vector3, y_axis: Vector3, z_axis: Vector3, translation: Vector3
    ) -> "Transform":
        """Transform from three basis axes and a translation."""
        return cls.from_matrix(Matrix.from_axes(x_axis, y_axis, z_axis, translation))

    # ------------------------------------------------------------------
    # Matrix conversion
    # ------------------------------------------------------------------

    def to_matrix_with_scale(self) -> Matrix:
        """Affine matrix equal to scale, then rotation, then translation."""
        return scale_quat_translation_matrix(self.scale3d, self.rotation, self.translation)

    def to_matrix_no_scale(self) -> Matrix:
        return scale_quat_translation_matrix(ONE_VECTOR, self.rotation, self.translation)

    def to_inverse_matrix_with_scale(self) -> Matrix:
        return self.to_matrix_with_scale().inverse_safe()

    def inverse_safe(self) -> "Transform":
        """
        Inverse through the safe matrix inverse.

        A zero-scale transform has a singular matrix; the result is then
        the identity transform rather than inf/nan.
        """
        return Transform.from_matrix(self.to_inverse_matrix_with_scale())

    # ------------------------------------------------------------------
    # Blending
    # ------------------------------------------------------------------

    def blend_with(self, other: "Transform", alpha: float) -> "Transform":
        return blend(self, other, alpha)

    def __add__(self, other: "Transform") -> "Transform":
        if not isinstance(other, Transform):
            return NotImplemented
        return self.add(other)

    def __mul__(self, weight: float) -> "Transform":
        # Weighting only; composition goes through compose().
        if isinstance(weight, (int, float)):
            return self.scale_weights(float(weight))
        return NotImplemented

    def add(self, other: "Transform") -> "Transform":
        """
        Component-wise sum, quaternion included.

        Only meaningful inside weighted blends; the rotation is left
        unnormalized.
        """
        return Transform(
            self.rotation + other.rotation,
            self.translation + other.translation,
            self.scale3d + other.scale3d,
        )

    def scale_weights(self, weight: float) -> "Transform":
        """Every component, quaternion included, multiplied by weight."""
        return Transform(
            self.rotation * weight, self.translation * weight, self.scale3d * weight
        )

    def accumulate(self, atom: "Transform") -> "Transform":
        """
        Layer an additive atom on top of this transform.

        Rotation multiplies (the atom's rotation applied after this one,
        skipped when negligible), translation adds and scale multiplies.
        """
        rotation = self.rotation
        if _is_rotation_significant(atom.rotation):
            rotation = atom.rotation.multiply(self.rotation)
        return Transform(
            rotation, self.translation + atom.translation, self.scale3d * atom.scale3d
        )

    def accumulate_weighted(self, atom: "Transform", blend_weight: float) -> "Transform":
        """accumulate() of ``atom * blend_weight``. The rotation is not normalized."""
        return self.accumulate(atom.scale_weights(blend_weight))

    def accumulate_with_shortest_rotation(
        self, delta: "Transform", weight: float = 1.0
    ) -> "Transform":
        """
        Additive accumulation with the quaternion kept in this hemisphere.

        Args:
            delta: Atom to add.
            weight: Weight applied to every component of delta.

        Returns:
            Accumulated transform with an unnormalized rotation.
        """
        atom = delta.scale_weights(weight)
        if atom.rotation.dot(self.rotation) < 0.0:
            rotation = self.rotation - atom.rotation
        else:
            rotation = self.rotation + atom.rotation
        return Transform(
            rotation, self.translation + atom.translation, self.scale3d + atom.scale3d
        )

    def accumulate_with_additive_scale3d(self, atom: "Transform") -> "Transform":
        rotation = self.rotation
        if _is_rotation_significant(atom.rotation):
            rotation = atom.rotation.multiply(self.rotation)
        return Transform(
            rotation, self.translation + atom.translation, self.scale3d + atom.scale3d
        )

    def blend_from_identity_and_accumulate(
        self, source: "Transform", blend_weight: float
    ) -> "Transform":
        """Blend source from the identity by blend_weight, then accumulate it."""
        if blend_weight < 1.0 - ZERO_ANIMWEIGHT_THRESH:
            source = blend(IDENTITY_TRANSFORM, source, blend_weight)
        return self.accumulate(source)

    def lerp_translation_scale3d(
        self, source1: "Transform", source2: "Transform", alpha: float
    ) -> "Transform":
        """Keep this rotation; lerp translation and scale between two sources."""
        return Transform(
            self.rotation,
            scalar.lerp(source1.translation, source2.translation, alpha),
            scalar.lerp(source1.scale3d, source2.scale3d, alpha),
        )

    def normalize_rotation(self) -> "Transform":
        return replace(self, rotation=self.rotation.normalized())

    def is_rotation_normalized(self) -> bool:
        return self.rotation.is_normalized()

    # ------------------------------------------------------------------
    # Transforming points and vectors
    # ------------------------------------------------------------------

    def transform_vector4(self, v: Vector4) -> Vector4:
        """
        Transform a homogeneous vector.

        Translation is added only for positions (w == 1); w itself passes
        through unchanged.
        """
        scaled = Vector3(v.x, v.y, v.z) * self.scale3d
        result = self.rotation.rotate_vector(scaled)
        if v.w == 1.0:
            result = result + self.translation
        return Vector4.from_vector3(result, v.w)

    def transform_vector4_no_scale(self, v: Vector4) -> Vector4:
        result = self.rotation.rotate_vector(v.to_vector3())
        if v.w == 1.0:
            result = result + self.translation
        return Vector4.from_vector3(result, v.w)

    def transform_position(self, v: Vector3) -> Vector3:
        return self.rotation.rotate_vector(self.scale3d * v) + self.translation

    def transform_position_no_scale(self, v: Vector3) -> Vector3:
        return self.rotation.rotate_vector(v) + self.translation

    def transform_vector(self, v: Vector3) -> Vector3:
        """Transform a direction; translation is ignored."""
        return self.rotation.rotate_vector(self.scale3d * v)

    def transform_vector_no_scale(self, v: Vector3) -> Vector3:
        return self.rotation.rotate_vector(v)

    def inverse_transform_position(self, v: Vector3) -> Vector3:
        """
        Map a point back into this transform's local space.

        Undoes translation, then rotation, then scale. A zero scale axis
        collapses that coordinate to 0.
        """
        local = self.rotation.unrotate_vector(v - self.translation)
        return local * self.get_safe_scale_reciprocal(self.scale3d)

    def inverse_transform_position_no_scale(self, v: Vector3) -> Vector3:
        return self.rotation.unrotate_vector(v - self.translation)

    def inverse_transform_vector(self, v: Vector3) -> Vector3:
        return self.rotation.unrotate_vector(v) * self.get_safe_scale_reciprocal(self.scale3d)

    def inverse_transform_vector_no_scale(self, v: Vector3) -> Vector3:
        return self.rotation.unrotate_vector(v)

    @staticmethod
    def get_safe_scale_reciprocal(scale: Vector3) -> Vector3:
        """Per-axis 1/scale, with 0 for a zero axis."""
        return _safe_scale_reciprocal(scale)

    # ------------------------------------------------------------------
    # Relative transforms
    # ------------------------------------------------------------------

    def get_relative_transform(self, other: "Transform") -> "Transform":
        """
        This transform expressed relative to ``other``.

        Returns R such that compose(R, other) equals this transform. Mirrored
        (negative) scales cannot be split per component, so that case goes
        through matrices.

        Args:
            other: Parent transform.

        Returns:
            Relative transform, or the identity when other's rotation is
            not normalized.
        """
        if self.scale3d.get_min() < 0.0 or other.scale3d.get_min() < 0.0:
            return self._get_relative_transform_using_matrix(other)

        if not other.rotation.is_normalized():
            logger.debug("relative_transform_unnormalized_parent")
            return IDENTITY_TRANSFORM

        safe_recip = _safe_scale_reciprocal(other.scale3d)
        inverse = other.rotation.inverse()
        return Transform(
            inverse.multiply(self.rotation),
            inverse.rotate_vector(self.translation - other.translation) * safe_recip,
            self.scale3d * safe_recip,
        )

    def _get_relative_transform_using_matrix(self, other: "Transform") -> "Transform":
        desired_scale = self.scale3d * _safe_scale_reciprocal(other.scale3d)
        relative = self.to_matrix_with_scale().multiply(
            other.to_matrix_with_scale().inverse_safe()
        )

        # Strip the magnitudes, then put the desired per-axis signs back so
        # the rotation extracted below is a proper one.
        unit = relative.remove_scaling()
        for index, axis, sign in (
            (0, Axis.X, desired_scale.x),
            (1, Axis.Y, desired_scale.y),
            (2, Axis.Z, desired_scale.z),
        ):
            if sign < 0.0:
                unit = unit.set_axis(index, -unit.get_scaled_axis(axis))

        rotation = Quaternion.from_matrix(unit).normalized()
        return Transform(rotation, relative.get_origin(), desired_scale)

    def get_relative_transform_reverse(self, other: "Transform") -> "Transform":
        """
        Returns R such that compose(self, R) equals ``other``.

        Args:
            other: Target transform.

        Returns:
            Relative transform.
        """
        safe_recip = _safe_scale_reciprocal(self.scale3d)
        rotation = other.rotation.multiply(self.rotation.inverse())
        scale = other.scale3d * safe_recip
        translation = other.translation - rotation.rotate_vector(scale * self.translation)
        return Transform(rotation, translation, scale)

    # ------------------------------------------------------------------
    # Axes and scale
    # ------------------------------------------------------------------

    def get_scaled(self, scale: Union[float, Vector3]) -> "Transform":
        """Copy with the scale multiplied by a scalar or per axis."""
        return replace(self, scale3d=self.scale3d * scale)

    def get_scaled_axis(self, axis: Axis) -> Vector3:
        return self.transform_vector(_unit_for(axis))

    def get_unit_axis(self, axis: Axis) -> Vector3:
        return self.transform_vector_no_scale(_unit_for(axis))

    def mirror(self, mirror_axis: Axis, flip_axis: Axis) -> "Transform":
        """Mirror through the matrix form; see Matrix.mirror."""
        return Transform.from_matrix(self.to_matrix_with_scale().mirror(mirror_axis, flip_axis))

    def get_maximum_axis_scale(self) -> float:
        return self.scale3d.get_abs_max()

    def get_minimum_axis_scale(self) -> float:
        return self.scale3d.get_abs_min()

    def get_determinant(self) -> float:
        return self.scale3d.x * self.scale3d.y * self.scale3d.z

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def equals(self, other: "Transform", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return (
            self.rotation.equals(other.rotation, tolerance)
            and self.translation.equals(other.translation, tolerance)
            and (self.scale3d - other.scale3d).size() < tolerance
        )

    def equals_no_scale(self, other: "Transform", tolerance: float = KINDA_SMALL_NUMBER) -> bool:
        return self.rotation.equals(other.rotation, tolerance) and self.translation.equals(
            other.translation, tolerance
        )

    def contains_nan(self) -> bool:
        return (
            self.translation.contains_nan()
            or self.rotation.contains_nan()
            or self.scale3d.contains_nan()
        )

    def is_valid(self) -> bool:
        """Finite components and a normalized rotation."""
        return not self.contains_nan() and self.rotation.is_normalized()

    def to_rotator(self) -> Rotator:
        return self.rotation.to_rotator()

    # ------------------------------------------------------------------
    # Copy-with helpers
    # ------------------------------------------------------------------

    def with_translation(self, translation: Vector3) -> "Transform":
        return replace(self, translation=translation)

    def with_rotation(self, rotation: Quaternion) -> "Transform":
        return replace(self, rotation=rotation)

    def with_scale3d(self, scale3d: Vector3) -> "Transform":
        return replace(self, scale3d=scale3d)

    def add_to_translation(self, delta: Vector3) -> "Transform":
        return replace(self, translation=self.translation + delta)

    def concatenate_rotation(self, delta: Quaternion) -> "Transform":
        """Post-multiply the rotation: delta is applied before the current rotation."""
        return replace(self, rotation=self.rotation.multiply(delta))

    def multiply_scale3d(self, multiplier: Vector3) -> "Transform":
        return replace(self, scale3d=self.scale3d * multiplier)

    def remove_scaling(self, tolerance: float = SMALL_NUMBER) -> "Transform":
        """Unit scale and a normalized rotation."""
        return Transform(self.rotation.normalized(tolerance), self.translation, ONE_VECTOR)

    def scale_translation(self, scale: Union[float, Vector3]) -> "Transform":
        return replace(self, translation=self.translation * scale)


def _unit_for(axis: Axis) -> Vector3:
    if axis == Axis.X:
        return Vector3(1.0, 0.0, 0.0)
    if axis == Axis.Y:
        return Vector3(0.0, 1.0, 0.0)
    return Vector3(0.0, 0.0, 1.0)


IDENTITY_TRANSFORM = Transform(IDENTITY_QUAT, ZERO_VECTOR, ONE_VECTOR)


def compose(first: Transform, second: Transform) -> Transform:
    """
    Transform that applies ``first`` and then ``second``.

    With A = first and B = second::

        rotation    = B.rotation * A.rotation
        scale3d     = A.scale3d * B.scale3d
        translation = B.rotation * (B.scale3d * A.translation) + B.translation

    The formula is exact for uniform scale. Under non-uniform scale combined
    with rotation it is the usual QST approximation: the result has no shear.

    Args:
        first: Transform applied first.
        second: Transform applied second.

    Returns:
        Composite transform.
    """
    return Transform(
        second.rotation.multiply(first.rotation),
        second.rotation.rotate_vector(second.scale3d * first.translation) + second.translation,
        first.scale3d * second.scale3d,
    )


def compose_rotation(first: Transform, rotation: Quaternion) -> Transform:
    """compose() with a pure rotation as the second transform."""
    return compose(first, Transform.from_rotation(rotation))


def blend(a: Transform, b: Transform, alpha: float) -> Transform:
    """
    Weighted blend of two transforms.

    Alphas within ZERO_ANIMWEIGHT_THRESH of either end return that end
    unchanged. Otherwise translation and scale lerp, the rotation uses
    fast_lerp and is renormalized.

    Args:
        a: Transform at alpha 0.
        b: Transform at alpha 1.
        alpha: Blend weight of b.

    Returns:
        Blended transform.
    """
    if alpha <= ZERO_ANIMWEIGHT_THRESH:
        return a
    if alpha >= 1.0 - ZERO_ANIMWEIGHT_THRESH:
        return b
    return Transform(
        fast_lerp(a.rotation, b.rotation, alpha).normalized(),
        scalar.lerp(a.translation, b.translation, alpha),
        scalar.lerp(a.scale3d, b.scale3d, alpha),
    )
