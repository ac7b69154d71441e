# _rotkit.py

# Licensed under the Apache License, Version 2.0 (the "License")

import math
from dataclasses import dataclass
from numbers import Real
from numpy import asarray as np_asarray
from numpy import array as np_array
from numpy import array_equal as np_array_equal
from numpy import array2string as np_array2string
from numpy import column_stack as np_column_stack
from numpy import eye as np_eye
from numpy import shape as np_shape
from numpy import zeros as np_zeros
from numpy import float64 as np_float64
from numpy import ndarray
import numpy as np

from typing import Union, Optional, List, Tuple, Sequence
from rotkit.linalg import (
    det3, trace3, norm_sq3, matmul3, matvec3, inv3, inv_transpose3, orthonormalize3,
)
from rotkit.geometry import quaternion_to_rotation, rotation_to_quaternion
from rotkit.euler_order import EulerOrder, _FROM_ROTATION, _TO_QUATERNION, _TO_ROTATION

VectorLike = Union[ndarray, List[float], Tuple[float, float, float]]


class NonPositiveDeterminantError(ValueError):
    """Raised when a rotation is requested from a matrix whose determinant is not positive."""


def _readonly(matrix: ndarray) -> ndarray:
    matrix.flags.writeable = False
    return matrix


def _as_vector(vector: VectorLike) -> ndarray:
    v = np_asarray(vector, dtype=np_float64)
    if v.shape != (3,):
        raise ValueError(f"Invalid vector shape: {v.shape}")
    return v


def _component(row: int, col: int, doc: str) -> property:
    def getter(self) -> float:
        return float(self.matrix[row, col])
    return property(getter, doc=doc)


class Matrix3:
    """
    An immutable 3x3 matrix of float64 components.

    Components are stored row-major in ``matrix`` (a read-only ndarray) and
    are also available by name, where the first letter is the column and the
    second is the row: ``zx`` is column z of row x, i.e. ``matrix[0, 2]``.
    Multiplying a vector applies the rows as dot products against it, so the
    columns are the images of the basis vectors.

    Attributes:
        matrix (ndarray): 3x3 read-only component array.
    """
    __slots__ = ("matrix",)

    # numpy defers binary operators to Matrix3
    __array_ufunc__ = None

    ZERO: "Matrix3"
    IDENTITY: "Matrix3"

    def __init__(self, matrix: Optional[Union[ndarray, Sequence]] = None):
        if matrix is None:
            matrix = np_eye(3, dtype=np_float64)
        else:
            matrix = np_array(matrix, dtype=np_float64)
            if matrix.shape != (3, 3):
                raise ValueError(f"Invalid matrix shape: {matrix.shape}")
        self.matrix = _readonly(matrix)

    @classmethod
    def from_unsafe(cls, matrix: ndarray) -> "Matrix3":
        """
        Wrap a freshly built 3x3 float64 array without copying or checking it.

        The array is made read-only, so it must not be shared with code that
        still expects to write to it.
        """
        instance = object.__new__(cls)
        instance.matrix = _readonly(matrix)
        return instance

    @classmethod
    def identity(cls) -> "Matrix3":
        return cls.from_unsafe(np_eye(3, dtype=np_float64))

    @classmethod
    def zero(cls) -> "Matrix3":
        return cls.from_unsafe(np_zeros((3, 3), dtype=np_float64))

    @classmethod
    def from_components(
        cls,
        xx: float, yx: float, zx: float,
        xy: float, yy: float, zy: float,
        xz: float, yz: float, zz: float,
    ) -> "Matrix3":
        """
        Create a Matrix3 from its nine components, listed row by row.

        Returns:
            A new Matrix3 whose rows are (xx, yx, zx), (xy, yy, zy) and (xz, yz, zz).
        """
        return cls.from_unsafe(np_array(
            [[xx, yx, zx],
             [xy, yy, zy],
             [xz, yz, zz]], dtype=np_float64))

    @classmethod
    def from_columns(cls, x: VectorLike, y: VectorLike, z: VectorLike) -> "Matrix3":
        """
        Create a Matrix3 from its three column vectors.

        Args:
            x: image of the x basis vector.
            y: image of the y basis vector.
            z: image of the z basis vector.
        """
        return cls.from_unsafe(np_column_stack((_as_vector(x), _as_vector(y), _as_vector(z))))

    @classmethod
    def from_rows(cls, x_row: VectorLike, y_row: VectorLike, z_row: VectorLike) -> "Matrix3":
        return cls.from_unsafe(np_array(
            [_as_vector(x_row), _as_vector(y_row), _as_vector(z_row)], dtype=np_float64))

    @classmethod
    def from_flat_array(cls, flat_array: ndarray) -> "Matrix3":
        """
        Create a Matrix3 from a flat array.

        Args:
            flat_array: 1D array of 9 floats, row-major.

        Returns:
            A new Matrix3 whose `matrix` is constructed from the flat array.
        """
        shape = np_shape(flat_array)
        if shape != (9,):
            raise ValueError(
                f"Invalid flat array shape: {shape}")
        flat_array = np_array(flat_array, dtype=np_float64)
        return cls.from_unsafe(flat_array.reshape((3, 3)))

    @classmethod
    def from_list(cls, list_array: List[float]) -> "Matrix3":
        """
        Create a Matrix3 from a list.

        Args:
            list_array: 1D list of 9 floats, row-major.

        Returns:
            A new Matrix3 whose `matrix` is constructed from the list.
        """
        if len(list_array) != 9:
            raise ValueError(f"Invalid list array length: {len(list_array)}")
        return cls.from_unsafe(np_array(list_array, dtype=np_float64).reshape((3, 3)))

    @classmethod
    def from_quaternion(cls, quaternion: "Quaternion") -> "Matrix3":
        """Create the rotation matrix of a (not necessarily unit) quaternion."""
        return quaternion.to_matrix()

    @classmethod
    def from_euler_angles(cls, euler_angles: "EulerAngles") -> "Matrix3":
        return euler_angles.to_matrix()

    #########
    # Component getters
    #

    xx = _component(0, 0, "Column x, row x.")
    yx = _component(0, 1, "Column y, row x.")
    zx = _component(0, 2, "Column z, row x.")
    xy = _component(1, 0, "Column x, row y.")
    yy = _component(1, 1, "Column y, row y.")
    zy = _component(1, 2, "Column z, row y.")
    xz = _component(2, 0, "Column x, row z.")
    yz = _component(2, 1, "Column y, row z.")
    zz = _component(2, 2, "Column z, row z.")

    @property
    def x(self) -> ndarray:
        """
        The x column, i.e. the image of the x basis vector.

        Returns:
            A new length-3 array.
        """
        return self.matrix[:, 0].copy()

    @property
    def y(self) -> ndarray:
        """The y column as a new length-3 array."""
        return self.matrix[:, 1].copy()

    @property
    def z(self) -> ndarray:
        """The z column as a new length-3 array."""
        return self.matrix[:, 2].copy()

    @property
    def x_row(self) -> ndarray:
        return self.matrix[0, :].copy()

    @property
    def y_row(self) -> ndarray:
        return self.matrix[1, :].copy()

    @property
    def z_row(self) -> ndarray:
        return self.matrix[2, :].copy()

    #########
    # Arithmetic
    #

    def neg(self) -> "Matrix3":
        return Matrix3.from_unsafe(-self.matrix)

    def add(self, other: "Matrix3") -> "Matrix3":
        return Matrix3.from_unsafe(self.matrix + other.matrix)

    def sub(self, other: "Matrix3") -> "Matrix3":
        return Matrix3.from_unsafe(self.matrix - other.matrix)

    def mul_scalar(self, scalar: float) -> "Matrix3":
        """
        Multiply every component by a scalar. Commutes: ``s * M == M * s``.
        """
        with np.errstate(invalid="ignore", over="ignore"):
            return Matrix3.from_unsafe(self.matrix * np_float64(scalar))

    def div_scalar(self, scalar: float) -> "Matrix3":
        """
        Multiply by the reciprocal of a scalar.

        Dividing by zero follows IEEE arithmetic and yields inf/nan
        components instead of raising.
        """
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            reciprocal = np_float64(1.0) / np_float64(scalar)
        return self.mul_scalar(reciprocal)

    def mul_vector(self, vector: VectorLike) -> ndarray:
        """
        Transform a vector by this matrix.

        Args:
            vector: length-3 array-like.

        Returns:
            A new length-3 array whose components are the dot products of the
            rows of this matrix with `vector`.
        """
        return matvec3(self.matrix, _as_vector(vector))

    def matmul(self, other: "Matrix3") -> "Matrix3":
        """Compose two matrices: ``self.matmul(other)`` applies `other` first."""
        return Matrix3.from_unsafe(matmul3(self.matrix, other.matrix))

    def div(self, other: "Matrix3") -> "Matrix3":
        """
        Right division, ``self @ other.inv()``.
        """
        return self.matmul(other.inv())

    #########
    # Scalar properties
    #

    def norm_sq(self) -> float:
        """
        Square of the Frobenius norm (sum of the squares of all nine components).
        """
        return norm_sq3(self.matrix)

    def norm(self) -> float:
        """Frobenius norm."""
        return math.sqrt(self.norm_sq())

    def det(self) -> float:
        """
        Determinant, by cofactor expansion:
        ``(xz*yx - xx*yz)*zy + (xx*yy - xy*yx)*zz + (xy*yz - xz*yy)*zx``.
        """
        return det3(self.matrix)

    def trace(self) -> float:
        return trace3(self.matrix)

    #########
    # Derived matrices
    #

    def transpose(self) -> "Matrix3":
        return Matrix3.from_unsafe(self.matrix.T.copy())

    def inv(self) -> "Matrix3":
        """
        Inverse via the adjugate divided by the determinant.

        A singular matrix is not detected: its inverse has inf/nan components.

        Returns:
            A new Matrix3.
        """
        return Matrix3.from_unsafe(inv3(self.matrix))

    def inv_transpose(self) -> "Matrix3":
        """
        Transpose of the inverse, computed directly from the cofactors.
        Bit-identical to ``self.inv().transpose()``.
        """
        return Matrix3.from_unsafe(inv_transpose3(self.matrix))

    def orthonormalize(self) -> "Matrix3":
        """
        Find the nearest rotation matrix to this matrix.

        Repeatedly averages the matrix with its inverse transpose (Newton
        iteration toward the orthogonal polar factor) until |det| is within
        1e-7 of one or stops decreasing. After 100 iterations the last
        iterate is returned as is; this never raises.

        The input should have a positive determinant. A matrix with a
        negative determinant converges toward an orthonormal matrix with
        determinant -1, and a singular one yields inf/nan components.

        Returns:
            A new Matrix3, orthonormal within floating point tolerance.
        """
        return Matrix3.from_unsafe(orthonormalize3(self.matrix))

    def lerp(self, other: "Matrix3", t: float) -> "Matrix3":
        """
        Linearly interpolate this matrix toward `other`.

        Args:
            other: the matrix toward which to interpolate.
            t: interpolation amount; 0 gives this matrix and 1 gives `other`.

        Returns:
            ``(1 - t)*self + t*other``
        """
        return self.mul_scalar(1.0 - t).add(other.mul_scalar(t))

    #########
    # Rotation conversions
    #

    def _check_orientation(self, target: str) -> None:
        d = self.det()
        # also rejects a nan determinant
        if not d > 0.0:
            raise NonPositiveDeterminantError(
                f"Cannot convert a matrix with non-positive determinant ({d}) to {target}")

    def to_quaternion_assuming_orthonormal(self) -> "Quaternion":
        """
        Create the quaternion for this matrix, which must already be a rotation.

        Uses the largest-diagonal extraction. The result is scaled by a
        positive factor and is *not* normalized; call
        :meth:`Quaternion.normalize` for a unit quaternion.

        Raises:
            NonPositiveDeterminantError: if ``det() <= 0``.
        """
        self._check_orientation("a quaternion")
        return Quaternion(*rotation_to_quaternion(self.matrix))

    def to_quaternion(self) -> "Quaternion":
        """
        Orthonormalize this matrix, then create its (un-normalized) quaternion.

        Raises:
            NonPositiveDeterminantError: if ``det() <= 0``.
        """
        self._check_orientation("a quaternion")
        return self.orthonormalize().to_quaternion_assuming_orthonormal()

    def to_euler_angles_assuming_orthonormal(self, order: Union[EulerOrder, str]) -> "EulerAngles":
        """
        Decompose this matrix, which must already be a rotation, into Euler angles.

        Each angle comes straight from ``atan2``: the outer two lie in
        (-pi, pi] and the middle one in [-pi/2, pi/2]. At gimbal lock (cosine
        of the middle angle exactly zero) one outer angle is set to 0.

        Args:
            order: the axis order of the returned angles.

        Raises:
            NonPositiveDeterminantError: if ``det() <= 0``.
        """
        order = EulerOrder(order)
        self._check_orientation("euler angles")
        x, y, z = _FROM_ROTATION[order](self.matrix)
        return EulerAngles(order, x, y, z)

    def to_euler_angles(self, order: Union[EulerOrder, str]) -> "EulerAngles":
        """
        Orthonormalize this matrix, then decompose it into Euler angles.

        Raises:
            NonPositiveDeterminantError: if ``det() <= 0``.
        """
        order = EulerOrder(order)
        self._check_orientation("euler angles")
        return self.orthonormalize().to_euler_angles_assuming_orthonormal(order)

    #########
    # Export
    #

    def to_list(self) -> List[float]:
        """The nine components, row-major."""
        return self.matrix.flatten().tolist()

    def flatten(self) -> ndarray:
        return self.matrix.flatten()

    #########
    # Dunder methods
    #

    def __neg__(self) -> "Matrix3":
        return self.neg()

    def __add__(self, other: "Matrix3") -> "Matrix3":
        if not isinstance(other, Matrix3):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: "Matrix3") -> "Matrix3":
        if not isinstance(other, Matrix3):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: Union["Matrix3", float, VectorLike]) -> Union["Matrix3", ndarray]:
        """
        Multiply by a scalar, a vector or another matrix.

        Returns:
            A new Matrix3 for scalar and Matrix3 operands. A length-3 array
            for a vector operand, a 3x3 array for a raw 3x3 array operand.
            Arrays of any other shape are not supported.
        """
        if isinstance(other, Matrix3):
            return self.matmul(other)
        if isinstance(other, Real):
            return self.mul_scalar(other)
        if isinstance(other, (ndarray, list, tuple)):
            return self._mul_array(other)
        return NotImplemented

    def __rmul__(self, other: float) -> "Matrix3":
        if isinstance(other, Real):
            return self.mul_scalar(other)
        return NotImplemented

    def __matmul__(self, other: Union["Matrix3", VectorLike]) -> Union["Matrix3", ndarray]:
        if isinstance(other, Matrix3):
            return self.matmul(other)
        if isinstance(other, (ndarray, list, tuple)):
            return self._mul_array(other)
        return NotImplemented

    def _mul_array(self, other: VectorLike) -> ndarray:
        # vectors are transformed, raw 3x3 arrays are multiplied as matrices
        arr = np_asarray(other, dtype=np_float64)
        if np_shape(arr) == (3,):
            return matvec3(self.matrix, arr)
        if np_shape(arr) == (3, 3):
            return matmul3(self.matrix, arr)
        return NotImplemented

    def __truediv__(self, other: Union["Matrix3", float]) -> "Matrix3":
        if isinstance(other, Matrix3):
            return self.div(other)
        if isinstance(other, Real):
            return self.div_scalar(other)
        return NotImplemented

    def __rtruediv__(self, other: float) -> "Matrix3":
        """
        ``s / M`` is ``M.inv() * s``.
        """
        if isinstance(other, Real):
            return self.inv().mul_scalar(other)
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        """
        True if `other` is a Matrix3 with exactly the same components.
        """
        if not isinstance(other, Matrix3):
            return NotImplemented
        return bool(np_array_equal(self.matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(tuple(self.matrix.ravel().tolist()))

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        mat = np_array2string(self.matrix, precision=6, separator=', ')
        return f"{cls}(matrix=\n{mat}\n)"

    def __str__(self) -> str:
        return self.__repr__()

    def __copy__(self) -> "Matrix3":
        # immutable, so the instance itself is its copy
        return self

    def __deepcopy__(self, memo) -> "Matrix3":
        return self

    def __reduce__(self):
        """
        Pickle support: reduces to (class, (matrix,))
        """
        return (self.__class__, (self.matrix.copy(),))


Matrix3.ZERO = Matrix3.zero()
Matrix3.IDENTITY = Matrix3.identity()


@dataclass(frozen=True, slots=True)
class Quaternion:
    """
    A quaternion ``w + x*i + y*j + z*k`` used to represent rotations.

    Components are stored exactly as given; nothing is normalized on
    construction. Conversions that produce quaternions from matrices return
    non-unit quaternions, use :meth:`normalize` where unit length matters.
    ``q`` and ``-q`` represent the same rotation.
    """
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, array: Union[ndarray, Sequence[float]], w_last: bool = False) -> "Quaternion":
        """
        Create a Quaternion from a 4-element array.

        Args:
            array: the components.
            w_last: if True, `array` is [x, y, z, w], otherwise [w, x, y, z].
        """
        a = np_asarray(array, dtype=np_float64)
        if a.shape != (4,):
            raise ValueError(f"Invalid quaternion shape: {a.shape}")
        if w_last:
            return cls(float(a[3]), float(a[0]), float(a[1]), float(a[2]))
        return cls(float(a[0]), float(a[1]), float(a[2]), float(a[3]))

    @classmethod
    def from_matrix(cls, matrix: Matrix3) -> "Quaternion":
        return matrix.to_quaternion()

    @classmethod
    def from_euler_angles(cls, euler_angles: "EulerAngles") -> "Quaternion":
        return euler_angles.to_quaternion()

    def to_array(self, w_last: bool = False) -> ndarray:
        if w_last:
            return np_array([self.x, self.y, self.z, self.w], dtype=np_float64)
        return np_array([self.w, self.x, self.y, self.z], dtype=np_float64)

    def norm_sq(self) -> float:
        return self.w*self.w + self.x*self.x + self.y*self.y + self.z*self.z

    def norm(self) -> float:
        return math.sqrt(self.norm_sq())

    def normalize(self) -> "Quaternion":
        """
        Scale to unit length. A zero quaternion gives nan components.
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            inv_n = np_float64(1.0) / np_float64(self.norm())
            return Quaternion(
                float(self.w*inv_n), float(self.x*inv_n), float(self.y*inv_n), float(self.z*inv_n))

    def conjugate(self) -> "Quaternion":
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def dot(self, other: "Quaternion") -> float:
        return self.w*other.w + self.x*other.x + self.y*other.y + self.z*other.z

    def is_same_rotation(self, other: "Quaternion", atol: float = 1e-9) -> bool:
        """
        True if both quaternions describe the same rotation, i.e. their unit
        quaternions are equal up to an overall sign.
        """
        a = self.normalize().to_array()
        b = other.normalize().to_array()
        return bool(np.allclose(a, b, rtol=0.0, atol=atol) or np.allclose(a, -b, rtol=0.0, atol=atol))

    def to_matrix(self) -> Matrix3:
        """
        Rotation matrix of this quaternion. Non-unit quaternions are accepted
        and give the same matrix as their normalized form.
        """
        return Matrix3.from_unsafe(quaternion_to_rotation(self.w, self.x, self.y, self.z))

    def to_euler_angles(self, order: Union[EulerOrder, str]) -> "EulerAngles":
        return self.to_matrix().to_euler_angles(order)

    def __neg__(self) -> "Quaternion":
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        """
        Hamilton product; ``a * b`` rotates by `b` first, then by `a`.
        """
        if not isinstance(other, Quaternion):
            return NotImplemented
        aw, ax, ay, az = self.w, self.x, self.y, self.z
        bw, bx, by, bz = other.w, other.x, other.y, other.z
        return Quaternion(
            aw*bw - ax*bx - ay*by - az*bz,
            aw*bx + ax*bw + ay*bz - az*by,
            aw*by - ax*bz + ay*bw + az*bx,
            aw*bz + ax*by - ay*bx + az*bw,
        )


@dataclass(frozen=True, slots=True)
class EulerAngles:
    """
    Three rotation angles in radians together with the order they apply in.

    ``EulerAngles(EulerOrder.XYZ, x, y, z)`` is the rotation
    ``Rx(x) @ Ry(y) @ Rz(z)``. Angles are not wrapped into any range.

    Attributes:
        order (EulerOrder): axis order; a name such as ``"zyx"`` is accepted.
        x (float): angle about the x axis.
        y (float): angle about the y axis.
        z (float): angle about the z axis.
    """
    order: EulerOrder
    x: float
    y: float
    z: float

    def __post_init__(self):
        object.__setattr__(self, "order", EulerOrder(self.order))
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "z", float(self.z))

    @classmethod
    def from_degrees(cls, order: Union[EulerOrder, str], x: float, y: float, z: float) -> "EulerAngles":
        return cls(order, math.radians(x), math.radians(y), math.radians(z))

    @classmethod
    def from_matrix(cls, matrix: Matrix3, order: Union[EulerOrder, str]) -> "EulerAngles":
        return matrix.to_euler_angles(order)

    @property
    def angles(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_degrees(self) -> Tuple[float, float, float]:
        """The (x, y, z) angles converted to degrees."""
        return (math.degrees(self.x), math.degrees(self.y), math.degrees(self.z))

    def to_quaternion(self) -> Quaternion:
        """
        Quaternion of the same rotation, from the half-angle sines and cosines.
        Unit length up to rounding; not re-normalized.
        """
        return Quaternion(*_TO_QUATERNION[self.order](self.x, self.y, self.z))

    def to_matrix(self) -> Matrix3:
        """
        Rotation matrix equal to composing the three elementary rotations in
        this order.
        """
        return Matrix3.from_unsafe(_TO_ROTATION[self.order](self.x, self.y, self.z))
