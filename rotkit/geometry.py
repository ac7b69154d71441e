# geometry.py
import math
from numpy import float64 as np_float64
from numpy import ndarray
import numpy as np
from typing import Tuple
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

# magnitude of the middle angle at gimbal lock
HALF_PI = math.pi / 2.0


@njit(cache=True, error_model="numpy")
def quaternion_to_rotation(w: float, x: float, y: float, z: float) -> ndarray:
    """
    Convert a quaternion to a 3x3 rotation matrix.

    The quaternion does not need to be of unit length: every product is
    scaled by 2/|q|^2, so q and any positive or negative multiple of q give
    the same matrix.

    Parameters:
        w, x, y, z (float): The quaternion components, scalar first.

    Returns:
        ndarray: A 3x3 rotation matrix corresponding to the input quaternion.
    """
    n = w*w + x*x + y*y + z*z
    s = 2.0/n

    # precompute products
    xx = x*x*s
    yy = y*y*s
    zz = z*z*s
    xy = x*y*s
    xz = x*z*s
    yz = y*z*s
    wx = w*x*s
    wy = w*y*s
    wz = w*z*s

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = 1 - (yy + zz)
    R[0, 1] = xy - wz
    R[0, 2] = xz + wy

    R[1, 0] = xy + wz
    R[1, 1] = 1 - (xx + zz)
    R[1, 2] = yz - wx

    R[2, 0] = xz - wy
    R[2, 1] = yz + wx
    R[2, 2] = 1 - (xx + yy)
    return R


@njit(cache=True)
def rotation_to_quaternion(rotation: ndarray) -> Tuple[float, float, float, float]:
    """
    Converts a 3x3 rotation matrix to an un-normalized quaternion (w, x, y, z).

    The branch is chosen from the diagonal so that the component computed
    from ``1 +/- diagonal terms`` is the largest one, avoiding cancellation.
    All four components carry the same positive scale factor (4 times the
    largest component of the unit quaternion); the result is not normalized.

    Parameters:
        rotation (ndarray): A 3x3 orthonormal matrix with positive determinant.

    Returns:
        tuple of float: (w, x, y, z)
    """
    # unpack to locals (avoids repeated indexing)
    a00, a01, a02 = rotation[0, 0], rotation[0, 1], rotation[0, 2]
    a10, a11, a12 = rotation[1, 0], rotation[1, 1], rotation[1, 2]
    a20, a21, a22 = rotation[2, 0], rotation[2, 1], rotation[2, 2]

    if a11 > -a22 and a22 > -a00 and a00 > -a11:
        return (1.0 + a00 + a11 + a22, a21 - a12, a02 - a20, a10 - a01)
    elif a00 > a11 and a00 > a22:
        return (a21 - a12, 1.0 + a00 - a11 - a22, a10 + a01, a20 + a02)
    elif a11 > a22:
        return (a02 - a20, a10 + a01, 1.0 - a00 + a11 - a22, a21 + a12)
    else:
        return (a10 - a01, a20 + a02, a21 + a12, 1.0 - a00 - a11 + a22)


#########
# Matrix -> Euler angles, one kernel per order.
#
# Each returns (x, y, z) in radians. ``kc`` is cos^2 of the middle angle;
# when it is exactly zero the first and last axes coincide, one of their
# angles is pinned to 0 and the middle angle is +/- pi/2.
#

@njit(cache=True)
def rotation_to_euler_xyz(R: ndarray) -> Tuple[float, float, float]:
    kc = R[1, 2]*R[1, 2] + R[2, 2]*R[2, 2]
    if kc == 0.0:
        return (math.atan2(R[2, 1], R[1, 1]), math.copysign(HALF_PI, R[0, 2]), 0.0)

    return (
        math.atan2(-R[1, 2], R[2, 2]),
        math.atan2(R[0, 2], math.sqrt(kc)),
        math.atan2(R[1, 0]*R[2, 2] - R[2, 0]*R[1, 2], R[1, 1]*R[2, 2] - R[2, 1]*R[1, 2]),
    )


@njit(cache=True)
def rotation_to_euler_yzx(R: ndarray) -> Tuple[float, float, float]:
    kc = R[0, 0]*R[0, 0] + R[2, 0]*R[2, 0]
    if kc == 0.0:
        return (0.0, math.atan2(R[0, 2], R[2, 2]), math.copysign(HALF_PI, R[1, 0]))

    return (
        math.atan2(R[0, 0]*R[2, 1] - R[2, 0]*R[0, 1], R[0, 0]*R[2, 2] - R[2, 0]*R[0, 2]),
        math.atan2(-R[2, 0], R[0, 0]),
        math.atan2(R[1, 0], math.sqrt(kc)),
    )


@njit(cache=True)
def rotation_to_euler_zxy(R: ndarray) -> Tuple[float, float, float]:
    kc = R[1, 1]*R[1, 1] + R[0, 1]*R[0, 1]
    if kc == 0.0:
        return (math.copysign(HALF_PI, R[2, 1]), 0.0, math.atan2(R[1, 0], R[0, 0]))

    return (
        math.atan2(R[2, 1], math.sqrt(kc)),
        math.atan2(R[1, 1]*R[0, 2] - R[0, 1]*R[1, 2], R[1, 1]*R[0, 0] - R[0, 1]*R[1, 0]),
        math.atan2(-R[0, 1], R[1, 1]),
    )


@njit(cache=True)
def rotation_to_euler_zyx(R: ndarray) -> Tuple[float, float, float]:
    kc = R[1, 0]*R[1, 0] + R[0, 0]*R[0, 0]
    if kc == 0.0:
        return (0.0, math.copysign(HALF_PI, -R[2, 0]), math.atan2(-R[0, 1], R[1, 1]))

    return (
        math.atan2(R[0, 2]*R[1, 0] - R[1, 2]*R[0, 0], R[1, 1]*R[0, 0] - R[0, 1]*R[1, 0]),
        math.atan2(-R[2, 0], math.sqrt(kc)),
        math.atan2(R[1, 0], R[0, 0]),
    )


@njit(cache=True)
def rotation_to_euler_yxz(R: ndarray) -> Tuple[float, float, float]:
    kc = R[0, 2]*R[0, 2] + R[2, 2]*R[2, 2]
    if kc == 0.0:
        return (math.copysign(HALF_PI, -R[1, 2]), math.atan2(-R[2, 0], R[0, 0]), 0.0)

    return (
        math.atan2(-R[1, 2], math.sqrt(kc)),
        math.atan2(R[0, 2], R[2, 2]),
        math.atan2(R[2, 1]*R[0, 2] - R[0, 1]*R[2, 2], R[0, 0]*R[2, 2] - R[2, 0]*R[0, 2]),
    )


@njit(cache=True)
def rotation_to_euler_xzy(R: ndarray) -> Tuple[float, float, float]:
    kc = R[2, 1]*R[2, 1] + R[1, 1]*R[1, 1]
    if kc == 0.0:
        return (math.atan2(-R[1, 2], R[2, 2]), 0.0, math.copysign(HALF_PI, -R[0, 1]))

    return (
        math.atan2(R[2, 1], R[1, 1]),
        math.atan2(R[1, 0]*R[2, 1] - R[2, 0]*R[1, 1], R[2, 2]*R[1, 1] - R[1, 2]*R[2, 1]),
        math.atan2(-R[0, 1], math.sqrt(kc)),
    )


#########
# Euler angles -> quaternion, one kernel per order.
#
# Each is the product of the three elementary half-angle quaternions taken
# in the order named, returned as (w, x, y, z). Not re-normalized.
#

@njit(cache=True)
def euler_xyz_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz - sx*sy*sz,
        cy*cz*sx + cx*sy*sz,
        cx*cz*sy - cy*sx*sz,
        cz*sx*sy + cx*cy*sz,
    )


@njit(cache=True)
def euler_yzx_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz - sx*sy*sz,
        cy*cz*sx + cx*sy*sz,
        cx*cz*sy + cy*sx*sz,
        cx*cy*sz - cz*sx*sy,
    )


@njit(cache=True)
def euler_zxy_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz - sx*sy*sz,
        cy*cz*sx - cx*sy*sz,
        cx*cz*sy + cy*sx*sz,
        cz*sx*sy + cx*cy*sz,
    )


@njit(cache=True)
def euler_zyx_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz + sx*sy*sz,
        cy*cz*sx - cx*sy*sz,
        cx*cz*sy + cy*sx*sz,
        cx*cy*sz - cz*sx*sy,
    )


@njit(cache=True)
def euler_yxz_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz + sx*sy*sz,
        cy*cz*sx + cx*sy*sz,
        cx*cz*sy - cy*sx*sz,
        cx*cy*sz - cz*sx*sy,
    )


@njit(cache=True)
def euler_xzy_to_quaternion(x: float, y: float, z: float) -> Tuple[float, float, float, float]:
    cx, sx = math.cos(x*0.5), math.sin(x*0.5)
    cy, sy = math.cos(y*0.5), math.sin(y*0.5)
    cz, sz = math.cos(z*0.5), math.sin(z*0.5)
    return (
        cx*cy*cz + sx*sy*sz,
        cy*cz*sx - cx*sy*sz,
        cx*cz*sy - cy*sx*sz,
        cz*sx*sy + cx*cy*sz,
    )


#########
# Euler angles -> rotation matrix, one kernel per order.
#
# Hand-expanded products of the elementary rotations, e.g. XYZ is
# Rx(x) @ Ry(y) @ Rz(z).
#

@njit(cache=True)
def euler_xyz_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz
    R[0, 1] = -cy*sz
    R[0, 2] = sy

    R[1, 0] = cz*sx*sy + cx*sz
    R[1, 1] = cx*cz - sx*sy*sz
    R[1, 2] = -cy*sx

    R[2, 0] = sx*sz - cx*cz*sy
    R[2, 1] = cz*sx + cx*sy*sz
    R[2, 2] = cx*cy
    return R


@njit(cache=True)
def euler_yzx_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz
    R[0, 1] = sx*sy - cx*cy*sz
    R[0, 2] = cx*sy + cy*sx*sz

    R[1, 0] = sz
    R[1, 1] = cx*cz
    R[1, 2] = -cz*sx

    R[2, 0] = -cz*sy
    R[2, 1] = cy*sx + cx*sy*sz
    R[2, 2] = cx*cy - sx*sy*sz
    return R


@njit(cache=True)
def euler_zxy_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz - sx*sy*sz
    R[0, 1] = -cx*sz
    R[0, 2] = cz*sy + cy*sx*sz

    R[1, 0] = cz*sx*sy + cy*sz
    R[1, 1] = cx*cz
    R[1, 2] = sy*sz - cy*cz*sx

    R[2, 0] = -cx*sy
    R[2, 1] = sx
    R[2, 2] = cx*cy
    return R


@njit(cache=True)
def euler_zyx_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    # R = Rz(z) @ Ry(y) @ Rx(x)
    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz
    R[0, 1] = cz*sx*sy - cx*sz
    R[0, 2] = cx*cz*sy + sx*sz

    R[1, 0] = cy*sz
    R[1, 1] = cx*cz + sx*sy*sz
    R[1, 2] = cx*sy*sz - cz*sx

    R[2, 0] = -sy
    R[2, 1] = cy*sx
    R[2, 2] = cx*cy
    return R


@njit(cache=True)
def euler_yxz_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz + sx*sy*sz
    R[0, 1] = cz*sx*sy - cy*sz
    R[0, 2] = cx*sy

    R[1, 0] = cx*sz
    R[1, 1] = cx*cz
    R[1, 2] = -sx

    R[2, 0] = cy*sx*sz - cz*sy
    R[2, 1] = cy*cz*sx + sy*sz
    R[2, 2] = cx*cy
    return R


@njit(cache=True)
def euler_xzy_to_rotation(x: float, y: float, z: float) -> ndarray:
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cz
    R[0, 1] = -sz
    R[0, 2] = cz*sy

    R[1, 0] = sx*sy + cx*cy*sz
    R[1, 1] = cx*cz
    R[1, 2] = cx*sy*sz - cy*sx

    R[2, 0] = cy*sx*sz - cx*sy
    R[2, 1] = cz*sx
    R[2, 2] = cx*cy + sx*sy*sz
    return R
