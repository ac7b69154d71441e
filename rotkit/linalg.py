# linalg.py

import math
import numpy as np
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

# orthonormalize stops once |det| is this close to 1
ORTHONORMALIZE_DET_TOLERANCE = 1.0000001
ORTHONORMALIZE_MAX_ITERATIONS = 100


@njit(cache=True)
def det3(M: ndarray) -> float:
    """Determinant of a 3 x 3 by cofactor expansion."""
    return (
        (M[2, 0]*M[0, 1] - M[0, 0]*M[2, 1])*M[1, 2]
        + (M[0, 0]*M[1, 1] - M[1, 0]*M[0, 1])*M[2, 2]
        + (M[1, 0]*M[2, 1] - M[2, 0]*M[1, 1])*M[0, 2]
    )


@njit(cache=True)
def trace3(M: ndarray) -> float:
    return M[0, 0] + M[1, 1] + M[2, 2]


@njit(cache=True)
def norm_sq3(M: ndarray) -> float:
    """Squared Frobenius norm of a 3 x 3."""
    total = 0.0
    for i in range(3):
        for j in range(3):
            total += M[i, j]*M[i, j]
    return total


@njit(cache=True)
def matmul3(A: ndarray, B: ndarray) -> ndarray:
    """Row-by-column product of two 3 x 3 matrices."""
    out = np.empty((3, 3), dtype=np_float64)
    for i in range(3):
        for j in range(3):
            out[i, j] = A[i, 0]*B[0, j] + A[i, 1]*B[1, j] + A[i, 2]*B[2, j]
    return out


@njit(cache=True)
def matvec3(M: ndarray, v: ndarray) -> ndarray:
    out = np.empty(3, dtype=np_float64)
    for i in range(3):
        out[i] = M[i, 0]*v[0] + M[i, 1]*v[1] + M[i, 2]*v[2]
    return out


@njit(cache=True, error_model="numpy")
def inv3(M: ndarray) -> ndarray:
    """
    Analytic inverse of a 3 x 3 (adjugate over determinant).

    Each cofactor is divided by the determinant individually. A singular
    matrix yields inf/nan entries rather than raising.
    """
    a00, a01, a02 = M[0, 0], M[0, 1], M[0, 2]
    a10, a11, a12 = M[1, 0], M[1, 1], M[1, 2]
    a20, a21, a22 = M[2, 0], M[2, 1], M[2, 2]
    d = det3(M)

    out = np.empty((3, 3), dtype=np_float64)
    out[0, 0] = (a11*a22 - a21*a12)/d
    out[0, 1] = (a21*a02 - a01*a22)/d
    out[0, 2] = (a01*a12 - a11*a02)/d

    out[1, 0] = (a20*a12 - a10*a22)/d
    out[1, 1] = (a00*a22 - a20*a02)/d
    out[1, 2] = (a10*a02 - a00*a12)/d

    out[2, 0] = (a10*a21 - a20*a11)/d
    out[2, 1] = (a20*a01 - a00*a21)/d
    out[2, 2] = (a00*a11 - a10*a01)/d
    return out


@njit(cache=True, error_model="numpy")
def inv_transpose3(M: ndarray) -> ndarray:
    """
    Transpose of the inverse of a 3 x 3, built directly from the cofactors.

    Uses the exact expressions of ``inv3`` so the result is bit-identical to
    ``inv3(M).T``.
    """
    a00, a01, a02 = M[0, 0], M[0, 1], M[0, 2]
    a10, a11, a12 = M[1, 0], M[1, 1], M[1, 2]
    a20, a21, a22 = M[2, 0], M[2, 1], M[2, 2]
    d = det3(M)

    out = np.empty((3, 3), dtype=np_float64)
    out[0, 0] = (a11*a22 - a21*a12)/d
    out[0, 1] = (a20*a12 - a10*a22)/d
    out[0, 2] = (a10*a21 - a20*a11)/d

    out[1, 0] = (a21*a02 - a01*a22)/d
    out[1, 1] = (a00*a22 - a20*a02)/d
    out[1, 2] = (a20*a01 - a00*a21)/d

    out[2, 0] = (a01*a12 - a11*a02)/d
    out[2, 1] = (a10*a02 - a00*a12)/d
    out[2, 2] = (a00*a11 - a10*a01)/d
    return out


@njit(cache=True, error_model="numpy")
def orthonormalize3(M: ndarray) -> ndarray:
    """
    Nearest rotation to M by averaging with the inverse transpose.

    Newton iteration toward the orthogonal polar factor. Stops as soon as
    |det| is within tolerance of 1 or stops decreasing; after
    ORTHONORMALIZE_MAX_ITERATIONS the last iterate is returned as is.

    Parameters:
        M (ndarray): A 3x3 matrix with positive determinant.

    Returns:
        ndarray: A new 3x3 matrix, approximately orthonormal with det ~ 1.
    """
    cur = np.empty((3, 3), dtype=np_float64)
    cur[:, :] = M
    cur_det = math.inf
    for _ in range(ORTHONORMALIZE_MAX_ITERATIONS):
        it = inv_transpose3(cur)
        new = np.empty((3, 3), dtype=np_float64)
        for i in range(3):
            for j in range(3):
                new[i, j] = (cur[i, j] + it[i, j])*0.5
        new_det = abs(det3(new))
        # almost always exits on the first pass
        if new_det <= ORTHONORMALIZE_DET_TOLERANCE or new_det >= cur_det:
            return new
        cur = new
        cur_det = new_det
    return cur
