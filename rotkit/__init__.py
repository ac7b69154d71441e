"""
rotkit: 3x3 matrices and the rotation representations built on them (quaternions and Euler angles in six
axis orders), with numerically careful conversions between them.
"""

__version__ = version = "0.1.0"

# exposing the public API of the package
from rotkit.euler_order import EulerOrder
from rotkit._rotkit import (
    Matrix3,
    Quaternion,
    EulerAngles,
    NonPositiveDeterminantError,
)

__all__ = [
    "Matrix3",
    "Quaternion",
    "EulerAngles",
    "EulerOrder",
    "NonPositiveDeterminantError",
]
