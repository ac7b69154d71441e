from enum import Enum
from rotkit.geometry import (
    rotation_to_euler_xyz, rotation_to_euler_yzx, rotation_to_euler_zxy,
    rotation_to_euler_zyx, rotation_to_euler_yxz, rotation_to_euler_xzy,
    euler_xyz_to_quaternion, euler_yzx_to_quaternion, euler_zxy_to_quaternion,
    euler_zyx_to_quaternion, euler_yxz_to_quaternion, euler_xzy_to_quaternion,
    euler_xyz_to_rotation, euler_yzx_to_rotation, euler_zxy_to_rotation,
    euler_zyx_to_rotation, euler_yxz_to_rotation, euler_xzy_to_rotation,
)


class EulerOrder(Enum):
    """Order in which the x, y and z rotations are composed."""
    XYZ = "XYZ"
    YZX = "YZX"
    ZXY = "ZXY"
    ZYX = "ZYX"
    YXZ = "YXZ"
    XZY = "XZY"

    @classmethod
    def _missing_(cls, value):
        # accept lower-case names such as "zyx"
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None


# each table covers every EulerOrder, so lookups never miss
_FROM_ROTATION = {
    EulerOrder.XYZ: rotation_to_euler_xyz,
    EulerOrder.YZX: rotation_to_euler_yzx,
    EulerOrder.ZXY: rotation_to_euler_zxy,
    EulerOrder.ZYX: rotation_to_euler_zyx,
    EulerOrder.YXZ: rotation_to_euler_yxz,
    EulerOrder.XZY: rotation_to_euler_xzy,
}

_TO_QUATERNION = {
    EulerOrder.XYZ: euler_xyz_to_quaternion,
    EulerOrder.YZX: euler_yzx_to_quaternion,
    EulerOrder.ZXY: euler_zxy_to_quaternion,
    EulerOrder.ZYX: euler_zyx_to_quaternion,
    EulerOrder.YXZ: euler_yxz_to_quaternion,
    EulerOrder.XZY: euler_xzy_to_quaternion,
}

_TO_ROTATION = {
    EulerOrder.XYZ: euler_xyz_to_rotation,
    EulerOrder.YZX: euler_yzx_to_rotation,
    EulerOrder.ZXY: euler_zxy_to_rotation,
    EulerOrder.ZYX: euler_zyx_to_rotation,
    EulerOrder.YXZ: euler_yxz_to_rotation,
    EulerOrder.XZY: euler_xzy_to_rotation,
}
