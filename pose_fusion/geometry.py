# pose_fusion/geometry.py
import math
from typing import Tuple

import numpy as np

from .types import Pose2d, Pose3d

ArrayLike = np.ndarray


def rpy_to_R(roll: float, pitch: float, yaw: float) -> ArrayLike:
    """ZYX欧拉：R = Rz(yaw) @ Ry(pitch) @ Rx(roll)"""
    cr, sr = math.cos(roll),  math.sin(roll)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw),   math.sin(yaw)
    Rx = np.array([[1, 0, 0],
                   [0, cr, -sr],
                   [0, sr,  cr]], dtype=float)
    Ry = np.array([[cp, 0, sp],
                   [0,  1, 0 ],
                   [-sp, 0, cp]], dtype=float)
    Rz = np.array([[cy, -sy, 0],
                   [sy,  cy, 0],
                   [0,    0, 1]], dtype=float)
    return Rz @ Ry @ Rx


def R_to_rpy_zyx(R: ArrayLike) -> Tuple[float, float, float]:
    """返回 (roll, pitch, yaw)；ZYX"""
    R = np.asarray(R, float)
    sp = max(min(-R[2, 0], 1.0), -1.0)
    pitch = math.asin(sp)
    if abs(abs(pitch) - math.pi / 2) < 1e-9:
        # 万向锁：roll 归零，全部转角记到 yaw
        roll = 0.0
        yaw = math.atan2(-R[0, 1], R[1, 1])
    else:
        roll = math.atan2(R[2, 1], R[2, 2])
        yaw = math.atan2(R[1, 0], R[0, 0])
    return roll, pitch, yaw


def quaternion_to_R(w: float, x: float, y: float, z: float) -> ArrayLike:
    """单位四元数 (w, x, y, z) 转旋转矩阵；输入会先归一化"""
    n = math.sqrt(w * w + x * x + y * y + z * z)
    if n < 1e-12:
        raise ValueError("四元数模长为 0")
    w, x, y, z = w / n, x / n, y / n, z / n
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z),     2 * (x * z + w * y)],
        [2 * (x * y + w * z),     1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y),     2 * (y * z + w * x),     1 - 2 * (x * x + y * y)],
    ], dtype=float)


def se3(R: ArrayLike, t: ArrayLike) -> ArrayLike:
    """组装 4x4 齐次矩阵"""
    T = np.eye(4, dtype=float)
    T[:3, :3] = R
    T[:3, 3] = np.asarray(t, float).reshape(3)
    return T


def inv_se3(T: ArrayLike) -> ArrayLike:
    """4x4 齐次矩阵求逆"""
    R = T[:3, :3]
    t = T[:3, 3]
    Ti = np.eye(4, dtype=float)
    Rt = R.T
    Ti[:3, :3] = Rt
    Ti[:3, 3] = -Rt @ t
    return Ti


def pose_to_matrix(pose: Pose3d) -> ArrayLike:
    return se3(rpy_to_R(pose.roll, pose.pitch, pose.yaw), (pose.x, pose.y, pose.z))


def matrix_to_pose(T: ArrayLike) -> Pose3d:
    T = np.asarray(T, float)
    roll, pitch, yaw = R_to_rpy_zyx(T[:3, :3])
    t = T[:3, 3]
    return Pose3d(float(t[0]), float(t[1]), float(t[2]), float(roll), float(pitch), float(yaw))


def transform_by(pose: Pose3d, transform: Pose3d) -> Pose3d:
    """pose ∘ transform：在 pose 自身坐标系下施加 transform"""
    return matrix_to_pose(pose_to_matrix(pose) @ pose_to_matrix(transform))


def inverse(transform: Pose3d) -> Pose3d:
    return matrix_to_pose(inv_se3(pose_to_matrix(transform)))


def planar_norm(pose: Pose3d) -> float:
    """平移在 XY 平面上的模长"""
    return math.hypot(pose.x, pose.y)


def planar_distance(a: Pose2d, b: Pose2d) -> float:
    """两个平面位姿之间的平移距离"""
    return math.hypot(a.x - b.x, a.y - b.y)
