# pose_fusion/pnp.py
"""
多 Tag 相机位姿解算（OpenCV solvePnP）

- 物方点：每个已知 Tag 的四个角点在场地系下的坐标
- 像方点：流水线上报的像素角点，按 Tag 顺序每 4 个一组，与 tag_corners_local 的顺序一一对应
- 输出：相机（机体系，x 前）在场地系下的位姿 field ← cam

OpenCV 的相机光学系为 x 右、y 下、z 前，机体系为 x 前、y 左、z 上，两者之间是固定旋转。
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from core.logger import logger

from .geometry import inv_se3, matrix_to_pose, pose_to_matrix, se3
from .types import Pose3d

# p_optical = R_OPTICAL_BODY @ p_body
R_OPTICAL_BODY = np.array([[0.0, -1.0, 0.0],
                           [0.0, 0.0, -1.0],
                           [1.0, 0.0, 0.0]], dtype=float)
T_OPTICAL_BODY = se3(R_OPTICAL_BODY, np.zeros(3))


@dataclass(frozen=True)
class PnpResult:
    camera_pose: Pose3d        # field ← cam
    reprojection_error: float  # 像素 RMS


def tag_corners_local(tag_size: float) -> np.ndarray:
    """Tag 自身坐标系（x 垂直于 Tag 面指向外）下的四个角点，(4, 3)"""
    h = tag_size / 2.0
    return np.array([
        [0.0, -h, -h],
        [0.0,  h, -h],
        [0.0,  h,  h],
        [0.0, -h,  h],
    ], dtype=float)


def tag_corners_field(tag_pose: Pose3d, tag_size: float) -> np.ndarray:
    """Tag 四个角点在场地系下的坐标，(4, 3)"""
    T = pose_to_matrix(tag_pose)
    return tag_corners_local(tag_size) @ T[:3, :3].T + T[:3, 3]


def optical_extrinsics(camera_pose: Pose3d) -> Tuple[np.ndarray, np.ndarray]:
    """field ← cam 位姿转为 OpenCV 外参 (rvec, tvec)，即 optical ← field"""
    T_opt_field = T_OPTICAL_BODY @ inv_se3(pose_to_matrix(camera_pose))
    rvec, _ = cv2.Rodrigues(T_opt_field[:3, :3])
    return rvec, T_opt_field[:3, 3].reshape(3, 1).copy()


def project_tag_corners(camera_pose: Pose3d, tag_poses: Sequence[Pose3d],
                        camera_matrix: Sequence[float], dist_coeffs: Sequence[float],
                        tag_size: float) -> np.ndarray:
    """把若干 Tag 的角点投影到图像上，(4N, 2)"""
    obj = np.vstack([tag_corners_field(p, tag_size) for p in tag_poses])
    rvec, tvec = optical_extrinsics(camera_pose)
    img, _ = cv2.projectPoints(obj, rvec, tvec, _as_K(camera_matrix), _as_D(dist_coeffs))
    return img.reshape(-1, 2)


def _as_K(camera_matrix: Sequence[float]) -> np.ndarray:
    return np.asarray(camera_matrix, dtype=float).reshape(3, 3)


def _as_D(dist_coeffs: Sequence[float]) -> np.ndarray:
    return np.asarray(dist_coeffs, dtype=float).reshape(-1)


def solve_camera_pose(corners: Sequence[Tuple[float, float]],
                      tag_poses: Sequence[Pose3d],
                      camera_matrix: Sequence[float],
                      dist_coeffs: Sequence[float],
                      tag_size: float) -> Optional[PnpResult]:
    """
    由所有已知 Tag 的角点对应关系解相机位姿。

    单个 Tag（4 个共面点）用 IPPE，多个 Tag 用 SQPnP。
    对应关系数量不匹配或解算失败时返回 None。
    """
    if not tag_poses or len(corners) != 4 * len(tag_poses):
        return None

    obj = np.vstack([tag_corners_field(p, tag_size) for p in tag_poses])
    img = np.asarray(corners, dtype=float).reshape(-1, 2)
    K = _as_K(camera_matrix)
    D = _as_D(dist_coeffs)
    flags = cv2.SOLVEPNP_IPPE if len(tag_poses) == 1 else cv2.SOLVEPNP_SQPNP

    try:
        ok, rvec, tvec = cv2.solvePnP(obj, img, K, D, flags=flags)
    except cv2.error as e:
        logger.debug(f"[PnP] solvePnP 异常: {e}")
        return None
    if not ok or not (np.all(np.isfinite(rvec)) and np.all(np.isfinite(tvec))):
        # 退化内参或角点重合时 solvePnP 可能报告成功但给出非有限解
        return None

    R, _ = cv2.Rodrigues(rvec)
    T_opt_field = se3(R, tvec)
    T_field_cam = inv_se3(T_opt_field) @ T_OPTICAL_BODY

    proj, _ = cv2.projectPoints(obj, rvec, tvec, K, D)
    err = float(math.sqrt(np.mean(np.sum((proj.reshape(-1, 2) - img) ** 2, axis=1))))
    return PnpResult(matrix_to_pose(T_field_cam), err)
