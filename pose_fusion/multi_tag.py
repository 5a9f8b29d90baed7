# pose_fusion/multi_tag.py
from typing import List, Optional, Tuple

from core.logger import logger

from .geometry import inverse, planar_norm, transform_by
from .params import DEFAULT_TAG_SIZE_M
from .pipeline import CameraPipeline
from .pnp import solve_camera_pose
from .single_tag import SingleTagEstimator
from .tag_layout import TagLayout
from .telemetry import TelemetryRecorder, get_recorder
from .types import NO_ESTIMATE, Estimate, Pose3d, PoseEstimate
from .validator import is_valid


class MultiTagEstimator:
    """
    用同一帧中所有有效 Tag 的角点做一次 PnP 解算。

    - 有标定（内参 + 畸变）时：field ← cam 由 PnP 给出，再乘 cam ← robot；
      距离取参与解算的 Tag 中最小的 camera_to_target 平面距离
    - 无标定时：直接返回单 Tag 估计的结果
    - 只有通过校验且恰好带 4 个角点的检测参与解算；其余检测的角点只计入诊断
    """

    def __init__(self, layout: TagLayout, single: SingleTagEstimator,
                 tag_size: float = DEFAULT_TAG_SIZE_M,
                 telemetry: Optional[TelemetryRecorder] = None) -> None:
        self._layout = layout
        self._single = single
        self._tag_size = float(tag_size)
        self._telemetry = telemetry or get_recorder()

    def estimate(self, pipeline: CameraPipeline) -> PoseEstimate:
        snapshot = pipeline.snapshot
        if not snapshot.has_calibration:
            return self._single.estimate(pipeline)

        visible_corners = 0
        corners: List[Tuple[float, float]] = []
        known_tags: List[Pose3d] = []
        distance: Optional[float] = None

        for det in snapshot.detections:
            visible_corners += len(det.corners)
            if not is_valid(det, self._layout) or len(det.corners) != 4:
                continue
            corners.extend((float(u), float(v)) for u, v in det.corners)
            known_tags.append(self._layout.lookup(det.tag_id))
            d = planar_norm(det.camera_to_target)
            if distance is None or d < distance:
                distance = d

        self._telemetry.record(f"Vision/VisibleCorners{pipeline.index}", visible_corners)
        if not known_tags:
            return NO_ESTIMATE

        result = solve_camera_pose(corners, known_tags, snapshot.camera_matrix,
                                   snapshot.dist_coeffs, self._tag_size)
        if result is None:
            logger.debug(f"[MultiTag] 相机 {pipeline.index} PnP 解算失败，回退到单 Tag 估计")
            return self._single.estimate(pipeline)

        self._telemetry.record(f"Vision/MultiTagReprojError{pipeline.index}", result.reprojection_error)
        robot_pose = transform_by(result.camera_pose, inverse(pipeline.camera_to_robot))
        return Estimate(robot_pose, distance)
