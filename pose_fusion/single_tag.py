# pose_fusion/single_tag.py
from typing import Optional

from .geometry import inverse, planar_norm, transform_by
from .params import MAX_TARGET_RANGE_M
from .pipeline import CameraPipeline
from .tag_layout import TagLayout
from .telemetry import TelemetryRecorder, get_recorder
from .types import NO_ESTIMATE, Estimate, Pose2d, PoseEstimate
from .validator import is_valid

# 每路相机最多记录前两个检测的诊断位姿
TELEMETRY_SLOTS = 2


class SingleTagEstimator:
    """
    用距离最近的单个有效 Tag 估计车体位姿。

    计算链：
      field ← tag（布局） · tag ← cam（观测取逆） = field ← cam
      field ← cam · cam ← robot（安装位姿取逆）   = field ← robot
    候选距离取 camera_to_target 平移的平面模长，只接受小于 MAX_TARGET_RANGE_M 的候选；
    距离相同时保留检测顺序中靠前的那个。
    """

    def __init__(self, layout: TagLayout, telemetry: Optional[TelemetryRecorder] = None) -> None:
        self._layout = layout
        self._telemetry = telemetry or get_recorder()

    def estimate(self, pipeline: CameraPipeline) -> PoseEstimate:
        index = pipeline.index

        # 先清空诊断槽位，避免本帧 Tag 变少时沿用上一帧的数据
        for slot in range(TELEMETRY_SLOTS):
            self._telemetry.record(f"Vision/TagPose{index}_{slot}", Pose2d())
            self._telemetry.record(f"Vision/NVRobotPose{index}_{slot}", Pose2d())

        robot_to_camera = inverse(pipeline.camera_to_robot)
        best: Optional[Estimate] = None

        for slot, det in enumerate(pipeline.snapshot.detections):
            if not is_valid(det, self._layout):
                continue
            tag_pose = self._layout.lookup(det.tag_id)
            camera_pose = transform_by(tag_pose, inverse(det.camera_to_target))
            robot_pose = transform_by(camera_pose, robot_to_camera)

            if slot < TELEMETRY_SLOTS:
                self._telemetry.record(f"Vision/TagPose{index}_{slot}", tag_pose.to_pose2d())
                self._telemetry.record(f"Vision/NVRobotPose{index}_{slot}", robot_pose.to_pose2d())

            distance = planar_norm(det.camera_to_target)
            if distance >= MAX_TARGET_RANGE_M:
                continue
            if best is None or distance < best.distance:
                best = Estimate(robot_pose, distance)

        return best if best is not None else NO_ESTIMATE
