"""
融合子系统配置

保存在 .config/fusion_config.json，由 core.config.load_config 宽松加载：
缺失字段取默认值，多余字段忽略。
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .params import (
    DEFAULT_PARAMS, DEFAULT_TAG_SIZE_M,
    MAX_POSE_DIVERGENCE_M, STDDEV_POWER, STDDEV_SLOPE, VISION_POSE_THRESHOLD,
)
from .types import Pose3d


@dataclass
class CameraMountConfig:
    """相机在车体系下的安装位姿 T_robot_cam（米 / 弧度）"""
    alias: str = "未命名"
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    def to_pose(self) -> Pose3d:
        return Pose3d(self.x, self.y, self.z, self.roll, self.pitch, self.yaw)


@dataclass
class FusionConfig:
    cameras: List[CameraMountConfig] = field(default_factory=list)
    # 为空时使用随代码发布的布局文件
    tag_layout_path: str = ""
    tag_size_m: float = DEFAULT_TAG_SIZE_M

    # 可调参数的初始值
    vision_pose_threshold: float = DEFAULT_PARAMS[VISION_POSE_THRESHOLD]
    stddev_slope: float = DEFAULT_PARAMS[STDDEV_SLOPE]
    stddev_power: float = DEFAULT_PARAMS[STDDEV_POWER]
    max_pose_divergence_m: float = DEFAULT_PARAMS[MAX_POSE_DIVERGENCE_M]

    def tunables(self) -> Dict[str, float]:
        return {
            VISION_POSE_THRESHOLD: self.vision_pose_threshold,
            STDDEV_SLOPE: self.stddev_slope,
            STDDEV_POWER: self.stddev_power,
            MAX_POSE_DIVERGENCE_M: self.max_pose_divergence_m,
        }
