# pose_fusion/__init__.py
"""
AprilTag 视觉位姿融合：用多路相机的 Tag 观测修正航位推算位姿

公开 API:
- FusionController
- init_fusion, get_fusion, reset_fusion
- 数据类型：Pose2d, Pose3d, Detection, ObservationSnapshot, Estimate, NO_ESTIMATE ...
"""

from .controller import FusionController
from .params import ParameterStore
from .runtime import get_fusion, init_fusion, is_fusion_initialized, reset_fusion
from .tag_layout import TagLayout, load_tag_layout
from .types import (
    NO_ESTIMATE, Detection, Estimate, FusionResult, NoEstimate,
    ObservationSnapshot, Pose2d, Pose3d, PoseEstimate, StdDevs,
)
from .validator import is_valid

__all__ = [
    "FusionController",
    "ParameterStore",
    "TagLayout",
    "load_tag_layout",
    "is_valid",
    "init_fusion",
    "get_fusion",
    "is_fusion_initialized",
    "reset_fusion",
    "Pose2d",
    "Pose3d",
    "Detection",
    "ObservationSnapshot",
    "Estimate",
    "NoEstimate",
    "NO_ESTIMATE",
    "PoseEstimate",
    "StdDevs",
    "FusionResult",
]
