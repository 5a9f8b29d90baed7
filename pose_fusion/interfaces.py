# pose_fusion/interfaces.py
from typing import Protocol

from .types import ObservationSnapshot, Pose2d, StdDevs


class SnapshotSource(Protocol):
    """一路相机流水线：返回最近一次发布的观测快照（不阻塞）"""

    def latest(self) -> ObservationSnapshot: ...


class PoseFilter(Protocol):
    """外部位姿滤波器：融合控制器是唯一写入方"""

    def current_estimate(self) -> Pose2d: ...

    def add_measurement(self, pose: Pose2d, timestamp: float, stddevs: StdDevs) -> None: ...
