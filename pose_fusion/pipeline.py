from .interfaces import SnapshotSource
from .types import ObservationSnapshot, Pose3d


class CameraPipeline:
    """
    一路相机流水线的簿记。

    camera_to_robot 为相机在车体系下的安装位姿（T_robot_cam），构造后不可变；
    last_timestamp 记录最后一次被处理的快照时间戳，只增不减。
    """

    def __init__(self, index: int, camera_to_robot: Pose3d, source: SnapshotSource) -> None:
        self._index = index
        self._camera_to_robot = camera_to_robot
        self._source = source
        self._last_timestamp = 0.0
        self._snapshot = ObservationSnapshot()

    @property
    def index(self) -> int:
        return self._index

    @property
    def camera_to_robot(self) -> Pose3d:
        return self._camera_to_robot

    @property
    def last_timestamp(self) -> float:
        return self._last_timestamp

    @property
    def snapshot(self) -> ObservationSnapshot:
        """最近一次拉取到的快照"""
        return self._snapshot

    def refresh(self) -> ObservationSnapshot:
        """从外部流水线拉取最新快照（整体替换，不做修改）"""
        self._snapshot = self._source.latest()
        return self._snapshot

    def is_new(self, snapshot: ObservationSnapshot) -> bool:
        return snapshot.timestamp > self._last_timestamp

    def mark_processed(self, timestamp: float) -> None:
        if timestamp < self._last_timestamp:
            raise ValueError(f"时间戳回退: {timestamp} < {self._last_timestamp}")
        self._last_timestamp = timestamp
