import math
from typing import List, Optional, Tuple

import pytest

from pose_fusion.pipeline import CameraPipeline
from pose_fusion.tag_layout import TagLayout
from pose_fusion.telemetry import TelemetryRecorder
from pose_fusion.types import Detection, ObservationSnapshot, Pose2d, Pose3d, StdDevs


class RecordingPoseFilter:
    """记录所有写入的假位姿滤波器"""

    def __init__(self, estimate: Pose2d = Pose2d()):
        self.estimate = estimate
        self.measurements: List[Tuple[Pose2d, float, StdDevs]] = []

    def current_estimate(self) -> Pose2d:
        return self.estimate

    def add_measurement(self, pose: Pose2d, timestamp: float, stddevs: StdDevs) -> None:
        self.measurements.append((pose, timestamp, stddevs))


class ScriptedSource:
    """返回测试中手动设置的快照"""

    def __init__(self, snapshot: Optional[ObservationSnapshot] = None):
        self.snapshot = snapshot or ObservationSnapshot()

    def latest(self) -> ObservationSnapshot:
        return self.snapshot


def make_detection(tag_id: int, distance: float, lateral: float = 0.0,
                   ambiguity: float = 0.1, corners=()) -> Detection:
    """Tag 位于相机正前方 distance 处（相机与 Tag 姿态一致）"""
    return Detection(tag_id, ambiguity, Pose3d(distance, lateral, 0.0), tuple(corners))


def make_snapshot(timestamp: float, *detections: Detection, **kwargs) -> ObservationSnapshot:
    return ObservationSnapshot(timestamp, tuple(detections), **kwargs)


def make_pipeline(snapshot: ObservationSnapshot, camera_to_robot: Pose3d = Pose3d(),
                  index: int = 0) -> CameraPipeline:
    pipeline = CameraPipeline(index, camera_to_robot, ScriptedSource(snapshot))
    pipeline.refresh()
    return pipeline


@pytest.fixture
def layout() -> TagLayout:
    return TagLayout({
        1: Pose3d(5.0, 1.0, 0.0),
        2: Pose3d(5.0, -1.0, 0.0),
        3: Pose3d(8.0, 0.0, 0.0, yaw=math.pi / 2),
    })


@pytest.fixture
def recorder() -> TelemetryRecorder:
    return TelemetryRecorder()


@pytest.fixture
def pose_filter() -> RecordingPoseFilter:
    return RecordingPoseFilter()
