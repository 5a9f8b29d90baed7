# pose_fusion/controller.py
from typing import List, Optional, Sequence

from core.logger import logger

from .confidence import ConfidenceModel
from .geometry import planar_distance
from .interfaces import PoseFilter, SnapshotSource
from .multi_tag import MultiTagEstimator
from .params import DEFAULT_TAG_SIZE_M, MAX_POSE_DIVERGENCE_M, VISION_POSE_THRESHOLD, ParameterStore
from .pipeline import CameraPipeline
from .single_tag import SingleTagEstimator
from .tag_layout import TagLayout
from .telemetry import TelemetryRecorder, get_recorder
from .types import NO_ESTIMATE, Estimate, FusionResult, Pose3d, PoseEstimate


class FusionController:
    """
    视觉位姿融合控制器。

    由外部调度器按固定周期调用 periodic()。每一路相机依次经过：
    时效门限 -> 多 Tag 估计 -> 发散门限 -> 使能检查 -> 写入位姿滤波器。
    位姿滤波器由外部注入，本类是它唯一的写入方。

    Parameters
    ----------
    sources : Sequence[SnapshotSource]
        每路相机流水线的快照来源，按相机序号排列
    camera_to_robots : Sequence[Pose3d]
        每路相机在车体系下的安装位姿，数量必须与 sources 一致
    pose_filter : PoseFilter
        外部位姿滤波器
    layout : TagLayout
        场地 Tag 布局（启动时加载一次）
    """

    def __init__(
        self,
        sources: Sequence[SnapshotSource],
        camera_to_robots: Sequence[Pose3d],
        pose_filter: PoseFilter,
        layout: TagLayout,
        params: Optional[ParameterStore] = None,
        telemetry: Optional[TelemetryRecorder] = None,
        tag_size: float = DEFAULT_TAG_SIZE_M,
    ) -> None:
        if len(sources) != len(camera_to_robots):
            raise ValueError(
                f"相机流水线数量 ({len(sources)}) 与相机外参数量 ({len(camera_to_robots)}) 不一致")

        self._pipelines: List[CameraPipeline] = [
            CameraPipeline(i, T, src) for i, (src, T) in enumerate(zip(sources, camera_to_robots))
        ]
        self._pose_filter = pose_filter
        self._layout = layout
        self._params = params or ParameterStore()
        self._telemetry = telemetry or get_recorder()

        self._confidence = ConfidenceModel(self._params)
        self._single = SingleTagEstimator(layout, self._telemetry)
        self._multi = MultiTagEstimator(layout, self._single, tag_size, self._telemetry)

        self._enabled = True
        self._vision_updating = False

        for tag_id, pose in layout.all_entries():
            self._telemetry.record(f"Vision/AprilTags/{tag_id}", pose)
        logger.info(f"[FusionController] 已初始化，{len(self._pipelines)} 路相机，{len(layout)} 个已知 Tag")

    # ---------- properties ----------

    @property
    def pipelines(self) -> List[CameraPipeline]:
        return list(self._pipelines)

    @property
    def params(self) -> ParameterStore:
        return self._params

    @property
    def layout(self) -> TagLayout:
        return self._layout

    @property
    def is_vision_updating(self) -> bool:
        """本 tick 是否至少有一路相机写入了位姿滤波器"""
        return self._vision_updating

    # ---------- administrative controls ----------

    def enable(self, enable: bool) -> None:
        self._enabled = bool(enable)
        logger.info(f"[FusionController] 视觉融合已{'启用' if self._enabled else '禁用'}")

    def is_enabled(self) -> bool:
        return self._enabled

    # ---------- estimators ----------

    def _pipeline(self, pipeline_id: int) -> CameraPipeline:
        if not 0 <= pipeline_id < len(self._pipelines):
            raise IndexError(f"相机序号 {pipeline_id} 超出范围 [0, {len(self._pipelines)})")
        return self._pipelines[pipeline_id]

    def estimate_single(self, pipeline_id: int) -> PoseEstimate:
        return self._single.estimate(self._pipeline(pipeline_id))

    def estimate_multi(self, pipeline_id: int) -> PoseEstimate:
        return self._multi.estimate(self._pipeline(pipeline_id))

    # ---------- periodic ----------

    def periodic(self) -> List[FusionResult]:
        """执行一个 tick；返回本 tick 中每路被处理（或被跳过）的相机结果"""
        self._vision_updating = False
        results: List[FusionResult] = []

        for pipeline in self._pipelines:
            results.append(self._process(pipeline))

        self._telemetry.record("Vision/isVisionUpdating", self._vision_updating)
        return results

    def _process(self, pipeline: CameraPipeline) -> FusionResult:
        index = pipeline.index
        snapshot = pipeline.refresh()
        timestamp = snapshot.timestamp

        # 只处理比上次更新的快照
        if not pipeline.is_new(snapshot):
            return FusionResult(index, timestamp, False, "stale")
        pipeline.mark_processed(timestamp)

        estimate = self.estimate_multi(index)
        if not isinstance(estimate, Estimate):
            # 这一路没有估计，继续处理其余相机
            return FusionResult(index, timestamp, False, "no_estimate")

        robot_pose = estimate.pose.to_pose2d()
        divergence = planar_distance(self._pose_filter.current_estimate(), robot_pose)
        if not divergence < self._params.get(MAX_POSE_DIVERGENCE_M):
            logger.debug(f"[FusionController] 相机 {index} 估计偏离当前位姿 {divergence:.3f} m，丢弃")
            return FusionResult(index, timestamp, False, "diverged", estimate)

        stddevs = self._confidence.stddev(estimate.distance)
        accepted = False
        if self._enabled:
            self._pose_filter.add_measurement(robot_pose, timestamp, stddevs)
            self._vision_updating = True
            accepted = True

        self._telemetry.record(f"Vision/RobotPose{index}", robot_pose)
        self._telemetry.record("Vision/IsEnabled", self._enabled)
        return FusionResult(index, timestamp, accepted, "fused" if accepted else "disabled",
                            estimate, stddevs)

    # ---------- queries ----------

    def has_converged(self) -> bool:
        """
        视觉位姿与滤波器当前位姿是否已经吻合，用于决定能否从手动切换到自动控制。
        任意一路单 Tag 估计落在阈值内即返回 True。
        """
        current = self._pose_filter.current_estimate()
        for pipeline in self._pipelines:
            estimate = self.estimate_single(pipeline.index)
            if (isinstance(estimate, Estimate)
                    and planar_distance(current, estimate.pose.to_pose2d())
                    < self._params.get(VISION_POSE_THRESHOLD)):
                self._telemetry.record("Vision/posesInLine", True)
                return True
        self._telemetry.record("Vision/posesInLine", False)
        return False

    def best_pose(self) -> PoseEstimate:
        """所有相机的单 Tag 估计中距离最近的一个；与时效门限无关"""
        best: PoseEstimate = NO_ESTIMATE
        for pipeline in self._pipelines:
            estimate = self.estimate_single(pipeline.index)
            if not isinstance(estimate, Estimate):
                continue
            if not isinstance(best, Estimate) or estimate.distance < best.distance:
                best = estimate
        return best
