"""
位姿融合的数据类型

坐标约定：
- 场地系 / 车体系均为 NWU（x 前、y 左、z 上），单位米 / 弧度
- 相机“机体系”同样 x 指向光轴前方；OpenCV 光学系（x 右、y 下、z 前）只在 pnp 模块内部使用
- 三维姿态采用 ZYX 欧拉角：R = Rz(yaw) @ Ry(pitch) @ Rx(roll)
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Tuple, Union

NO_TAG_ID = -1
AMBIGUITY_NOT_COMPUTED = -1.0


@dataclass(frozen=True, slots=True)
class Pose2d:
    """平面位姿 (x, y, yaw)；外部位姿滤波器的输入/输出类型"""
    x: float = 0.0
    y: float = 0.0
    yaw: float = 0.0


@dataclass(frozen=True, slots=True)
class Pose3d:
    """
    三维位姿 / 刚体变换 (x, y, z, roll, pitch, yaw)。

    既用作“某坐标系下的位姿”，也用作“A ← B 的变换”，例如：
    - Tag 在场地系的位姿 T_field_tag
    - Detection.camera_to_target：Tag 在相机系下的位姿 T_cam_tag
    - CameraPipeline.camera_to_robot：相机在车体系下的安装位姿 T_robot_cam
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    def to_pose2d(self) -> Pose2d:
        """投影到地面：保留 (x, y, yaw)"""
        return Pose2d(self.x, self.y, self.yaw)


@dataclass(frozen=True, slots=True)
class Detection:
    """单个 Tag 的一次观测（由外部相机流水线产生）"""
    tag_id: int
    ambiguity: float
    camera_to_target: Pose3d
    # 像素角点 (u, v)；仅多 Tag 解算使用
    corners: Tuple[Tuple[float, float], ...] = ()


@dataclass(frozen=True, slots=True)
class ObservationSnapshot:
    """某一路相机流水线最近一次发布的观测快照，只读"""
    timestamp: float = 0.0
    detections: Tuple[Detection, ...] = ()
    camera_matrix: Optional[Tuple[float, ...]] = None   # 行优先 3x3，共 9 个数
    dist_coeffs: Optional[Tuple[float, ...]] = None     # k1, k2, p1, p2, k3

    @property
    def has_calibration(self) -> bool:
        """内参与畸变系数必须同时存在且长度正确才算有标定"""
        return (self.camera_matrix is not None and len(self.camera_matrix) == 9
                and self.dist_coeffs is not None and len(self.dist_coeffs) == 5)


@dataclass(frozen=True, slots=True)
class Estimate:
    """有效的车体位姿估计，distance 为代表性的相机到 Tag 平面距离（米）"""
    pose: Pose3d
    distance: float


@dataclass(frozen=True, slots=True)
class NoEstimate:
    """无估计；不携带位姿与距离"""


NO_ESTIMATE = NoEstimate()

PoseEstimate = Union[Estimate, NoEstimate]


class StdDevs(NamedTuple):
    """视觉测量的标准差 (x, y, theta)；可直接按三元组解包"""
    x: float
    y: float
    theta: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.theta)


@dataclass(frozen=True, slots=True)
class FusionResult:
    """一次 tick 中某一路流水线的处理结果"""
    pipeline_index: int
    timestamp: float
    accepted: bool
    reason: str
    estimate: PoseEstimate = field(default=NO_ESTIMATE)
    stddevs: Optional[StdDevs] = None
