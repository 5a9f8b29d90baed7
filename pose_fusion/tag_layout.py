"""
场地 Tag 布局

加载 WPILib 格式的 AprilTag 布局 JSON：

    {
      "tags": [
        {"ID": 1,
         "pose": {"translation": {"x": 15.51, "y": 1.07, "z": 0.46},
                  "rotation": {"quaternion": {"W": 0.0, "X": 0.0, "Y": 0.0, "Z": 1.0}}}}
      ],
      "field": {"length": 16.54, "width": 8.01}
    }

布局只在启动时加载一次，之后只读。
"""

import json
from typing import Dict, Iterable, List, Optional, Tuple

from core.logger import logger

from .geometry import R_to_rpy_zyx, quaternion_to_R
from .types import Pose3d

# 布局文件缺失时使用的名义场地尺寸（米）
NOMINAL_FIELD_LENGTH_M = 16.4592
NOMINAL_FIELD_WIDTH_M = 8.2296


class TagLayout:
    """tag_id -> 场地系位姿 的只读查找表"""

    def __init__(self, tags: Optional[Dict[int, Pose3d]] = None,
                 field_length: float = NOMINAL_FIELD_LENGTH_M,
                 field_width: float = NOMINAL_FIELD_WIDTH_M) -> None:
        self._tags: Dict[int, Pose3d] = dict(tags or {})
        self._field_length = float(field_length)
        self._field_width = float(field_width)

    @property
    def field_length(self) -> float:
        return self._field_length

    @property
    def field_width(self) -> float:
        return self._field_width

    def lookup(self, tag_id: int) -> Optional[Pose3d]:
        """未知 id 返回 None"""
        return self._tags.get(tag_id)

    def all_entries(self) -> List[Tuple[int, Pose3d]]:
        return sorted(self._tags.items())

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._tags


def _parse_tag(entry: dict) -> Tuple[int, Pose3d]:
    pose = entry["pose"]
    t = pose["translation"]
    q = pose["rotation"]["quaternion"]
    R = quaternion_to_R(float(q["W"]), float(q["X"]), float(q["Y"]), float(q["Z"]))
    roll, pitch, yaw = R_to_rpy_zyx(R)
    return int(entry["ID"]), Pose3d(float(t["x"]), float(t["y"]), float(t["z"]), roll, pitch, yaw)


def parse_tag_layout(data: dict) -> TagLayout:
    """从已解析的 JSON 对象构造布局；格式错误时抛出 KeyError / TypeError / ValueError"""
    tags: Dict[int, Pose3d] = {}
    entries: Iterable[dict] = data.get("tags", [])
    for entry in entries:
        tag_id, pose = _parse_tag(entry)
        tags[tag_id] = pose
    field = data.get("field", {})
    return TagLayout(
        tags,
        float(field.get("length", NOMINAL_FIELD_LENGTH_M)),
        float(field.get("width", NOMINAL_FIELD_WIDTH_M)),
    )


def load_tag_layout(path: str) -> TagLayout:
    """
    读取布局文件。

    文件缺失或无法解析不是致命错误：返回空布局（名义场地尺寸）并告警，
    此时所有检测都会因 id 未知而被判为无效。
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        layout = parse_tag_layout(data)
    except FileNotFoundError:
        logger.warning(f"[TagLayout] 未找到 AprilTag 布局文件: {path}")
        return TagLayout()
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"[TagLayout] AprilTag 布局文件无法解析 {path}: {e}")
        return TagLayout()

    logger.info(f"[TagLayout] 已加载 {len(layout)} 个 Tag，场地 {layout.field_length:.3f} x {layout.field_width:.3f} m")
    return layout
