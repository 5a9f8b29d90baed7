# pose_fusion/params.py
"""
可在线调整的参数与固定常量。

ParameterStore 由操作面板线程写、控制循环读；每次 get 都拿到一个完整的值，
同一 tick 内两次读取之间参数被改写是允许的（这些都是软标定旋钮）。
"""

import math
import threading
from typing import Dict, Optional

# ---- 固定常量（不参与在线调整） ----
MAX_AMBIGUITY = 0.5            # 歧义度必须严格小于该值
MAX_TARGET_RANGE_M = 6.0       # 单 Tag 估计可用的最大平面距离
DEFAULT_TAG_SIZE_M = 0.1524    # Tag 黑框边长

# ---- 可调参数名 ----
VISION_POSE_THRESHOLD = "vision_pose_threshold"
STDDEV_SLOPE = "stddev_slope"
STDDEV_POWER = "stddev_power"
MAX_POSE_DIVERGENCE_M = "max_pose_divergence_m"

DEFAULT_PARAMS: Dict[str, float] = {
    VISION_POSE_THRESHOLD: 0.5,
    STDDEV_SLOPE: 0.10,
    STDDEV_POWER: 2.0,
    # 取极大值，相当于关闭发散门限
    MAX_POSE_DIVERGENCE_M: 1000.0,
}


class ParameterStore:
    """线程安全的可调参数表"""

    def __init__(self, overrides: Optional[Dict[str, float]] = None) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, float] = dict(DEFAULT_PARAMS)
        for name, value in (overrides or {}).items():
            self.set(name, value)

    def get(self, name: str) -> float:
        with self._lock:
            return self._values[name]

    def set(self, name: str, value: float) -> None:
        if name not in DEFAULT_PARAMS:
            raise KeyError(f"未知参数: {name}")
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"参数 {name} 必须是有限数值，实际为 {value}")
        with self._lock:
            self._values[name] = value

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._values)
