# pose_fusion/runtime.py
"""
FusionController 单例管理。
提供统一接口来初始化、获取、重置控制器实例。
"""

from threading import Lock
from typing import Optional, Sequence

from core.config import FUSION_CONFIG_PATH, TAG_LAYOUT_PATH, load_config
from core.logger import logger

from .config import FusionConfig
from .controller import FusionController
from .interfaces import PoseFilter, SnapshotSource
from .params import ParameterStore
from .tag_layout import load_tag_layout

_fc: Optional[FusionController] = None
_lock = Lock()


def is_fusion_initialized() -> bool:
    with _lock:
        return _fc is not None


def get_fusion() -> FusionController:
    """
    获取当前的 FusionController 实例。

    Raises:
        RuntimeError: 尚未调用 init_fusion()
    """
    with _lock:
        if _fc is None:
            raise RuntimeError("FusionController 尚未初始化")
        return _fc


def build_controller(sources: Sequence[SnapshotSource], pose_filter: PoseFilter,
                     config: FusionConfig) -> FusionController:
    """按配置构造控制器；相机数量与安装位姿数量不一致时抛出 ValueError"""
    layout = load_tag_layout(config.tag_layout_path or TAG_LAYOUT_PATH)
    return FusionController(
        sources,
        [cam.to_pose() for cam in config.cameras],
        pose_filter,
        layout,
        params=ParameterStore(config.tunables()),
        tag_size=config.tag_size_m,
    )


def init_fusion(sources: Sequence[SnapshotSource], pose_filter: PoseFilter,
                config: Optional[FusionConfig] = None) -> FusionController:
    """
    初始化 FusionController 实例；已存在时直接返回已有实例。
    未传入配置时从 .config/fusion_config.json 加载。
    """
    global _fc
    with _lock:
        if _fc is not None:
            logger.info("[FusionRuntime] 已存在实例，使用现有实例")
            return _fc
        if config is None:
            config = load_config(FUSION_CONFIG_PATH, FusionConfig)
            if config is None:
                logger.warning("[FusionRuntime] 未能加载融合配置，使用默认配置")
                config = FusionConfig()
        _fc = build_controller(sources, pose_filter, config)
        return _fc


def reset_fusion() -> None:
    """丢弃当前实例；下一次 init_fusion() 会重新创建"""
    global _fc
    with _lock:
        _fc = None
