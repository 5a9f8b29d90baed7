from .config_manager import load_config
from core.paths import (
    ASSETS_DIR, CONFIG_DIR,
    FUSION_CONFIG_PATH,
    TAG_LAYOUT_PATH,
)

__all__ = ["load_config",
           "FUSION_CONFIG_PATH", "TAG_LAYOUT_PATH",
           "ASSETS_DIR", "CONFIG_DIR"]
