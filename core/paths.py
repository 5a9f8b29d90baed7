import os

# 项目根目录：当前文件是 core/paths.py，向上两级
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# 运行期配置 / 日志目录，随代码发布的资源目录
CONFIG_DIR = os.path.join(PROJECT_ROOT, ".config")
LOG_DIR = os.path.join(PROJECT_ROOT, ".log")
ASSETS_DIR = os.path.join(PROJECT_ROOT, "assets")

FUSION_CONFIG_PATH = os.path.join(CONFIG_DIR, "fusion_config.json")
TAG_LAYOUT_PATH = os.path.join(ASSETS_DIR, "tag_layout_2023.json")
