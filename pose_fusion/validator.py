from .params import MAX_AMBIGUITY
from .tag_layout import TagLayout
from .types import AMBIGUITY_NOT_COMPUTED, NO_TAG_ID, Detection


def is_valid(detection: Detection, layout: TagLayout) -> bool:
    """检测是否可用于位姿计算：有 id、歧义度已计算且足够小、布局中存在该 Tag"""
    return (detection.tag_id != NO_TAG_ID
            and detection.ambiguity != AMBIGUITY_NOT_COMPUTED
            and 0.0 <= detection.ambiguity < MAX_AMBIGUITY
            and layout.lookup(detection.tag_id) is not None)
