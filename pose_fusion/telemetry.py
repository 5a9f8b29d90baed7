"""
诊断输出（只写，不影响融合行为）

每个键保留最新值，另有一个有界历史（最新在最前），供操作面板或回放工具读取。
"""

from collections import deque
import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class TelemetryEntry:
    key: str
    value: Any
    timestamp: datetime = field(default_factory=datetime.now)


class TelemetryRecorder:
    """线程安全的诊断量记录器"""

    def __init__(self, max_history: int = 1000):
        self._latest: Dict[str, TelemetryEntry] = {}
        self._history: deque[TelemetryEntry] = deque(maxlen=max_history)
        self._lock = threading.Lock()

    def record(self, key: str, value: Any) -> None:
        with self._lock:
            entry = TelemetryEntry(key, value, datetime.now())
            self._latest[key] = entry
            self._history.appendleft(entry)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._latest.get(key)
            return entry.value if entry is not None else default

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            return {k: e.value for k, e in self._latest.items()}

    def get_history(self, limit: Optional[int] = 100) -> List[TelemetryEntry]:
        """最新在前；limit 为 None/0 时返回全部"""
        with self._lock:
            if not limit:
                return list(self._history)
            return list(itertools.islice(self._history, 0, limit))

    def clear(self) -> None:
        with self._lock:
            self._latest.clear()
            self._history.clear()


# 全局实例
_recorder = TelemetryRecorder()


def get_recorder() -> TelemetryRecorder:
    return _recorder
