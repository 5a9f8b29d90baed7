# core/logger.py
import logging
import os
from datetime import datetime
from typing import Callable, Optional

from nicegui import ui

from core.paths import LOG_DIR

CONSOLE_LOG_LEVEL = logging.INFO
FILE_LOG_LEVEL = logging.WARNING
UI_LOG_LEVEL = logging.WARNING

# 控制台/文件：时间 + 等级 + 记录器名
_FMT = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
# 操作面板弹窗：只显示消息体
_UI_FMT = logging.Formatter('%(message)s')


class UiHandler(logging.Handler):
    """
    把告警推送到 NiceGUI 操作面板（ui.notify）。

    融合核心本身不依赖界面：没有面板在运行时 notify 会失败，这里吞掉该失败，
    其余 handler 照常输出。若注入了 container_getter，则在该容器上下文中弹窗，
    以便后台定时任务里也能安全调用。
    """

    def __init__(self, container_getter: Optional[Callable[[], Optional[ui.element]]] = None):
        super().__init__()
        self._container_getter = container_getter
        self.setFormatter(_UI_FMT)

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        notify_type = (
            'negative' if record.levelno >= logging.ERROR else
            'warning' if record.levelno >= logging.WARNING else
            'info'
        )
        container = self._container_getter() if self._container_getter else None
        try:
            if container is not None:
                with container:
                    ui.notify(msg, type=notify_type)
            else:
                ui.notify(msg, type=notify_type)
        except Exception:
            # 无界面上下文（单元测试、无头运行）时 notify 不可用
            pass


class Logger:
    def __init__(self, name: str = 'pose_fusion',
                 console_level: int = logging.INFO,
                 file_level: int = logging.WARNING,
                 ui_level: int = logging.WARNING,
                 logfile: Optional[str] = None):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)

        if not any(type(h) is logging.StreamHandler for h in self._logger.handlers):
            ch = logging.StreamHandler()
            ch.setLevel(console_level)
            ch.setFormatter(_FMT)
            self._logger.addHandler(ch)

        self._ui_container: Optional[ui.element] = None
        if not any(isinstance(h, UiHandler) for h in self._logger.handlers):
            uh = UiHandler(container_getter=lambda: self._ui_container)
            uh.setLevel(ui_level)
            self._logger.addHandler(uh)

        self._file_level = file_level
        self._logfile_path = logfile
        self._file_handler: Optional[logging.FileHandler] = None

    def set_ui_target(self, container: ui.element) -> None:
        """指定操作面板上的容器作为告警弹窗的槽位。"""
        self._ui_container = container

    # ---------- 文件日志（首次出现告警时才创建） ----------
    def _ensure_file_handler(self) -> None:
        if self._file_handler:
            return
        if not self._logfile_path:
            ts = datetime.now().strftime('%Y%m%d_%H%M%S')
            self._logfile_path = os.path.join(LOG_DIR, f'fusion_{ts}.log')
        try:
            os.makedirs(os.path.dirname(self._logfile_path), exist_ok=True)
            fh = logging.FileHandler(self._logfile_path, encoding='utf-8')
        except OSError as e:
            self._logger.error(f'无法创建日志文件 {self._logfile_path}: {e}')
            return
        fh.setLevel(self._file_level)
        fh.setFormatter(_FMT)
        self._logger.addHandler(fh)
        self._file_handler = fh

    def _log(self, level: int, msg, *args, **kwargs) -> None:
        if level >= self._file_level and self._file_handler is None:
            self._ensure_file_handler()
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):   self._log(logging.DEBUG, msg, *args, **kwargs)
    def info(self, msg, *args, **kwargs):    self._log(logging.INFO, msg, *args, **kwargs)
    def warning(self, msg, *args, **kwargs): self._log(logging.WARNING, msg, *args, **kwargs)
    def error(self, msg, *args, **kwargs):   self._log(logging.ERROR, msg, *args, **kwargs)


# 单例
logger = Logger(
    console_level=CONSOLE_LOG_LEVEL,
    file_level=FILE_LOG_LEVEL,
    ui_level=UI_LOG_LEVEL,
)
