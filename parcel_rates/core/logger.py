"""
日志模块
Logging Module

封装 loguru：启动时按环境变量配置，加载配置文件后可按 app 段重新配置
"""

import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{message}</cyan>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


class Logger:
    """
    日志管理类

    进程内单例；console 写 stderr，文件按大小滚动
    """

    _instance: Optional["Logger"] = None
    _lock = threading.Lock()
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not hasattr(self, "_initialized") or not self._initialized:
            self.log_file: Optional[Path] = None
            self._apply(
                log_level=os.getenv("APP_LOG_LEVEL", "INFO"),
                logs_dir=os.getenv("APP_LOGS_DIR", "logs"),
                debug=os.getenv("APP_DEBUG", "false").lower() == "true",
            )
            Logger._initialized = True

    def configure(self, app_cfg: Dict[str, Any]) -> None:
        """
        按配置文件 app 段重新设置日志级别与目录

        环境变量优先于配置文件，便于临时调高日志级别排查问题。
        """
        self._apply(
            log_level=os.getenv("APP_LOG_LEVEL") or app_cfg.get("log_level", "INFO"),
            logs_dir=os.getenv("APP_LOGS_DIR") or app_cfg.get("logs_dir", "logs"),
            debug=bool(app_cfg.get("debug", False)) or os.getenv("APP_DEBUG", "false").lower() == "true",
        )

    def _apply(self, log_level: str, logs_dir: str, debug: bool) -> None:
        with self._lock:
            directory = Path(logs_dir)
            directory.mkdir(parents=True, exist_ok=True)
            if self.log_file is None or self.log_file.parent != directory:
                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                self.log_file = directory / f"rates_{timestamp}.log"

            logger.remove()
            # CLI 的 JSON 结果走 stdout
            logger.add(
                sys.stderr,
                format=CONSOLE_FORMAT,
                level="DEBUG" if debug else log_level,
                colorize=True,
            )
            logger.add(
                str(self.log_file),
                format=FILE_FORMAT,
                level="DEBUG",
                rotation="10 MB",
                retention="7 days",
                compression="gz",
            )

    def info(self, message: str, **kwargs) -> None:
        logger.info(message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        logger.error(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Error 级别并附带当前异常堆栈"""
        logger.exception(message, **kwargs)


def get_logger(*_args, **_kwargs) -> Logger:
    """
    获取日志单例

    Returns:
        Logger实例
    """
    return Logger()
