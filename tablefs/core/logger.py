"""日志配置模块：统一 tablefs 的日志格式，并附带条目操作上下文。

适配器与 CRUD 层通过 ``extra={"action": ..., "path": ..., "table": ...}``
记录当前操作；控制台格式把它们追加为 ``[action=... path=...]``，JSON 格式则输出为独立字段。
"""

import json
import logging
import logging.config
import sys
from datetime import datetime
from typing import Dict, Optional

from .config import get_settings

CONTEXT_FIELDS = ("action", "path", "table")
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def entry_context(record: logging.LogRecord) -> Dict[str, str]:
    """取出记录上携带的条目上下文，缺失的字段不出现。"""
    return {
        field: str(getattr(record, field))
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) not in (None, "")
    }


class _ZoneFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        if datefmt:
            return stamp.strftime(datefmt)
        return stamp.isoformat(sep=" ", timespec="milliseconds")


class ConsoleFormatter(_ZoneFormatter):
    """文本格式：按配置时区输出时间，终端下按级别着色。

    ``use_colors=False`` 即为写入日志文件的纯文本格式。
    """

    RESET = "\033[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }

    def __init__(
        self,
        fmt: str = DEFAULT_FORMAT,
        datefmt: Optional[str] = None,
        style: str = "%",
        use_colors: Optional[bool] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = entry_context(record)
        if context:
            message = f"{message} [{' '.join(f'{k}={v}' for k, v in context.items())}]"
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{message}{self.RESET}" if color else message


class JsonFormatter(_ZoneFormatter):
    """每条日志一行 JSON，条目上下文作为顶层字段。"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
            **entry_context(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging() -> None:
    """初始化日志系统，确保 tablefs 各模块使用统一的输出格式与级别。"""
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    if settings.log_json:
        console_formatter = file_formatter = "json"
    else:
        console_formatter, file_formatter = "console", "file"
    handlers = ["default", "file"]

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"()": "tablefs.core.logger.ConsoleFormatter"},
            "file": {"()": "tablefs.core.logger.ConsoleFormatter", "use_colors": False},
            "json": {"()": "tablefs.core.logger.JsonFormatter"},
        },
        "handlers": {
            "default": {
                "level": settings.log_level,
                "class": "logging.StreamHandler",
                "formatter": console_formatter,
            },
            "file": {
                "level": settings.log_level,
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": file_formatter,
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
            },
        },
        "loggers": {
            "tablefs": {
                "handlers": handlers,
                "level": settings.log_level,
                "propagate": False,
            },
            # 语句回显跟随 TABLEFS_DATABASE_ECHO
            "sqlalchemy.engine": {
                "handlers": handlers,
                "level": "INFO" if settings.database_echo else "WARNING",
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["default"],
            "level": "WARNING",
        },
    }
    logging.config.dictConfig(logging_config)


logger = logging.getLogger("tablefs")
