"""时间工具方法：统一生成条目时间戳并按配置时区格式化。"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from zoneinfo import ZoneInfo

from tablefs.core.config import get_settings


def get_timezone() -> ZoneInfo:
    """返回配置指定的时区信息。"""
    return get_settings().timezone_info


def now() -> datetime:
    """返回当前时区的时间。"""
    return datetime.now(get_timezone())


def unix_now() -> int:
    """返回当前 unix 时间戳（秒），条目 ``timestamp`` 列统一使用该值。"""
    return int(now().timestamp())


def format_timestamp(value: Optional[int]) -> Optional[str]:
    """将 unix 时间戳格式化为 ``YYYY-MM-DD HH:MM:SS`` 字符串。"""
    if value is None:
        return None
    localized = datetime.fromtimestamp(int(value), get_timezone())
    return localized.strftime("%Y-%m-%d %H:%M:%S")
