"""
Date and time utilities for the quote service.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """获取当前UTC时间（带时区）"""
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """转换为ISO-8601字符串，无时区的时间按UTC处理"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
