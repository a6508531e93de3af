"""
日历数据模型

网格单元格、假日类型与节假日记录。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any


class HolidayType(Enum):
    """假日类型"""
    NONE = "none"            # 普通工作日
    HOLIDAY = "holiday"      # 法定节假日（休息）
    REST_DAY = "rest_day"    # 周末休息日
    WORK_DAY = "work_day"    # 调休补班日


class DisplayMode(Enum):
    """展示模式"""
    FULL = "full"            # 时钟 + 日历网格
    COMPACT = "compact"      # 仅时钟 / 天气


@dataclass(frozen=True)
class HolidayRecord:
    """节假日 API 中的单日记录"""
    date: date
    name: str
    is_off_day: bool

    @classmethod
    def from_api(cls, key: str, raw: Any) -> "HolidayRecord":
        """
        从 API 条目构建记录。

        Args:
            key: 日期键（yyyy-MM-dd）
            raw: {"date": ..., "name": ..., "isOffDay": ...}

        Raises:
            ValueError: 条目格式不正确
        """
        if not isinstance(raw, dict):
            raise ValueError(f"条目不是对象: {key}")

        is_off_day = raw.get("isOffDay")
        if not isinstance(is_off_day, bool):
            raise ValueError(f"isOffDay 缺失或类型错误: {key}")

        name = raw.get("name") or ""
        return cls(
            date=date.fromisoformat(raw.get("date") or key),
            name=str(name),
            is_off_day=is_off_day,
        )


@dataclass(frozen=True)
class CalendarDay:
    """日历网格中的一格"""
    day: int
    date: date
    is_current_month: bool
    is_today: bool
    is_weekend: bool
    lunar_text: str = ""
    holiday_type: HolidayType = HolidayType.NONE
    holiday_name: str = ""
