"""
日历网格生成

固定 6 周 42 格：上月尾部 + 本月全部 + 下月开头。
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from .config import Config
from .models import CalendarDay, DisplayMode
from .sync.holiday_service import HolidayService
from .sync.lunar_calendar import annotate

logger = logging.getLogger(__name__)

GRID_SIZE = 42


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class CalendarGridGenerator:
    """根据节假日服务与农历注释生成月份网格"""

    def __init__(
        self,
        holidays: HolidayService,
        today_provider: Optional[Callable[[], date]] = None,
        lunar_text: Callable[[date], str] = annotate,
        config: Config | None = None,
    ):
        self.holidays = holidays
        self.config = config or Config()
        self.today_provider = today_provider or self._configured_today
        self.lunar_text = lunar_text

    def _configured_today(self) -> date:
        """配置时区下的今天"""
        return datetime.now(tz=self.config.timezone).date()

    def _make_day(self, target: date, is_current_month: bool, today: date) -> CalendarDay:
        holiday_type, holiday_name = self.holidays.classify(target)
        return CalendarDay(
            day=target.day,
            date=target,
            is_current_month=is_current_month,
            is_today=target == today,
            is_weekend=target.weekday() >= 5,
            lunar_text=self.lunar_text(target),
            holiday_type=holiday_type,
            holiday_name=holiday_name,
        )

    def generate_month(self, year: int, month: int, today: Optional[date] = None) -> list[CalendarDay]:
        """
        生成指定月份的 42 格日历。

        Args:
            year: 年份
            month: 月份（1-12）
            today: “今天”，默认取 today_provider()

        Raises:
            ValueError: 月份非法，或 42 格超出 date 可表示的范围

        Returns:
            按日期顺序排列的 42 个 CalendarDay
        """
        if today is None:
            today = self.today_provider()

        first_day = date(year, month, 1)
        days_in_month = calendar.monthrange(year, month)[1]

        # 第一天是星期几（1=星期一, 7=星期日），前面补 weekday - 1 格
        leading = first_day.isoweekday() - 1
        trailing = GRID_SIZE - leading - days_in_month
        first_ordinal = first_day.toordinal() - leading
        if first_ordinal < date.min.toordinal() or first_ordinal + GRID_SIZE - 1 > date.max.toordinal():
            raise ValueError(f"网格超出可表示的日期范围: {year}-{month:02d}")
        start = date.fromordinal(first_ordinal)

        days = []
        for offset in range(GRID_SIZE):
            target = start + timedelta(days=offset)
            is_current_month = leading <= offset < leading + days_in_month
            days.append(self._make_day(target, is_current_month, today))

        logger.debug(f"生成 {year}-{month:02d} 网格: 上月 {leading} 格, 下月 {trailing} 格")
        return days


class MonthNavigator:
    """
    当前显示月份与翻页

    翻到尚未缓存的年份时会先请求节假日数据，成功后重新生成网格。
    """

    def __init__(
        self,
        generator: CalendarGridGenerator,
        holidays: HolidayService,
        config: Config | None = None,
        start: Optional[date] = None,
    ):
        self.generator = generator
        self.holidays = holidays
        self.config = config or Config()
        start = start or self._today()
        self.year = start.year
        self.month = start.month
        self.days: list[CalendarDay] = []
        self.refresh()

    def _today(self) -> date:
        return datetime.now(tz=self.config.timezone).date()

    @property
    def current_month(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def month_title(self) -> str:
        return f"{self.year}年{self.month:02d}月"

    def refresh(self) -> list[CalendarDay]:
        """按当前月份重新生成网格（精简模式下不生成）"""
        if self.config.display_mode is DisplayMode.COMPACT:
            self.days = []
        else:
            self.days = self.generator.generate_month(self.year, self.month, today=self._today())
        return self.days

    async def _ensure_year(self) -> None:
        if self.holidays.is_year_cached(self.year):
            return
        logger.info(f"{self.year}年节假日数据未缓存，开始获取")
        if await self.holidays.fetch_year(self.year):
            self.refresh()

    async def go_to(self, year: int, month: int) -> list[CalendarDay]:
        if not 1 <= month <= 12:
            raise ValueError(f"invalid month: {month}")
        self.year, self.month = year, month
        self.refresh()
        await self._ensure_year()
        return self.days

    async def go_to_today(self) -> list[CalendarDay]:
        today = self._today()
        return await self.go_to(today.year, today.month)

    async def previous_month(self) -> list[CalendarDay]:
        return await self.go_to(*_shift_month(self.year, self.month, -1))

    async def next_month(self) -> list[CalendarDay]:
        return await self.go_to(*_shift_month(self.year, self.month, 1))
