"""
节假日数据调度器

启动时预加载今年（和明年）的节假日数据，之后定时重试尚未缓存的年份，
跨年后自动补上新的年份。有新数据写入时通知界面重新生成网格。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from .config import Config
from .sync.holiday_service import HolidayService

logger = logging.getLogger(__name__)


class HolidayScheduler:
    """后台预加载 / 重试节假日数据"""

    def __init__(self, holidays: HolidayService, config: Config,
                 on_update: Optional[Callable[[], None]] = None):
        self.holidays = holidays
        self.config = config
        self.on_update = on_update
        self.check_interval = timedelta(minutes=config.refresh_interval_minutes)
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """启动调度器"""
        if self._running:
            logger.warning("调度器已在运行")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"节假日调度器已启动，检查间隔: {self.check_interval}")

    async def stop(self) -> None:
        """停止调度器"""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("节假日调度器已停止")

    async def _run_loop(self) -> None:
        """主循环"""
        while self._running:
            try:
                await self.check_and_load()
            except Exception:
                logger.exception("预加载节假日数据时出错")

            try:
                await asyncio.sleep(self.check_interval.total_seconds())
            except asyncio.CancelledError:
                break

    def wanted_years(self) -> list[int]:
        """需要保持缓存的年份"""
        year = datetime.now(tz=self.config.timezone).year
        if self.config.preload_next_year:
            return [year, year + 1]
        return [year]

    async def check_and_load(self) -> list[int]:
        """
        加载所有尚未缓存的目标年份

        Returns:
            本次新写入缓存的年份
        """
        missing = [y for y in self.wanted_years() if not self.holidays.is_year_cached(y)]
        if not missing:
            return []

        loaded = await self.holidays.preload(*missing)
        if loaded:
            logger.info(f"已加载节假日年份: {loaded}")
            if self.on_update:
                self.on_update()

        failed = [y for y in missing if y not in loaded]
        if failed:
            logger.warning(f"节假日年份加载失败，稍后重试: {failed}")
        return loaded
