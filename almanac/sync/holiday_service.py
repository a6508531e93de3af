"""
中国法定节假日服务

数据来源：节假日 API（基于国务院发布的年度节假日安排），按年缓存在内存中。

缓存约定：
- 某一年要么不存在（未获取 / 获取失败），要么完整存在
- 每年的数据整体替换，读者不会看到半成品
- 锁只保护字典读写，网络请求期间不持锁
"""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping

import httpx

from ..config import Config
from ..models import HolidayRecord, HolidayType

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """网络错误、超时或非成功状态码"""

    pass


class ParseError(Exception):
    """响应为空或格式错误"""

    pass


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5


class HolidayService:
    """按年缓存的节假日分类服务"""

    def __init__(self, config: Config | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or Config()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.request_timeout),
            headers={"Accept": "application/json"},
        )
        # 缓存：{year: {"yyyy-MM-dd": HolidayRecord}}
        self._cache: dict[int, Mapping[str, HolidayRecord]] = {}
        self._lock = threading.Lock()

    async def __aenter__(self) -> "HolidayService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """关闭自己创建的 HTTP 客户端"""
        if self._owns_client:
            await self.client.aclose()

    # ── 获取 ─────────────────────────────────────────────

    def _year_url(self, year: int) -> str:
        return self.config.holidays_url_template.format(year=year)

    async def _request_year(self, year: int) -> Any:
        """
        请求某一年的原始数据。

        Raises:
            FetchError: 网络异常、超时或非 200 响应
            ParseError: 响应体为空或不是合法 JSON
        """
        url = self._year_url(year)
        try:
            resp = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(f"请求超时: {url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(f"请求失败: {e}") from e

        if resp.status_code != 200:
            raise FetchError(f"HTTP {resp.status_code}")

        if not resp.content.strip():
            raise ParseError("响应体为空")

        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"JSON 解析失败: {e}") from e

    @staticmethod
    def _parse_payload(payload: Any) -> dict[str, HolidayRecord]:
        """
        将 API 响应解析为 {ISO 日期: HolidayRecord}。

        Raises:
            ParseError: 不是对象、为空或包含非法条目
        """
        if not isinstance(payload, dict) or not payload:
            raise ParseError("数据为空")

        records: dict[str, HolidayRecord] = {}
        for key, raw in payload.items():
            try:
                record = HolidayRecord.from_api(key, raw)
            except (ValueError, TypeError) as e:
                raise ParseError(f"非法条目 {key!r}: {e}") from e
            records[record.date.isoformat()] = record
        return records

    def _install(self, year: int, records: dict[str, HolidayRecord]) -> None:
        frozen = MappingProxyType(records)
        with self._lock:
            self._cache[year] = frozen

    async def fetch_year(self, year: int) -> bool:
        """
        从 API 获取指定年份的节假日数据并整体写入缓存。

        Args:
            year: 年份

        Returns:
            是否成功；失败时缓存保持不变
        """
        try:
            payload = await self._request_year(year)
            records = self._parse_payload(payload)
        except FetchError as e:
            logger.warning(f"获取{year}年节假日数据失败: {e}")
            return False
        except ParseError as e:
            logger.warning(f"解析{year}年节假日数据失败: {e}")
            return False

        self._install(year, records)
        logger.info(f"成功获取{year}年节假日数据，共{len(records)}条")
        return True

    async def preload(self, *years: int) -> list[int]:
        """
        并发预加载多个年份，单个年份失败不影响其他年份。

        Returns:
            成功写入缓存的年份
        """
        unique = list(dict.fromkeys(years))
        results = await asyncio.gather(*(self.fetch_year(y) for y in unique))
        return [y for y, ok in zip(unique, results) if ok]

    # ── 查询 ─────────────────────────────────────────────

    def is_year_cached(self, year: int) -> bool:
        with self._lock:
            return year in self._cache

    def get_year_records(self, year: int) -> Mapping[str, HolidayRecord] | None:
        """返回某年已安装的只读数据，未缓存返回 None"""
        with self._lock:
            return self._cache.get(year)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def classify(self, target_date: date) -> tuple[HolidayType, str]:
        """
        获取指定日期的节假日类型与名称。

        规则：
        - 缓存中有该日期：
          - isOffDay 且为无名周末 → 普通休息日
          - isOffDay 其他情况 → 法定节假日
          - 非 isOffDay → 调休补班日
        - 否则按普通周末判断
        """
        year_data = self.get_year_records(target_date.year)
        record = year_data.get(target_date.isoformat()) if year_data is not None else None

        if record is not None:
            if record.is_off_day:
                if _is_weekend(target_date) and not record.name:
                    return HolidayType.REST_DAY, ""
                return HolidayType.HOLIDAY, record.name
            return HolidayType.WORK_DAY, record.name

        if _is_weekend(target_date):
            return HolidayType.REST_DAY, ""
        return HolidayType.NONE, ""

    def is_rest_day(self, target_date: date) -> bool:
        """判断是否为休息日（法定节假日或普通周末，补班日除外）"""
        holiday_type, _ = self.classify(target_date)
        return holiday_type in (HolidayType.HOLIDAY, HolidayType.REST_DAY)
