"""
测试共享 Fixtures

提供所有测试模块共享的配置、节假日服务与 API mock。
"""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest
import respx

from almanac.config import Config
from almanac.models import DisplayMode
from almanac.sync.holiday_service import HolidayService

API_BASE = "https://holiday.test"

# ═══════════════════════════════════════════════════════════
# 配置 Fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def test_config() -> Config:
    """创建测试配置。"""
    return Config(
        holiday_api_base=API_BASE,
        request_timeout=2.0,
        timezone=ZoneInfo("Asia/Shanghai"),
        display_mode=DisplayMode.FULL,
        preload_next_year=True,
        refresh_interval_minutes=60,
        log_level="INFO",
    )


@pytest.fixture
def compact_config(test_config: Config) -> Config:
    """精简展示模式的测试配置。"""
    return Config(
        holiday_api_base=test_config.holiday_api_base,
        request_timeout=test_config.request_timeout,
        timezone=test_config.timezone,
        display_mode=DisplayMode.COMPACT,
    )


# ═══════════════════════════════════════════════════════════
# 节假日 Fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def holiday_service(test_config: Config) -> HolidayService:
    """创建节假日服务实例。"""
    return HolidayService(test_config)


@pytest.fixture
def holiday_api_mock() -> respx.MockRouter:
    """创建节假日 API 的 mock 路由。"""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def year_url():
    """工厂函数：某年的 API 地址。"""

    def _url(year: int) -> str:
        return f"{API_BASE}/v1/holidays/{year}"

    return _url


@pytest.fixture
def holidays_2024() -> dict:
    """2024 年节假日 API 响应（节选）。"""
    return {
        "2024-01-01": {"date": "2024-01-01", "name": "New Year", "isOffDay": True},
        "2024-06-15": {"date": "2024-06-15", "name": "", "isOffDay": True},
        "2024-09-29": {"date": "2024-09-29", "name": "国庆节前补班", "isOffDay": False},
        "2024-10-01": {"date": "2024-10-01", "name": "国庆节", "isOffDay": True},
        "2024-10-02": {"date": "2024-10-02", "name": "国庆节", "isOffDay": True},
        "2024-10-03": {"date": "2024-10-03", "name": "国庆节", "isOffDay": True},
        "2024-10-04": {"date": "2024-10-04", "name": "国庆节", "isOffDay": True},
        "2024-10-05": {"date": "2024-10-05", "name": "国庆节", "isOffDay": True},
        "2024-10-06": {"date": "2024-10-06", "name": "国庆节", "isOffDay": True},
        "2024-10-07": {"date": "2024-10-07", "name": "国庆节", "isOffDay": True},
        "2024-10-12": {"date": "2024-10-12", "name": "National Day (makeup)", "isOffDay": False},
    }


@pytest.fixture
def holidays_2025() -> dict:
    """2025 年节假日 API 响应（节选）。"""
    return {
        "2025-01-01": {"date": "2025-01-01", "name": "元旦", "isOffDay": True},
        "2025-01-26": {"date": "2025-01-26", "name": "春节前补班", "isOffDay": False},
        "2025-01-28": {"date": "2025-01-28", "name": "春节", "isOffDay": True},
        "2025-01-29": {"date": "2025-01-29", "name": "春节", "isOffDay": True},
    }


@pytest.fixture
def install_holidays():
    """工厂函数：不经过网络直接写入某年的节假日数据。"""

    def _install(service: HolidayService, year: int, payload: dict) -> None:
        service._install(year, HolidayService._parse_payload(payload))

    return _install


@pytest.fixture
def fixed_today() -> date:
    return date(2024, 9, 15)
