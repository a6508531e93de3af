"""
集中配置管理

从环境变量 / .env 文件加载所有配置项，
并提供校验与默认值。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from .models import DisplayMode

DEFAULT_API_BASE = "https://api.jiejiariapi.com"
DEFAULT_TZ = "Asia/Shanghai"


def _env_float(name: str, default: float) -> float:
    """读取正浮点数环境变量，非法时回退默认值。"""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        print(f"[WARN] {name}='{raw}' 不是有效的正数，回退到 {default}")
        return default
    return value


def _env_int(name: str, default: int) -> int:
    """读取正整数环境变量，非法时回退默认值。"""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        print(f"[WARN] {name}='{raw}' 不是有效的正整数，回退到 {default}")
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """不可变配置对象，一次加载、全局使用。"""

    # ── 节假日 API ───────────────────────────────────────
    holiday_api_base: str = DEFAULT_API_BASE
    request_timeout: float = 10.0                # 秒，超时视为获取失败

    # ── 行为 ─────────────────────────────────────────────
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TZ))
    display_mode: DisplayMode = DisplayMode.FULL
    preload_next_year: bool = True               # 启动时同时预加载下一年
    refresh_interval_minutes: int = 60           # 未缓存年份的重试间隔
    log_level: str = "INFO"

    @property
    def holidays_url_template(self) -> str:
        return f"{self.holiday_api_base.rstrip('/')}/v1/holidays/{{year}}"

    @classmethod
    def from_env(
        cls,
        env_path: str | Path | None = None,
        load_dotenv_file: bool = True,
    ) -> "Config":
        """从 .env 文件 + 环境变量构建 Config 实例。"""
        if env_path:
            load_dotenv(env_path, override=True)
        elif load_dotenv_file:
            # 优先级:
            # 1. 当前目录 .almanac/.env
            # 2. 当前目录 .env
            # 3. 项目根目录 .env (源码运行)
            # 4. ~/.almanac/.env
            project_root = Path(__file__).resolve().parent.parent
            candidates = [
                Path.cwd() / ".almanac" / ".env",
                Path.cwd() / ".env",
                project_root / ".env",
                Path.home() / ".almanac" / ".env",
            ]

            for candidate in candidates:
                if candidate.exists():
                    load_dotenv(candidate, override=True)
                    break

        # 时区
        tz_name = os.getenv("ALMANAC_TZ", DEFAULT_TZ).strip()
        try:
            tz = ZoneInfo(tz_name)
        except (KeyError, ValueError):
            print(f"[WARN] 无法识别时区 '{tz_name}'，回退到 {DEFAULT_TZ}")
            tz = ZoneInfo(DEFAULT_TZ)

        # 展示模式
        mode_name = os.getenv("ALMANAC_DISPLAY_MODE", "full").strip().lower()
        try:
            mode = DisplayMode(mode_name)
        except ValueError:
            print(f"[WARN] 未知展示模式 '{mode_name}'，回退到 full")
            mode = DisplayMode.FULL

        return cls(
            holiday_api_base=os.getenv("HOLIDAY_API_BASE", DEFAULT_API_BASE).strip() or DEFAULT_API_BASE,
            request_timeout=_env_float("HOLIDAY_API_TIMEOUT", 10.0),
            timezone=tz,
            display_mode=mode,
            preload_next_year=_env_bool("ALMANAC_PRELOAD_NEXT_YEAR", True),
            refresh_interval_minutes=_env_int("ALMANAC_REFRESH_MINUTES", 60),
            log_level=os.getenv("ALMANAC_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
