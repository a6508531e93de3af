"""
终端日历

以 rich 表格渲染月份网格，并提供单日查询与节假日列表。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .calendar_grid import CalendarGridGenerator, MonthNavigator
from .config import Config
from .models import CalendarDay, DisplayMode, HolidayType
from .scheduler import HolidayScheduler
from .sync.holiday_service import HolidayService
from .sync.lunar_calendar import annotate, full_lunar_label

app = typer.Typer(help="almanac — 带农历与法定节假日的终端日历")
console = Console()

WEEKDAY_NAMES = ["一", "二", "三", "四", "五", "六", "日"]

# 角标
BADGES = {
    HolidayType.HOLIDAY: "休",
    HolidayType.WORK_DAY: "班",
}

HOLIDAY_TYPE_TEXT = {
    HolidayType.NONE: "工作日",
    HolidayType.HOLIDAY: "法定节假日",
    HolidayType.REST_DAY: "休息日",
    HolidayType.WORK_DAY: "调休补班",
}


def _setup_logging(config: Config) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.log_level, logging.INFO),
    )


def _cell_style(day: CalendarDay) -> str:
    styles = []
    if not day.is_current_month:
        styles.append("dim")
    if day.holiday_type in (HolidayType.HOLIDAY, HolidayType.REST_DAY):
        styles.append("red")
    elif day.holiday_type is HolidayType.WORK_DAY:
        styles.append("yellow")
    if day.is_today:
        styles.append("reverse")
    return " ".join(styles)


def render_cell(day: CalendarDay) -> Text:
    badge = BADGES.get(day.holiday_type, "")
    head = f"{day.day}{badge}" if badge else str(day.day)
    return Text(f"{head}\n{day.lunar_text}", style=_cell_style(day), justify="center")


def render_grid(title: str, days: list[CalendarDay]) -> Table:
    """把 42 格按 6 行 × 7 列排成表格"""
    table = Table(title=title, show_lines=True)
    for i, name in enumerate(WEEKDAY_NAMES):
        table.add_column(name, justify="center", style="red" if i >= 5 else "")
    for row in range(0, len(days), 7):
        table.add_row(*(render_cell(day) for day in days[row:row + 7]))
    return table


def _print_month(config: Config, navigator: MonthNavigator) -> None:
    if config.display_mode is DisplayMode.COMPACT:
        now = datetime.now(tz=config.timezone)
        console.print(Panel.fit(f"{now:%Y年%m月%d日 %H:%M}", title=navigator.month_title))
        return
    console.print(render_grid(navigator.month_title, navigator.days))


async def _load_month(config: Config, year: int, month: int) -> MonthNavigator:
    async with HolidayService(config) as holidays:
        generator = CalendarGridGenerator(holidays, config=config)
        navigator = MonthNavigator(generator, holidays, config, start=date(year, month, 1))
        if navigator.days:
            # 网格首尾可能跨年
            years = {navigator.days[0].date.year, navigator.days[-1].date.year, year}
            await holidays.preload(*sorted(years))
        await navigator.go_to(year, month)
        return navigator


@app.command()
def month(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="年份，默认今年"),
    month_: Optional[int] = typer.Option(None, "--month", "-m", min=1, max=12, help="月份，默认本月"),
) -> None:
    """显示一个月的日历网格"""
    config = Config.from_env()
    _setup_logging(config)

    now = datetime.now(tz=config.timezone)
    try:
        navigator = asyncio.run(_load_month(config, year or now.year, month_ or now.month))
    except ValueError as e:
        console.print(f"[red]❌ 无法生成日历: {e}[/red]")
        raise typer.Exit(code=1)
    _print_month(config, navigator)


async def _watch(config: Config, duration: Optional[float]) -> None:
    async with HolidayService(config) as holidays:
        generator = CalendarGridGenerator(holidays, config=config)
        navigator = MonthNavigator(generator, holidays, config)

        def on_update() -> None:
            navigator.refresh()
            _print_month(config, navigator)

        scheduler = HolidayScheduler(holidays, config, on_update=on_update)
        _print_month(config, navigator)
        await scheduler.start()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            await scheduler.stop()


@app.command()
def watch(
    duration: Optional[float] = typer.Option(None, "--duration", "-d", min=0, help="运行秒数，默认一直运行"),
) -> None:
    """显示本月日历，后台加载节假日数据并在更新时重新渲染"""
    config = Config.from_env()
    _setup_logging(config)

    try:
        asyncio.run(_watch(config, duration))
    except KeyboardInterrupt:
        console.print("[yellow]已退出[/yellow]")


async def _classify_day(config: Config, target: date) -> tuple[HolidayType, str]:
    async with HolidayService(config) as holidays:
        await holidays.fetch_year(target.year)
        return holidays.classify(target)


@app.command()
def day(target: str = typer.Argument(..., help="日期，格式 YYYY-MM-DD")) -> None:
    """查询单日的农历、节日与节假日信息"""
    try:
        parsed = date.fromisoformat(target)
    except ValueError:
        console.print(f"[red]❌ 无法解析日期: {target}[/red]")
        raise typer.Exit(code=1)

    config = Config.from_env()
    _setup_logging(config)

    holiday_type, holiday_name = asyncio.run(_classify_day(config, parsed))

    console.print(f"[bold]{parsed:%Y年%m月%d日} 星期{WEEKDAY_NAMES[parsed.weekday()]}[/bold]")
    console.print(f"农历: {full_lunar_label(parsed) or '超出农历范围'}")
    console.print(f"注释: {annotate(parsed) or '-'}")
    suffix = f"（{holiday_name}）" if holiday_name else ""
    console.print(f"类型: {HOLIDAY_TYPE_TEXT[holiday_type]}{suffix}")


async def _fetch_records(config: Config, year: int):
    async with HolidayService(config) as holidays:
        if not await holidays.fetch_year(year):
            return None
        return holidays.get_year_records(year)


@app.command()
def holidays(year: int = typer.Argument(..., help="年份")) -> None:
    """列出某年的节假日安排"""
    config = Config.from_env()
    _setup_logging(config)

    records = asyncio.run(_fetch_records(config, year))
    if records is None:
        console.print(f"[red]❌ 获取{year}年节假日数据失败[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"{year}年节假日安排")
    table.add_column("日期")
    table.add_column("名称")
    table.add_column("类型")
    for key in sorted(records):
        record = records[key]
        kind = "[red]休[/red]" if record.is_off_day else "[yellow]班[/yellow]"
        table.add_row(key, record.name or "-", kind)
    console.print(table)


if __name__ == "__main__":
    app()
