"""
农历、节气与节日注释（1901-2100）

农历换算使用查表法，节气采用按月固定日期 ±1 天的近似窗口，
不做天文计算。
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import date
from itertools import accumulate
from typing import Optional


class ConversionError(ValueError):
    """日期超出农历查表范围"""

    pass


# 农历数据表（1900-2100），HKO 编码：
# - 低 4 位：闰月月份（0 表示无闰月）
# - 第 16 位 (0x10000)：闰月大小（1 -> 30 天，0 -> 29 天）
# - 第 15..4 位：正月到腊月的大小（1 -> 30 天，0 -> 29 天）
LUNAR_DATA = (
    0x04BD8, 0x04AE0, 0x0A570, 0x054D5, 0x0D260, 0x0D950, 0x16554, 0x056A0, 0x09AD0, 0x055D2,  # 1900
    0x04AE0, 0x0A5B6, 0x0A4D0, 0x0D250, 0x1D255, 0x0B540, 0x0D6A0, 0x0ADA2, 0x095B0, 0x14977,  # 1910
    0x04970, 0x0A4B0, 0x0B4B5, 0x06A50, 0x06D40, 0x1AB54, 0x02B60, 0x09570, 0x052F2, 0x04970,  # 1920
    0x06566, 0x0D4A0, 0x0EA50, 0x16A95, 0x05AD0, 0x02B60, 0x186E3, 0x092E0, 0x1C8D7, 0x0C950,  # 1930
    0x0D4A0, 0x1D8A6, 0x0B550, 0x056A0, 0x1A5B4, 0x025D0, 0x092D0, 0x0D2B2, 0x0A950, 0x0B557,  # 1940
    0x06CA0, 0x0B550, 0x15355, 0x04DA0, 0x0A5B0, 0x14573, 0x052B0, 0x0A9A8, 0x0E950, 0x06AA0,  # 1950
    0x0AEA6, 0x0AB50, 0x04B60, 0x0AAE4, 0x0A570, 0x05260, 0x0F263, 0x0D950, 0x05B57, 0x056A0,  # 1960
    0x096D0, 0x04DD5, 0x04AD0, 0x0A4D0, 0x0D4D4, 0x0D250, 0x0D558, 0x0B540, 0x0B6A0, 0x195A6,  # 1970
    0x095B0, 0x049B0, 0x0A974, 0x0A4B0, 0x0B27A, 0x06A50, 0x06D40, 0x0AF46, 0x0AB60, 0x09570,  # 1980
    0x04AF5, 0x04970, 0x064B0, 0x074A3, 0x0EA50, 0x06B58, 0x05AC0, 0x0AB60, 0x096D5, 0x092E0,  # 1990
    0x0C960, 0x0D954, 0x0D4A0, 0x0DA50, 0x07552, 0x056A0, 0x0ABB7, 0x025D0, 0x092D0, 0x0CAB5,  # 2000
    0x0A950, 0x0B4A0, 0x0BAA4, 0x0AD50, 0x055D9, 0x04BA0, 0x0A5B0, 0x15176, 0x052B0, 0x0A930,  # 2010
    0x07954, 0x06AA0, 0x0AD50, 0x05B52, 0x04B60, 0x0A6E6, 0x0A4E0, 0x0D260, 0x0EA65, 0x0D530,  # 2020
    0x05AA0, 0x076A3, 0x096D0, 0x04AFB, 0x04AD0, 0x0A4D0, 0x1D0B6, 0x0D250, 0x0D520, 0x0DD45,  # 2030
    0x0B5A0, 0x056D0, 0x055B2, 0x049B0, 0x0A577, 0x0A4B0, 0x0AA50, 0x1B255, 0x06D20, 0x0ADA0,  # 2040
    0x14B63, 0x09370, 0x049F8, 0x04970, 0x064B0, 0x168A6, 0x0EA50, 0x06B20, 0x1A6C4, 0x0AAE0,  # 2050
    0x092E0, 0x0D2E3, 0x0C960, 0x0D557, 0x0D4A0, 0x0DA50, 0x05D55, 0x056A0, 0x0A6D0, 0x055D4,  # 2060
    0x052D0, 0x0A9B8, 0x0A950, 0x0B4A0, 0x0B6A6, 0x0AD50, 0x055A0, 0x0ABA4, 0x0A5B0, 0x052B0,  # 2070
    0x0B273, 0x06930, 0x07337, 0x06AA0, 0x0AD50, 0x14B55, 0x04B60, 0x0A570, 0x054E4, 0x0D160,  # 2080
    0x0E968, 0x0D520, 0x0DAA0, 0x16AA6, 0x056D0, 0x04AE0, 0x0A9D4, 0x0A2D0, 0x0D150, 0x0F252,  # 2090
    0x0D520,  # 2100
)

FIRST_LUNAR_YEAR = 1900
LAST_LUNAR_YEAR = FIRST_LUNAR_YEAR + len(LUNAR_DATA) - 1

# 农历 1900 年正月初一，查表起点
BASE_DATE = date(1900, 1, 31)

# 支持的最早日期：农历 1901 年正月初一
MIN_SUPPORTED_DATE = date(1901, 2, 19)

LUNAR_MONTH_NAMES = (
    "正月", "二月", "三月", "四月", "五月", "六月",
    "七月", "八月", "九月", "十月", "冬月", "腊月",
)
LUNAR_DAY_NAMES = (
    "初一", "初二", "初三", "初四", "初五", "初六", "初七", "初八", "初九", "初十",
    "十一", "十二", "十三", "十四", "十五", "十六", "十七", "十八", "十九", "二十",
    "廿一", "廿二", "廿三", "廿四", "廿五", "廿六", "廿七", "廿八", "廿九", "三十",
)

# 公历节日
GREGORIAN_FESTIVALS = (
    (1, 1, "元旦"),
    (2, 14, "情人节"),
    (3, 8, "妇女节"),
    (3, 12, "植树节"),
    (4, 1, "愚人节"),
    (5, 1, "劳动节"),
    (5, 4, "青年节"),
    (6, 1, "儿童节"),
    (7, 1, "建党节"),
    (8, 1, "建军节"),
    (9, 10, "教师节"),
    (10, 1, "国庆节"),
    (12, 25, "圣诞节"),
)

# 传统节日（按农历月日，闰月并入前一个月）
LUNAR_FESTIVALS = (
    (1, 1, "春节"),
    (1, 15, "元宵"),
    (2, 2, "龙抬头"),
    (5, 5, "端午"),
    (7, 7, "七夕"),
    (7, 15, "中元"),
    (8, 15, "中秋"),
    (9, 9, "重阳"),
    (12, 8, "腊八"),
    (12, 23, "小年"),
)

# 节气近似窗口：(月, 日1, 日2, 节气1, 节气2)，各日 ±1 天内都算
SOLAR_TERM_WINDOWS = (
    (1, 5, 20, "小寒", "大寒"),
    (2, 4, 19, "立春", "雨水"),
    (3, 6, 21, "惊蛰", "春分"),
    (4, 5, 20, "清明", "谷雨"),
    (5, 6, 21, "立夏", "小满"),
    (6, 6, 22, "芒种", "夏至"),
    (7, 7, 23, "小暑", "大暑"),
    (8, 8, 23, "立秋", "处暑"),
    (9, 8, 23, "白露", "秋分"),
    (10, 8, 23, "寒露", "霜降"),
    (11, 7, 22, "立冬", "小雪"),
    (12, 7, 22, "大雪", "冬至"),
)
SOLAR_TERM_TOLERANCE = 1


@dataclass(frozen=True)
class LunarDate:
    """农历日期，month 为年内序号（1..13，闰月按实际位置计）"""
    year: int
    month: int
    day: int


def _year_data(year: int) -> int:
    return LUNAR_DATA[year - FIRST_LUNAR_YEAR]


def _leap_month(year: int) -> int:
    """闰几月（0 表示无闰月）"""
    return _year_data(year) & 0xF


def _leap_days(year: int) -> int:
    if _leap_month(year) == 0:
        return 0
    return 30 if (_year_data(year) & 0x10000) else 29


def _month_days(year: int, month: int) -> int:
    if month < 1 or month > 12:
        raise ValueError(f"invalid lunar month: {month}")
    return 30 if (_year_data(year) & (0x10000 >> month)) else 29


def _year_days(year: int) -> int:
    return sum(_month_days(year, m) for m in range(1, 13)) + _leap_days(year)


# 每个农历年正月初一相对 BASE_DATE 的天数，末项为查表范围的终点
_YEAR_STARTS = (0, *accumulate(_year_days(y) for y in range(FIRST_LUNAR_YEAR, LAST_LUNAR_YEAR + 1)))


def leap_month_position(year: int) -> int:
    """
    闰月在该农历年中的序号（1..13），无闰月返回 0。

    闰 M 月紧跟在 M 月之后，因此序号为 M + 1。
    """
    if year < MIN_SUPPORTED_DATE.year or year > LAST_LUNAR_YEAR:
        raise ConversionError(f"农历年份超出范围: {year}")
    leap = _leap_month(year)
    return leap + 1 if leap else 0


def _month_lengths(year: int) -> list[int]:
    """按年内序号排列的各月天数（含闰月）"""
    leap = _leap_month(year)
    lengths = []
    for month in range(1, 13):
        lengths.append(_month_days(year, month))
        if month == leap:
            lengths.append(_leap_days(year))
    return lengths


def to_lunar(target: date) -> LunarDate:
    """
    公历转农历。

    Raises:
        ConversionError: 日期不在 1901-02-19 到农历 2100 年末之间
    """
    if target < MIN_SUPPORTED_DATE:
        raise ConversionError(f"日期超出农历范围: {target.isoformat()}")

    offset = (target - BASE_DATE).days
    if offset >= _YEAR_STARTS[-1]:
        raise ConversionError(f"日期超出农历范围: {target.isoformat()}")

    index = bisect_right(_YEAR_STARTS, offset) - 1
    year = FIRST_LUNAR_YEAR + index
    offset -= _YEAR_STARTS[index]

    for position, length in enumerate(_month_lengths(year), start=1):
        if offset < length:
            return LunarDate(year, position, offset + 1)
        offset -= length

    # _YEAR_STARTS 与 _month_lengths 使用同一份数据，不会走到这里
    raise ConversionError(f"日期超出农历范围: {target.isoformat()}")


def _fold_month(lunar: LunarDate) -> tuple[int, bool]:
    """把年内序号折算成月份：(月份 1..12, 是否闰月)"""
    leap_position = leap_month_position(lunar.year)
    if leap_position and lunar.month >= leap_position:
        return lunar.month - 1, lunar.month == leap_position
    return lunar.month, False


def _week_of_month(target: date) -> int:
    return (target.day - 1) // 7 + 1


def qingming_day(year: int) -> int:
    """清明节在四月的日期（简化公式）"""
    day = int((year % 4) * 0.2422 + 4.81)
    if year == 2008:
        day = 4  # 特例修正
    return day


def get_gregorian_festival(target: date) -> str:
    """公历节日，含清明、母亲节、父亲节等浮动节日"""
    for month, day, name in GREGORIAN_FESTIVALS:
        if target.month == month and target.day == day:
            return name

    # 清明节（4月4-6日之间）
    if target.month == 4 and 4 <= target.day <= 6:
        if target.day == qingming_day(target.year):
            return "清明节"

    is_sunday = target.weekday() == 6

    # 母亲节：5月第二个星期日
    if target.month == 5 and is_sunday and _week_of_month(target) == 2:
        return "母亲节"

    # 父亲节：6月第三个星期日
    if target.month == 6 and is_sunday and _week_of_month(target) == 3:
        return "父亲节"

    return ""


def get_solar_term(target: date) -> str:
    """节气（近似窗口），不在窗口内返回空串"""
    for month, day1, day2, term1, term2 in SOLAR_TERM_WINDOWS:
        if target.month != month:
            continue
        if abs(target.day - day1) <= SOLAR_TERM_TOLERANCE:
            return term1
        if abs(target.day - day2) <= SOLAR_TERM_TOLERANCE:
            return term2
    return ""


def get_lunar_festival(month: int, day: int) -> str:
    for festival_month, festival_day, name in LUNAR_FESTIVALS:
        if month == festival_month and day == festival_day:
            return name
    return ""


def annotate(target: date) -> str:
    """
    日历格子下方的短文本。

    优先级：公历节日 > 浮动节日 > 节气 > 农历节日 > 农历月份（初一）/ 日期。
    超出农历范围时，前三项之外一律返回空串。
    """
    festival = get_gregorian_festival(target)
    if festival:
        return festival

    term = get_solar_term(target)
    if term:
        return term

    try:
        lunar = to_lunar(target)
    except ConversionError:
        return ""

    month, _ = _fold_month(lunar)

    festival = get_lunar_festival(month, lunar.day)
    if festival:
        return festival

    if lunar.day == 1:
        return LUNAR_MONTH_NAMES[month - 1]
    return LUNAR_DAY_NAMES[lunar.day - 1]


def _month_day_text(lunar: LunarDate) -> str:
    month, is_leap = _fold_month(lunar)
    leap_text = "闰" if is_leap else ""
    return f"{leap_text}{LUNAR_MONTH_NAMES[month - 1]}{LUNAR_DAY_NAMES[lunar.day - 1]}"


def lunar_date_text(target: date) -> Optional[str]:
    """农历月日文本（如 '闰二月初一'），超出范围返回 None"""
    try:
        lunar = to_lunar(target)
    except ConversionError:
        return None
    return _month_day_text(lunar)


def full_lunar_label(target: date) -> str:
    """完整农历日期（如 '农历2023年闰二月初一'），超出范围返回空串"""
    try:
        lunar = to_lunar(target)
    except ConversionError:
        return ""
    return f"农历{lunar.year}年{_month_day_text(lunar)}"
