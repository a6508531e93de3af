"""
lunar_calendar 模块单元测试

测试农历换算、闰月折算与注释优先级。
"""

from __future__ import annotations

from datetime import date

import pytest

from almanac.sync.lunar_calendar import (
    ConversionError,
    LunarDate,
    annotate,
    full_lunar_label,
    get_gregorian_festival,
    get_solar_term,
    leap_month_position,
    lunar_date_text,
    qingming_day,
    to_lunar,
)


@pytest.mark.unit
class TestToLunar:
    """测试公历转农历。"""

    @pytest.mark.parametrize(
        "target, expected",
        [
            (date(1901, 2, 19), LunarDate(1901, 1, 1)),
            (date(2014, 1, 1), LunarDate(2013, 12, 1)),
            (date(2024, 9, 17), LunarDate(2024, 8, 15)),
            (date(2026, 2, 13), LunarDate(2025, 13, 26)),   # 2025 有闰六月，腊月排在第 13 位
            (date(2026, 2, 17), LunarDate(2026, 1, 1)),
        ],
    )
    def test_known_dates(self, target: date, expected: LunarDate) -> None:
        assert to_lunar(target) == expected

    def test_leap_month_positions(self) -> None:
        """测试闰月序号：闰 M 月位于第 M+1 位。"""
        assert leap_month_position(2023) == 3   # 闰二月
        assert leap_month_position(2025) == 7   # 闰六月
        assert leap_month_position(2013) == 0

    def test_leap_month_raw_position(self) -> None:
        """测试 2023 年闰二月前后的原始序号。"""
        assert to_lunar(date(2023, 3, 21)) == LunarDate(2023, 2, 30)
        assert to_lunar(date(2023, 3, 22)) == LunarDate(2023, 3, 1)
        assert to_lunar(date(2023, 4, 20)) == LunarDate(2023, 4, 1)

    @pytest.mark.parametrize("target", [date(1901, 2, 18), date(1900, 1, 31), date(1899, 12, 31), date(2150, 6, 1)])
    def test_out_of_range(self, target: date) -> None:
        with pytest.raises(ConversionError):
            to_lunar(target)

    def test_leap_month_position_out_of_range(self) -> None:
        with pytest.raises(ConversionError):
            leap_month_position(2101)
        with pytest.raises(ConversionError):
            leap_month_position(1900)

    def test_leap_eleventh_month_2033(self) -> None:
        """测试 2033 年闰十一月（闰月排在第 12 位）。"""
        assert leap_month_position(2033) == 12
        assert to_lunar(date(2033, 8, 25)) == LunarDate(2033, 8, 1)
        assert lunar_date_text(date(2033, 9, 8)) == "八月十五"
        assert lunar_date_text(date(2033, 12, 22)) == "闰冬月初一"
        assert full_lunar_label(date(2034, 1, 20)) == "农历2033年腊月初一"


@pytest.mark.unit
class TestFullLunarLabel:
    """测试完整农历日期文本。"""

    def test_leap_month_label(self) -> None:
        assert full_lunar_label(date(2023, 3, 22)) == "农历2023年闰二月初一"

    def test_month_after_leap_is_folded(self) -> None:
        assert full_lunar_label(date(2023, 4, 21)) == "农历2023年三月初二"
        assert full_lunar_label(date(2026, 2, 13)) == "农历2025年腊月廿六"

    def test_ordinary_label(self) -> None:
        assert full_lunar_label(date(2024, 10, 12)) == "农历2024年九月初十"

    def test_out_of_range_is_empty(self) -> None:
        assert full_lunar_label(date(1800, 1, 1)) == ""
        assert full_lunar_label(date(1901, 2, 18)) == ""

    def test_lunar_date_text(self) -> None:
        assert lunar_date_text(date(2023, 3, 22)) == "闰二月初一"
        assert lunar_date_text(date(1800, 1, 1)) is None


@pytest.mark.unit
class TestFestivals:
    """测试公历节日、浮动节日与节气。"""

    def test_fixed_gregorian(self) -> None:
        assert get_gregorian_festival(date(2024, 10, 1)) == "国庆节"
        assert get_gregorian_festival(date(2024, 10, 2)) == ""

    @pytest.mark.parametrize("year, day", [(2008, 4), (2024, 4), (2025, 5), (2026, 5), (2027, 5)])
    def test_qingming_formula(self, year: int, day: int) -> None:
        assert qingming_day(year) == day

    def test_qingming_festival(self) -> None:
        assert get_gregorian_festival(date(2024, 4, 4)) == "清明节"
        assert get_gregorian_festival(date(2024, 4, 5)) == ""

    def test_mothers_day(self) -> None:
        assert get_gregorian_festival(date(2024, 5, 12)) == "母亲节"
        assert get_gregorian_festival(date(2024, 5, 5)) == ""    # 第一个星期日

    def test_fathers_day(self) -> None:
        assert get_gregorian_festival(date(2024, 6, 16)) == "父亲节"
        assert get_gregorian_festival(date(2024, 6, 9)) == ""

    @pytest.mark.parametrize(
        "target, term",
        [
            (date(2026, 2, 18), "雨水"),
            (date(2024, 6, 21), "夏至"),
            (date(2024, 1, 4), "小寒"),
            (date(2024, 1, 6), "小寒"),
            (date(2024, 12, 23), "冬至"),
        ],
    )
    def test_solar_term_window(self, target: date, term: str) -> None:
        assert get_solar_term(target) == term

    def test_outside_solar_term_window(self) -> None:
        assert get_solar_term(date(2024, 1, 3)) == ""
        assert get_solar_term(date(2024, 1, 12)) == ""


@pytest.mark.unit
class TestAnnotate:
    """测试注释优先级。"""

    def test_gregorian_beats_lunar_first_day(self) -> None:
        """测试公历节日优先于农历初一。"""
        assert to_lunar(date(2014, 1, 1)).day == 1
        assert annotate(date(2014, 1, 1)) == "元旦"

    def test_qingming_beats_solar_term(self) -> None:
        assert annotate(date(2024, 4, 4)) == "清明节"
        assert annotate(date(2024, 4, 5)) == "清明"

    def test_solar_term(self) -> None:
        assert annotate(date(2026, 2, 18)) == "雨水"

    def test_lunar_festival(self) -> None:
        assert annotate(date(2026, 2, 17)) == "春节"
        assert annotate(date(2024, 9, 17)) == "中秋"

    def test_lunar_month_name_on_first_day(self) -> None:
        """测试闰月之后的月份折算：原始第 7 位显示为六月。"""
        assert annotate(date(2023, 7, 18)) == "六月"

    def test_leap_month_folds_into_festival(self) -> None:
        """测试闰二月初二按二月初二查节日。"""
        assert annotate(date(2023, 3, 23)) == "龙抬头"

    def test_plain_lunar_day(self) -> None:
        assert annotate(date(2023, 3, 24)) == "初三"
        assert annotate(date(2026, 2, 13)) == "廿六"
        assert annotate(date(2023, 7, 19)) == "初二"

    def test_out_of_range_is_empty(self) -> None:
        assert annotate(date(1899, 12, 31)) == ""
        assert annotate(date(1901, 2, 10)) == ""
        assert annotate(date(2200, 3, 1)) == ""

    def test_out_of_range_still_shows_gregorian(self) -> None:
        assert annotate(date(1800, 10, 1)) == "国庆节"
