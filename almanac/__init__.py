"""
almanac — 桌面日历的日历事实引擎

月份网格、节假日分类与农历 / 节日注释。
"""

__version__ = "0.1.0"
