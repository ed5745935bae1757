"""
sql-select-count-check 核心组件

包含阈值解析器、结果归约器、去引号工具和 SQL 执行器
"""

from .threshold import NO_THRESHOLD, NoThreshold, Threshold, ThresholdRange, parse_threshold
from .unquote import unquote
from .reducer import ResultReducer, parse_float
from .executor import SQLExecutor

__all__ = [
    "NO_THRESHOLD",
    "NoThreshold",
    "Threshold",
    "ThresholdRange",
    "parse_threshold",
    "unquote",
    "ResultReducer",
    "parse_float",
    "SQLExecutor",
]
