"""
sql-select-count-check 数据模型

包含检查状态枚举、结果对象和异常类型
"""

from sql_select_check.models.level import CheckState
from sql_select_check.models.result import CheckResult, QueryResult, Reduction
from sql_select_check.models.exceptions import (
    CheckError,
    ConfigError,
    ExtractionError,
    NoColumnsError,
    NoRowsError,
    NotANumberError,
    QueryExecutionError,
    ResultReleaseError,
    ThresholdParseError,
    UnquoteError,
)

__all__ = [
    "CheckState",
    "CheckResult",
    "QueryResult",
    "Reduction",
    "CheckError",
    "ConfigError",
    "ExtractionError",
    "NoColumnsError",
    "NoRowsError",
    "NotANumberError",
    "QueryExecutionError",
    "ResultReleaseError",
    "ThresholdParseError",
    "UnquoteError",
]
