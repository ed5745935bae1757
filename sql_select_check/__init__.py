"""
sql-select-count-check: 基于 SQL 查询的 Sensu/Nagios 检查插件

执行一条参数化 SQL，取第一行第一列作为测量值，
按 Nagios 阈值语法判断 OK / WARNING / CRITICAL

Usage:
    sql-select-count-check \\
        --dburl mysql://tester:pw@localhost:3306/test \\
        -q 'SELECT COUNT(*) FROM jobs WHERE state = %s' -a failed \\
        -w 10 -c 20

    from sql_select_check import CheckConfig, SelectCountCheck

    config = CheckConfig(dburl="postgresql://db/app", query="SELECT lag FROM replication",
                         warning="30", critical="@~:0")
    result = SelectCountCheck(config).run()
"""

from .models.level import CheckState
from .models.result import CheckResult, QueryResult, Reduction
from .models.exceptions import (
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
from .config import CheckConfig
from .core.threshold import NO_THRESHOLD, ThresholdRange, parse_threshold
from .core.reducer import ResultReducer
from .core.executor import SQLExecutor
from .check import SelectCountCheck

__version__ = "0.1.0"

__all__ = [
    # 主类
    "SelectCountCheck",
    "CheckConfig",

    # 数据模型
    "CheckState",
    "CheckResult",
    "QueryResult",
    "Reduction",

    # 核心组件
    "ThresholdRange",
    "NO_THRESHOLD",
    "parse_threshold",
    "ResultReducer",
    "SQLExecutor",

    # 异常
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
