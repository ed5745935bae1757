"""
检查异常类型

定义配置校验、SQL 执行和结果提取过程中可能抛出的各种异常
"""

from typing import List, Optional


class CheckError(Exception):
    """
    检查基础异常

    所有 sql-select-count-check 异常的基类

    Attributes:
        release_error: 释放查询结果时发生的异常（如果有），
                       与主异常合并展示而不是覆盖它
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.release_error: Optional[BaseException] = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.release_error is not None:
            return f"{base}; release error: {self.release_error}"
        return base


class ConfigError(CheckError):
    """
    配置错误

    启动时校验参数失败，在任何查询执行之前抛出，不重试
    """
    pass


class ThresholdParseError(ConfigError):
    """
    阈值解析错误

    warning/critical 字符串不符合 Nagios 阈值语法时抛出，携带原始字符串
    """

    def __init__(self, message: str, spec: str = ""):
        super().__init__(f"{message}: {spec!r}")
        self.spec = spec


class QueryExecutionError(CheckError):
    """
    SQL 执行错误

    连库、预编译、执行或遍历结果失败时抛出（语法错误、连接超时、权限问题等）
    """

    def __init__(self, message: str, sql: str = "", original_error: Optional[BaseException] = None):
        """
        初始化 SQL 执行错误

        Args:
            message: 错误消息
            sql: 执行的 SQL 文本
            original_error: 驱动抛出的原始异常
        """
        super().__init__(message)
        self.sql = sql
        self.original_error = original_error

    def __str__(self) -> str:
        base = super().__str__()
        if self.sql:
            # 截断过长的 SQL
            sql_preview = self.sql[:200] + "..." if len(self.sql) > 200 else self.sql
            return f"{base} (SQL: {sql_preview})"
        return base


class ExtractionError(CheckError):
    """
    结果提取错误

    查询成功但无法从结果中得到测量值，说明检查本身配置有误，上报 UNKNOWN
    """
    pass


class NoColumnsError(ExtractionError):
    """查询结果没有任何列"""

    def __init__(self, message: str = "No columns returned"):
        super().__init__(message)


class NoRowsError(ExtractionError):
    """查询结果没有任何行"""

    def __init__(self, message: str = "No rows returned", columns: Optional[List[str]] = None):
        super().__init__(message)
        self.columns = columns or []


class NotANumberError(ExtractionError):
    """第一行第一列无法解析为浮点数"""

    def __init__(self, text: Optional[str]):
        shown = "NULL" if text is None else repr(text)
        super().__init__(f"value {shown} is not a number")
        self.text = text


class UnquoteError(ExtractionError):
    """开启 unquote 时，值不是合法的带引号字符串字面量"""

    def __init__(self, text: str, reason: str = "invalid syntax"):
        super().__init__(f"cannot unquote {text!r}: {reason}")
        self.text = text
        self.reason = reason


class ResultReleaseError(CheckError):
    """
    结果释放错误

    提取成功但关闭游标/连接失败时抛出；若提取已失败，则挂到主异常的 release_error 上
    """

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.original_error = original_error
