"""
查询结果与检查结果对象

定义 QueryResult、Reduction 和 CheckResult
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .level import CheckState


Row = Sequence[Optional[str]]


class QueryResult:
    """
    查询结果

    列名在读取任何行之前即已知，行通过迭代器逐行读取，每行为文本单元格序列。
    底层游标/连接由 close() 释放，且只会真正释放一次。

    Usage:
        result = QueryResult(["count"], [["3"]])
        for row in result:
            ...
        result.close()
    """

    def __init__(
        self,
        columns: Sequence[str],
        rows: Iterable[Row],
        on_close: Optional[Callable[[], None]] = None,
    ):
        """
        Args:
            columns: 列名列表
            rows: 行迭代器（可以是惰性的游标）
            on_close: 释放底层资源的回调
        """
        self.columns: List[str] = list(columns)
        self._rows = iter(rows)
        self._on_close = on_close
        self.closed = False

    def __iter__(self) -> Iterator[Row]:
        return self._rows

    def close(self) -> None:
        """释放底层资源（重复调用无副作用）"""
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close()

    def __repr__(self) -> str:
        return f"QueryResult(columns={self.columns!r}, closed={self.closed})"


@dataclass
class Reduction:
    """
    结果归约输出

    Attributes:
        value: 测量值（第一行第一列）
        advisories: 非致命提示（多余的列/行）
        row_count: 遍历到的行数
        columns: 结果列名
    """
    value: float
    advisories: List[str] = field(default_factory=list)
    row_count: int = 0
    columns: List[str] = field(default_factory=list)


@dataclass
class CheckResult:
    """
    检查执行结果

    Attributes:
        state: 最终检查状态
        message: 输出给 Sensu 的单行文本
        value: 测量值（检查失败时为 None）
        threshold: 被触发的阈值原文（OK 时为空）
        advisories: 归约过程中的非致命提示
        execution_time: 执行耗时（秒）
        executed_at: 执行时间
        error: 导致 UNKNOWN/CRITICAL 的异常（如果有）
    """

    state: CheckState
    message: str
    value: Optional[float] = None
    threshold: str = ""
    advisories: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    executed_at: datetime = field(default_factory=datetime.now)
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        """允许 if result: 判断是否有问题"""
        return self.state.is_problem

    @property
    def success(self) -> bool:
        """检查本身是否执行成功（与测量值是否越界无关）"""
        return self.error is None

    @property
    def exit_code(self) -> int:
        return self.state.exit_code

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（便于序列化）"""
        return {
            "state": self.state.name,
            "message": self.message,
            "value": self.value,
            "threshold": self.threshold,
            "advisories": list(self.advisories),
            "execution_time": self.execution_time,
            "executed_at": self.executed_at.strftime("%Y-%m-%d %H:%M:%S"),
            "error": str(self.error) if self.error else None,
        }

    def __repr__(self) -> str:
        return f"CheckResult(state={self.state.name}, value={self.value!r})"
