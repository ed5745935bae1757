"""
结果归约器

负责把任意查询结果归约为一个可比较的测量值
"""

import logging
import re
from typing import List, Optional

from ..models.exceptions import (
    CheckError,
    NoColumnsError,
    NoRowsError,
    NotANumberError,
    QueryExecutionError,
    ResultReleaseError,
)
from ..models.result import QueryResult, Reduction
from .unquote import unquote as unquote_text

logger = logging.getLogger(__name__)

_FLOAT_RE = re.compile(
    r"[-+]?(?:inf|infinity|nan|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)",
    re.IGNORECASE,
)


def parse_float(text: Optional[str]) -> float:
    """
    严格解析十进制浮点数

    不接受首尾空白和 "_" 分隔符；NULL 视为非数字

    Raises:
        NotANumberError: 无法解析
    """
    if text is None or not _FLOAT_RE.fullmatch(text):
        raise NotANumberError(text)
    return float(text)


class ResultReducer:
    """
    结果归约器

    针对"单行单列聚合查询"优化，同时容忍 SELECT * 或带重复行的诊断查询:
    1. 没有列 -> NoColumnsError
    2. 多于一列 -> 提示 "extra columns ignored"，只看第一列
    3. 第一行第一列（可选去引号）解析为浮点数，作为测量值
    4. 之后的行不解析，提示 "extra rows ignored"，但仍遍历到底以排空游标
    5. 没有行 -> NoRowsError
    6. 无论成功失败都释放结果，释放失败与之前的错误合并
    """

    EXTRA_COLUMNS = "extra columns ignored"
    EXTRA_ROWS = "extra rows ignored"

    def reduce(self, result: QueryResult, unquote: bool = False) -> Reduction:
        """
        归约查询结果

        Args:
            result: 查询结果，由本方法负责关闭
            unquote: 是否先去掉一层引号再解析

        Returns:
            Reduction（测量值 + 非致命提示）

        Raises:
            ExtractionError: 无列、无行、非数字、去引号失败
            QueryExecutionError: 遍历结果时驱动报错
            ResultReleaseError: 归约成功但释放结果失败
        """
        primary: Optional[CheckError] = None
        try:
            return self._reduce_rows(result, unquote)
        except CheckError as e:
            primary = e
            raise
        except Exception as e:
            primary = QueryExecutionError(f"failed to read rows: {e}", original_error=e)
            raise primary from e
        finally:
            self._release(result, primary)

    def _reduce_rows(self, result: QueryResult, unquote: bool) -> Reduction:
        columns = result.columns
        advisories: List[str] = []

        if not columns:
            raise NoColumnsError()
        if len(columns) > 1:
            logger.warning(
                f"期望只返回一列，将使用第一列 (columns={columns})"
            )
            advisories.append(self.EXTRA_COLUMNS)
        else:
            logger.debug(f"返回列 (columns={columns})")

        value: Optional[float] = None
        row_count = 0
        for row in result:
            row_count += 1
            if row_count == 1:
                logger.debug(f"第一行 (columns={columns}, values={list(row)}, row=1)")
                value = self._extract(row[0], unquote)
            else:
                logger.warning(
                    f"查询返回了多于一行，已跳过 "
                    f"(columns={columns}, values={list(row)}, row={row_count})"
                )
                if self.EXTRA_ROWS not in advisories:
                    advisories.append(self.EXTRA_ROWS)

        if value is None:
            raise NoRowsError(columns=columns)

        return Reduction(value=value, advisories=advisories, row_count=row_count, columns=list(columns))

    def _extract(self, text: Optional[str], unquote: bool) -> float:
        if unquote and text is not None:
            text = unquote_text(text)
        return parse_float(text)

    def _release(self, result: QueryResult, primary: Optional[CheckError]) -> None:
        try:
            result.close()
        except Exception as e:
            if primary is not None:
                logger.debug(f"释放查询结果失败，合并到主错误: {e}")
                primary.release_error = e
                return
            raise ResultReleaseError(f"failed to release result: {e}", original_error=e) from e
