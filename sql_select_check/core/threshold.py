"""
Nagios 阈值范围

解析并评估 Nagios 插件约定的阈值字符串:

    | 阈值      | 告警条件                      |
    |-----------|-------------------------------|
    | "10"      | < 0 或 > 10 （即 0:10 之外）  |
    | "10:"     | < 10                          |
    | "~:10"    | > 10                          |
    | ":10"     | > 10                          |
    | "10:20"   | < 10 或 > 20                  |
    | "@10:20"  | 10 <= x <= 20                 |
    | ""        | 从不告警（未配置阈值）        |

边界均为闭区间，"@" 前缀把"范围之外告警"翻转为"范围之内告警"
"""

import math
import re
from dataclasses import dataclass, field
from typing import Union

from ..models.exceptions import ThresholdParseError

NEG_INF = float("-inf")
POS_INF = float("inf")

# 十进制数字，不接受 inf/nan、空白和下划线
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class ThresholdRange:
    """
    已解析的阈值范围

    Attributes:
        inverted: 是否以 "@" 开头（范围之内告警）
        lower: 闭区间下界，无下界时为 -inf
        upper: 闭区间上界，无上界时为 +inf
        spec: 原始阈值字符串，仅用于输出
    """
    inverted: bool
    lower: float
    upper: float
    spec: str = field(default="", compare=False)

    configured = True

    def contains(self, value: float) -> bool:
        """value 是否落在 [lower, upper] 内"""
        return self.lower <= value <= self.upper

    def check(self, value: float) -> bool:
        """
        判断测量值是否触发告警

        Returns:
            True 表示满足告警条件
        """
        inside = self.contains(value)
        if self.inverted:
            return inside
        return not inside

    def __str__(self) -> str:
        if self.spec:
            return self.spec
        return _format_range(self)


class NoThreshold:
    """
    未配置阈值

    空字符串解析得到的哨兵值，check() 对任何值（包括 NaN 和无穷）都返回 False
    """

    configured = False
    spec = ""

    def check(self, value: float) -> bool:
        return False

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "NO_THRESHOLD"


NO_THRESHOLD = NoThreshold()

Threshold = Union[ThresholdRange, NoThreshold]


def parse_threshold(spec: str) -> Threshold:
    """
    解析阈值字符串

    Args:
        spec: Nagios 阈值字符串，如 "10", "10:20", "@~:5", ""

    Returns:
        ThresholdRange；空字符串返回 NO_THRESHOLD

    Raises:
        ThresholdParseError: 字符串不符合阈值语法，或下界大于上界
    """
    if spec == "":
        return NO_THRESHOLD

    text = spec
    inverted = text.startswith("@")
    if inverted:
        text = text[1:]

    if text.count(":") > 1:
        raise ThresholdParseError("too many range separators", spec)

    if ":" in text:
        start, end = text.split(":")
        if start == "" and end == "":
            raise ThresholdParseError("range has no bounds", spec)
        lower = NEG_INF if start in ("", "~") else _parse_bound(start, spec)
        upper = POS_INF if end == "" else _parse_bound(end, spec)
    else:
        if text == "":
            raise ThresholdParseError("missing range", spec)
        # 单个数字 N 等价于 0:N
        lower = 0.0
        upper = _parse_bound(text, spec)

    if lower > upper:
        raise ThresholdParseError("start of range is greater than end", spec)

    return ThresholdRange(inverted=inverted, lower=lower, upper=upper, spec=spec)


def _parse_bound(token: str, spec: str) -> float:
    if not _NUMBER_RE.fullmatch(token):
        raise ThresholdParseError(f"invalid number {token!r} in threshold", spec)
    return float(token)


def _format_bound(value: float) -> str:
    if math.isinf(value):
        return "~" if value < 0 else ""
    return f"{value:g}"


def _format_range(threshold: ThresholdRange) -> str:
    prefix = "@" if threshold.inverted else ""
    if threshold.lower == 0 and not math.isinf(threshold.upper):
        return prefix + _format_bound(threshold.upper)
    return f"{prefix}{_format_bound(threshold.lower)}:{_format_bound(threshold.upper)}"
