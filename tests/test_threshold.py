"""
Nagios 阈值解析与判断测试
"""

import math

import pytest

from sql_select_check.core.threshold import (
    NEG_INF,
    NO_THRESHOLD,
    POS_INF,
    ThresholdRange,
    parse_threshold,
)
from sql_select_check.models.exceptions import ThresholdParseError


class TestParseThreshold:
    """parse_threshold 语法测试"""

    @pytest.mark.parametrize(
        "spec, inverted, lower, upper",
        [
            ("10", False, 0.0, 10.0),
            ("0", False, 0.0, 0.0),
            ("2.5", False, 0.0, 2.5),
            ("1e3", False, 0.0, 1000.0),
            ("10:", False, 10.0, POS_INF),
            ("~:10", False, NEG_INF, 10.0),
            (":10", False, NEG_INF, 10.0),
            ("10:20", False, 10.0, 20.0),
            ("-5:5", False, -5.0, 5.0),
            ("5:5", False, 5.0, 5.0),
            ("~:", False, NEG_INF, POS_INF),
            ("@10:20", True, 10.0, 20.0),
            ("@5", True, 0.0, 5.0),
            ("@~:0", True, NEG_INF, 0.0),
            ("@1.5:", True, 1.5, POS_INF),
        ],
    )
    def test_valid(self, spec, inverted, lower, upper):
        """测试合法阈值"""
        threshold = parse_threshold(spec)
        assert threshold.inverted == inverted
        assert threshold.lower == lower
        assert threshold.upper == upper
        assert threshold.spec == spec

    @pytest.mark.parametrize(
        "spec",
        [
            "10:5",
            "abc",
            "::",
            "1:2:3",
            ":",
            "@",
            "@:",
            "@@5",
            "~",
            "10:~",
            " 10",
            "10 ",
            "inf",
            "nan",
            "1,2",
            "-5",
            "10:abc",
            "abc:10",
        ],
    )
    def test_invalid(self, spec):
        """测试非法阈值"""
        with pytest.raises(ThresholdParseError):
            parse_threshold(spec)

    def test_error_echoes_spec(self):
        """测试错误信息包含原始字符串"""
        with pytest.raises(ThresholdParseError) as exc_info:
            parse_threshold("10:5")
        assert exc_info.value.spec == "10:5"
        assert "'10:5'" in str(exc_info.value)

    def test_empty_is_sentinel(self):
        """测试空字符串返回未配置哨兵"""
        assert parse_threshold("") is NO_THRESHOLD
        assert NO_THRESHOLD.configured is False
        assert str(NO_THRESHOLD) == ""

    @pytest.mark.parametrize("n", ["0", "1", "10", "2.5", "100"])
    def test_bare_number_equals_zero_range(self, n):
        """测试 N 等价于 0:N"""
        assert parse_threshold(n) == parse_threshold(f"0:{n}")


class TestThresholdCheck:
    """ThresholdRange.check 判断测试"""

    def test_outside_alerts(self):
        """测试范围之外告警"""
        threshold = parse_threshold("10:20")
        assert threshold.check(9.999) is True
        assert threshold.check(20.001) is True
        assert threshold.check(15) is False

    def test_bounds_inclusive(self):
        """测试边界值不告警（闭区间）"""
        threshold = parse_threshold("10:20")
        assert threshold.check(10) is False
        assert threshold.check(20) is False

    def test_inverted_bounds_alert(self):
        """测试翻转后边界值告警"""
        threshold = parse_threshold("@10:20")
        assert threshold.check(10) is True
        assert threshold.check(20) is True
        assert threshold.check(9) is False
        assert threshold.check(21) is False

    @pytest.mark.parametrize("spec", ["10", "10:20", "~:5", "5:", "-3:3", "0", "1.5:2.5"])
    def test_inversion_negates(self, spec):
        """测试 @ 前缀对所有值（含边界）取反"""
        plain = parse_threshold(spec)
        inverted = parse_threshold("@" + spec)
        values = [-100.0, 0.0, 100.0]
        for bound in (plain.lower, plain.upper):
            if not math.isinf(bound):
                values += [bound - 0.5, bound, bound + 0.5]
        for value in values:
            assert inverted.check(value) is (not plain.check(value)), value

    def test_unbounded_sides(self):
        """测试无界一侧永远满足"""
        assert parse_threshold("10:").check(1e300) is False
        assert parse_threshold("10:").check(9) is True
        assert parse_threshold("~:10").check(-1e300) is False
        assert parse_threshold("~:10").check(11) is True

    def test_bare_number_negative_value(self):
        """测试 N 对负值告警"""
        assert parse_threshold("10").check(-1) is True

    def test_nan(self):
        """测试 NaN 不在任何范围内"""
        assert parse_threshold("10").check(float("nan")) is True
        assert parse_threshold("@10").check(float("nan")) is False

    @pytest.mark.parametrize("value", [0.0, -1.0, 1e9, float("nan"), float("inf"), float("-inf")])
    def test_sentinel_never_alerts(self, value):
        """测试未配置阈值从不告警"""
        assert NO_THRESHOLD.check(value) is False


class TestThresholdRangeStr:
    """ThresholdRange 字符串表示测试"""

    def test_str_keeps_spec(self):
        """测试保留原始字符串"""
        assert str(parse_threshold("@10:20")) == "@10:20"
        assert str(parse_threshold("~:5")) == "~:5"

    def test_str_without_spec(self):
        """测试无原始字符串时重建"""
        assert str(ThresholdRange(False, 0.0, 10.0)) == "10"
        assert str(ThresholdRange(True, NEG_INF, 5.0)) == "@~:5"
        assert str(ThresholdRange(False, 10.0, POS_INF)) == "10:"
        assert str(ThresholdRange(False, 0.0, POS_INF)) == "0:"

    def test_frozen(self):
        """测试不可变"""
        threshold = parse_threshold("10")
        with pytest.raises(AttributeError):
            threshold.upper = 20.0
