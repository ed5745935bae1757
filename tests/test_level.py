"""
CheckState 枚举与 CheckResult 测试
"""

from sql_select_check.models.level import CheckState
from sql_select_check.models.result import CheckResult


class TestCheckState:
    """CheckState 枚举测试"""

    def test_exit_codes(self):
        """测试退出码与 Sensu 约定一致"""
        assert CheckState.OK.exit_code == 0
        assert CheckState.WARNING.exit_code == 1
        assert CheckState.CRITICAL.exit_code == 2
        assert CheckState.UNKNOWN.exit_code == 3

    def test_str(self):
        """测试字符串转换"""
        assert str(CheckState.OK) == "OK"
        assert str(CheckState.UNKNOWN) == "UNKNOWN"

    def test_is_problem(self):
        assert CheckState.OK.is_problem is False
        assert CheckState.WARNING.is_problem is True
        assert CheckState.UNKNOWN.is_problem is True


class TestCheckResult:
    """CheckResult 测试"""

    def test_bool(self):
        """测试 if result: 判断是否有问题"""
        assert not CheckResult(state=CheckState.OK, message="OK: result is 1.000000", value=1.0)
        assert CheckResult(state=CheckState.CRITICAL, message="CRITICAL", value=9.0)

    def test_success(self):
        """测试 success 只反映检查本身是否失败"""
        assert CheckResult(state=CheckState.CRITICAL, message="", value=9.0).success is True
        assert CheckResult(state=CheckState.UNKNOWN, message="", error=RuntimeError("x")).success is False

    def test_to_dict(self):
        """测试序列化"""
        result = CheckResult(
            state=CheckState.WARNING,
            message="WARNING: result is 3.000000 which is out of 2",
            value=3.0,
            threshold="2",
            advisories=["extra rows ignored"],
        )
        data = result.to_dict()
        assert data["state"] == "WARNING"
        assert data["value"] == 3.0
        assert data["threshold"] == "2"
        assert data["advisories"] == ["extra rows ignored"]
        assert data["error"] is None
        assert result.exit_code == 1
