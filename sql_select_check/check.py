"""
SQL 计数检查

串联配置校验、SQL 执行、结果归约和阈值判断，产出 CheckResult

流程:
    1. check_args: 解析 warning/critical 阈值（在任何查询之前）
    2. 打开数据库并执行查询
    3. 归约结果得到测量值
    4. 先判断 critical，再判断 warning
"""

import logging
import time
from typing import Optional, Tuple

from .config import CheckConfig
from .core.executor import SQLExecutor
from .core.reducer import ResultReducer
from .core.threshold import Threshold, parse_threshold
from .models.exceptions import CheckError, ConfigError, ThresholdParseError
from .models.level import CheckState
from .models.result import CheckResult

logger = logging.getLogger(__name__)


class SelectCountCheck:
    """
    SQL 计数检查

    Usage:
        ```python
        config = CheckConfig(dburl="mysql://tester:pw@localhost/test",
                             query="SELECT COUNT(*) FROM jobs", warning="10", critical="20")
        result = SelectCountCheck(config).run()
        print(result.message)
        sys.exit(result.exit_code)
        ```
    """

    def __init__(
        self,
        config: CheckConfig,
        executor: Optional[SQLExecutor] = None,
        reducer: Optional[ResultReducer] = None,
    ):
        """
        Args:
            config: 检查配置
            executor: SQL 执行器（默认按 config 创建）
            reducer: 结果归约器
        """
        self.config = config
        self.executor = executor or SQLExecutor(config)
        self.reducer = reducer or ResultReducer()
        self.warning: Optional[Threshold] = None
        self.critical: Optional[Threshold] = None

    def check_args(self) -> Tuple[Threshold, Threshold]:
        """
        校验配置并解析阈值

        Returns:
            (warning, critical) 阈值

        Raises:
            ConfigError: 阈值非法或缺少查询
        """
        try:
            warning = parse_threshold(self.config.warning)
        except ThresholdParseError as e:
            raise ConfigError(f"--warning error: {e}") from e
        try:
            critical = parse_threshold(self.config.critical)
        except ThresholdParseError as e:
            raise ConfigError(f"--critical error: {e}") from e

        if not self.config.query.strip():
            raise ConfigError("--query is required")

        self.warning, self.critical = warning, critical
        return warning, critical

    def run(self) -> CheckResult:
        """
        校验配置后执行检查

        配置错误返回 CRITICAL，执行失败返回 UNKNOWN，均不抛出异常
        """
        try:
            self.check_args()
        except ConfigError as e:
            logger.error(f"配置校验失败: {e}")
            return CheckResult(
                state=CheckState.CRITICAL,
                message=f"error validating input: {e}",
                error=e,
            )
        return self.execute()

    def execute(self) -> CheckResult:
        """
        执行查询并判断阈值

        需要先调用 check_args()

        Returns:
            CheckResult
        """
        if self.warning is None or self.critical is None:
            self.check_args()

        start_time = time.time()
        stage = "open db"
        engine = None
        try:
            engine = self.executor.create_engine()
            stage = "query"
            query_result = self.executor.execute(engine)
            stage = "read"
            reduction = self.reducer.reduce(query_result, unquote=self.config.unquote)
        except CheckError as e:
            logger.error(f"{stage} 失败: {e}")
            return self._failure(stage, e, time.time() - start_time)
        except Exception as e:
            # 未预期异常包装后按 UNKNOWN 上报
            logger.exception(f"检查执行异常: {e}")
            error = CheckError(f"unexpected error: {e}")
            error.__cause__ = e
            return self._failure(stage, error, time.time() - start_time)
        finally:
            if engine is not None:
                self._dispose(engine)

        execution_time = time.time() - start_time
        value = reduction.value
        logger.debug(f"测量值 {value}，耗时 {execution_time:.2f}s")

        result = self.classify(value)
        result.advisories = list(reduction.advisories)
        result.execution_time = execution_time
        return result

    def classify(self, value: float) -> CheckResult:
        """
        按阈值判断测量值，critical 优先

        Args:
            value: 测量值
        """
        if self.warning is None or self.critical is None:
            self.check_args()

        if self.critical.check(value):
            return CheckResult(
                state=CheckState.CRITICAL,
                message=f"CRITICAL: result is {value:f} which is out of {self.critical}",
                value=value,
                threshold=str(self.critical),
            )
        if self.warning.check(value):
            return CheckResult(
                state=CheckState.WARNING,
                message=f"WARNING: result is {value:f} which is out of {self.warning}",
                value=value,
                threshold=str(self.warning),
            )
        return CheckResult(state=CheckState.OK, message=f"OK: result is {value:f}", value=value)

    def _failure(self, stage: str, error: CheckError, execution_time: float) -> CheckResult:
        return CheckResult(
            state=CheckState.UNKNOWN,
            message=f"error executing check: {stage} error: {error}",
            execution_time=execution_time,
            error=error,
        )

    def _dispose(self, engine) -> None:
        try:
            engine.dispose()
        except Exception as e:
            # 结果已经得出，释放引擎失败只记录日志
            logger.warning(f"释放数据库引擎失败: {e}")
