"""
SQL 执行器

负责按逻辑驱动名或 URL 打开数据库、带超时执行参数化查询，
并把游标包装为 QueryResult 交给归约器
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..config import CheckConfig
from ..models.exceptions import QueryExecutionError
from ..models.result import QueryResult

logger = logging.getLogger(__name__)


class SQLExecutor:
    """
    SQL 执行器

    负责:
    1. 根据 dburl 或 host/port/user/... 组装连接 URL
    2. 按驱动设置连接、读写和语句超时
    3. 执行查询并返回 QueryResult（由调用方负责关闭）

    Attributes:
        DRIVERS: 逻辑驱动名到 SQLAlchemy 方言+DBAPI 的映射
        SCHEME_ALIASES: URL scheme 别名到逻辑驱动名的映射
    """

    DRIVERS: Dict[str, str] = {
        "mysql": "mysql+pymysql",
        "postgresql": "postgresql+psycopg2",
    }

    SCHEME_ALIASES: Dict[str, str] = {
        "mysql": "mysql",
        "my": "mysql",
        "mariadb": "mysql",
        "maria": "mysql",
        "postgresql": "postgresql",
        "postgres": "postgresql",
        "pg": "postgresql",
        "pgsql": "postgresql",
    }

    def __init__(self, config: CheckConfig):
        """
        Args:
            config: 检查配置
        """
        self.config = config
        self.timeout = config.timeout

    def build_url(self) -> URL:
        """
        组装连接 URL

        dburl 优先；否则使用 driver/host/port/user/password/database 组装。
        未设置 user 时忽略 password。

        Raises:
            QueryExecutionError: URL 非法或驱动不受支持
        """
        config = self.config
        if config.dburl:
            try:
                url = make_url(config.dburl)
            except ArgumentError as e:
                raise QueryExecutionError(f"invalid db url: {e}", original_error=e) from e
            return self._normalize_url(url)

        drivername = self.DRIVERS.get(config.driver)
        if drivername is None:
            raise QueryExecutionError(f"unsupported driver: {config.driver}")

        return URL.create(
            drivername=drivername,
            username=config.user or None,
            password=config.password if config.user else None,
            host=config.host or None,
            port=config.port if config.port > 0 else None,
            database=config.database or None,
        )

    def _normalize_url(self, url: URL) -> URL:
        # 只替换未显式指定 DBAPI 的别名，mysql+mysqldb 之类保持原样
        if "+" in url.drivername:
            return url
        driver = self.SCHEME_ALIASES.get(url.drivername)
        if driver is None:
            return url
        return url.set(drivername=self.DRIVERS[driver])

    def connect_args(self, url: URL) -> Dict[str, Any]:
        """
        按方言生成超时相关的连接参数

        Args:
            url: 连接 URL
        """
        seconds = max(1, int(round(self.timeout)))
        backend = url.get_backend_name()
        if backend == "mysql" and url.get_driver_name() == "pymysql":
            return {
                "connect_timeout": seconds,
                "read_timeout": seconds,
                "write_timeout": seconds,
            }
        if backend == "postgresql" and url.get_driver_name() == "psycopg2":
            return {
                "connect_timeout": seconds,
                "options": f"-c statement_timeout={int(self.timeout * 1000)}",
            }
        return {}

    def create_engine(self) -> Engine:
        """
        创建数据库引擎（不会立即连接）

        Raises:
            QueryExecutionError: URL 非法或驱动未安装
        """
        url = self.build_url()
        logger.debug(
            f"打开数据库 (driver={url.drivername}, dsn={url.render_as_string(hide_password=True)})"
        )
        try:
            return create_engine(url, connect_args=self.connect_args(url), poolclass=NullPool)
        except (ArgumentError, ImportError, SQLAlchemyError) as e:
            raise QueryExecutionError(f"cannot open db: {e}", original_error=e) from e

    def execute(self, engine: Engine) -> QueryResult:
        """
        执行查询

        参数按位置传给驱动，占位符使用驱动自身的风格（mysql/postgresql 为 %s）

        Args:
            engine: 数据库引擎

        Returns:
            QueryResult，关闭时释放游标和连接

        Raises:
            QueryExecutionError: 连接或执行失败
        """
        sql = self.config.query
        args = tuple(self.config.query_args)
        logger.debug(f"执行 SQL: {sql[:200]} (args={list(args)})")

        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            raise QueryExecutionError(f"cannot connect: {e}", sql=sql, original_error=e) from e

        try:
            if args:
                cursor = connection.exec_driver_sql(sql, args)
            else:
                # 无参数时驱动不做 % 格式化，查询中的字面量 % 原样发送
                cursor = connection.execution_options(no_parameters=True).exec_driver_sql(sql)
            columns = list(cursor.keys()) if cursor.returns_rows else []
        except SQLAlchemyError as e:
            connection.close()
            raise QueryExecutionError(f"query failed: {e}", sql=sql, original_error=e) from e

        def release():
            try:
                cursor.close()
            finally:
                connection.close()

        rows = (tuple(to_text(v) for v in row) for row in cursor) if columns else iter(())
        return QueryResult(columns, rows, on_close=release)


def to_text(value: Any) -> Optional[str]:
    """
    单元格转为文本

    bytes 按 UTF-8 解码，NULL 保持为 None
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)
