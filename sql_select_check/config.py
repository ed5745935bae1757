"""
检查配置

配置来源与优先级: Sensu 事件注解 > 命令行参数 > 环境变量 > 默认值

注解命名规则:
    sensu.io/plugins/sensu-go-sql-select-count-check/config/<path>
    先应用 check 上的注解，再应用 entity 上的注解（entity 优先）

Usage:
    config = CheckConfig.from_args(["--dburl", "mysql://u:p@db/test", "-q", "SELECT 1"])
    config = config.with_event(event)
"""

import argparse
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .models.exceptions import ConfigError

logger = logging.getLogger(__name__)

PLUGIN_NAME = "sensu-go-sql-select-count-check"
PLUGIN_SHORT = "Query SQL DB and check for threshold"
KEYSPACE = f"sensu.io/plugins/{PLUGIN_NAME}/config"

ALLOWED_DRIVERS = ("mysql", "postgresql")
DEFAULT_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off", ""}
_ARG_TYPES = {"str": str, "int": int, "float": float}


@dataclass(frozen=True)
class ConfigOption:
    """
    单个配置项的描述

    Attributes:
        path: 配置路径，同时是 CheckConfig 字段名和注解后缀
        env: 环境变量名
        argument: 长参数名（不含 --）
        shorthand: 短参数名（不含 -），为空表示没有
        default: 默认值
        usage: 帮助文本
        kind: 值类型 str / int / float / bool / list
        allow: 允许的取值（为空表示不限制）
    """
    path: str
    env: str
    argument: str
    shorthand: str
    default: Any
    usage: str
    kind: str = "str"
    allow: Tuple[str, ...] = ()


OPTIONS: List[ConfigOption] = [
    ConfigOption("dburl", "SQL_URL", "dburl", "", "", "DB URL"),
    ConfigOption("driver", "SQL_DRIVER", "driver", "", "mysql", "DB Driver", allow=ALLOWED_DRIVERS),
    ConfigOption("host", "SQL_HOST", "host", "H", "", "DB Host"),
    ConfigOption("port", "SQL_PORT", "port", "P", 0, "DB Port", kind="int"),
    ConfigOption("user", "SQL_USER", "user", "u", "", "DB User"),
    ConfigOption("password", "SQL_PASSWORD", "password", "p", "", "DB Password"),
    ConfigOption("database", "SQL_DATABASE", "database", "d", "", "Database name"),
    ConfigOption("query", "SQL_QUERY", "query", "q", "", "Query"),
    ConfigOption(
        "query_args", "SQL_QUERY_ARGS", "query-args", "a", [],
        "Optional query arguments passed to prepare statement. "
        "Placeholders are the driver's own: %s for mysql/postgresql (not ?), ? for sqlite",
        kind="list",
    ),
    ConfigOption("warning", "SQL_WARNING", "warning", "w", "", "Warning level"),
    ConfigOption("critical", "SQL_CRITICAL", "critical", "c", "", "Critical level"),
    ConfigOption(
        "unquote", "SQL_UNQUOTE", "unquote", "j", False,
        "Unquote string before parsing as float (useful for JSON fields)", kind="bool",
    ),
    ConfigOption("debug", "DEBUG", "debug", "", False, "Enable debug log", kind="bool"),
    ConfigOption(
        "timeout", "SQL_TIMEOUT", "timeout", "t", DEFAULT_TIMEOUT,
        "Query timeout in seconds", kind="float",
    ),
]

_OPTIONS_BY_PATH: Dict[str, ConfigOption] = {o.path: o for o in OPTIONS}


@dataclass(frozen=True)
class CheckConfig:
    """
    检查配置（不可变）

    启动时构造一次，之后以引用方式传给执行器和检查流程
    """
    dburl: str = ""
    driver: str = "mysql"
    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    database: str = ""
    query: str = ""
    query_args: Tuple[str, ...] = field(default_factory=tuple)
    warning: str = ""
    critical: str = ""
    unquote: bool = False
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        # 列表统一转为元组，保持不可变
        if not isinstance(self.query_args, tuple):
            object.__setattr__(self, "query_args", tuple(self.query_args))

    @classmethod
    def from_args(
        cls,
        argv: Optional[Sequence[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "CheckConfig":
        """
        从命令行参数和环境变量构造配置

        Args:
            argv: 命令行参数（默认 sys.argv[1:]）
            environ: 环境变量（默认 os.environ）

        Raises:
            ConfigError: 环境变量或参数值非法
        """
        if environ is None:
            environ = os.environ
        parser = build_parser(environ)
        namespace = parser.parse_args(argv)

        values = {}
        for option in OPTIONS:
            value = getattr(namespace, option.path)
            if option.kind == "list":
                value = _split_list(value) if value is not None else option_default(option, environ)
            values[option.path] = value
        config = cls(**values)
        config.validate_options()
        return config

    def with_event(self, event: Mapping[str, Any]) -> "CheckConfig":
        """
        应用 Sensu 事件中的注解覆盖，返回新的配置

        Raises:
            ConfigError: 事件缺少 check/entity，或注解值非法
        """
        if not isinstance(event, Mapping):
            raise ConfigError("event is not a JSON object")
        check = event.get("check")
        entity = event.get("entity")
        if not isinstance(check, Mapping):
            raise ConfigError("event does not contain check")
        if not isinstance(entity, Mapping):
            raise ConfigError("event does not contain entity")

        overrides: Dict[str, Any] = {}
        for source in (check, entity):
            metadata = source.get("metadata") or {}
            if not isinstance(metadata, Mapping):
                raise ConfigError("event metadata is not a JSON object")
            annotations = metadata.get("annotations") or {}
            if not isinstance(annotations, Mapping):
                raise ConfigError("event annotations is not a JSON object")
            for key, raw in annotations.items():
                if not key.startswith(KEYSPACE + "/"):
                    continue
                path = key[len(KEYSPACE) + 1:]
                option = _OPTIONS_BY_PATH.get(path)
                if option is None:
                    logger.debug(f"忽略未知的注解: {key}")
                    continue
                overrides[path] = convert_value(option, raw)
                logger.debug(f"注解覆盖配置: {path}")

        if not overrides:
            return self
        config = replace(self, **overrides)
        config.validate_options()
        return config

    def validate_options(self) -> None:
        """校验有取值限制的配置项"""
        for option in OPTIONS:
            value = getattr(self, option.path)
            if option.allow and value not in option.allow:
                raise ConfigError(
                    f"invalid value {value!r} for --{option.argument}, allowed: {', '.join(option.allow)}"
                )
        if self.timeout <= 0:
            raise ConfigError(f"--timeout must be positive, got {self.timeout}")

    def to_dict(self, mask_password: bool = True) -> Dict[str, Any]:
        """转换为字典（默认隐藏密码，便于日志输出）"""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["query_args"] = list(self.query_args)
        if mask_password and self.password:
            data["password"] = "***"
        return data


class CheckArgumentParser(argparse.ArgumentParser):
    """参数错误抛出 ConfigError，而不是打印用法后以退出码 2 退出"""

    def error(self, message: str):
        raise ConfigError(message)


def build_parser(environ: Optional[Mapping[str, str]] = None) -> CheckArgumentParser:
    """
    构造命令行解析器，默认值来自环境变量

    Args:
        environ: 环境变量（默认 os.environ）
    """
    if environ is None:
        environ = os.environ

    parser = CheckArgumentParser(
        prog=PLUGIN_NAME,
        description=PLUGIN_SHORT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            f"  {PLUGIN_NAME} --dburl mysql://user:pw@db:3306/app -q 'SELECT COUNT(*) FROM jobs' -w 10 -c 20\n"
            f"  {PLUGIN_NAME} --driver postgresql -H db -d app -q 'SELECT x FROM t WHERE k = %s' -a key -c @0\n"
        ),
    )

    for option in OPTIONS:
        flags = [f"--{option.argument}"]
        if option.shorthand:
            flags.insert(0, f"-{option.shorthand}")

        default = option_default(option, environ)

        # argparse 会对 help 做 % 格式化
        help_text = f"{option.usage} (env: {option.env})".replace("%", "%%")
        kwargs: Dict[str, Any] = {"dest": option.path, "default": default, "help": help_text}
        if option.kind == "bool":
            kwargs["action"] = argparse.BooleanOptionalAction
        elif option.kind == "list":
            kwargs["action"] = "append"
            # append 会在默认值上追加，所以这里不设默认值，由 from_args 事后填充
            kwargs["default"] = None
            kwargs["metavar"] = "ARG"
        else:
            kwargs["type"] = _ARG_TYPES[option.kind]
            if option.allow:
                kwargs["choices"] = option.allow
        parser.add_argument(*flags, **kwargs)

    return parser


def convert_value(option: ConfigOption, raw: Any) -> Any:
    """
    将字符串形式的值（环境变量 / 注解）转换为配置项类型

    Raises:
        ConfigError: 值无法转换
    """
    if option.kind == "list":
        return _split_list(raw)
    if not isinstance(raw, str):
        raw = str(raw)
    if option.kind == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigError(f"invalid boolean {raw!r} for {option.path}")
    if option.kind in ("int", "float"):
        try:
            return _ARG_TYPES[option.kind](raw)
        except ValueError:
            raise ConfigError(f"invalid {option.kind} {raw!r} for {option.path}")
    return raw


def _split_list(value: Any) -> Tuple[str, ...]:
    """逗号分隔的字符串或字符串列表展开为元组"""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    items: List[str] = []
    for item in value:
        if isinstance(item, str):
            items.extend(part for part in item.split(",") if part != "")
        else:
            items.extend(_split_list(item))
    return tuple(items)


def option_default(option: ConfigOption, environ: Mapping[str, str]) -> Any:
    """配置项的默认值：环境变量优先，其次内置默认值"""
    if option.env in environ:
        return convert_value(option, environ[option.env])
    if option.kind == "list":
        return tuple(option.default)
    return option.default
