"""
命令行入口

读取参数/环境变量（以及 stdin 上的 Sensu 事件），执行检查，
向 stdout 输出单行结果并以检查状态作为退出码
"""

import json
import logging
import os
import stat
import sys
from typing import IO, Any, Dict, Mapping, Optional, Sequence

from .check import SelectCountCheck
from .config import CheckConfig
from .models.exceptions import ConfigError
from .models.level import CheckState

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False, stream: Optional[IO[str]] = None) -> None:
    """
    配置日志输出到 stderr

    Args:
        debug: 为 True 时输出 DEBUG 级别
        stream: 输出流（默认 sys.stderr）
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=stream or sys.stderr,
        force=True,
    )


def stdin_is_pipe(stdin: IO[str]) -> bool:
    """stdin 是否连接到命名管道（Sensu agent 通过管道传入事件）"""
    try:
        mode = os.fstat(stdin.fileno()).st_mode
    except (OSError, ValueError, AttributeError):
        # io.StringIO 等没有 fileno
        return False
    return stat.S_ISFIFO(mode)


def read_event(stdin: IO[str]) -> Dict[str, Any]:
    """
    从 stdin 读取 Sensu 事件

    Raises:
        ConfigError: 内容不是合法的 JSON
    """
    payload = stdin.read()
    try:
        event = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ConfigError(f"failed to unmarshal STDIN data: {e}") from e
    if not isinstance(event, dict):
        raise ConfigError("failed to unmarshal STDIN data: event is not a JSON object")
    return event


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    use_stdin: Optional[bool] = None,
) -> int:
    """
    执行一次检查

    Args:
        argv: 命令行参数（默认 sys.argv[1:]）
        environ: 环境变量（默认 os.environ）
        stdin: 事件输入流（默认 sys.stdin）
        stdout: 结果输出流（默认 sys.stdout）
        use_stdin: 是否读取事件；None 表示 stdin 为管道时读取

    Returns:
        退出码（CheckState 数值）
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    try:
        config = CheckConfig.from_args(argv, environ)
        if use_stdin is None:
            use_stdin = stdin_is_pipe(stdin)
        if use_stdin:
            config = config.with_event(read_event(stdin))
    except ConfigError as e:
        print(f"error validating input: {e}", file=stdout)
        return CheckState.UNKNOWN.exit_code

    configure_logging(config.debug)
    logger.debug(f"配置: {config.to_dict()}")

    result = SelectCountCheck(config).run()
    print(result.message, file=stdout)
    return result.exit_code


def run() -> None:
    """console_scripts 入口"""
    sys.exit(main())
