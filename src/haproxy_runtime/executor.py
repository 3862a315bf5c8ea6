# File: src/haproxy_runtime/executor.py
"""
HAProxy Runtime API 命令执行器 (Command Executor)

负责在已建立的 Session 上发送一条命令，并逐行解析响应。

响应没有长度字段，也没有帧分隔符，只能逐行判定：
- 空行：响应结束。
- 对端关闭：释放连接，返回已解析的部分。
- 首行 `[n]: msg`：严重等级信号，n < 5 时整条命令视为失败。
- 其他行：按第一个 ': ' 切分为 key / value。
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import KEY_VALUE_DELIMITER, STATUS_CLOSED
from .exceptions import EmptyCommandError, NetworkError, WriteError
from .utils import parse_severity_line, severity_is_error, split

if TYPE_CHECKING:
    from .network import BaseTransport
    from .session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """一次命令执行的结果。

    Attributes:
        output: 解析后的 key/value 映射。服务器报告错误时为 None。
        severity: 首行携带的严重等级代码，没有时为 None。
        error: 服务器返回的错误消息 (已去除前缀)，无错误时为 None。
    """

    output: dict[str, str] | None
    severity: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_line(line: str) -> tuple[str, str]:
    """把一行数据按第一个 ': ' 切分为 (key, value)。

    没有分隔符时 value 为空字符串。value 中后续的 ': ' 原样保留，
    例如 'a: b: c' -> ('a', 'b: c')。
    """
    parts = split(line, KEY_VALUE_DELIMITER, 1)
    if len(parts) < 2:
        return parts[0], ""
    return parts[0], parts[1]


def _is_closed(status: str | None) -> bool:
    return status is not None and STATUS_CLOSED in status


async def _drain(session: "Session", transport: "BaseTransport") -> None:
    """丢弃当前响应剩余的行，直到空行或对端关闭。"""
    while True:
        line, status = await transport.receive_line()
        if _is_closed(status):
            await session.teardown()
            return
        if not line:
            return


async def execute(session: "Session", command: str) -> CommandResult:
    """在 Session 上执行一条命令。

    命令按原样发送，换行符和 heredoc 负载由调用方负责。

    Args:
        session: 会话对象。
        command: 完整的命令文本。

    Returns:
        CommandResult: 解析结果。服务器报告错误时 output 为 None，
        error 为错误消息。

    Raises:
        EmptyCommandError: command 为空。
        ConnectError: 无法建立连接。
        WriteError: 命令发送失败。
        NetworkError: 读取超时等传输错误。
    """
    if not command:
        raise EmptyCommandError("cmd required")

    await session.ensure_connected()
    transport = session.transport
    assert transport is not None

    try:
        try:
            nb = await transport.send(command.encode())
        except WriteError:
            raise
        except NetworkError as e:
            raise WriteError(f"命令发送失败: {e}") from e
        if nb <= 0:
            raise WriteError("error when sending command on HAProxy runtime API")

        return await _read_response(session, transport)
    except NetworkError:
        # 响应未读完时流已失去同步，只能丢弃连接
        logger.warning("命令执行过程中传输异常，释放连接")
        await session.teardown()
        raise


async def _read_response(
    session: "Session", transport: "BaseTransport"
) -> CommandResult:
    """[Internal] 逐行读取并解析一条命令的响应。"""
    output: dict[str, str] = {}
    severity_code: int | None = None
    first_line = True

    while True:
        line, status = await transport.receive_line()
        closed = _is_closed(status)

        if line:
            # 只有首行可能携带严重等级信号
            signal = parse_severity_line(line) if first_line else None
            if signal is not None:
                severity_code, message = signal
                if severity_is_error(severity_code):
                    logger.error(f"Runtime API 返回错误 [{severity_code}]: {message}")
                    if closed:
                        await session.teardown()
                    else:
                        await _drain(session, transport)
                    return CommandResult(None, severity_code, message)
            else:
                key, value = parse_line(line)
                output[key] = value
            first_line = False

        if closed:
            logger.debug("Runtime API 对端关闭了连接")
            await session.teardown()
            break
        if not line:
            break

    return CommandResult(output, severity_code, None)
