# File: src/haproxy_runtime/session.py
"""
HAProxy Runtime API 会话 (Session)

职责：
1. 持有唯一的传输句柄 (至多一个物理连接)。
2. 连接管理：首次连接时进入交互模式 (prompt)，之后每条命令前做存活探测。
3. 服务器端会关闭空闲连接，探测失败时透明重连。
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from .config import RuntimeConfig
from .constants import CMD_PROMPT, STATUS_CLOSED
from .exceptions import ConnectError, NetworkError
from .network import BaseTransport, StreamTransport
from .state import SessionState, SessionStatus

logger = logging.getLogger(__name__)

TransportFactory = Callable[[RuntimeConfig], BaseTransport]


class Session:
    """Runtime API 会话 (Async)。

    一个 Session 对应一条串行的命令流，不提供内部加锁。
    需要并发时，每个调用方应使用独立的 Session。
    """

    def __init__(
        self,
        config: RuntimeConfig,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """初始化会话，此时不建立连接。

        Args:
            config: 配置对象。
            transport_factory: 传输层工厂。默认使用 StreamTransport。
        """
        self.config = config
        self._transport_factory = transport_factory or StreamTransport
        self.transport: BaseTransport | None = None
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    async def ensure_connected(self) -> None:
        """确保连接可用 (幂等)。

        已有连接时，发送缓存的 'set timeout cli' 命令作为存活探测；
        写入 0 字节或读到对端关闭视为连接已死，关闭后重新连接。

        Raises:
            ConnectError: 无法建立新连接。
        """
        if self.transport is not None:
            self._state.probes += 1
            try:
                nb = await self.transport.send(self.config.set_timeout_cmd.encode())
            except NetworkError as e:
                logger.warning(f"存活探测写入失败: {e}")
                nb = 0

            if nb > 0:
                # 丢弃探测命令的响应行
                try:
                    _, status = await self.transport.receive_line()
                except NetworkError:
                    await self.teardown()
                    raise
                if status is None or STATUS_CLOSED not in status:
                    return

            logger.warning("Runtime API 连接已失效，准备重连")
            await self.teardown()

        await self._connect()

    async def _connect(self) -> None:
        """[Internal] 建立新连接并进入交互模式。"""
        transport = self._transport_factory(self.config)
        transport.settimeout(self.config.timeout)

        try:
            await transport.connect()
        except (OSError, NetworkError) as e:
            self._state.status = SessionStatus.DISCONNECTED
            raise ConnectError(
                f"无法连接 Runtime API {self.config.address}:{self.config.port}: {e}"
            ) from e

        self.transport = transport
        self._state.connects += 1
        self._state.status = SessionStatus.CONNECTED
        logger.info(f"已连接 Runtime API {self.config.address}:{self.config.port}")

        # 进入交互模式，并清掉一行 banner
        await transport.send(CMD_PROMPT.encode())
        await transport.receive_line()

    async def teardown(self) -> None:
        """关闭并丢弃当前连接。未连接时调用是安全的。"""
        if self.transport is not None:
            try:
                await self.transport.close()
            finally:
                self.transport = None
                self._state.status = SessionStatus.DISCONNECTED
                logger.debug("Session 连接已释放")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.teardown()
