# src/haproxy_runtime/network.py
"""
HAProxy Runtime API 客户端 - 网络模块 (Network) [Asyncio Edition]

封装到 Runtime API 的双工字节流 (TCP 或 UNIX socket)。
该模块屏蔽了底层 Stream 的细节，向 Session 层提供按行收发的接口。
"""

import abc
import asyncio
import logging
from typing import Optional, Tuple

from .config import RuntimeConfig
from .constants import STATUS_CLOSED
from .exceptions import NetworkError

logger = logging.getLogger(__name__)


class BaseTransport(abc.ABC):
    """传输层抽象基类。

    Session 只依赖这组能力：connect / send / receive_line / settimeout / close。
    测试中可以用脚本化的内存实现替换。
    """

    @abc.abstractmethod
    async def connect(self) -> None:
        """建立连接。失败时抛出 OSError 或 NetworkError。"""
        raise NotImplementedError

    @abc.abstractmethod
    async def send(self, data: bytes) -> int:
        """发送数据，返回写入的字节数。对端已断开时返回 0。"""
        raise NotImplementedError

    @abc.abstractmethod
    async def receive_line(self) -> Tuple[str, Optional[str]]:
        """读取一行 (不含换行符)。

        Returns:
            (line, status): status 为 None 表示正常读取，
            为 "closed" 表示对端已关闭连接。
        """
        raise NotImplementedError

    @abc.abstractmethod
    def settimeout(self, timeout: float) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class StreamTransport(BaseTransport):
    """基于 asyncio Stream 的 Runtime API 传输实现。"""

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self.timeout: float = float(config.timeout)
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> None:
        """
        打开到 Runtime API 的连接 (TCP 或 UNIX socket)。
        """
        try:
            if self.config.is_unix_socket:
                target = self.config.unix_path
                opener = asyncio.open_unix_connection(target)
            else:
                target = f"{self.config.address}:{self.config.port}"
                opener = asyncio.open_connection(
                    self.config.address, int(self.config.port)
                )

            self.reader, self.writer = await asyncio.wait_for(
                opener, timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise NetworkError(f"连接超时 {target} ({self.timeout}s)") from None
        except ValueError as e:
            raise NetworkError(f"端口无效 {target}: {e}") from e

        logger.debug(f"Runtime API 连接已建立: {target}")

    async def send(self, data: bytes) -> int:
        """
        发送数据并等待缓冲区排空。
        """
        if not self.writer or self.writer.is_closing():
            return 0

        try:
            self.writer.write(data)
            await self.writer.drain()
        except ConnectionError as e:
            logger.debug(f"发送时连接已断开: {e}")
            return 0
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e

        return len(data)

    async def receive_line(self) -> Tuple[str, Optional[str]]:
        """
        读取一行 (Async)。

        使用 asyncio.wait_for 实现超时控制。
        """
        if not self.reader:
            raise NetworkError("Reader 未初始化")

        try:
            raw = await asyncio.wait_for(self.reader.readline(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise NetworkError(f"接收超时 ({self.timeout}s)") from None
        except ConnectionError:
            return "", STATUS_CLOSED
        except ValueError as e:
            # 单行超过 StreamReader 缓冲上限
            raise NetworkError(f"响应行过长: {e}") from e
        except OSError as e:
            raise NetworkError(f"接收错误: {e}") from e

        # readline() 在 EOF 时返回不以 '\n' 结尾的数据 (可能为空)
        if not raw.endswith(b"\n"):
            return raw.decode("utf-8", "replace"), STATUS_CLOSED

        return raw.decode("utf-8", "replace").rstrip("\r\n"), None

    def settimeout(self, timeout: float) -> None:
        self.timeout = float(timeout)

    async def close(self) -> None:
        """关闭 Stream"""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError as e:
                logger.debug(f"关闭连接时出错 (忽略): {e}")
            self.writer = None
            self.reader = None
            logger.debug("Runtime API 连接已关闭")
