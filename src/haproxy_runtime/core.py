# File: src/haproxy_runtime/core.py
"""
HAProxy Runtime API 客户端 (Operation Facade)

职责：
1. 资源组装：Config + Session。
2. 命令包装：统一加上 'set severity-output number;' 以获得数字严重等级。
3. 常用操作：进程信息、证书列表、证书详情、证书热更新。
"""

import logging

from .config import RuntimeConfig, create_config
from .constants import (
    CMD_ABORT_CERT,
    CMD_COMMIT_CERT,
    CMD_SET_CERT,
    CMD_SEVERITY_WRAPPER,
    CMD_SHOW_CERT,
    CMD_SHOW_CERT_LIST,
    CMD_SHOW_INFO,
    NOISE_KEYS_CERT_INFO,
    NOISE_KEYS_CERT_LIST,
    NOISE_KEYS_INFO,
)
from .exceptions import EmptyCommandError, HAProxyError, ProtocolError, TransactionError
from .executor import execute
from .session import Session, TransportFactory

logger = logging.getLogger(__name__)


def _strip(output: dict[str, str], keys: tuple[str, ...]) -> dict[str, str]:
    for key in keys:
        output.pop(key, None)
    return output


class HAProxyRuntime:
    """HAProxy Runtime API 客户端 (Async)。"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """初始化客户端，此时不建立连接。

        Args:
            config: 配置对象。为空时使用全部默认值 (127.0.0.1:1023)。
            transport_factory: 传输层工厂，测试时可替换为内存实现。
        """
        self.config = config or create_config()
        self.session = Session(self.config, transport_factory)

    async def run_cmd(self, cmd: str) -> dict[str, str]:
        """执行任意 Runtime API 命令。

        Args:
            cmd: 命令文本 (不含换行符)。

        Returns:
            dict[str, str]: 解析后的响应。

        Raises:
            ProtocolError: 服务器返回错误等级 (< 5)。
            NetworkError: 连接或传输异常。
        """
        if not cmd:
            raise EmptyCommandError("cmd required")

        result = await execute(self.session, CMD_SEVERITY_WRAPPER.format(cmd=cmd))

        if self.config.debug and result.severity is None:
            logger.debug(f"Command '{cmd[:32]}...' does not return a severity code")

        if result.error is not None:
            raise ProtocolError(result.error, result.severity)

        return result.output if result.output is not None else {}

    async def info(self) -> dict[str, str]:
        """获取 HAProxy 进程信息 (show info)。"""
        output = await self.run_cmd(CMD_SHOW_INFO)
        return _strip(output, NOISE_KEYS_INFO)

    async def cert_list(self) -> dict[str, str]:
        """获取已加载的 SSL 证书列表，键为证书文件名。"""
        output = await self.run_cmd(CMD_SHOW_CERT_LIST)
        return _strip(output, NOISE_KEYS_CERT_LIST)

    async def cert_info(self, cert_name: str) -> dict[str, str]:
        """获取单个 SSL 证书的详细信息。

        Args:
            cert_name: 证书名称 (文件路径)。
        """
        output = await self.run_cmd(CMD_SHOW_CERT.format(name=cert_name))
        return _strip(output, NOISE_KEYS_CERT_INFO)

    async def cert_update(self, cert_name: str, pem: str) -> None:
        """热更新 SSL 证书。

        流程: set ssl cert (heredoc 负载) -> commit ssl cert。
        set 阶段失败时发送 abort 并重新抛出原始错误；
        commit 失败时不再 abort。

        Args:
            cert_name: 证书名称。
            pem: PEM 格式的证书内容 (证书 + 私钥)。

        Raises:
            HAProxyError: pem 为空，或 set 阶段失败 (原始错误)。
            TransactionError: commit 阶段失败。
        """
        if not pem:
            raise HAProxyError("pem required")

        try:
            await self.run_cmd(CMD_SET_CERT.format(name=cert_name, pem=pem))
        except HAProxyError as e:
            logger.error(f"证书 {cert_name} 更新失败，放弃事务: {e}")
            await self._abort_cert(cert_name)
            raise

        try:
            await self.run_cmd(CMD_COMMIT_CERT.format(name=cert_name))
        except ProtocolError as e:
            raise TransactionError(
                f"commit ssl cert {cert_name} 失败: {e.message}", e.severity_code
            ) from e

        logger.info(f"证书 {cert_name} 已提交")

    async def _abort_cert(self, cert_name: str) -> None:
        """[Internal] 放弃进行中的证书事务。失败只记录日志。"""
        try:
            await self.run_cmd(CMD_ABORT_CERT.format(name=cert_name))
        except HAProxyError as e:
            logger.warning(f"abort ssl cert {cert_name} 失败: {e}")

    async def close(self) -> None:
        await self.session.teardown()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
