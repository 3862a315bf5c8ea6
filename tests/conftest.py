# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from haproxy_runtime.config import RuntimeConfig, create_config
from haproxy_runtime.network import BaseTransport


class ScriptedTransport(BaseTransport):
    """内存中的脚本化传输层：按顺序吐出预设的响应行。

    脚本中的异常对象在读到时被抛出；脚本耗尽后表现为对端关闭 ("", "closed")。
    """

    def __init__(self, lines=None, send_results=None):
        self.lines = list(lines or [])
        self.send_results = list(send_results or [])
        self.sent: list[str] = []
        self.connected = False
        self.closed = False
        self.timeout = None

    async def connect(self) -> None:
        self.connected = True

    async def send(self, data: bytes) -> int:
        self.sent.append(data.decode())
        if self.send_results:
            return self.send_results.pop(0)
        return len(data)

    async def receive_line(self):
        if not self.lines:
            return "", "closed"
        line = self.lines.pop(0)
        if isinstance(line, Exception):
            raise line
        return line, None

    def settimeout(self, timeout: float) -> None:
        self.timeout = timeout

    async def close(self) -> None:
        self.closed = True


class ScriptedFactory:
    """传输层工厂：每次建立连接时取出下一段脚本。"""

    def __init__(self):
        self.scripts: list[tuple[list[str], list[int] | None]] = []
        self.created: list[ScriptedTransport] = []

    def add(self, text: str = "", send_results=None) -> "ScriptedFactory":
        """添加一段响应脚本，text 为服务器发出的原始文本。"""
        lines = text.split("\n")
        if text.endswith("\n"):
            lines = lines[:-1]
        self.scripts.append((lines if text else [], send_results))
        return self

    def __call__(self, config: RuntimeConfig) -> ScriptedTransport:
        lines, send_results = self.scripts.pop(0) if self.scripts else ([], None)
        transport = ScriptedTransport(lines, send_results)
        self.created.append(transport)
        return transport


@pytest.fixture
def valid_config() -> RuntimeConfig:
    """[Fixture] 返回一个默认端点的配置对象。"""
    return create_config(address="127.0.0.1", port="1023", timeout=30)


@pytest.fixture
def scripted_factory() -> ScriptedFactory:
    return ScriptedFactory()
