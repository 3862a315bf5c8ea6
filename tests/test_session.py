# tests/test_session.py
"""
测试 Session 的连接生命周期：
1. 首次连接：进入交互模式并丢弃一行 banner。
2. 幂等性：已连接时只做一次存活探测，不新建连接。
3. 重连：探测写入 0 字节时透明重连。
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from haproxy_runtime.exceptions import ConnectError, NetworkError
from haproxy_runtime.session import Session
from haproxy_runtime.state import SessionStatus


@pytest.mark.asyncio
async def test_first_connect_enters_prompt_mode(valid_config, scripted_factory):
    scripted_factory.add("Welcome banner\n")
    session = Session(valid_config, scripted_factory)

    await session.ensure_connected()

    transport = scripted_factory.created[0]
    assert transport.connected is True
    assert transport.timeout == valid_config.timeout
    assert transport.sent == ["prompt\n"]
    # banner 行已被消费
    assert transport.lines == []
    assert session.state.status == SessionStatus.CONNECTED
    assert session.state.connects == 1
    assert session.state.probes == 0


@pytest.mark.asyncio
async def test_ensure_connected_is_idempotent(valid_config, scripted_factory):
    scripted_factory.add("banner\n\n")
    session = Session(valid_config, scripted_factory)

    await session.ensure_connected()
    await session.ensure_connected()

    assert len(scripted_factory.created) == 1
    transport = scripted_factory.created[0]
    assert transport.sent == ["prompt\n", "set timeout cli 30\n"]
    assert session.state.connects == 1
    assert session.state.probes == 1


@pytest.mark.asyncio
async def test_dead_probe_reconnects(valid_config, scripted_factory):
    # 第一条连接：prompt 写入成功，探测写入 0 字节
    scripted_factory.add("banner\n", send_results=[7, 0])
    scripted_factory.add("banner 2\n")
    session = Session(valid_config, scripted_factory)

    await session.ensure_connected()
    await session.ensure_connected()

    first, second = scripted_factory.created
    assert first.closed is True
    assert second.connected is True
    assert session.transport is second
    assert session.state.connects == 2


@pytest.mark.asyncio
async def test_connect_failure_raises_connect_error(valid_config):
    transport = MagicMock()
    transport.connect = AsyncMock(side_effect=ConnectionRefusedError("refused"))
    session = Session(valid_config, lambda config: transport)

    with pytest.raises(ConnectError) as exc:
        await session.ensure_connected()

    assert isinstance(exc.value.__cause__, ConnectionRefusedError)
    assert session.transport is None
    assert session.state.status == SessionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_teardown_is_safe_when_disconnected(valid_config, scripted_factory):
    session = Session(valid_config, scripted_factory)
    await session.teardown()
    await session.teardown()
    assert session.transport is None


@pytest.mark.asyncio
async def test_context_manager_tears_down(valid_config, scripted_factory):
    scripted_factory.add("banner\n")

    async with Session(valid_config, scripted_factory) as session:
        await session.ensure_connected()

    assert scripted_factory.created[0].closed is True
    assert session.transport is None


@pytest.mark.asyncio
async def test_probe_reading_closure_reconnects(valid_config, scripted_factory):
    # 第一条连接的脚本只有 banner，探测读取时即为对端关闭
    scripted_factory.add("banner\n")
    scripted_factory.add("banner 2\n")
    session = Session(valid_config, scripted_factory)

    await session.ensure_connected()
    await session.ensure_connected()

    first, second = scripted_factory.created
    assert first.sent == ["prompt\n", "set timeout cli 30\n"]
    assert first.closed is True
    assert session.transport is second
    assert session.state.probes == 1


@pytest.mark.asyncio
async def test_probe_read_error_drops_connection(valid_config, scripted_factory):
    scripted_factory.add("banner\n")
    session = Session(valid_config, scripted_factory)
    await session.ensure_connected()
    transport = scripted_factory.created[0]
    transport.lines = [NetworkError("接收超时 (30.0s)")]

    with pytest.raises(NetworkError):
        await session.ensure_connected()

    assert transport.closed is True
    assert session.transport is None
