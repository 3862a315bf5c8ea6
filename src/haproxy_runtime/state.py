# File: src/haproxy_runtime/state.py
"""
HAProxy Runtime API 客户端 - 状态模块

负责定义和存储 Session 的易变状态。
本模块不包含业务逻辑，仅作为数据容器供 Session 和 Executor 共享读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class SessionStatus(Enum):
    """Session 连接生命周期状态枚举。

    状态流转示意:
    DISCONNECTED -> CONNECTED -> (探测失败 / 对端关闭) -> DISCONNECTED
    """

    DISCONNECTED = auto()
    """无连接句柄 (初始状态，或已 teardown)。"""

    CONNECTED = auto()
    """已建立连接并进入交互模式。"""


@dataclass
class SessionState:
    """存储 Session 的易变状态数据。

    该对象是非持久化的，进程重启后重新开始计数。

    Attributes:
        status: 当前连接状态。
        connects: 建立新连接的次数。
        probes: 存活探测 (set timeout cli) 的次数。
    """

    status: SessionStatus = SessionStatus.DISCONNECTED
    connects: int = 0
    probes: int = 0

    @property
    def is_connected(self) -> bool:
        return self.status is SessionStatus.CONNECTED
