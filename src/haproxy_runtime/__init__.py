"""
haproxy-runtime v0.1.0
HAProxy Runtime API 的异步客户端库。
"""

# 暴露配置
from .config import (
    RuntimeConfig,
    create_config,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)
from .constants import Severity

# 暴露客户端与会话
from .core import HAProxyRuntime

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    ConfigError,
    ConnectError,
    EmptyCommandError,
    HAProxyError,
    InvalidSeverityError,
    MissingEndpointError,
    NetworkError,
    ProtocolError,
    TransactionError,
    WriteError,
)
from .executor import CommandResult, execute
from .network import BaseTransport, StreamTransport
from .session import Session
from .state import SessionState, SessionStatus
from .utils import severity_is_error, split

__version__ = "0.1.0"

__all__ = [
    "HAProxyRuntime",
    "Session",
    "SessionState",
    "SessionStatus",
    "BaseTransport",
    "StreamTransport",
    "CommandResult",
    "execute",
    "RuntimeConfig",
    "Severity",
    "create_config",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "severity_is_error",
    "split",
    "HAProxyError",
    "ConfigError",
    "MissingEndpointError",
    "InvalidSeverityError",
    "EmptyCommandError",
    "NetworkError",
    "ConnectError",
    "WriteError",
    "ProtocolError",
    "TransactionError",
]
