"""
HAProxy Runtime API 客户端 - 配置模块

负责配置的加载、解析与强类型转换。
支持从关键字参数、字典、TOML 文件或环境变量 (含 .env 文件) 中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .constants import CMD_SET_TIMEOUT, DEFAULT_ADDRESS, DEFAULT_PORT, DEFAULT_TIMEOUT
from .exceptions import ConfigError, MissingEndpointError

logger = logging.getLogger(__name__)

UNIX_SOCKET_PREFIX = "unix@"


@dataclass(frozen=True)
class RuntimeConfig:
    """Session 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        address: Runtime API 地址。IP / 主机名，或以 '/'、'unix@' 开头的 UNIX socket 路径。
        port: Runtime API TCP 端口 (字符串形式，UNIX socket 时忽略)。
        timeout: CLI 空闲超时 (秒)，同时作为读取超时。
        debug: 是否输出额外的诊断日志。
        set_timeout_cmd: 预先构建的 'set timeout cli <n>' 命令，用于存活探测。
    """

    address: str
    port: str
    timeout: int
    debug: bool = False
    set_timeout_cmd: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "set_timeout_cmd", CMD_SET_TIMEOUT.format(timeout=self.timeout)
        )

    @property
    def is_unix_socket(self) -> bool:
        return self.address.startswith("/") or self.address.startswith(
            UNIX_SOCKET_PREFIX
        )

    @property
    def unix_path(self) -> str:
        """UNIX socket 路径 (去掉 'unix@' 前缀)。"""
        return self.address.removeprefix(UNIX_SOCKET_PREFIX)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} "
            f"endpoint={self.address}:{self.port}, "
            f"timeout={self.timeout}s, debug={self.debug}>"
        )


def _to_timeout(value: Any) -> int:
    """解析超时时间，无法解析时回落到默认值 600 秒。"""
    if value is None:
        return DEFAULT_TIMEOUT
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.warning(f"timeout 无法解析 ({value!r})，使用默认值 {DEFAULT_TIMEOUT}s")
        return DEFAULT_TIMEOUT


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "t", "yes", "on")
    return bool(value)


def create_config(
    address: str | None = None,
    port: str | int | None = None,
    timeout: int | str | None = None,
    debug: bool | None = None,
) -> RuntimeConfig:
    """根据可选参数构建配置对象，缺省项使用默认值。

    默认值: address='127.0.0.1', port='1023', timeout=600, debug=False。

    Args:
        address: Runtime API 地址。
        port: Runtime API 端口。
        timeout: 空闲超时 (秒)。
        debug: 是否开启调试日志。

    Returns:
        RuntimeConfig: 配置对象。

    Raises:
        MissingEndpointError: 应用默认值后地址或端口仍为空。
    """
    address = DEFAULT_ADDRESS if address is None else str(address)
    port = DEFAULT_PORT if port is None else str(port)

    if not address:
        raise MissingEndpointError("addr missing")
    if not port:
        raise MissingEndpointError("port missing")

    return RuntimeConfig(
        address=address,
        port=port,
        timeout=_to_timeout(timeout),
        debug=_to_bool(debug) if debug is not None else False,
    )


def create_config_from_dict(raw_data: dict[str, Any]) -> RuntimeConfig:
    """通用工厂：将字典转换为强类型配置对象。

    接受的键: addr (或 address)、port、timeout、debug。

    Raises:
        ConfigError: 当字段格式错误时抛出。
    """
    try:
        return create_config(
            address=raw_data.get("addr", raw_data.get("address")),
            port=raw_data.get("port"),
            timeout=raw_data.get("timeout"),
            debug=raw_data.get("debug"),
        )
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(f"配置生成失败: {e}") from e


def _pick_section(data: dict[str, Any], profile: str) -> dict[str, Any]:
    """在 TOML 文档中选出端点配置表。"""
    profiles = data.get("profile")
    if isinstance(profiles, dict):
        section = profiles.get(profile)
        if section is None and profile != "default":
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        return section or {}

    if "haproxy" not in data:
        return data

    if profile != "default":
        logger.warning(f"未定义 [profile.*]，使用 [haproxy] 并忽略 profile='{profile}'")
    section = data["haproxy"]
    if not isinstance(section, dict):
        raise ConfigError("[haproxy] 必须是一个表")
    return section


def load_config_from_toml(file_path: Path, profile: str = "default") -> RuntimeConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [haproxy]: 单一配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    return create_config_from_dict(_pick_section(data, profile))


def load_config_from_env(dotenv_path: Path | None = None) -> RuntimeConfig:
    """从环境变量加载配置。

    读取 `HAPROXY_ADDR`、`HAPROXY_PORT`、`HAPROXY_TIMEOUT`、`HAPROXY_DEBUG`。
    指定 dotenv_path 时，先通过 python-dotenv 加载该文件 (不覆盖已有变量)。

    Raises:
        ConfigError: dotenv 文件不存在，或未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise ConfigError(f".env 文件未找到: {dotenv_path}")
        load_dotenv(dotenv_path=dotenv_path, override=False)

    env_map = {
        "addr": "ADDR",
        "port": "PORT",
        "timeout": "TIMEOUT",
        "debug": "DEBUG",
    }

    raw_data = {}
    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"HAPROXY_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 HAPROXY_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
