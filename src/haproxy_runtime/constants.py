# File: src/haproxy_runtime/constants.py
"""
HAProxy Runtime API 客户端 - 常量定义

集中存放协议指令、默认配置以及 Severity 等级表。
"""

import re
from enum import IntEnum

# --- 默认连接参数 ---
DEFAULT_ADDRESS = "127.0.0.1"
DEFAULT_PORT = "1023"
DEFAULT_TIMEOUT = 600

# --- 协议指令 ---
CMD_PROMPT = "prompt\n"
CMD_SET_TIMEOUT = "set timeout cli {timeout}\n"
CMD_SEVERITY_WRAPPER = "set severity-output number; {cmd}\n"

CMD_SHOW_INFO = "show info"
CMD_SHOW_CERT_LIST = "show ssl cert"
CMD_SHOW_CERT = "show ssl cert {name}"
# 末尾仅一个 '\n'，run_cmd 追加的 '\n' 构成 heredoc 的空行结束符
CMD_SET_CERT = "set ssl cert {name} <<\n{pem}\n"
CMD_ABORT_CERT = "abort ssl cert {name}\n"
CMD_COMMIT_CERT = "commit ssl cert {name}"

# --- 响应解析 ---
KEY_VALUE_DELIMITER = ": "
STATUS_CLOSED = "closed"

# 严重等级前缀 '[c]: '，消息从第 6 个字符开始
SEVERITY_LINE_PATTERN = re.compile(r"^\[([0-7])\]: ")
SEVERITY_CODE_OFFSET = 5

# 小于该值的等级视为错误
SEVERITY_ERROR_THRESHOLD = 5

# --- Facade 需要剔除的噪声键 ---
NOISE_KEYS_INFO = ("> Name", "> ")
NOISE_KEYS_CERT_LIST = ("> # filename", "> ")
NOISE_KEYS_CERT_INFO = ("> Filename", "> ")


class Severity(IntEnum):
    """HAProxy 日志严重等级 (参见 HAProxy src/log.c 中的 log_levels)。

    Runtime API 在 `set severity-output number` 模式下，
    会在响应首行输出 `[n]: ` 形式的等级前缀。
    """

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @property
    def label(self) -> str:
        """HAProxy 内部使用的等级名称 (如 'err')。"""
        return self.name.lower()

    @property
    def is_error(self) -> bool:
        return self.value < SEVERITY_ERROR_THRESHOLD
