# File: src/haproxy_runtime/exceptions.py
"""
HAProxy Runtime API 客户端 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便嵌入脚本能进行精细的错误处理。
"""


class HAProxyError(Exception):
    """haproxy-runtime 库所有内部异常的基类。

    上层脚本可以通过捕获此异常来处理所有由本库抛出的已知错误。
    """

    pass


class ConfigError(HAProxyError):
    """配置加载或校验失败。

    触发场景:
    1. 字段格式错误 (如 timeout 无法解析)。
    2. 找不到配置文件或环境变量。
    """

    pass


class MissingEndpointError(ConfigError):
    """应用默认值之后，地址或端口仍然为空。"""

    pass


class InvalidSeverityError(HAProxyError):
    """严重等级代码无法转换为数字。"""

    pass


class EmptyCommandError(HAProxyError):
    """调用方传入了空命令。"""

    pass


class NetworkError(HAProxyError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. 读取超时 (超过配置的 idle timeout)。
    2. 连接被重置。

    注意: 除 Session 的一次隐式重连外，本库不会自动重试。
    """

    pass


class ConnectError(NetworkError):
    """无法建立到 Runtime API 的连接。底层异常通过 __cause__ 保留。"""

    pass


class WriteError(NetworkError):
    """命令发送失败 (写入 0 字节或写入异常)。"""

    pass


class ProtocolError(HAProxyError):
    """服务器通过严重等级前缀明确报告了错误。

    当响应首行为 `[n]: message` 且 n < 5 时抛出。
    """

    def __init__(self, message: str, severity_code: int | None = None) -> None:
        """初始化协议错误。

        Args:
            message: 服务器返回的错误消息 (已去除等级前缀)。
            severity_code: 原始严重等级代码 (0-7)。
        """
        super().__init__(message)
        self.message = message
        self.severity_code = severity_code


class TransactionError(ProtocolError):
    """证书更新事务 (commit / abort) 失败。"""

    pass
