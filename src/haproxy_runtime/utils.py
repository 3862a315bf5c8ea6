# File: src/haproxy_runtime/utils.py
"""
HAProxy Runtime API 客户端 - 通用工具箱

本模块汇集了响应解析所需的纯函数：字符串切分与严重等级判定。
"""

import math

from .constants import (
    SEVERITY_CODE_OFFSET,
    SEVERITY_ERROR_THRESHOLD,
    SEVERITY_LINE_PATTERN,
)
from .exceptions import InvalidSeverityError


def split(s: str, delimiter: str, maxsplit: int = -1) -> list[str]:
    """按字面分隔符切分字符串。

    分隔符按字面匹配 (不做正则解释)。
    没有分隔符或分隔符为空时返回单元素列表，空字符串返回 `[""]`。

    Args:
        s: 待切分的字符串。
        delimiter: 分隔符，可以是多个字符 (如 ': ')。
        maxsplit: 最大切分次数，-1 表示不限。

    Returns:
        list[str]: 按出现顺序排列的片段。
    """
    if not delimiter:
        return [s]
    return s.split(delimiter, maxsplit)


def severity_is_error(sev: int | float | str) -> bool:
    """判断严重等级代码是否表示错误。

    算法逻辑: code < 5 即为错误 (emerg/alert/crit/err/warning)，
    5-7 (notice/info/debug) 不是错误。

    Args:
        sev: 严重等级，整数或可转换为数字的字符串。

    Returns:
        bool: 是错误返回 True。

    Raises:
        InvalidSeverityError: sev 无法转换为数字，或为 nan / inf。
    """
    if not isinstance(sev, (int, float)):
        try:
            sev = float(str(sev).strip())
        except ValueError:
            raise InvalidSeverityError(f"severity 不是数字: {sev!r}") from None

    if isinstance(sev, float) and not math.isfinite(sev):
        raise InvalidSeverityError(f"severity 不是有限数字: {sev!r}")

    return sev < SEVERITY_ERROR_THRESHOLD


def parse_severity_line(line: str) -> tuple[int, str] | None:
    """尝试把一行解析为严重等级信号 `[n]: message`。

    不匹配 (如等级超出 0-7 或前缀格式不对) 时返回 None，
    调用方应将其视为普通数据行。

    Returns:
        (code, message) 或 None。
    """
    match = SEVERITY_LINE_PATTERN.match(line)
    if match is None:
        return None
    return int(match.group(1)), line[SEVERITY_CODE_OFFSET:]
