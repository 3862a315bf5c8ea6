# example.py
"""
这是一个 HAProxyRuntime API 的最小示例。

它演示了如何将 haproxy-runtime 作为一个库导入到你自己的脚本中：
读取进程信息、列出证书，并可选地热更新一张证书。

运行此示例：
1. 确保 HAProxy 开启了 Runtime API，例如:
   stats socket ipv4@127.0.0.1:1023 level admin
2. 确保已安装依赖： pip install -e .
3. 从项目根目录运行： python example.py [cert_name pem_file]
"""

import asyncio
import logging
import sys
from pathlib import Path

from haproxy_runtime import (
    ConfigError,
    HAProxyRuntime,
    NetworkError,
    ProtocolError,
    create_config,
    load_config_from_env,
)

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("HAProxyExample")


async def main() -> int:
    """
    程序主入口点。
    """
    try:
        config = load_config_from_env(Path(".env") if Path(".env").exists() else None)
    except ConfigError:
        logger.info("未检测到 HAPROXY_ 环境变量，使用默认端点 127.0.0.1:1023")
        config = create_config(debug=True)

    async with HAProxyRuntime(config) as runtime:
        try:
            info = await runtime.info()
            logger.info(f"HAProxy 版本: {info.get('Version')} 运行时间: {info.get('Uptime')}")

            for cert_name in await runtime.cert_list():
                logger.info(f"已加载证书: {cert_name}")

            if len(sys.argv) == 3:
                cert_name, pem_file = sys.argv[1], Path(sys.argv[2])
                await runtime.cert_update(cert_name, pem_file.read_text())
                details = await runtime.cert_info(cert_name)
                logger.info(f"证书已更新，到期时间: {details.get('Not After')}")

        except ProtocolError as pe:
            logger.error(f"Runtime API 拒绝了命令 [{pe.severity_code}]: {pe.message}")
            return 1
        except NetworkError as ne:
            logger.error(f"网络异常: {ne}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
