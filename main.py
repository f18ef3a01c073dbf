"""
Main entry point for the Quote Service.
Provides command-line interface and system initialization.
"""

import asyncio
import argparse
import json
import sys
from typing import Optional

import uvicorn

from utils import main_logger, config_manager, initialize_logging, QuoteServiceError
from database import MongoManager


class QuoteService:
    """名言服务主类"""

    def __init__(self):
        self.config = config_manager

    async def start_api_server(self, host: Optional[str] = None, port: Optional[int] = None,
                               reload: Optional[bool] = None):
        """启动API服务器"""
        api_config = self.config.get_api_config()

        # 命令行参数优先，否则使用配置文件（含环境变量覆盖）的值
        final_host = host if host is not None else api_config.host
        final_port = port if port is not None else api_config.port
        final_reload = reload if reload is not None else api_config.reload

        main_logger.info(f"[Main] Starting API server on {final_host}:{final_port}...")

        config = uvicorn.Config(
            "api.app:app" if final_reload else self._load_app(),
            host=final_host,
            port=final_port,
            reload=final_reload,
            log_level="info"
        )
        server = uvicorn.Server(config)
        await server.serve()

    def _load_app(self):
        from api.app import app
        return app

    async def ping_database(self) -> bool:
        """检查数据库连通性"""
        mongo = MongoManager()
        mongo.initialize()
        try:
            return await mongo.ping()
        finally:
            mongo.close()

    def show_config(self):
        """输出生效的配置（遮蔽敏感字段）"""
        print(json.dumps(self.config.to_masked_dict(), indent=2, ensure_ascii=False))


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description="Quote Service - 名言提交与审核服务",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  python main.py serve                          # 启动API服务器（默认端口 3000，或环境变量 PORT）
  python main.py serve --host 0.0.0.0 --port 8080  # 指定监听地址
  python main.py check-config                   # 显示生效的配置
  python main.py ping-db                        # 检查数据库连通性
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    # API服务器
    serve_parser = subparsers.add_parser('serve', help='启动API服务器')
    serve_parser.add_argument('--host', default=None, help='监听地址 (默认: 配置文件)')
    serve_parser.add_argument('--port', type=int, default=None, help='监听端口 (默认: 配置文件或 PORT)')
    serve_parser.add_argument('--reload', action='store_true', default=None, help='开发模式自动重载')

    # 配置检查
    subparsers.add_parser('check-config', help='显示生效的配置')

    # 数据库检查
    subparsers.add_parser('ping-db', help='检查数据库连通性')

    return parser


async def main(argv=None) -> int:
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)
    command = args.command or 'serve'

    initialize_logging()
    service = QuoteService()

    try:
        if command == 'serve':
            await service.start_api_server(
                host=getattr(args, 'host', None),
                port=getattr(args, 'port', None),
                reload=getattr(args, 'reload', None)
            )

        elif command == 'check-config':
            service.show_config()

        elif command == 'ping-db':
            await service.ping_database()
            print("Database connection OK")

    except QuoteServiceError as e:
        main_logger.error(f"[Main] {command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
