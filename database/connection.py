"""
Database connection management.
Provides the process-scoped MongoDB client handle shared by all store adapters.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from utils import db_logger, config_manager, DatabaseConfig, StoreError, ErrorCodes


class MongoManager:
    """文档数据库连接管理器"""

    def __init__(self, db_config: Optional[DatabaseConfig] = None,
                 client: Optional[AsyncIOMotorClient] = None):
        self.config = db_config or config_manager.get_database_config()
        self.client = client

    def initialize(self) -> AsyncIOMotorClient:
        """创建客户端（只在进程启动时调用一次）"""
        if self.client is not None:
            return self.client

        uri = self.config.build_uri()
        self.client = AsyncIOMotorClient(
            uri,
            server_api=ServerApi('1', strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
            tz_aware=True
        )
        db_logger.info(f"[Database] Mongo client created for database: {self.config.database_name}")
        return self.client

    def get_collection(self, collection_name: str, database_name: Optional[str] = None):
        """获取集合句柄"""
        if self.client is None:
            raise StoreError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)
        return self.client[database_name or self.config.database_name][collection_name]

    async def ping(self) -> bool:
        """检查连接是否可用"""
        if self.client is None:
            raise StoreError("Database not initialized", ErrorCodes.DB_CONNECTION_FAILED)
        try:
            await self.client.admin.command('ping')
        except PyMongoError as e:
            raise StoreError(f"Database ping failed: {e}", ErrorCodes.DB_CONNECTION_FAILED) from e
        db_logger.info("[Database] Pinged deployment, connection is healthy")
        return True

    def close(self):
        """关闭数据库连接"""
        if self.client is not None:
            self.client.close()
            self.client = None
            db_logger.info("[Database] Mongo client closed")
