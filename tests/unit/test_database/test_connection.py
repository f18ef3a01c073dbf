"""
Unit tests for database connection management
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch
from pymongo.errors import ServerSelectionTimeoutError

from database.connection import MongoManager
from utils import DatabaseConfig, StoreError, ConfigurationError


@pytest.mark.unit
class TestMongoManager:
    """Test cases for MongoManager class"""

    @pytest.fixture
    def db_config(self):
        return DatabaseConfig(uri="mongodb://localhost:27017", server_selection_timeout_ms=1500)

    def test_initialize_creates_client(self, db_config):
        with patch("database.connection.AsyncIOMotorClient") as mock_client:
            manager = MongoManager(db_config=db_config)
            client = manager.initialize()

        assert client is mock_client.return_value
        args, kwargs = mock_client.call_args
        assert args == ("mongodb://localhost:27017",)
        assert kwargs["serverSelectionTimeoutMS"] == 1500
        assert kwargs["tz_aware"] is True

    def test_initialize_is_idempotent(self, db_config):
        existing = Mock()
        manager = MongoManager(db_config=db_config, client=existing)
        with patch("database.connection.AsyncIOMotorClient") as mock_client:
            assert manager.initialize() is existing
        mock_client.assert_not_called()

    def test_initialize_without_credentials(self):
        with pytest.raises(ConfigurationError):
            MongoManager(db_config=DatabaseConfig()).initialize()

    def test_get_collection_before_initialize(self, db_config):
        with pytest.raises(StoreError):
            MongoManager(db_config=db_config).get_collection("quotes")

    def test_get_collection_default_database(self, db_config):
        client = MagicMock()
        manager = MongoManager(db_config=db_config, client=client)
        manager.get_collection("quotes")
        client.__getitem__.assert_called_with("ilmora")

    @pytest.mark.asyncio
    async def test_ping_success(self, db_config):
        client = Mock()
        client.admin.command = AsyncMock(return_value={"ok": 1})
        manager = MongoManager(db_config=db_config, client=client)

        assert await manager.ping() is True
        client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_ping_failure(self, db_config):
        client = Mock()
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("timed out"))
        manager = MongoManager(db_config=db_config, client=client)

        with pytest.raises(StoreError):
            await manager.ping()

    def test_close(self, db_config):
        client = Mock()
        manager = MongoManager(db_config=db_config, client=client)
        manager.close()

        client.close.assert_called_once()
        assert manager.client is None
        # 重复关闭无副作用
        manager.close()
