"""
Store operations for the quote service.
Thin adapter over a single MongoDB collection.
"""

from typing import Any, Dict, List, Mapping, Optional

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from utils import db_logger, LogContext, StoreError, ErrorCodes
from .connection import MongoManager
from .models import ID_FIELD, parse_object_id


class DocumentStore:
    """Find/insert/update/delete against one collection, scoped by database name."""

    def __init__(self, mongo: MongoManager, collection_name: str, database_name: Optional[str] = None):
        self.mongo = mongo
        self.collection_name = collection_name
        self.database_name = database_name or mongo.config.database_name
        self.db_logger = db_logger

    @property
    def collection(self):
        return self.mongo.get_collection(self.collection_name, self.database_name)

    def _context(self, operation: str, **context) -> LogContext:
        return LogContext(
            "Database", operation,
            collection=f"{self.database_name}.{self.collection_name}",
            **context
        )

    def _id_filter(self, document_id: Any, extra_filter: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        query = dict(extra_filter or {})
        query[ID_FIELD] = parse_object_id(document_id)
        return query

    # === Write Operations ===

    async def insert(self, document: Mapping[str, Any]) -> str:
        """插入文档，返回存储分配的ID"""
        try:
            with self._context("insert"):
                result = await self.collection.insert_one(dict(document))
        except PyMongoError as e:
            raise StoreError(f"Insert into {self.collection_name} failed: {e}", ErrorCodes.DB_WRITE_FAILED) from e

        inserted_id = str(result.inserted_id)
        self.db_logger.info(f"[Database] Inserted document {inserted_id} into {self.collection_name}")
        return inserted_id

    async def update_by_id(self, document_id: Any,
                           set_fields: Optional[Mapping[str, Any]] = None,
                           inc_fields: Optional[Mapping[str, Any]] = None,
                           return_updated: bool = True) -> Optional[Dict[str, Any]]:
        """按ID更新字段，返回更新后的文档，不存在时返回None"""
        query = self._id_filter(document_id)
        update: Dict[str, Any] = {}
        if set_fields:
            update["$set"] = dict(set_fields)
        if inc_fields:
            update["$inc"] = dict(inc_fields)
        if not update:
            raise ValueError("update_by_id requires set_fields or inc_fields")

        return_document = ReturnDocument.AFTER if return_updated else ReturnDocument.BEFORE
        try:
            with self._context("update", id=document_id):
                return await self.collection.find_one_and_update(
                    query, update, return_document=return_document
                )
        except PyMongoError as e:
            raise StoreError(f"Update in {self.collection_name} failed: {e}", ErrorCodes.DB_WRITE_FAILED) from e

    async def delete_by_id(self, document_id: Any, extra_filter: Optional[Mapping[str, Any]] = None) -> int:
        """按ID删除至多一个文档，返回删除数量"""
        query = self._id_filter(document_id, extra_filter)
        try:
            with self._context("delete", id=document_id):
                result = await self.collection.delete_one(query)
        except PyMongoError as e:
            raise StoreError(f"Delete in {self.collection_name} failed: {e}", ErrorCodes.DB_WRITE_FAILED) from e

        if result.deleted_count:
            self.db_logger.info(f"[Database] Deleted document {document_id} from {self.collection_name}")
        return result.deleted_count

    # === Read Operations ===

    async def find_all(self) -> List[Dict[str, Any]]:
        """获取集合中的全部文档"""
        return await self.find_by_filter({})

    async def find_by_filter(self, query: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """按字段相等条件查询"""
        try:
            with self._context("find"):
                return await self.collection.find(dict(query)).to_list(length=None)
        except PyMongoError as e:
            raise StoreError(f"Query on {self.collection_name} failed: {e}", ErrorCodes.DB_QUERY_FAILED) from e

    async def find_one(self, query: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """获取第一个匹配的文档"""
        try:
            with self._context("find_one"):
                return await self.collection.find_one(dict(query))
        except PyMongoError as e:
            raise StoreError(f"Query on {self.collection_name} failed: {e}", ErrorCodes.DB_QUERY_FAILED) from e

    async def find_by_id(self, document_id: Any,
                         extra_filter: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """按ID获取文档，可附加相等条件（如提交人）"""
        return await self.find_one(self._id_filter(document_id, extra_filter))
