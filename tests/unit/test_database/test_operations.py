"""
Unit tests for store operations
"""

import pytest
from unittest.mock import AsyncMock, patch
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from database.operations import DocumentStore
from database.models import QuoteStatus
from utils import InvalidIdError, StoreError
from tests.factories import QuoteFactory
from tests.mocks import create_mock_mongo_manager


@pytest.mark.unit
class TestDocumentStore:
    """Test cases for DocumentStore class"""

    @pytest.fixture
    def mongo(self):
        return create_mock_mongo_manager()

    @pytest.fixture
    def store(self, mongo):
        return DocumentStore(mongo, "quotes", "ilmora")

    @pytest.mark.asyncio
    async def test_insert_returns_hex_id(self, store):
        """Test insert returns the store-assigned id as a string"""
        inserted_id = await store.insert({"text": "Be water"})

        assert ObjectId.is_valid(inserted_id)
        stored = await store.find_by_id(inserted_id)
        assert stored["text"] == "Be water"

    @pytest.mark.asyncio
    async def test_insert_does_not_mutate_input(self, store):
        """Test insert leaves the caller's mapping untouched"""
        document = {"text": "Be water"}
        await store.insert(document)
        assert "_id" not in document

    @pytest.mark.asyncio
    async def test_find_all(self, store):
        """Test find_all returns every document"""
        for document in QuoteFactory.create_documents(3):
            await store.insert(document)

        assert len(await store.find_all()) == 3

    @pytest.mark.asyncio
    async def test_find_by_filter_exact_match(self, store):
        """Test find_by_filter only returns exact matches"""
        await store.insert(QuoteFactory.create_document(status=QuoteStatus.PENDING))
        await store.insert(QuoteFactory.create_document(status=QuoteStatus.APPROVED))
        await store.insert(QuoteFactory.create_document(status=QuoteStatus.APPROVED))

        approved = await store.find_by_filter({"status": "approved"})
        assert len(approved) == 2
        assert all(doc["status"] == "approved" for doc in approved)

    @pytest.mark.asyncio
    async def test_find_by_id_not_found(self, store):
        """Test find_by_id returns None for an unknown id"""
        assert await store.find_by_id(str(ObjectId())) is None

    @pytest.mark.asyncio
    async def test_find_by_id_invalid_format(self, store):
        """Test find_by_id rejects malformed ids"""
        with pytest.raises(InvalidIdError):
            await store.find_by_id("not-an-object-id")

    @pytest.mark.asyncio
    async def test_find_by_id_none(self, store):
        """Test a missing id is rejected rather than replaced by a fresh one"""
        await store.insert({"text": "Be water"})
        with pytest.raises(InvalidIdError):
            await store.find_by_id(None)

    @pytest.mark.asyncio
    async def test_find_by_id_with_extra_filter(self, store):
        """Test find_by_id honours the extra equality filter"""
        inserted_id = await store.insert(QuoteFactory.create_document(submitted_by="u1"))

        assert await store.find_by_id(inserted_id, extra_filter={"submitted_by": "u1"}) is not None
        assert await store.find_by_id(inserted_id, extra_filter={"submitted_by": "u2"}) is None

    @pytest.mark.asyncio
    async def test_update_by_id_set_fields(self, store):
        """Test update_by_id applies $set and returns the updated document"""
        inserted_id = await store.insert(QuoteFactory.create_document())

        updated = await store.update_by_id(inserted_id, set_fields={"status": "approved"})
        assert updated["status"] == "approved"
        assert updated["_id"] == ObjectId(inserted_id)

    @pytest.mark.asyncio
    async def test_update_by_id_increment(self, store):
        """Test update_by_id applies $inc, creating the counter when absent"""
        inserted_id = await store.insert({"text": "Be water"})

        updated = await store.update_by_id(inserted_id, inc_fields={"added": 1})
        assert updated["added"] == 1
        updated = await store.update_by_id(inserted_id, inc_fields={"added": -1})
        assert updated["added"] == 0

    @pytest.mark.asyncio
    async def test_update_by_id_returns_original_when_requested(self, store):
        """Test return_updated=False returns the pre-update document"""
        inserted_id = await store.insert({"text": "Be water", "added": 4})

        original = await store.update_by_id(inserted_id, inc_fields={"added": 1}, return_updated=False)
        assert original["added"] == 4

    @pytest.mark.asyncio
    async def test_update_by_id_not_found(self, store):
        """Test update_by_id returns None when nothing matches"""
        assert await store.update_by_id(str(ObjectId()), set_fields={"status": "approved"}) is None

    @pytest.mark.asyncio
    async def test_update_by_id_requires_patch(self, store):
        """Test update_by_id refuses an empty update"""
        with pytest.raises(ValueError):
            await store.update_by_id(str(ObjectId()))

    @pytest.mark.asyncio
    async def test_delete_by_id_counts(self, store):
        """Test delete_by_id returns 1 then 0"""
        inserted_id = await store.insert({"text": "Be water"})

        assert await store.delete_by_id(inserted_id) == 1
        assert await store.delete_by_id(inserted_id) == 0

    @pytest.mark.asyncio
    async def test_delete_by_id_scoped(self, store):
        """Test delete_by_id with an ownership filter"""
        inserted_id = await store.insert(QuoteFactory.create_document(submitted_by="u1"))

        assert await store.delete_by_id(inserted_id, extra_filter={"submitted_by": "u2"}) == 0
        assert await store.find_by_id(inserted_id) is not None
        assert await store.delete_by_id(inserted_id, extra_filter={"submitted_by": "u1"}) == 1

    @pytest.mark.asyncio
    async def test_collections_are_scoped_by_database(self, mongo):
        """Test stores in different databases do not see each other"""
        quotes = DocumentStore(mongo, "quotes", "ilmora")
        enrolled = DocumentStore(mongo, "enrolled", "eduflexDB")

        await enrolled.insert({"course": "python"})
        assert await quotes.find_all() == []
        assert len(await enrolled.find_all()) == 1

    @pytest.mark.asyncio
    async def test_store_failure_is_wrapped(self, store):
        """Test driver errors surface as StoreError"""
        with patch.object(DocumentStore, "collection") as collection:
            collection.insert_one = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
            with pytest.raises(StoreError):
                await store.insert({"text": "Be water"})
