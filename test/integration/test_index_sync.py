"""
索引同步集成测试
Index Synchronization Integration Tests

作者: lx
日期: 2025-06-23
描述: 验证索引的创建、删除、保留前缀和重复同步的幂等性
"""

import pytest

from statecrud.database.indexes import IndexDescriptor, sync_indexes
from statecrud.exceptions import IndexDefinitionError

DECLARED_INDEXES = [
    {"name": "by_isbn", "type": "normal", "fields": [{"name": "isbn"}], "unique": True},
    {"name": "by_state_date", "type": "normal",
     "fields": [{"name": "__STATE__"}, {"name": "createdAt", "order": -1}]},
    {"name": "full_text", "type": "text", "fields": [{"name": "title"}, {"name": "plot"}],
     "weights": {"title": 10, "plot": 1}},
    {"name": "by_hash", "type": "hash", "field": "isbn"},
    {"name": "near", "type": "geo", "field": "location"},
    {"name": "expire_trash", "type": "normal", "fields": [{"name": "updatedAt"}],
     "expireAfterSeconds": 86400, "usePartialFilter": True,
     "partialFilterExpression": '{"__STATE__": "TRASH"}'},
]


class TestSyncIndexes:

    @pytest.mark.asyncio
    async def test_creates_declared_indexes(self, collection):
        created = await sync_indexes(collection, DECLARED_INDEXES, "preserve_")

        assert created == [index["name"] for index in DECLARED_INDEXES]
        assert collection.indexes["by_isbn"]["unique"] is True
        assert collection.indexes["by_state_date"]["key"] == {"__STATE__": 1, "createdAt": -1}
        assert collection.indexes["full_text"]["weights"] == {"title": 10, "plot": 1}
        assert collection.indexes["by_hash"]["key"] == {"isbn": "hashed"}
        assert collection.indexes["near"]["key"] == {"location": "2dsphere"}
        assert collection.indexes["expire_trash"]["expireAfterSeconds"] == 86400
        assert collection.indexes["expire_trash"]["partialFilterExpression"] == {"__STATE__": "TRASH"}

    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, collection):
        await sync_indexes(collection, DECLARED_INDEXES, "preserve_")
        collection.created_indexes.clear()

        assert await sync_indexes(collection, DECLARED_INDEXES, "preserve_") == []
        assert collection.dropped_indexes == []
        assert collection.created_indexes == []

    @pytest.mark.asyncio
    async def test_drops_stale_and_changed_indexes(self, collection):
        collection.indexes["stale"] = {"v": 2, "key": {"legacy": 1}, "name": "stale"}
        collection.indexes["by_isbn"] = {"v": 2, "key": {"isbn": 1}, "name": "by_isbn"}
        collection.indexes["preserve_manual"] = {"v": 2, "key": {"manual": 1}, "name": "preserve_manual"}

        created = await sync_indexes(collection, [DECLARED_INDEXES[0]], "preserve_")

        assert sorted(collection.dropped_indexes) == ["by_isbn", "stale"]
        assert created == ["by_isbn"]
        assert collection.indexes["by_isbn"]["unique"] is True
        assert set(collection.indexes) == {"_id_", "by_isbn", "preserve_manual"}

    @pytest.mark.asyncio
    async def test_without_prefix_everything_undeclared_is_dropped(self, collection):
        collection.indexes["preserve_manual"] = {"v": 2, "key": {"manual": 1}, "name": "preserve_manual"}

        await sync_indexes(collection, [], "")

        assert set(collection.indexes) == {"_id_"}

    @pytest.mark.asyncio
    async def test_accepts_descriptor_models(self, collection):
        index = IndexDescriptor(name="by_title", type="normal", fields=[{"name": "title", "order": -1}])

        assert await sync_indexes(collection, [index], "preserve_") == ["by_title"]
        assert collection.indexes["by_title"]["key"] == {"title": -1}

    @pytest.mark.asyncio
    async def test_missing_collection_creates_everything(self, collection):
        collection.fail_list_indexes = True

        created = await sync_indexes(collection, DECLARED_INDEXES[:2], "preserve_")

        assert created == ["by_isbn", "by_state_date"]
        assert collection.dropped_indexes == []

    @pytest.mark.asyncio
    async def test_invalid_partial_filter_leaves_collection_untouched(self, collection):
        collection.indexes["stale"] = {"v": 2, "key": {"legacy": 1}, "name": "stale"}
        broken = {**DECLARED_INDEXES[-1], "partialFilterExpression": "{not json"}

        with pytest.raises(IndexDefinitionError):
            await sync_indexes(collection, [DECLARED_INDEXES[0], broken], "preserve_")

        assert "stale" in collection.indexes
        assert collection.created_indexes == []
