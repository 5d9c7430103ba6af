"""
测试配置文件
Test Configuration File

作者: lx
日期: 2025-06-23
描述: pytest fixtures、Mock集合、固定时间的请求上下文
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from statecrud.database.crud import CrudContext, CrudService
from utils import FIXED_NOW, TEST_USER
from utils.mock_collection import (
    MockBulkWriteResult,
    MockCollection,
    MockCursor,
    MockDeleteResult,
    MockInsertManyResult,
    MockInsertOneResult,
    MockUpdateResult,
)
from utils.stub_query_parser import StubQueryParser


@pytest.fixture
def ctx():
    """固定操作人和时间戳的请求上下文"""
    return CrudContext(user_id=TEST_USER, now=FIXED_NOW, log=logging.getLogger("statecrud.crud.test"))


@pytest.fixture
def collection():
    """内存集合"""
    return MockCollection()


@pytest.fixture
def crud_service(collection):
    """新建文档默认为DRAFT的CRUD引擎"""
    return CrudService(collection, "DRAFT")


@pytest.fixture
def mock_collection():
    """记录调用参数的集合，用于检查引擎生成的过滤条件"""
    mock = MagicMock()
    mock.find = MagicMock(return_value=MockCursor(lambda: []))
    mock.aggregate = MagicMock(return_value=MockCursor(lambda: []))
    mock.find_one = AsyncMock(return_value=None)
    mock.count_documents = AsyncMock(return_value=0)
    mock.insert_one = AsyncMock(return_value=MockInsertOneResult(inserted_id="generated-id"))
    mock.insert_many = AsyncMock(return_value=MockInsertManyResult(inserted_ids=["id-1", "id-2"]))
    mock.update_one = AsyncMock(return_value=MockUpdateResult(matched_count=1, modified_count=1))
    mock.update_many = AsyncMock(return_value=MockUpdateResult(matched_count=2, modified_count=2))
    mock.find_one_and_update = AsyncMock(return_value=None)
    mock.find_one_and_delete = AsyncMock(return_value=None)
    mock.delete_many = AsyncMock(return_value=MockDeleteResult(deleted_count=3))
    mock.bulk_write = AsyncMock(return_value=MockBulkWriteResult(matched_count=1, modified_count=1))
    return mock


@pytest.fixture
def mocked_service(mock_collection):
    """使用调用记录集合的CRUD引擎"""
    return CrudService(mock_collection, "DRAFT")


@pytest.fixture
def query_parser():
    """查询解析器桩"""
    return StubQueryParser()
