"""
索引同步
Index Synchronizer

作者: lx
日期: 2025-06-23
描述: 对比声明的索引与集合现有索引，删除多余/不一致的索引并创建缺失的索引
"""
import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

import orjson
from pymongo.errors import PyMongoError

from ...exceptions import IndexDefinitionError
from ...logger import get_logger
from ..crud.consts import MONGOID
from .models import (
    GEO_FIELD,
    GEO_INDEX,
    HASHED_FIELD,
    HASHED_INDEX,
    NORMAL_INDEX,
    TEXT_FIELD,
    TEXT_INDEX,
    IndexDescriptor,
)

logger = get_logger(__name__)

# 全文索引在服务端以 _fts/_ftsx 存储
TEXT_INDEX_KEY = "_fts"


def get_index_keys(index: IndexDescriptor) -> List[Tuple[str, Any]]:
    """生成索引键"""
    if index.type == NORMAL_INDEX:
        return [(field.name, field.order) for field in index.fields]
    if index.type == GEO_INDEX:
        return [(index.field, GEO_FIELD)]
    if index.type == HASHED_INDEX:
        return [(index.field, HASHED_FIELD)]
    if index.type == TEXT_INDEX:
        return [(field.name, TEXT_FIELD) for field in index.fields]
    raise IndexDefinitionError(index.name, f"Cannot create index of type {index.type}")


def get_index_options(index: IndexDescriptor) -> Dict[str, Any]:
    """
    生成创建索引的选项
    
    Raises:
        IndexDefinitionError: 部分索引条件不是合法JSON
    """
    options: Dict[str, Any] = {"name": index.name, "background": True}
    if index.unique:
        options["unique"] = True
    if index.expire_after_seconds is not None:
        options["expireAfterSeconds"] = index.expire_after_seconds
    if index.weights:
        options["weights"] = index.weights
    if index.default_language:
        options["default_language"] = index.default_language
    if index.language_override:
        options["language_override"] = index.language_override
    if index.use_partial_filter:
        try:
            partial_filter = orjson.loads(index.partial_filter_expression) if index.partial_filter_expression else {}
        except orjson.JSONDecodeError as error:
            raise IndexDefinitionError(
                index.name,
                f"Impossible to parse the partial index expression of index {index.name}"
            ) from error
        options["partialFilterExpression"] = partial_filter
    return options


def check_index_equality(found_index: Mapping[str, Any], index: IndexDescriptor) -> bool:
    """
    判断现有索引与声明是否一致
    
    比较键结构(含顺序)、唯一性与TTL
    """
    is_unique_equal = bool(found_index.get("unique", False)) == index.unique
    is_ttl_equal = found_index.get("expireAfterSeconds") == index.expire_after_seconds
    return is_unique_equal and is_ttl_equal and _check_keys_equality(found_index, index)


def _check_keys_equality(found_index: Mapping[str, Any], index: IndexDescriptor) -> bool:
    found_keys = list(found_index.get("key", {}).items())
    
    if index.type == TEXT_INDEX:
        if not any(name == TEXT_INDEX_KEY for name, _ in found_keys):
            return found_keys == get_index_keys(index)
        weights = found_index.get("weights", {})
        return set(weights) == {field.name for field in index.fields}
    
    return found_keys == get_index_keys(index)


async def _list_indexes(collection) -> List[Dict[str, Any]]:
    try:
        return [index async for index in collection.list_indexes()]
    except PyMongoError as e:
        # 集合尚不存在时按没有索引处理
        logger.debug(f"Cannot list indexes of {getattr(collection, 'name', collection)}: {e}")
        return []


async def sync_indexes(
    collection,
    indexes: Iterable[Union[IndexDescriptor, Mapping[str, Any]]],
    preserve_prefix: str
) -> List[str]:
    """
    同步集合索引
    
    Args:
        collection: motor集合
        indexes: 期望的索引描述
        preserve_prefix: 名称以此为前缀的索引不做处理
        
    Returns:
        本次创建的索引名称
    """
    desired = [
        index if isinstance(index, IndexDescriptor) else IndexDescriptor.model_validate(index)
        for index in indexes
    ]
    desired_by_name = {index.name: index for index in desired}
    # 先生成全部索引定义，定义有误时不改动集合
    specs = {
        index.name: (get_index_keys(index), get_index_options(index))
        for index in desired if index.name != MONGOID
    }
    
    names_to_keep = []
    names_to_drop = []
    for found_index in await _list_indexes(collection):
        name = found_index["name"]
        declared = desired_by_name.get(name)
        if (
            (preserve_prefix and name.startswith(preserve_prefix))
            or MONGOID in found_index.get("key", {})
            or (declared is not None and check_index_equality(found_index, declared))
        ):
            names_to_keep.append(name)
        else:
            names_to_drop.append(name)
    
    await asyncio.gather(*(collection.drop_index(name) for name in names_to_drop))
    
    created = await asyncio.gather(*(
        collection.create_index(keys, **options)
        for name, (keys, options) in specs.items()
        if name not in names_to_keep
    ))
    
    logger.info(
        f"Indexes synchronized: dropped={names_to_drop} created={list(created)} kept={names_to_keep}"
    )
    return list(created)
