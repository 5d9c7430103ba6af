"""
查询解析
外部查询解析器的接口定义，以及客户端过滤参数到Mongo查询的组装
作者: lx
日期: 2025-06-22
"""
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol

import orjson

from ...exceptions import BadRequestError


class QueryParser(Protocol):
    """
    查询解析器接口
    
    由Schema层实现，负责按集合定义校验并就地转换类型
    """
    
    def parse_and_cast(self, query: Dict[str, Any]) -> None:
        ...
    
    def parse_and_cast_text_search_query(self, query: Dict[str, Any]) -> None:
        ...
    
    def parse_and_cast_body(self, doc: Dict[str, Any]) -> None:
        ...
    
    def parse_and_cast_commands(self, commands: Dict[str, Any], editable_fields: Optional[Iterable[str]]) -> None:
        ...


def _loads(raw: Any, what: str) -> Any:
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as error:
        raise BadRequestError(f"Invalid {what}: {error}") from error


def resolve_mongo_query(
    query_parser: QueryParser,
    client_query_string: Optional[Any],
    acl_rows: Optional[Any],
    other_params: Optional[Mapping[str, Any]],
    text_query: bool = False
) -> Dict[str, Any]:
    """
    组装Mongo查询
    
    客户端查询(_q)、其余过滤参数、ACL行依次放入$and，再交给查询解析器转换类型
    
    Args:
        query_parser: 查询解析器
        client_query_string: 客户端JSON查询
        acl_rows: ACL行，JSON对象或JSON数组
        other_params: 其余 key=value 过滤参数
        text_query: 是否为全文检索查询
        
    Returns:
        Mongo查询，没有任何条件时为空字典
        
    Raises:
        BadRequestError: JSON无法解析或类型转换失败
    """
    mongo_query: Dict[str, Any] = {"$and": []}
    
    if client_query_string:
        mongo_query["$and"].append(_loads(client_query_string, "query"))
    
    for key, value in (other_params or {}).items():
        mongo_query["$and"].append({key: value})
    
    if acl_rows:
        rows = _loads(acl_rows, "acl rows")
        if isinstance(rows, list):
            if rows:
                mongo_query["$and"].append({"$and": rows})
        else:
            mongo_query["$and"].append(rows)
    
    try:
        if text_query:
            query_parser.parse_and_cast_text_search_query(mongo_query)
        else:
            query_parser.parse_and_cast(mongo_query)
    except (ValueError, TypeError, KeyError) as error:
        raise BadRequestError(str(error)) from error
    
    if not mongo_query["$and"]:
        return {}
    
    return mongo_query
