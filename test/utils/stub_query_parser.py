"""
查询解析器桩
Stub Query Parser

作者: lx
日期: 2025-06-23
描述: 记录调用并把数字字符串转换为整数，用于验证引擎对解析器的调用顺序
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple


def _cast(value: Any) -> Any:
    if isinstance(value, str) and value.lstrip("-").isdigit():
        return int(value)
    if isinstance(value, dict):
        return {key: _cast(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_cast(item) for item in value]
    return value


class StubQueryParser:
    """就地转换类型的查询解析器"""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.calls: List[Tuple[str, Any]] = []

    def _cast_in_place(self, target: Dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        for key, value in list(target.items()):
            target[key] = _cast(value)

    def parse_and_cast(self, query: Dict[str, Any]) -> None:
        self.calls.append(("parse_and_cast", query))
        self._cast_in_place(query)

    def parse_and_cast_text_search_query(self, query: Dict[str, Any]) -> None:
        self.calls.append(("parse_and_cast_text_search_query", query))
        self._cast_in_place(query)

    def parse_and_cast_body(self, doc: Dict[str, Any]) -> None:
        self.calls.append(("parse_and_cast_body", dict(doc)))
        self._cast_in_place(doc)

    def parse_and_cast_commands(self, commands: Dict[str, Any], editable_fields: Optional[Iterable[str]]) -> None:
        self.calls.append(("parse_and_cast_commands", editable_fields))
        if editable_fields is not None:
            allowed = set(editable_fields)
            for sub_document in commands.values():
                for field in sub_document:
                    if field not in allowed:
                        raise ValueError(f"{field} is not editable")
        for operator, sub_document in commands.items():
            commands[operator] = _cast(sub_document)
