"""
日志格式化器
Logger Formatters

作者: lx
日期: 2025-06-22
描述: CRUD操作日志的JSON/文本格式化。
      "<operation> operation <phase>" 形式的消息会拆出操作名和阶段，
      通过extra传入的查询、命令、计数等字段转换为可序列化的值
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId

# LogRecord自带属性，不作为额外字段输出
RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

CRUD_EVENT = re.compile(r"^(?P<operation>\w+) operation (?P<phase>requested|executed|failed)$")


def get_extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """提取通过extra传入的字段"""
    return {key: value for key, value in vars(record).items() if key not in RESERVED_ATTRS}


def to_jsonable(value: Any) -> Any:
    """把查询/文档中的BSON值转换为JSON可表示的值"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    return value


def parse_crud_event(message: str) -> Optional[Dict[str, str]]:
    """解析 "patchBulk operation executed" 这类消息，非CRUD事件返回None"""
    matched = CRUD_EVENT.match(message)
    return matched.groupdict() if matched else None


class JSONFormatter(logging.Formatter):
    """每条记录输出一行JSON"""

    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = False):
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": message,
        }

        crud_event = parse_crud_event(message)
        if crud_event:
            payload.update(crud_event)

        fields = get_extra_fields(record)
        if fields:
            payload["fields"] = to_jsonable(fields)

        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=self.ensure_ascii, sort_keys=self.sort_keys, default=str)


class SimpleFormatter(logging.Formatter):
    """
    文本格式化器

    额外字段以紧凑JSON追加在消息后，过长的值会被截断
    """

    DEFAULT_FORMAT = "{asctime} {levelname:<5} {name}: {message}"

    def __init__(
        self,
        format_string: Optional[str] = None,
        include_extra: bool = True,
        max_value_length: int = 200
    ):
        super().__init__(format_string or self.DEFAULT_FORMAT, style="{")
        self.include_extra = include_extra
        self.max_value_length = max_value_length

    def _render(self, value: Any) -> str:
        text = json.dumps(to_jsonable(value), ensure_ascii=False, separators=(",", ":"), default=str)
        if len(text) > self.max_value_length:
            return text[:self.max_value_length] + "..."
        return text

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self.include_extra:
            return line

        fields = get_extra_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={self._render(value)}" for key, value in fields.items())
        return line
