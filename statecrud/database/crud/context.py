"""
请求上下文
每次调用由调用方创建并传入，引擎不保存
作者: lx
日期: 2025-06-22
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

from ...logger import CrudLoggerAdapter, get_logger

DEFAULT_USER_ID = "public"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _default_logger() -> logging.Logger:
    return get_logger("crud")


@dataclass(frozen=True)
class CrudContext:
    """
    单次请求的上下文
    
    Attributes:
        user_id: 操作人ID，写入creatorId/updaterId
        now: 本次操作的时间戳，批量操作共用同一个值
        log: 日志器或LoggerAdapter，接收requested/executed事件
    """
    user_id: Any = DEFAULT_USER_ID
    now: datetime = field(default_factory=_utc_now)
    log: Union[logging.Logger, logging.LoggerAdapter] = field(default_factory=_default_logger)
    
    def __post_init__(self):
        # 普通LoggerAdapter会丢掉操作日志的extra字段
        if isinstance(self.log, logging.LoggerAdapter) and not isinstance(self.log, CrudLoggerAdapter):
            object.__setattr__(self, "log", CrudLoggerAdapter(self.log.logger, self.log.extra))
