"""
更新命令校验
所有写入路径共用，保护标准审计字段和生命周期状态，并限制可用的更新操作符
作者: lx
日期: 2025-06-22
"""
from collections.abc import Mapping
from typing import Any

from ...exceptions import StandardFieldError, UnknownOperatorError
from .consts import ALLOWED_COMMANDS, STANDARD_FIELDS, __STATE__


def assert_doc_has_not_standard_field(doc: Mapping) -> None:
    """
    检查文档中不包含标准审计字段
    
    Raises:
        StandardFieldError: 包含creatorId/createdAt/updaterId/updatedAt之一
    """
    for field in STANDARD_FIELDS:
        if field in doc:
            raise StandardFieldError(field)


def validate_commands(commands: Mapping[str, Any]) -> None:
    """
    校验更新命令
    
    先检查各操作符子文档中的审计字段和状态字段，再拒绝白名单外的操作符。
    状态只能通过状态迁移接口修改
    
    Args:
        commands: 更新命令，如 {"$set": {...}, "$inc": {...}}
        
    Raises:
        StandardFieldError: 子文档中出现审计字段或__STATE__
        UnknownOperatorError: 出现未知的操作符
    """
    for operator in ALLOWED_COMMANDS:
        sub_document = commands.get(operator)
        if isinstance(sub_document, Mapping):
            assert_doc_has_not_standard_field(sub_document)
            if __STATE__ in sub_document:
                raise StandardFieldError(__STATE__)
    
    for key in commands:
        if key not in ALLOWED_COMMANDS:
            raise UnknownOperatorError(key)
