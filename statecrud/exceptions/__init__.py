"""
统一的异常定义
Unified Exception Definitions

作者: lx
日期: 2025-06-22
描述: CRUD引擎的异常体系，前置校验与状态迁移错误可直接映射为客户端响应
"""
from typing import Any, Optional


class CrudException(Exception):
    """CRUD异常基类"""
    
    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)
    
    def to_dict(self) -> dict:
        """转换为字典格式"""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result


class ValidationError(CrudException):
    """参数验证错误"""
    
    def __init__(self, message: str, field: Optional[str] = None):
        data = {"field": field} if field else None
        super().__init__(code=ErrorCode.INVALID_PARAMS, message=message, data=data)


class StandardFieldError(ValidationError):
    """标准审计字段不允许由调用方指定"""
    
    def __init__(self, field: str):
        super().__init__(f"{field} cannot be specified", field=field)


class UnknownOperatorError(ValidationError):
    """未知的更新操作符"""
    
    def __init__(self, operator: str):
        super().__init__(f"Unknown operator: {operator}", field=operator)


class BadRequestError(CrudException):
    """请求内容无法解析"""
    
    def __init__(self, message: str):
        super().__init__(code=ErrorCode.INVALID_PARAMS, message=message)


class StateTransitionError(CrudException):
    """非法的状态迁移"""
    
    def __init__(self, state_from: str, state_to: str):
        self.state_from = state_from
        self.state_to = state_to
        super().__init__(
            code=ErrorCode.INVALID_PARAMS,
            message=f"Invalid state transition: transition from {state_from} to {state_to} not allowed",
            data={"state_from": state_from, "state_to": state_to}
        )


class BulkWriteFailedError(CrudException):
    """批量写入未被确认"""
    
    def __init__(self, operation: str, data: Any = None):
        self.operation = operation
        super().__init__(code=ErrorCode.SERVER_ERROR, message=f"{operation} failed", data=data)


class IndexDefinitionError(CrudException):
    """索引定义错误"""
    
    def __init__(self, index_name: str, message: str):
        self.index_name = index_name
        super().__init__(
            code=ErrorCode.SERVER_ERROR,
            message=message,
            data={"index_name": index_name}
        )


# 错误码定义
class ErrorCode:
    """统一错误码"""
    
    SUCCESS = 0
    
    # 客户端错误 (4xx)
    INVALID_PARAMS = 400
    NOT_FOUND = 404
    CONFLICT = 409
    
    # 服务器错误 (5xx)
    SERVER_ERROR = 500


__all__ = [
    "CrudException",
    "ValidationError",
    "StandardFieldError",
    "UnknownOperatorError",
    "BadRequestError",
    "StateTransitionError",
    "BulkWriteFailedError",
    "IndexDefinitionError",
    "ErrorCode",
]
