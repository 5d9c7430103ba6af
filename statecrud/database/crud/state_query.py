"""
状态查询构造
根据请求的生命周期状态生成过滤条件
作者: lx
日期: 2025-06-22
"""
from typing import Any, Dict, Iterable, Optional

from .consts import PUBLIC, __STATE__


def state_value(state: Any) -> str:
    return getattr(state, "value", state)


def build_state_filter(states: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    生成状态过滤条件
    
    未指定状态时只返回PUBLIC文档；多个状态使用$in，去重且保持顺序
    
    Args:
        states: 请求的状态列表
        
    Returns:
        过滤条件
    """
    unique_states = list(dict.fromkeys(state_value(state) for state in states or ()))
    
    if not unique_states:
        return {__STATE__: PUBLIC}
    
    if len(unique_states) == 1:
        return {__STATE__: unique_states[0]}
    
    return {__STATE__: {"$in": unique_states}}
