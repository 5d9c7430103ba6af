"""
状态感知的文档CRUD引擎
State-aware Document CRUD Engine

作者: lx
日期: 2025-06-23
描述: 将通用CRUD操作转换为MongoDB查询，维护 PUBLIC/DRAFT/TRASH/DELETED 生命周期
"""

__version__ = "0.1.0"
