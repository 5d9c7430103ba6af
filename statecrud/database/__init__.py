"""
数据库层模块
Database Layer Module

提供带生命周期状态机的文档CRUD引擎与索引同步
作者: lx
日期: 2025-06-23
"""
from .core.config import DatabaseConfig
from .core.mongo_client import MongoClient
from .crud import CrudContext, CrudService, build_state_filter, validate_commands
from .indexes import IndexDescriptor, sync_indexes

# 全局实例管理
_mongo_client = None


async def get_mongo_client():
    """获取MongoDB客户端"""
    global _mongo_client
    if _mongo_client is None:
        config = DatabaseConfig.from_env()
        _mongo_client = MongoClient(config["mongo"], config["crud"])
        await _mongo_client.connect()
    return _mongo_client


async def close_mongo_client():
    """关闭MongoDB连接"""
    global _mongo_client
    if _mongo_client:
        await _mongo_client.disconnect()
        _mongo_client = None


__all__ = [
    'DatabaseConfig',
    'MongoClient',
    'CrudContext',
    'CrudService',
    'IndexDescriptor',
    'build_state_filter',
    'validate_commands',
    'sync_indexes',
    'get_mongo_client',
    'close_mongo_client',
]
