"""
数据库核心
作者: lx
日期: 2025-06-23
"""
from .config import DatabaseConfig
from .mongo_client import MongoClient

__all__ = ['DatabaseConfig', 'MongoClient']
