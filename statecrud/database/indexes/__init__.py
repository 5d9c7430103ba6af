"""
索引管理
作者: lx
日期: 2025-06-23
"""
from .index_sync import sync_indexes
from .models import IndexDescriptor, IndexField

__all__ = ['sync_indexes', 'IndexDescriptor', 'IndexField']
