"""
无序批量写入
收集相互独立的过滤条件/更新命令，最后一次性提交
作者: lx
日期: 2025-06-22
"""
from typing import Any, List, Mapping, Union

from pymongo import UpdateMany, UpdateOne
from pymongo.results import BulkWriteResult

from ...exceptions import BulkWriteFailedError


class UnorderedBulkOperation:
    """无序批量写入累加器"""
    
    def __init__(self, collection, operation_name: str):
        """
        初始化批量写入
        
        Args:
            collection: motor集合
            operation_name: 操作名称，用于错误信息
        """
        self.collection = collection
        self.operation_name = operation_name
        self.operations: List[Union[UpdateOne, UpdateMany]] = []
    
    def update_one(self, filter_: Mapping[str, Any], update: Mapping[str, Any], upsert: bool = False) -> None:
        """添加单文档更新"""
        if upsert:
            self.operations.append(UpdateOne(dict(filter_), dict(update), upsert=True))
        else:
            self.operations.append(UpdateOne(dict(filter_), dict(update)))
    
    def update_many(self, filter_: Mapping[str, Any], update: Mapping[str, Any]) -> None:
        """添加多文档更新"""
        self.operations.append(UpdateMany(dict(filter_), dict(update)))
    
    def size(self) -> int:
        """获取当前操作数量"""
        return len(self.operations)
    
    async def execute(self) -> BulkWriteResult:
        """
        提交所有操作
        
        Returns:
            批量写入结果
            
        Raises:
            ValueError: 没有待提交的操作
            BulkWriteFailedError: 写入未被确认
        """
        if not self.operations:
            raise ValueError(f"{self.operation_name}: no operations to execute")
        
        operations = self.operations.copy()
        self.operations.clear()
        
        result = await self.collection.bulk_write(operations, ordered=False)
        if not result.acknowledged:
            raise BulkWriteFailedError(self.operation_name, data={"operations": len(operations)})
        
        return result
