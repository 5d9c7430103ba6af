"""
MongoDB客户端封装
使用Motor异步驱动，按集合创建CRUD引擎
作者: lx
日期: 2025-06-23
"""
from typing import Any, Iterable, List, Mapping, Optional, Union

import motor.motor_asyncio as motor

from ...logger import get_logger
from ..crud.crud_service import CrudService, Sort
from ..indexes.index_sync import sync_indexes
from ..indexes.models import IndexDescriptor

logger = get_logger(__name__)


class MongoClient:
    """MongoDB异步客户端"""
    
    def __init__(self, config: dict, crud_config: Optional[dict] = None):
        """
        初始化MongoDB客户端
        
        Args:
            config: MongoDB配置
                - uri: 连接字符串
                - database: 数据库名
                - max_pool_size: 最大连接池大小
                - min_pool_size: 最小连接池大小
            crud_config: CRUD引擎配置
                - state_on_insert: 新建文档的默认状态
                - allow_disk_use: 排序/聚合是否允许使用磁盘
                - preserve_index_prefix: 同步索引时保留的索引名前缀
        """
        self.config = config
        self.crud_config = crud_config or {}
        self._client: Optional[motor.AsyncIOMotorClient] = None
        self._database: Optional[motor.AsyncIOMotorDatabase] = None
        
    async def connect(self):
        """建立连接"""
        self._client = motor.AsyncIOMotorClient(
            self.config.get('uri', 'mongodb://localhost:27017'),
            maxPoolSize=self.config.get('max_pool_size', 100),
            minPoolSize=self.config.get('min_pool_size', 10)
        )
        self._database = self._client[self.config.get('database', 'statecrud')]
        logger.info(f"MongoDB connected: {self.config.get('database', 'statecrud')}")
        
    async def disconnect(self):
        """断开连接"""
        if self._client is not None:
            self._client.close()
            self._client = None
            self._database = None
            
    @property
    def database(self) -> motor.AsyncIOMotorDatabase:
        """获取数据库实例"""
        if self._database is None:
            raise RuntimeError("MongoDB client not connected")
        return self._database
        
    def __getitem__(self, collection_name: str) -> motor.AsyncIOMotorCollection:
        """获取集合"""
        return self.database[collection_name]
    
    def create_crud_service(
        self,
        collection_name: str,
        state_on_insert: Optional[str] = None,
        default_sorting: Sort = None
    ) -> CrudService:
        """
        为集合创建CRUD引擎
        
        Args:
            collection_name: 集合名称
            state_on_insert: 新建文档默认状态，为None时使用配置
            default_sorting: 默认排序
        """
        options = {}
        if self.crud_config.get("allow_disk_use") is not None:
            options["allow_disk_use"] = self.crud_config["allow_disk_use"]
        
        return CrudService(
            self[collection_name],
            state_on_insert or self.crud_config.get("state_on_insert", "DRAFT"),
            default_sorting=default_sorting,
            options=options
        )
    
    async def sync_indexes(
        self,
        collection_name: str,
        indexes: Iterable[Union[IndexDescriptor, Mapping[str, Any]]],
        preserve_prefix: Optional[str] = None
    ) -> List[str]:
        """同步集合索引，返回创建的索引名称"""
        if preserve_prefix is None:
            preserve_prefix = self.crud_config.get("preserve_index_prefix", "")
        return await sync_indexes(self[collection_name], indexes, preserve_prefix)
