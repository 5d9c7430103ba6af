"""
数据库配置
定义数据库连接和CRUD引擎行为配置
作者: lx
日期: 2025-06-23
"""
import os
from typing import Any, Dict, Optional


def _env_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class DatabaseConfig:
    """数据库配置类"""
    
    # MongoDB配置
    MONGO_CONFIG: Dict[str, Any] = {
        "uri": "mongodb://localhost:27017",
        "database": "statecrud",
        "max_pool_size": 100,
        "min_pool_size": 10
    }
    
    # CRUD引擎配置
    CRUD_CONFIG: Dict[str, Any] = {
        "state_on_insert": "DRAFT",
        "allow_disk_use": None,          # None 表示不传给数据库
        "preserve_index_prefix": "preserve_"
    }
    
    @classmethod
    def from_env(cls) -> Dict[str, Dict[str, Any]]:
        """
        读取环境变量覆盖默认配置
        
        Returns:
            {"mongo": {...}, "crud": {...}}
        """
        mongo_config = dict(cls.MONGO_CONFIG)
        crud_config = dict(cls.CRUD_CONFIG)
        
        if os.getenv("MONGODB_URL"):
            mongo_config["uri"] = os.environ["MONGODB_URL"]
        if os.getenv("MONGODB_DATABASE"):
            mongo_config["database"] = os.environ["MONGODB_DATABASE"]
        if os.getenv("CRUD_STATE_ON_INSERT"):
            crud_config["state_on_insert"] = os.environ["CRUD_STATE_ON_INSERT"].upper()
        
        allow_disk_use = _env_bool(os.getenv("CRUD_ALLOW_DISK_USE"))
        if allow_disk_use is not None:
            crud_config["allow_disk_use"] = allow_disk_use
        
        if os.getenv("CRUD_PRESERVE_INDEX_PREFIX") is not None:
            crud_config["preserve_index_prefix"] = os.environ["CRUD_PRESERVE_INDEX_PREFIX"]
        
        return {"mongo": mongo_config, "crud": crud_config}
