"""
日志配置
Logger Configuration

作者: lx
日期: 2025-06-22
描述: 按环境区分的日志配置，支持环境变量覆盖
"""

import copy
import os
from typing import Any, Dict


# 生产环境: JSON输出到控制台，由采集端收集
LOG_CONFIG: Dict[str, Any] = {
    "level": "INFO",
    "handlers": [
        {
            "type": "console",
            "level": "INFO",
            "formatter": {
                "type": "json",
                "ensure_ascii": False
            }
        }
    ]
}


# 开发环境: 文本格式，打开DEBUG以便查看每个CRUD操作
DEVELOPMENT_CONFIG: Dict[str, Any] = {
    "level": "DEBUG",
    "handlers": [
        {
            "type": "console",
            "level": "DEBUG",
            "formatter": {
                "type": "simple",
                "include_extra": True,
                "max_value_length": 500
            }
        }
    ]
}


def get_config(environment: str = "production") -> Dict[str, Any]:
    """
    获取指定环境的日志配置
    
    Args:
        environment: 环境名称 ("production", "development")
        
    Returns:
        日志配置字典（副本）。设置了LOG_LEVEL时日志器和所有处理器都使用该级别
    """
    base = DEVELOPMENT_CONFIG if environment.lower() == "development" else LOG_CONFIG
    config = copy.deepcopy(base)
    
    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config["level"] = log_level.upper()
        for handler in config["handlers"]:
            handler["level"] = config["level"]
    
    return config
