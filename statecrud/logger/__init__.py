"""
日志模块
Logger Module

作者: lx
日期: 2025-06-22
描述: 统一日志管理和输出格式化
"""

import logging
from typing import Any, Dict, Optional

from .config import get_config
from .formatters import JSONFormatter, SimpleFormatter

ROOT_LOGGER_NAME = "statecrud"


def _build_formatter(formatter_config: Dict[str, Any]) -> logging.Formatter:
    """根据配置创建格式化器"""
    if formatter_config.get("type") == "json":
        return JSONFormatter(
            ensure_ascii=formatter_config.get("ensure_ascii", False),
            sort_keys=formatter_config.get("sort_keys", False)
        )
    return SimpleFormatter(
        format_string=formatter_config.get("format"),
        include_extra=formatter_config.get("include_extra", True),
        max_value_length=formatter_config.get("max_value_length", 200)
    )


class CrudLoggerAdapter(logging.LoggerAdapter):
    """
    携带固定上下文字段的日志适配器

    标准LoggerAdapter会用自身的extra覆盖调用时传入的extra，
    这里把两者合并，调用时的字段优先
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def setup_logging(environment: str = "production", config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    初始化日志系统
    
    Args:
        environment: 环境名称 ("production", "development")
        config: 自定义配置，为None时按环境读取
        
    Returns:
        项目根日志器
    """
    config = config or get_config(environment)
    
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(config["level"])
    
    # 重复初始化时替换旧的处理器
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    
    for handler_config in config["handlers"]:
        if handler_config["type"] != "console":
            raise ValueError(f"Unsupported log handler type: {handler_config['type']}")
        handler = logging.StreamHandler()
        handler.setLevel(handler_config.get("level", config["level"]))
        handler.setFormatter(_build_formatter(handler_config.get("formatter", {})))
        logger.addHandler(handler)
    
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    获取项目内的日志器
    
    Args:
        name: 日志器名称，自动挂在项目根日志器下
    """
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "CrudLoggerAdapter",
    "JSONFormatter",
    "SimpleFormatter",
    "setup_logging",
    "get_logger",
    "get_config",
]
