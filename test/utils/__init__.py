"""
测试工具
作者: lx
日期: 2025-06-23
"""
from datetime import datetime, timezone

FIXED_NOW = datetime(2025, 6, 23, 8, 30, tzinfo=timezone.utc)
TEST_USER = "user-1"
