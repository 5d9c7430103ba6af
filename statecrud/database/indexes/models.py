"""
索引描述模型
声明期望存在的集合索引
作者: lx
日期: 2025-06-23
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

NORMAL_INDEX = "normal"
HASHED_INDEX = "hash"
GEO_INDEX = "geo"
TEXT_INDEX = "text"

HASHED_FIELD = "hashed"
GEO_FIELD = "2dsphere"
TEXT_FIELD = "text"


class IndexModelBase(BaseModel):
    """索引模型基类"""
    
    model_config = ConfigDict(
        # 同时接受配置文件中的驼峰名
        populate_by_name=True,
        extra="forbid",
        frozen=True
    )


class IndexField(IndexModelBase):
    """普通/全文索引的字段"""
    name: str = Field(description="字段名")
    order: Literal[1, -1] = Field(default=1, description="排序方向")


class IndexDescriptor(IndexModelBase):
    """索引描述"""
    name: str = Field(description="索引名称")
    type: Literal["normal", "hash", "geo", "text"] = Field(description="索引类型")
    fields: List[IndexField] = Field(default_factory=list, description="普通/全文索引字段")
    field: Optional[str] = Field(default=None, description="哈希/地理索引字段")
    unique: bool = Field(default=False, description="是否唯一")
    expire_after_seconds: Optional[int] = Field(default=None, alias="expireAfterSeconds", ge=0, description="TTL秒数")
    use_partial_filter: bool = Field(default=False, alias="usePartialFilter", description="是否启用部分索引")
    partial_filter_expression: Optional[str] = Field(
        default=None, alias="partialFilterExpression", description="部分索引条件(JSON字符串)"
    )
    weights: Optional[Dict[str, int]] = Field(default=None, description="全文索引权重")
    default_language: Optional[str] = Field(default=None, alias="defaultLanguage", description="全文索引默认语言")
    language_override: Optional[str] = Field(default=None, alias="languageOverride", description="全文索引语言字段")
    
    @model_validator(mode="after")
    def check_fields(self) -> "IndexDescriptor":
        """按类型检查字段声明"""
        if self.type in (NORMAL_INDEX, TEXT_INDEX) and not self.fields:
            raise ValueError(f"index {self.name} of type {self.type} requires `fields`")
        if self.type in (HASHED_INDEX, GEO_INDEX) and not self.field:
            raise ValueError(f"index {self.name} of type {self.type} requires `field`")
        return self
