"""
CRUD常量定义
定义生命周期状态、标准审计字段、更新操作符和状态机
作者: lx
日期: 2025-06-22
"""
from enum import Enum
from types import MappingProxyType


class DocumentState(str, Enum):
    """文档生命周期状态"""
    
    PUBLIC = "PUBLIC"
    DRAFT = "DRAFT"
    TRASH = "TRASH"
    DELETED = "DELETED"


PUBLIC = DocumentState.PUBLIC.value
DRAFT = DocumentState.DRAFT.value
TRASH = DocumentState.TRASH.value
DELETED = DocumentState.DELETED.value

STATES = (PUBLIC, DRAFT, TRASH, DELETED)

# 字段
MONGOID = "_id"
UPDATERID = "updaterId"
UPDATEDAT = "updatedAt"
CREATORID = "creatorId"
CREATEDAT = "createdAt"
__STATE__ = "__STATE__"

STANDARD_FIELDS = (UPDATERID, UPDATEDAT, CREATORID, CREATEDAT)

# 请求过滤参数
QUERY = "_q"
STATE = "_st"

# 更新操作符
SETCMD = "$set"
UNSETCMD = "$unset"
INCCMD = "$inc"
MULCMD = "$mul"
CURDATECMD = "$currentDate"
SETONINSERTCMD = "$setOnInsert"
PUSHCMD = "$push"
PULLCMD = "$pull"
ADDTOSETCMD = "$addToSet"

ALLOWED_COMMANDS = (
    SETCMD,
    UNSETCMD,
    INCCMD,
    MULCMD,
    CURDATECMD,
    SETONINSERTCMD,
    PUSHCMD,
    PULLCMD,
    ADDTOSETCMD,
)

# 当前状态 -> 允许迁移到的状态
STATES_FINITE_STATE_MACHINE = MappingProxyType({
    PUBLIC: frozenset({DRAFT, PUBLIC, TRASH}),
    DRAFT: frozenset({DRAFT, PUBLIC, TRASH}),
    TRASH: frozenset({DELETED, DRAFT, TRASH}),
    DELETED: frozenset({DELETED, TRASH}),
})

# 目标状态 -> 允许的来源状态
ALLOWED_STATES_MAP = MappingProxyType({
    state_to: frozenset(
        state_from for state_from, targets in STATES_FINITE_STATE_MACHINE.items()
        if state_to in targets
    )
    for state_to in STATES
})

# 全文检索
TEXT_SEARCH = "$text"
TEXT_SCORE_FIELD = "score"
TEXT_SCORE = MappingProxyType({"$meta": "textScore"})

NO_DOCUMENT_FOUND = "<no document found>"
