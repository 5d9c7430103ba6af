"""
文档CRUD
作者: lx
日期: 2025-06-22
"""
from .command_validator import assert_doc_has_not_standard_field, validate_commands
from .consts import (
    ALLOWED_COMMANDS,
    ALLOWED_STATES_MAP,
    STANDARD_FIELDS,
    STATES,
    STATES_FINITE_STATE_MACHINE,
    DocumentState,
)
from .context import CrudContext
from .crud_service import CrudService
from .query_resolver import QueryParser, resolve_mongo_query
from .state_query import build_state_filter

__all__ = [
    'ALLOWED_COMMANDS',
    'ALLOWED_STATES_MAP',
    'STANDARD_FIELDS',
    'STATES',
    'STATES_FINITE_STATE_MACHINE',
    'DocumentState',
    'CrudContext',
    'CrudService',
    'QueryParser',
    'resolve_mongo_query',
    'build_state_filter',
    'validate_commands',
    'assert_doc_has_not_standard_field',
]
