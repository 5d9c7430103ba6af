"""
文档CRUD引擎
CRUD Service

作者: lx
日期: 2025-06-22
描述: 在HTTP层与MongoDB集合之间转换CRUD操作，维护文档生命周期状态机、
      标准审计字段以及状态迁移的乐观并发控制
"""
import copy
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pymongo import ReturnDocument
from pymongo.results import BulkWriteResult

from ...exceptions import BulkWriteFailedError, StateTransitionError, ValidationError
from .bulk_operation import UnorderedBulkOperation
from .command_validator import assert_doc_has_not_standard_field, validate_commands
from .consts import (
    ALLOWED_STATES_MAP,
    CREATEDAT,
    CREATORID,
    MONGOID,
    NO_DOCUMENT_FOUND,
    QUERY,
    SETCMD,
    SETONINSERTCMD,
    STANDARD_FIELDS,
    STATE,
    STATES,
    STATES_FINITE_STATE_MACHINE,
    TEXT_SCORE,
    TEXT_SCORE_FIELD,
    TEXT_SEARCH,
    UPDATEDAT,
    UPDATERID,
    __STATE__,
)
from .context import CrudContext
from .query_resolver import QueryParser, resolve_mongo_query
from .state_query import build_state_filter, state_value

Projection = Union[None, Mapping[str, Any], Sequence[Union[str, Mapping[str, Any]]]]
Sort = Union[None, Mapping[str, Any], Sequence[Tuple[str, Any]]]


def get_projection(projection: Projection) -> Optional[Dict[str, Any]]:
    """
    转换为Mongo投影

    None 返回完整文档；字符串为字段名，字典为原样合并的原始投影；空列表只投影_id
    """
    if projection is None:
        return None
    if isinstance(projection, Mapping):
        return dict(projection)

    mongo_projection: Dict[str, Any] = {}
    for item in projection:
        if isinstance(item, str):
            mongo_projection[item] = 1
        else:
            mongo_projection.update(item)

    return mongo_projection or {MONGOID: 1}


def add_text_score_projection(projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """投影中加入全文检索得分，调用方已请求score字段时保持不变"""
    projection = dict(projection or {})
    if TEXT_SCORE_FIELD not in projection:
        projection[TEXT_SCORE_FIELD] = dict(TEXT_SCORE)
    return projection


def extract_text_search(query: Optional[Mapping[str, Any]]) -> Tuple[Optional[Any], Dict[str, Any]]:
    """
    从查询树中取出$text条件

    Returns:
        ($text条件或None, 去掉$text后的查询副本)
    """
    if not query:
        return None, {}

    cleaned = copy.deepcopy(dict(query))
    return _pop_key(cleaned, TEXT_SEARCH), cleaned


def _pop_key(node: Any, key: str) -> Optional[Any]:
    if isinstance(node, dict):
        if key in node:
            return node.pop(key)
        values: Iterable[Any] = node.values()
    elif isinstance(node, list):
        values = node
    else:
        return None

    for value in values:
        found = _pop_key(value, key)
        if found is not None:
            return found
    return None


def _sort_items(sort: Sort) -> List[Tuple[str, Any]]:
    if isinstance(sort, Mapping):
        return list(sort.items())
    return list(sort)


def _copy_commands(commands: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        operator: dict(value) if isinstance(value, Mapping) else value
        for operator, value in commands.items()
    }


class CrudService:
    """文档CRUD引擎"""

    STANDARD_FIELDS = STANDARD_FIELDS

    def __init__(
        self,
        collection,
        state_on_insert: Any,
        default_sorting: Sort = None,
        options: Optional[Dict[str, Any]] = None
    ):
        """
        初始化CRUD引擎

        Args:
            collection: motor集合
            state_on_insert: 新建文档未指定状态时使用的状态
            default_sorting: 调用方未指定排序时的默认排序
            options: 额外选项，目前支持 allow_disk_use

        Raises:
            ValidationError: state_on_insert不是合法状态
        """
        state_on_insert = state_value(state_on_insert)
        if state_on_insert not in STATES_FINITE_STATE_MACHINE:
            raise ValidationError("Invalid `stateOnInsert`", field="state_on_insert")

        self.collection = collection
        self.state_on_insert = state_on_insert
        self.default_sorting = default_sorting
        self.options = options or {}

    # ------------------------------------------------------------------
    # 读操作
    # ------------------------------------------------------------------

    def find_all(
        self,
        ctx: CrudContext,
        query: Optional[Mapping[str, Any]] = None,
        projection: Projection = None,
        sort: Sort = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
        states: Optional[Iterable[Any]] = None,
        is_text_search: bool = False
    ):
        """
        查询文档列表

        状态过滤始终与查询条件取交集。返回惰性游标，消费前不会访问数据库

        Returns:
            motor游标
        """
        state_query = build_state_filter(states)
        search_query = {"$and": [query, state_query]} if query else state_query

        mongo_projection = get_projection(projection)
        if is_text_search:
            mongo_projection = add_text_score_projection(mongo_projection)

        sort_config = self._resolve_sort(sort, is_text_search)
        options = self._find_options()

        ctx.log.debug("findAll operation requested", extra={
            "query": search_query,
            "projection": mongo_projection,
            "sort": sort_config,
            "skip": skip,
            "limit": limit,
            "options": options,
        })

        cursor = self.collection.find(search_query, mongo_projection, **options)
        if sort_config:
            cursor = cursor.sort(_sort_items(sort_config))
        if skip is not None:
            cursor = cursor.skip(int(skip))
        if limit is not None:
            cursor = cursor.limit(int(limit))

        ctx.log.debug("findAll operation executed", extra={"query": search_query})
        return cursor

    async def find_by_id(
        self,
        ctx: CrudContext,
        doc_id: Any,
        query: Optional[Mapping[str, Any]] = None,
        projection: Projection = None,
        states: Optional[Iterable[Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """根据ID查询文档，未找到返回None"""
        search_query = self._by_id_query(doc_id, query, states)
        mongo_projection = get_projection(projection)
        options = self._find_options()

        ctx.log.debug("findById operation requested", extra={
            "query": search_query,
            "projection": mongo_projection,
            "options": options,
        })

        doc = await self.collection.find_one(search_query, mongo_projection, **options)

        ctx.log.debug("findById operation executed", extra={"doc_id": self._doc_id(doc)})
        return doc

    def aggregate(
        self,
        ctx: CrudContext,
        query: Optional[Mapping[str, Any]] = None,
        projection: Projection = None,
        sort: Sort = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
        states: Optional[Iterable[Any]] = None,
        is_text_search: bool = False
    ):
        """
        以聚合管道查询文档列表

        状态与$text条件在投影前匹配，调用方的查询在投影后匹配，
        因此查询可以引用原始投影计算出的字段

        Returns:
            motor聚合游标
        """
        text_clause, match_query = extract_text_search(query)
        state_query = build_state_filter(states)
        first_match = (
            {"$and": [{TEXT_SEARCH: text_clause}, state_query]}
            if text_clause is not None else state_query
        )

        pipeline: List[Dict[str, Any]] = [{"$match": first_match}]

        mongo_projection = get_projection(projection)
        if mongo_projection is not None:
            if is_text_search:
                mongo_projection = add_text_score_projection(mongo_projection)
            pipeline.append({"$project": mongo_projection})
        elif is_text_search:
            # 仅含$meta的$project会变成包含投影，这里改用$addFields保留完整文档
            pipeline.append({"$addFields": {TEXT_SCORE_FIELD: dict(TEXT_SCORE)}})

        pipeline.append({"$match": match_query})

        sort_config = self._resolve_sort(sort, is_text_search)
        if sort_config:
            pipeline.append({"$sort": dict(_sort_items(sort_config))})
        if skip is not None:
            pipeline.append({"$skip": int(skip)})
        if limit is not None:
            pipeline.append({"$limit": int(limit)})

        options = self._aggregate_options()
        ctx.log.debug("aggregate operation requested", extra={"pipeline": pipeline, "options": options})

        cursor = self.collection.aggregate(pipeline, **options)

        ctx.log.debug("aggregate operation executed", extra={"pipeline": pipeline})
        return cursor

    async def count(
        self,
        ctx: CrudContext,
        query: Optional[Mapping[str, Any]] = None,
        states: Optional[Iterable[Any]] = None
    ) -> int:
        """统计匹配的文档数量"""
        state_query = build_state_filter(states)
        search_query = {"$and": [query, state_query]} if query else state_query

        ctx.log.debug("count operation requested", extra={"query": search_query})

        total = await self.collection.count_documents(search_query)

        ctx.log.debug("count operation executed", extra={"count": total})
        return total

    # ------------------------------------------------------------------
    # 新增
    # ------------------------------------------------------------------

    async def insert_one(self, ctx: CrudContext, doc: Mapping[str, Any]) -> Dict[str, Any]:
        """
        新增文档

        Returns:
            写入的完整文档，包含生成的_id

        Raises:
            StandardFieldError: 文档中包含标准审计字段
        """
        ctx.log.debug("insertOne operation requested", extra={"doc": doc})
        assert_doc_has_not_standard_field(doc)

        new_doc = self._stamp_new_document(ctx, doc)
        result = await self.collection.insert_one(new_doc)

        ctx.log.debug("insertOne operation executed", extra={"doc_id": result.inserted_id})
        return {MONGOID: result.inserted_id, **new_doc}

    async def insert_one_with_id(self, ctx: CrudContext, doc_id: Any, doc: Mapping[str, Any]) -> Dict[str, Any]:
        """
        以指定ID新增文档

        Raises:
            ValidationError: 文档已带有_id
            StandardFieldError: 文档中包含标准审计字段
        """
        ctx.log.debug("insertOneWithId operation requested", extra={"doc": doc, "doc_id": doc_id})
        if doc.get(MONGOID) is not None:
            raise ValidationError("doc._id already exists", field=MONGOID)
        assert_doc_has_not_standard_field(doc)

        new_doc = self._stamp_new_document(ctx, doc)
        new_doc[MONGOID] = doc_id
        await self.collection.insert_one(new_doc)

        ctx.log.debug("insertOneWithId operation executed", extra={"doc_id": doc_id})
        return new_doc

    async def insert_many(
        self,
        ctx: CrudContext,
        docs: Sequence[Mapping[str, Any]],
        query_parser: Optional[QueryParser] = None,
        id_only: bool = False
    ) -> List[Dict[str, Any]]:
        """
        批量新增文档

        每个文档先经过查询解析器的类型转换，再写入审计字段，最后一次性插入

        Args:
            ctx: 请求上下文
            docs: 文档列表
            query_parser: 查询解析器
            id_only: 只返回 {"_id": ...}

        Returns:
            与输入顺序一致的文档列表
        """
        ctx.log.debug("insertMany operation requested", extra={"docs": docs})
        if not docs:
            raise ValidationError("At least one element is required")

        new_docs = []
        for doc in docs:
            doc = dict(doc)
            if query_parser is not None:
                query_parser.parse_and_cast_body(doc)
            assert_doc_has_not_standard_field(doc)
            new_docs.append(self._stamp_new_document(ctx, doc))

        result = await self.collection.insert_many(new_docs)
        inserted_ids = list(result.inserted_ids)

        ctx.log.debug("insertMany operation executed", extra={"doc_ids": inserted_ids})
        if id_only:
            return [{MONGOID: inserted_id} for inserted_id in inserted_ids]
        return [
            {MONGOID: inserted_id, **new_doc}
            for inserted_id, new_doc in zip(inserted_ids, new_docs)
        ]

    # ------------------------------------------------------------------
    # 删除
    # ------------------------------------------------------------------

    async def delete_by_id(
        self,
        ctx: CrudContext,
        doc_id: Any,
        query: Optional[Mapping[str, Any]] = None,
        states: Optional[Iterable[Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """原子地查找并删除文档，返回删除前的文档"""
        search_query = self._by_id_query(doc_id, query, states)

        ctx.log.debug("deleteById operation requested", extra={"query": search_query})

        doc = await self.collection.find_one_and_delete(search_query)

        ctx.log.debug("deleteById operation executed", extra={"doc_id": self._doc_id(doc)})
        return doc

    async def delete_all(
        self,
        ctx: CrudContext,
        query: Optional[Mapping[str, Any]] = None,
        states: Optional[Iterable[Any]] = None
    ) -> int:
        """删除所有匹配的文档，返回删除数量"""
        state_query = build_state_filter(states)
        search_query = {"$and": [query, state_query]} if query else state_query

        ctx.log.debug("deleteAll operation requested", extra={"query": search_query})

        result = await self.collection.delete_many(search_query)

        ctx.log.debug("deleteAll operation executed", extra={"deleted_count": result.deleted_count})
        return result.deleted_count

    # ------------------------------------------------------------------
    # 更新
    # ------------------------------------------------------------------

    async def patch_by_id(
        self,
        ctx: CrudContext,
        doc_id: Any,
        commands: Mapping[str, Any],
        query: Optional[Mapping[str, Any]] = None,
        projection: Projection = None,
        states: Optional[Iterable[Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        原子地查找并更新文档

        Returns:
            更新后的文档，未匹配返回None
        """
        search_query = self._by_id_query(doc_id, query, states)

        ctx.log.debug("patchById operation requested", extra={
            "query": search_query,
            "commands": commands,
            "projection": projection,
        })
        validate_commands(commands)

        doc = await self.collection.find_one_and_update(
            search_query,
            self._stamp_update(ctx, commands),
            projection=get_projection(projection),
            return_document=ReturnDocument.AFTER
        )

        ctx.log.debug("patchById operation executed", extra={"doc_id": self._doc_id(doc)})
        return doc

    async def patch_many(
        self,
        ctx: CrudContext,
        commands: Mapping[str, Any],
        query: Optional[Mapping[str, Any]] = None,
        states: Optional[Iterable[Any]] = None
    ) -> int:
        """
        更新所有匹配的文档

        Returns:
            实际被修改的文档数量（值未变化的文档不计入）
        """
        state_query = build_state_filter(states)
        search_query = {"$and": [query, state_query]} if query else state_query

        ctx.log.debug("patchMany operation requested", extra={"query": search_query, "commands": commands})
        validate_commands(commands)

        result = await self.collection.update_many(search_query, self._stamp_update(ctx, commands))

        ctx.log.debug("patchMany operation executed", extra={
            "matched_count": result.matched_count,
            "modified_count": result.modified_count,
        })
        return result.modified_count

    async def upsert_one(
        self,
        ctx: CrudContext,
        commands: Mapping[str, Any],
        query: Optional[Mapping[str, Any]] = None,
        projection: Projection = None,
        states: Optional[Iterable[Any]] = None
    ) -> Dict[str, Any]:
        """
        原子地更新或插入文档

        creatorId/createdAt/__STATE__ 通过$setOnInsert写入，只在插入时生效

        Returns:
            操作后的文档
        """
        state_query = build_state_filter(states)
        search_query = {"$and": [query, state_query]} if query else state_query

        ctx.log.debug("upsertOne operation requested", extra={
            "query": search_query,
            "commands": commands,
            "projection": projection,
        })
        validate_commands(commands)

        update = self._stamp_update(ctx, commands)
        set_on_insert = update.setdefault(SETONINSERTCMD, {})
        set_on_insert[CREATORID] = ctx.user_id
        set_on_insert[CREATEDAT] = ctx.now
        set_on_insert[__STATE__] = self.state_on_insert

        doc = await self.collection.find_one_and_update(
            search_query,
            update,
            projection=get_projection(projection),
            upsert=True,
            return_document=ReturnDocument.AFTER
        )

        ctx.log.debug("upsertOne operation executed", extra={"doc_id": self._doc_id(doc)})
        return doc

    async def upsert_many(
        self,
        ctx: CrudContext,
        documents: Sequence[Mapping[str, Any]],
        query_parser: Optional[QueryParser] = None
    ) -> int:
        """
        批量更新或插入文档

        带_id的文档按_id匹配；不带_id时以整个文档作为匹配条件

        Returns:
            新插入的文档数量
        """
        ctx.log.debug("upsertMany operation requested", extra={"docs": documents})
        if not documents:
            raise ValidationError("At least one element is required")

        bulk = UnorderedBulkOperation(self.collection, "upsertMany")
        for document in documents:
            doc = dict(document)
            if query_parser is not None:
                query_parser.parse_and_cast_body(doc)
            assert_doc_has_not_standard_field(doc)

            if doc.get(MONGOID) is not None:
                search_query = {MONGOID: doc[MONGOID]}
            else:
                search_query = dict(doc)

            doc.pop(MONGOID, None)
            state = self._checked_state(doc.pop(__STATE__, None))

            bulk.update_one(
                search_query,
                {
                    SETCMD: {**doc, UPDATERID: ctx.user_id, UPDATEDAT: ctx.now},
                    SETONINSERTCMD: {
                        CREATORID: ctx.user_id,
                        CREATEDAT: ctx.now,
                        __STATE__: state or self.state_on_insert,
                    },
                },
                upsert=True
            )

        result = await self._execute_bulk(ctx, bulk)
        return result.upserted_count

    async def patch_bulk(
        self,
        ctx: CrudContext,
        filter_update_commands: Sequence[Mapping[str, Any]],
        query_parser: QueryParser,
        cast_id=None,
        editable_fields: Optional[Iterable[str]] = None,
        acl_rows: Optional[Any] = None
    ) -> int:
        """
        批量更新

        每一项为 {"filter": {...}, "update": {...}}。filter拆分为_id、_q、_st（必填，逗号分隔）
        和其余过滤参数，各项相互独立，最终作为一个无序批量写入提交

        Args:
            ctx: 请求上下文
            filter_update_commands: 过滤/更新列表
            query_parser: 查询解析器
            cast_id: 客户端ID转换为集合原生ID
            editable_fields: 允许修改的字段
            acl_rows: ACL行

        Returns:
            实际被修改的文档总数
        """
        ctx.log.debug("patchBulk operation requested", extra={"filter_update_commands": filter_update_commands})
        if not filter_update_commands:
            raise ValidationError("At least one element is required")

        bulk = UnorderedBulkOperation(self.collection, "patchBulk")
        for index, entry in enumerate(filter_update_commands):
            other_params = dict(entry.get("filter") or {})
            commands = _copy_commands(entry.get("update") or {})

            doc_id = other_params.pop(MONGOID, None)
            client_query_string = other_params.pop(QUERY, None)
            raw_states = other_params.pop(STATE, None)
            if not raw_states:
                raise ValidationError(f"`{STATE}` is required in filter #{index + 1}", field=STATE)
            states = self._split_states(raw_states)
            if not states:
                raise ValidationError(f"`{STATE}` is required in filter #{index + 1}", field=STATE)

            mongo_query = resolve_mongo_query(query_parser, client_query_string, acl_rows, other_params, False)

            validate_commands(commands)
            query_parser.parse_and_cast_commands(commands, editable_fields)

            state_query = build_state_filter(states)
            search_query = {"$and": [mongo_query, state_query]} if mongo_query else {"$and": [state_query]}
            if doc_id is not None:
                search_query["$and"].append({MONGOID: cast_id(doc_id) if cast_id else doc_id})

            bulk.update_one(search_query, self._stamp_update(ctx, commands))

        result = await self._execute_bulk(ctx, bulk)
        return result.modified_count

    # ------------------------------------------------------------------
    # 状态迁移
    # ------------------------------------------------------------------

    async def change_state_by_id(
        self,
        ctx: CrudContext,
        doc_id: Any,
        state_to: Any,
        query: Optional[Mapping[str, Any]] = None
    ) -> Optional[int]:
        """
        修改单个文档的状态

        读取文档时不加状态过滤；写入时过滤条件带上读到的状态，
        若期间状态被其他请求修改则不会更新任何文档

        Returns:
            修改数量(0或1)，文档不存在返回None

        Raises:
            ValidationError: 目标状态不合法
            StateTransitionError: 当前状态不允许迁移到目标状态
        """
        ctx.log.debug("changeStateById operation requested", extra={
            "doc_id": doc_id,
            "query": query,
            "state_to": state_to,
        })
        state_to = state_value(state_to)
        if state_to not in STATES_FINITE_STATE_MACHINE:
            raise ValidationError(f"Invalid `stateTo` parameter: {state_to}", field="stateTo")

        id_query = {"$and": [query, {MONGOID: doc_id}]} if query else {MONGOID: doc_id}
        doc = await self.collection.find_one(id_query, {__STATE__: 1})
        if doc is None:
            ctx.log.debug("changeStateById operation executed", extra={"doc_id": NO_DOCUMENT_FOUND})
            return None

        # 历史数据可能没有状态，此时不做迁移限制
        current_state = doc.get(__STATE__)
        if current_state and state_to not in STATES_FINITE_STATE_MACHINE.get(current_state, frozenset()):
            raise StateTransitionError(current_state, state_to)

        result = await self.collection.update_one(
            {"$and": [id_query, {__STATE__: current_state}]},
            {SETCMD: {__STATE__: state_to, UPDATERID: ctx.user_id, UPDATEDAT: ctx.now}}
        )

        ctx.log.debug("changeStateById operation executed", extra={
            "doc_id": doc_id,
            "state_from": current_state,
            "state_to": state_to,
            "modified_count": result.modified_count,
        })
        return result.modified_count

    async def change_state_many(self, ctx: CrudContext, filter_update_commands: Sequence[Mapping[str, Any]]) -> int:
        """
        批量修改状态

        每一项为 {"query": {...}, "stateTo": ...}，只有当前处于可迁移来源状态的文档会被匹配

        Returns:
            实际被修改的文档总数
        """
        ctx.log.debug("changeStateMany operation requested", extra={"filter_update_commands": filter_update_commands})
        if not filter_update_commands:
            raise ValidationError("At least one element is required")

        bulk = UnorderedBulkOperation(self.collection, "changeStateMany")
        for index, entry in enumerate(filter_update_commands):
            query = entry.get("query")
            state_to = state_value(entry.get("stateTo"))

            allowed_from = ALLOWED_STATES_MAP.get(state_to)
            if allowed_from is None:
                raise ValidationError(f"Invalid `stateTo` parameter: {state_to}", field="stateTo")

            state_query = {__STATE__: {"$in": [state for state in STATES if state in allowed_from]}}
            search_query = {"$and": [query, state_query]} if query else state_query
            commands = {SETCMD: {__STATE__: state_to, UPDATERID: ctx.user_id, UPDATEDAT: ctx.now}}

            ctx.log.debug(f"changeStateMany - step #{index + 1} queued", extra={
                "query": search_query,
                "commands": commands,
            })
            bulk.update_many(search_query, commands)

        result = await self._execute_bulk(ctx, bulk)
        return result.modified_count

    # ------------------------------------------------------------------
    # 内部方法
    # ------------------------------------------------------------------

    def _by_id_query(self, doc_id: Any, query: Optional[Mapping[str, Any]], states: Optional[Iterable[Any]]) -> Dict[str, Any]:
        state_query = build_state_filter(states)
        if query:
            return {"$and": [query, {MONGOID: doc_id}, state_query]}
        return {"$and": [{MONGOID: doc_id}, state_query]}

    def _resolve_sort(self, sort: Sort, is_text_search: bool) -> Sort:
        if is_text_search and not sort:
            return {TEXT_SCORE_FIELD: dict(TEXT_SCORE)}
        if not sort and self.default_sorting:
            return self.default_sorting
        return sort

    def _find_options(self) -> Dict[str, Any]:
        if self.options.get("allow_disk_use") is not None:
            return {"allow_disk_use": self.options["allow_disk_use"]}
        return {}

    def _aggregate_options(self) -> Dict[str, Any]:
        if self.options.get("allow_disk_use") is not None:
            return {"allowDiskUse": self.options["allow_disk_use"]}
        return {}

    def _stamp_new_document(self, ctx: CrudContext, doc: Mapping[str, Any]) -> Dict[str, Any]:
        """写入审计字段和初始状态"""
        new_doc = dict(doc)
        state = self._checked_state(new_doc.get(__STATE__))

        new_doc[CREATORID] = ctx.user_id
        new_doc[UPDATERID] = ctx.user_id
        new_doc[CREATEDAT] = ctx.now
        new_doc[UPDATEDAT] = ctx.now
        new_doc[__STATE__] = state or self.state_on_insert
        return new_doc

    @staticmethod
    def _checked_state(state: Any) -> Optional[str]:
        """校验调用方在文档中给出的__STATE__，未给出返回None"""
        if not state:
            return None
        state = state_value(state)
        if state not in STATES_FINITE_STATE_MACHINE:
            raise ValidationError(f"Invalid `{__STATE__}`: {state}", field=__STATE__)
        return state

    @staticmethod
    def _stamp_update(ctx: CrudContext, commands: Mapping[str, Any]) -> Dict[str, Any]:
        """复制命令并在$set中写入updaterId/updatedAt"""
        update = _copy_commands(commands)
        set_command = update.setdefault(SETCMD, {})
        set_command[UPDATERID] = ctx.user_id
        set_command[UPDATEDAT] = ctx.now
        return update

    @staticmethod
    def _split_states(raw_states: Any) -> List[str]:
        if isinstance(raw_states, str):
            return [state.strip() for state in raw_states.split(",") if state.strip()]
        return [state_value(state) for state in raw_states]

    @staticmethod
    def _doc_id(doc: Optional[Mapping[str, Any]]) -> Any:
        if doc is None:
            return NO_DOCUMENT_FOUND
        return doc.get(MONGOID, NO_DOCUMENT_FOUND)

    async def _execute_bulk(self, ctx: CrudContext, bulk: UnorderedBulkOperation) -> BulkWriteResult:
        try:
            result = await bulk.execute()
        except BulkWriteFailedError:
            ctx.log.error(f"{bulk.operation_name} operation failed")
            raise

        ctx.log.debug(f"{bulk.operation_name} operation executed", extra={
            "matched_count": result.matched_count,
            "modified_count": result.modified_count,
            "upserted_count": result.upserted_count,
        })
        return result
