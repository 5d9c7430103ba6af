"""
查询组装测试
作者: lx
日期: 2025-06-23
"""
import pytest

from statecrud.database.crud.query_resolver import resolve_mongo_query
from statecrud.exceptions import BadRequestError
from utils.stub_query_parser import StubQueryParser


class TestResolveMongoQuery:

    def test_no_conditions_gives_empty_query(self, query_parser):
        assert resolve_mongo_query(query_parser, None, None, {}) == {}
        assert query_parser.calls[0][0] == "parse_and_cast"

    def test_combines_query_params_and_acl(self, query_parser):
        query = resolve_mongo_query(
            query_parser,
            '{"pages": {"$gt": "100"}}',
            {"owner": "user-1"},
            {"genre": "sf"},
        )

        assert query == {"$and": [
            {"pages": {"$gt": 100}},
            {"genre": "sf"},
            {"owner": "user-1"},
        ]}

    def test_acl_rows_list_is_wrapped(self, query_parser):
        query = resolve_mongo_query(query_parser, None, '[{"owner": "a"}, {"team": "b"}]', None)
        assert query == {"$and": [{"$and": [{"owner": "a"}, {"team": "b"}]}]}

    def test_empty_acl_rows_are_ignored(self, query_parser):
        assert resolve_mongo_query(query_parser, None, "[]", {"genre": "sf"}) == {"$and": [{"genre": "sf"}]}

    def test_text_query_uses_text_parser(self, query_parser):
        resolve_mongo_query(query_parser, '{"$text": {"$search": "dune"}}', None, None, text_query=True)
        assert query_parser.calls[0][0] == "parse_and_cast_text_search_query"

    def test_invalid_json(self, query_parser):
        with pytest.raises(BadRequestError):
            resolve_mongo_query(query_parser, "{not json", None, None)

    def test_parser_errors_become_bad_request(self):
        parser = StubQueryParser(fail_with=ValueError("pages must be a number"))
        with pytest.raises(BadRequestError) as exc_info:
            resolve_mongo_query(parser, '{"pages": "x"}', None, None)
        assert exc_info.value.message == "pages must be a number"
        assert exc_info.value.code == 400
