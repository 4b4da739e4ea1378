"""
Unit tests for the pagination state model.

Tests PaginationState/OriginalResponse construction and the pure accumulators.
"""

from typing import Any

import pytest
from pydantic import ValidationError

from pagewise.state import (
    EMPTY_PAGE_TOKEN,
    OriginalResponse,
    PageToken,
    PaginationState,
    accumulate_by_concat,
    accumulate_by_replace,
    default_state,
)


def make_response(token: str, items: list[Any], total: int | None = None) -> OriginalResponse[Any]:
    return OriginalResponse[Any](next_page_token=PageToken(token), result=items, total_size=total)


@pytest.mark.unit
class TestPaginationState:
    """Test the PaginationState model."""

    def test_defaults(self):
        state = PaginationState[Any](url_path="/v1/items")

        assert state.url_path == "/v1/items"
        assert state.page_size is None
        assert state.url_query is None
        assert state.next_page_token == EMPTY_PAGE_TOKEN
        assert state.total_size is None
        assert state.result == []
        assert state.next_page == 1
        assert state.has_more is True

    def test_accepts_camel_case_aliases(self):
        """Test building a state from the wire (camelCase) representation."""
        state = PaginationState.model_validate(
            {
                "urlPath": "/v1/items",
                "pageSize": 10,
                "nextPageToken": "abc",
                "totalSize": 42,
                "nextPage": 3,
                "hasMore": False,
            }
        )

        assert state.page_size == 10
        assert state.next_page_token == "abc"
        assert state.total_size == 42
        assert state.next_page == 3
        assert state.has_more is False

    def test_is_frozen(self):
        state = PaginationState[Any](url_path="/v1/items")

        with pytest.raises(ValidationError):
            state.has_more = False  # type: ignore[misc]

    def test_next_page_is_one_based(self):
        with pytest.raises(ValidationError):
            PaginationState[Any](url_path="/v1/items", next_page=0)


@pytest.mark.unit
class TestOriginalResponse:
    """Test the OriginalResponse model."""

    def test_from_camel_case_payload(self):
        response = OriginalResponse.model_validate(
            {"nextPageToken": "tok", "result": [1, 2], "totalSize": 9}
        )

        assert response.next_page_token == "tok"
        assert response.result == [1, 2]
        assert response.total_size == 9

    def test_total_size_is_optional(self):
        response = OriginalResponse.model_validate({"nextPageToken": "", "result": []})
        assert response.total_size is None


@pytest.mark.unit
class TestAccumulateByConcat:
    """Test the default append accumulator."""

    def test_appends_page_after_previous_items(self):
        state = PaginationState[Any](url_path="/v1/items", page_size=2, result=["a", "b"])

        new_state = accumulate_by_concat(state, make_response("t", ["c", "d"]))

        assert new_state.result == ["a", "b", "c", "d"]
        assert len(new_state.result) == len(state.result) + 2

    def test_does_not_mutate_inputs(self):
        state = PaginationState[Any](url_path="/v1/items", page_size=2, result=["a"])
        response = make_response("t", ["b"])

        new_state = accumulate_by_concat(state, response)

        assert new_state is not state
        assert state.result == ["a"]
        assert state.next_page == 1
        assert response.result == ["b"]

    def test_advances_next_page_by_one(self):
        state = PaginationState[Any](url_path="/v1/items", next_page=4)
        assert accumulate_by_concat(state, make_response("", [])).next_page == 5

    def test_overwrites_token_and_total_size(self):
        state = PaginationState[Any](
            url_path="/v1/items", next_page_token=PageToken("old"), total_size=10
        )

        new_state = accumulate_by_concat(state, make_response("new", [], total=None))

        assert new_state.next_page_token == "new"
        assert new_state.total_size is None  # last seen wins, even when absent

    def test_keeps_request_fields(self):
        state = default_state("/v1/items", page_size=2, url_query={"sort": "name"})

        new_state = accumulate_by_concat(state, make_response("t", ["a", "b"]))

        assert new_state.url_path == "/v1/items"
        assert new_state.page_size == 2
        assert new_state.url_query == {"sort": "name"}

    @pytest.mark.parametrize(
        ("token", "items", "expected"),
        [
            ("tok", ["a", "b"], True),  # full page, continuation present
            ("tok", ["a"], False),  # short page
            ("", ["a", "b"], False),  # full page but no continuation
            ("", [], False),
            ("tok", ["a", "b", "c"], False),  # oversized page is not "equal"
        ],
    )
    def test_has_more_heuristic(self, token, items, expected):
        state = PaginationState[Any](url_path="/v1/items", page_size=2)
        assert accumulate_by_concat(state, make_response(token, items)).has_more is expected

    @pytest.mark.parametrize("count", [0, 1, 2, 100])
    def test_has_more_is_false_without_page_size(self, count):
        """Without a page size the heuristic can never infer more pages."""
        state = PaginationState[Any](url_path="/v1/items")

        new_state = accumulate_by_concat(state, make_response("tok", list(range(count))))

        assert new_state.has_more is False


@pytest.mark.unit
class TestAccumulateByReplace:
    """Test the replace-on-refresh accumulator."""

    def test_keeps_only_latest_page(self):
        state = PaginationState[Any](url_path="/v1/items", page_size=2, result=["a", "b"])

        new_state = accumulate_by_replace(state, make_response("tok", ["c", "d"], total=4))

        assert new_state.result == ["c", "d"]
        assert new_state.next_page == 2
        assert new_state.has_more is True
        assert new_state.total_size == 4


@pytest.mark.unit
class TestDefaultState:
    """Test the initial state constructor."""

    def test_seed_values(self):
        state = default_state("/v1/items")

        assert state.url_path == "/v1/items"
        assert state.next_page == 1
        assert state.has_more is True
        assert state.result == []
        assert state.next_page_token == EMPTY_PAGE_TOKEN
        assert state.total_size is None
        assert state.page_size is None
        assert state.url_query is None

    def test_page_size(self):
        assert default_state("/v1/items", page_size=25).page_size == 25

    def test_zero_page_size_is_ignored(self):
        assert default_state("/v1/items", page_size=0).page_size is None

    def test_page_size_taken_from_query(self):
        state = default_state("/v1/items", url_query={"pageSize": 20, "status": "open"})

        assert state.page_size == 20
        assert state.url_query == {"status": "open"}

    def test_explicit_page_size_wins_over_query(self):
        state = default_state("/v1/items", page_size=5, url_query={"pageSize": 20})

        assert state.page_size == 5
        assert state.url_query == {}

    def test_query_is_not_mutated(self):
        query = {"pageSize": 20, "status": "open"}

        default_state("/v1/items", url_query=query)

        assert query == {"pageSize": 20, "status": "open"}
