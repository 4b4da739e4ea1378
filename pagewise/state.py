"""
Pagination state model for pagewise.

This module holds the immutable snapshot of pagination progress and the pure
accumulator functions that fold one fetched page into the previous snapshot.
"""

from collections.abc import Callable
from typing import Any, Generic, NewType, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Opaque continuation cursor handed out by the server. Never interpreted.
PageToken = NewType("PageToken", str)

EMPTY_PAGE_TOKEN = PageToken("")


class PaginationState(BaseModel, Generic[T]):
    """
    Snapshot of one pagination session.

    Instances are frozen and replaced wholesale on every update. Fields accept
    both snake_case names and the camelCase aliases used on the wire.

    Attributes:
        url_path: Resource collection being paged (opaque)
        page_size: Requested page size, used to infer whether more pages remain
        url_query: Extra filter/sort parameters forwarded to the stepping function
        next_page_token: Token to request next (EMPTY_PAGE_TOKEN when unknown)
        total_size: Last reported total item count, if any
        result: Items accumulated across all pages fetched so far
        next_page: 1-based number of the next page about to be fetched
        has_more: Whether a further fetch is warranted
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    url_path: str
    page_size: int | None = None
    url_query: dict[str, Any] | None = None

    next_page_token: PageToken = EMPTY_PAGE_TOKEN
    total_size: int | None = None
    result: list[T] = Field(default_factory=list)

    next_page: int = Field(default=1, ge=1)
    has_more: bool = True


class OriginalResponse(BaseModel, Generic[T]):
    """
    Raw output of one page fetch.

    Attributes:
        next_page_token: Continuation token for the following page
        result: Items of this page only
        total_size: Total item count, if the source reports one
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    next_page_token: PageToken = EMPTY_PAGE_TOKEN
    result: list[T] = Field(default_factory=list)
    total_size: int | None = None


Accumulator = Callable[[PaginationState[Any], OriginalResponse[Any]], PaginationState[Any]]


def _infer_has_more(state: PaginationState[Any], response: OriginalResponse[Any]) -> bool:
    # A full page with a continuation token means the server probably has more.
    return bool(response.next_page_token) and len(response.result) == state.page_size


def accumulate_by_concat(
    state: PaginationState[T], response: OriginalResponse[T]
) -> PaginationState[T]:
    """
    Default accumulator: appends the page's items after everything fetched so far.

    total_size and next_page_token are overwritten by the response (last seen
    wins) and next_page advances by one. Neither input is mutated.
    """
    return state.model_copy(
        update={
            "total_size": response.total_size,
            "next_page_token": response.next_page_token,
            "result": [*state.result, *response.result],
            "next_page": state.next_page + 1,
            "has_more": _infer_has_more(state, response),
        }
    )


def accumulate_by_replace(
    state: PaginationState[T], response: OriginalResponse[T]
) -> PaginationState[T]:
    """Alternative accumulator that keeps only the latest page (replace-on-refresh)."""
    return accumulate_by_concat(state, response).model_copy(
        update={"result": list(response.result)}
    )


def default_state(
    url_path: str,
    *,
    page_size: int | None = None,
    url_query: dict[str, Any] | None = None,
) -> PaginationState[Any]:
    """
    Builds the seed state of a pagination session.

    Args:
        url_path: Resource collection to page through
        page_size: Requested page size. Falsy values leave it unset.
        url_query: Extra query parameters. A "pageSize" entry is moved out of
                   the query and used as the page size unless one was given.

    Returns:
        A state on page 1 with has_more=True and no results.

    Usage:
        state = default_state("/v1/orders", url_query={"pageSize": 20, "status": "open"})
        # state.page_size == 20, state.url_query == {"status": "open"}
    """
    fields: dict[str, Any] = {"url_path": url_path}
    if page_size:
        fields["page_size"] = page_size

    if url_query is not None:
        query = dict(url_query)
        query_page_size = query.pop("pageSize", None)
        fields["url_query"] = query
        if "page_size" not in fields and query_page_size:
            fields["page_size"] = query_page_size

    return PaginationState(**fields)
