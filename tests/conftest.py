"""
Shared pytest fixtures and configuration for pagewise tests.

This module provides common fixtures used across unit and integration tests,
including seed states, in-memory paged sources and load-more triggers.
"""

from typing import Any

import pytest

from pagewise import LoadMoreTrigger, OriginalResponse, PageToken, PaginationState
from tests.helpers.paged_source import PagedSource


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with in-memory collaborators")
    config.addinivalue_line("markers", "integration: End-to-end load-more sessions")


@pytest.fixture
def initial_state() -> PaginationState[Any]:
    """Seed state on page 1 with a page size of 2."""
    return PaginationState[Any](url_path="/v1/letters", page_size=2)


@pytest.fixture
def two_pages() -> list[OriginalResponse[Any]]:
    """
    A full first page followed by a short last page.

    With page_size=2 the first page leaves has_more=True, the second ends it.
    """
    return [
        OriginalResponse[Any](next_page_token=PageToken("tok1"), result=["a", "b"], total_size=5),
        OriginalResponse[Any](next_page_token=PageToken(""), result=["c"], total_size=5),
    ]


@pytest.fixture
def source(two_pages) -> PagedSource:
    """Paged source that resolves immediately."""
    return PagedSource(two_pages)


@pytest.fixture
def held_source(two_pages) -> PagedSource:
    """Paged source whose fetches stay in flight until release() is called."""
    return PagedSource(two_pages, hold=True)


@pytest.fixture
def empty_source() -> PagedSource:
    """Paged source that always answers with an empty last page."""
    return PagedSource(
        [OriginalResponse[Any](next_page_token=PageToken(""), result=[], total_size=0)]
    )


@pytest.fixture
def trigger() -> LoadMoreTrigger:
    """Caller-driven load-more trigger."""
    return LoadMoreTrigger()
