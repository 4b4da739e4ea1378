from collections.abc import Generator
from contextlib import contextmanager


class PagewiseError(Exception):
    """Base exception for all pagewise errors."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class PageFetchError(PagewiseError):
    """Raised when the stepping function fails to fetch a page."""

    def __init__(self, page: int, original_error: BaseException | None = None) -> None:
        msg = f"Fetching page {page} failed"
        if original_error is not None:
            msg += f": {original_error!r}"
        super().__init__(msg, original_error)
        self.page = page


class TriggerSourceError(PagewiseError):
    """Raised when the trigger source itself fails."""

    def __init__(self, original_error: BaseException | None = None) -> None:
        msg = "Trigger source failed"
        if original_error is not None:
            msg += f": {original_error!r}"
        super().__init__(msg, original_error)


class EngineStateError(PagewiseError):
    """Raised when an engine or trigger is used outside its lifecycle."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@contextmanager
def wrap_fetch_errors(page: int) -> Generator[None, None, None]:
    """
    Context manager that catches errors raised while fetching a page
    and raises them as PageFetchError.

    PagewiseError subclasses pass through untouched, and cancellation
    (a BaseException) is never wrapped.

    Args:
        page: The 1-based number of the page being fetched

    Usage:
        with wrap_fetch_errors(page=state.next_page):
            response = await step(state)
    """
    try:
        yield
    except PagewiseError:
        raise
    except Exception as e:
        raise PageFetchError(page=page, original_error=e) from e
