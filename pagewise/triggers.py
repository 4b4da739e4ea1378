"""
Trigger sources for pagewise.

An expansion engine accepts any async iterable as its trigger source; this
module provides the caller-driven one behind a typical "load more" button.
"""

import asyncio
from dataclasses import dataclass

from .exceptions import EngineStateError


@dataclass(frozen=True)
class _SourceEnd:
    error: BaseException | None = None


class LoadMoreTrigger:
    """
    Async iterable of payload-less "load more" signals.

    Signals are delivered in FIFO order to a single consumer. Closing the
    trigger (or failing it) still delivers every signal queued before that.

    Usage:
        trigger = LoadMoreTrigger()
        async for state in load_and_expand(fetch_page, default_state("/v1/orders"), trigger):
            render(state.result)
            ...
            trigger.load_more()  # e.g. from a button handler
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[_SourceEnd | None] = asyncio.Queue()
        self._closed = False
        self._end: _SourceEnd | None = None

    @property
    def closed(self) -> bool:
        """Returns True once close() or fail() has been called."""
        return self._closed

    def load_more(self) -> None:
        """Requests the next page."""
        if self._closed:
            raise EngineStateError("Cannot signal load_more() on a closed trigger")
        self._queue.put_nowait(None)

    def close(self) -> None:
        """Ends the trigger source normally."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_SourceEnd())

    def fail(self, error: BaseException) -> None:
        """Ends the trigger source with an error."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_SourceEnd(error=error))

    def __aiter__(self) -> "LoadMoreTrigger":
        return self

    async def __anext__(self) -> None:
        if self._end is None:
            item = await self._queue.get()
            if item is None:
                return None
            self._end = item

        if self._end.error is not None:
            raise self._end.error
        raise StopAsyncIteration
