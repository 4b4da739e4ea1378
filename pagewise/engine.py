"""
Expansion engine for pagewise.

The engine turns a sequence of "load more" triggers into a sequence of
accumulated pagination snapshots, calling the stepping function for one page
at a time. A trigger that arrives while a fetch is in flight is dropped.
"""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Mapping
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from ._logging import logger, redact_token
from .config import ExpansionOptions
from .exceptions import (
    EngineStateError,
    PageFetchError,
    PagewiseError,
    TriggerSourceError,
    wrap_fetch_errors,
)
from .state import Accumulator, OriginalResponse, PaginationState, accumulate_by_concat

T = TypeVar("T")

Step = Callable[[PaginationState[Any]], Awaitable[OriginalResponse[Any] | Mapping[str, Any]]]


class EnginePhase(str, Enum):
    """Lifecycle phase of an ExpansionEngine."""

    IDLE = "idle"
    FETCHING = "fetching"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (EnginePhase.COMPLETED, EnginePhase.FAILED)


@dataclass(frozen=True)
class _SessionEnd:
    error: PagewiseError | None = None


class ExpansionEngine(Generic[T]):
    """
    State machine coordinating triggers, the stepping function and accumulation.

    Every input event (trigger(), complete(), fail() and fetch settlement) is
    handled synchronously on the event loop, so the phase doubles as the
    in-flight guard: at most one stepping-function call is outstanding.

    A session is single-use. Snapshots are read through `async for` (or
    states()) by a single consumer.
    """

    def __init__(
        self,
        step: Step,
        init_state: PaginationState[T],
        *,
        accumulator: Accumulator = accumulate_by_concat,
    ) -> None:
        self._step = step
        self._accumulator = accumulator

        # Internal state of the session
        self._state = init_state
        self._phase = EnginePhase.IDLE
        self._completion_pending = False

        self._outbox: asyncio.Queue[PaginationState[T] | _SessionEnd] = asyncio.Queue()
        self._fetch_task: asyncio.Task[None] | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._run_started = False
        self._consuming = False

    # --- READ-ONLY VIEW ---

    @property
    def state(self) -> PaginationState[T]:
        """The latest accumulated snapshot."""
        return self._state

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def is_fetching(self) -> bool:
        return self._phase is EnginePhase.FETCHING

    def _log_context(self) -> dict[str, Any]:
        return {
            "phase": self._phase.value,
            "page": self._state.next_page,
            "token_hash": redact_token(self._state.next_page_token),
        }

    # --- INPUT EVENTS ---

    def trigger(self) -> bool:
        """
        Handles one "load more" signal.

        Returns:
            True if a fetch was launched. False when the signal was dropped
            (fetch in flight), ended the session (no more pages) or arrived
            after the session ended.
        """
        if self._phase.is_terminal:
            return False

        if self._phase is EnginePhase.FETCHING:
            logger.debug("Trigger dropped, fetch in flight", extra=self._log_context())
            return False

        if not self._state.has_more:
            logger.debug("Trigger received with no more pages", extra=self._log_context())
            self._finish(EnginePhase.COMPLETED)
            return False

        loop = asyncio.get_running_loop()

        # Set the guard before anything can yield to the loop
        self._phase = EnginePhase.FETCHING
        logger.info("Launching page fetch", extra=self._log_context())
        self._fetch_task = loop.create_task(self._fetch(self._state))
        return True

    def complete(self) -> None:
        """
        Handles normal completion of the trigger source.
        A fetch already in flight is still delivered before the session completes.
        """
        if self._phase.is_terminal:
            return
        if self._phase is EnginePhase.FETCHING:
            logger.debug("Completion deferred until fetch settles", extra=self._log_context())
            self._completion_pending = True
            return
        self._finish(EnginePhase.COMPLETED)

    def fail(self, error: BaseException) -> None:
        """Handles an error raised by the trigger source. Ends the session at once."""
        if self._phase.is_terminal:
            return
        if isinstance(error, PagewiseError):
            wrapped = error
        else:
            wrapped = TriggerSourceError(original_error=error)
            wrapped.__cause__ = error
        self._finish(EnginePhase.FAILED, wrapped)

    async def _fetch(self, state: PaginationState[T]) -> None:
        page = state.next_page
        try:
            with wrap_fetch_errors(page=page):
                response = await self._step(state)
                if not isinstance(response, OriginalResponse):
                    response = OriginalResponse[Any].model_validate(response)
                new_state = self._accumulator(state, response)
        except asyncio.CancelledError as e:
            # Cancelled under the stepping function's own contract: end the session, keep cancelling
            if self._release_guard():
                error = PageFetchError(page=page, original_error=e)
                error.__cause__ = e
                self._finish(EnginePhase.FAILED, error)
            raise
        except PagewiseError as e:
            if self._release_guard():
                self._finish(EnginePhase.FAILED, e)
        else:
            if self._release_guard():
                self._accept(new_state)
        finally:
            if self._phase is EnginePhase.FETCHING:
                self._phase = EnginePhase.IDLE

    def _release_guard(self) -> bool:
        """Clears the in-flight guard. Returns False if the session ended meanwhile."""
        if self._phase is EnginePhase.FETCHING:
            self._phase = EnginePhase.IDLE
        if self._phase.is_terminal:
            logger.debug("Discarding fetch that settled after the session ended")
            return False
        return True

    def _accept(self, new_state: PaginationState[T]) -> None:
        self._state = new_state
        logger.info(
            "Page accumulated",
            extra={
                **self._log_context(),
                "items": len(new_state.result),
                "total_size": new_state.total_size,
                "has_more": new_state.has_more,
            },
        )
        self._outbox.put_nowait(new_state)

        if self._completion_pending:
            self._finish(EnginePhase.COMPLETED)

    def _finish(self, phase: EnginePhase, error: PagewiseError | None = None) -> None:
        self._phase = phase
        self._completion_pending = False
        if error is None:
            logger.info("Pagination session completed", extra=self._log_context())
        else:
            logger.debug("Pagination session failed", extra=self._log_context())
        self._outbox.put_nowait(_SessionEnd(error=error))

    # --- TRIGGER SOURCE ---

    async def run(
        self, triggers: AsyncIterable[Any] | None = None, *, auto_start: bool = True
    ) -> None:
        """
        Pumps a trigger source into the engine until it ends or the session does.

        Args:
            triggers: Async iterable of "load more" signals (payloads are ignored).
                      None behaves as an empty source.
            auto_start: Fire the implicit first trigger before reading the source.
        """
        if self._run_started:
            raise EngineStateError("run() may only be called once per engine")
        self._run_started = True

        if auto_start:
            self.trigger()

        if triggers is None:
            self.complete()
            return

        try:
            async for _ in triggers:
                if self._phase.is_terminal:
                    return
                self.trigger()
        except Exception as e:
            self.fail(e)
        else:
            self.complete()

    def start(
        self, triggers: AsyncIterable[Any] | None = None, *, auto_start: bool = True
    ) -> "asyncio.Task[None]":
        """Runs the trigger pump in a background task owned by the engine."""
        if self._pump_task is not None:
            raise EngineStateError("Engine has already been started")
        self._pump_task = asyncio.get_running_loop().create_task(
            self.run(triggers, auto_start=auto_start)
        )
        return self._pump_task

    async def aclose(self) -> None:
        """
        Releases the trigger source so no further fetches are launched.
        A fetch already in flight is left to its own cancellation contract.
        """
        if self._pump_task is not None and not self._pump_task.done():
            self._pump_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._pump_task
        if not self._phase.is_terminal:
            self._finish(EnginePhase.COMPLETED)

    # --- OUTPUT ---

    async def states(self) -> AsyncIterator[PaginationState[T]]:
        """
        Yields one snapshot per accumulated page until the session ends.

        Raises:
            PageFetchError: If the stepping function failed
            TriggerSourceError: If the trigger source failed
        """
        if self._consuming:
            raise EngineStateError("ExpansionEngine supports a single consumer")
        self._consuming = True

        while True:
            item = await self._outbox.get()
            if isinstance(item, _SessionEnd):
                if item.error is not None:
                    raise item.error
                return
            yield item

    def __aiter__(self) -> AsyncIterator[PaginationState[T]]:
        return self.states()


async def load_and_expand(
    step: Step,
    init_state: PaginationState[T],
    load_more: AsyncIterable[Any] | None = None,
    *,
    accumulator: Accumulator | None = None,
    options: ExpansionOptions | None = None,
) -> AsyncIterator[PaginationState[T]]:
    """
    Loads the first page automatically and one more page per load_more signal.

    Args:
        step: Async function fetching the page described by the given state
        init_state: Seed state, usually from default_state()
        load_more: Trigger source; None loads the first page only
        accumulator: Overrides options.accumulator
        options: Session configuration

    Yields:
        The accumulated state after every fetched page.

    Usage:
        trigger = LoadMoreTrigger()
        async for state in load_and_expand(fetch_page, default_state("/v1/orders"), trigger):
            ...
    """
    options = options or ExpansionOptions()
    engine = ExpansionEngine(step, init_state, accumulator=accumulator or options.accumulator)
    engine.start(load_more, auto_start=options.auto_start)
    try:
        async for state in engine.states():
            yield state
    finally:
        await engine.aclose()
