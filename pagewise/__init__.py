from .config import ExpansionOptions
from .engine import EnginePhase, ExpansionEngine, load_and_expand
from .exceptions import (
    EngineStateError,
    PageFetchError,
    PagewiseError,
    TriggerSourceError,
)
from .state import (
    EMPTY_PAGE_TOKEN,
    Accumulator,
    OriginalResponse,
    PageToken,
    PaginationState,
    accumulate_by_concat,
    accumulate_by_replace,
    default_state,
)
from .triggers import LoadMoreTrigger

__all__ = [
    # State model
    "PageToken",
    "EMPTY_PAGE_TOKEN",
    "PaginationState",
    "OriginalResponse",
    "Accumulator",
    "accumulate_by_concat",
    "accumulate_by_replace",
    "default_state",
    # Engine
    "ExpansionEngine",
    "EnginePhase",
    "ExpansionOptions",
    "LoadMoreTrigger",
    "load_and_expand",
    # Exceptions
    "PagewiseError",
    "PageFetchError",
    "TriggerSourceError",
    "EngineStateError",
]
