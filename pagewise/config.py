from dataclasses import dataclass

from .state import Accumulator, accumulate_by_concat


@dataclass
class ExpansionOptions:
    """
    Configuration for an expansion session.
    Consumed by load_and_expand() when building the engine.
    """

    # How each fetched page is folded into the previous snapshot
    accumulator: Accumulator = accumulate_by_concat

    # Fire the implicit first trigger so the first page loads without caller action.
    # Disable only for trigger sources whose first item already is that trigger.
    auto_start: bool = True
