"""
Load-more pagination over a fake orders API.

Run with: python examples/load_more.py
"""

import asyncio
import logging
from typing import Any

from pagewise import (
    LoadMoreTrigger,
    OriginalResponse,
    PageToken,
    PaginationState,
    default_state,
    load_and_expand,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

ORDERS = [{"id": n, "status": "open" if n % 3 else "shipped"} for n in range(1, 24)]


async def fetch_orders(state: PaginationState[dict[str, Any]]) -> OriginalResponse[dict[str, Any]]:
    """Pretends to call GET {url_path}?pageToken=...&pageSize=... on a remote API."""
    await asyncio.sleep(0.05)

    status = (state.url_query or {}).get("status")
    matching = [o for o in ORDERS if status is None or o["status"] == status]

    offset = int(state.next_page_token or 0)
    page_size = state.page_size or 10
    page = matching[offset : offset + page_size]
    next_offset = offset + len(page)

    # The API answers in camelCase
    return OriginalResponse.model_validate(
        {
            "nextPageToken": PageToken(str(next_offset)) if next_offset < len(matching) else "",
            "result": page,
            "totalSize": len(matching),
        }
    )


async def main() -> None:
    trigger = LoadMoreTrigger()
    state = default_state("/v1/orders", url_query={"pageSize": 5, "status": "open"})

    async for snapshot in load_and_expand(fetch_orders, state, trigger):
        ids = [order["id"] for order in snapshot.result]
        print(f"page {snapshot.next_page - 1}: {len(ids)}/{snapshot.total_size} orders -> {ids}")

        # An impatient user double-clicks "load more"; the second click is dropped
        trigger.load_more()
        trigger.load_more()

    print("No more orders.")


if __name__ == "__main__":
    asyncio.run(main())
