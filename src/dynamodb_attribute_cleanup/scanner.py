from __future__ import annotations

import asyncio
import logging
from typing import Any

from dynamodb_attribute_cleanup.backoff import calculate_backoff_delay_ms
from dynamodb_attribute_cleanup.errors import StoreError
from dynamodb_attribute_cleanup.models import Record
from dynamodb_attribute_cleanup.store import TableStore

LOGGER = logging.getLogger(__name__)

# Page throttles always back off as if on the first retry.
_SCAN_THROTTLE_ATTEMPT = 1
_PAGE_PACING_S = 0.05


class PaginatedScanner:
    def __init__(self, *, store: TableStore, initial_delay_ms: int) -> None:
        if initial_delay_ms <= 0:
            raise ValueError("initial_delay_ms must be > 0")

        self._store = store
        self._initial_delay_ms = initial_delay_ms

    async def scan_all(self) -> list[Record]:
        items: list[Record] = []
        start_key: dict[str, Any] | None = None
        page_index = 0

        LOGGER.info("scan_started")
        while True:
            try:
                page = await self._store.scan_page(start_key)
            except StoreError as exc:
                if not exc.is_rate_limited:
                    raise

                delay_ms = calculate_backoff_delay_ms(_SCAN_THROTTLE_ATTEMPT, self._initial_delay_ms)
                LOGGER.warning(
                    "scan_throttled",
                    extra={
                        "page_index": page_index + 1,
                        "delay_ms": round(delay_ms),
                        "error_code": exc.code,
                    },
                )
                await asyncio.sleep(delay_ms / 1000.0)
                continue

            page_index += 1
            items.extend(page.items)
            LOGGER.info(
                "scan_page",
                extra={
                    "page_index": page_index,
                    "page_size": len(page.items),
                    "total_items": len(items),
                },
            )

            start_key = page.next_key
            if start_key is None:
                break
            await asyncio.sleep(_PAGE_PACING_S)

        LOGGER.info("scan_completed", extra={"pages": page_index, "total_items": len(items)})
        return items
