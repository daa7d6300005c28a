from __future__ import annotations

import asyncio
import logging

from dynamodb_attribute_cleanup.backoff import calculate_backoff_delay_ms
from dynamodb_attribute_cleanup.errors import StoreError
from dynamodb_attribute_cleanup.models import Outcome, PendingChange
from dynamodb_attribute_cleanup.store import TableStore

LOGGER = logging.getLogger(__name__)


class RetryingMutator:
    """Removes one record's fields, retrying only on rate limiting.

    Failures are reported as failed outcomes and never raised, so one bad
    record cannot abort the batch it belongs to.
    """

    def __init__(self, *, store: TableStore, max_retries: int, initial_delay_ms: int) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if initial_delay_ms <= 0:
            raise ValueError("initial_delay_ms must be > 0")

        self._store = store
        self._max_retries = max_retries
        self._initial_delay_ms = initial_delay_ms

    async def apply(self, change: PendingChange) -> Outcome:
        field_names = sorted(change.fields)
        attempt = 0

        while attempt < self._max_retries:
            try:
                await self._store.remove_fields(change.key, field_names)
                return Outcome.success(key=change.key, attempts=attempt + 1)
            except StoreError as exc:
                if exc.is_rate_limited and attempt < self._max_retries - 1:
                    delay_ms = calculate_backoff_delay_ms(attempt, self._initial_delay_ms)
                    LOGGER.warning(
                        "mutation_throttled",
                        extra={
                            "key": change.key,
                            "attempt": attempt + 1,
                            "delay_ms": round(delay_ms),
                            "error_code": exc.code,
                        },
                    )
                    await asyncio.sleep(delay_ms / 1000.0)
                    attempt += 1
                    continue

                reason = "retry_exhausted" if exc.is_rate_limited else "store_error"
                LOGGER.error(
                    "mutation_failed",
                    extra={
                        "key": change.key,
                        "attempts": attempt + 1,
                        "reason": reason,
                        "error_code": exc.code,
                        "error_detail": exc.detail,
                    },
                )
                return Outcome.failure(
                    key=change.key,
                    attempts=attempt + 1,
                    reason=f"{reason}: {exc.detail}",
                )
            except Exception as exc:
                LOGGER.exception(
                    "mutation_failed",
                    extra={"key": change.key, "attempts": attempt + 1, "reason": "unexpected_error"},
                )
                return Outcome.failure(
                    key=change.key,
                    attempts=attempt + 1,
                    reason=f"unexpected_error: {exc}",
                )

        LOGGER.error(
            "mutation_failed",
            extra={"key": change.key, "attempts": 0, "reason": "no_attempts_allowed"},
        )
        return Outcome.failure(key=change.key, attempts=0, reason="no_attempts_allowed")
