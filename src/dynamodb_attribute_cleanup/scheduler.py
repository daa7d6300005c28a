from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterator, Sequence
from typing import TypeVar

from dynamodb_attribute_cleanup.models import PendingChange, RunSummary
from dynamodb_attribute_cleanup.mutator import RetryingMutator
from dynamodb_attribute_cleanup.progress import ProgressAggregator

LOGGER = logging.getLogger(__name__)

_BATCH_PACING_S = 0.2

T = TypeVar("T")


def partition_batches(items: Sequence[T], batch_size: int) -> Iterator[Sequence[T]]:
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")

    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


class BatchScheduler:
    """Runs mutations one batch at a time, each batch fully concurrent."""

    def __init__(self, *, mutator: RetryingMutator, batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")

        self._mutator = mutator
        self._batch_size = batch_size

    async def run(
        self,
        changes: Sequence[PendingChange],
        *,
        total_scanned: int,
        aggregator: ProgressAggregator | None = None,
    ) -> RunSummary:
        if aggregator is None:
            aggregator = ProgressAggregator()

        batch_count = math.ceil(len(changes) / self._batch_size)
        LOGGER.info(
            "batches_planned",
            extra={
                "pending_count": len(changes),
                "batch_count": batch_count,
                "batch_size": self._batch_size,
            },
        )

        for batch_index, batch in enumerate(partition_batches(changes, self._batch_size), start=1):
            LOGGER.info(
                "batch_started",
                extra={
                    "batch_index": batch_index,
                    "batch_count": batch_count,
                    "batch_items": len(batch),
                },
            )

            outcomes = await asyncio.gather(*(self._mutator.apply(change) for change in batch))
            aggregator.record_all(outcomes)

            if batch_index < batch_count:
                await asyncio.sleep(_BATCH_PACING_S)

            LOGGER.info(
                "batch_completed",
                extra={
                    "batch_index": batch_index,
                    "batch_count": batch_count,
                    "succeeded": aggregator.succeeded,
                    "failed": aggregator.failed,
                },
            )

        return aggregator.finalize(total_scanned=total_scanned, total_needing_update=len(changes))
