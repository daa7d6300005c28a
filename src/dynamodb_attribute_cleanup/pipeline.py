from __future__ import annotations

import asyncio
import logging

from dynamodb_attribute_cleanup.filtering import build_pending_changes, select_records
from dynamodb_attribute_cleanup.models import CleanupConfig, RunSummary
from dynamodb_attribute_cleanup.mutator import RetryingMutator
from dynamodb_attribute_cleanup.progress import ProgressAggregator
from dynamodb_attribute_cleanup.scanner import PaginatedScanner
from dynamodb_attribute_cleanup.scheduler import BatchScheduler
from dynamodb_attribute_cleanup.store import TableStore

LOGGER = logging.getLogger(__name__)


class CleanupInterrupted(Exception):
    """Shutdown was requested between two pipeline phases."""

    def __init__(self, phase: str) -> None:
        super().__init__(f"Shutdown requested after {phase}")
        self.phase = phase


async def run_cleanup(
    *,
    config: CleanupConfig,
    store: TableStore,
    stop_event: asyncio.Event | None = None,
) -> RunSummary:
    """Scan the table, select records carrying target fields and strip them.

    ``stop_event`` is checked only between phases; a mutation phase that has
    started always runs to completion.
    """
    scanner = PaginatedScanner(store=store, initial_delay_ms=config.initial_delay_ms)
    records = await scanner.scan_all()
    total_scanned = len(records)
    _raise_if_stopped(stop_event, phase="scan")

    if total_scanned == 0:
        LOGGER.info("table_empty")
        return ProgressAggregator().finalize(total_scanned=0, total_needing_update=0)

    selected = select_records(records, config.fields_to_remove)
    changes = build_pending_changes(selected, config.fields_to_remove, config.identity)
    del records, selected

    LOGGER.info(
        "records_selected",
        extra={
            "total_scanned": total_scanned,
            "needing_update": len(changes),
            "skipped": total_scanned - len(changes),
        },
    )
    _raise_if_stopped(stop_event, phase="filter")

    aggregator = ProgressAggregator()
    if not changes:
        LOGGER.info("no_records_need_update")
        return aggregator.finalize(total_scanned=total_scanned, total_needing_update=0)

    mutator = RetryingMutator(
        store=store,
        max_retries=config.max_retries,
        initial_delay_ms=config.initial_delay_ms,
    )
    scheduler = BatchScheduler(mutator=mutator, batch_size=config.batch_size)
    return await scheduler.run(changes, total_scanned=total_scanned, aggregator=aggregator)


def _raise_if_stopped(stop_event: asyncio.Event | None, *, phase: str) -> None:
    if stop_event is not None and stop_event.is_set():
        LOGGER.warning("cleanup_interrupted", extra={"phase": phase})
        raise CleanupInterrupted(phase)
