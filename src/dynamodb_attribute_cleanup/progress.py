from __future__ import annotations

import logging
from collections.abc import Iterable

from dynamodb_attribute_cleanup.models import Outcome, RunSummary

LOGGER = logging.getLogger(__name__)


class ProgressAggregator:
    """Running success/failure counts for one cleanup run."""

    def __init__(self) -> None:
        self._succeeded = 0
        self._failed = 0

    @property
    def succeeded(self) -> int:
        return self._succeeded

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def processed(self) -> int:
        return self._succeeded + self._failed

    def record(self, outcome: Outcome) -> None:
        if outcome.succeeded:
            self._succeeded += 1
        else:
            self._failed += 1

    def record_all(self, outcomes: Iterable[Outcome]) -> None:
        for outcome in outcomes:
            self.record(outcome)

    def finalize(self, *, total_scanned: int, total_needing_update: int) -> RunSummary:
        summary = RunSummary(
            total_scanned=total_scanned,
            total_needing_update=total_needing_update,
            succeeded=self._succeeded,
            failed=self._failed,
        )
        LOGGER.info(
            "run_summary",
            extra={
                "total_scanned": summary.total_scanned,
                "total_needing_update": summary.total_needing_update,
                "succeeded": summary.succeeded,
                "failed": summary.failed,
                "skipped": summary.skipped,
            },
        )
        return summary
