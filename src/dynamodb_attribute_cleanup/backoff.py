from __future__ import annotations

import random

MAX_BACKOFF_DELAY_MS = 30_000.0
MAX_JITTER_MS = 1_000.0


def calculate_backoff_delay_ms(attempt: int, base_delay_ms: float) -> float:
    """Exponential backoff with additive jitter, capped at 30 seconds."""
    if attempt < 0:
        raise ValueError("attempt must be >= 0")
    if base_delay_ms <= 0:
        raise ValueError("base_delay_ms must be > 0")

    exponential = base_delay_ms * (2**attempt)
    return min(exponential + random.uniform(0, MAX_JITTER_MS), MAX_BACKOFF_DELAY_MS)
