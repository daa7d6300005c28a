from __future__ import annotations

import pytest

from dynamodb_attribute_cleanup.backoff import (
    MAX_BACKOFF_DELAY_MS,
    calculate_backoff_delay_ms,
)


@pytest.mark.parametrize("attempt", range(12))
def test_backoff_delay_stays_within_bounds(attempt: int) -> None:
    delay = calculate_backoff_delay_ms(attempt, 100)

    assert delay <= MAX_BACKOFF_DELAY_MS
    assert delay >= min(100 * 2**attempt, MAX_BACKOFF_DELAY_MS)


def test_backoff_jitter_only_adds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("dynamodb_attribute_cleanup.backoff.random.uniform", lambda a, b: 0.0)
    assert calculate_backoff_delay_ms(3, 100) == 800

    monkeypatch.setattr("dynamodb_attribute_cleanup.backoff.random.uniform", lambda a, b: b)
    assert calculate_backoff_delay_ms(3, 100) == 1800


def test_backoff_is_capped_for_large_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("dynamodb_attribute_cleanup.backoff.random.uniform", lambda a, b: 0.0)

    assert calculate_backoff_delay_ms(20, 100) == MAX_BACKOFF_DELAY_MS


def test_backoff_rejects_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        calculate_backoff_delay_ms(-1, 100)

    with pytest.raises(ValueError):
        calculate_backoff_delay_ms(0, 0)
