from __future__ import annotations

from enum import Enum


class StoreErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


class StoreError(Exception):
    """Failure reported by a table store, classified at the adapter boundary."""

    def __init__(self, *, kind: StoreErrorKind, detail: str, code: str | None = None) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.code = code

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is StoreErrorKind.RATE_LIMITED


class ConfigInvalidError(ValueError):
    """Raised before any store access when the cleanup configuration is unusable."""


class MissingIdentityFieldError(KeyError):
    def __init__(self, field_name: str) -> None:
        super().__init__(field_name)
        self.field_name = field_name

    def __str__(self) -> str:
        return f"Record is missing identity field {self.field_name!r}"
