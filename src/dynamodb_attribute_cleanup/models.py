from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, TypeAlias

from boto3.dynamodb.types import Binary
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AttributeValue: TypeAlias = (
    str
    | Decimal
    | bool
    | bytes
    | Binary
    | list[Any]
    | dict[str, Any]
    | set[Any]
    | None
)
Record: TypeAlias = Mapping[str, AttributeValue]
IdentityKey: TypeAlias = dict[str, Any]


class TableIdentity(BaseModel):
    """Key schema of the table being cleaned."""

    model_config = ConfigDict(frozen=True)

    partition_key: str = Field(min_length=1)
    sort_key: str | None = None

    @model_validator(mode="after")
    def _validate_distinct_keys(self) -> TableIdentity:
        if self.sort_key is not None and self.sort_key == self.partition_key:
            raise ValueError("sort key must differ from partition key")
        return self


class CleanupConfig(BaseModel):
    """Immutable run configuration handed to every pipeline component."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(min_length=1)
    identity: TableIdentity
    fields_to_remove: tuple[str, ...]
    batch_size: int = Field(default=25, ge=1, le=25)
    max_retries: int = Field(default=5, ge=0)
    initial_delay_ms: int = Field(default=100, gt=0)

    @field_validator("fields_to_remove")
    @classmethod
    def _validate_fields(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("fields_to_remove must not be empty")
        if any(not name.strip() for name in value):
            raise ValueError("fields_to_remove must not contain blank names")
        if len(set(value)) != len(value):
            raise ValueError("fields_to_remove must not contain duplicates")
        return value


class PendingChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: IdentityKey
    fields: frozenset[str]

    @field_validator("fields")
    @classmethod
    def _validate_fields(cls, value: frozenset[str]) -> frozenset[str]:
        if not value:
            raise ValueError("PendingChange requires at least one field to remove")
        return value


class Outcome(BaseModel):
    """Result of one record's mutation; reason is set only on failure."""

    model_config = ConfigDict(frozen=True)

    key: IdentityKey
    succeeded: bool
    attempts: int = Field(ge=0)
    reason: str | None = None

    @classmethod
    def success(cls, *, key: IdentityKey, attempts: int) -> Outcome:
        return cls(key=key, succeeded=True, attempts=attempts)

    @classmethod
    def failure(cls, *, key: IdentityKey, attempts: int, reason: str) -> Outcome:
        return cls(key=key, succeeded=False, attempts=attempts, reason=reason)

    @model_validator(mode="after")
    def _validate_reason(self) -> Outcome:
        if self.succeeded and self.reason is not None:
            raise ValueError("successful outcome cannot carry a failure reason")
        if not self.succeeded and not self.reason:
            raise ValueError("failed outcome requires a reason")
        return self


class RunSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_scanned: int = Field(ge=0)
    total_needing_update: int = Field(ge=0)
    succeeded: int = Field(ge=0)
    failed: int = Field(ge=0)

    @model_validator(mode="after")
    def _validate_counts(self) -> RunSummary:
        if self.succeeded + self.failed != self.total_needing_update:
            raise ValueError(
                "succeeded + failed must equal total_needing_update "
                f"({self.succeeded} + {self.failed} != {self.total_needing_update})"
            )
        if self.total_needing_update > self.total_scanned:
            raise ValueError(
                "total_needing_update cannot exceed total_scanned "
                f"({self.total_needing_update} > {self.total_scanned})"
            )
        return self

    @property
    def skipped(self) -> int:
        return self.total_scanned - self.total_needing_update
