from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from dynamodb_attribute_cleanup.models import IdentityKey


class ScanPage(BaseModel):
    """One page of a table scan; next_key is an opaque continuation token."""

    model_config = ConfigDict(frozen=True)

    items: list[dict[str, Any]]
    next_key: dict[str, Any] | None = None


class TableStore(Protocol):
    async def scan_page(self, start_key: dict[str, Any] | None) -> ScanPage:
        ...

    async def remove_fields(self, key: IdentityKey, field_names: Sequence[str]) -> None:
        ...
