from __future__ import annotations

from collections.abc import Collection, Iterable

from dynamodb_attribute_cleanup.errors import MissingIdentityFieldError
from dynamodb_attribute_cleanup.models import IdentityKey, PendingChange, Record, TableIdentity


def select_records(records: Iterable[Record], fields: Collection[str]) -> list[Record]:
    """Keep records carrying at least one of ``fields``, preserving order."""
    return [record for record in records if any(name in record for name in fields)]


def compute_removal(fields: Collection[str], record: Record) -> frozenset[str] | None:
    present = frozenset(name for name in fields if name in record)
    return present or None


def build_identity_key(record: Record, identity: TableIdentity) -> IdentityKey:
    if identity.partition_key not in record:
        raise MissingIdentityFieldError(identity.partition_key)

    key: IdentityKey = {identity.partition_key: record[identity.partition_key]}
    if identity.sort_key is not None and record.get(identity.sort_key) is not None:
        key[identity.sort_key] = record[identity.sort_key]
    return key


def build_pending_changes(
    records: Iterable[Record],
    fields: Collection[str],
    identity: TableIdentity,
) -> list[PendingChange]:
    changes: list[PendingChange] = []
    for record in records:
        removal = compute_removal(fields, record)
        if removal is None:
            continue
        changes.append(PendingChange(key=build_identity_key(record, identity), fields=removal))
    return changes
