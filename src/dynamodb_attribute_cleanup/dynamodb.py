from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Protocol

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from dynamodb_attribute_cleanup.errors import StoreError, StoreErrorKind
from dynamodb_attribute_cleanup.models import IdentityKey
from dynamodb_attribute_cleanup.store import ScanPage

_RATE_LIMIT_ERROR_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
}

_DESERIALIZER = TypeDeserializer()
_SERIALIZER = TypeSerializer()


class DynamoDBClient(Protocol):
    def scan(self, **kwargs: Any) -> dict[str, Any]:
        ...

    def update_item(self, **kwargs: Any) -> dict[str, Any]:
        ...


def create_dynamodb_client(*, region_name: str, max_attempts: int) -> DynamoDBClient:
    config = Config(retries={"total_max_attempts": max(1, max_attempts), "mode": "standard"})
    return boto3.client("dynamodb", region_name=region_name, config=config)


def build_remove_expression(field_names: Sequence[str]) -> tuple[str, dict[str, str]]:
    """REMOVE expression referencing every field through a placeholder.

    Placeholders keep names that collide with DynamoDB reserved words usable.
    """
    if not field_names:
        raise ValueError("field_names must not be empty")

    names = {f"#attr{index}": name for index, name in enumerate(field_names)}
    return "REMOVE " + ", ".join(names), names


def deserialize_item(item: dict[str, Any]) -> dict[str, Any]:
    return {name: _DESERIALIZER.deserialize(value) for name, value in item.items()}


def serialize_key(key: IdentityKey) -> dict[str, Any]:
    return {name: _SERIALIZER.serialize(value) for name, value in key.items()}


class DynamoDBTableStore:
    def __init__(self, *, client: DynamoDBClient, table_name: str) -> None:
        self._client = client
        self._table_name = table_name

    async def scan_page(self, start_key: dict[str, Any] | None) -> ScanPage:
        params: dict[str, Any] = {"TableName": self._table_name}
        if start_key:
            params["ExclusiveStartKey"] = start_key

        try:
            response = await asyncio.to_thread(self._client.scan, **params)
        except (ClientError, BotoCoreError) as exc:
            raise classify_store_error(exc) from exc

        items = [deserialize_item(item) for item in response.get("Items", [])]
        return ScanPage(items=items, next_key=response.get("LastEvaluatedKey") or None)

    async def remove_fields(self, key: IdentityKey, field_names: Sequence[str]) -> None:
        update_expression, attribute_names = build_remove_expression(field_names)
        try:
            await asyncio.to_thread(
                self._client.update_item,
                TableName=self._table_name,
                Key=serialize_key(key),
                UpdateExpression=update_expression,
                ExpressionAttributeNames=attribute_names,
                ReturnValues="NONE",
            )
        except (ClientError, BotoCoreError) as exc:
            raise classify_store_error(exc) from exc


def classify_store_error(exc: Exception) -> StoreError:
    code, message = _extract_exception_error(exc)
    kind = StoreErrorKind.RATE_LIMITED if code in _RATE_LIMIT_ERROR_CODES else StoreErrorKind.OTHER
    return StoreError(kind=kind, detail=message or type(exc).__name__, code=code)


def _extract_exception_error(exc: Exception) -> tuple[str | None, str | None]:
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        error = response.get("Error")
        if isinstance(error, dict):
            code = error.get("Code")
            message = error.get("Message")
            return (
                str(code).strip() if code is not None else None,
                str(message) if message is not None else None,
            )

    return None, str(exc)
