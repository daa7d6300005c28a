from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from dynamodb_attribute_cleanup.dynamodb import (
    DynamoDBTableStore,
    build_remove_expression,
    classify_store_error,
)
from dynamodb_attribute_cleanup.errors import StoreError, StoreErrorKind


def _client_error(code: str, operation: str = "UpdateItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} message"}}, operation)


class _StubDynamoDBClient:
    def __init__(
        self,
        *,
        scan_responses: list[dict[str, Any] | Exception] | None = None,
        update_error: Exception | None = None,
    ) -> None:
        self._scan_responses = list(scan_responses or [])
        self._update_error = update_error
        self.scan_calls: list[dict[str, Any]] = []
        self.update_calls: list[dict[str, Any]] = []

    def scan(self, **kwargs: Any) -> dict[str, Any]:
        self.scan_calls.append(kwargs)
        response = self._scan_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def update_item(self, **kwargs: Any) -> dict[str, Any]:
        self.update_calls.append(kwargs)
        if self._update_error is not None:
            raise self._update_error
        return {}


def test_remove_expression_uses_placeholders_for_reserved_words() -> None:
    expression, names = build_remove_expression(["status", "name"])

    assert expression == "REMOVE #attr0, #attr1"
    assert names == {"#attr0": "status", "#attr1": "name"}


def test_remove_expression_requires_fields() -> None:
    with pytest.raises(ValueError):
        build_remove_expression([])


def test_scan_page_deserializes_items_and_passes_token() -> None:
    async def scenario() -> None:
        last_key = {"id": {"S": "b"}}
        client = _StubDynamoDBClient(
            scan_responses=[
                {
                    "Items": [
                        {"id": {"S": "a"}, "score": {"N": "3"}, "tags": {"SS": ["x"]}},
                        {"id": {"S": "b"}, "flag": {"BOOL": True}, "gone": {"NULL": True}},
                    ],
                    "LastEvaluatedKey": last_key,
                },
                {"Items": []},
            ]
        )
        store = DynamoDBTableStore(client=client, table_name="users")

        first = await store.scan_page(None)
        second = await store.scan_page(first.next_key)

        assert first.items == [
            {"id": "a", "score": Decimal(3), "tags": {"x"}},
            {"id": "b", "flag": True, "gone": None},
        ]
        assert first.next_key == last_key
        assert second.items == []
        assert second.next_key is None
        assert client.scan_calls == [
            {"TableName": "users"},
            {"TableName": "users", "ExclusiveStartKey": last_key},
        ]

    asyncio.run(scenario())


def test_remove_fields_sends_conditionless_update() -> None:
    async def scenario() -> None:
        client = _StubDynamoDBClient()
        store = DynamoDBTableStore(client=client, table_name="users")

        await store.remove_fields({"pk": "a", "sk": Decimal(7)}, ["legacy", "old"])

        assert client.update_calls == [
            {
                "TableName": "users",
                "Key": {"pk": {"S": "a"}, "sk": {"N": "7"}},
                "UpdateExpression": "REMOVE #attr0, #attr1",
                "ExpressionAttributeNames": {"#attr0": "legacy", "#attr1": "old"},
                "ReturnValues": "NONE",
            }
        ]

    asyncio.run(scenario())


@pytest.mark.parametrize(
    "code",
    ["ProvisionedThroughputExceededException", "ThrottlingException", "RequestLimitExceeded"],
)
def test_throttling_codes_map_to_rate_limited(code: str) -> None:
    async def scenario() -> None:
        client = _StubDynamoDBClient(update_error=_client_error(code))
        store = DynamoDBTableStore(client=client, table_name="users")

        with pytest.raises(StoreError) as exc_info:
            await store.remove_fields({"pk": "a"}, ["old"])

        assert exc_info.value.kind is StoreErrorKind.RATE_LIMITED
        assert exc_info.value.code == code

    asyncio.run(scenario())


def test_other_client_errors_map_to_other() -> None:
    async def scenario() -> None:
        client = _StubDynamoDBClient(scan_responses=[_client_error("ResourceNotFoundException", "Scan")])
        store = DynamoDBTableStore(client=client, table_name="missing")

        with pytest.raises(StoreError) as exc_info:
            await store.scan_page(None)

        assert exc_info.value.kind is StoreErrorKind.OTHER
        assert exc_info.value.detail == "ResourceNotFoundException message"

    asyncio.run(scenario())


def test_botocore_errors_without_response_are_other() -> None:
    error = classify_store_error(EndpointConnectionError(endpoint_url="https://dynamodb.local"))

    assert error.kind is StoreErrorKind.OTHER
    assert error.code is None
    assert "dynamodb.local" in error.detail
