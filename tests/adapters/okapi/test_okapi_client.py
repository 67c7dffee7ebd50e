from __future__ import annotations

import asyncio

import httpx
import pytest

from acqorders.adapters.okapi import OkapiAPIError
from acqorders.adapters.okapi.client import created_record_id
from acqorders.domain.errors import StorageNotFound, ValidationError
from tests.support.okapi import BASE_URL, make_okapi_client


def test_requests_carry_okapi_headers_and_lang() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "order-1"})

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            await client.get_json("/orders-storage/purchase-orders/order-1")

    asyncio.run(run())

    request = seen[0]
    assert request.headers["X-Okapi-Tenant"] == "diku"
    assert request.headers["X-Okapi-Token"] == "secret"
    assert request.headers["X-Okapi-Url"] == BASE_URL
    assert request.url.params["lang"] == "en"


def test_post_record_reads_id_from_location_header() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, headers={"Location": f"{BASE_URL}/item-storage/items/item-9"})

    async def run() -> str:
        async with make_okapi_client(handler) as client:
            return await client.post_record("/item-storage/items", {"holdingsRecordId": "h"})

    assert asyncio.run(run()) == "item-9"


def test_created_record_id_prefers_body() -> None:
    request = httpx.Request("POST", f"{BASE_URL}/inventory/instances")
    response = httpx.Response(
        201,
        json={"id": "from-body"},
        headers={"Location": "/inventory/instances/from-header"},
        request=request,
    )

    assert created_record_id(response) == "from-body"


def test_created_record_without_id_is_an_error() -> None:
    request = httpx.Request("POST", f"{BASE_URL}/inventory/instances")
    response = httpx.Response(201, request=request)

    with pytest.raises(OkapiAPIError):
        created_record_id(response)


@pytest.mark.parametrize(
    ("status", "error_type", "http_status"),
    [
        (404, StorageNotFound, 404),
        (422, ValidationError, 422),
        (400, ValidationError, 422),
        (500, OkapiAPIError, 500),
        (401, OkapiAPIError, 401),
    ],
)
def test_error_statuses_are_translated(
    status: int,
    error_type: type[Exception],
    http_status: int,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status,
            json={"errors": [{"message": "nope", "code": "x", "parameters": []}]},
        )

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            await client.delete_record("/orders-storage/po-lines/line-1")

    with pytest.raises(error_type, match="nope") as excinfo:
        asyncio.run(run())

    assert getattr(excinfo.value, "http_status") == http_status  # noqa: B009
