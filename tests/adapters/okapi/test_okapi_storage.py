from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime

import httpx

from acqorders.adapters.okapi import HttpOrderStorage
from acqorders.adapters.okapi.schema import PurchaseOrderPayload
from acqorders.adapters.okapi.storage import MAX_IDS_PER_QUERY, any_of
from acqorders.adapters.okapi.translator import order_from_payload
from acqorders.domain.model import (
    LineItem,
    Order,
    Piece,
    ReceiptStatus,
    ReceivingHistory,
    ReceivingStatus,
    WorkflowStatus,
)
from tests.support.okapi import make_okapi_client

ORDER = {
    "id": "order-1",
    "poNumber": "PO10001",
    "workflowStatus": "Pending",
    "approved": False,
}

PO_LINE = {
    "id": "line-1",
    "purchaseOrderId": "order-1",
    "poLineNumber": "PO10001-1",
    "receiptStatus": "Pending",
    "source": {"code": "MARC"},
    "title": "The C Programming Language",
    "details": {
        "productIds": [{"productId": "9780131101630", "productIdType": "ISBN"}],
        "materialTypes": ["mat-book"],
    },
    "locations": [{"locationId": "loc-1", "quantity": 2}],
}


def test_get_order_and_lines() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/orders-storage/purchase-orders/order-1":
            return httpx.Response(200, json=ORDER)
        assert request.url.path == "/orders-storage/po-lines"
        assert request.url.params["query"] == "purchaseOrderId==order-1"
        return httpx.Response(200, json={"poLines": [PO_LINE], "totalRecords": 1})

    async def run() -> tuple[Order, list[LineItem]]:
        async with make_okapi_client(handler) as client:
            storage = HttpOrderStorage(client)
            return await storage.get_order("order-1"), await storage.get_lines("order-1")

    order, lines = asyncio.run(run())

    assert order.workflow_status is WorkflowStatus.DRAFT
    line = lines[0]
    assert line.po_line_number == "PO10001-1"
    assert line.receipt_status is ReceiptStatus.PENDING
    assert line.source_code == "MARC"
    assert line.product_ids[0].scheme == "ISBN"
    assert line.locations[0].quantity == 2


def test_po_number_exists_uses_total_records() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["query"] == 'poNumber=="PO20002"'
        return httpx.Response(200, json={"purchaseOrders": [], "totalRecords": 1})

    async def run() -> bool:
        async with make_okapi_client(handler) as client:
            return await HttpOrderStorage(client).po_number_exists("PO20002")

    assert asyncio.run(run())


def test_update_order_summary_omits_lines() -> None:
    bodies: list[dict[str, object]] = []
    order = Order(
        id="order-1",
        po_number="PO10001",
        workflow_status=WorkflowStatus.ACTIVE,
        date_ordered=datetime(2024, 5, 1, 12, tzinfo=UTC),
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            storage = HttpOrderStorage(client)
            await storage.update_order_summary(order)

    asyncio.run(run())

    assert bodies == [
        {
            "id": "order-1",
            "poNumber": "PO10001",
            "workflowStatus": "Open",
            "dateOrdered": "2024-05-01T12:00:00Z",
        }
    ]


def test_create_line_returns_new_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["poLineNumber"] == "PO10001"
        assert "id" not in body
        return httpx.Response(201, json={**body, "id": "line-new"})

    async def run() -> str:
        async with make_okapi_client(handler) as client:
            line = LineItem(purchase_order_id="order-1", po_line_number="PO10001")
            return await HttpOrderStorage(client).create_line(line)

    assert asyncio.run(run()) == "line-new"


def test_get_pieces_chunks_id_queries() -> None:
    queries: list[str] = []
    piece_ids = [f"p{i}" for i in range(MAX_IDS_PER_QUERY + 2)]

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["query"]
        queries.append(query)
        ids = query.removeprefix("id==(").removesuffix(")").split(" or ")
        return httpx.Response(
            200,
            json={"pieces": [{"id": pid, "poLineId": "line-1"} for pid in ids]},
        )

    async def run() -> list[Piece]:
        async with make_okapi_client(handler) as client:
            return await HttpOrderStorage(client).get_pieces(piece_ids)

    pieces = asyncio.run(run())

    assert len(queries) == 2
    assert [piece.id for piece in pieces] == piece_ids
    assert all(piece.receiving_status is ReceivingStatus.EXPECTED for piece in pieces)


def test_save_pieces_puts_each_piece() -> None:
    bodies: dict[str, dict[str, object]] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        bodies[request.url.path] = json.loads(request.content)
        return httpx.Response(204)

    pieces = [
        Piece(
            id="p1",
            po_line_id="line-1",
            receiving_status=ReceivingStatus.RECEIVED,
            received_date=datetime(2024, 6, 1, tzinfo=UTC),
        ),
        Piece(id="p2", po_line_id="line-1", caption="v.2"),
    ]

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            await HttpOrderStorage(client).save_pieces(pieces)

    asyncio.run(run())

    assert bodies["/orders-storage/pieces/p1"]["receivingStatus"] == "Received"
    assert bodies["/orders-storage/pieces/p1"]["receivedDate"] == "2024-06-01T00:00:00Z"
    assert bodies["/orders-storage/pieces/p2"]["caption"] == "v.2"
    assert "receivedDate" not in bodies["/orders-storage/pieces/p2"]


def test_receiving_history_passes_paging() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/orders/receiving-history"
        assert request.url.params["limit"] == "5"
        assert request.url.params["offset"] == "10"
        assert request.url.params["query"] == "poLineId==line-1"
        return httpx.Response(
            200,
            json={
                "receivingHistory": [
                    {"id": "h1", "pieceId": "p1", "receivingStatus": "Received"},
                ],
                "totalRecords": 11,
            },
        )

    async def run() -> ReceivingHistory:
        async with make_okapi_client(handler) as client:
            return await HttpOrderStorage(client).get_receiving_history(
                limit=5, offset=10, query="poLineId==line-1"
            )

    history = asyncio.run(run())

    assert history.total_records == 11
    assert history.entries[0].receiving_status is ReceivingStatus.RECEIVED


def test_any_of_builds_cql() -> None:
    assert any_of("id", ["a", "b"]) == "id==(a or b)"


def test_line_update_keeps_unmodeled_fields() -> None:
    stored_line = {
        **PO_LINE,
        "cost": {"listUnitPrice": 10.0, "currency": "USD", "quantityPhysical": 2},
        "acquisitionMethod": "Purchase",
        "orderFormat": "Physical Resource",
        "details": {
            "productIds": [{"productId": "9780131101630", "productIdType": "ISBN"}],
            "materialTypes": ["mat-book"],
            "receivingNote": "Check spine",
        },
        "locations": [{"locationId": "loc-1", "quantity": 2, "quantityPhysical": 2}],
    }
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"poLines": [stored_line], "totalRecords": 1})
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            storage = HttpOrderStorage(client)
            (line,) = await storage.get_lines("order-1")
            line.po_line_number = "PO20002-1"
            await storage.update_line("line-1", line)

    asyncio.run(run())

    body = bodies[0]
    assert body["poLineNumber"] == "PO20002-1"
    assert body["cost"] == stored_line["cost"]
    assert body["acquisitionMethod"] == "Purchase"
    assert body["orderFormat"] == "Physical Resource"
    assert body["details"]["receivingNote"] == "Check spine"  # type: ignore[index]
    assert body["locations"] == [{"locationId": "loc-1", "quantity": 2, "quantityPhysical": 2}]


def test_piece_save_keeps_unmodeled_fields() -> None:
    stored_piece = {
        "id": "p1",
        "poLineId": "line-1",
        "receivingStatus": "Received",
        "receivedDate": "2024-06-01T00:00:00Z",
        "format": "Physical",
        "metadata": {"createdDate": "2024-01-01T00:00:00Z"},
    }
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"pieces": [stored_piece], "totalRecords": 1})
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            storage = HttpOrderStorage(client)
            (piece,) = await storage.get_pieces(["p1"])
            piece.mark_expected()
            await storage.save_pieces([piece])

    asyncio.run(run())

    assert bodies == [
        {
            "id": "p1",
            "poLineId": "line-1",
            "receivingStatus": "Expected",
            "format": "Physical",
            "metadata": {"createdDate": "2024-01-01T00:00:00Z"},
        }
    ]


def test_order_summary_is_built_from_submitted_order() -> None:
    submitted = {
        "id": "order-1",
        "poNumber": "PO10001",
        "workflowStatus": "Open",
        "vendor": "vendor-1",
        "approved": True,
        "orderType": "One-Time",
        "compositePoLines": [PO_LINE],
    }
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    async def run() -> None:
        async with make_okapi_client(handler) as client:
            order = order_from_payload(PurchaseOrderPayload.model_validate(submitted))
            order.po_number = "PO20002"
            await HttpOrderStorage(client).update_order_summary(order)

    asyncio.run(run())

    assert bodies == [
        {
            "id": "order-1",
            "poNumber": "PO20002",
            "workflowStatus": "Open",
            "vendor": "vendor-1",
            "approved": True,
            "orderType": "One-Time",
        }
    ]
