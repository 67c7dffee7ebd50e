"""Order storage backed by the orders-storage module."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING, Final

from acqorders.domain.concurrency import join_all

from .schema import (
    PiecePayload,
    PieceCollection,
    PoLineCollection,
    PoLinePayload,
    PurchaseOrderCollection,
    PurchaseOrderPayload,
    ReceivingHistoryPayload,
)
from .translator import (
    history_from_payload,
    line_from_payload,
    line_to_payload,
    order_from_payload,
    order_to_payload,
    piece_from_payload,
    piece_to_payload,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acqorders.domain.model import LineItem, Order, Piece, ReceivingHistory

    from .client import OkapiClient

log = getLogger(__name__)

PURCHASE_ORDERS: Final = "/orders-storage/purchase-orders"
PO_LINES: Final = "/orders-storage/po-lines"
PIECES: Final = "/orders-storage/pieces"
RECEIVING_HISTORY: Final = "/orders/receiving-history"

MAX_RECORDS: Final = 2_147_483_647
MAX_IDS_PER_QUERY: Final = 15


def any_of(field_name: str, values: Sequence[str]) -> str:
    """CQL matching records whose ``field_name`` equals any of ``values``."""

    return f"{field_name}==({' or '.join(values)})"


@dataclass(slots=True)
class HttpOrderStorage:
    client: OkapiClient

    async def get_order(self, order_id: str) -> Order:
        payload = await self.client.get_json(f"{PURCHASE_ORDERS}/{order_id}")
        return order_from_payload(PurchaseOrderPayload.model_validate(payload))

    async def po_number_exists(self, po_number: str) -> bool:
        payload = await self.client.get_json(
            PURCHASE_ORDERS, params={"query": f'poNumber=="{po_number}"', "limit": 0}
        )
        return PurchaseOrderCollection.model_validate(payload).total_records > 0

    async def update_order_summary(self, order: Order) -> None:
        await self.client.put_record(f"{PURCHASE_ORDERS}/{order.id}", _summary_json(order))

    async def get_lines(self, order_id: str) -> list[LineItem]:
        payload = await self.client.get_json(
            PO_LINES, params={"query": f"purchaseOrderId=={order_id}", "limit": MAX_RECORDS}
        )
        collection = PoLineCollection.model_validate(payload)
        return [line_from_payload(line) for line in collection.po_lines]

    async def get_line(self, line_id: str) -> LineItem:
        payload = await self.client.get_json(f"{PO_LINES}/{line_id}")
        return line_from_payload(PoLinePayload.model_validate(payload))

    async def create_line(self, line: LineItem) -> str:
        line_id = await self.client.post_record(PO_LINES, line_to_payload(line).to_json())
        log.debug("Created PO line %s (%s)", line_id, line.po_line_number)
        return line_id

    async def update_line(self, line_id: str, line: LineItem) -> None:
        await self.client.put_record(f"{PO_LINES}/{line_id}", line_to_payload(line).to_json())

    async def delete_line(self, line_id: str) -> None:
        await self.client.delete_record(f"{PO_LINES}/{line_id}")

    async def get_pieces(self, piece_ids: Sequence[str]) -> list[Piece]:
        chunks = await join_all(
            self._get_pieces_chunk(chunk) for chunk in batched(piece_ids, MAX_IDS_PER_QUERY)
        )
        return [piece for chunk in chunks for piece in chunk]

    async def _get_pieces_chunk(self, piece_ids: Sequence[str]) -> list[Piece]:
        payload = await self.client.get_json(
            PIECES, params={"query": any_of("id", piece_ids), "limit": len(piece_ids)}
        )
        return [piece_from_payload(piece) for piece in PieceCollection.model_validate(payload).pieces]

    async def get_pieces_by_line(self, line_id: str) -> list[Piece]:
        payload = await self.client.get_json(
            PIECES, params={"query": f"poLineId=={line_id}", "limit": MAX_RECORDS}
        )
        return [piece_from_payload(piece) for piece in PieceCollection.model_validate(payload).pieces]

    async def save_pieces(self, pieces: Sequence[Piece]) -> None:
        await join_all(self._save_piece(piece) for piece in pieces)

    async def _save_piece(self, piece: Piece) -> None:
        body: PiecePayload = piece_to_payload(piece)
        await self.client.put_record(f"{PIECES}/{piece.id}", body.to_json())

    async def get_receiving_history(
        self,
        *,
        limit: int,
        offset: int,
        query: str | None = None,
    ) -> ReceivingHistory:
        params: dict[str, str | int] = {"limit": limit, "offset": offset}
        if query:
            params["query"] = query
        payload = await self.client.get_json(RECEIVING_HISTORY, params=params)
        return history_from_payload(ReceivingHistoryPayload.model_validate(payload))


def _summary_json(order: Order) -> dict[str, object]:
    body = order_to_payload(order).to_json()
    body.pop("compositePoLines", None)
    return body
