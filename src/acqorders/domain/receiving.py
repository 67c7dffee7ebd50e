"""Receiving: reconcile receipt events against stored pieces.

Each piece is processed independently; a failed inventory item update is
recorded against that piece and never blocks its siblings. Results are
tallied against the request shape, so every requested piece yields exactly
one success or failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from acqorders.domain.concurrency import Failed, settle, settle_all
from acqorders.domain.errors import ErrorCode
from acqorders.domain.model import (
    ItemStatus,
    PieceResult,
    ProcessingStatus,
    ReceiptStatus,
    ReceivingResult,
    ReceivingResults,
    ReceivingStatus,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from acqorders.domain.errors import Error
    from acqorders.domain.model import (
        Piece,
        ReceivedItem,
        ReceivingHistory,
        ReceivingRequest,
    )
    from acqorders.domain.ports import InventoryGateway, OrderStorage

log = getLogger(__name__)

DEFAULT_HISTORY_LIMIT: Final = 10

type PieceKey = tuple[str, str]
type ReceivedItemsByLine = dict[str, dict[str, ReceivedItem]]


def is_on_order_status(status: str | None) -> bool:
    return status is not None and status.casefold() == ItemStatus.ON_ORDER.casefold()


def apply_received_item_overrides(piece: Piece, received: ReceivedItem) -> None:
    if received.caption:
        piece.caption = received.caption
    if received.comment:
        piece.comment = received.comment
    if received.location_id:
        piece.location_id = received.location_id


@dataclass(slots=True, frozen=True)
class ReceivingStrategy:
    """Pluggable pieces of a receiving flavor."""

    is_reverted_to_on_order: Callable[[str | None], bool] = is_on_order_status
    apply_overrides: Callable[[Piece, ReceivedItem], None] = apply_received_item_overrides


RECEIVE: Final = ReceivingStrategy()


def group_received_items(request: ReceivingRequest) -> ReceivedItemsByLine:
    """Map line id -> piece id -> receipt event."""

    grouped: ReceivedItemsByLine = {}
    for entry in request.to_be_received:
        by_piece = grouped.setdefault(entry.po_line_id, {})
        for received in entry.received_items:
            by_piece[received.piece_id] = received
    return grouped


def receipt_status_for(pieces: Sequence[Piece]) -> ReceiptStatus:
    received = sum(1 for piece in pieces if piece.receiving_status is ReceivingStatus.RECEIVED)
    if received == 0:
        return ReceiptStatus.AWAITING_RECEIPT
    if received == len(pieces):
        return ReceiptStatus.FULLY_RECEIVED
    return ReceiptStatus.PARTIALLY_RECEIVED


@dataclass(slots=True)
class ReceivingReconciler:
    storage: OrderStorage
    inventory: InventoryGateway
    strategy: ReceivingStrategy = field(default=RECEIVE)
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(UTC))

    async def receive(self, request: ReceivingRequest) -> ReceivingResults:
        """Receive every piece of ``request`` and tally the outcome per line."""

        received_items = group_received_items(request)
        log.debug(
            "%s piece record(s) are going to be received for %s PO line(s)",
            sum(len(items) for items in received_items.values()),
            len(received_items),
        )

        pieces = await self._load_pieces(received_items)
        errors: dict[PieceKey, Error] = {}
        updated = await self._update_pieces(pieces, received_items, errors)
        await self._save_pieces(updated, errors)
        await self._update_line_statuses(
            {piece.po_line_id for piece in updated if _key(piece) not in errors}
        )
        return _tally(request, pieces, errors)

    async def _load_pieces(self, received_items: ReceivedItemsByLine) -> dict[PieceKey, Piece]:
        piece_ids = [piece_id for items in received_items.values() for piece_id in items]
        if not piece_ids:
            return {}
        loaded = await self.storage.get_pieces(piece_ids)
        return {
            _key(piece): piece
            for piece in loaded
            if piece.id in received_items.get(piece.po_line_id, {})
        }

    async def _update_pieces(
        self,
        pieces: Mapping[PieceKey, Piece],
        received_items: ReceivedItemsByLine,
        errors: dict[PieceKey, Error],
    ) -> list[Piece]:
        with_items = [piece for piece in pieces.values() if piece.item_id]
        without_items = [piece for piece in pieces.values() if not piece.item_id]

        outcomes = await settle_all(
            self._receive_item(piece, _received_item(piece, received_items))
            for piece in with_items
        )
        updated: list[Piece] = []
        for piece, outcome in zip(with_items, outcomes, strict=True):
            if isinstance(outcome, Failed):
                log.error(
                    "Item associated with piece '%s' cannot be updated: %s",
                    piece.id,
                    outcome.error,
                )
                errors[_key(piece)] = ErrorCode.ITEM_UPDATE_FAILED.to_error(
                    pieceId=piece.id, poLineId=piece.po_line_id
                )
                continue
            self._apply_receipt(piece, _received_item(piece, received_items), outcome.value)
            updated.append(piece)

        for piece in without_items:
            received = _received_item(piece, received_items)
            self._apply_receipt(piece, received, received.item_status)
            updated.append(piece)
        return updated

    async def _receive_item(self, piece: Piece, received: ReceivedItem) -> str | None:
        if piece.item_id is None:
            return received.item_status
        return await self.inventory.receive_item(piece.item_id, received)

    def _apply_receipt(self, piece: Piece, received: ReceivedItem, status: str | None) -> None:
        self.strategy.apply_overrides(piece, received)
        if self.strategy.is_reverted_to_on_order(status):
            piece.mark_expected()
        else:
            piece.mark_received(self.clock())

    async def _save_pieces(self, pieces: Sequence[Piece], errors: dict[PieceKey, Error]) -> None:
        if not pieces:
            return
        outcome = await settle(self.storage.save_pieces(pieces))
        if isinstance(outcome, Failed):
            log.error("Piece records cannot be saved: %s", outcome.error)
            for piece in pieces:
                errors[_key(piece)] = ErrorCode.PIECE_UPDATE_FAILED.to_error(
                    pieceId=piece.id, poLineId=piece.po_line_id
                )

    async def _update_line_statuses(self, line_ids: set[str]) -> None:
        ordered = sorted(line_ids)
        outcomes = await settle_all(self._update_line_status(line_id) for line_id in ordered)
        for line_id, outcome in zip(ordered, outcomes, strict=True):
            if isinstance(outcome, Failed):
                log.error("Receipt status of PO line %s cannot be updated: %s", line_id, outcome.error)

    async def _update_line_status(self, line_id: str) -> None:
        pieces = await self.storage.get_pieces_by_line(line_id)
        if not pieces:
            return
        status = receipt_status_for(pieces)
        line = await self.storage.get_line(line_id)
        if line.receipt_status is status:
            return
        line.receipt_status = status
        await self.storage.update_line(line_id, line)


async def receiving_history(
    storage: OrderStorage,
    *,
    limit: int = DEFAULT_HISTORY_LIMIT,
    offset: int = 0,
    query: str | None = None,
) -> ReceivingHistory:
    """Return one page of the receiving history."""

    if limit < 0 or offset < 0:
        raise ValueError("limit and offset must be non-negative")
    return await storage.get_receiving_history(limit=limit, offset=offset, query=query)


def _key(piece: Piece) -> PieceKey:
    return piece.po_line_id, piece.id


def _received_item(piece: Piece, received_items: ReceivedItemsByLine) -> ReceivedItem:
    return received_items[piece.po_line_id][piece.id]


def _tally(
    request: ReceivingRequest,
    pieces: Mapping[PieceKey, Piece],
    errors: Mapping[PieceKey, Error],
) -> ReceivingResults:
    total_records = request.total_records
    if total_records is None:
        total_records = len(request.piece_ids)
    results = ReceivingResults(total_records=total_records)
    for entry in request.to_be_received:
        result = ReceivingResult(po_line_id=entry.po_line_id)
        for received in entry.received_items:
            key = (entry.po_line_id, received.piece_id)
            error = errors.get(key)
            if error is None and key not in pieces:
                error = ErrorCode.PIECE_NOT_FOUND.to_error(
                    pieceId=received.piece_id, poLineId=entry.po_line_id
                )
            status = ProcessingStatus.SUCCESS if error is None else ProcessingStatus.FAILURE
            result.piece_results.append(
                PieceResult(piece_id=received.piece_id, status=status, error=error)
            )
        results.receiving_results.append(result)
    return results
