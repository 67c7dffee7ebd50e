"""Receipt units (pieces) and the receiving request/result shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from acqorders.domain.model.enums import ProcessingStatus, ReceivingStatus

if TYPE_CHECKING:
    from datetime import datetime

    from acqorders.domain.errors import Error


@dataclass(eq=False, kw_only=True)
class Piece:
    """Unit of receipt tracked against a line item.

    ``received_date`` is set iff ``receiving_status`` is ``RECEIVED``.
    """

    id: str
    po_line_id: str
    item_id: str | None = None
    receiving_status: ReceivingStatus = ReceivingStatus.EXPECTED
    received_date: datetime | None = None
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = None
    raw: dict[str, object] = field(default_factory=dict[str, object], repr=False)

    def mark_received(self, when: datetime) -> None:
        self.receiving_status = ReceivingStatus.RECEIVED
        self.received_date = when

    def mark_expected(self) -> None:
        self.receiving_status = ReceivingStatus.EXPECTED
        self.received_date = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ReceivedItem:
    """Receipt event for one piece; override fields apply only when non-empty."""

    piece_id: str
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = None
    barcode: str | None = None
    item_status: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ToBeReceived:
    po_line_id: str
    received_items: tuple[ReceivedItem, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class ReceivingRequest:
    to_be_received: tuple[ToBeReceived, ...] = ()
    total_records: int | None = None

    @property
    def piece_ids(self) -> list[str]:
        return [item.piece_id for entry in self.to_be_received for item in entry.received_items]


@dataclass(slots=True, frozen=True, kw_only=True)
class PieceResult:
    piece_id: str
    status: ProcessingStatus
    error: Error | None = None


@dataclass(slots=True, kw_only=True)
class ReceivingResult:
    po_line_id: str
    piece_results: list[PieceResult] = field(default_factory=list["PieceResult"])

    @property
    def processed_successfully(self) -> int:
        return sum(1 for r in self.piece_results if r.status is ProcessingStatus.SUCCESS)

    @property
    def processed_with_error(self) -> int:
        return sum(1 for r in self.piece_results if r.status is ProcessingStatus.FAILURE)


@dataclass(slots=True, kw_only=True)
class ReceivingResults:
    receiving_results: list[ReceivingResult] = field(default_factory=list["ReceivingResult"])
    total_records: int = 0

    def for_line(self, po_line_id: str) -> ReceivingResult | None:
        return next((r for r in self.receiving_results if r.po_line_id == po_line_id), None)


@dataclass(slots=True, frozen=True, kw_only=True)
class ReceivingHistoryEntry:
    id: str
    piece_id: str | None = None
    po_line_id: str | None = None
    po_line_number: str | None = None
    title: str | None = None
    receiving_status: ReceivingStatus | None = None
    received_date: datetime | None = None
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ReceivingHistory:
    entries: tuple[ReceivingHistoryEntry, ...] = ()
    total_records: int = 0
