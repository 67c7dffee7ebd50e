"""Public domain model surface."""

from __future__ import annotations

from acqorders.domain.model.enums import (
    ItemStatus,
    ProcessingStatus,
    ReceiptStatus,
    ReceivingStatus,
    ReferenceKind,
    WorkflowStatus,
)
from acqorders.domain.model.inventory import (
    InstanceIdentifier,
    InstancePayload,
    ItemPayload,
    Publication,
    ReferenceType,
)
from acqorders.domain.model.order import LineItem, Location, Order, ProductId
from acqorders.domain.model.receiving import (
    Piece,
    PieceResult,
    ReceivedItem,
    ReceivingHistory,
    ReceivingHistoryEntry,
    ReceivingRequest,
    ReceivingResult,
    ReceivingResults,
    ToBeReceived,
)

__all__ = [  # noqa: RUF022
    # orders
    "Order",
    "LineItem",
    "Location",
    "ProductId",
    # receiving
    "Piece",
    "PieceResult",
    "ReceivedItem",
    "ReceivingHistory",
    "ReceivingHistoryEntry",
    "ReceivingRequest",
    "ReceivingResult",
    "ReceivingResults",
    "ToBeReceived",
    # inventory payloads
    "InstanceIdentifier",
    "InstancePayload",
    "ItemPayload",
    "Publication",
    "ReferenceType",
    # enums
    "ItemStatus",
    "ProcessingStatus",
    "ReceiptStatus",
    "ReceivingStatus",
    "ReferenceKind",
    "WorkflowStatus",
]
