"""Order aggregate and its line items.

An ``Order`` owns its ``LineItem`` collection while an update is in flight;
the durable copies live in the storage module. Ids are opaque strings issued
by storage, so a line that has not been created yet has ``id=None``.

``raw`` keeps the record as it was read or submitted. Adapters write changes
back onto it, so fields this package does not model survive an update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from acqorders.domain.model.enums import ReceiptStatus, WorkflowStatus

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True, kw_only=True)
class ProductId:
    """A product identifier typed by its scheme name (for example "ISBN")."""

    value: str
    scheme: str


@dataclass(slots=True, frozen=True, kw_only=True)
class Location:
    """Allocation of an expected quantity to one location."""

    location_id: str
    quantity: int = 0


@dataclass(eq=False, kw_only=True)
class LineItem:
    id: str | None = None
    purchase_order_id: str | None = None
    po_line_number: str | None = None
    receipt_status: ReceiptStatus = ReceiptStatus.PENDING
    instance_id: str | None = None

    source_code: str | None = None
    title: str | None = None
    publisher: str | None = None
    publication_date: str | None = None
    edition: str | None = None
    product_ids: list[ProductId] = field(default_factory=list["ProductId"])
    material_types: list[str] = field(default_factory=list[str])
    locations: list[Location] = field(default_factory=list["Location"])
    raw: dict[str, object] = field(default_factory=dict[str, object], repr=False)

    def locations_by_id(self) -> dict[str, list[Location]]:
        """Group allocations by location id, keeping first-seen order."""

        grouped: dict[str, list[Location]] = {}
        for location in self.locations:
            grouped.setdefault(location.location_id, []).append(location)
        return grouped


@dataclass(eq=False, kw_only=True)
class Order:
    id: str | None = None
    po_number: str
    workflow_status: WorkflowStatus = WorkflowStatus.DRAFT
    date_ordered: datetime | None = None
    lines: list[LineItem] = field(default_factory=list["LineItem"])
    raw: dict[str, object] = field(default_factory=dict[str, object], repr=False)

    def promote_pending_lines(self) -> None:
        """Move every Pending line to Awaiting Receipt."""

        for line in self.lines:
            if line.receipt_status is ReceiptStatus.PENDING:
                line.receipt_status = ReceiptStatus.AWAITING_RECEIPT
