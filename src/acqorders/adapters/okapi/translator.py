"""Translate storage and inventory payloads to domain entities and back."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from acqorders.domain.model import (
    ItemStatus,
    LineItem,
    Location,
    Order,
    Piece,
    ProductId,
    ReceiptStatus,
    ReceivedItem,
    ReceivingHistory,
    ReceivingHistoryEntry,
    ReceivingRequest,
    ReceivingStatus,
    ToBeReceived,
    WorkflowStatus,
)

from .schema import (
    DetailsPayload,
    ErrorPayload,
    ErrorsPayload,
    HoldingRecord,
    IdentifierPayload,
    InstanceRecord,
    ItemRecord,
    ItemStatusPayload,
    LocationPayload,
    ParameterPayload,
    PiecePayload,
    PoLinePayload,
    ProcessingStatusPayload,
    ProductIdPayload,
    PublicationPayload,
    PurchaseOrderPayload,
    ReceivingHistoryEntryPayload,
    ReceivingHistoryPayload,
    ReceivingItemResultPayload,
    ReceivingResultPayload,
    ReceivingResultsPayload,
    SourcePayload,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from acqorders.domain.errors import Error
    from acqorders.domain.model import (
        InstancePayload,
        ItemPayload,
        ReceivingResults,
    )

    from .schema import OkapiRecordModel, ReceivingCollectionPayload

log = getLogger(__name__)


# Orders ------------------------------------------------------------------------


def _record(payload: OkapiRecordModel, *exclude: str) -> dict[str, object]:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True, exclude=set(exclude))


def order_from_payload(payload: PurchaseOrderPayload) -> Order:
    return Order(
        id=payload.id,
        po_number=payload.po_number,
        workflow_status=(
            WorkflowStatus(payload.workflow_status)
            if payload.workflow_status
            else WorkflowStatus.DRAFT
        ),
        date_ordered=payload.date_ordered,
        lines=[line_from_payload(line) for line in payload.composite_po_lines],
        raw=_record(payload, "composite_po_lines"),
    )


def order_to_payload(order: Order) -> PurchaseOrderPayload:
    """Order summary as stored by orders-storage (lines are stored separately)."""

    base = (
        PurchaseOrderPayload.model_validate(order.raw)
        if order.raw
        else PurchaseOrderPayload(po_number=order.po_number)
    )
    return base.model_copy(
        update={
            "id": order.id,
            "po_number": order.po_number,
            "workflow_status": order.workflow_status.value,
            "date_ordered": order.date_ordered,
            "composite_po_lines": [],
        }
    )


def line_from_payload(payload: PoLinePayload) -> LineItem:
    details = payload.details or DetailsPayload()
    return LineItem(
        id=payload.id,
        purchase_order_id=payload.purchase_order_id,
        po_line_number=payload.po_line_number,
        receipt_status=(
            ReceiptStatus(payload.receipt_status)
            if payload.receipt_status
            else ReceiptStatus.PENDING
        ),
        instance_id=payload.instance_id,
        source_code=payload.source.code if payload.source else None,
        title=payload.title,
        publisher=payload.publisher,
        publication_date=payload.publication_date,
        edition=payload.edition,
        product_ids=[
            ProductId(value=product_id.product_id, scheme=product_id.product_id_type)
            for product_id in details.product_ids
        ],
        material_types=list(details.material_types),
        locations=[
            Location(location_id=location.location_id, quantity=location.quantity)
            for location in payload.locations
        ],
        raw=_record(payload),
    )


def line_to_payload(line: LineItem) -> PoLinePayload:
    base = PoLinePayload.model_validate(line.raw)
    details = base.details or DetailsPayload()
    source = base.source or SourcePayload()
    return base.model_copy(
        update={
            "id": line.id,
            "purchase_order_id": line.purchase_order_id,
            "po_line_number": line.po_line_number,
            "receipt_status": line.receipt_status.value,
            "instance_id": line.instance_id,
            "source": (
                source.model_copy(update={"code": line.source_code})
                if line.source_code or base.source
                else None
            ),
            "title": line.title,
            "publisher": line.publisher,
            "publication_date": line.publication_date,
            "edition": line.edition,
            "details": details.model_copy(
                update={
                    "product_ids": _merge_product_ids(details.product_ids, line.product_ids),
                    "material_types": list(line.material_types),
                }
            ),
            "locations": _merge_locations(base.locations, line.locations),
        }
    )


def _merge_product_ids(
    stored: list[ProductIdPayload], product_ids: Iterable[ProductId]
) -> list[ProductIdPayload]:
    by_key = {(entry.product_id, entry.product_id_type): entry for entry in stored}
    return [
        by_key.get(
            (product_id.value, product_id.scheme),
            ProductIdPayload(product_id=product_id.value, product_id_type=product_id.scheme),
        )
        for product_id in product_ids
    ]


def _merge_locations(
    stored: list[LocationPayload], locations: Iterable[Location]
) -> list[LocationPayload]:
    # Positional match on location id keeps keys such as quantityPhysical.
    remaining = list(stored)
    merged: list[LocationPayload] = []
    for location in locations:
        match = next(
            (entry for entry in remaining if entry.location_id == location.location_id), None
        )
        if match is None:
            merged.append(
                LocationPayload(location_id=location.location_id, quantity=location.quantity)
            )
            continue
        remaining.remove(match)
        merged.append(match.model_copy(update={"quantity": location.quantity}))
    return merged


# Pieces and receiving ----------------------------------------------------------


def piece_from_payload(payload: PiecePayload) -> Piece:
    return Piece(
        id=payload.id,
        po_line_id=payload.po_line_id,
        item_id=payload.item_id,
        receiving_status=ReceivingStatus(payload.receiving_status),
        received_date=payload.received_date,
        caption=payload.caption,
        comment=payload.comment,
        location_id=payload.location_id,
        raw=_record(payload),
    )


def piece_to_payload(piece: Piece) -> PiecePayload:
    base = (
        PiecePayload.model_validate(piece.raw)
        if piece.raw
        else PiecePayload(id=piece.id, po_line_id=piece.po_line_id)
    )
    return base.model_copy(
        update={
            "id": piece.id,
            "po_line_id": piece.po_line_id,
            "item_id": piece.item_id,
            "receiving_status": piece.receiving_status.value,
            "received_date": piece.received_date,
            "caption": piece.caption,
            "comment": piece.comment,
            "location_id": piece.location_id,
        }
    )


def receiving_request_from_payload(payload: ReceivingCollectionPayload) -> ReceivingRequest:
    return ReceivingRequest(
        total_records=payload.total_records,
        to_be_received=tuple(
            ToBeReceived(
                po_line_id=entry.po_line_id,
                received_items=tuple(
                    ReceivedItem(
                        piece_id=item.piece_id,
                        caption=item.caption,
                        comment=item.comment,
                        location_id=item.location_id,
                        barcode=item.barcode,
                        item_status=item.item_status,
                    )
                    for item in entry.received_items
                ),
            )
            for entry in payload.to_be_received
        ),
    )


def receiving_results_to_payload(results: ReceivingResults) -> ReceivingResultsPayload:
    return ReceivingResultsPayload(
        total_records=results.total_records,
        receiving_results=[
            ReceivingResultPayload(
                po_line_id=result.po_line_id,
                processed_successfully=result.processed_successfully,
                processed_with_error=result.processed_with_error,
                receiving_item_results=[
                    ReceivingItemResultPayload(
                        piece_id=piece_result.piece_id,
                        processing_status=ProcessingStatusPayload(
                            type=piece_result.status.value,
                            error=(
                                error_to_payload(piece_result.error)
                                if piece_result.error is not None
                                else None
                            ),
                        ),
                    )
                    for piece_result in result.piece_results
                ],
            )
            for result in results.receiving_results
        ],
    )


def history_from_payload(payload: ReceivingHistoryPayload) -> ReceivingHistory:
    return ReceivingHistory(
        total_records=payload.total_records,
        entries=tuple(
            ReceivingHistoryEntry(
                id=entry.id,
                piece_id=entry.piece_id,
                po_line_id=entry.po_line_id,
                po_line_number=entry.po_line_number,
                title=entry.title,
                receiving_status=(
                    ReceivingStatus(entry.receiving_status) if entry.receiving_status else None
                ),
                received_date=entry.received_date,
                caption=entry.caption,
                comment=entry.comment,
                location_id=entry.location_id,
            )
            for entry in payload.receiving_history
        ),
    )


# Errors ------------------------------------------------------------------------


def error_to_payload(error: Error) -> ErrorPayload:
    return ErrorPayload(
        code=error.code.value,
        message=error.message,
        parameters=[
            ParameterPayload(key=key, value=value) for key, value in error.parameters.items()
        ],
    )


def errors_to_payload(errors: Iterable[Error]) -> ErrorsPayload:
    payloads = [error_to_payload(error) for error in errors]
    return ErrorsPayload(errors=payloads, total_records=len(payloads))


# Inventory ---------------------------------------------------------------------


def instance_to_record(payload: InstancePayload) -> InstanceRecord:
    return InstanceRecord(
        source=payload.source,
        title=payload.title,
        editions=list(payload.editions),
        status_id=payload.status_id,
        instance_type_id=payload.instance_type_id,
        publication=[
            PublicationPayload(
                publisher=publication.publisher,
                date_of_publication=publication.date_of_publication,
            )
            for publication in payload.publication
        ],
        identifiers=[
            IdentifierPayload(
                identifier_type_id=identifier.identifier_type_id,
                value=identifier.value,
            )
            for identifier in payload.identifiers
        ],
    )


def holding_to_record(instance_id: str, location_id: str) -> HoldingRecord:
    return HoldingRecord(instance_id=instance_id, permanent_location_id=location_id)


def item_to_record(payload: ItemPayload) -> ItemRecord:
    return ItemRecord(
        holdings_record_id=payload.holdings_record_id,
        status=ItemStatusPayload(name=payload.status.value),
        material_type_id=payload.material_type_id,
        permanent_loan_type_id=payload.permanent_loan_type_id,
        purchase_order_line_identifier=payload.purchase_order_line_identifier,
    )


def apply_receipt_to_item(record: ItemRecord, received: ReceivedItem) -> ItemRecord:
    """Copy the non-empty receiving overrides onto an inventory item."""

    update: dict[str, object] = {
        "status": ItemStatusPayload(name=received.item_status or ItemStatus.IN_PROCESS.value)
    }
    if received.barcode:
        update["barcode"] = received.barcode
    if received.location_id:
        update["permanent_location_id"] = received.location_id
    log.debug("Receiving item %s with %s", record.id, sorted(update))
    return record.model_copy(update=update)


def history_to_payload(history: ReceivingHistory) -> ReceivingHistoryPayload:
    return ReceivingHistoryPayload(
        total_records=history.total_records,
        receiving_history=[
            ReceivingHistoryEntryPayload(
                id=entry.id,
                piece_id=entry.piece_id,
                po_line_id=entry.po_line_id,
                po_line_number=entry.po_line_number,
                title=entry.title,
                receiving_status=entry.receiving_status.value if entry.receiving_status else None,
                received_date=entry.received_date,
                caption=entry.caption,
                comment=entry.comment,
                location_id=entry.location_id,
            )
            for entry in history.entries
        ],
    )
