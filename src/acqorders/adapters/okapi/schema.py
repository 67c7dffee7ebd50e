"""Pydantic models describing the orders-storage and inventory payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class OkapiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_json(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OkapiRecordModel(OkapiBaseModel):
    """Stored record; unmodeled keys are kept so a read-modify-write preserves them."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# Orders ------------------------------------------------------------------------


class ProductIdPayload(OkapiRecordModel):
    product_id: str = Field(alias="productId")
    product_id_type: str = Field(alias="productIdType")


class DetailsPayload(OkapiRecordModel):
    product_ids: list[ProductIdPayload] = Field(default_factory=list, alias="productIds")
    material_types: list[str] = Field(default_factory=list, alias="materialTypes")


class SourcePayload(OkapiRecordModel):
    code: str | None = None

    _normalize_code = field_validator("code", mode="before")(_blank_to_none)


class LocationPayload(OkapiRecordModel):
    location_id: str = Field(alias="locationId")
    quantity: int = 0


class PoLinePayload(OkapiRecordModel):
    id: str | None = None
    purchase_order_id: str | None = Field(default=None, alias="purchaseOrderId")
    po_line_number: str | None = Field(default=None, alias="poLineNumber")
    receipt_status: str | None = Field(default=None, alias="receiptStatus")
    instance_id: str | None = Field(default=None, alias="instanceId")
    source: SourcePayload | None = None
    title: str | None = None
    publisher: str | None = None
    publication_date: str | None = Field(default=None, alias="publicationDate")
    edition: str | None = None
    details: DetailsPayload | None = None
    locations: list[LocationPayload] = Field(default_factory=list)


class PurchaseOrderPayload(OkapiRecordModel):
    id: str | None = None
    po_number: str = Field(alias="poNumber")
    workflow_status: str | None = Field(default=None, alias="workflowStatus")
    date_ordered: datetime | None = Field(default=None, alias="dateOrdered")
    composite_po_lines: list[PoLinePayload] = Field(
        default_factory=list, alias="compositePoLines"
    )


class PurchaseOrderCollection(OkapiBaseModel):
    purchase_orders: list[PurchaseOrderPayload] = Field(
        default_factory=list, alias="purchaseOrders"
    )
    total_records: int = Field(default=0, alias="totalRecords")


class PoLineCollection(OkapiBaseModel):
    po_lines: list[PoLinePayload] = Field(default_factory=list, alias="poLines")
    total_records: int = Field(default=0, alias="totalRecords")


# Pieces and receiving ----------------------------------------------------------


class PiecePayload(OkapiRecordModel):
    id: str
    po_line_id: str = Field(alias="poLineId")
    item_id: str | None = Field(default=None, alias="itemId")
    receiving_status: str = Field(default="Expected", alias="receivingStatus")
    received_date: datetime | None = Field(default=None, alias="receivedDate")
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = Field(default=None, alias="locationId")


class PieceCollection(OkapiBaseModel):
    pieces: list[PiecePayload] = Field(default_factory=list)
    total_records: int = Field(default=0, alias="totalRecords")


class ReceivedItemPayload(OkapiBaseModel):
    piece_id: str = Field(alias="pieceId")
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = Field(default=None, alias="locationId")
    barcode: str | None = None
    item_status: str | None = Field(default=None, alias="itemStatus")

    _normalize_blank = field_validator(
        "caption", "comment", "location_id", "barcode", "item_status", mode="before"
    )(_blank_to_none)


class ToBeReceivedPayload(OkapiBaseModel):
    po_line_id: str = Field(alias="poLineId")
    received: int | None = None
    received_items: list[ReceivedItemPayload] = Field(
        default_factory=list, alias="receivedItems"
    )


class ReceivingCollectionPayload(OkapiBaseModel):
    to_be_received: list[ToBeReceivedPayload] = Field(
        default_factory=list, alias="toBeReceived"
    )
    total_records: int | None = Field(default=None, alias="totalRecords")


class ParameterPayload(OkapiBaseModel):
    key: str
    value: str


class ErrorPayload(OkapiBaseModel):
    code: str | None = None
    message: str
    parameters: list[ParameterPayload] = Field(default_factory=list)


class ErrorsPayload(OkapiBaseModel):
    errors: list[ErrorPayload] = Field(default_factory=list)
    total_records: int = Field(default=0, alias="totalRecords")


class ProcessingStatusPayload(OkapiBaseModel):
    type: str
    error: ErrorPayload | None = None


class ReceivingItemResultPayload(OkapiBaseModel):
    piece_id: str = Field(alias="pieceId")
    processing_status: ProcessingStatusPayload = Field(alias="processingStatus")


class ReceivingResultPayload(OkapiBaseModel):
    po_line_id: str = Field(alias="poLineId")
    processed_successfully: int = Field(alias="processedSuccessfully")
    processed_with_error: int = Field(alias="processedWithError")
    receiving_item_results: list[ReceivingItemResultPayload] = Field(
        default_factory=list, alias="receivingItemResults"
    )


class ReceivingResultsPayload(OkapiBaseModel):
    receiving_results: list[ReceivingResultPayload] = Field(
        default_factory=list, alias="receivingResults"
    )
    total_records: int = Field(default=0, alias="totalRecords")


class ReceivingHistoryEntryPayload(OkapiBaseModel):
    id: str
    piece_id: str | None = Field(default=None, alias="pieceId")
    po_line_id: str | None = Field(default=None, alias="poLineId")
    po_line_number: str | None = Field(default=None, alias="poLineNumber")
    title: str | None = None
    receiving_status: str | None = Field(default=None, alias="receivingStatus")
    received_date: datetime | None = Field(default=None, alias="receivedDate")
    caption: str | None = None
    comment: str | None = None
    location_id: str | None = Field(default=None, alias="locationId")


class ReceivingHistoryPayload(OkapiBaseModel):
    receiving_history: list[ReceivingHistoryEntryPayload] = Field(
        default_factory=list, alias="receivingHistory"
    )
    total_records: int = Field(default=0, alias="totalRecords")


# Inventory ---------------------------------------------------------------------


class RecordId(OkapiBaseModel):
    id: str


class ReferenceTypePayload(OkapiBaseModel):
    id: str
    name: str | None = None
    code: str | None = None


class PublicationPayload(OkapiBaseModel):
    publisher: str | None = None
    date_of_publication: str | None = Field(default=None, alias="dateOfPublication")


class IdentifierPayload(OkapiBaseModel):
    identifier_type_id: str = Field(alias="identifierTypeId")
    value: str


class InstanceRecord(OkapiBaseModel):
    source: str
    title: str | None = None
    editions: list[str] = Field(default_factory=list)
    status_id: str = Field(alias="statusId")
    instance_type_id: str = Field(alias="instanceTypeId")
    publication: list[PublicationPayload] = Field(default_factory=list)
    identifiers: list[IdentifierPayload] = Field(default_factory=list)


class HoldingRecord(OkapiBaseModel):
    instance_id: str = Field(alias="instanceId")
    permanent_location_id: str = Field(alias="permanentLocationId")


class ItemStatusPayload(OkapiBaseModel):
    name: str


class ItemRecord(OkapiRecordModel):
    """Inventory item."""

    id: str | None = None
    holdings_record_id: str = Field(alias="holdingsRecordId")
    status: ItemStatusPayload | None = None
    material_type_id: str | None = Field(default=None, alias="materialTypeId")
    permanent_loan_type_id: str | None = Field(default=None, alias="permanentLoanTypeId")
    purchase_order_line_identifier: str | None = Field(
        default=None, alias="purchaseOrderLineIdentifier"
    )
    barcode: str | None = None
    permanent_location_id: str | None = Field(default=None, alias="permanentLocationId")
