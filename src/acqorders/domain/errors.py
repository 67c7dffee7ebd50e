"""Error taxonomy for order workflows.

Every raised error carries an ``Error`` value so that terminal failures and
accumulated per-line processing errors can be reported in one list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final


class ErrorCode(StrEnum):
    GENERIC = "genericError"
    ID_MISMATCH = "idMismatch"
    NOT_FOUND = "notFound"
    PO_NUMBER_NOT_UNIQUE = "poNumberNotUnique"
    INVALID_PRODUCT_TYPE = "invalidProductType"
    SOURCE_CODE_REQUIRED = "sourceCodeRequired"
    MATERIAL_TYPE_REQUIRED = "materialTypeRequired"
    MISSING_REFERENCE_RECORD = "missingReferenceRecord"
    ITEMS_NOT_CREATED = "itemsNotCreated"
    ITEM_UPDATE_FAILED = "itemUpdateFailed"
    PIECE_NOT_FOUND = "pieceNotFound"
    PIECE_UPDATE_FAILED = "pieceUpdateFailed"
    LINE_SEQUENCE_EXCEEDED = "poLineSequenceExceeded"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def to_error(self, message: str | None = None, **parameters: str) -> Error:
        return Error(code=self, message=message or self.description, parameters=parameters)


_DESCRIPTIONS: Final[dict[ErrorCode, str]] = {
    ErrorCode.GENERIC: "Generic error",
    ErrorCode.ID_MISMATCH: "Mismatch between id in path and request body",
    ErrorCode.NOT_FOUND: "Record not found",
    ErrorCode.PO_NUMBER_NOT_UNIQUE: "PO Number already exists",
    ErrorCode.INVALID_PRODUCT_TYPE: "Invalid product type(s) specified for the PO line",
    ErrorCode.SOURCE_CODE_REQUIRED: "The source code is required but not available in PO line",
    ErrorCode.MATERIAL_TYPE_REQUIRED: "The Material Type is required but not available in PO line",
    ErrorCode.MISSING_REFERENCE_RECORD: "Required inventory reference record not found",
    ErrorCode.ITEMS_NOT_CREATED: "No items created for PO line",
    ErrorCode.ITEM_UPDATE_FAILED: "Item record cannot be updated",
    ErrorCode.PIECE_NOT_FOUND: "Piece record not found",
    ErrorCode.PIECE_UPDATE_FAILED: "Piece record cannot be updated",
    ErrorCode.LINE_SEQUENCE_EXCEEDED: "PO line sequence cannot exceed 999",
}


@dataclass(slots=True, frozen=True, kw_only=True)
class Error:
    code: ErrorCode
    message: str
    parameters: dict[str, str] = field(default_factory=dict[str, str])


class OrdersError(Exception):
    """Base class for errors that terminate an order workflow."""

    http_status: int = 500
    default_code: ErrorCode = ErrorCode.GENERIC

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        **parameters: str,
    ) -> None:
        self.error = (code or self.default_code).to_error(message, **parameters)
        super().__init__(self.error.message)


class ValidationError(OrdersError):
    """A schema or business rule was violated."""

    http_status = 422


class ConflictError(ValidationError):
    """The requested PO number is already used by another order."""

    http_status = 400
    default_code = ErrorCode.PO_NUMBER_NOT_UNIQUE


class InventoryError(OrdersError):
    """An inventory invariant could not be satisfied."""

    default_code = ErrorCode.MISSING_REFERENCE_RECORD


class StorageNotFound(OrdersError):
    """A referenced order, line or piece does not exist in storage."""

    http_status = 404
    default_code = ErrorCode.NOT_FOUND


def error_from_exception(exc: BaseException) -> Error:
    if isinstance(exc, OrdersError):
        return exc.error
    return ErrorCode.GENERIC.to_error(str(exc) or type(exc).__name__)


def http_status_for(exc: BaseException) -> int:
    if isinstance(exc, OrdersError):
        return exc.http_status
    return 500
