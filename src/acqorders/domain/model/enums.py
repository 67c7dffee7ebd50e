"""Domain enums (pure, dependency-light).

Values match the wire representation used by the storage modules.
"""

from __future__ import annotations

from enum import StrEnum


class WorkflowStatus(StrEnum):
    """Order workflow state. ``DRAFT`` is stored as "Pending", ``ACTIVE`` as "Open"."""

    DRAFT = "Pending"
    ACTIVE = "Open"
    CLOSED = "Closed"


class ReceiptStatus(StrEnum):
    PENDING = "Pending"
    AWAITING_RECEIPT = "Awaiting Receipt"
    PARTIALLY_RECEIVED = "Partially Received"
    FULLY_RECEIVED = "Fully Received"


class ReceivingStatus(StrEnum):
    EXPECTED = "Expected"
    RECEIVED = "Received"


class ItemStatus(StrEnum):
    ON_ORDER = "On order"
    IN_PROCESS = "In process"


class ProcessingStatus(StrEnum):
    SUCCESS = "Success"
    FAILURE = "Failure"


class ReferenceKind(StrEnum):
    """Inventory reference data looked up by code or name."""

    IDENTIFIER_TYPE = "identifier-types"
    INSTANCE_TYPE = "instance-types"
    INSTANCE_STATUS = "instance-statuses"
    LOAN_TYPE = "loan-types"
