"""Composite order update, including the Draft -> Active transition.

The orchestrator never raises domain errors to its caller: the outcome is an
``UpdateOrderResult`` that either succeeded or carries the aggregated error
list (terminal cause plus any per-line processing errors).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from acqorders.domain.concurrency import join_all
from acqorders.domain.errors import (
    ConflictError,
    ErrorCode,
    ValidationError,
    error_from_exception,
    http_status_for,
)
from acqorders.domain.lines import plan_line_changes, plan_renumbering
from acqorders.domain.model import WorkflowStatus

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from acqorders.domain.errors import Error
    from acqorders.domain.inventory import InventoryReconciler
    from acqorders.domain.lines import LinePlan
    from acqorders.domain.model import LineItem, Order
    from acqorders.domain.ports import OrderStorage

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True, kw_only=True)
class UpdateOrderResult:
    errors: tuple[Error, ...] = ()
    http_status: int = 204

    @property
    def succeeded(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class ProcessingErrors:
    """Per-line failures accumulated while lines are dispatched."""

    entries: list[tuple[str | None, Exception]] = field(
        default_factory=list[tuple[str | None, Exception]]
    )

    def record(self, line_id: str | None, exc: Exception) -> None:
        self.entries.append((line_id, exc))

    def contains(self, exc: BaseException) -> bool:
        return any(recorded is exc for _, recorded in self.entries)

    def to_errors(self) -> list[Error]:
        errors: list[Error] = []
        for line_id, exc in self.entries:
            error = error_from_exception(exc)
            if line_id is not None and "poLineId" not in error.parameters:
                error = replace(error, parameters={**error.parameters, "poLineId": line_id})
            errors.append(error)
        return errors


def is_activation(stored: Order, desired: Order) -> bool:
    return (
        stored.workflow_status is WorkflowStatus.DRAFT
        and desired.workflow_status is WorkflowStatus.ACTIVE
    )


def is_po_number_changed(stored: Order, desired: Order) -> bool:
    return stored.po_number.casefold() != desired.po_number.casefold()


@dataclass(slots=True)
class OrderUpdateOrchestrator:
    storage: OrderStorage
    inventory: InventoryReconciler
    clock: Callable[[], datetime] = _utcnow

    async def update_order(self, order_id: str, desired: Order) -> UpdateOrderResult:
        """Update order ``order_id`` to match ``desired``."""

        errors = ProcessingErrors()
        try:
            await self._update_order(order_id, desired, errors)
        except Exception as exc:  # noqa: BLE001
            log.error("Order %s update failed: %s", order_id, exc)
            return _failure(exc, errors)
        log.info("Successfully updated order %s (%s)", order_id, desired.po_number)
        return UpdateOrderResult()

    async def _update_order(self, order_id: str, desired: Order, errors: ProcessingErrors) -> None:
        if desired.id is not None and desired.id != order_id:
            raise ValidationError(code=ErrorCode.ID_MISMATCH, orderId=order_id)
        desired = replace(desired, id=order_id)

        stored = await self.storage.get_order(order_id)
        if is_po_number_changed(stored, desired) and await self.storage.po_number_exists(
            desired.po_number
        ):
            raise ConflictError(
                f"PO Number '{desired.po_number}' already exists",
                poNumber=desired.po_number,
            )

        await self._update_lines(stored, desired, errors)

        if is_activation(stored, desired):
            await self.activate(desired, errors)
        else:
            await self.storage.update_order_summary(desired)

    async def activate(self, order: Order, errors: ProcessingErrors) -> None:
        """Move ``order`` to Active and materialize inventory for every line."""

        if order.id is None:
            raise ValidationError("Order id is required for activation")
        order.workflow_status = WorkflowStatus.ACTIVE
        order.date_ordered = self.clock()
        if not order.lines:
            order.lines = await self.storage.get_lines(order.id)

        materialized = await join_all(
            _tracked(line.id, self.inventory.materialize(line), errors) for line in order.lines
        )
        order.lines = [result.line for result in materialized]
        await self.storage.update_order_summary(order)
        order.promote_pending_lines()

        stored_lines = await self.storage.get_lines(order.id)
        plan = plan_line_changes(order.lines, stored_lines, order.po_number)
        await self._dispatch(plan, errors)
        order.lines = plan.lines

    async def _update_lines(self, stored: Order, desired: Order, errors: ProcessingErrors) -> None:
        if not desired.lines and not is_po_number_changed(stored, desired):
            return
        if stored.id is None:
            raise ValidationError("Stored order has no id")
        stored_lines = await self.storage.get_lines(stored.id)
        if desired.lines:
            plan = plan_line_changes(desired.lines, stored_lines, desired.po_number)
            await self._dispatch(plan, errors)
            desired.lines = plan.lines
        else:
            await self._dispatch(plan_renumbering(stored_lines, desired.po_number), errors)

    async def _dispatch(self, plan: LinePlan, errors: ProcessingErrors) -> None:
        operations: list[Awaitable[None]] = []
        for line in plan.to_create:
            operations.append(_tracked(line.id, self._create_line(line), errors))
        for line in plan.to_update:
            operations.append(_tracked(line.id, self._update_line(line), errors))
        for line in plan.to_delete:
            operations.append(_tracked(line.id, self._delete_line(line), errors))
        await join_all(operations)

    async def _create_line(self, line: LineItem) -> None:
        line.id = await self.storage.create_line(line)

    async def _update_line(self, line: LineItem) -> None:
        if line.id is None:
            raise ValidationError("Cannot update a PO line without id")
        await self.storage.update_line(line.id, line)

    async def _delete_line(self, line: LineItem) -> None:
        if line.id is None:
            raise ValidationError("Cannot delete a PO line without id")
        await self.storage.delete_line(line.id)


async def _tracked[T](
    line_id: str | None,
    awaitable: Awaitable[T],
    errors: ProcessingErrors,
) -> T:
    try:
        return await awaitable
    except Exception as exc:
        errors.record(line_id, exc)
        raise


def _failure(exc: Exception, errors: ProcessingErrors) -> UpdateOrderResult:
    status = http_status_for(exc)
    if 400 <= status < 500:
        return UpdateOrderResult(errors=(error_from_exception(exc),), http_status=status)
    collected = errors.to_errors()
    if not errors.contains(exc):
        collected.append(error_from_exception(exc))
    return UpdateOrderResult(errors=tuple(collected), http_status=status)


__all__ = [
    "OrderUpdateOrchestrator",
    "ProcessingErrors",
    "UpdateOrderResult",
    "is_activation",
    "is_po_number_changed",
]
