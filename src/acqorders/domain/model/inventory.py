"""Payloads submitted to the inventory modules."""

from __future__ import annotations

from dataclasses import dataclass

from acqorders.domain.model.enums import ItemStatus


@dataclass(slots=True, frozen=True, kw_only=True)
class ReferenceType:
    id: str
    name: str | None = None
    code: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class InstanceIdentifier:
    identifier_type_id: str
    value: str


@dataclass(slots=True, frozen=True, kw_only=True)
class Publication:
    publisher: str | None = None
    date_of_publication: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class InstancePayload:
    source: str
    status_id: str
    instance_type_id: str
    title: str | None = None
    editions: tuple[str, ...] = ()
    publication: tuple[Publication, ...] = ()
    identifiers: tuple[InstanceIdentifier, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class ItemPayload:
    holdings_record_id: str
    material_type_id: str
    permanent_loan_type_id: str
    purchase_order_line_identifier: str
    status: ItemStatus = ItemStatus.ON_ORDER
