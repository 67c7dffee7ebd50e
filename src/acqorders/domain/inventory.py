"""Materialization of inventory records (instance, holdings, items) for order lines.

Every step is lookup-or-create, so materializing an unchanged line twice
yields the same instance and holdings and no duplicate items.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from acqorders.domain.concurrency import Failed, join_all, settle_all, successes
from acqorders.domain.errors import ErrorCode, InventoryError, ValidationError
from acqorders.domain.model import (
    InstanceIdentifier,
    InstancePayload,
    ItemPayload,
    Publication,
    ReferenceKind,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from acqorders.domain.model import LineItem, Location, ProductId
    from acqorders.domain.ports import InventoryGateway

log = getLogger(__name__)

DEFAULT_INSTANCE_TYPE_CODE: Final = "zzz"
DEFAULT_INSTANCE_STATUS_CODE: Final = "temp"
DEFAULT_LOAN_TYPE_NAME: Final = "Can circulate"


@dataclass(slots=True, frozen=True)
class MaterializedLine:
    """A line with its instance reference attached and the ids of its items."""

    line: LineItem
    item_ids: tuple[str, ...] = ()


def build_instance_query(identifiers: list[InstanceIdentifier]) -> str:
    """CQL query matching any instance that carries one of ``identifiers``."""

    return " or ".join(
        f'(identifiers adj "\\"identifierTypeId\\": \\"{identifier.identifier_type_id}\\"" '
        f'and identifiers adj "\\"value\\": \\"{identifier.value}\\"")'
        for identifier in identifiers
    )


def expected_quantity(locations: list[Location]) -> int:
    return sum(location.quantity for location in locations)


@dataclass(slots=True)
class _CachedReference:
    """Resolve one reference id at most once, shared by concurrent callers."""

    resolve: Callable[[], Awaitable[str]]
    _task: asyncio.Task[str] | None = field(default=None, init=False)

    async def get(self) -> str:
        if self._task is None:
            self._task = asyncio.ensure_future(self.resolve())
        return await self._task


@dataclass(slots=True)
class InventoryReconciler:
    inventory: InventoryGateway
    instance_type_code: str = DEFAULT_INSTANCE_TYPE_CODE
    instance_status_code: str = DEFAULT_INSTANCE_STATUS_CODE
    loan_type_name: str = DEFAULT_LOAN_TYPE_NAME

    async def materialize(self, line: LineItem) -> MaterializedLine:
        """Resolve or create the instance, holdings and items backing ``line``."""

        instance_id = line.instance_id or await self.resolve_instance(line)
        line = replace(line, instance_id=instance_id)
        item_ids = await self.materialize_items(line)
        return MaterializedLine(line=line, item_ids=tuple(item_ids))

    # Instances -----------------------------------------------------------------

    async def resolve_instance(self, line: LineItem) -> str:
        """Return the id of an instance matching the line's product ids, creating one if needed."""

        scheme_ids = await self._identifier_scheme_ids(line)
        identifiers = _instance_identifiers(line.product_ids, scheme_ids)
        if identifiers:
            found = await self.inventory.lookup_instances(build_instance_query(identifiers))
            if found:
                return found[0]
        return await self._create_instance(line, identifiers)

    async def _identifier_scheme_ids(self, line: LineItem) -> dict[str, str]:
        schemes = sorted({product_id.scheme for product_id in line.product_ids})
        if not schemes:
            return {}
        records = await self.inventory.lookup_reference_types(
            ReferenceKind.IDENTIFIER_TYPE, schemes
        )
        if len(records) != len(schemes):
            raise ValidationError(
                f"Invalid product type(s) is specified for the PO line with id {line.id}",
                code=ErrorCode.INVALID_PRODUCT_TYPE,
                poLineId=str(line.id),
            )
        scheme_ids: dict[str, str] = {}
        for record in records:
            if record.name is not None:
                scheme_ids.setdefault(record.name, record.id)
        return scheme_ids

    async def _create_instance(
        self,
        line: LineItem,
        identifiers: list[InstanceIdentifier],
    ) -> str:
        if not line.source_code:
            raise ValidationError(code=ErrorCode.SOURCE_CODE_REQUIRED, poLineId=str(line.id))
        instance_type_id, status_id = await join_all(
            (
                self._reference_id(ReferenceKind.INSTANCE_TYPE, self.instance_type_code),
                self._reference_id(ReferenceKind.INSTANCE_STATUS, self.instance_status_code),
            )
        )
        publication: tuple[Publication, ...] = ()
        if line.publisher is not None or line.publication_date is not None:
            publication = (
                Publication(
                    publisher=line.publisher,
                    date_of_publication=line.publication_date,
                ),
            )
        payload = InstancePayload(
            source=line.source_code,
            title=line.title,
            editions=(line.edition,) if line.edition is not None else (),
            status_id=status_id,
            instance_type_id=instance_type_id,
            publication=publication,
            identifiers=tuple(identifiers),
        )
        instance_id = await self.inventory.create_instance(payload)
        log.debug("Created instance %s for PO line %s", instance_id, line.id)
        return instance_id

    async def _reference_id(self, kind: ReferenceKind, key: str) -> str:
        records = await self.inventory.lookup_reference_types(kind, [key])
        if not records:
            raise InventoryError(f"No records of '{kind}' can be found", referenceKind=str(kind))
        return records[0].id

    # Holdings and items --------------------------------------------------------

    async def materialize_items(self, line: LineItem) -> list[str]:
        """Return item ids for every location of ``line``, creating the shortfall.

        Locations are grouped by id because a holding is unique per
        (instance, location). Zero-quantity groups produce nothing.
        """

        if line.instance_id is None:
            raise InventoryError(
                f"PO line {line.id} has no instance to attach items to",
                poLineId=str(line.id),
            )
        loan_type = _CachedReference(
            lambda: self._reference_id(ReferenceKind.LOAN_TYPE, self.loan_type_name)
        )
        groups = [
            (location_id, quantity)
            for location_id, locations in line.locations_by_id().items()
            if (quantity := expected_quantity(locations)) > 0
        ]
        per_location = await join_all(
            self._materialize_location(line, location_id, quantity, loan_type)
            for location_id, quantity in groups
        )
        return [item_id for item_ids in per_location for item_id in item_ids]

    async def get_or_create_holding(self, instance_id: str, location_id: str) -> str:
        holdings = await self.inventory.lookup_holdings(instance_id, location_id)
        if holdings:
            return holdings[0]
        return await self.inventory.create_holding(instance_id, location_id)

    async def _materialize_location(
        self,
        line: LineItem,
        location_id: str,
        quantity: int,
        loan_type: _CachedReference,
    ) -> list[str]:
        instance_id = line.instance_id
        if instance_id is None or line.id is None:
            raise InventoryError(f"PO line {line.id} is not ready for item creation")
        holding_id = await self.get_or_create_holding(instance_id, location_id)
        existing = await self.inventory.lookup_items(line.id, holding_id, quantity)
        log.debug(
            "%s existing items found out of %s for PO line %s",
            len(existing),
            quantity,
            line.id,
        )
        created = await self._create_missing_items(
            line, holding_id, quantity - len(existing), loan_type
        )
        item_ids = [*existing, *created]
        if not item_ids:
            raise InventoryError(
                f"No items created for PO Line with {line.id} id",
                code=ErrorCode.ITEMS_NOT_CREATED,
                poLineId=line.id,
                locationId=location_id,
            )
        return item_ids

    async def _create_missing_items(
        self,
        line: LineItem,
        holding_id: str,
        shortfall: int,
        loan_type: _CachedReference,
    ) -> list[str]:
        if shortfall <= 0 or line.id is None:
            return []
        material_type_id = _material_type_id(line)
        payload = ItemPayload(
            holdings_record_id=holding_id,
            material_type_id=material_type_id,
            permanent_loan_type_id=await loan_type.get(),
            purchase_order_line_identifier=line.id,
        )
        log.debug("Creating %s items for PO line %s", shortfall, line.id)
        outcomes = await settle_all(self.inventory.create_item(payload) for _ in range(shortfall))
        for outcome in outcomes:
            if isinstance(outcome, Failed):
                log.error(
                    "Item creation failed for PO line %s, holding %s: %s",
                    line.id,
                    holding_id,
                    outcome.error,
                )
        return successes(outcomes)


def _instance_identifiers(
    product_ids: list[ProductId],
    scheme_ids: dict[str, str],
) -> list[InstanceIdentifier]:
    return [
        InstanceIdentifier(identifier_type_id=scheme_ids[product_id.scheme], value=product_id.value)
        for product_id in product_ids
        if product_id.scheme in scheme_ids
    ]


def _material_type_id(line: LineItem) -> str:
    if not line.material_types:
        raise ValidationError(code=ErrorCode.MATERIAL_TYPE_REQUIRED, poLineId=str(line.id))
    return line.material_types[0]
