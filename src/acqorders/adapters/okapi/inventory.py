"""Inventory gateway backed by the inventory and inventory-storage modules."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter

from acqorders.domain.model import ReferenceKind, ReferenceType

from .schema import ItemRecord, RecordId, ReferenceTypePayload
from .translator import (
    apply_receipt_to_item,
    holding_to_record,
    instance_to_record,
    item_to_record,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acqorders.domain.model import InstancePayload, ItemPayload, ReceivedItem

    from .client import JsonObject, OkapiClient

log = getLogger(__name__)

INSTANCES: Final = "/inventory/instances"
HOLDINGS: Final = "/holdings-storage/holdings"
ITEMS: Final = "/item-storage/items"

_RECORD_IDS = TypeAdapter(list[RecordId])
_REFERENCE_TYPES = TypeAdapter(list[ReferenceTypePayload])


@dataclass(slots=True, frozen=True)
class _ReferenceEndpoint:
    collection: str
    key_field: str


_REFERENCE_ENDPOINTS: Final[dict[ReferenceKind, _ReferenceEndpoint]] = {
    ReferenceKind.IDENTIFIER_TYPE: _ReferenceEndpoint("identifierTypes", "name"),
    ReferenceKind.INSTANCE_TYPE: _ReferenceEndpoint("instanceTypes", "code"),
    ReferenceKind.INSTANCE_STATUS: _ReferenceEndpoint("instanceStatuses", "code"),
    ReferenceKind.LOAN_TYPE: _ReferenceEndpoint("loantypes", "name"),
}


def _ids(payload: JsonObject, collection: str) -> list[str]:
    return [record.id for record in _RECORD_IDS.validate_python(payload.get(collection, []))]


@dataclass(slots=True)
class HttpInventoryGateway:
    client: OkapiClient

    async def lookup_reference_types(
        self,
        kind: ReferenceKind,
        keys: Sequence[str],
    ) -> list[ReferenceType]:
        endpoint = _REFERENCE_ENDPOINTS[kind]
        query = " or ".join(f'{endpoint.key_field}=="{key}"' for key in keys)
        payload = await self.client.get_json(
            f"/{kind.value}",
            params={"query": query, "limit": max(len(keys), 1)},
            reference=True,
        )
        records = _REFERENCE_TYPES.validate_python(payload.get(endpoint.collection, []))
        return [ReferenceType(id=record.id, name=record.name, code=record.code) for record in records]

    async def lookup_instances(self, query: str) -> list[str]:
        payload = await self.client.get_json(INSTANCES, params={"query": query})
        return _ids(payload, "instances")

    async def create_instance(self, payload: InstancePayload) -> str:
        return await self.client.post_record(INSTANCES, instance_to_record(payload).to_json())

    async def lookup_holdings(self, instance_id: str, location_id: str) -> list[str]:
        payload = await self.client.get_json(
            HOLDINGS,
            params={
                "query": f"instanceId=={instance_id} and permanentLocationId=={location_id}",
                "limit": 1,
            },
        )
        return _ids(payload, "holdingsRecords")

    async def create_holding(self, instance_id: str, location_id: str) -> str:
        holding_id = await self.client.post_record(
            HOLDINGS, holding_to_record(instance_id, location_id).to_json()
        )
        log.debug("Created holding %s for instance %s at %s", holding_id, instance_id, location_id)
        return holding_id

    async def lookup_items(self, line_id: str, holding_id: str, limit: int) -> list[str]:
        payload = await self.client.get_json(
            ITEMS,
            params={
                "query": f"purchaseOrderLineIdentifier=={line_id} and holdingsRecordId=={holding_id}",
                "limit": limit,
            },
        )
        return _ids(payload, "items")

    async def create_item(self, payload: ItemPayload) -> str:
        return await self.client.post_record(ITEMS, item_to_record(payload).to_json())

    async def receive_item(self, item_id: str, received: ReceivedItem) -> str | None:
        stored = ItemRecord.model_validate(await self.client.get_json(f"{ITEMS}/{item_id}"))
        updated = apply_receipt_to_item(stored, received)
        await self.client.put_record(f"{ITEMS}/{item_id}", updated.to_json())
        return updated.status.name if updated.status is not None else None
