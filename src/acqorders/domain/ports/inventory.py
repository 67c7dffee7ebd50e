"""Port for the inventory modules (instances, holdings, items, reference data)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acqorders.domain.model import (
        InstancePayload,
        ItemPayload,
        ReceivedItem,
        ReferenceKind,
        ReferenceType,
    )


@runtime_checkable
class InventoryGateway(Protocol):
    """Lookups return record ids; creations return the id of the new record."""

    async def lookup_reference_types(
        self,
        kind: ReferenceKind,
        keys: Sequence[str],
    ) -> list[ReferenceType]: ...

    async def lookup_instances(self, query: str) -> list[str]: ...

    async def create_instance(self, payload: InstancePayload) -> str: ...

    async def lookup_holdings(self, instance_id: str, location_id: str) -> list[str]: ...

    async def create_holding(self, instance_id: str, location_id: str) -> str: ...

    async def lookup_items(self, line_id: str, holding_id: str, limit: int) -> list[str]: ...

    async def create_item(self, payload: ItemPayload) -> str: ...

    async def receive_item(self, item_id: str, received: ReceivedItem) -> str | None:
        """Apply receiving overrides to an item and return its resulting status name."""
        ...
