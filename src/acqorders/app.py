"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from acqorders.adapters.http_resilience import ResilientClient
from acqorders.adapters.okapi import HttpInventoryGateway, HttpOrderStorage, OkapiClient
from acqorders.adapters.okapi.schema import PurchaseOrderPayload, ReceivingCollectionPayload
from acqorders.adapters.okapi.translator import (
    errors_to_payload,
    history_to_payload,
    order_from_payload,
    receiving_request_from_payload,
    receiving_results_to_payload,
)
from acqorders.config import get_okapi_config
from acqorders.domain.inventory import InventoryReconciler
from acqorders.domain.orders import OrderUpdateOrchestrator
from acqorders.domain.receiving import DEFAULT_HISTORY_LIMIT, ReceivingReconciler, receiving_history

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from acqorders.config import OkapiConfig, ResilienceConfig
    from acqorders.domain.model import ReceivingHistory, ReceivingResults
    from acqorders.domain.orders import UpdateOrderResult

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]

log = getLogger(__name__)


def _open_client(config: OkapiConfig | None, client_factory: ClientFactory | None) -> OkapiClient:
    effective_config = config or get_okapi_config()
    return OkapiClient.from_config(effective_config, client_factory or ResilientClient)


def update_order(
    order_id: str,
    order: Mapping[str, object],
    *,
    config: OkapiConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> UpdateOrderResult:
    """Bring order ``order_id`` in line with the composite order JSON ``order``."""

    desired = order_from_payload(PurchaseOrderPayload.model_validate(order))
    log.info("Updating order %s (%s, %s line(s))", order_id, desired.po_number, len(desired.lines))

    async def run() -> UpdateOrderResult:
        async with _open_client(config, client_factory) as client:
            orchestrator = OrderUpdateOrchestrator(
                storage=HttpOrderStorage(client),
                inventory=InventoryReconciler(HttpInventoryGateway(client)),
            )
            return await orchestrator.update_order(order_id, desired)

    return asyncio.run(run())


def receive_pieces(
    request: Mapping[str, object],
    *,
    config: OkapiConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> ReceivingResults:
    """Receive the pieces listed in the receiving collection JSON ``request``."""

    receiving = receiving_request_from_payload(ReceivingCollectionPayload.model_validate(request))

    async def run() -> ReceivingResults:
        async with _open_client(config, client_factory) as client:
            reconciler = ReceivingReconciler(
                storage=HttpOrderStorage(client),
                inventory=HttpInventoryGateway(client),
            )
            return await reconciler.receive(receiving)

    results = asyncio.run(run())
    log.info(
        "Finished receiving: lines=%s, failed=%s",
        len(results.receiving_results),
        sum(result.processed_with_error for result in results.receiving_results),
    )
    return results


def get_receiving_history(
    *,
    limit: int = DEFAULT_HISTORY_LIMIT,
    offset: int = 0,
    query: str | None = None,
    config: OkapiConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> ReceivingHistory:
    async def run() -> ReceivingHistory:
        async with _open_client(config, client_factory) as client:
            return await receiving_history(
                HttpOrderStorage(client), limit=limit, offset=offset, query=query
            )

    return asyncio.run(run())


def render_update_result(result: UpdateOrderResult) -> dict[str, object] | None:
    if result.succeeded:
        return None
    return errors_to_payload(result.errors).to_json()


def render_receiving_results(results: ReceivingResults) -> dict[str, object]:
    return receiving_results_to_payload(results).to_json()


def render_receiving_history(history: ReceivingHistory) -> dict[str, object]:
    return history_to_payload(history).to_json()
