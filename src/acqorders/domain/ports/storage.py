"""Port for the orders storage module."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acqorders.domain.model import LineItem, Order, Piece, ReceivingHistory


@runtime_checkable
class OrderStorage(Protocol):
    """Persistence contract for orders, lines and pieces.

    Lookups of a single record raise ``StorageNotFound`` when it is absent.
    """

    async def get_order(self, order_id: str) -> Order: ...

    async def po_number_exists(self, po_number: str) -> bool: ...

    async def update_order_summary(self, order: Order) -> None: ...

    async def get_lines(self, order_id: str) -> list[LineItem]: ...

    async def get_line(self, line_id: str) -> LineItem: ...

    async def create_line(self, line: LineItem) -> str: ...

    async def update_line(self, line_id: str, line: LineItem) -> None: ...

    async def delete_line(self, line_id: str) -> None: ...

    async def get_pieces(self, piece_ids: Sequence[str]) -> list[Piece]: ...

    async def get_pieces_by_line(self, line_id: str) -> list[Piece]: ...

    async def save_pieces(self, pieces: Sequence[Piece]) -> None: ...

    async def get_receiving_history(
        self,
        *,
        limit: int,
        offset: int,
        query: str | None = None,
    ) -> ReceivingHistory: ...
