"""Domain port definitions for adapters."""

from __future__ import annotations

from .inventory import InventoryGateway
from .storage import OrderStorage

__all__ = ["InventoryGateway", "OrderStorage"]
