"""Public interface for the Okapi adapter."""

from __future__ import annotations

from .client import OkapiAPIError, OkapiClient
from .inventory import HttpInventoryGateway
from .storage import HttpOrderStorage

__all__ = [
    "HttpInventoryGateway",
    "HttpOrderStorage",
    "OkapiAPIError",
    "OkapiClient",
]
