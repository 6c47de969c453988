"""Ports implemented by adapters."""

from __future__ import annotations

from .notifications import DeliveryError, DeliveryReceipt, NotificationGateway, PushMessage
from .store import (
    Collection,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
    SnapshotListener,
    StoreError,
    Unsubscribe,
)

__all__ = [
    "Collection",
    "DeliveryError",
    "DeliveryReceipt",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "NotificationGateway",
    "PushMessage",
    "Snapshot",
    "SnapshotListener",
    "StoreError",
    "Unsubscribe",
]
