"""OneSignal push adapter."""

from __future__ import annotations

from .client import OneSignalAPIError, OneSignalGateway
from .schema import ErrorResponse, NotificationRequest, NotificationResponse
from .translator import build_notification_request

__all__ = [
    "ErrorResponse",
    "NotificationRequest",
    "NotificationResponse",
    "OneSignalAPIError",
    "OneSignalGateway",
    "build_notification_request",
]
