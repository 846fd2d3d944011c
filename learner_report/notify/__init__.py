"""Outbound notification layer (email + template messaging)."""

from .channels import DeliveryError, EmailChannel, NotificationChannel, WhatsAppChannel, build_channels
from .dispatch import build_requests, dispatch

__all__ = [
    "DeliveryError",
    "EmailChannel",
    "NotificationChannel",
    "WhatsAppChannel",
    "build_channels",
    "build_requests",
    "dispatch",
]
