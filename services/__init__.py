from __future__ import annotations

# Re-export key service classes for convenient imports
from .communication import EmailService
from .notifications import EmailNotifier, NotificationEvent

__all__ = ["EmailService", "EmailNotifier", "NotificationEvent"]
