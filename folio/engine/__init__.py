"""Folio Engine — errors, configuration, logging, notifications."""

from folio.engine.errors import (  # noqa: F401
    BackingStoreError,
    DocumentNotFoundError,
    FolioConfigError,
    FolioError,
    FolioValidationError,
)
from folio.engine.notifications import Notification, NotificationKind, Notifier  # noqa: F401

__all__ = [
    "FolioError",
    "FolioValidationError",
    "BackingStoreError",
    "DocumentNotFoundError",
    "FolioConfigError",
    "Notification",
    "NotificationKind",
    "Notifier",
]
