"""
Folio Error Hierarchy — Structured exceptions for document operations.

Every error carries the operation and object reference it was raised for,
so a failure can be written verbatim to the structured operation log.

Hierarchy:
    FolioError
    ├── FolioValidationError   — Input or precondition failed
    ├── BackingStoreError      — The persistent store rejected or failed a query
    ├── DocumentNotFoundError  — No document with the given id
    └── FolioConfigError       — Invalid folio.yaml
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class FolioError(Exception):
    """
    Base error for all Folio failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.operation: Optional[str] = context.get("operation")
        self.object_ref: Optional[str] = context.get("object_ref")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "operation": self.operation,
            "object_ref": self.object_ref,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("operation", "object_ref")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.object_ref:
            parts.append(f"object_ref={self.object_ref}")
        return " | ".join(parts)


class FolioValidationError(FolioError):
    """
    Input validation failed (blank folder name, blank file path...).
    Includes field-level error details.
    """

    def __init__(self, message: str, **context: Any):
        self.validation_errors: Optional[list] = context.get("validation_errors")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["validation_errors"] = self.validation_errors
        return d


class BackingStoreError(FolioError):
    """The backing store rejected or failed a query."""

    def __init__(self, message: str, **context: Any):
        self.query: Optional[str] = context.get("query")
        self.cause: Optional[str] = context.get("cause")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["query"] = self.query
        d["cause"] = self.cause
        return d


class DocumentNotFoundError(FolioError):
    """No document matched the given id."""

    def __init__(self, message: str, **context: Any):
        self.document_id: Optional[str] = context.get("document_id")
        super().__init__(message, **context)


class FolioConfigError(FolioError):
    """Configuration error — invalid folio.yaml."""
    pass
