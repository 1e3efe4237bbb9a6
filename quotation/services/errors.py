from __future__ import annotations

from typing import Dict, Optional


class ServiceError(RuntimeError):
    """Recoverable service error (validation/lookup/storage)."""


class ValidationError(ServiceError):
    """User input rejected; nothing was changed."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {"__all__": message}


class NotFoundError(ServiceError):
    pass


class BreakdownError(ValidationError):
    pass


class StoreError(ServiceError):
    pass


class SpreadsheetError(ServiceError):
    pass
