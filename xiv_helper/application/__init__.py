"""Application layer services."""

from .lookup_service import LookupApplicationService, LookupServiceError

__all__ = [
    "LookupApplicationService",
    "LookupServiceError",
]
