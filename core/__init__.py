"""Core utilities and configuration for UXAudit"""
from core.config import settings
from core.exceptions import ExternalAPIError, UXAuditError, ValidationError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "UXAuditError",
    "ValidationError",
    "ExternalAPIError",
]
