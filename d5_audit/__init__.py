"""
D5 Audit - request orchestration and HTTP surface
"""

from .coordinator import AuditCoordinator, AuditRun, check_llm_credentials, normalize_url, summarize
from .types import AuditState

__all__ = [
    "AuditCoordinator",
    "AuditRun",
    "AuditState",
    "check_llm_credentials",
    "normalize_url",
    "summarize",
]
