"""
D5 Audit Types
"""

from enum import Enum


class AuditState(str, Enum):
    """Orchestrator steps, entered strictly in declaration order"""

    IDLE = "idle"
    VALIDATING_URL = "validating_url"
    LAUNCHING_BROWSER = "launching_browser"
    EXTRACTING_PAGE = "extracting_page"
    SCORING_SIGNALS = "scoring_signals"
    INVOKING_LLM = "invoking_llm"
    COMPOSING_RESULT = "composing_result"
    DONE = "done"
    ERROR = "error"


TERMINAL_STATES = frozenset({AuditState.DONE, AuditState.ERROR})
