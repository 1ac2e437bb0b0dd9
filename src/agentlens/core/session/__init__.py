"""Session layer — per-terminal driver, idle watchdog, and registry."""

from agentlens.core.session.driver import SessionDriver
from agentlens.core.session.models import SessionSnapshot, SessionStatus
from agentlens.core.session.registry import SessionRegistry
from agentlens.core.session.watchdog import IdleWatchdog

__all__ = [
    "IdleWatchdog",
    "SessionDriver",
    "SessionRegistry",
    "SessionSnapshot",
    "SessionStatus",
]
