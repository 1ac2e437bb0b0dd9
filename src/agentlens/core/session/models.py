"""
Session display models.

SessionStatus is the four-state indicator the UI shows for a session.
Only ``working`` and ``idle`` come from the output interpreter; ``waiting``
and ``error`` are set by business logic (open approval prompts, process
exit codes).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class SessionStatus(StrEnum):
    WORKING = "working"
    WAITING = "waiting"
    IDLE = "idle"
    ERROR = "error"


def _now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class SessionSnapshot:
    """What the UI currently shows for one session."""

    session_id: str
    status: SessionStatus = SessionStatus.IDLE
    last_message: str | None = None
    detected: bool = False
    exit_code: int | None = None
    updated_at: str = field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()

    def summary(self) -> str:
        """One-line summary, e.g. ``working: ⏺ Write(src/app.py)``."""
        if self.last_message:
            return f"{self.status.value}: {self.last_message}"
        return self.status.value

    def short_id(self) -> str:
        """First 8 chars of session_id for display."""
        return self.session_id[:8]
