"""
Interpreter domain models.

AgentStatus      — what the interpreter can classify (working / idle).
StatusReport     — the result of one ingest() or check_idle() call.
InterpreterState — per-session mutable state behind OutputInterpreter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AgentStatus(StrEnum):
    WORKING = "working"
    IDLE = "idle"


@dataclass(frozen=True)
class StatusReport:
    """Outcome of one ingestion call.

    A field left as ``None`` means "no update" — the caller keeps whatever
    it displayed before.  It never means "clear".
    """

    status: AgentStatus | None = None
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.status is None and self.message is None


@dataclass
class InterpreterState:
    """Mutable state for one terminal session."""

    buffer: str = ""  # raw output, capped to the most recent N chars
    detected: bool = False  # sticky until reset()
    last_status: AgentStatus | None = None  # None = unset
    last_action_message: str | None = None  # only overwritten by a new match
