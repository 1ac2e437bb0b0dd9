"""
OutputInterpreter — streaming classifier for agent terminal output.

Consumes raw PTY text chunks for one session and answers three questions:

  1. Is this stream an AI coding agent at all?   (sticky detection flag)
  2. Is the agent working or idle right now?     (status, may be absent)
  3. What is it doing?                           (one-line message)

Every ingest() re-analyses the whole capped buffer rather than the chunk,
so escape sequences, keywords and lines split across PTY reads are seen
whole once their tail arrives.  The interpreter holds no timers: idle
confirmation after a quiet period is the caller's job (see
:class:`agentlens.core.session.watchdog.IdleWatchdog`), which then asks
check_idle().

Classification order per call:
  detection  → idle prompt (unless a menu is open) → working signals
  message    → action line → result line → cached message
"""

from __future__ import annotations

import structlog

from agentlens.core.config import InterpreterConfig
from agentlens.core.constants import ELLIPSIS
from agentlens.core.interpreter.models import AgentStatus, InterpreterState, StatusReport
from agentlens.core.interpreter.patterns import (
    ACTION_LINES,
    DETECTION_SIGNATURES,
    GLYPH_ONLY_RE,
    IDLE_PROMPT_RE,
    MENU_CONTEXT,
    RESULT_LINES,
    SEPARATOR_RE,
    STATUS_LINE_RE,
    WORKING_SIGNALS,
    Signal,
    first_match,
    keyword_signatures,
)
from agentlens.core.interpreter.sanitize import (
    decode_view,
    extract_choices,
    is_garbage,
    is_terminal_hint,
)

logger = structlog.get_logger()

# How far back the idle / menu checks look, in lines of the recent window
_MENU_CONTEXT_LINES = 10
_IDLE_PROMPT_LINES = 3


class OutputInterpreter:
    """
    Per-session interpreter of agent terminal output.

    Usage::

        interpreter = OutputInterpreter(session_id="abc123")
        report = interpreter.ingest(chunk)
        if report.status:
            indicator.set(report.status)
        if report.message:
            summary.set(report.message)
        # After a quiet period with no new chunks:
        if (idle := interpreter.check_idle()) is not None:
            indicator.set(idle.status)
    """

    def __init__(
        self,
        session_id: str = "",
        config: InterpreterConfig | None = None,
    ) -> None:
        self.session_id = session_id
        self._config = config or InterpreterConfig()
        self._signatures = DETECTION_SIGNATURES + keyword_signatures(self._config.extra_keywords)
        self._state = InterpreterState()
        self._log = logger.bind(session_id=session_id[:8])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ingest(self, chunk: str) -> StatusReport:
        """
        Feed one chunk of terminal output and classify the session.

        Never raises.  Fields of the returned report are ``None`` when this
        chunk carries no new signal for them.
        """
        if not isinstance(chunk, str):
            return StatusReport()

        state = self._state
        state.buffer += chunk
        limit = self._config.buffer_max_chars
        if len(state.buffer) > limit:
            state.buffer = state.buffer[-limit:]

        view = decode_view(state.buffer)

        if not state.detected:
            self._detect(view)

        recent = view[-self._config.recent_window_chars :]

        status: AgentStatus | None = None
        if state.detected:
            status = self._classify(recent)
            if status is not None:
                self._set_status(status)

        message = self._extract_message(recent)
        if message is not None:
            state.last_action_message = message
        else:
            message = state.last_action_message

        return StatusReport(status=status, message=message)

    def has_detected(self) -> bool:
        """Return True once the stream has matched an agent signature."""
        return self._state.detected

    def get_buffer(self) -> str:
        """Return the raw capped buffer, control sequences included."""
        return self._state.buffer

    @property
    def last_status(self) -> AgentStatus | None:
        return self._state.last_status

    @property
    def last_message(self) -> str | None:
        return self._state.last_action_message

    def check_idle(self) -> StatusReport | None:
        """
        Confirm idleness after the caller observed a quiet period.

        Returns an idle report (with the cached message) only if an agent
        was detected and the last reported status is not ``working``.
        A working agent that merely paused output stays working.
        """
        state = self._state
        if not state.detected or state.last_status == AgentStatus.WORKING:
            return None
        return StatusReport(status=AgentStatus.IDLE, message=state.last_action_message)

    def reset(self) -> None:
        """Return to the initial empty state (terminal reused for a new session)."""
        self._state = InterpreterState()
        self._log.debug("interpreter_reset")

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def _detect(self, view: str) -> None:
        signature = first_match(self._signatures, view)
        if signature is None:
            return
        self._state.detected = True
        self._log.debug("agent_detected", signature=signature.name)

    # ------------------------------------------------------------------
    # Status classification
    # ------------------------------------------------------------------

    def _classify(self, recent: str) -> AgentStatus | None:
        if self._at_idle_prompt(recent):
            return AgentStatus.IDLE
        if first_match(WORKING_SIGNALS, recent) is not None:
            return AgentStatus.WORKING
        return None

    def _at_idle_prompt(self, recent: str) -> bool:
        lines = recent.strip().split("\n")
        if self._in_menu(lines[-_MENU_CONTEXT_LINES:]):
            return False

        for line in reversed(lines[-_IDLE_PROMPT_LINES:]):
            stripped = line.strip()
            if not stripped:
                continue
            if IDLE_PROMPT_RE.match(stripped):
                return True
            if len(stripped) > 2 and not (
                SEPARATOR_RE.match(stripped) or is_terminal_hint(stripped)
            ):
                break
        return False

    @staticmethod
    def _in_menu(lines: list[str]) -> bool:
        """A menu or confirmation is open: the idle glyph is a selector, not a prompt."""
        text = "\n".join(lines)
        if first_match(MENU_CONTEXT, text) is not None:
            return True
        return len(extract_choices(text)) >= 2

    def _set_status(self, status: AgentStatus) -> None:
        previous = self._state.last_status
        self._state.last_status = status
        if previous != status:
            self._log.debug(
                "status_changed",
                previous=previous.value if previous else None,
                status=status.value,
            )

    # ------------------------------------------------------------------
    # Message extraction
    # ------------------------------------------------------------------

    def _extract_message(self, recent: str) -> str | None:
        candidates = [line.strip() for line in recent.split("\n")]
        candidates = [line for line in candidates if self._is_candidate(line)]
        for table in (ACTION_LINES, RESULT_LINES):
            line = self._newest_match(table, candidates)
            if line is not None:
                return self._truncate(line)
        return None

    def _is_candidate(self, line: str) -> bool:
        if not line or GLYPH_ONLY_RE.match(line) or STATUS_LINE_RE.match(line):
            return False
        if is_terminal_hint(line):
            return False
        return not is_garbage(line, self._config.min_alpha_ratio)

    @staticmethod
    def _newest_match(table: tuple[Signal, ...], lines: list[str]) -> str | None:
        for line in reversed(lines):
            if first_match(table, line) is not None:
                return line
        return None

    def _truncate(self, line: str) -> str:
        limit = self._config.message_max_chars
        if len(line) <= limit:
            return line
        return line[: limit - len(ELLIPSIS)] + ELLIPSIS
