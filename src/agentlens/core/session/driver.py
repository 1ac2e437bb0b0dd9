"""
SessionDriver — glue between a PTY stream, the interpreter, and the UI.

One driver per terminal session.  It owns the session's
:class:`OutputInterpreter` and :class:`IdleWatchdog`, folds every
:class:`StatusReport` into a :class:`SessionSnapshot`, and tells the UI
layer about it:

  on_update(snapshot)   — status or message changed
  on_finished(snapshot) — working → idle transition (notification hook)

Bytes from the PTY go through an incremental UTF-8 decoder, so a
multi-byte glyph split across two reads reaches the interpreter whole.

All methods must be called from the event loop thread that owns the
session; the watchdog timer runs on that loop.
"""

from __future__ import annotations

import asyncio
import codecs
import uuid
from collections.abc import Callable

import structlog

from agentlens.core.config import AgentLensConfig
from agentlens.core.interpreter import AgentStatus, OutputInterpreter, StatusReport
from agentlens.core.session.models import SessionSnapshot, SessionStatus
from agentlens.core.session.watchdog import IdleWatchdog

logger = structlog.get_logger()

SnapshotCallback = Callable[[SessionSnapshot], None]

_SUMMARY_HEADER = "--- agentlens summary ---"


class SessionDriver:
    """
    Drives one agent terminal session.

    Usage::

        driver = SessionDriver(on_update=ui.refresh, on_finished=notify_done)
        tty.register_output_callback(driver.feed)
        ...
        driver.mark_exited(exit_code)
        driver.close()
    """

    def __init__(
        self,
        session_id: str | None = None,
        config: AgentLensConfig | None = None,
        on_update: SnapshotCallback | None = None,
        on_finished: SnapshotCallback | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        cfg = config or AgentLensConfig()
        self.session_id = session_id or str(uuid.uuid4())
        self.interpreter = OutputInterpreter(self.session_id, cfg.interpreter)
        self.snapshot = SessionSnapshot(session_id=self.session_id)
        self._on_update = on_update
        self._on_finished = on_finished
        self._watchdog = IdleWatchdog(cfg.watchdog.quiet_period_s, self._on_quiet, loop=loop)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._log = logger.bind(session_id=self.snapshot.short_id())

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def feed(self, raw: bytes) -> StatusReport:
        """Decode one PTY read and feed it to the interpreter."""
        return self.feed_text(self._decoder.decode(raw))

    def feed_text(self, text: str) -> StatusReport:
        """Feed already-decoded terminal text and re-arm the idle watchdog."""
        report = self.interpreter.ingest(text) if text else StatusReport()
        self._apply(report)
        self._watchdog.kick()
        return report

    # ------------------------------------------------------------------
    # Upstream-only states
    # ------------------------------------------------------------------

    def mark_waiting(self) -> None:
        """An approval prompt is open (decided by business logic, not output)."""
        self._set_status(SessionStatus.WAITING)

    def mark_error(self) -> None:
        self._set_status(SessionStatus.ERROR)

    def mark_exited(self, exit_code: int) -> None:
        """The agent process ended; a non-zero exit code shows as error."""
        self._watchdog.cancel()
        self.snapshot.exit_code = exit_code
        self._set_status(SessionStatus.ERROR if exit_code else SessionStatus.IDLE)
        self._log.info("session_exited", exit_code=exit_code)

    # ------------------------------------------------------------------
    # Debug export / teardown
    # ------------------------------------------------------------------

    def export_debug(self) -> str:
        """Raw terminal buffer followed by the one-line session summary."""
        return f"{self.interpreter.get_buffer()}\n\n{_SUMMARY_HEADER}\n{self.snapshot.summary()}\n"

    @property
    def idle_check_pending(self) -> bool:
        return self._watchdog.pending

    def reset(self) -> None:
        """Reuse this terminal for a new session: clear all interpreter state."""
        self._watchdog.cancel()
        self.interpreter.reset()
        self._decoder.reset()
        self.snapshot = SessionSnapshot(session_id=self.session_id)

    def close(self) -> None:
        self.reset()
        self._log.debug("session_closed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_quiet(self) -> None:
        if self.snapshot.status in (SessionStatus.WAITING, SessionStatus.ERROR):
            return
        report = self.interpreter.check_idle()
        if report is not None:
            self._apply(report)

    def _apply(self, report: StatusReport) -> None:
        snap = self.snapshot
        changed = False
        previous = snap.status

        if self.interpreter.has_detected() and not snap.detected:
            snap.detected = True
            changed = True

        if report.status is not None:
            status = _display_status(report.status)
            if status != snap.status:
                snap.status = status
                changed = True

        if report.message is not None and report.message != snap.last_message:
            snap.last_message = report.message
            changed = True

        if changed:
            self._publish()
        if previous == SessionStatus.WORKING and snap.status == SessionStatus.IDLE:
            self._log.info("agent_finished", message=snap.last_message)
            if self._on_finished is not None:
                self._on_finished(snap)

    def _set_status(self, status: SessionStatus) -> None:
        if status == self.snapshot.status:
            return
        self.snapshot.status = status
        self._publish()

    def _publish(self) -> None:
        self.snapshot.touch()
        if self._on_update is not None:
            self._on_update(self.snapshot)


def _display_status(status: AgentStatus) -> SessionStatus:
    return SessionStatus.WORKING if status == AgentStatus.WORKING else SessionStatus.IDLE
