"""
Session registry.

Maps session ids to their drivers so that features outside the terminal
view (copy-terminal shortcut, session list, debug export) can reach a
session's buffer and snapshot without holding a reference to it.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from agentlens.core.exceptions import SessionError
from agentlens.core.session.driver import SessionDriver
from agentlens.core.session.models import SessionSnapshot

logger = structlog.get_logger()


class SessionRegistry:
    """In-memory registry of live session drivers (event loop thread only)."""

    def __init__(self) -> None:
        self._drivers: dict[str, SessionDriver] = {}

    def register(self, driver: SessionDriver) -> None:
        if driver.session_id in self._drivers:
            raise SessionError(f"Session {driver.session_id!r} already registered")
        self._drivers[driver.session_id] = driver
        logger.info("session_registered", session_id=driver.snapshot.short_id())

    def unregister(self, session_id: str) -> SessionDriver | None:
        """Remove and return the driver, or None if it was not registered."""
        driver = self._drivers.pop(session_id, None)
        if driver is not None:
            logger.info("session_unregistered", session_id=driver.snapshot.short_id())
        return driver

    def get(self, session_id: str) -> SessionDriver | None:
        return self._drivers.get(session_id)

    def get_buffer(self, session_id: str) -> str | None:
        """Raw terminal buffer for *session_id*, or None if unknown."""
        driver = self._drivers.get(session_id)
        return driver.interpreter.get_buffer() if driver is not None else None

    def get_last_lines(self, session_id: str, line_count: int) -> str | None:
        buffer = self.get_buffer(session_id)
        if not buffer:
            return None
        if line_count <= 0:
            return ""
        return "\n".join(buffer.split("\n")[-line_count:])

    def snapshots(self) -> list[SessionSnapshot]:
        return [driver.snapshot for driver in self._drivers.values()]

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._drivers

    def __len__(self) -> int:
        return len(self._drivers)

    def __iter__(self) -> Iterator[SessionDriver]:
        return iter(list(self._drivers.values()))
