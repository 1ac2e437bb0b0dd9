"""
IdleWatchdog — caller-side debounce timer for idle confirmation.

The interpreter never waits.  Instead, the session driver keeps one
watchdog per session and kicks it on every PTY chunk; if the quiet period
elapses with no further chunk, the callback fires once and the driver
asks the interpreter for a final ``check_idle()``.

Cancellation is simply "don't fire": kick() cancels the pending timer and
arms a new one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

logger = structlog.get_logger()


class IdleWatchdog:
    """
    Single-timer debounce bound to an asyncio event loop.

    Usage::

        watchdog = IdleWatchdog(2.0, on_quiet=driver.on_quiet)
        # In the PTY read callback:
        watchdog.kick()
        # On teardown:
        watchdog.cancel()
    """

    def __init__(
        self,
        quiet_period_s: float,
        on_quiet: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.quiet_period_s = quiet_period_s
        self._on_quiet = on_quiet
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet."""
        return self._handle is not None

    def kick(self) -> None:
        """Cancel any pending timer and arm a fresh one."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.quiet_period_s, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        logger.debug("idle_watchdog_fired", quiet_period_s=self.quiet_period_s)
        self._on_quiet()
