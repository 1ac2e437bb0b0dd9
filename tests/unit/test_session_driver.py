"""Unit tests for agentlens.core.session.driver — SessionDriver snapshot and callbacks."""

from __future__ import annotations

import asyncio

import pytest

from agentlens.core.config import AgentLensConfig, WatchdogConfig
from agentlens.core.interpreter import AgentStatus
from agentlens.core.session import SessionDriver, SessionSnapshot, SessionStatus

QUIET = 0.1


def _make_driver(
    updates: list[SessionSnapshot] | None = None,
    finished: list[SessionSnapshot] | None = None,
) -> SessionDriver:
    cfg = AgentLensConfig(watchdog=WatchdogConfig(quiet_period_s=QUIET))
    return SessionDriver(
        session_id="sess-0001-abcdef",
        config=cfg,
        on_update=updates.append if updates is not None else None,
        on_finished=finished.append if finished is not None else None,
    )


class TestFeed:
    @pytest.mark.asyncio
    async def test_split_utf8_glyph(self) -> None:
        driver = _make_driver()
        driver.feed(b"Claude Code\n")

        partial = driver.feed(b"\xe2\xa0")
        assert partial.is_empty

        report = driver.feed(b"\x8b Working\n")
        assert report.status == AgentStatus.WORKING
        assert driver.snapshot.status == SessionStatus.WORKING
        driver.close()

    @pytest.mark.asyncio
    async def test_invalid_bytes_replaced(self) -> None:
        driver = _make_driver()
        driver.feed(b"Claude \xff\xfe Code\n")
        assert driver.snapshot.detected
        assert "�" in driver.interpreter.get_buffer()
        driver.close()

    @pytest.mark.asyncio
    async def test_update_callback_on_change_only(self) -> None:
        updates: list[SessionSnapshot] = []
        driver = _make_driver(updates=updates)

        driver.feed_text("Claude Code\n")
        assert len(updates) == 1
        assert updates[0].detected

        driver.feed_text("⏺ Edit(app.py)\n")
        assert len(updates) == 2
        assert updates[-1].status == SessionStatus.WORKING
        assert updates[-1].last_message == "⏺ Edit(app.py)"

        driver.feed_text("more output\n")
        assert len(updates) == 2
        driver.close()

    @pytest.mark.asyncio
    async def test_finished_on_working_to_idle(self) -> None:
        finished: list[SessionSnapshot] = []
        driver = _make_driver(finished=finished)

        driver.feed_text("Claude Code\n⠋ Working\n")
        assert finished == []

        driver.feed_text("\n❯ \n")
        assert len(finished) == 1
        assert finished[0].status == SessionStatus.IDLE

        driver.feed_text("\n❯ \n")
        assert len(finished) == 1
        driver.close()


class TestQuietPeriod:
    @pytest.mark.asyncio
    async def test_quiet_after_output_confirms_idle(self) -> None:
        updates: list[SessionSnapshot] = []
        driver = _make_driver(updates=updates)

        driver.feed_text("Claude Code\n⎿ Found 3 files\n")
        assert driver.idle_check_pending
        await asyncio.sleep(QUIET * 3)

        assert not driver.idle_check_pending
        assert driver.snapshot.status == SessionStatus.IDLE
        assert driver.interpreter.check_idle() is not None
        driver.close()

    @pytest.mark.asyncio
    async def test_working_survives_quiet_period(self) -> None:
        driver = _make_driver()

        driver.feed_text("Claude Code\n✻ Thinking…\n")
        await asyncio.sleep(QUIET * 3)

        assert driver.snapshot.status == SessionStatus.WORKING
        driver.close()

    @pytest.mark.asyncio
    async def test_waiting_not_overridden(self) -> None:
        driver = _make_driver()
        driver.mark_waiting()

        driver.feed_text("Claude Code\nDo you want to proceed?\n")
        await asyncio.sleep(QUIET * 3)

        assert driver.snapshot.status == SessionStatus.WAITING
        driver.close()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_mark_exited_error(self) -> None:
        updates: list[SessionSnapshot] = []
        driver = _make_driver(updates=updates)
        driver.feed_text("Claude Code\n⠋ Working\n")

        driver.mark_exited(1)

        assert not driver.idle_check_pending
        assert driver.snapshot.status == SessionStatus.ERROR
        assert driver.snapshot.exit_code == 1
        assert updates[-1].status == SessionStatus.ERROR
        driver.close()

    @pytest.mark.asyncio
    async def test_mark_exited_clean(self) -> None:
        driver = _make_driver()
        driver.feed_text("Claude Code\n⠋ Working\n")
        driver.mark_exited(0)
        assert driver.snapshot.status == SessionStatus.IDLE
        assert driver.snapshot.exit_code == 0
        driver.close()

    def test_mark_error(self) -> None:
        driver = _make_driver()
        driver.mark_error()
        assert driver.snapshot.status == SessionStatus.ERROR

    @pytest.mark.asyncio
    async def test_export_debug(self) -> None:
        driver = _make_driver()
        driver.feed_text("Claude Code\n\x1b[1m⏺ Edit(app.py)\x1b[0m\n")

        dump = driver.export_debug()

        assert dump.startswith("Claude Code\n\x1b[1m⏺ Edit(app.py)")
        assert dump.endswith("--- agentlens summary ---\nworking: ⏺ Edit(app.py)\n")
        driver.close()

    @pytest.mark.asyncio
    async def test_reset_clears_everything(self) -> None:
        driver = _make_driver()
        driver.feed_text("Claude Code\n⏺ Edit(app.py)\n")

        driver.reset()

        assert not driver.idle_check_pending
        assert not driver.interpreter.has_detected()
        assert driver.interpreter.get_buffer() == ""
        assert driver.snapshot == SessionSnapshot(
            session_id=driver.session_id, updated_at=driver.snapshot.updated_at
        )

    def test_generated_session_id(self) -> None:
        driver = SessionDriver()
        assert len(driver.session_id) == 36
        assert driver.snapshot.short_id() == driver.session_id[:8]
