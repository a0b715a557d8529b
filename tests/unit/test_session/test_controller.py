"""Tests for the RemoteSession controller."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from kioskctl.domain.errors import ConnectionFailureError, InvalidInputError
from kioskctl.domain.models import (
    CancelReload,
    DisplayMode,
    Navigate,
    Reload,
    RunScript,
    SetReloadInterval,
)
from kioskctl.session.controller import (
    ENTER_FULLSCREEN_JS,
    EXIT_FULLSCREEN_JS,
    HIDE_SCROLLBAR_JS,
    SHOW_SCROLLBAR_JS,
    RemoteSession,
    build_url,
    validate_url,
)


class TestUrlHelpers:
    @pytest.mark.parametrize(
        "url",
        ["https://example.com", "http://localhost:5601/app#/x", "  https://example.com/a?b=1  "],
    )
    def test_validate_url_accepts_absolute(self, url: str) -> None:
        assert validate_url(url) == url.strip()

    @pytest.mark.parametrize("url", ["", "   ", "example.com", "/relative/path", "https://", "http://[::1"])
    def test_validate_url_rejects(self, url: str) -> None:
        with pytest.raises(InvalidInputError):
            validate_url(url)

    def test_build_url_defaults_to_https(self) -> None:
        assert build_url("example.com/page") == "https://example.com/page"

    def test_build_url_empty_protocol_defaults_to_https(self) -> None:
        assert build_url("example.com", "") == "https://example.com"

    def test_build_url_custom_protocol(self) -> None:
        assert build_url("kibana.local:5601", "http") == "http://kibana.local:5601"

    def test_build_url_keeps_existing_scheme(self) -> None:
        assert build_url("http://example.com", "https") == "http://example.com"

    def test_build_url_rejects_bad_protocol(self) -> None:
        with pytest.raises(InvalidInputError, match="protocol"):
            build_url("example.com", "ht tp")


class TestNavigate:
    @pytest.mark.asyncio
    async def test_navigate_calls_connection(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        await session.navigate("https://example.com")
        mock_connection.navigate.assert_awaited_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_navigate_invalid_url_never_reaches_connection(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        with pytest.raises(InvalidInputError):
            await session.navigate("not a url")
        mock_connection.navigate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_url_leaves_schedule_running(self, session: RemoteSession) -> None:
        scheduler = await session.set_reload_interval(60)
        with pytest.raises(InvalidInputError):
            await session.navigate("")
        assert scheduler.is_active
        await session.close()

    @pytest.mark.asyncio
    async def test_navigate_connection_failure(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        mock_connection.navigate.side_effect = ConnectionFailureError("timeout", backend="playwright")
        with pytest.raises(ConnectionFailureError, match="timeout"):
            await session.navigate("https://example.com")

    @pytest.mark.asyncio
    async def test_session_survives_failed_navigation(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        mock_connection.navigate.side_effect = [ConnectionFailureError("closed"), None]
        with pytest.raises(ConnectionFailureError):
            await session.navigate("https://example.com")
        await session.navigate("https://example.org")
        assert mock_connection.navigate.await_count == 2

    @pytest.mark.asyncio
    async def test_navigate_cancels_active_schedule(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        scheduler = await session.set_reload_interval(0.1)
        await asyncio.sleep(0.15)
        assert mock_connection.reload.await_count == 1
        await session.navigate("https://example.com")
        assert scheduler.is_cancelled
        assert session.current_reload is None
        await asyncio.sleep(0.3)
        assert mock_connection.reload.await_count == 1
        await session.close()

    @pytest.mark.asyncio
    async def test_navigate_then_reload_does_not_renavigate(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        await session.navigate("https://example.com")
        await session.reload()
        mock_connection.navigate.assert_awaited_once_with("https://example.com")
        mock_connection.reload.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_in_flight_tick_finishes_before_navigation(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        order: list[str] = []
        started = asyncio.Event()

        async def slow_reload() -> None:
            started.set()
            await asyncio.sleep(0.1)
            order.append("reload")

        async def record_navigate(url: str) -> None:
            order.append("navigate")

        mock_connection.reload.side_effect = slow_reload
        mock_connection.navigate.side_effect = record_navigate
        await session.set_reload_interval(0.05)
        await asyncio.wait_for(started.wait(), timeout=1.0)
        await session.navigate("https://example.com")
        await asyncio.sleep(0.15)
        assert order == ["reload", "navigate"]
        await session.close()


class TestReloadAndScripts:
    @pytest.mark.asyncio
    async def test_reload_does_not_cancel_schedule(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        scheduler = await session.set_reload_interval(60)
        await session.reload()
        assert scheduler.is_active
        mock_connection.reload.assert_awaited_once()
        await session.close()

    @pytest.mark.asyncio
    async def test_run_script_discards_result(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        mock_connection.evaluate.return_value = {"ignored": True}
        assert await session.run_script("1 + 1") is None
        mock_connection.evaluate.assert_awaited_once_with("1 + 1")

    @pytest.mark.asyncio
    async def test_run_script_rejects_empty(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        with pytest.raises(InvalidInputError):
            await session.run_script("  ")
        mock_connection.evaluate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_run_script_failure(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        mock_connection.evaluate.side_effect = ConnectionFailureError("page crashed")
        with pytest.raises(ConnectionFailureError):
            await session.run_script("document.title")

    @pytest.mark.asyncio
    async def test_display_mode_on(self, session: RemoteSession, mock_connection: AsyncMock) -> None:
        await session.set_display_mode(DisplayMode(fullscreen=True, hide_scrollbar=True))
        assert mock_connection.evaluate.await_args_list == [
            call(ENTER_FULLSCREEN_JS),
            call(HIDE_SCROLLBAR_JS),
        ]

    @pytest.mark.asyncio
    async def test_display_mode_off(self, session: RemoteSession, mock_connection: AsyncMock) -> None:
        await session.set_display_mode(DisplayMode())
        assert mock_connection.evaluate.await_args_list == [
            call(EXIT_FULLSCREEN_JS),
            call(SHOW_SCROLLBAR_JS),
        ]


class TestReloadSchedule:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("interval", [0, -5, 0.0, float("nan")])
    async def test_non_positive_interval_rejected(
        self, session: RemoteSession, interval: float
    ) -> None:
        with pytest.raises(InvalidInputError):
            await session.set_reload_interval(interval)
        assert session.current_reload is None

    @pytest.mark.asyncio
    async def test_interval_too_large_for_float_rejected(self, session: RemoteSession) -> None:
        scheduler = await session.set_reload_interval(30)
        with pytest.raises(InvalidInputError, match="too large"):
            await session.set_reload_interval(10**400)
        assert session.current_reload is scheduler
        assert scheduler.is_active
        await session.close()

    @pytest.mark.asyncio
    async def test_interval_must_be_number(self, session: RemoteSession) -> None:
        with pytest.raises(InvalidInputError):
            await session.set_reload_interval(True)  # type: ignore[arg-type]
        with pytest.raises(InvalidInputError):
            await session.set_reload_interval("30")  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_non_positive_interval_keeps_existing_schedule(self, session: RemoteSession) -> None:
        scheduler = await session.set_reload_interval(30)
        with pytest.raises(InvalidInputError):
            await session.set_reload_interval(-1)
        assert session.current_reload is scheduler
        assert scheduler.is_active
        await session.close()

    @pytest.mark.asyncio
    async def test_schedule_then_cancel_yields_no_ticks(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        await session.set_reload_interval(0.05)
        assert await session.cancel_reload() is True
        await asyncio.sleep(0.2)
        mock_connection.reload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_without_schedule_is_noop(self, session: RemoteSession) -> None:
        assert await session.cancel_reload() is False
        assert await session.cancel_reload() is False

    @pytest.mark.asyncio
    async def test_replacement_uses_new_cadence_only(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        first = await session.set_reload_interval(0.5)
        second = await session.set_reload_interval(0.2)
        assert first.is_cancelled
        assert session.current_reload is second
        await asyncio.sleep(0.5)
        assert first.tick_count == 0
        assert second.tick_count == 2
        assert mock_connection.reload.await_count == 2
        await session.close()

    @pytest.mark.asyncio
    async def test_rapid_replacement_fast_then_slow(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        first = await session.set_reload_interval(0.1)
        await asyncio.sleep(0.01)
        second = await session.set_reload_interval(1.0)
        await asyncio.sleep(0.35)
        assert first.tick_count == 0
        assert second.tick_count == 0
        mock_connection.reload.assert_not_awaited()
        await session.close()

    @pytest.mark.asyncio
    async def test_schedule_cadence_and_cancel(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        # Ticks at 0.4 and 0.8; cancelled at 0.9, so no tick at 1.2
        await session.set_reload_interval(0.4)
        await asyncio.sleep(0.9)
        assert mock_connection.reload.await_count == 2
        await session.cancel_reload()
        await asyncio.sleep(0.5)
        assert mock_connection.reload.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_replacements_leave_one_active(self, session: RemoteSession) -> None:
        schedulers = await asyncio.gather(*(session.set_reload_interval(10 + i) for i in range(5)))
        active = [s for s in schedulers if s.is_active]
        assert len(active) == 1
        assert session.current_reload is active[0]
        await session.close()

    @pytest.mark.asyncio
    async def test_cancel_superseded_scheduler_is_noop(self, session: RemoteSession) -> None:
        first = await session.set_reload_interval(10)
        await session.set_reload_interval(20)
        assert first.cancel() is False
        assert session.current_reload is not None
        assert session.current_reload.is_active
        await session.close()


class TestHigherLevelOperations:
    @pytest.mark.asyncio
    async def test_navigate_to_bare_host(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        url = await session.navigate_to("example.com/status", "http")
        assert url == "http://example.com/status"
        mock_connection.navigate.assert_awaited_once_with("http://example.com/status")

    @pytest.mark.asyncio
    async def test_play_youtube(self, session: RemoteSession, mock_connection: AsyncMock) -> None:
        await session.play_youtube("dQw4w9WgXcQ")
        mock_connection.navigate.assert_awaited_once_with(
            "https://youtube.com/embed/dQw4w9WgXcQ?autoplay=1"
        )

    @pytest.mark.asyncio
    async def test_play_youtube_rejects_bad_id(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        with pytest.raises(InvalidInputError):
            await session.play_youtube("../etc")
        mock_connection.navigate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_open_bookmark(self, session: RemoteSession, mock_connection: AsyncMock) -> None:
        await session.open_bookmark("dashboard")
        mock_connection.navigate.assert_awaited_once_with("http://grafana.local:3000/d/overview")

    @pytest.mark.asyncio
    async def test_open_unknown_bookmark(self, session: RemoteSession) -> None:
        with pytest.raises(InvalidInputError, match="Unknown bookmark"):
            await session.open_bookmark("missing")

    @pytest.mark.asyncio
    async def test_apply_dispatches_commands(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        await session.apply(Navigate(url="https://example.com"))
        await session.apply(Reload())
        await session.apply(RunScript(source="window.scrollTo(0, 0)"))
        await session.apply(SetReloadInterval(interval=30))
        assert session.current_reload is not None
        await session.apply(CancelReload())
        assert session.current_reload is None
        mock_connection.navigate.assert_awaited_once_with("https://example.com")
        mock_connection.reload.assert_awaited_once()
        mock_connection.evaluate.assert_awaited_once_with("window.scrollTo(0, 0)")

    @pytest.mark.asyncio
    async def test_status(self, session: RemoteSession) -> None:
        status = session.status()
        assert status.connected is True
        assert status.current_url == "https://example.com/"
        assert status.reload_active is False
        await session.set_reload_interval(15)
        status = session.status()
        assert status.reload_active is True
        assert status.reload_interval == 15.0
        await session.close()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_connects_and_disconnects(self, mock_connection: AsyncMock) -> None:
        async with RemoteSession(mock_connection) as session:
            mock_connection.connect.assert_awaited_once()
            await session.set_reload_interval(60)
        mock_connection.disconnect.assert_awaited_once()
        assert session.current_reload is None

    @pytest.mark.asyncio
    async def test_close_waits_for_scheduler_tasks(self, session: RemoteSession) -> None:
        first = await session.set_reload_interval(60)
        second = await session.set_reload_interval(60)
        await session.close()
        assert not first.is_active
        assert not second.is_active

    @pytest.mark.asyncio
    async def test_no_schedule_after_close(
        self, session: RemoteSession, mock_connection: AsyncMock
    ) -> None:
        await session.close()
        with pytest.raises(ConnectionFailureError, match="closed"):
            await session.set_reload_interval(0.05)
        assert session.current_reload is None
        await asyncio.sleep(0.15)
        mock_connection.reload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_is_idempotent_for_schedules(self, session: RemoteSession) -> None:
        scheduler = await session.set_reload_interval(60)
        await session.close()
        assert scheduler.is_cancelled
        assert await session.cancel_reload() is False
