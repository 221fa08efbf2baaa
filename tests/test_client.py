"""Tests for localhub.client: persisted sessions, the API wrapper and the refresher."""

import asyncio
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx

from localhub.client.api import LocalHubClient, LocalHubError
from localhub.client.context import SessionContext, load_admin_session
from localhub.client.refresher import SessionRefresher
from localhub.client.storage import ADMIN_KEY, AUTH_KEY, SessionStore
from localhub.core.permissions import Role

USER = {"id": "u-1", "username": "alice"}


class StoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "session.json"
        self.store = SessionStore(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class TestSessionStore(StoreTestCase):
    def test_set_get_remove(self) -> None:
        self.store.set(AUTH_KEY, {"a": 1})
        self.store.set(ADMIN_KEY, {"b": 2})
        self.assertEqual(self.store.get(AUTH_KEY), {"a": 1})

        self.store.remove(AUTH_KEY)
        self.assertIsNone(self.store.get(AUTH_KEY))
        self.assertEqual(json.loads(self.path.read_text()), {ADMIN_KEY: {"b": 2}})

    def test_corrupt_file_reads_as_empty(self) -> None:
        self.path.write_text("{not json")
        self.assertIsNone(self.store.get(AUTH_KEY))
        self.assertFalse(self.path.exists())


class TestSessionContext(StoreTestCase):
    def test_save_and_load(self) -> None:
        SessionContext(self.store).save(USER, "tok")

        context = SessionContext(self.store)
        self.assertTrue(context.load())
        self.assertTrue(context.authenticated)
        self.assertEqual(context.user, USER)
        self.assertEqual(context.session_token, "tok")

    def test_incomplete_data_is_cleared(self) -> None:
        self.store.set(AUTH_KEY, {"user": USER})
        context = SessionContext(self.store)
        self.assertFalse(context.load())
        self.assertIsNone(self.store.get(AUTH_KEY))

    def test_roles_only_persisted_for_admin(self) -> None:
        SessionContext(self.store).save(USER, "tok", roles=["super_admin"])
        self.assertNotIn("roles", self.store.get(AUTH_KEY))

        SessionContext(self.store, key=ADMIN_KEY).save(USER, "tok", roles=["super_admin"])
        self.assertEqual(self.store.get(ADMIN_KEY)["roles"], ["super_admin"])


def mock_client(handler) -> LocalHubClient:
    return LocalHubClient("http://testserver", transport=httpx.MockTransport(handler))


class TestLocalHubClient(unittest.IsolatedAsyncioTestCase):
    async def test_session_calls(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if request.url.path == "/auth/session/validate":
                user_id = "u-1" if body["session_token"] == "good" else None
                return httpx.Response(200, json={"user_id": user_id})
            return httpx.Response(200, json={"refreshed": body["session_token"] == "good"})

        async with mock_client(handler) as client:
            self.assertEqual(await client.validate_session("good"), "u-1")
            self.assertIsNone(await client.validate_session("bad"))
            self.assertTrue(await client.refresh_session("good"))
            self.assertFalse(await client.refresh_session("bad"))

    async def test_admin_validate_forbidden_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual(request.headers["x-session-token"], "tok")
            return httpx.Response(403, json={"error": "Unauthorized: No admin roles"})

        async with mock_client(handler) as client:
            self.assertIsNone(await client.admin_validate("tok"))

    async def test_invoke_raises_error_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "Invalid action"})

        async with mock_client(handler) as client:
            with self.assertRaises(LocalHubError) as raised:
                await client.invoke("/messaging", {"action": "x"}, session_token="tok")
        self.assertEqual(raised.exception.status_code, 400)
        self.assertEqual(raised.exception.message, "Invalid action")


class TestLoadAdminSession(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SessionStore(Path(self._tmp.name) / "session.json")
        self.context = SessionContext(self.store, key=ADMIN_KEY)
        self.context.save(USER, "tok", roles=["super_admin"])
        self.client = MagicMock()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_fresh_roles_replace_stored_ones(self) -> None:
        self.client.admin_validate = AsyncMock(
            return_value={"success": True, "user": USER, "roles": ["content_moderator"]}
        )
        session = await load_admin_session(self.context, self.client)
        self.assertTrue(session.is_content_moderator)
        self.assertFalse(session.is_super_admin)
        self.assertEqual(session.capabilities, frozenset({Role.CONTENT_MODERATOR}))
        self.assertEqual(self.store.get(ADMIN_KEY)["roles"], ["content_moderator"])

    async def test_rejected_session_is_cleared(self) -> None:
        self.client.admin_validate = AsyncMock(return_value=None)
        self.assertIsNone(await load_admin_session(self.context, self.client))
        self.assertIsNone(self.store.get(ADMIN_KEY))

    async def test_network_error_clears_session(self) -> None:
        self.client.admin_validate = AsyncMock(side_effect=httpx.ConnectError("down"))
        self.assertIsNone(await load_admin_session(self.context, self.client))
        self.assertIsNone(self.store.get(ADMIN_KEY))


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestSessionRefresher(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.context = SessionContext(SessionStore(Path(self._tmp.name) / "s.json"))
        self.context.save(USER, "tok")
        self.client = MagicMock()
        self.client.refresh_session = AsyncMock(return_value=True)
        self.client.validate_session = AsyncMock(return_value="u-1")
        self.clock = FakeClock()
        self.expired = MagicMock()
        self.restored = MagicMock()
        self.authenticated = True
        self.refresher = SessionRefresher(
            self.context,
            self.client,
            on_expired=self.expired,
            on_restored=self.restored,
            is_authenticated=lambda: self.authenticated,
            clock=self.clock,
        )

    async def asyncTearDown(self) -> None:
        await self.refresher.aclose()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_refresh_is_throttled_within_cooldown(self) -> None:
        self.assertTrue(await self.refresher.refresh())
        self.clock.advance(60)
        self.assertTrue(await self.refresher.refresh())
        self.assertEqual(self.client.refresh_session.await_count, 1)

        self.clock.advance(self.refresher.min_refresh_interval)
        self.assertTrue(await self.refresher.refresh())
        self.assertEqual(self.client.refresh_session.await_count, 2)

    async def test_concurrent_triggers_issue_one_call(self) -> None:
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_refresh(token):
            started.set()
            await release.wait()
            return True

        self.client.refresh_session = AsyncMock(side_effect=slow_refresh)
        first = asyncio.create_task(self.refresher.refresh())
        await started.wait()
        self.assertTrue(await self.refresher.refresh())
        release.set()
        self.assertTrue(await first)
        self.assertEqual(self.client.refresh_session.await_count, 1)

    async def test_activity_respects_cooldown(self) -> None:
        self.refresher.start()
        self.assertTrue(await self.refresher.refresh())
        self.assertEqual(self.client.refresh_session.await_count, 1)

        self.assertIsNone(self.refresher.notify_activity("key_down"))
        self.assertIsNone(self.refresher.notify_activity("mouse_move"))

        self.clock.advance(self.refresher.min_refresh_interval + 1)
        task = self.refresher.notify_activity("scroll")
        self.assertIsNotNone(task)
        await task
        self.assertEqual(self.client.refresh_session.await_count, 2)

    async def test_no_token_no_refresh(self) -> None:
        self.context.clear()
        self.assertFalse(await self.refresher.refresh())
        self.client.refresh_session.assert_not_awaited()

    async def test_invalid_session_recovered_by_refresh(self) -> None:
        self.client.validate_session = AsyncMock(return_value=None)
        await self.refresher.validate()
        self.client.refresh_session.assert_awaited_once_with("tok")
        self.expired.assert_not_called()
        self.assertTrue(self.context.authenticated)

    async def test_invalid_session_expires_when_refresh_fails(self) -> None:
        self.client.validate_session = AsyncMock(return_value=None)
        self.client.refresh_session = AsyncMock(return_value=False)
        self.refresher.start()
        await asyncio.sleep(0)

        self.clock.advance(self.refresher.min_refresh_interval + 1)
        await self.refresher.validate()

        self.expired.assert_called_once_with()
        self.assertFalse(self.context.authenticated)
        self.assertFalse(self.refresher.running)

    async def test_failed_refresh_does_not_start_cooldown(self) -> None:
        self.client.refresh_session = AsyncMock(return_value=False)
        self.refresher.start()
        self.assertFalse(await self.refresher.refresh())

        task = self.refresher.notify_activity("key_down")
        self.assertIsNotNone(task)
        self.assertFalse(await task)

        self.client.validate_session = AsyncMock(return_value=None)
        self.clock.advance(60)
        calls = self.client.refresh_session.await_count
        await self.refresher.validate()

        self.assertEqual(self.client.refresh_session.await_count, calls + 1)
        self.expired.assert_called_once_with()
        self.assertFalse(self.context.authenticated)
        self.assertFalse(self.refresher.running)

    async def test_network_failure_does_not_start_cooldown(self) -> None:
        self.client.refresh_session = AsyncMock(side_effect=httpx.ConnectError("offline"))
        self.assertFalse(await self.refresher.refresh())

        self.client.refresh_session = AsyncMock(return_value=True)
        self.assertTrue(await self.refresher.refresh())
        self.client.refresh_session.assert_awaited_once_with("tok")

    async def test_expiry_from_check_loop_stops_that_loop(self) -> None:
        self.client.validate_session = AsyncMock(return_value=None)
        self.client.refresh_session = AsyncMock(return_value=False)
        refresher = SessionRefresher(
            self.context,
            self.client,
            on_expired=self.expired,
            refresh_interval=3600,
            check_interval=0.01,
            clock=self.clock,
        )
        refresher.start()
        try:
            async with asyncio.timeout(2):
                while not self.expired.called:
                    await asyncio.sleep(0.01)
            checks = self.client.validate_session.await_count

            # a surviving loop would pick the new token up on its next tick
            self.context.save(USER, "tok2")
            await asyncio.sleep(0.05)

            self.assertEqual(self.client.validate_session.await_count, checks)
            self.expired.assert_called_once_with()
            self.assertFalse(refresher.running)
        finally:
            await refresher.aclose()

    async def test_valid_session_restores_unauthenticated_ui(self) -> None:
        self.authenticated = False
        await self.refresher.validate()
        self.restored.assert_called_once_with({**USER, "id": "u-1"})

        self.restored.reset_mock()
        self.authenticated = True
        await self.refresher.validate()
        self.restored.assert_not_called()

    async def test_network_error_leaves_session(self) -> None:
        self.client.validate_session = AsyncMock(side_effect=httpx.ConnectError("offline"))
        await self.refresher.validate()
        self.expired.assert_not_called()
        self.assertTrue(self.context.authenticated)

    async def test_visibility_and_online_trigger_validation(self) -> None:
        self.assertIsNone(self.refresher.notify_online())

        self.refresher.start()
        self.assertIsNone(self.refresher.notify_visibility(False))
        await self.refresher.notify_visibility(True)
        await self.refresher.notify_online()
        self.assertEqual(self.client.validate_session.await_count, 2)


if __name__ == "__main__":
    unittest.main()
