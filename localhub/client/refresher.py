"""
Keeps a signed-in session alive while the user is active.

Two independent cadences run on the event loop:

- refresh: every `refresh_interval` and on user activity, extend the
  session server side, never more often than once per `min_refresh_interval`;
- validation: every `check_interval` and whenever the app becomes visible or
  the network comes back, confirm the token is still valid. An invalid token
  gets one refresh attempt; if that fails the stored session is cleared and
  `on_expired` fires.

Everything runs on a single asyncio loop. The cooldown starts only after a
successful refresh, and triggers arriving while a refresh is in flight share
its result instead of issuing another call.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

import httpx

from .api import LocalHubClient
from .context import SessionContext

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 30 * 60
MIN_REFRESH_INTERVAL = 2 * 60
CHECK_INTERVAL = 5 * 60

ACTIVITY_EVENTS = frozenset({"pointer_down", "key_down", "touch_start", "scroll"})


class SessionRefresher:
    def __init__(
        self,
        context: SessionContext,
        client: LocalHubClient,
        on_expired: Optional[Callable[[], Any]] = None,
        on_restored: Optional[Callable[[dict], Any]] = None,
        is_authenticated: Optional[Callable[[], bool]] = None,
        refresh_interval: float = REFRESH_INTERVAL,
        min_refresh_interval: float = MIN_REFRESH_INTERVAL,
        check_interval: float = CHECK_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.context = context
        self.client = client
        self.on_expired = on_expired
        self.on_restored = on_restored
        # Whether the UI currently shows the user as signed in
        self.is_authenticated = is_authenticated or (lambda: context.authenticated)
        self.refresh_interval = refresh_interval
        self.min_refresh_interval = min_refresh_interval
        self.check_interval = check_interval
        self.clock = clock

        self._last_refresh: Optional[float] = None
        self._pending_refresh: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._running = False
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._running

    def _throttled(self, now: float) -> bool:
        return (
            self._last_refresh is not None
            and now - self._last_refresh < self.min_refresh_interval
        )

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def refresh(self) -> bool:
        """
        Extend the session unless one succeeded within the cooldown.

        A throttled call reports success: the session was just refreshed.
        Calls made while a refresh is in flight wait for it and share its
        result.
        """
        token = self.context.session_token
        if not token:
            return False

        if self._pending_refresh is not None:
            return await asyncio.shield(self._pending_refresh)

        now = self.clock()
        if self._throttled(now):
            return True

        task = self._spawn(self._send_refresh(token, now))
        self._pending_refresh = task
        task.add_done_callback(self._clear_pending_refresh)
        return await asyncio.shield(task)

    def _clear_pending_refresh(self, task: asyncio.Task):
        if self._pending_refresh is task:
            self._pending_refresh = None

    async def _send_refresh(self, token: str, started_at: float) -> bool:
        try:
            refreshed = await self.client.refresh_session(token)
        except httpx.HTTPError:
            logger.exception("session_refresh_failed")
            return False

        if refreshed:
            self._last_refresh = started_at
            logger.info("session_refreshed")
        else:
            logger.warning("session_refresh_rejected")
        return refreshed

    async def validate(self):
        """Check the stored token, retrying once through refresh before giving up."""
        token = self.context.session_token
        if not token:
            return

        try:
            user_id = await self.client.validate_session(token)
        except httpx.HTTPError:
            logger.exception("session_validation_failed")
            return

        if not user_id:
            logger.warning("session_invalid; attempting refresh")
            if await self.refresh():
                return

            logger.warning("session_refresh_failed; clearing session")
            self.context.clear()
            self.stop()
            if self.on_expired:
                self.on_expired()
            return

        if not self.is_authenticated() and self.on_restored:
            self.on_restored({**(self.context.user or {}), "id": str(user_id)})

    def _active(self, generation: int) -> bool:
        return self._running and self._generation == generation

    async def _every(self, interval: float, action: Callable, generation: int):
        # stop() cannot cancel the loop whose own action called it, so each
        # loop exits once its start() is no longer the current one
        while self._active(generation):
            await asyncio.sleep(interval)
            if not self._active(generation):
                break
            await action()

    def start(self):
        """Refresh once now and schedule both cadences. Needs a running loop."""
        if self._running:
            return
        self._running = True
        self._generation += 1

        self._spawn(self.refresh())
        self._spawn(self._every(self.refresh_interval, self.refresh, self._generation))
        self._spawn(self._every(self.check_interval, self.validate, self._generation))

    def stop(self):
        """Cancel timers and pending checks. In-flight HTTP calls are not aborted."""
        self._running = False
        current = asyncio.current_task() if self._tasks else None
        for task in list(self._tasks):
            if task is not current:
                task.cancel()

    async def aclose(self):
        self.stop()
        pending = [task for task in self._tasks if task is not asyncio.current_task()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def notify_activity(self, event: str) -> Optional[asyncio.Task]:
        """Feed a user-activity event; schedules a refresh when the cooldown allows."""
        if not self._running or event not in ACTIVITY_EVENTS:
            return None
        if self._throttled(self.clock()):
            return None
        return self._spawn(self.refresh())

    def notify_visibility(self, visible: bool) -> Optional[asyncio.Task]:
        if not self._running or not visible:
            return None
        return self._spawn(self.validate())

    def notify_online(self) -> Optional[asyncio.Task]:
        if not self._running:
            return None
        return self._spawn(self.validate())
