import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from localhub.core.permissions import Role, resolve_capabilities

from .api import LocalHubClient
from .storage import ADMIN_KEY, AUTH_KEY, SessionStore

logger = logging.getLogger(__name__)


class SessionContext:
    """
    The signed-in user's session, persisted in a SessionStore.

    Lifecycle: `load()` on start, `save()` after login or refresh, `clear()`
    on sign-out or when the server no longer accepts the token. Pass the
    instance to whatever needs the session instead of reading storage
    directly.
    """

    def __init__(self, store: SessionStore, key: str = AUTH_KEY):
        self.store = store
        self.key = key
        self.user: dict[str, Any] | None = None
        self.session_token: str | None = None
        self.roles: list[str] = []

    @property
    def authenticated(self) -> bool:
        return bool(self.user and self.session_token)

    def load(self) -> bool:
        stored = self.store.get(self.key)
        if not isinstance(stored, dict):
            if stored is not None:
                self.store.remove(self.key)
            self._reset()
            return False

        user = stored.get("user")
        token = stored.get("session_token")
        if not isinstance(user, dict) or not token:
            self.clear()
            return False

        self.user = user
        self.session_token = token
        self.roles = list(stored.get("roles") or [])
        return True

    def save(self, user: dict[str, Any], session_token: str, roles: list[str] | None = None):
        self.user = user
        self.session_token = session_token
        if roles is not None:
            self.roles = list(roles)

        payload: dict[str, Any] = {"user": user, "session_token": session_token}
        if self.key == ADMIN_KEY:
            payload["roles"] = self.roles
        self.store.set(self.key, payload)

    def clear(self):
        self.store.remove(self.key)
        self._reset()

    def _reset(self):
        self.user = None
        self.session_token = None
        self.roles = []


@dataclass(frozen=True)
class AdminSession:
    user: dict[str, Any]
    session_token: str
    roles: list[str]
    capabilities: frozenset[Role] = field(default_factory=frozenset)

    @property
    def is_super_admin(self) -> bool:
        return Role.SUPER_ADMIN in self.capabilities

    @property
    def is_content_moderator(self) -> bool:
        return Role.CONTENT_MODERATOR in self.capabilities

    @property
    def is_category_manager(self) -> bool:
        return Role.CATEGORY_MANAGER in self.capabilities


async def load_admin_session(
    context: SessionContext, client: LocalHubClient
) -> AdminSession | None:
    """
    Restore the admin panel session from storage after checking it server side.

    The stored roles are never trusted: the server is asked again, and the
    stored session is dropped when the token is invalid or the user no longer
    holds any admin role.
    """
    if not context.load():
        return None

    try:
        validated = await client.admin_validate(context.session_token)
    except httpx.HTTPError:
        logger.exception("admin_session_validation_failed")
        context.clear()
        return None

    if not validated or not validated.get("success"):
        logger.warning("admin_session_invalid; clearing stored session")
        context.clear()
        return None

    roles = list(validated.get("roles") or [])
    capabilities = resolve_capabilities(roles)
    if not capabilities:
        logger.warning("admin_roles_revoked; clearing stored session")
        context.clear()
        return None

    user = validated.get("user") or context.user
    context.save(user, context.session_token, roles)

    return AdminSession(
        user=user,
        session_token=context.session_token,
        roles=roles,
        capabilities=capabilities,
    )
