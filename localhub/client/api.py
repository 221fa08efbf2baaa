import logging

import httpx

from localhub.core import config

logger = logging.getLogger(__name__)


class LocalHubClient:
    """Thin async wrapper over the localhub HTTP API."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport=None):
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def validate_session(self, session_token: str) -> str | None:
        response = await self._http.post(
            "/auth/session/validate", json={"session_token": session_token}
        )
        response.raise_for_status()
        return response.json().get("user_id")

    async def refresh_session(self, session_token: str) -> bool:
        response = await self._http.post(
            "/auth/session/refresh", json={"session_token": session_token}
        )
        response.raise_for_status()
        return bool(response.json().get("refreshed"))

    async def admin_validate(self, session_token: str) -> dict | None:
        """Server-side admin check; None when the session or its roles are not valid."""
        response = await self._http.post(
            "/auth/admin/validate", headers={config.SESSION_HEADER: session_token}
        )
        if response.status_code in (401, 403):
            return None
        response.raise_for_status()
        return response.json()

    async def invoke(self, path: str, body: dict, session_token: str | None = None) -> dict:
        headers = {config.SESSION_HEADER: session_token} if session_token else {}
        response = await self._http.post(path, json=body, headers=headers)
        payload = response.json()
        if response.is_error:
            raise LocalHubError(response.status_code, payload.get("error", "Request failed"))
        return payload


class LocalHubError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
