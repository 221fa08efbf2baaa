import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from supabase import Client

from localhub.core import config
from localhub.core.permissions import Role, fetch_roles, has_any, resolve_capabilities
from localhub.core.sessions import validate_session
from localhub.core.supabase_client import get_supabase

logger = logging.getLogger(__name__)

session_header = APIKeyHeader(name=config.SESSION_HEADER, auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    user_id: str
    roles: list[str]
    capabilities: frozenset[Role]


def get_session_token(token: str | None = Depends(session_header)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Session token required"
        )
    return token


def get_current_user_id(
    token: str = Depends(get_session_token),
    supabase: Client = Depends(get_supabase),
) -> str:
    try:
        user_id = validate_session(supabase, token)
    except Exception:
        logger.exception("validate_session_failed")
        raise HTTPException(status_code=500, detail="Session validation failed")

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )
    return user_id


def get_optional_user_id(
    token: str | None = Depends(session_header),
    supabase: Client = Depends(get_supabase),
) -> str | None:
    """Like get_current_user_id, but anonymous callers get None instead of a 401."""
    if not token:
        return None
    return get_current_user_id(token, supabase)


def require_user(user_id: str | None) -> str:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Session token required"
        )
    return user_id


def authorize_admin(supabase: Client, user_id: str, required=()) -> AdminPrincipal:
    """
    Check that `user_id` holds one of `required` (any admin role when empty).

    Roles are fetched on every call; nothing is cached between requests.
    """
    try:
        roles = fetch_roles(supabase, user_id)
    except Exception:
        logger.exception("role_lookup_failed user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Role lookup failed")

    capabilities = resolve_capabilities(roles)
    if not has_any(capabilities, required):
        logger.warning(
            "admin_access_denied user_id=%s roles=%s required=%s",
            user_id,
            roles,
            [role.value for role in required],
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: Admin privileges required",
        )

    return AdminPrincipal(user_id=user_id, roles=roles, capabilities=capabilities)


def require_roles(*required: Role):
    """Dependency factory admitting only sessions that pass authorize_admin."""

    def dependency(
        user_id: str = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase),
    ) -> AdminPrincipal:
        return authorize_admin(supabase, user_id, required)

    return dependency
