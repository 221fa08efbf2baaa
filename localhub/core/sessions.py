"""
Opaque session tokens stored in the `user_sessions` table.

Sessions are created at login, extended by the client-side refresher and
invalidated on sign-out. Validity is always decided by the datastore row:
`is_active = true` and `expires_at` in the future.
"""

import logging
import secrets
from datetime import datetime, timedelta

from supabase import Client

from localhub.core import config
from localhub.utils.clock import isoformat, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "user_sessions"


def validate_session(supabase: Client, token: str | None) -> str | None:
    """Return the owning user id for an active, unexpired token, else None."""
    if not token or not token.strip():
        return None

    result = (
        supabase.table(SESSIONS_TABLE)
        .select("user_id, expires_at")
        .eq("session_token", token)
        .eq("is_active", True)
        .gt("expires_at", isoformat(utcnow()))
        .limit(1)
        .execute()
    )

    if not result.data:
        return None

    return str(result.data[0]["user_id"])


def refresh_session(supabase: Client, token: str | None) -> datetime | None:
    """
    Push the expiry of an active session forward by SESSION_TTL_HOURS.

    Sessions that lapsed less than SESSION_REFRESH_GRACE_HOURS ago are revived;
    inactive or long-expired sessions are left alone. Returns the new expiry,
    or None when nothing was refreshed.
    """
    if not token or not token.strip():
        return None

    now = utcnow()
    grace_cutoff = now - timedelta(hours=config.SESSION_REFRESH_GRACE_HOURS)
    new_expiry = now + timedelta(hours=config.SESSION_TTL_HOURS)

    result = (
        supabase.table(SESSIONS_TABLE)
        .update(
            {
                "expires_at": isoformat(new_expiry),
                "last_refreshed_at": isoformat(now),
            }
        )
        .eq("session_token", token)
        .eq("is_active", True)
        .gt("expires_at", isoformat(grace_cutoff))
        .execute()
    )

    if not result.data:
        return None

    logger.info("session_refreshed user_id=%s", result.data[0]["user_id"])
    return new_expiry


def create_session(supabase: Client, user_id: str) -> dict:
    now = utcnow()
    row = (
        supabase.table(SESSIONS_TABLE)
        .insert(
            {
                "user_id": str(user_id),
                "session_token": secrets.token_urlsafe(32),
                "created_at": isoformat(now),
                "expires_at": isoformat(now + timedelta(hours=config.SESSION_TTL_HOURS)),
                "is_active": True,
            }
        )
        .execute()
    ).data[0]

    row["expires_at"] = parse_timestamp(row["expires_at"])
    return row


def deactivate_session(supabase: Client, token: str) -> bool:
    result = (
        supabase.table(SESSIONS_TABLE)
        .update({"is_active": False})
        .eq("session_token", token)
        .eq("is_active", True)
        .execute()
    )
    return bool(result.data)
