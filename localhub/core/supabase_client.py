import logging
from functools import lru_cache

from fastapi import HTTPException
from supabase import create_client, Client

from localhub.core import config

logger = logging.getLogger(__name__)


@lru_cache
def get_supabase() -> Client:
    """Service-role client shared by every request handler."""
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        logger.error(
            "missing_env has_url=%s has_key=%s",
            bool(config.SUPABASE_URL),
            bool(config.SUPABASE_KEY),
        )
        raise HTTPException(status_code=500, detail="Server not configured")

    return create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
