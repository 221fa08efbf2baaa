"""Blocked-word screening for user generated text."""

import logging
import re
from typing import Iterable, Optional

from supabase import Client

logger = logging.getLogger(__name__)

SYSTEM_REPORT_REASON = "Blocked words detected"


def normalize_word(word: str) -> str:
    return word.strip().lower()


def contains_blocked_words(text: str, words: Iterable[str]) -> bool:
    """
    True if `text` contains any of `words` as a whole word or phrase,
    ignoring case. Blank entries never match.
    """
    if not text:
        return False

    haystack = text.lower()
    for word in words:
        word = normalize_word(word)
        if not word:
            continue
        if re.search(rf"(?<!\w){re.escape(word)}(?!\w)", haystack):
            return True
    return False


def active_blocked_words(supabase: Client) -> list[str]:
    result = (
        supabase.table("blocked_words").select("word").eq("is_active", True).execute()
    )
    return [row["word"] for row in result.data or []]


def content_is_flagged(supabase: Client, text: str) -> bool:
    return contains_blocked_words(text, active_blocked_words(supabase))


def file_system_report(
    supabase: Client, reported_id: str, reported_type: str
) -> Optional[dict]:
    """
    Record an automatic report (no reporter) against flagged content.

    Failing to file the report must not fail the request that created the
    content, so errors are logged and None is returned.
    """
    try:
        result = (
            supabase.table("reports")
            .insert(
                {
                    "reporter_id": None,
                    "reported_id": str(reported_id),
                    "reported_type": reported_type,
                    "reason": SYSTEM_REPORT_REASON,
                    "description": (
                        f"This {reported_type} was automatically flagged for "
                        "containing blocked/monitored words."
                    ),
                    "status": "pending",
                }
            )
            .execute()
        )
    except Exception:
        logger.exception(
            f"auto_report_failed reported_type={reported_type} reported_id={reported_id}"
        )
        return None

    logger.info(f"auto_report_created reported_type={reported_type} reported_id={reported_id}")
    return result.data[0] if result.data else None
