import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import AdminPrincipal, require_roles
from localhub.core.errors import is_unique_violation
from localhub.core.permissions import Role

from .filters import normalize_word
from .schemas import (
    BlockedWordsRequest,
    ListBlockedWordsAction,
    AddBlockedWordsAction,
    UpdateBlockedWordAction,
    DeleteBlockedWordAction,
)


logger = logging.getLogger(__name__)
router = APIRouter()

require_moderator = require_roles(Role.CONTENT_MODERATOR)


def list_words(data: ListBlockedWordsAction, admin: AdminPrincipal, supabase: Client):
    result = (
        supabase.table("blocked_words")
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return {"success": True, "data": result.data or []}


def add_words(data: AddBlockedWordsAction, admin: AdminPrincipal, supabase: Client):
    words = []
    for word in data.words:
        word = normalize_word(word)
        if word and word not in words:
            words.append(word)

    if not words:
        raise HTTPException(status_code=400, detail="Words array required")

    try:
        supabase.table("blocked_words").insert(
            [{"word": word, "created_by": admin.user_id} for word in words]
        ).execute()
    except Exception as error:
        if is_unique_violation(error):
            raise HTTPException(
                status_code=400, detail="One or more words already exist"
            )
        raise

    logger.info(f"blocked_words_added count={len(words)} by={admin.user_id}")
    return {"success": True}


def update_word(data: UpdateBlockedWordAction, admin: AdminPrincipal, supabase: Client):
    if not data.id:
        raise HTTPException(status_code=400, detail="Word ID required")

    updates = {}
    if data.word is not None:
        updates["word"] = normalize_word(data.word)
    if data.is_active is not None:
        updates["is_active"] = data.is_active

    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update")

    try:
        supabase.table("blocked_words").update(updates).eq("id", str(data.id)).execute()
    except Exception as error:
        if is_unique_violation(error):
            raise HTTPException(status_code=400, detail="Word already exists")
        raise

    return {"success": True}


def delete_word(data: DeleteBlockedWordAction, admin: AdminPrincipal, supabase: Client):
    if not data.id:
        raise HTTPException(status_code=400, detail="Word ID required")

    supabase.table("blocked_words").delete().eq("id", str(data.id)).execute()
    return {"success": True}


ACTIONS = {
    "list": list_words,
    "add": add_words,
    "update": update_word,
    "delete": delete_word,
}


@router.post("/blocked-words", status_code=200)
def manage_blocked_words(
    data: BlockedWordsRequest,
    admin: AdminPrincipal = Depends(require_moderator),
    supabase: Client = Depends(get_supabase),
):
    """
    Maintain the blocked-word list used to auto-flag posts and comments.

    Requires the `content_moderator` role (or `super_admin`).

    **Actions**
    - `list`
    - `add`: `words` (lower-cased and trimmed before insert)
    - `update`: `id`, optional `word`, optional `is_active`
    - `delete`: `id`
    """
    try:
        return ACTIONS[data.action](data, admin, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"blocked_words_error action={data.action}")
        raise HTTPException(status_code=500, detail="Internal server error")
