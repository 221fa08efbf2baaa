import logging

from fastapi import APIRouter, HTTPException, Depends
from supabase import Client

from localhub.core.supabase_client import get_supabase
from localhub.core.dependencies import get_current_user_id
from localhub.core.errors import is_unique_violation
from localhub.utils.clock import isoformat, utcnow
from localhub.utils.profile_lookup import get_profile_summary

from .schemas import (
    MessagingRequest,
    GetConversationsAction,
    GetMessagesAction,
    SendMessageAction,
    GetOrCreateConversationAction,
    DeleteConversationAction,
    DeleteMessageAction,
    MarkReadAction,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Order two participant ids so (a, b) and (b, a) map to the same row."""
    first, second = sorted([str(user_a).lower(), str(user_b).lower()])
    return first, second


def _participant_filter(user_id: str) -> str:
    return f"participant_one.eq.{user_id},participant_two.eq.{user_id}"


def _get_conversation_for_participant(
    supabase: Client, conversation_id: str, user_id: str
) -> dict:
    conversation = (
        supabase.table("conversations")
        .select("*")
        .eq("id", conversation_id)
        .or_(_participant_filter(user_id))
        .limit(1)
        .execute()
    )

    if not conversation.data:
        raise HTTPException(
            status_code=403, detail="Conversation not found or access denied"
        )

    return conversation.data[0]


def _mark_incoming_read(supabase: Client, conversation_id: str, user_id: str):
    supabase.table("messages").update({"is_read": True}).eq(
        "conversation_id", conversation_id
    ).neq("sender_id", user_id).eq("is_read", False).execute()


def get_conversations(data: GetConversationsAction, user_id: str, supabase: Client):
    """
    List every conversation the caller takes part in, most recently active
    first, with the other participant's profile, the latest message text and
    the number of unread messages addressed to the caller.
    """
    conversations = (
        supabase.table("conversations")
        .select("*")
        .or_(_participant_filter(user_id))
        .order("last_message_at", desc=True)
        .execute()
    )

    enriched = []
    for conversation in conversations.data or []:
        other_user_id = (
            conversation["participant_two"]
            if conversation["participant_one"] == user_id
            else conversation["participant_one"]
        )

        last_message = (
            supabase.table("messages")
            .select("content")
            .eq("conversation_id", conversation["id"])
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )

        unread = (
            supabase.table("messages")
            .select("id", count="exact")
            .eq("conversation_id", conversation["id"])
            .eq("is_read", False)
            .neq("sender_id", user_id)
            .execute()
        )

        enriched.append(
            {
                **conversation,
                "other_user": (
                    get_profile_summary(supabase, other_user_id) if other_user_id else None
                ),
                "last_message": (
                    last_message.data[0]["content"] if last_message.data else None
                ),
                "unread_count": unread.count or 0,
            }
        )

    return {"conversations": enriched}


def get_messages(data: GetMessagesAction, user_id: str, supabase: Client):
    """Full history, oldest first. Reading a conversation marks it read."""
    conversation_id = str(data.conversation_id)
    _get_conversation_for_participant(supabase, conversation_id, user_id)

    messages = (
        supabase.table("messages")
        .select("*")
        .eq("conversation_id", conversation_id)
        .order("created_at", desc=False)
        .execute()
    )

    _mark_incoming_read(supabase, conversation_id, user_id)

    return {"messages": messages.data or []}


def send_message(data: SendMessageAction, user_id: str, supabase: Client):
    content = (data.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message content required")

    conversation_id = str(data.conversation_id)
    _get_conversation_for_participant(supabase, conversation_id, user_id)

    message = (
        supabase.table("messages")
        .insert(
            {
                "conversation_id": conversation_id,
                "sender_id": user_id,
                "content": content,
            }
        )
        .execute()
    ).data[0]

    supabase.table("conversations").update(
        {"last_message_at": isoformat(utcnow())}
    ).eq("id", conversation_id).execute()

    logger.info(f"message_sent conversation_id={conversation_id} sender_id={user_id}")

    return {"message": message}


def get_or_create_conversation(
    data: GetOrCreateConversationAction, user_id: str, supabase: Client
):
    """
    Return the id of the one conversation between the caller and
    `other_user_id`, creating it on first contact.

    Participants are stored in canonical (lower, higher) order, so the lookup
    is the same whichever side starts the chat. If a concurrent request wins
    the insert, the unique pair constraint rejects ours and the existing row is
    returned instead.
    """
    if not data.other_user_id:
        raise HTTPException(status_code=400, detail="Other user ID required")

    other_user_id = str(data.other_user_id)
    if other_user_id == user_id:
        raise HTTPException(
            status_code=400, detail="Cannot start a conversation with yourself"
        )

    participant_one, participant_two = canonical_pair(user_id, other_user_id)

    def find_existing():
        existing = (
            supabase.table("conversations")
            .select("id")
            .eq("participant_one", participant_one)
            .eq("participant_two", participant_two)
            .limit(1)
            .execute()
        )
        return existing.data[0]["id"] if existing.data else None

    conversation_id = find_existing()
    if conversation_id:
        return {"conversation_id": conversation_id, "is_new": False}

    if not get_profile_summary(supabase, other_user_id, "id"):
        raise HTTPException(status_code=404, detail="User not found")

    try:
        created = (
            supabase.table("conversations")
            .insert(
                {
                    "participant_one": participant_one,
                    "participant_two": participant_two,
                }
            )
            .execute()
        )
    except Exception as error:
        if not is_unique_violation(error):
            raise
        conversation_id = find_existing()
        if not conversation_id:
            raise
        return {"conversation_id": conversation_id, "is_new": False}

    conversation_id = created.data[0]["id"]
    logger.info(
        f"conversation_created conversation_id={conversation_id} "
        f"participants={participant_one},{participant_two}"
    )
    return {"conversation_id": conversation_id, "is_new": True}


def delete_conversation(data: DeleteConversationAction, user_id: str, supabase: Client):
    conversation_id = str(data.conversation_id)
    _get_conversation_for_participant(supabase, conversation_id, user_id)

    # Messages first
    supabase.table("messages").delete().eq("conversation_id", conversation_id).execute()
    supabase.table("conversations").delete().eq("id", conversation_id).execute()

    logger.info(f"conversation_deleted conversation_id={conversation_id} by={user_id}")
    return {"success": True}


def delete_message(data: DeleteMessageAction, user_id: str, supabase: Client):
    message_id = str(data.message_id)

    message = (
        supabase.table("messages")
        .select("id")
        .eq("id", message_id)
        .eq("sender_id", user_id)
        .limit(1)
        .execute()
    )

    if not message.data:
        raise HTTPException(
            status_code=403, detail="Message not found or access denied"
        )

    supabase.table("messages").delete().eq("id", message_id).execute()
    return {"success": True}


def mark_read(data: MarkReadAction, user_id: str, supabase: Client):
    conversation_id = str(data.conversation_id)
    _get_conversation_for_participant(supabase, conversation_id, user_id)
    _mark_incoming_read(supabase, conversation_id, user_id)
    return {"success": True}


ACTIONS = {
    "get_conversations": get_conversations,
    "get_messages": get_messages,
    "send_message": send_message,
    "get_or_create_conversation": get_or_create_conversation,
    "delete_conversation": delete_conversation,
    "delete_message": delete_message,
    "mark_read": mark_read,
}


@router.post("", status_code=200)
def messaging(
    data: MessagingRequest,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Direct messaging between two users.

    **Actions**
    - `get_conversations`: the caller's inbox
    - `get_messages`: `conversation_id`
    - `send_message`: `conversation_id`, `content`
    - `get_or_create_conversation`: `other_user_id`
    - `delete_conversation`: `conversation_id`
    - `delete_message`: `message_id` (sender only)
    - `mark_read`: `conversation_id`

    **Errors**
    - 400: Missing fields or unknown action
    - 401: Missing, invalid or expired session
    - 403: Caller is not a participant / not the sender
    - 500: Database error
    """
    try:
        return ACTIONS[data.action](data, user_id, supabase)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"messaging_error action={data.action} user_id={user_id}")
        raise HTTPException(status_code=500, detail="Internal server error")
