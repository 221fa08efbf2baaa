from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, Literal, Union


class GetConversationsAction(BaseModel):
    action: Literal["get_conversations"]


class GetMessagesAction(BaseModel):
    action: Literal["get_messages"]
    conversation_id: UUID


class SendMessageAction(BaseModel):
    action: Literal["send_message"]
    conversation_id: UUID
    content: str | None = None


class GetOrCreateConversationAction(BaseModel):
    action: Literal["get_or_create_conversation"]
    other_user_id: UUID | None = None


class DeleteConversationAction(BaseModel):
    action: Literal["delete_conversation"]
    conversation_id: UUID


class DeleteMessageAction(BaseModel):
    action: Literal["delete_message"]
    message_id: UUID


class MarkReadAction(BaseModel):
    action: Literal["mark_read"]
    conversation_id: UUID


MessagingRequest = Annotated[
    Union[
        GetConversationsAction,
        GetMessagesAction,
        SendMessageAction,
        GetOrCreateConversationAction,
        DeleteConversationAction,
        DeleteMessageAction,
        MarkReadAction,
    ],
    Field(discriminator="action"),
]
