from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, List, Literal, Optional, Union


class ListBlockedWordsAction(BaseModel):
    action: Literal["list"]


class AddBlockedWordsAction(BaseModel):
    action: Literal["add"]
    words: List[str] = []


class UpdateBlockedWordAction(BaseModel):
    action: Literal["update"]
    id: Optional[UUID] = None
    word: Optional[str] = None
    is_active: Optional[bool] = None


class DeleteBlockedWordAction(BaseModel):
    action: Literal["delete"]
    id: Optional[UUID] = None


BlockedWordsRequest = Annotated[
    Union[
        ListBlockedWordsAction,
        AddBlockedWordsAction,
        UpdateBlockedWordAction,
        DeleteBlockedWordAction,
    ],
    Field(discriminator="action"),
]
