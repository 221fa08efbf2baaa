from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, Literal, Optional, Union


class RequestDeletionAction(BaseModel):
    action: Literal["request_deletion"]


class CancelDeletionAction(BaseModel):
    action: Literal["cancel_deletion"]


class GetStatusAction(BaseModel):
    action: Literal["get_status"]


class GetAllPendingAction(BaseModel):
    action: Literal["get_all_pending"]


class AdminDeleteAction(BaseModel):
    # admin_delete_now needs a pending request; admin_delete_direct does not
    action: Literal["admin_delete_now", "admin_delete_direct"]
    user_id: Optional[UUID] = None


AccountDeletionRequest = Annotated[
    Union[
        RequestDeletionAction,
        CancelDeletionAction,
        GetStatusAction,
        GetAllPendingAction,
        AdminDeleteAction,
    ],
    Field(discriminator="action"),
]
