from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, Any, Dict, Literal, Union


class ListEntitiesAction(BaseModel):
    action: Literal["get_businesses", "get_communities", "get_jobs", "get_stats"]


class UpdateBusinessAction(BaseModel):
    action: Literal["update_business"]
    business_id: UUID
    updates: Dict[str, Any]


class UpdateCommunityAction(BaseModel):
    action: Literal["update_community"]
    community_id: UUID
    updates: Dict[str, Any]


class UpdateJobAction(BaseModel):
    action: Literal["update_job"]
    job_id: UUID
    updates: Dict[str, Any]


AdminDataRequest = Annotated[
    Union[
        ListEntitiesAction,
        UpdateBusinessAction,
        UpdateCommunityAction,
        UpdateJobAction,
    ],
    Field(discriminator="action"),
]
