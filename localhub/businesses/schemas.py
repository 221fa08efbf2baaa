from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, Literal, Optional, Union

# Columns an owner may change through the update action
EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "location",
    "logo_url",
    "cover_image_url",
    "website_url",
    "instagram_link",
    "youtube_link",
)


class ListBusinessesAction(BaseModel):
    action: Literal["list"]


class UpdateBusinessAction(BaseModel):
    action: Literal["update"]
    business_id: Optional[UUID] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    website_url: Optional[str] = None
    instagram_link: Optional[str] = None
    youtube_link: Optional[str] = None

    def updates(self) -> dict:
        return {
            field: getattr(self, field)
            for field in EDITABLE_FIELDS
            if field in self.model_fields_set
        }


class DeleteBusinessAction(BaseModel):
    action: Literal["delete"]
    business_id: Optional[UUID] = None


ManageBusinessRequest = Annotated[
    Union[ListBusinessesAction, UpdateBusinessAction, DeleteBusinessAction],
    Field(discriminator="action"),
]


class BusinessFollowModel(BaseModel):
    action: Literal["follow", "unfollow"]
    business_id: Optional[UUID] = None


class BusinessFollowResponseModel(BaseModel):
    success: bool
    message: Optional[str] = None
