import re
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime

# Columns a user may change on their own profile
EDITABLE_FIELDS = (
    "full_name",
    "username",
    "avatar_url",
    "bio",
    "location",
    "is_online",
    "last_seen",
    "show_email",
    "show_mobile",
    "show_location",
)


class UpdateProfileModel(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    is_online: Optional[bool] = None
    last_seen: Optional[datetime] = None
    show_email: Optional[bool] = None
    show_mobile: Optional[bool] = None
    show_location: Optional[bool] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, username: Optional[str]) -> Optional[str]:
        if username is None:
            return username

        if not (3 <= len(username) <= 30):
            raise ValueError(
                f"Username must be between 3 and 30 characters long (got {len(username)})."
            )

        if not re.match(r"^[a-zA-Z0-9_.]+$", username):
            raise ValueError(
                "Username must only contain letters, numbers, underscores, and dots."
            )

        return username.lower()

    def updates(self) -> dict:
        return self.model_dump(
            mode="json", include=set(EDITABLE_FIELDS) & self.model_fields_set
        )


class VerifyEmailModel(BaseModel):
    token: str


class VerifyEmailResponseModel(BaseModel):
    success: bool
    message: str
