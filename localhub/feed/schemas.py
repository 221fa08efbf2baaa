from pydantic import BaseModel
from uuid import UUID
from typing import Literal, Optional


class CreatePostModel(BaseModel):
    action: Literal["create"] = "create"
    content: str
    image_url: Optional[str] = None


class CreateCommentModel(BaseModel):
    action: Literal["create"] = "create"
    post_id: UUID
    content: str


class ToggleLikeModel(BaseModel):
    action: Literal["toggle"] = "toggle"
    post_id: UUID


class ToggleLikeResponseModel(BaseModel):
    success: bool
    liked: bool


class ReportPostModel(BaseModel):
    action: Literal["report"] = "report"
    post_id: UUID
    reason: str
    description: Optional[str] = None


class ReportPostResponseModel(BaseModel):
    success: bool
    message: str
    report_count: int
    hidden: bool
