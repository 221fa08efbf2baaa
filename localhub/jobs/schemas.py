from pydantic import BaseModel, Field
from uuid import UUID
from typing import Annotated, Literal, Optional, Union


class ListJobsAction(BaseModel):
    action: Literal["list"]


class CreateJobAction(BaseModel):
    action: Literal["create"]
    title: str
    description: str
    conditions: Optional[str] = None
    location: Optional[str] = None
    max_applications: Optional[int] = Field(default=None, gt=0)
    expires_days: Optional[int] = Field(default=None, gt=0, le=365)


class ApplyJobAction(BaseModel):
    action: Literal["apply"]
    job_id: UUID
    message: Optional[str] = None
    education_qualification: Optional[str] = None
    experience_details: Optional[str] = None


class CloseJobAction(BaseModel):
    action: Literal["close"]
    job_id: UUID


JobsRequest = Annotated[
    Union[ListJobsAction, CreateJobAction, ApplyJobAction, CloseJobAction],
    Field(discriminator="action"),
]
