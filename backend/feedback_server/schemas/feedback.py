"""Pydantic schemas for Feedback endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from feedback_server.schemas.validators import check_urls


class FeedbackWriteRequest(BaseModel):
    """Body of POST /feedbacks and PUT /feedbacks/{id}. Vote counters are not writable."""

    idea_id: int
    user_id: str = Field(..., min_length=1)
    content: str
    files_url: list[str] = Field(default_factory=list)
    feedback_links: list[int] = Field(default_factory=list)
    user_tag: str | None = None

    @field_validator("files_url")
    @classmethod
    def _urls(cls, v: list[str]) -> list[str]:
        return check_urls(v)


class FeedbackDetail(BaseModel):
    id: int
    idea_id: int
    user_id: str
    content: str
    files_url: list[str]
    feedback_links: list[int]
    user_tag: str | None
    upvotes: int
    downvotes: int
    created_at: datetime

    model_config = {"from_attributes": True}
