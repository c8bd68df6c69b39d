"""Pydantic schemas for Idea endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from feedback_server.schemas.validators import check_access, check_urls


class IdeaWriteRequest(BaseModel):
    """Body of POST /ideas and PUT /ideas/{id}."""

    title: str = Field(..., min_length=1)
    content: str
    user_id: str = Field(..., min_length=1)
    files_url: list[str] = Field(default_factory=list)
    access: str = Field(
        default="public", description="public | private:<user_id> | group:<group_id>"
    )
    tags: list[str] = Field(default_factory=list)

    @field_validator("files_url")
    @classmethod
    def _urls(cls, v: list[str]) -> list[str]:
        return check_urls(v)

    @field_validator("access")
    @classmethod
    def _access(cls, v: str) -> str:
        return check_access(v)


class IdeaDetail(BaseModel):
    id: int
    title: str
    content: str
    user_id: str
    files_url: list[str]
    access: str
    upvotes: int
    downvotes: int
    created_at: datetime
    tags: list[str]

    model_config = {"from_attributes": True}
