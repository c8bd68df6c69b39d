"""Pydantic schemas for Group endpoints."""

from pydantic import BaseModel, Field


class GroupWriteRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    user_ids: list[str] = Field(default_factory=list)
    likes: int = 0


class GroupDetail(BaseModel):
    id: int
    title: str
    description: str
    user_ids: list[str]
    likes: int

    model_config = {"from_attributes": True}
