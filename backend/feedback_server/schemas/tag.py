"""Pydantic schemas for Tag endpoints."""

from pydantic import BaseModel


class TagName(BaseModel):
    name: str


class TagDetail(BaseModel):
    id: int
    name: str
    upvotes: int
    downvotes: int

    model_config = {"from_attributes": True}
