"""Pydantic schemas for User endpoints."""

from pydantic import BaseModel, EmailStr, Field


class UserUpdateRequest(BaseModel):
    name: str
    email: EmailStr
    role: str
    image_url: str


class UserCreateRequest(UserUpdateRequest):
    id: str = Field(..., min_length=1)


class UserDetail(BaseModel):
    id: str
    name: str | None
    email: str | None
    role: str | None
    image_url: str | None
    pinned_tags: list[str]

    model_config = {"from_attributes": True}
