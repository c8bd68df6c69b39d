"""Error body shared by every endpoint."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    name: str
    message: str
