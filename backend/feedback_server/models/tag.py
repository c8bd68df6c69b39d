"""Tag ORM model."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_server.db import Base


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Case-sensitive; the unique constraint is what makes tag creation idempotent.
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
