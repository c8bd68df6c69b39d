"""Idea ORM model."""

from datetime import datetime

from sqlalchemy import ARRAY, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from feedback_server.db import Base


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    user_id: Mapped[str] = mapped_column(
        Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    files_url: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    # 'public' | 'private:<user_id>' | 'group:<group_id>'; free text at this layer,
    # see services.access for the parser.
    access: Mapped[str] = mapped_column(Text, nullable=False, server_default="public")
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
