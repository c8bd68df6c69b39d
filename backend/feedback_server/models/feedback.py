"""Feedback ORM model."""

from datetime import datetime

from sqlalchemy import ARRAY, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from feedback_server.db import Base


class Feedback(Base):
    __tablename__ = "feedbacks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idea_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    files_url: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    # Ids of other feedbacks; stored as-is, dangling references are possible.
    feedback_links: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, server_default="{}"
    )
    user_tag: Mapped[str | None] = mapped_column(Text, nullable=True)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(nullable=False, server_default=func.now())
