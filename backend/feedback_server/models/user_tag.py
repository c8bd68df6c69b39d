"""users_pinned_tags association table."""

from sqlalchemy import Column, ForeignKey, Integer, Table, Text

from feedback_server.db import Base

user_pinned_tags = Table(
    "users_pinned_tags",
    Base.metadata,
    Column("user_id", Text, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)
