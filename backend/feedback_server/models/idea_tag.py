"""ideas_tags association table."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from feedback_server.db import Base

idea_tags = Table(
    "ideas_tags",
    Base.metadata,
    Column("idea_id", Integer, ForeignKey("ideas.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)
