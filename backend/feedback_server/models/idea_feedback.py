"""ideas_feedbacks association table — mirrors Feedback.idea_id."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from feedback_server.db import Base

idea_feedbacks = Table(
    "ideas_feedbacks",
    Base.metadata,
    Column("idea_id", Integer, ForeignKey("ideas.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "feedback_id", Integer, ForeignKey("feedbacks.id", ondelete="CASCADE"), primary_key=True
    ),
)
