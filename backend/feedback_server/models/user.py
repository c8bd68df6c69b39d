"""User ORM model."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from feedback_server.db import Base


class User(Base):
    __tablename__ = "users"

    # Caller-supplied (e.g. the identity provider's subject), not generated here.
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
