"""Atomic up/down vote counters for tags, ideas and feedbacks."""

import logging
from typing import Literal, TypeVar

from sqlalchemy import update
from sqlalchemy.orm import InstrumentedAttribute, Session

from feedback_server.db import Base

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]

_COLUMNS: dict[Direction, str] = {"up": "upvotes", "down": "downvotes"}

M = TypeVar("M", bound=Base)


class VoteCounter:
    def adjust(
        self,
        model: type[M],
        key: InstrumentedAttribute[object],
        value: object,
        direction: Direction,
        delta: Literal[1, -1],
        db: Session,
    ) -> M | None:
        """Add *delta* to the *direction* counter of the row where *key* == *value*.

        The arithmetic happens in a single UPDATE so concurrent votes are never lost.
        There is no floor: removing a vote that was never cast goes negative.
        Returns the updated row, or None when no row matched.
        """
        column = getattr(model, _COLUMNS[direction])
        stmt = (
            update(model)
            .where(key == value)
            .values({column: column + delta})
            .returning(model)
            .execution_options(synchronize_session=False)
        )
        row = db.scalars(stmt).first()
        db.commit()
        if row is None:
            logger.info("vote on missing %s %s=%r", model.__tablename__, key.key, value)
        return row
