"""Tag service — shared tag vocabulary, tag normalization and tag aggregation.

Tags are linked to ideas (``ideas_tags``) and users (``users_pinned_tags``).
Linking always goes through the same three steps:

1. insert every candidate name into ``tags`` with ON CONFLICT DO NOTHING, so
   existing rows (and their vote counters) are left alone and two requests
   racing on a new name both succeed;
2. resolve all names to ids with one SELECT;
3. insert the (owner, tag) pairs into the junction, again ignoring pairs
   that already exist.

Step 1 is committed on its own: tags are shared vocabulary and may be left
unlinked if step 3 fails.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from sqlalchemy import (
    ARRAY,
    ColumnElement,
    Table,
    Text,
    cast,
    delete,
    func,
    literal_column,
    null,
    select,
)
from sqlalchemy.dialects.postgresql import aggregate_order_by
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from feedback_server.models.idea_tag import idea_tags
from feedback_server.models.tag import Tag
from feedback_server.models.user_tag import user_pinned_tags
from feedback_server.services.errors import NotFoundError
from feedback_server.services.votes import Direction, VoteCounter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagJunction:
    """A many-to-many table linking some owner entity to tags."""

    table: Table
    owner_column: str

    @property
    def owner(self) -> ColumnElement[object]:
        return self.table.c[self.owner_column]

    @property
    def tag(self) -> ColumnElement[int]:
        return self.table.c.tag_id


IDEA_TAGS = TagJunction(idea_tags, "idea_id")
USER_TAGS = TagJunction(user_pinned_tags, "user_id")


def clean_names(names: Iterable[str]) -> list[str]:
    """Strip names, drop empties and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for name in names:
        name = name.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def tag_list() -> ColumnElement[list[str]]:
    """Aggregate joined tag names into a sorted list.

    Used with LEFT JOINs: an owner without tags contributes a single NULL name,
    which array_remove drops, so the result is ``[]`` rather than ``[None]``.
    """
    aggregated = func.array_agg(aggregate_order_by(Tag.name, Tag.name.asc()))
    return func.coalesce(
        func.array_remove(aggregated, null(), type_=ARRAY(Text)),
        cast(literal_column("'{}'"), ARRAY(Text)),
    )


class TagService:
    def __init__(self) -> None:
        self._votes = VoteCounter()

    # ── Normalization ────────────────────────────────────────────────────────

    def ensure(self, names: Iterable[str], db: Session) -> dict[str, int]:
        """Make sure every name exists in ``tags``; return ``{name: id}``."""
        candidates = clean_names(names)
        if not candidates:
            return {}
        stmt = (
            pg_insert(Tag)
            .values([{"name": name} for name in candidates])
            .on_conflict_do_nothing(index_elements=[Tag.name])
        )
        db.execute(stmt)
        db.commit()
        rows = db.execute(select(Tag.id, Tag.name).where(Tag.name.in_(candidates))).all()
        return {row.name: row.id for row in rows}

    def link(
        self, junction: TagJunction, owner_id: object, tag_ids: Iterable[int], db: Session
    ) -> None:
        """Insert (owner, tag) pairs, ignoring pairs that already exist. Does not commit."""
        pairs = [{junction.owner_column: owner_id, "tag_id": tag_id} for tag_id in tag_ids]
        if not pairs:
            return
        db.execute(pg_insert(junction.table).values(pairs).on_conflict_do_nothing())

    def attach(
        self, junction: TagJunction, owner_id: object, names: Iterable[str], db: Session
    ) -> list[str]:
        """Normalize *names* and link them to *owner_id*. Does not commit the link.

        Raises sqlalchemy IntegrityError when the owner does not exist; the
        created tags stay.
        """
        ids = self.ensure(names, db)
        self.link(junction, owner_id, ids.values(), db)
        return sorted(ids)

    def relink(
        self, junction: TagJunction, owner_id: object, tag_ids: Iterable[int], db: Session
    ) -> None:
        """Make the owner's links exactly *tag_ids*. Does not commit."""
        keep = list(tag_ids)
        db.execute(
            delete(junction.table).where(junction.owner == owner_id, junction.tag.not_in(keep))
        )
        self.link(junction, owner_id, keep, db)

    def detach(self, junction: TagJunction, owner_id: object, name: str, db: Session) -> bool:
        """Remove the link between *owner_id* and the tag called *name*.

        Returns False when there was no such link.
        """
        tag_id = select(Tag.id).where(Tag.name == name).scalar_subquery()
        result = db.execute(
            delete(junction.table).where(junction.owner == owner_id, junction.tag == tag_id)
        )
        db.commit()
        return bool(result.rowcount)

    # ── Vocabulary ───────────────────────────────────────────────────────────

    def list_names(self, db: Session) -> list[str]:
        return [row.name for row in db.query(Tag.name).order_by(Tag.name.asc()).all()]

    def get(self, name: str, db: Session) -> Tag:
        tag = db.query(Tag).filter(Tag.name == name).first()
        if tag is None:
            raise NotFoundError("Tag not found")
        return tag

    def vote(self, name: str, direction: Direction, delta: Literal[1, -1], db: Session) -> Tag:
        tag = self._votes.adjust(Tag, Tag.name, name, direction, delta, db)
        if tag is None:
            raise NotFoundError("Tag not found")
        return tag

    def delete(self, name: str, db: Session) -> None:
        """Delete a tag; its idea and user links go with it (ON DELETE CASCADE)."""
        deleted = db.query(Tag).filter(Tag.name == name).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            raise NotFoundError("Tag not found")
        logger.info("deleted tag %r", name)
