"""Idea service — CRUD, tag links, votes and file attachments for ideas."""

import logging
from pathlib import PurePosixPath
from typing import Literal

from sqlalchemy import ARRAY, Text, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from feedback_server.models.feedback import Feedback
from feedback_server.models.idea import Idea
from feedback_server.models.idea_feedback import idea_feedbacks
from feedback_server.models.idea_tag import idea_tags
from feedback_server.models.tag import Tag
from feedback_server.schemas.idea import IdeaWriteRequest
from feedback_server.services.access import PUBLIC, is_restricted_value
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.storage import ObjectStore, object_key
from feedback_server.services.tags import IDEA_TAGS, TagService, tag_list
from feedback_server.services.votes import Direction, VoteCounter

logger = logging.getLogger(__name__)

SortField = Literal["id", "title", "user_id", "access", "upvotes", "downvotes", "created_at"]

# Sort keys end up in ORDER BY, so only these columns are ever accepted.
_SORT_COLUMNS = {
    "id": Idea.id,
    "title": Idea.title,
    "user_id": Idea.user_id,
    "access": Idea.access,
    "upvotes": Idea.upvotes,
    "downvotes": Idea.downvotes,
    "created_at": Idea.created_at,
}

IdeaWithTags = tuple[Idea, list[str]]


class IdeaService:
    def __init__(self) -> None:
        self._tags = TagService()
        self._votes = VoteCounter()

    # ── Reads ────────────────────────────────────────────────────────────────

    def _aggregated(self, db: Session) -> Query[tuple[Idea, list[str]]]:
        """Ideas LEFT JOIN their tags, one row per idea with the tag names as a list."""
        return (
            db.query(Idea, tag_list().label("tags"))
            .outerjoin(idea_tags, Idea.id == idea_tags.c.idea_id)
            .outerjoin(Tag, Tag.id == idea_tags.c.tag_id)
            .group_by(*Idea.__table__.columns)
        )

    def query(
        self,
        db: Session,
        sort_by: SortField | None = None,
        tag: str | None = None,
        access: str | None = None,
    ) -> list[IdeaWithTags]:
        q = self._list_query(db, sort_by=sort_by, tag=tag, access=access)
        return [(idea, list(tags)) for idea, tags in q.all()]

    def _list_query(
        self,
        db: Session,
        sort_by: SortField | None = None,
        tag: str | None = None,
        access: str | None = None,
    ) -> Query[tuple[Idea, list[str]]]:
        """Build the idea listing query.

        *tag* keeps only ideas linked to that tag name (their full tag list is
        still returned). *access* starting with ``private:`` or ``group:`` keeps
        ideas whose access equals it exactly, plus ``public`` ones; the id part
        is not checked, so ``private:`` alone matches only ``public`` rows. Any
        other value filters nothing.
        """
        q = self._aggregated(db)
        if tag:
            tagged = (
                select(idea_tags.c.idea_id)
                .join(Tag, Tag.id == idea_tags.c.tag_id)
                .where(Tag.name == tag)
                # The outer query joins the same tables; keep this one self-contained.
                .correlate(None)
            )
            q = q.filter(Idea.id.in_(tagged))
        if access is not None and is_restricted_value(access):
            q = q.filter(or_(Idea.access == access, Idea.access == str(PUBLIC)))
        if sort_by is not None:
            q = q.order_by(_SORT_COLUMNS[sort_by].asc())
        return q

    def get(self, idea_id: int, db: Session) -> IdeaWithTags:
        row = self._aggregated(db).filter(Idea.id == idea_id).first()
        if row is None:
            raise NotFoundError("Idea not found")
        idea, tags = row
        return idea, list(tags)

    def list_by_user(self, user_id: str, db: Session) -> list[IdeaWithTags]:
        q = self._aggregated(db).filter(Idea.user_id == user_id).order_by(Idea.created_at.desc())
        return [(idea, list(tags)) for idea, tags in q.all()]

    def feedbacks(self, idea_id: int, db: Session) -> list[Feedback]:
        if db.get(Idea, idea_id) is None:
            raise NotFoundError("Idea not found")
        return (
            db.query(Feedback)
            .join(idea_feedbacks, Feedback.id == idea_feedbacks.c.feedback_id)
            .filter(idea_feedbacks.c.idea_id == idea_id)
            .order_by(Feedback.created_at.desc())
            .all()
        )

    # ── Writes ───────────────────────────────────────────────────────────────

    def create(self, body: IdeaWriteRequest, db: Session) -> IdeaWithTags:
        """Insert an idea and link its tags.

        Tags are committed first; the idea and its links are committed together,
        so an unknown user leaves at most some unused tags behind.
        """
        tag_ids = self._tags.ensure(body.tags, db)
        idea = Idea(
            title=body.title,
            content=body.content,
            user_id=body.user_id,
            files_url=body.files_url,
            access=body.access,
        )
        try:
            db.add(idea)
            db.flush()
            self._tags.link(IDEA_TAGS, idea.id, tag_ids.values(), db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError(f"Failed to create idea: unknown user {body.user_id!r}") from exc
        db.refresh(idea)
        return idea, sorted(tag_ids)

    def update(self, idea_id: int, body: IdeaWriteRequest, db: Session) -> IdeaWithTags:
        """Replace the idea's fields and its tag set."""
        tag_ids = self._tags.ensure(body.tags, db)
        idea = db.get(Idea, idea_id)
        if idea is None:
            raise NotFoundError("Idea not found")
        idea.title = body.title
        idea.content = body.content
        idea.user_id = body.user_id
        idea.files_url = body.files_url
        idea.access = body.access
        try:
            db.flush()
            self._tags.relink(IDEA_TAGS, idea.id, tag_ids.values(), db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError(f"Failed to update idea: unknown user {body.user_id!r}") from exc
        return self.get(idea_id, db)

    def delete(self, idea_id: int, db: Session) -> IdeaWithTags:
        """Delete an idea and return it as it was. Tag and feedback links cascade."""
        snapshot = self.get(idea_id, db)
        db.query(Idea).filter(Idea.id == idea_id).delete(synchronize_session=False)
        db.commit()
        return snapshot

    def vote(
        self, idea_id: int, direction: Direction, delta: Literal[1, -1], db: Session
    ) -> IdeaWithTags:
        if self._votes.adjust(Idea, Idea.id, idea_id, direction, delta, db) is None:
            raise NotFoundError("Idea not found")
        return self.get(idea_id, db)

    def add_tag(self, idea_id: int, name: str, db: Session) -> None:
        """Link *name* (created if needed) to the idea. Linking twice is a no-op."""
        if not name.strip():
            raise ValueError("Tag name must not be empty")
        try:
            self._tags.attach(IDEA_TAGS, idea_id, [name], db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise NotFoundError("Idea not found") from exc

    def remove_tag(self, idea_id: int, name: str, db: Session) -> None:
        if not self._tags.detach(IDEA_TAGS, idea_id, name, db):
            raise NotFoundError("Either idea or tag not found")

    # ── Attachments ──────────────────────────────────────────────────────────

    def add_file(
        self,
        idea_id: int,
        filename: str,
        data: bytes,
        content_type: str | None,
        store: ObjectStore,
        db: Session,
    ) -> IdeaWithTags:
        """Upload *data* as ``{idea_id}/{filename}`` and append its URL to files_url.

        The object store and the database are not updated atomically: if the
        append fails the object stays in the bucket.
        """
        key = object_key(idea_id, _safe_filename(filename))
        if db.get(Idea, idea_id) is None:
            raise NotFoundError("Idea not found")
        url = store.upload(key, data, content_type)
        stmt = (
            update(Idea)
            .where(Idea.id == idea_id)
            .values(files_url=func.array_append(Idea.files_url, url, type_=ARRAY(Text)))
            .returning(Idea.id)
        )
        try:
            updated = db.execute(stmt).scalar()
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("stored %s but failed to record it on idea %s", key, idea_id)
            raise
        if updated is None:
            logger.warning("stored %s but idea %s disappeared", key, idea_id)
            raise NotFoundError("Idea not found")
        return self.get(idea_id, db)

    def remove_file(
        self, idea_id: int, filename: str, store: ObjectStore, db: Session
    ) -> IdeaWithTags:
        """Delete ``{idea_id}/{filename}`` and remove every matching URL from files_url."""
        key = object_key(idea_id, _safe_filename(filename))
        if db.get(Idea, idea_id) is None:
            raise NotFoundError("Idea not found")
        store.delete(key)
        stmt = (
            update(Idea)
            .where(Idea.id == idea_id)
            .values(
                files_url=func.array_remove(Idea.files_url, store.url_for(key), type_=ARRAY(Text))
            )
            .returning(Idea.id)
        )
        try:
            updated = db.execute(stmt).scalar()
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("deleted %s but failed to update idea %s", key, idea_id)
            raise
        if updated is None:
            raise NotFoundError("Idea not found")
        return self.get(idea_id, db)


def _safe_filename(filename: str) -> str:
    name = PurePosixPath(filename.replace("\\", "/")).name
    if not name:
        raise ValueError("A file name is required")
    return name
