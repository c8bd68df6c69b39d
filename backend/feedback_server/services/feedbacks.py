"""Feedback service — CRUD and votes; keeps ideas_feedbacks in step with Feedback.idea_id."""

from typing import Literal

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feedback_server.models.feedback import Feedback
from feedback_server.models.idea_feedback import idea_feedbacks
from feedback_server.schemas.feedback import FeedbackWriteRequest
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.votes import Direction, VoteCounter


class FeedbackService:
    def __init__(self) -> None:
        self._votes = VoteCounter()

    def query(self, db: Session) -> list[Feedback]:
        return db.query(Feedback).order_by(Feedback.id.asc()).all()

    def get(self, feedback_id: int, db: Session) -> Feedback:
        feedback = db.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError("Feedback not found")
        return feedback

    def list_by_user(self, user_id: str, db: Session) -> list[Feedback]:
        return (
            db.query(Feedback)
            .filter(Feedback.user_id == user_id)
            .order_by(Feedback.created_at.desc())
            .all()
        )

    def create(self, body: FeedbackWriteRequest, db: Session) -> Feedback:
        """Insert the feedback and its ideas_feedbacks row in one transaction."""
        feedback = Feedback(
            idea_id=body.idea_id,
            user_id=body.user_id,
            content=body.content,
            files_url=body.files_url,
            feedback_links=body.feedback_links,
            user_tag=body.user_tag,
        )
        try:
            db.add(feedback)
            db.flush()
            self._link(body.idea_id, feedback.id, db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError("Feedback not created: unknown idea or user") from exc
        db.refresh(feedback)
        return feedback

    def update(self, feedback_id: int, body: FeedbackWriteRequest, db: Session) -> Feedback:
        feedback = self.get(feedback_id, db)
        previous_idea_id = feedback.idea_id
        feedback.idea_id = body.idea_id
        feedback.user_id = body.user_id
        feedback.content = body.content
        feedback.files_url = body.files_url
        feedback.feedback_links = body.feedback_links
        feedback.user_tag = body.user_tag
        try:
            db.flush()
            if previous_idea_id != body.idea_id:
                db.execute(
                    delete(idea_feedbacks).where(
                        idea_feedbacks.c.idea_id == previous_idea_id,
                        idea_feedbacks.c.feedback_id == feedback_id,
                    )
                )
                self._link(body.idea_id, feedback_id, db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError("Feedback not updated: unknown idea or user") from exc
        db.refresh(feedback)
        return feedback

    def delete(self, feedback_id: int, db: Session) -> None:
        """Delete a feedback; its ideas_feedbacks row cascades."""
        deleted = (
            db.query(Feedback).filter(Feedback.id == feedback_id).delete(synchronize_session=False)
        )
        db.commit()
        if not deleted:
            raise NotFoundError("Feedback not found")

    def vote(
        self, feedback_id: int, direction: Direction, delta: Literal[1, -1], db: Session
    ) -> Feedback:
        feedback = self._votes.adjust(Feedback, Feedback.id, feedback_id, direction, delta, db)
        if feedback is None:
            raise NotFoundError("Feedback not found")
        return feedback

    def _link(self, idea_id: int, feedback_id: int, db: Session) -> None:
        db.execute(
            pg_insert(idea_feedbacks)
            .values(idea_id=idea_id, feedback_id=feedback_id)
            .on_conflict_do_nothing()
        )
