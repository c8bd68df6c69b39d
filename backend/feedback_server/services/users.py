"""User service — CRUD and pinned tags."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from feedback_server.models.tag import Tag
from feedback_server.models.user import User
from feedback_server.models.user_tag import user_pinned_tags
from feedback_server.schemas.user import UserCreateRequest, UserUpdateRequest
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.tags import USER_TAGS, TagService, tag_list

UserWithTags = tuple[User, list[str]]


class UserService:
    def __init__(self) -> None:
        self._tags = TagService()

    def _aggregated(self, db: Session) -> Query[tuple[User, list[str]]]:
        return (
            db.query(User, tag_list().label("pinned_tags"))
            .outerjoin(user_pinned_tags, User.id == user_pinned_tags.c.user_id)
            .outerjoin(Tag, Tag.id == user_pinned_tags.c.tag_id)
            .group_by(*User.__table__.columns)
        )

    def query(self, db: Session) -> list[UserWithTags]:
        return [(user, list(tags)) for user, tags in self._aggregated(db).all()]

    def get(self, user_id: str, db: Session) -> UserWithTags:
        row = self._aggregated(db).filter(User.id == user_id).first()
        if row is None:
            raise NotFoundError("User not found")
        user, tags = row
        return user, list(tags)

    def create(self, body: UserCreateRequest, db: Session) -> User:
        user = User(
            id=body.id,
            name=body.name,
            email=body.email,
            role=body.role,
            image_url=body.image_url,
        )
        try:
            db.add(user)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConstraintError(f"User {body.id!r} already exists") from exc
        db.refresh(user)
        return user

    def update(self, user_id: str, body: UserUpdateRequest, db: Session) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.name = body.name
        user.email = body.email
        user.role = body.role
        user.image_url = body.image_url
        db.commit()
        db.refresh(user)
        return user

    def delete(self, user_id: str, db: Session) -> None:
        """Delete a user. Their ideas, feedbacks and pins go with them (ON DELETE CASCADE)."""
        deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            raise NotFoundError("User not found")

    def pin_tag(self, user_id: str, name: str, db: Session) -> None:
        """Pin *name* (created if needed) for the user. Pinning twice is a no-op."""
        if not name.strip():
            raise ValueError("Tag name must not be empty")
        try:
            self._tags.attach(USER_TAGS, user_id, [name], db)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise NotFoundError("User not found") from exc

    def unpin_tag(self, user_id: str, name: str, db: Session) -> None:
        if not self._tags.detach(USER_TAGS, user_id, name, db):
            raise NotFoundError("Either user or tag not found")
