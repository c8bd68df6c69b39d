"""Group service — CRUD and membership."""

from typing import Literal

from sqlalchemy import ARRAY, ColumnElement, Text, func, update
from sqlalchemy.orm import Session

from feedback_server.models.group import Group
from feedback_server.schemas.group import GroupWriteRequest
from feedback_server.services.errors import NotFoundError

GroupSortField = Literal["id", "title", "likes"]

_SORT_COLUMNS = {
    "id": Group.id.asc(),
    "title": Group.title.asc(),
    "likes": Group.likes.asc(),
}


class GroupService:
    def query(self, db: Session, sort_by: GroupSortField | None = None) -> list[Group]:
        q = db.query(Group)
        if sort_by is not None:
            q = q.order_by(_SORT_COLUMNS[sort_by])
        return q.all()

    def get(self, group_id: int, db: Session) -> Group:
        group = db.get(Group, group_id)
        if group is None:
            raise NotFoundError("Group not found")
        return group

    def create(self, body: GroupWriteRequest, db: Session) -> Group:
        group = Group(
            title=body.title,
            description=body.description,
            user_ids=body.user_ids,
            likes=body.likes,
        )
        db.add(group)
        db.commit()
        db.refresh(group)
        return group

    def update(self, group_id: int, body: GroupWriteRequest, db: Session) -> Group:
        group = self.get(group_id, db)
        group.title = body.title
        group.description = body.description
        group.user_ids = body.user_ids
        group.likes = body.likes
        db.commit()
        db.refresh(group)
        return group

    def delete(self, group_id: int, db: Session) -> None:
        deleted = db.query(Group).filter(Group.id == group_id).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            raise NotFoundError("Group not found")

    def add_member(self, group_id: int, user_id: str, db: Session) -> None:
        """Append *user_id* to the member list. Not checked against users; may duplicate."""
        members = func.array_append(Group.user_ids, user_id, type_=ARRAY(Text))
        self._set_members(group_id, members, db)

    def remove_member(self, group_id: int, user_id: str, db: Session) -> None:
        """Remove every occurrence of *user_id* from the member list."""
        members = func.array_remove(Group.user_ids, user_id, type_=ARRAY(Text))
        self._set_members(group_id, members, db)

    def _set_members(self, group_id: int, members: ColumnElement[list[str]], db: Session) -> None:
        stmt = (
            update(Group)
            .where(Group.id == group_id)
            .values(user_ids=members)
            .returning(Group.id)
            .execution_options(synchronize_session=False)
        )
        updated = db.execute(stmt).scalar()
        db.commit()
        if updated is None:
            raise NotFoundError("Group not found")
