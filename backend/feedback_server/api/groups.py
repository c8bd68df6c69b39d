"""Groups API router."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from feedback_server.db import get_session
from feedback_server.schemas.group import GroupDetail, GroupWriteRequest
from feedback_server.services.groups import GroupService, GroupSortField

router = APIRouter()


@router.get("")
def list_groups(
    sort_by: GroupSortField | None = Query(default=None),
    db: Session = Depends(get_session),
) -> list[GroupDetail]:
    return [GroupDetail.model_validate(g) for g in GroupService().query(db, sort_by=sort_by)]


@router.post("", status_code=201)
def create_group(body: GroupWriteRequest, db: Session = Depends(get_session)) -> GroupDetail:
    return GroupDetail.model_validate(GroupService().create(body, db))


@router.get("/{group_id}")
def get_group(group_id: int, db: Session = Depends(get_session)) -> GroupDetail:
    return GroupDetail.model_validate(GroupService().get(group_id, db))


@router.put("/{group_id}")
def update_group(
    group_id: int, body: GroupWriteRequest, db: Session = Depends(get_session)
) -> GroupDetail:
    return GroupDetail.model_validate(GroupService().update(group_id, body, db))


@router.delete("/{group_id}")
def delete_group(group_id: int, db: Session = Depends(get_session)) -> Response:
    GroupService().delete(group_id, db)
    return Response(status_code=200)


@router.post("/{group_id}/{user_id}")
def add_member(group_id: int, user_id: str, db: Session = Depends(get_session)) -> Response:
    GroupService().add_member(group_id, user_id, db)
    return Response(status_code=200)


@router.delete("/{group_id}/{user_id}")
def remove_member(group_id: int, user_id: str, db: Session = Depends(get_session)) -> Response:
    GroupService().remove_member(group_id, user_id, db)
    return Response(status_code=200)
