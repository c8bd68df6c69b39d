"""Users API routers: ``/users`` for CRUD, ``/user`` for pinned tags."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from feedback_server.db import get_session
from feedback_server.models.user import User
from feedback_server.schemas.user import UserCreateRequest, UserDetail, UserUpdateRequest
from feedback_server.services.users import UserService

router = APIRouter()
pin_router = APIRouter()


def _to_user_detail(user: User, pinned_tags: list[str]) -> UserDetail:
    return UserDetail(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        image_url=user.image_url,
        pinned_tags=pinned_tags,
    )


@router.get("")
def list_users(db: Session = Depends(get_session)) -> list[UserDetail]:
    return [_to_user_detail(user, tags) for user, tags in UserService().query(db)]


@router.post("", status_code=201)
def create_user(body: UserCreateRequest, db: Session = Depends(get_session)) -> UserDetail:
    return _to_user_detail(UserService().create(body, db), [])


@router.get("/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_session)) -> UserDetail:
    return _to_user_detail(*UserService().get(user_id, db))


@router.put("/{user_id}")
def update_user(
    user_id: str, body: UserUpdateRequest, db: Session = Depends(get_session)
) -> UserDetail:
    svc = UserService()
    svc.update(user_id, body, db)
    return _to_user_detail(*svc.get(user_id, db))


@router.delete("/{user_id}")
def delete_user(user_id: str, db: Session = Depends(get_session)) -> Response:
    UserService().delete(user_id, db)
    return Response(status_code=200)


@pin_router.post("/{user_id}/{tag}")
def pin_tag(user_id: str, tag: str, db: Session = Depends(get_session)) -> Response:
    try:
        UserService().pin_tag(user_id, tag, db)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(status_code=200)


@pin_router.delete("/{user_id}/{tag}")
def unpin_tag(user_id: str, tag: str, db: Session = Depends(get_session)) -> Response:
    UserService().unpin_tag(user_id, tag, db)
    return Response(status_code=200)
