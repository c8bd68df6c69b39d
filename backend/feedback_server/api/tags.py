"""Tags API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from feedback_server.db import get_session
from feedback_server.schemas.tag import TagDetail, TagName
from feedback_server.services.tags import TagService

router = APIRouter()


@router.get("")
def list_tags(db: Session = Depends(get_session)) -> list[TagName]:
    return [TagName(name=name) for name in TagService().list_names(db)]


@router.post("/up/{name}")
def upvote_tag(name: str, db: Session = Depends(get_session)) -> Response:
    TagService().vote(name, "up", 1, db)
    return Response(status_code=200)


@router.delete("/up/{name}")
def remove_tag_upvote(name: str, db: Session = Depends(get_session)) -> Response:
    TagService().vote(name, "up", -1, db)
    return Response(status_code=200)


@router.post("/down/{name}")
def downvote_tag(name: str, db: Session = Depends(get_session)) -> Response:
    TagService().vote(name, "down", 1, db)
    return Response(status_code=200)


@router.delete("/down/{name}")
def remove_tag_downvote(name: str, db: Session = Depends(get_session)) -> Response:
    TagService().vote(name, "down", -1, db)
    return Response(status_code=200)


@router.get("/{name}")
def get_tag(name: str, db: Session = Depends(get_session)) -> TagDetail:
    return TagDetail.model_validate(TagService().get(name, db))


@router.delete("/{name}")
def delete_tag(name: str, db: Session = Depends(get_session)) -> Response:
    TagService().delete(name, db)
    return Response(status_code=200)
