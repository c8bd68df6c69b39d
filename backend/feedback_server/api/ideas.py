"""Ideas API router."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from feedback_server.db import get_session
from feedback_server.models.idea import Idea
from feedback_server.schemas.feedback import FeedbackDetail
from feedback_server.schemas.idea import IdeaDetail, IdeaWriteRequest
from feedback_server.services.ideas import IdeaService, SortField
from feedback_server.services.storage import ObjectStore, get_object_store

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_idea_detail(idea: Idea, tags: list[str]) -> IdeaDetail:
    return IdeaDetail(
        id=idea.id,
        title=idea.title,
        content=idea.content,
        user_id=idea.user_id,
        files_url=list(idea.files_url or []),
        access=idea.access,
        upvotes=idea.upvotes,
        downvotes=idea.downvotes,
        created_at=idea.created_at,
        tags=tags,
    )


@router.get("")
def list_ideas(
    sort_by: SortField | None = Query(default=None),
    tag: str | None = Query(default=None, alias="filter", description="Only ideas with this tag"),
    access: str | None = Query(default=None, description="private:<user_id> or group:<group_id>"),
    db: Session = Depends(get_session),
) -> list[IdeaDetail]:
    rows = IdeaService().query(db, sort_by=sort_by, tag=tag, access=access)
    return [_to_idea_detail(idea, tags) for idea, tags in rows]


@router.post("", status_code=201)
def create_idea(body: IdeaWriteRequest, db: Session = Depends(get_session)) -> IdeaDetail:
    idea, tags = IdeaService().create(body, db)
    logger.info("created idea %s with %d tags", idea.id, len(tags))
    return _to_idea_detail(idea, tags)


@router.get("/user/{user_id}")
def list_user_ideas(user_id: str, db: Session = Depends(get_session)) -> list[IdeaDetail]:
    return [_to_idea_detail(idea, tags) for idea, tags in IdeaService().list_by_user(user_id, db)]


@router.post("/up/{idea_id}")
def upvote_idea(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().vote(idea_id, "up", 1, db))


@router.delete("/up/{idea_id}")
def remove_upvote(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().vote(idea_id, "up", -1, db))


@router.post("/down/{idea_id}")
def downvote_idea(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().vote(idea_id, "down", 1, db))


@router.delete("/down/{idea_id}")
def remove_downvote(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().vote(idea_id, "down", -1, db))


@router.post("/file/{idea_id}")
def attach_file(
    idea_id: int,
    file: UploadFile = File(...),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_session),
) -> IdeaDetail:
    data = file.file.read()
    try:
        idea, tags = IdeaService().add_file(
            idea_id, file.filename or "", data, file.content_type, store, db
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_idea_detail(idea, tags)


@router.delete("/file/{idea_id}")
def detach_file(
    idea_id: int,
    filename: str = Query(..., min_length=1),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_session),
) -> IdeaDetail:
    try:
        idea, tags = IdeaService().remove_file(idea_id, filename, store, db)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_idea_detail(idea, tags)


@router.get("/{idea_id}")
def get_idea(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().get(idea_id, db))


@router.put("/{idea_id}")
def update_idea(
    idea_id: int, body: IdeaWriteRequest, db: Session = Depends(get_session)
) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().update(idea_id, body, db))


@router.delete("/{idea_id}")
def delete_idea(idea_id: int, db: Session = Depends(get_session)) -> IdeaDetail:
    return _to_idea_detail(*IdeaService().delete(idea_id, db))


@router.get("/{idea_id}/feedbacks")
def list_idea_feedbacks(idea_id: int, db: Session = Depends(get_session)) -> list[FeedbackDetail]:
    return [FeedbackDetail.model_validate(f) for f in IdeaService().feedbacks(idea_id, db)]


@router.post("/{idea_id}/{tag}")
def tag_idea(idea_id: int, tag: str, db: Session = Depends(get_session)) -> Response:
    try:
        IdeaService().add_tag(idea_id, tag, db)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(status_code=200)


@router.delete("/{idea_id}/{tag}")
def untag_idea(idea_id: int, tag: str, db: Session = Depends(get_session)) -> Response:
    IdeaService().remove_tag(idea_id, tag, db)
    return Response(status_code=200)
