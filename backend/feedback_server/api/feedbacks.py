"""Feedbacks API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from feedback_server.db import get_session
from feedback_server.schemas.feedback import FeedbackDetail, FeedbackWriteRequest
from feedback_server.services.feedbacks import FeedbackService

router = APIRouter()


@router.get("")
def list_feedbacks(db: Session = Depends(get_session)) -> list[FeedbackDetail]:
    return [FeedbackDetail.model_validate(f) for f in FeedbackService().query(db)]


@router.post("", status_code=201)
def create_feedback(
    body: FeedbackWriteRequest, db: Session = Depends(get_session)
) -> FeedbackDetail:
    return FeedbackDetail.model_validate(FeedbackService().create(body, db))


@router.get("/user/{user_id}")
def list_user_feedbacks(user_id: str, db: Session = Depends(get_session)) -> list[FeedbackDetail]:
    return [FeedbackDetail.model_validate(f) for f in FeedbackService().list_by_user(user_id, db)]


# Vote endpoints answer with an empty body.


@router.post("/up/{feedback_id}")
def upvote_feedback(feedback_id: int, db: Session = Depends(get_session)) -> Response:
    FeedbackService().vote(feedback_id, "up", 1, db)
    return Response(status_code=200)


@router.delete("/up/{feedback_id}")
def remove_feedback_upvote(feedback_id: int, db: Session = Depends(get_session)) -> Response:
    FeedbackService().vote(feedback_id, "up", -1, db)
    return Response(status_code=200)


@router.post("/down/{feedback_id}")
def downvote_feedback(feedback_id: int, db: Session = Depends(get_session)) -> Response:
    FeedbackService().vote(feedback_id, "down", 1, db)
    return Response(status_code=200)


@router.delete("/down/{feedback_id}")
def remove_feedback_downvote(feedback_id: int, db: Session = Depends(get_session)) -> Response:
    FeedbackService().vote(feedback_id, "down", -1, db)
    return Response(status_code=200)


@router.get("/{feedback_id}")
def get_feedback(feedback_id: int, db: Session = Depends(get_session)) -> FeedbackDetail:
    return FeedbackDetail.model_validate(FeedbackService().get(feedback_id, db))


@router.put("/{feedback_id}")
def update_feedback(
    feedback_id: int, body: FeedbackWriteRequest, db: Session = Depends(get_session)
) -> FeedbackDetail:
    return FeedbackDetail.model_validate(FeedbackService().update(feedback_id, body, db))


@router.delete("/{feedback_id}")
def delete_feedback(feedback_id: int, db: Session = Depends(get_session)) -> Response:
    FeedbackService().delete(feedback_id, db)
    return Response(status_code=200)
