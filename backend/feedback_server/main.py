"""FastAPI application entry point."""

import logging
import os

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")

# Apply the same format to Uvicorn's loggers so they also show timestamps.
for _uvicorn_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    _log = logging.getLogger(_uvicorn_logger)
    _log.handlers.clear()
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    _log.addHandler(_handler)
    _log.propagate = False

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from feedback_server.db import create_tables
from feedback_server.schemas.error import ErrorResponse
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.storage import ObjectStoreError

logger = logging.getLogger(__name__)

app = FastAPI(title="Feedback Server", version="1.0.0", description="Feedback project API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",")],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup() -> None:
    create_tables()


def _error(status_code: int, name: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(name=name, message=message).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return _error(400, "ValidationError", details or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, "HTTPException", str(exc.detail))


@app.exception_handler(NotFoundError)
async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, "NotFoundError", str(exc))


@app.exception_handler(ConstraintError)
async def _constraint_handler(request: Request, exc: ConstraintError) -> JSONResponse:
    return _error(400, "ConstraintError", str(exc))


@app.exception_handler(IntegrityError)
async def _integrity_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    return _error(400, "ConstraintError", str(exc.orig))


@app.exception_handler(ObjectStoreError)
async def _object_store_handler(request: Request, exc: ObjectStoreError) -> JSONResponse:
    logger.error("object store failure on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, "ObjectStoreError", str(exc))


@app.exception_handler(Exception)
async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _error(500, type(exc).__name__, str(exc))


@app.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return "OK"


@app.get("/", response_class=PlainTextResponse)
def hello(name: str | None = Query(default=None)) -> str:
    return f"Hello {name or 'Feedback Server'}!"


# Import and register routers after app is defined to avoid circular imports.
from feedback_server.api import feedbacks, groups, ideas, tags, users  # noqa: E402

app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(users.pin_router, prefix="/user", tags=["users"])
app.include_router(tags.router, prefix="/tags", tags=["tags"])
app.include_router(ideas.router, prefix="/ideas", tags=["ideas"])
app.include_router(groups.router, prefix="/groups", tags=["groups"])
app.include_router(feedbacks.router, prefix="/feedbacks", tags=["feedbacks"])
