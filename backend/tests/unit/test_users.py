"""Unit tests for UserService."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feedback_server.schemas.user import UserCreateRequest, UserUpdateRequest
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.tags import USER_TAGS
from feedback_server.services.users import UserService

_FIELDS = {"name": "Ann", "email": "ann@feedback.io", "role": "admin", "image_url": ""}


class TestUserService:
    def test_listing_aggregates_pinned_tags(self, pg_sql: Callable[[object], str]) -> None:
        sql = pg_sql(UserService()._aggregated(Session()).statement)

        assert "AS pinned_tags" in sql
        assert "LEFT OUTER JOIN users_pinned_tags ON users.id = users_pinned_tags.user_id" in sql
        assert "GROUP BY users.id" in sql

    def test_duplicate_id_raises_constraint_error(self) -> None:
        db = MagicMock()
        db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

        with pytest.raises(ConstraintError, match="already exists"):
            UserService().create(UserCreateRequest(id="u1", **_FIELDS), db)
        db.rollback.assert_called_once()

    def test_update_missing_user_raises_not_found(self) -> None:
        db = MagicMock()
        db.get.return_value = None

        with pytest.raises(NotFoundError):
            UserService().update("ghost", UserUpdateRequest(**_FIELDS), db)

    def test_pin_tag_goes_through_the_normalizer(self) -> None:
        db = MagicMock()
        svc = UserService()
        svc._tags = MagicMock()

        svc.pin_tag("u1", "python", db)

        svc._tags.attach.assert_called_once_with(USER_TAGS, "u1", ["python"], db)
        db.commit.assert_called_once()

    def test_pin_tag_for_unknown_user_raises_not_found(self) -> None:
        db = MagicMock()
        svc = UserService()
        svc._tags = MagicMock()
        svc._tags.attach.side_effect = IntegrityError("INSERT", {}, Exception("fk violation"))

        with pytest.raises(NotFoundError, match="User not found"):
            svc.pin_tag("ghost", "python", db)
        db.rollback.assert_called_once()

    def test_pin_empty_tag_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            UserService().pin_tag("u1", " ", MagicMock())

    def test_unpin_absent_tag_raises_not_found(self) -> None:
        svc = UserService()
        svc._tags = MagicMock()
        svc._tags.detach.return_value = False

        with pytest.raises(NotFoundError, match="Either user or tag not found"):
            svc.unpin_tag("u1", "python", MagicMock())
