"""Unit tests for IdeaService."""

from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feedback_server.models.idea import Idea
from feedback_server.schemas.idea import IdeaWriteRequest
from feedback_server.services.errors import ConstraintError, NotFoundError
from feedback_server.services.ideas import IdeaService
from feedback_server.services.storage import ObjectStore
from feedback_server.services.tags import IDEA_TAGS

PgSql = Callable[[object], str]


def _listing(**kwargs: str) -> object:
    return IdeaService()._list_query(Session(), **kwargs).statement


def _params(stmt: object) -> list[object]:
    return list(stmt.compile(dialect=postgresql.dialect()).params.values())


def _body(**overrides: object) -> IdeaWriteRequest:
    fields: dict[str, object] = {"title": "Idea", "content": "text", "user_id": "u1"}
    fields.update(overrides)
    return IdeaWriteRequest(**fields)


class TestIdeaListing:
    def test_left_joins_tags_and_groups_per_idea(self, pg_sql: PgSql) -> None:
        sql = pg_sql(_listing())

        assert "LEFT OUTER JOIN ideas_tags ON ideas.id = ideas_tags.idea_id" in sql
        assert "LEFT OUTER JOIN tags ON tags.id = ideas_tags.tag_id" in sql
        assert "GROUP BY ideas.id" in sql
        assert "ORDER BY" not in sql.split("GROUP BY")[1]

    def test_tag_filter_uses_subquery_so_full_tag_list_is_kept(self, pg_sql: PgSql) -> None:
        stmt = _listing(tag="python")
        sql = pg_sql(stmt)

        assert "ideas.id IN (SELECT ideas_tags.idea_id" in sql
        assert "python" in _params(stmt)

    def test_restricted_access_also_admits_public(self, pg_sql: PgSql) -> None:
        stmt = _listing(access="private:42")

        assert "ideas.access = " in pg_sql(stmt)
        params = _params(stmt)
        assert "private:42" in params
        assert "public" in params

    def test_group_access_filter(self) -> None:
        params = _params(_listing(access="group:7"))

        assert "group:7" in params
        assert "public" in params

    def test_empty_private_id_still_filters_to_public(self, pg_sql: PgSql) -> None:
        stmt = _listing(access="private:")

        assert "ideas.access = " in pg_sql(stmt)
        params = _params(stmt)
        assert "private:" in params
        assert "public" in params

    @pytest.mark.parametrize("access", ["public", "garbage", ""])
    def test_unrestricted_or_unknown_access_filters_nothing(
        self, pg_sql: PgSql, access: str
    ) -> None:
        assert "ideas.access = " not in pg_sql(_listing(access=access))

    def test_sort_by_allow_listed_column(self, pg_sql: PgSql) -> None:
        assert "ORDER BY ideas.upvotes ASC" in pg_sql(_listing(sort_by="upvotes"))

    def test_sort_key_outside_allow_list_is_rejected(self) -> None:
        with pytest.raises(KeyError):
            IdeaService()._list_query(Session(), sort_by="content; DROP TABLE ideas")  # type: ignore[arg-type]


class TestIdeaServiceCreate:
    def test_links_tags_and_returns_them_sorted(self) -> None:
        db = MagicMock()
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.ensure.return_value = {"zeta": 2, "alpha": 1}

        idea, tags = svc.create(_body(tags=["zeta", "alpha"]), db)

        assert tags == ["alpha", "zeta"]
        assert isinstance(idea, Idea)
        assert idea.title == "Idea"
        db.add.assert_called_once_with(idea)
        link_args = svc._tags.link.call_args.args
        assert link_args[0] is IDEA_TAGS
        assert list(link_args[2]) == [2, 1]
        db.commit.assert_called_once()

    def test_tags_are_ensured_before_the_idea_is_added(self) -> None:
        db = MagicMock()
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.ensure.return_value = {}
        order = MagicMock()
        order.attach_mock(svc._tags.ensure, "ensure")
        order.attach_mock(db.add, "add")

        svc.create(_body(), db)

        assert [c[0] for c in order.mock_calls] == ["ensure", "add"]

    def test_unknown_user_raises_constraint_error(self) -> None:
        db = MagicMock()
        db.flush.side_effect = IntegrityError("INSERT", {}, Exception("fk violation"))
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.ensure.return_value = {}

        with pytest.raises(ConstraintError, match="unknown user"):
            svc.create(_body(user_id="ghost"), db)
        db.rollback.assert_called_once()
        db.commit.assert_not_called()


class TestIdeaServiceUpdateDelete:
    def test_update_missing_idea_raises_not_found(self) -> None:
        db = MagicMock()
        db.get.return_value = None
        svc = IdeaService()
        svc._tags = MagicMock()

        with pytest.raises(NotFoundError):
            svc.update(1, _body(), db)

    def test_update_replaces_tag_set(self) -> None:
        db = MagicMock()
        existing = Idea(id=4, title="old", content="", user_id="u1", files_url=[], access="public")
        db.get.return_value = existing
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.ensure.return_value = {"b": 2}

        with patch.object(IdeaService, "get", return_value=(existing, ["b"])):
            result = svc.update(4, _body(title="new", tags=["b"]), db)

        assert result == (existing, ["b"])
        assert existing.title == "new"
        relink_args = svc._tags.relink.call_args.args
        assert relink_args[:2] == (IDEA_TAGS, 4)
        assert list(relink_args[2]) == [2]

    def test_delete_returns_snapshot(self) -> None:
        db = MagicMock()
        snapshot = (Idea(id=4), ["x"])

        with patch.object(IdeaService, "get", return_value=snapshot):
            assert IdeaService().delete(4, db) == snapshot
        db.commit.assert_called_once()

    def test_delete_missing_idea_raises_not_found(self) -> None:
        with patch.object(IdeaService, "get", side_effect=NotFoundError("Idea not found")):
            with pytest.raises(NotFoundError):
                IdeaService().delete(4, MagicMock())


class TestIdeaServiceTagsAndVotes:
    def test_vote_on_missing_idea_raises_not_found(self) -> None:
        svc = IdeaService()
        svc._votes = MagicMock()
        svc._votes.adjust.return_value = None

        with pytest.raises(NotFoundError):
            svc.vote(9, "up", 1, MagicMock())

    def test_add_tag_rejects_empty_name(self) -> None:
        with pytest.raises(ValueError):
            IdeaService().add_tag(1, "  ", MagicMock())

    def test_add_tag_to_missing_idea_raises_not_found(self) -> None:
        db = MagicMock()
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.attach.side_effect = IntegrityError("INSERT", {}, Exception("fk violation"))

        with pytest.raises(NotFoundError):
            svc.add_tag(99, "python", db)
        db.rollback.assert_called_once()

    def test_remove_absent_tag_raises_not_found(self) -> None:
        svc = IdeaService()
        svc._tags = MagicMock()
        svc._tags.detach.return_value = False

        with pytest.raises(NotFoundError, match="Either idea or tag not found"):
            svc.remove_tag(1, "nope", MagicMock())


class TestIdeaServiceFiles:
    def _db_with_idea(self) -> MagicMock:
        db = MagicMock()
        db.get.return_value = Idea(id=5)
        db.execute.return_value.scalar.return_value = 5
        return db

    def test_missing_idea_is_rejected_before_upload(self, mock_store: MagicMock) -> None:
        db = MagicMock()
        db.get.return_value = None

        with pytest.raises(NotFoundError):
            IdeaService().add_file(5, "a.png", b"data", "image/png", mock_store, db)
        mock_store.upload.assert_not_called()

    def test_uploads_under_idea_key_and_appends_url(
        self, mock_store: MagicMock, pg_sql: PgSql
    ) -> None:
        db = self._db_with_idea()

        with patch.object(IdeaService, "get", return_value=(Idea(id=5), [])):
            IdeaService().add_file(5, "a.png", b"data", "image/png", mock_store, db)

        mock_store.upload.assert_called_once_with("5/a.png", b"data", "image/png")
        stmt = db.execute.call_args.args[0]
        sql = pg_sql(stmt)
        assert sql.startswith("UPDATE ideas SET files_url=array_append(ideas.files_url, ")
        assert "https://cdn.example.com/5/a.png" in _params(stmt)
        db.commit.assert_called_once()

    def test_directory_parts_are_stripped_from_filename(self, mock_store: MagicMock) -> None:
        db = self._db_with_idea()

        with patch.object(IdeaService, "get", return_value=(Idea(id=5), [])):
            IdeaService().add_file(5, "../../etc/a.png", b"data", None, mock_store, db)

        assert mock_store.upload.call_args.args[0] == "5/a.png"

    def test_empty_filename_is_rejected(self, mock_store: MagicMock) -> None:
        with pytest.raises(ValueError):
            IdeaService().add_file(5, "", b"data", None, mock_store, self._db_with_idea())
        mock_store.upload.assert_not_called()

    def test_failed_append_rolls_back_and_reraises(self, mock_store: MagicMock) -> None:
        db = self._db_with_idea()
        db.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            IdeaService().add_file(5, "a.png", b"data", None, mock_store, db)
        db.rollback.assert_called_once()

    def test_remove_deletes_object_and_url(self, mock_store: MagicMock, pg_sql: PgSql) -> None:
        db = self._db_with_idea()

        with patch.object(IdeaService, "get", return_value=(Idea(id=5), [])):
            IdeaService().remove_file(5, "a.png", mock_store, db)

        mock_store.delete.assert_called_once_with("5/a.png")
        stmt = db.execute.call_args.args[0]
        assert "array_remove(ideas.files_url, " in pg_sql(stmt)
        assert "https://cdn.example.com/5/a.png" in _params(stmt)

    def test_remove_clears_url_when_object_is_already_gone(self, pg_sql: PgSql) -> None:
        # An earlier removal may have deleted the object but failed to update the row.
        store = ObjectStore(bucket="feedback-files", public_base_url="https://cdn.example.com")
        store._service = MagicMock()
        store._service.objects.return_value.delete.return_value.execute.side_effect = HttpError(
            MagicMock(status=404, reason="Not Found"), b"No such object"
        )
        db = self._db_with_idea()

        with patch.object(IdeaService, "get", return_value=(Idea(id=5), [])):
            IdeaService().remove_file(5, "a.png", store, db)

        stmt = db.execute.call_args.args[0]
        assert "array_remove(ideas.files_url, " in pg_sql(stmt)
        assert "https://cdn.example.com/5/a.png" in _params(stmt)
        db.commit.assert_called_once()
