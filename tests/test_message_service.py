from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from chattalyst_api.services.extraction import ExtractedContent
from chattalyst_api.services.message_service import build_upsert_statement, timestamp_to_datetime, upsert_message


class TestTimestamp:
    def test_unix_seconds(self):
        assert timestamp_to_datetime(1714564800) == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_missing(self):
        assert timestamp_to_datetime(None) is None


class TestUpsertStatement:
    def test_conflicts_on_wamid(self):
        stmt = build_upsert_statement("ABC123", uuid4(), uuid4(), ExtractedContent(content="hi"))

        sql = str(stmt.compile(dialect=postgresql.dialect()))

        assert "ON CONFLICT (wamid) DO UPDATE SET" in sql
        assert "RETURNING messages.id" in sql
        assert "updated_at" in sql

    def test_redelivery_overwrites_content_columns(self):
        stmt = build_upsert_statement(
            "ABC123",
            uuid4(),
            uuid4(),
            ExtractedContent(content="edited", media_type="image", media_data={"url": "https://cdn/x.jpg"}),
        )

        sql = str(stmt.compile(dialect=postgresql.dialect()))
        set_clause = sql.split("DO UPDATE SET", 1)[1]

        for column in ("content", "media_type", "media_data", "sent_at", "updated_at"):
            assert f"{column} = " in set_clause
        assert "wamid = " not in set_clause


class TestUpsertMessage:
    def test_returns_row_id(self, db_session):
        message_id = uuid4()
        db_session.execute.return_value.scalar_one.return_value = message_id

        result = upsert_message(db_session, "ABC123", uuid4(), uuid4(), ExtractedContent(content="hi"))

        assert result.ok is True
        assert result.value == message_id
        db_session.execute.assert_called_once()

    def test_missing_wamid(self, db_session):
        result = upsert_message(db_session, "", uuid4(), uuid4(), ExtractedContent(content="hi"))

        assert result.ok is False
        assert result.error_code == "message_error"
        db_session.execute.assert_not_called()

    def test_database_error(self, db_session):
        db_session.execute.side_effect = OperationalError("INSERT", {}, Exception("deadlock"))

        result = upsert_message(db_session, "ABC123", uuid4(), uuid4(), ExtractedContent(content="hi"))

        assert result.ok is False
        assert result.error_code == "message_error"
        assert "ABC123" in result.error
