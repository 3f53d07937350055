from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from chattalyst_api.database import get_db
from chattalyst_api.main import app
from chattalyst_api.services.result import Result


@pytest.fixture
def db():
    session = MagicMock()
    app.dependency_overrides[get_db] = lambda: session
    yield session
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    return TestClient(app)


class TestEndAgentSession:
    def test_requires_identifier(self, client):
        response = client.post("/end-agent-session", json={})

        assert response.status_code == 400

    def test_invalid_uuid(self, client):
        response = client.post("/end-agent-session", json={"agentId": "not-a-uuid"})

        assert response.status_code == 422

    @patch("chattalyst_api.routers.sessions.end_session")
    def test_closes_session(self, mock_end, client, db):
        session_id = uuid4()
        mock_end.return_value = Result.success(session_id)

        response = client.post("/end-agent-session", json={"session_id": str(session_id)})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": f"Session {session_id} closed successfully."}
        assert mock_end.call_args.kwargs["session_id"] == session_id
        db.commit.assert_called_once()

    @patch("chattalyst_api.routers.sessions.end_session")
    def test_nothing_to_close(self, mock_end, client, db):
        mock_end.return_value = Result.success(None)

        response = client.post("/end-agent-session", json={"agentId": str(uuid4())})

        assert response.json() == {"success": True, "message": "No active session found to end."}
        db.commit.assert_not_called()
