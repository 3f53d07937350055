from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from uuid import uuid4

import httpx

from chattalyst_api.services.evolution_service import send_media, send_text


def mock_http(mock_client_cls, response=None, error=None):
    client = MagicMock()
    if error is not None:
        client.post.side_effect = error
    else:
        client.post.return_value = response
    mock_client_cls.return_value.__enter__.return_value = client
    return client


class TestSendText:
    @patch("chattalyst_api.services.evolution_service.httpx.Client")
    def test_posts_to_instance(self, mock_client_cls, integration_config):
        client = mock_http(mock_client_cls, httpx.Response(201, json={"key": {"id": "3EB0ABC"}}))

        result = send_text(integration_config, "60123456789", "Hello")

        assert result.ok is True
        assert result.value == "3EB0ABC"
        client.post.assert_called_once_with(
            "https://evo.example.com/message/sendText/chattalyst-main",
            json={"number": "60123456789", "text": "Hello"},
            headers={"apikey": "evo-key"},
        )

    @patch("chattalyst_api.services.evolution_service.httpx.Client")
    def test_error_message_from_body(self, mock_client_cls, integration_config):
        mock_http(mock_client_cls, httpx.Response(400, json={"error": {"message": "number not on WhatsApp"}}))

        result = send_text(integration_config, "60123456789", "Hello")

        assert result.ok is False
        assert result.error_code == "dispatch_error"
        assert "number not on WhatsApp" in result.error

    @patch("chattalyst_api.services.evolution_service.httpx.Client")
    def test_transport_error(self, mock_client_cls, integration_config):
        mock_http(mock_client_cls, error=httpx.ConnectError("refused"))

        result = send_text(integration_config, "60123456789", "Hello")

        assert result.ok is False
        assert "unreachable" in result.error

    def test_missing_credentials(self):
        config = SimpleNamespace(
            id=uuid4(),
            instance_display_name="main",
            integration=SimpleNamespace(base_url=None, api_key="k"),
        )

        result = send_text(config, "60123456789", "Hello")

        assert result.ok is False
        assert "credentials" in result.error


class TestSendMedia:
    @patch("chattalyst_api.services.evolution_service.httpx.Client")
    def test_posts_media_with_caption(self, mock_client_cls, integration_config):
        client = mock_http(mock_client_cls, httpx.Response(200, json={"id": "MEDIA1"}))

        result = send_media(integration_config, "60123456789", "https://cdn.example.com/a.png", caption="Menu")

        assert result.value == "MEDIA1"
        url = client.post.call_args.args[0]
        assert url == "https://evo.example.com/message/sendMedia/chattalyst-main"
        assert client.post.call_args.kwargs["json"] == {
            "number": "60123456789",
            "media": {"url": "https://cdn.example.com/a.png"},
            "caption": "Menu",
        }

    @patch("chattalyst_api.services.evolution_service.httpx.Client")
    def test_success_without_message_id(self, mock_client_cls, integration_config):
        mock_http(mock_client_cls, httpx.Response(200, text="ok"))

        result = send_media(integration_config, "60123456789", "https://cdn.example.com/a.png")

        assert result.ok is True
        assert result.value is None
