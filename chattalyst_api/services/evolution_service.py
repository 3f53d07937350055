"""Outbound sends through the Evolution API."""

from typing import Any, Optional

import httpx

from chattalyst_api.config import settings
from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import IntegrationConfig
from chattalyst_api.services.result import DISPATCH_ERROR, Result

logger = get_logger("evolution_service")


def _credentials(config: IntegrationConfig) -> Optional[tuple[str, str, str]]:
    integration = config.integration
    if not integration or not integration.base_url or not integration.api_key or not config.instance_display_name:
        return None
    return integration.base_url.rstrip("/"), integration.api_key, config.instance_display_name


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or "Unknown error"
    if isinstance(data, dict):
        if isinstance(data.get("message"), str):
            return data["message"]
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return str(data)[:200]


def _provider_message_id(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    key = data.get("key") if isinstance(data.get("key"), dict) else {}
    value = key.get("id") or data.get("id") or data.get("wuid")
    return str(value) if value else None


def _post(url: str, api_key: str, body: dict[str, Any]) -> Result[Optional[str]]:
    try:
        with httpx.Client(timeout=settings.outbound_timeout_seconds) as client:
            response = client.post(url, json=body, headers={"apikey": api_key})
    except httpx.HTTPError as e:
        logger.error(f"Evolution API request to {url} failed: {e}")
        return Result.failure(f"Evolution API unreachable: {e}", DISPATCH_ERROR)

    logger.info(f"Evolution API response: status={response.status_code}, url={url}")
    if not response.is_success:
        return Result.failure(
            f"Evolution API error ({response.status_code}): {_error_detail(response)}",
            DISPATCH_ERROR,
        )
    return Result.success(_provider_message_id(response))


def send_text(config: IntegrationConfig, number: str, text: str) -> Result[Optional[str]]:
    """Send a text message; the value is the provider message id when returned."""
    creds = _credentials(config)
    if not creds:
        return Result.failure(f"Integration config {config.id} is missing Evolution credentials", DISPATCH_ERROR)
    base_url, api_key, instance_name = creds
    return _post(f"{base_url}/message/sendText/{instance_name}", api_key, {"number": number, "text": text})


def send_media(
    config: IntegrationConfig,
    number: str,
    media_url: str,
    caption: Optional[str] = None,
) -> Result[Optional[str]]:
    creds = _credentials(config)
    if not creds:
        return Result.failure(f"Integration config {config.id} is missing Evolution credentials", DISPATCH_ERROR)
    base_url, api_key, instance_name = creds
    body = {"number": number, "media": {"url": media_url}, "caption": caption or ""}
    return _post(f"{base_url}/message/sendMedia/{instance_name}", api_key, body)
