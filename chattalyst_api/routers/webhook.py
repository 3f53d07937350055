import json
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from chattalyst_api.database import get_db
from chattalyst_api.logging_config import request_logger
from chattalyst_api.schemas.webhook import WebhookEnvelope, WebhookResponse
from chattalyst_api.services.audit_service import FAILED, store_webhook_event
from chattalyst_api.services.result import Result
from chattalyst_api.services.webhook_processor import EventOutcome, process_webhook_event

router = APIRouter(tags=["webhook"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class EnvelopeError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=CORS_HEADERS)


async def _parse_envelope(request: Request) -> tuple[dict[str, Any], WebhookEnvelope]:
    raw = await request.body()
    try:
        payload = json.loads(raw.decode("utf-8")) if raw and raw.strip() else None
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise EnvelopeError("Invalid JSON payload") from exc

    if not isinstance(payload, dict):
        raise EnvelopeError("Invalid JSON payload")

    try:
        envelope = WebhookEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise EnvelopeError("Missing required fields: event or instance") from exc
    return payload, envelope


def _build_response(result: Result[EventOutcome]) -> WebhookResponse:
    if result.ok:
        return WebhookResponse(success=True, processed=True, message=result.value.message)
    return WebhookResponse(success=True, processed=False, error=result.describe())


@router.options("/")
@router.options("/whatsapp-webhook")
async def webhook_preflight() -> Response:
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/", response_model=WebhookResponse, response_model_exclude_none=True)
@router.post("/whatsapp-webhook", response_model=WebhookResponse, response_model_exclude_none=True)
async def handle_webhook(request: Request, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """Evolution API webhook.

    Malformed envelopes get a 400. Anything that goes wrong after that is
    reported in the body of a 200, because Evolution re-delivers on any
    other status.
    """
    request_id = str(uuid4())
    log = request_logger("webhook", request_id)

    try:
        payload, envelope = await _parse_envelope(request)
    except EnvelopeError as exc:
        log.warning(f"Rejected webhook envelope: {exc.message}")
        return _error_response(exc.message, exc.status_code)

    log = request_logger("webhook", request_id, event=envelope.event, instance=envelope.instance)
    log.info("Webhook received")

    try:
        result = process_webhook_event(db, envelope, log)
    except Exception as exc:
        db.rollback()
        log.error(f"Unhandled webhook processing error: {exc}", exc_info=True)
        result = Result.failure(str(exc), "unhandled_error")

    processing_status = result.value.status if result.ok else FAILED
    background_tasks.add_task(
        store_webhook_event,
        payload,
        processing_status=processing_status,
        error=None if result.ok else result.describe(),
        request_id=request_id,
    )

    response = _build_response(result)
    log.info(
        "Webhook processing completed",
        extra={"context": {"processed": response.processed, "error": response.error}},
    )
    return JSONResponse(content=response.model_dump(exclude_none=True), headers=CORS_HEADERS)
