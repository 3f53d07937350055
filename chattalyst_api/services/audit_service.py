import uuid
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from chattalyst_api.database import SessionLocal
from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import WebhookEvent

logger = get_logger("audit")

PROCESSED = "processed"
FAILED = "failed"
SKIPPED = "skipped"


def store_webhook_event(
    payload: dict[str, Any],
    *,
    processing_status: str,
    error: Optional[str] = None,
    request_id: Optional[str] = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> bool:
    """Write the raw webhook event to the audit table.

    Runs as a background task after the response is sent, on its own session.
    Never raises: an audit failure is logged and dropped.
    """
    context = {"request_id": request_id, "event": payload.get("event"), "instance": payload.get("instance")}
    db = None
    try:
        db = session_factory()
        db.add(
            WebhookEvent(
                id=uuid.uuid4(),
                event_type=str(payload.get("event")),
                payload=payload,
                processing_status=processing_status,
                source_identifier=payload.get("instance"),
                error=error,
            )
        )
        db.commit()
        logger.info("Stored webhook event", extra={"context": {**context, "status": processing_status}})
        return True
    except Exception as e:
        if db is not None:
            db.rollback()
        logger.error("Failed to store webhook event", extra={"context": {**context, "error": str(e)}})
        return False
    finally:
        if db is not None:
            db.close()
