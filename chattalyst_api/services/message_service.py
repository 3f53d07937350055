import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import Message
from chattalyst_api.services.extraction import ExtractedContent
from chattalyst_api.services.result import MESSAGE_ERROR, Result

logger = get_logger("message_service")


def timestamp_to_datetime(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def build_upsert_statement(
    wamid: str,
    conversation_id: UUID,
    sender_participant_id: UUID,
    extracted: ExtractedContent,
    sent_at: Optional[datetime] = None,
):
    values = {
        "conversation_id": conversation_id,
        "sender_participant_id": sender_participant_id,
        "content": extracted.content,
        "media_type": extracted.media_type,
        "media_data": extracted.media_data,
        "sent_at": sent_at,
    }
    stmt = insert(Message).values(id=uuid.uuid4(), wamid=wamid, **values)
    return stmt.on_conflict_do_update(
        index_elements=["wamid"],
        set_={**values, "updated_at": func.now()},
    ).returning(Message.id)


def upsert_message(
    db: Session,
    wamid: str,
    conversation_id: UUID,
    sender_participant_id: UUID,
    extracted: ExtractedContent,
    sent_at: Optional[datetime] = None,
) -> Result[UUID]:
    """Store a message keyed by provider id; redelivery overwrites the row in place."""
    if not wamid:
        return Result.failure("Message has no provider id", MESSAGE_ERROR)

    stmt = build_upsert_statement(wamid, conversation_id, sender_participant_id, extracted, sent_at)
    try:
        message_id = db.execute(stmt).scalar_one()
    except SQLAlchemyError as e:
        logger.error(f"Message upsert failed for {wamid}: {e}")
        return Result.failure(f"Error storing message {wamid}: {e}", MESSAGE_ERROR)

    logger.info(f"Stored message {wamid} in conversation {conversation_id}")
    return Result.success(message_id)
