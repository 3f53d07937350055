"""Processing of a validated Evolution webhook event.

Flow for ``messages.upsert``: integration config -> customer -> conversation
and sender participant -> message upsert -> agent session pipeline (inbound
text only). Every stage failure comes back as a failed ``Result``; the caller
acknowledges the webhook either way.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chattalyst_api.config import settings
from chattalyst_api.logging_config import get_logger
from chattalyst_api.schemas.webhook import MessageData, WebhookEnvelope
from chattalyst_api.services.agent_pipeline import run_agent_pipeline
from chattalyst_api.services.audit_service import PROCESSED, SKIPPED
from chattalyst_api.services.conversation_service import find_or_create_conversation
from chattalyst_api.services.customer_service import find_or_create_customer
from chattalyst_api.services.extraction import extract_message_content
from chattalyst_api.services.integration_service import get_integration_config
from chattalyst_api.services.message_service import timestamp_to_datetime, upsert_message
from chattalyst_api.services.phone import effective_country_code, is_group_jid, jid_user
from chattalyst_api.services.result import (
    AGENT_ERROR,
    CONFIG_NOT_FOUND,
    INVALID_PAYLOAD,
    MESSAGE_ERROR,
    Result,
)

MESSAGES_UPSERT = "messages.upsert"

Log = Union[logging.Logger, logging.LoggerAdapter]


@dataclass
class EventOutcome:
    status: str  # processed, skipped
    message: str
    agent_status: Optional[str] = None


def normalize_event_name(event: str) -> str:
    """``MESSAGES_UPSERT`` (Evolution v1) and ``messages.upsert`` (v2) are the same event."""
    return (event or "").strip().lower().replace("_", ".")


def process_webhook_event(db: Session, envelope: WebhookEnvelope, log: Optional[Log] = None) -> Result[EventOutcome]:
    log = log or get_logger("webhook_processor")
    if normalize_event_name(envelope.event) != MESSAGES_UPSERT or envelope.data is None:
        log.info(f"Skipping non-message event {envelope.event}")
        return Result.success(EventOutcome(SKIPPED, f"Event {envelope.event} ignored"))
    return handle_message_event(db, envelope.data, envelope.instance, log)


def handle_message_event(db: Session, data: Any, instance: str, log: Log) -> Result[EventOutcome]:
    try:
        message = MessageData.model_validate(data)
    except ValidationError as e:
        log.error("Invalid message data structure", extra={"context": {"error": str(e)}})
        return Result.failure("Invalid message data structure", INVALID_PAYLOAD)

    remote_jid = message.key.remoteJid
    from_me = message.key.fromMe
    if is_group_jid(remote_jid, settings.group_jid_suffix):
        log.info(f"Skipping group chat message from {remote_jid}")
        return Result.success(EventOutcome(SKIPPED, "Group chat message ignored"))

    config = get_integration_config(db, instance)
    if config is None:
        log.error(f"No integration config for instance {instance}")
        return Result.failure(f"No integration config for instance {instance}", CONFIG_NOT_FOUND)

    phone = jid_user(remote_jid)
    extracted = extract_message_content(message.message, message.messageType)
    log.info(
        "Processing message",
        extra={
            "context": {
                "wamid": message.key.id,
                "remote_jid": remote_jid,
                "from_me": from_me,
                "media_type": extracted.media_type,
            }
        },
    )

    try:
        customer = find_or_create_customer(
            db,
            phone,
            message.pushName,
            from_me,
            effective_country_code(config.default_country_code, settings.default_country_code),
        )
        if not customer.ok:
            db.rollback()
            return customer

        identity = find_or_create_conversation(db, phone, config, from_me, customer.value)
        if not identity.ok:
            db.rollback()
            return identity

        stored = upsert_message(
            db,
            message.key.id,
            identity.value.conversation_id,
            identity.value.participant_id,
            extracted,
            timestamp_to_datetime(message.messageTimestamp),
        )
        if not stored.ok:
            db.rollback()
            return stored
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Database error while storing message {message.key.id}: {e}")
        return Result.failure(str(e), MESSAGE_ERROR)

    outcome = EventOutcome(PROCESSED, f"Message {message.key.id} stored")
    agent_text = extracted.agent_text
    if from_me or not agent_text:
        return Result.success(outcome)

    try:
        pipeline = run_agent_pipeline(db, config, remote_jid, agent_text)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Agent session handling failed for {remote_jid}: {e}")
        return Result.failure(f"Message stored but agent session handling failed: {e}", AGENT_ERROR)

    log.info(f"Agent pipeline finished: {pipeline.status}")
    outcome.agent_status = pipeline.status
    return Result.success(outcome)
