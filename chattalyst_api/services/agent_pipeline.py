"""Per-message agent session handling and reply dispatch."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import IntegrationConfig
from chattalyst_api.services import agent_client, evolution_service
from chattalyst_api.services.agent_service import load_agent_channel
from chattalyst_api.services.dead_letter_service import record_failed_dispatch
from chattalyst_api.services.phone import jid_user
from chattalyst_api.services.session_service import (
    close_active_sessions,
    close_session,
    create_session,
    get_active_session,
)
from chattalyst_api.services.state_machine import (
    AgentChannelConfig,
    CloseReason,
    SessionAction,
    decide,
    match_command,
)

logger = get_logger("agent_pipeline")

NO_AGENT = "no_agent"
COMMAND_SENT = "command_sent"
SESSION_STOPPED = "session_stopped"
NOT_TRIGGERED = "not_triggered"
REPLY_SENT = "reply_sent"
NO_REPLY = "no_reply"
DISPATCH_FAILED = "dispatch_failed"


@dataclass
class PipelineOutcome:
    status: str
    session_id: Optional[UUID] = None


def _send(
    db: Session,
    config: IntegrationConfig,
    remote_jid: str,
    *,
    stage: str,
    text: Optional[str],
    image: Optional[str] = None,
    session_id: Optional[UUID] = None,
    agent_id: Optional[UUID] = None,
) -> bool:
    number = jid_user(remote_jid)
    if image:
        result = evolution_service.send_media(config, number, image, caption=text)
    else:
        result = evolution_service.send_text(config, number, text)
    if result.ok:
        return True
    record_failed_dispatch(
        db,
        stage=stage,
        contact_identifier=remote_jid,
        integrations_config_id=config.id,
        error=result.error,
        payload={"text": text, "image": image},
        session_id=session_id,
        agent_id=agent_id,
    )
    return False


def _invoke_agent(
    db: Session,
    config: IntegrationConfig,
    channel: AgentChannelConfig,
    remote_jid: str,
    text: str,
    session_id: UUID,
) -> PipelineOutcome:
    result = agent_client.query_agent(channel.agent_id, session_id, remote_jid, text)
    if not result.ok:
        record_failed_dispatch(
            db,
            stage="agent_query",
            contact_identifier=remote_jid,
            integrations_config_id=config.id,
            error=result.error,
            payload={"query": text},
            session_id=session_id,
            agent_id=channel.agent_id,
        )
        return PipelineOutcome(DISPATCH_FAILED, session_id)

    reply = result.value
    if not reply.response and not reply.image:
        logger.info(f"Agent returned no reply for session {session_id}")
        return PipelineOutcome(NO_REPLY, session_id)

    stage = "send_media" if reply.image else "send_text"
    sent = _send(
        db,
        config,
        remote_jid,
        stage=stage,
        text=reply.response,
        image=reply.image,
        session_id=session_id,
        agent_id=channel.agent_id,
    )
    return PipelineOutcome(REPLY_SENT if sent else DISPATCH_FAILED, session_id)


def run_agent_pipeline(
    db: Session,
    config: IntegrationConfig,
    remote_jid: str,
    text: str,
    now: Optional[datetime] = None,
) -> PipelineOutcome:
    """Apply the session state machine to one inbound text and dispatch any reply.

    Session changes are committed before any network call, so a failed
    dispatch never rolls back a session that was started or closed.
    """
    now = now or datetime.now(timezone.utc)
    channel = load_agent_channel(db, config.id)
    if channel is None:
        return PipelineOutcome(NO_AGENT)

    # command keywords never touch sessions
    command_response = match_command(text, channel.commands)
    if command_response:
        sent = _send(db, config, remote_jid, stage="command_reply", text=command_response, agent_id=channel.agent_id)
        return PipelineOutcome(COMMAND_SENT if sent else DISPATCH_FAILED)

    active = get_active_session(db, remote_jid, config.id)
    decision = decide(text, channel, active.created_at if active else None, now)
    logger.info(
        "Agent session decision",
        extra={
            "context": {
                "contact": remote_jid,
                "action": decision.action.value,
                "close_reason": decision.close_reason.value if decision.close_reason else None,
                "active_session": str(active.id) if active else None,
            }
        },
    )

    if decision.action == SessionAction.STOP:
        close_active_sessions(db, remote_jid, config.id, CloseReason.STOP_KEYWORD, now)
        db.commit()
        return PipelineOutcome(SESSION_STOPPED, active.id if active else None)

    if decision.close_reason == CloseReason.TIMEOUT and active is not None:
        close_session(active, CloseReason.TIMEOUT, now)
        db.flush()
        active = None

    if decision.action == SessionAction.IGNORE:
        db.commit()
        return PipelineOutcome(NOT_TRIGGERED)

    if decision.create_session or active is None:
        session = create_session(db, channel.agent_id, remote_jid, config.id, now)
    else:
        session = active
        session.last_interaction_timestamp = now
    session_id = session.id
    db.commit()

    return _invoke_agent(db, config, channel, remote_jid, text, session_id)
