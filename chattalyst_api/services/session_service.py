import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import AgentSession
from chattalyst_api.services.result import AGENT_ERROR, Result
from chattalyst_api.services.state_machine import CloseReason, SessionState, transition

logger = get_logger("session_service")


def get_active_session(db: Session, contact_identifier: str, integrations_config_id: UUID) -> Optional[AgentSession]:
    return (
        db.query(AgentSession)
        .filter(
            AgentSession.contact_identifier == contact_identifier,
            AgentSession.integrations_config_id == integrations_config_id,
            AgentSession.status == SessionState.ACTIVE.value,
        )
        .order_by(AgentSession.created_at.desc())
        .first()
    )


def close_session(session: AgentSession, reason: CloseReason, now: Optional[datetime] = None) -> None:
    transition(SessionState(session.status), SessionState.CLOSED)
    session.status = SessionState.CLOSED.value
    session.ended_at = now or datetime.now(timezone.utc)
    logger.info(f"Closed agent session {session.id} ({reason.value})")


def close_active_sessions(
    db: Session,
    contact_identifier: str,
    integrations_config_id: UUID,
    reason: CloseReason,
    now: Optional[datetime] = None,
) -> int:
    """Close every active session for the contact. Returns how many were closed."""
    sessions = (
        db.query(AgentSession)
        .filter(
            AgentSession.contact_identifier == contact_identifier,
            AgentSession.integrations_config_id == integrations_config_id,
            AgentSession.status == SessionState.ACTIVE.value,
        )
        .all()
    )
    for session in sessions:
        close_session(session, reason, now)
    db.flush()
    return len(sessions)


def create_session(
    db: Session,
    agent_id: UUID,
    contact_identifier: str,
    integrations_config_id: UUID,
    now: Optional[datetime] = None,
) -> AgentSession:
    """Start an active session; reuse the winner if a concurrent delivery got there first."""
    now = now or datetime.now(timezone.utc)
    try:
        with db.begin_nested():
            session = AgentSession(
                id=uuid.uuid4(),
                agent_id=agent_id,
                contact_identifier=contact_identifier,
                integrations_config_id=integrations_config_id,
                status=SessionState.ACTIVE.value,
                created_at=now,
                last_interaction_timestamp=now,
            )
            db.add(session)
            db.flush()
    except IntegrityError:
        existing = get_active_session(db, contact_identifier, integrations_config_id)
        if existing is None:
            raise
        logger.info(f"Active session for {contact_identifier} created concurrently, reusing {existing.id}")
        return existing

    logger.info(f"Created agent session {session.id} for {contact_identifier}")
    return session


def end_session(
    db: Session,
    *,
    agent_id: Optional[UUID] = None,
    session_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> Result[Optional[UUID]]:
    """Close a session by id, or the agent's most recent active session.

    Success with ``None`` means there was nothing to close.
    """
    if agent_id is None and session_id is None:
        return Result.failure("agentId or session_id is required", AGENT_ERROR)

    query = db.query(AgentSession)
    if session_id is not None:
        session = query.filter(AgentSession.id == session_id).first()
    else:
        session = (
            query.filter(AgentSession.agent_id == agent_id, AgentSession.status == SessionState.ACTIVE.value)
            .order_by(AgentSession.created_at.desc())
            .first()
        )

    if session is None or session.status != SessionState.ACTIVE.value:
        return Result.success(None)

    close_session(session, CloseReason.MANUAL, now)
    db.flush()
    return Result.success(session.id)
