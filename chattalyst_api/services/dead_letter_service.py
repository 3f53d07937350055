import uuid
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import FailedDispatch

logger = get_logger("dead_letter")


def record_failed_dispatch(
    db: Session,
    *,
    stage: str,
    contact_identifier: str,
    integrations_config_id: Optional[UUID],
    error: Optional[str],
    payload: Optional[dict[str, Any]] = None,
    session_id: Optional[UUID] = None,
    agent_id: Optional[UUID] = None,
) -> bool:
    """Persist a reply that never reached the contact so it can be replayed."""
    logger.warning(
        "Dispatch failed",
        extra={"context": {"stage": stage, "contact": contact_identifier, "error": error}},
    )
    try:
        db.add(
            FailedDispatch(
                id=uuid.uuid4(),
                session_id=session_id,
                agent_id=agent_id,
                integrations_config_id=integrations_config_id,
                contact_identifier=contact_identifier,
                stage=stage,
                payload=payload or {},
                error=error,
            )
        )
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record failed dispatch ({stage}) for {contact_identifier}: {e}")
        return False
