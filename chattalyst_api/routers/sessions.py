from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from chattalyst_api.database import get_db
from chattalyst_api.logging_config import get_logger
from chattalyst_api.schemas.session import EndSessionRequest, EndSessionResponse
from chattalyst_api.services.session_service import end_session

logger = get_logger("sessions")

router = APIRouter(tags=["sessions"])


@router.post("/end-agent-session", response_model=EndSessionResponse)
def end_agent_session(payload: EndSessionRequest, db: Session = Depends(get_db)):
    """Close an agent session by session id, or the agent's latest active one."""
    if payload.agentId is None and payload.session_id is None:
        raise HTTPException(status_code=400, detail="Missing required field: agentId or session_id")

    result = end_session(db, agent_id=payload.agentId, session_id=payload.session_id)
    if not result.ok:
        db.rollback()
        return EndSessionResponse(success=False, message=result.error)

    if result.value is None:
        return EndSessionResponse(success=True, message="No active session found to end.")

    db.commit()
    logger.info(f"Closed agent session {result.value} on request")
    return EndSessionResponse(success=True, message=f"Session {result.value} closed successfully.")
