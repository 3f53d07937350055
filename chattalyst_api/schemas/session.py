from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class EndSessionRequest(BaseModel):
    agentId: Optional[UUID] = None
    session_id: Optional[UUID] = None


class EndSessionResponse(BaseModel):
    success: bool
    message: str
