from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class AgentQuery(BaseModel):
    agentId: UUID
    query: str
    sessionId: UUID
    contactIdentifier: str


class AgentReply(BaseModel):
    response: Optional[str] = None
    image: Optional[str] = None
