import uuid

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class FailedDispatch(Base):
    __tablename__ = "failed_dispatches"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("ai_agent_sessions.id"))
    agent_id = Column(UUID(as_uuid=True), ForeignKey("ai_agents.id"))
    integrations_config_id = Column(UUID(as_uuid=True), ForeignKey("integrations_config.id"))
    contact_identifier = Column(Text, nullable=False)
    stage = Column(Text, nullable=False)  # agent_query, send_text, send_media, command_reply
    payload = Column(JSONB, nullable=False, default=dict)
    error = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
