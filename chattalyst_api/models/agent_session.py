import uuid

from sqlalchemy import Column, ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from chattalyst_api.database import Base


class AgentSession(Base):
    __tablename__ = "ai_agent_sessions"
    __table_args__ = (
        Index(
            "uq_ai_agent_sessions_active_contact",
            "contact_identifier",
            "integrations_config_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    agent_id = Column(UUID(as_uuid=True), ForeignKey("ai_agents.id"))
    contact_identifier = Column(Text, nullable=False)  # remote JID
    integrations_config_id = Column(UUID(as_uuid=True), ForeignKey("integrations_config.id"))
    status = Column(Text, nullable=False, default="active")  # active, closed
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    last_interaction_timestamp = Column(TIMESTAMP(timezone=True))
    ended_at = Column(TIMESTAMP(timezone=True))
