import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class Agent(Base):
    __tablename__ = "ai_agents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)
    commands = Column(JSONB)  # {"keyword": "static response"}
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    channels = relationship("AgentChannel", back_populates="agent")


class AgentChannel(Base):
    __tablename__ = "ai_agent_channels"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    agent_id = Column(UUID(as_uuid=True), ForeignKey("ai_agents.id"), nullable=False)
    integrations_config_id = Column(UUID(as_uuid=True), ForeignKey("integrations_config.id"), nullable=False)
    is_enabled_on_channel = Column(Boolean, default=True)
    activation_mode = Column(Text)  # always_on, keyword
    keyword_trigger = Column(Text)
    stop_keywords = Column(JSONB)
    session_timeout_minutes = Column(Integer)
    error_message = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    agent = relationship("Agent", back_populates="channels")
