import uuid

from sqlalchemy import Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("integrations_config_id", "contact_identifier", name="uq_conversations_config_contact"),
    )

    conversation_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    integrations_config_id = Column(UUID(as_uuid=True), ForeignKey("integrations_config.id"), nullable=False)
    contact_identifier = Column(Text)  # phone part of the member's JID; null on legacy rows
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    participants = relationship("ConversationParticipant", back_populates="conversation")
    messages = relationship("Message", back_populates="conversation")
