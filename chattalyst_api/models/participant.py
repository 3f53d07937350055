import uuid
from enum import Enum

from sqlalchemy import Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class ParticipantRole(str, Enum):
    ADMIN = "admin"  # the integration owner
    MEMBER = "member"  # the external contact


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"
    __table_args__ = (UniqueConstraint("conversation_id", "role", name="uq_participants_conversation_role"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    conversation_id = Column(UUID(as_uuid=True), ForeignKey("conversations.conversation_id"), nullable=False)
    role = Column(Text, nullable=False)
    external_user_identifier = Column(Text)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id"))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    conversation = relationship("Conversation", back_populates="participants")
