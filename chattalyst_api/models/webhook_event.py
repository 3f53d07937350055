import uuid

from sqlalchemy import Column, Text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class WebhookEvent(Base):
    __tablename__ = "evolution_webhook_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_type = Column(Text, nullable=False)
    payload = Column(JSONB, nullable=False)
    processing_status = Column(Text, nullable=False)  # processed, failed, skipped
    source_identifier = Column(Text)  # Evolution instance name
    error = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
