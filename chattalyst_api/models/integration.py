import uuid

from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from chattalyst_api.database import Base


class Integration(Base):
    __tablename__ = "integrations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    base_url = Column(Text)
    api_key = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    configs = relationship("IntegrationConfig", back_populates="integration")


class IntegrationConfig(Base):
    __tablename__ = "integrations_config"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    integration_id = Column(UUID(as_uuid=True), ForeignKey("integrations.id"), nullable=False)
    instance_id = Column(Text)
    instance_display_name = Column(Text)  # Evolution instanceName, used in send URLs
    user_reference_id = Column(Text)  # owner's identifier for the admin participant
    default_country_code = Column(Text)  # overrides settings.default_country_code
    status = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    integration = relationship("Integration", back_populates="configs")
