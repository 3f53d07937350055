from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from chattalyst_api.models import IntegrationConfig


def get_integration_config(db: Session, instance: str) -> Optional[IntegrationConfig]:
    """Find the integration config for an Evolution instance name or id."""
    return (
        db.query(IntegrationConfig)
        .filter(
            or_(
                IntegrationConfig.instance_display_name == instance,
                IntegrationConfig.instance_id == instance,
            )
        )
        .first()
    )
