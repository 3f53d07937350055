from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from chattalyst_api.config import settings
from chattalyst_api.logging_config import get_logger
from chattalyst_api.models import Agent, AgentChannel
from chattalyst_api.services.state_machine import DEFAULT_ERROR_MESSAGE, ActivationMode, AgentChannelConfig

logger = get_logger("agent_service")


def _activation_mode(value: Optional[str]) -> ActivationMode:
    try:
        return ActivationMode(value or ActivationMode.KEYWORD.value)
    except ValueError:
        logger.warning(f"Unknown activation_mode {value!r}, treating as keyword")
        return ActivationMode.KEYWORD


def _commands(raw) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items() if k and isinstance(v, str)}


def build_channel_config(channel: AgentChannel, agent: Agent) -> AgentChannelConfig:
    stop_keywords = channel.stop_keywords if isinstance(channel.stop_keywords, list) else []
    return AgentChannelConfig(
        agent_id=agent.id,
        activation_mode=_activation_mode(channel.activation_mode),
        keyword_trigger=channel.keyword_trigger,
        stop_keywords=[str(k) for k in stop_keywords if k],
        session_timeout_minutes=channel.session_timeout_minutes or settings.default_session_timeout_minutes,
        commands=_commands(agent.commands),
        error_message=channel.error_message or DEFAULT_ERROR_MESSAGE,
    )


def load_agent_channel(db: Session, integrations_config_id: UUID) -> Optional[AgentChannelConfig]:
    """Enabled agent configuration for an integration config, if any."""
    channel = (
        db.query(AgentChannel)
        .join(Agent, Agent.id == AgentChannel.agent_id)
        .filter(
            AgentChannel.integrations_config_id == integrations_config_id,
            AgentChannel.is_enabled_on_channel.is_(True),
            Agent.is_enabled.is_(True),
        )
        .order_by(AgentChannel.created_at)
        .first()
    )
    if not channel:
        return None
    return build_channel_config(channel, channel.agent)
