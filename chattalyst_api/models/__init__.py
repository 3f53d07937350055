from chattalyst_api.models.agent import Agent, AgentChannel
from chattalyst_api.models.agent_session import AgentSession
from chattalyst_api.models.conversation import Conversation
from chattalyst_api.models.customer import Customer
from chattalyst_api.models.failed_dispatch import FailedDispatch
from chattalyst_api.models.integration import Integration, IntegrationConfig
from chattalyst_api.models.message import Message
from chattalyst_api.models.participant import ConversationParticipant, ParticipantRole
from chattalyst_api.models.webhook_event import WebhookEvent

__all__ = [
    "Agent",
    "AgentChannel",
    "AgentSession",
    "Conversation",
    "ConversationParticipant",
    "Customer",
    "FailedDispatch",
    "Integration",
    "IntegrationConfig",
    "Message",
    "ParticipantRole",
    "WebhookEvent",
]
