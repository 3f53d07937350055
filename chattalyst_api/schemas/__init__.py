from chattalyst_api.schemas.agent import AgentQuery, AgentReply
from chattalyst_api.schemas.session import EndSessionRequest, EndSessionResponse
from chattalyst_api.schemas.webhook import MessageData, MessageKey, WebhookEnvelope, WebhookResponse

__all__ = [
    "AgentQuery",
    "AgentReply",
    "EndSessionRequest",
    "EndSessionResponse",
    "MessageData",
    "MessageKey",
    "WebhookEnvelope",
    "WebhookResponse",
]
