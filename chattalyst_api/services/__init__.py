from chattalyst_api.services.conversation_service import ResolvedIdentity, find_or_create_conversation
from chattalyst_api.services.customer_service import find_or_create_customer
from chattalyst_api.services.extraction import PLACEHOLDER_TEXT, ExtractedContent, extract_message_content
from chattalyst_api.services.message_service import upsert_message
from chattalyst_api.services.result import Result
from chattalyst_api.services.state_machine import (
    ActivationMode,
    AgentChannelConfig,
    CloseReason,
    InvalidTransitionError,
    SessionAction,
    SessionDecision,
    SessionState,
    can_transition,
    decide,
    transition,
)
