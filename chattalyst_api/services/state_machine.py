from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

DEFAULT_ERROR_MESSAGE = "Sorry, I can't help with that right now, we'll get in touch with you shortly."


class SessionState(str, Enum):
    NO_SESSION = "no_session"
    ACTIVE = "active"
    CLOSED = "closed"


class ActivationMode(str, Enum):
    ALWAYS_ON = "always_on"
    KEYWORD = "keyword"


class SessionAction(str, Enum):
    COMMAND_REPLY = "command_reply"
    STOP = "stop"
    INVOKE = "invoke"
    IGNORE = "ignore"


class CloseReason(str, Enum):
    STOP_KEYWORD = "stop_keyword"
    TIMEOUT = "timeout"
    MANUAL = "manual"


# Closed is terminal for the session row only; the contact goes back to
# NO_SESSION and a later message may start a new one.
VALID_TRANSITIONS = {
    SessionState.NO_SESSION: [SessionState.ACTIVE],
    SessionState.ACTIVE: [SessionState.ACTIVE, SessionState.CLOSED],
    SessionState.CLOSED: [],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: SessionState, to_state: SessionState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


def can_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """Check if transition is valid."""
    return to_state in VALID_TRANSITIONS.get(from_state, [])


def transition(from_state: SessionState, to_state: SessionState) -> SessionState:
    """Perform state transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    return to_state


@dataclass
class AgentChannelConfig:
    """Per-channel agent settings, read-only to webhook processing.

    ``error_message`` is loaded with the channel so it can be inspected.
    Nothing here sends it: a failed dispatch sends no reply and is recorded
    in ``failed_dispatches`` instead.
    """

    agent_id: UUID
    activation_mode: ActivationMode = ActivationMode.KEYWORD
    keyword_trigger: Optional[str] = None
    stop_keywords: list[str] = field(default_factory=list)
    session_timeout_minutes: int = 60
    commands: dict[str, str] = field(default_factory=dict)
    error_message: str = DEFAULT_ERROR_MESSAGE


@dataclass
class SessionDecision:
    action: SessionAction
    close_reason: Optional[CloseReason] = None
    create_session: bool = False
    response: Optional[str] = None
    matched_keyword: Optional[str] = None

    @property
    def closes_session(self) -> bool:
        return self.close_reason is not None


def _fold(text: Optional[str]) -> str:
    return (text or "").strip().casefold()


def match_command(text: str, commands: dict[str, str]) -> Optional[str]:
    """Static response for a message that is exactly a command keyword."""
    folded = _fold(text)
    if not folded:
        return None
    for keyword, response in (commands or {}).items():
        if _fold(keyword) == folded and response:
            return response
    return None


def find_stop_keyword(text: str, stop_keywords: list[str]) -> Optional[str]:
    folded = _fold(text)
    for keyword in stop_keywords or []:
        needle = _fold(keyword)
        if needle and needle in folded:
            return keyword
    return None


def is_session_expired(created_at: datetime, timeout_minutes: int, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return now - created_at > timedelta(minutes=timeout_minutes)


def should_trigger(text: str, config: AgentChannelConfig) -> bool:
    if config.activation_mode == ActivationMode.ALWAYS_ON:
        return True
    trigger = _fold(config.keyword_trigger)
    return bool(trigger) and trigger in _fold(text)


def decide(
    text: str,
    config: AgentChannelConfig,
    active_session_created_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> SessionDecision:
    """Decide what one inbound message does to the contact's agent session.

    Order matters: command keywords short-circuit everything, stop keywords
    come before timeout handling, and a live session continues regardless of
    the trigger keyword.
    """
    response = match_command(text, config.commands)
    if response:
        return SessionDecision(SessionAction.COMMAND_REPLY, response=response)

    stop_keyword = find_stop_keyword(text, config.stop_keywords)
    if stop_keyword:
        return SessionDecision(SessionAction.STOP, close_reason=CloseReason.STOP_KEYWORD, matched_keyword=stop_keyword)

    state = SessionState.NO_SESSION if active_session_created_at is None else SessionState.ACTIVE
    close_reason = None
    if state == SessionState.ACTIVE and is_session_expired(
        active_session_created_at, config.session_timeout_minutes, now
    ):
        close_reason = CloseReason.TIMEOUT
        state = SessionState.NO_SESSION

    if state == SessionState.ACTIVE:
        return SessionDecision(SessionAction.INVOKE)

    if should_trigger(text, config):
        return SessionDecision(SessionAction.INVOKE, close_reason=close_reason, create_session=True)

    return SessionDecision(SessionAction.IGNORE, close_reason=close_reason)
