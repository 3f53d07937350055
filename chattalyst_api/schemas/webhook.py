from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class MessageKey(BaseModel):
    remoteJid: str
    fromMe: bool = False
    id: str

    @field_validator("fromMe", mode="before")
    @classmethod
    def _none_is_false(cls, value):
        return bool(value)


class MessageData(BaseModel):
    """Evolution ``messages.upsert`` payload (``data`` field)."""

    key: MessageKey
    pushName: Optional[str] = None
    message: Optional[dict[str, Any]] = None
    messageType: Optional[str] = None
    messageTimestamp: Optional[int] = None


class WebhookEnvelope(BaseModel):
    event: str = Field(min_length=1)
    instance: str = Field(min_length=1)
    data: Any = None  # shape depends on the event; only messages.upsert is parsed


class WebhookResponse(BaseModel):
    success: bool
    processed: bool
    message: Optional[str] = None
    error: Optional[str] = None
