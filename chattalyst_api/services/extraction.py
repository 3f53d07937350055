"""Text and media extraction from Evolution ``messages.upsert`` payloads."""

from dataclasses import dataclass
from typing import Any, Optional

PLACEHOLDER_TEXT = "Media or unknown message type"

MEDIA_MESSAGE_TYPES = {
    "imageMessage": "image",
    "videoMessage": "video",
    "audioMessage": "audio",
    "documentMessage": "document",
    "documentWithCaptionMessage": "document",
    "stickerMessage": "sticker",
}


@dataclass
class ExtractedContent:
    content: Optional[str]
    media_type: Optional[str] = None
    media_data: Optional[dict[str, Any]] = None

    @property
    def agent_text(self) -> Optional[str]:
        """Text the agent pipeline may evaluate, or None when there is none."""
        if not self.content or self.content == PLACEHOLDER_TEXT:
            return None
        text = self.content.strip()
        return text or None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _media_payload(message: dict[str, Any], message_type: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    if message_type in MEDIA_MESSAGE_TYPES and message_type in message:
        return message_type, MEDIA_MESSAGE_TYPES[message_type]
    for key, media_type in MEDIA_MESSAGE_TYPES.items():
        if key in message:
            return key, media_type
    return None, None


def _media_caption(media_key: str, media: dict[str, Any]) -> Optional[str]:
    if media_key == "documentWithCaptionMessage":
        # Evolution nests the real document one level down
        inner = _as_dict(_as_dict(media.get("message")).get("documentMessage"))
        media = inner or media
    caption = _string(media.get("caption"))
    if caption or not media_key.startswith("document"):
        return caption
    return _string(media.get("title")) or _string(media.get("fileName"))


def extract_message_content(message: Optional[dict[str, Any]], message_type: Optional[str] = None) -> ExtractedContent:
    """Pick the stored content for a message.

    Plain ``conversation`` text wins, then ``extendedTextMessage.text``. Media
    messages store only their caption (documents fall back to title or file
    name) and never the placeholder. Anything else stores the placeholder.
    """
    message = _as_dict(message)

    text = _string(message.get("conversation"))
    if text:
        return ExtractedContent(content=text)

    extended = _string(_as_dict(message.get("extendedTextMessage")).get("text"))
    if extended:
        return ExtractedContent(content=extended)

    media_key, media_type = _media_payload(message, message_type)
    if media_key:
        media = _as_dict(message.get(media_key))
        return ExtractedContent(
            content=_media_caption(media_key, media),
            media_type=media_type,
            media_data=media or None,
        )

    return ExtractedContent(content=PLACEHOLDER_TEXT)
