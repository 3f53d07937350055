from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

# Failure codes per processing stage, reported back as ``processed: false``
# with an HTTP 200. Envelope errors never get this far.
INVALID_PAYLOAD = "invalid_payload"
CONFIG_NOT_FOUND = "config_not_found"
CUSTOMER_ERROR = "customer_error"
CONVERSATION_ERROR = "conversation_error"
PARTICIPANT_ERROR = "participant_error"
MESSAGE_ERROR = "message_error"
AGENT_ERROR = "agent_error"
DISPATCH_ERROR = "dispatch_error"


@dataclass
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(ok=True, value=value)

    @staticmethod
    def failure(error: str, code: str = "unknown") -> "Result[T]":
        return Result(ok=False, error=error, error_code=code)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default

    def describe(self) -> str:
        """``"<code>: <error>"`` for failures, used as the webhook ``error`` field."""
        if self.ok:
            return ""
        return f"{self.error_code}: {self.error}"
