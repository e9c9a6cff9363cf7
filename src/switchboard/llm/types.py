from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class LLMMessage:
    role: Role
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class FailureKind(str, Enum):
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    MALFORMED_RESPONSE = "malformed_response"
    RATE_LIMITED = "rate_limited"
    RATE_LIMIT_EXHAUSTED = "rate_limit_exhausted"
    CANCELLED = "cancelled"
    INVALID_REQUEST = "invalid_request"


@dataclass(frozen=True)
class ProviderFailure:
    kind: FailureKind
    message: str = ""
    retry_after_s: Optional[float] = None


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider call: text on success, a failure otherwise."""

    text: Optional[str] = None
    failure: Optional[ProviderFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, text: str) -> "ProviderResult":
        return cls(text=text)

    @classmethod
    def fail(
        cls,
        kind: FailureKind,
        message: str = "",
        *,
        retry_after_s: Optional[float] = None,
    ) -> "ProviderResult":
        return cls(
            failure=ProviderFailure(
                kind=kind, message=message, retry_after_s=retry_after_s
            )
        )


def _to_message(turn: Any) -> LLMMessage:
    if isinstance(turn, LLMMessage):
        return turn
    if isinstance(turn, dict):
        return LLMMessage(role=turn["role"], content=str(turn["content"]))
    raise TypeError(f"Unsupported message type: {type(turn).__name__}")


@dataclass(frozen=True)
class LLMRequest:
    """Provider-neutral request.

    Notes:
    - At least one of `prompt` / `messages` must be present.
    - `messages` accepts LLMMessage objects or {"role", "content"} dicts.
    - `system`, `media_path`, `url` and `json_mode` are only read by the
      handlers that support them.
    """

    prompt: Optional[str] = None
    messages: Tuple[LLMMessage, ...] = ()
    service: Optional[str] = None
    model: Optional[str] = None

    structured: bool = False
    debug: bool = False
    use_cache: bool = False
    max_attempts: int = 1
    cache_key: Optional[str] = None

    system: Optional[str] = None
    media_path: Optional[str] = None
    url: Optional[str] = None
    json_mode: bool = False
    json_schema: Optional[Dict[str, Any]] = field(default=None, compare=False)
    context: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "messages", tuple(_to_message(m) for m in (self.messages or ()))
        )
        if not self.prompt and not self.messages:
            raise ValueError("LLMRequest needs a prompt or at least one message")

        if self.service is not None:
            object.__setattr__(self, "service", self.service.strip().lower())

        if self.max_attempts < 1:
            object.__setattr__(self, "max_attempts", 1)

    def turns(self) -> list[Dict[str, str]]:
        """Chat turns to send: explicit messages, else one user turn from prompt."""
        if self.messages:
            return [m.as_dict() for m in self.messages]
        return [{"role": "user", "content": self.prompt or ""}]
