from __future__ import annotations

from typing import Optional

from .types import FailureKind, ProviderFailure


class LLMError(RuntimeError):
    pass


class LLMValidationError(LLMError):
    """Raised when model output cannot be parsed or fails the requested schema."""


class UnknownService(LLMError):
    """Requested service has no registered handler (a configuration bug)."""

    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Unknown LLM service: {service}")


class ProviderError(LLMError):
    """Base for failures raised inside a provider handler.

    Handlers raise these; the handler base class turns them into
    ProviderResult failures so the dispatcher never sees them as exceptions.
    """

    kind = FailureKind.NETWORK

    def __init__(self, message: str = "", *, retry_after_s: Optional[float] = None):
        super().__init__(message)
        self.retry_after_s = retry_after_s

    def to_failure(self) -> ProviderFailure:
        return ProviderFailure(
            kind=self.kind, message=str(self), retry_after_s=self.retry_after_s
        )


class NetworkOrHttpError(ProviderError):
    kind = FailureKind.NETWORK


class AuthenticationError(ProviderError):
    kind = FailureKind.AUTHENTICATION


class MalformedResponseError(ProviderError):
    kind = FailureKind.MALFORMED_RESPONSE


class RateLimited(ProviderError):
    kind = FailureKind.RATE_LIMITED


class RateLimitExhausted(ProviderError):
    kind = FailureKind.RATE_LIMIT_EXHAUSTED


class InvalidRequestError(ProviderError):
    """The request cannot be sent as given (no usable turns, unreadable media)."""

    kind = FailureKind.INVALID_REQUEST
