from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class RateLimitPolicy:
    """Recognize provider rate-limit payloads and read the advised wait.

    `max_retries` caps the number of calls the dispatcher makes to a provider
    that keeps answering "rate limited" within one attempt.
    """

    error_codes: Tuple[str, ...] = ("rate_limit_exceeded",)
    retry_after_header: str = "retry-after"
    default_wait_s: float = 1.0
    max_retries: int = 100

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            object.__setattr__(self, "max_retries", 1)
        if self.default_wait_s < 0:
            object.__setattr__(self, "default_wait_s", 0.0)

    def is_rate_limited(self, body: Any) -> bool:
        if not isinstance(body, dict):
            return False
        error = body.get("error")
        if not isinstance(error, dict):
            return False
        return error.get("code") in self.error_codes

    def wait_seconds(self, headers: Optional[Mapping[str, Any]]) -> float:
        raw = None
        wanted = self.retry_after_header.lower()
        for name, value in (headers or {}).items():
            if str(name).lower() == wanted:
                raw = value
                break
        try:
            return max(0.0, float(raw))
        except (TypeError, ValueError):
            return self.default_wait_s

    def inspect(
        self, body: Any, headers: Optional[Mapping[str, Any]] = None
    ) -> Optional[float]:
        """Return the wait in seconds when `body` is a rate-limit error, else None."""
        if not self.is_rate_limited(body):
            return None
        return self.wait_seconds(headers)
