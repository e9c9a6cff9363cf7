from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from switchboard import logger as logger_mod

from .errors import RateLimitExhausted
from .rate_limit import RateLimitPolicy
from .types import FailureKind, ProviderResult

log = logger_mod.get_logger()

RETRYABLE_KINDS = frozenset({FailureKind.NETWORK, FailureKind.MALFORMED_RESPONSE})


@dataclass(frozen=True)
class RetryConfig:
    """Retry/backoff settings for one dispatch call.

    Notes:
    - `max_attempts` bounds the outer loop; 1 means no retry.
    - The delay before attempt n+1 is `n * backoff_unit_s`.
    """

    max_attempts: int = 1
    backoff_unit_s: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            object.__setattr__(self, "max_attempts", 1)
        if self.backoff_unit_s < 0:
            object.__setattr__(self, "backoff_unit_s", 0.0)


def is_retryable(result: ProviderResult) -> bool:
    return result.failure is not None and result.failure.kind in RETRYABLE_KINDS


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


def _sleep(seconds: float, cancel: Optional[threading.Event]) -> bool:
    """Block for `seconds`; return True if cancelled meanwhile."""
    if cancel is None:
        time.sleep(seconds)
        return False
    return cancel.wait(seconds)


def _cancelled_result(context: str) -> ProviderResult:
    log.warning(f"Cancelled while {context}")
    return ProviderResult.fail(FailureKind.CANCELLED, f"cancelled while {context}")


def call_with_rate_limit(
    fn: Callable[[], ProviderResult],
    *,
    context: str,
    policy: RateLimitPolicy | None = None,
    cancel: Optional[threading.Event] = None,
) -> ProviderResult:
    """Call `fn`, waiting out rate-limit answers up to `policy.max_retries` calls."""

    policy = policy or RateLimitPolicy()

    for call_no in range(1, policy.max_retries + 1):
        if _cancelled(cancel):
            return _cancelled_result(context)

        result = fn()
        if result.ok or result.failure.kind != FailureKind.RATE_LIMITED:
            return result

        if call_no == policy.max_retries:
            break

        wait = result.failure.retry_after_s
        if wait is None:
            wait = policy.default_wait_s
        log.warning(
            f"Rate limit reached while {context}; retrying in {wait:.1f}s "
            f"(retry {call_no}/{policy.max_retries})"
        )
        if _sleep(wait, cancel):
            return _cancelled_result(context)

    log.error(
        f"Rate limit retries exhausted while {context} "
        f"after {policy.max_retries} calls"
    )
    return ProviderResult(
        failure=RateLimitExhausted(
            f"rate limited {policy.max_retries} times while {context}"
        ).to_failure()
    )


def execute_with_retry(
    fn: Callable[[], ProviderResult],
    *,
    context: str,
    retry: RetryConfig | None = None,
    policy: RateLimitPolicy | None = None,
    cancel: Optional[threading.Event] = None,
) -> ProviderResult:
    """Run a provider call with linear outer backoff around the rate-limit loop."""

    retry = retry or RetryConfig()
    result = ProviderResult.fail(FailureKind.NETWORK, f"no attempt made while {context}")

    for attempt in range(1, retry.max_attempts + 1):
        result = call_with_rate_limit(fn, context=context, policy=policy, cancel=cancel)
        if result.ok:
            return result

        failure = result.failure
        if not is_retryable(result) or attempt == retry.max_attempts:
            log.error(
                f"❌ LLM call failed while {context} "
                f"(attempt {attempt}/{retry.max_attempts}, {failure.kind.value}): "
                f"{failure.message}"
            )
            return result

        wait = attempt * retry.backoff_unit_s
        log.warning(
            f"⚠️ Retryable LLM error while {context}; retrying in {wait:.1f}s "
            f"(attempt {attempt}/{retry.max_attempts}): {failure.message}"
        )
        if _sleep(wait, cancel):
            return _cancelled_result(context)

    return result
