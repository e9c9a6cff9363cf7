import pytest

from switchboard.llm._retry import (
    RetryConfig,
    call_with_rate_limit,
    execute_with_retry,
    is_retryable,
)
from switchboard.llm.rate_limit import RateLimitPolicy
from switchboard.llm.types import FailureKind, ProviderResult


class _Script:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.results.pop(0) if len(self.results) > 1 else self.results[0]


class _CancelDuringSleep:
    """Cancel token that is not set up front but fires during the first wait."""

    def __init__(self):
        self.waits = []

    def is_set(self):
        return bool(self.waits)

    def wait(self, seconds):
        self.waits.append(seconds)
        return True


def test_rate_limit_policy_reads_retry_after_case_insensitively():
    policy = RateLimitPolicy()
    body = {"error": {"code": "rate_limit_exceeded", "message": "slow down"}}

    assert policy.inspect(body, {"Retry-After": "7"}) == 7.0
    assert policy.inspect(body, {"retry-after": "0.5"}) == 0.5


def test_rate_limit_policy_defaults_and_non_matches():
    policy = RateLimitPolicy(default_wait_s=2.0)
    body = {"error": {"code": "rate_limit_exceeded"}}

    assert policy.inspect(body, {}) == 2.0
    assert policy.inspect(body, {"retry-after": "soon"}) == 2.0
    assert policy.inspect(body, {"retry-after": "-3"}) == 0.0
    assert policy.inspect({"error": {"code": "invalid_api_key"}}, {}) is None
    assert policy.inspect({"error": "boom"}, {}) is None
    assert policy.inspect(None, {}) is None
    assert policy.inspect({"choices": []}, {}) is None


def test_rate_limit_policy_clamps_cap():
    assert RateLimitPolicy(max_retries=0).max_retries == 1


def test_retry_config_clamps():
    cfg = RetryConfig(max_attempts=0, backoff_unit_s=-1)
    assert cfg.max_attempts == 1
    assert cfg.backoff_unit_s == 0.0


@pytest.mark.parametrize(
    "kind,expected",
    [
        (FailureKind.NETWORK, True),
        (FailureKind.MALFORMED_RESPONSE, True),
        (FailureKind.AUTHENTICATION, False),
        (FailureKind.RATE_LIMIT_EXHAUSTED, False),
        (FailureKind.CANCELLED, False),
    ],
)
def test_is_retryable(kind, expected):
    assert is_retryable(ProviderResult.fail(kind)) is expected


def test_success_is_not_retryable():
    assert is_retryable(ProviderResult.success("x")) is False


def test_call_with_rate_limit_uses_default_wait_without_hint(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.RATE_LIMITED), ProviderResult.success("ok"))

    result = call_with_rate_limit(fn, context="unit", policy=RateLimitPolicy(default_wait_s=4.0))

    assert result.text == "ok"
    assert sleeps == [4.0]


def test_call_with_rate_limit_exhaustion(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.RATE_LIMITED, retry_after_s=1.0))

    result = call_with_rate_limit(fn, context="unit", policy=RateLimitPolicy(max_retries=5))

    assert result.failure.kind == FailureKind.RATE_LIMIT_EXHAUSTED
    assert fn.calls == 5
    assert sleeps == [1.0] * 4


def test_call_with_rate_limit_passes_other_failures_through(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.NETWORK, "down"))

    result = call_with_rate_limit(fn, context="unit")

    assert result.failure.kind == FailureKind.NETWORK
    assert fn.calls == 1
    assert sleeps == []


def test_execute_with_retry_malformed_response_is_retried(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.MALFORMED_RESPONSE), ProviderResult.success("ok"))

    result = execute_with_retry(fn, context="unit", retry=RetryConfig(max_attempts=2, backoff_unit_s=1.0))

    assert result.text == "ok"
    assert sleeps == [1.0]


def test_cancel_during_backoff_stops_retrying(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.NETWORK, "down"))
    cancel = _CancelDuringSleep()

    result = execute_with_retry(fn, context="unit", retry=RetryConfig(max_attempts=3), cancel=cancel)

    assert result.failure.kind == FailureKind.CANCELLED
    assert fn.calls == 1
    assert cancel.waits == [5.0]
    assert sleeps == []


def test_cancel_during_rate_limit_wait(sleeps):
    fn = _Script(ProviderResult.fail(FailureKind.RATE_LIMITED, retry_after_s=9.0))
    cancel = _CancelDuringSleep()

    result = call_with_rate_limit(fn, context="unit", cancel=cancel)

    assert result.failure.kind == FailureKind.CANCELLED
    assert fn.calls == 1
    assert cancel.waits == [9.0]
