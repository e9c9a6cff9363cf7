from __future__ import annotations

from typing import Dict, Iterable, Optional

from switchboard import config

from .base import LLMConfig, ProviderHandler
from .errors import UnknownService
from .providers import ClaudeLLM, GeminiLLM, GroqLLM, LocalLLM, OpenAILLM
from .rate_limit import RateLimitPolicy

# Known models per service (first entry is not necessarily the default)
SERVICES: Dict[str, tuple[str, ...]] = {
    "gemini": ("gemini-1.5-flash", "gemini-1.5-flash-002"),
    "openai": ("gpt-4o-mini", "gpt-4o"),
    "groq": ("llama-3.1-70b-versatile", "llama-3.1-8b-instant"),
    "claude": ("claude-3-5-sonnet-20240620", "claude-3-5-sonnet-20241022"),
    "local": ("llama3.1",),
}

DEFAULT_MODELS: Dict[str, str] = {
    "gemini": "gemini-1.5-flash",
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-70b-versatile",
    "claude": "claude-3-5-sonnet-20240620",
    "local": "llama3.1",
}

_HANDLERS = {
    "gemini": GeminiLLM,
    "openai": OpenAILLM,
    "groq": GroqLLM,
    "claude": ClaudeLLM,
    "local": LocalLLM,
}


def build_handler(
    service: str,
    *,
    model: Optional[str] = None,
    rate_limit: Optional[RateLimitPolicy] = None,
) -> ProviderHandler:
    """Factory for provider handlers.

    Services:
    - gemini, openai, groq, claude, local

    `rate_limit` only matters for services that detect throttling in the
    response body (groq).

    Extend by adding a handler class and mapping it here.
    """

    s = service.lower().strip()
    handler_cls = _HANDLERS.get(s)
    if handler_cls is None:
        raise UnknownService(service)

    cfg = LLMConfig(
        provider=s,
        default_model=model or DEFAULT_MODELS[s],
        timeout_s=config.timeout_s(),
    )
    if handler_cls is GroqLLM:
        return GroqLLM(cfg, rate_limit=rate_limit)
    return handler_cls(cfg)


def build_registry(
    services: Optional[Iterable[str]] = None,
    *,
    rate_limit: Optional[RateLimitPolicy] = None,
) -> Dict[str, ProviderHandler]:
    """Map service names to handlers; all known services by default."""
    names = list(services) if services is not None else list(_HANDLERS)
    return {
        name.lower().strip(): build_handler(name, rate_limit=rate_limit) for name in names
    }
