"""LLM dispatch across hosted and local providers.

Design goals:
- Keep provider-specific wire shapes isolated in `providers/`.
- One call shape for every backend: `dispatch(prompt=..., service=...)`.
- Failures degrade to None after retries; only an unknown service raises.
- Recover JSON from free text when structured output is requested.
"""

from .cache import CacheFacade, InMemoryCache, cache_key
from .dispatcher import Dispatcher, dispatch, get_dispatcher, set_dispatcher
from .errors import LLMError, UnknownService
from .factory import DEFAULT_MODELS, SERVICES, build_handler, build_registry
from .prompts import improve_prompt
from .rate_limit import RateLimitPolicy
from .types import LLMMessage, LLMRequest, ProviderResult

__all__ = [
    "CacheFacade",
    "DEFAULT_MODELS",
    "Dispatcher",
    "InMemoryCache",
    "LLMError",
    "LLMMessage",
    "LLMRequest",
    "ProviderResult",
    "RateLimitPolicy",
    "SERVICES",
    "UnknownService",
    "build_handler",
    "build_registry",
    "cache_key",
    "dispatch",
    "get_dispatcher",
    "improve_prompt",
    "set_dispatcher",
]
