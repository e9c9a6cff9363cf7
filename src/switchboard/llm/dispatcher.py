from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Dict, Mapping, Optional

from switchboard import config
from switchboard import logger as logger_mod

from ._json import ResponseCoercer, validate_json
from ._retry import RetryConfig, execute_with_retry
from .base import ProviderHandler
from .cache import CacheFacade, CacheStore, cache_key
from .errors import LLMValidationError, UnknownService
from .factory import DEFAULT_MODELS, SERVICES, build_registry
from .rate_limit import RateLimitPolicy
from .types import FailureKind, LLMRequest, ProviderResult

_dispatcher: Dispatcher | None = None


class Dispatcher:
    """Single entry point for LLM calls.

    One dispatch resolves the service and model, consults the cache, calls the
    provider under the retry and rate-limit policies, optionally coerces the
    answer into JSON, and writes the final value back to the cache.

    Failures after retries are logged and returned as None; only an unknown
    service raises.
    """

    def __init__(
        self,
        handlers: Mapping[str, ProviderHandler],
        *,
        cache: Optional[CacheFacade] = None,
        default_service: Optional[str] = None,
        default_models: Optional[Mapping[str, str]] = None,
        rate_limit: Optional[RateLimitPolicy] = None,
        backoff_unit_s: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._handlers: Dict[str, ProviderHandler] = dict(handlers)
        self._cache = cache or CacheFacade()
        self._default_service = (default_service or "").strip().lower() or None
        self._default_models = dict(default_models or DEFAULT_MODELS)
        self._rate_limit = rate_limit or RateLimitPolicy()
        self._backoff_unit_s = backoff_unit_s
        self._log = logger or logger_mod.get_logger()

    @classmethod
    def from_env(
        cls,
        *,
        cache_store: Optional[CacheStore] = None,
        rate_limit: Optional[RateLimitPolicy] = None,
    ) -> "Dispatcher":
        rate_limit = rate_limit or RateLimitPolicy()
        return cls(
            build_registry(rate_limit=rate_limit),
            cache=CacheFacade(cache_store),
            rate_limit=rate_limit,
        )

    @property
    def services(self) -> list[str]:
        return sorted(self._handlers)

    def handler_for(self, service: str) -> ProviderHandler:
        handler = self._handlers.get(service)
        if handler is None:
            raise UnknownService(service)
        return handler

    def resolve(self, request: LLMRequest) -> LLMRequest:
        """Fill in service and model defaults."""
        service = request.service or self._default_service or config.default_service()
        model = request.model or self._default_models.get(service)
        if model and model not in SERVICES.get(service, (model,)):
            self._log.debug(f"Model {model} is not in the {service} catalogue")
        return dataclasses.replace(request, service=service, model=model)

    def dispatch(
        self,
        request: Optional[LLMRequest] = None,
        *,
        cancel: Optional[threading.Event] = None,
        **options: Any,
    ) -> Any:
        """Run one request; returns text, structured data, or None.

        Pass either an LLMRequest or its fields as keyword options.
        """
        if request is None:
            request = LLMRequest(**options)
        elif options:
            request = dataclasses.replace(request, **options)

        request = self.resolve(request)
        service, model = request.service, request.model
        handler = self.handler_for(service)

        key = request.cache_key or cache_key(service, model, request.messages, request.prompt)
        where = f" [{request.context}]" if request.context else ""

        if request.debug:
            self._log.info(f"Prompt for {service}/{model}{where}: {request.prompt or request.turns()}")

        if request.use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                self._log.info(f"Using cache {key}{where}")
                return cached

        self._log.info(f"{service}/{model}{where}")
        result = execute_with_retry(
            lambda: self._invoke(handler, request),
            context=f"calling {service}/{model}{where}",
            retry=RetryConfig(
                max_attempts=request.max_attempts, backoff_unit_s=self._backoff_unit_s
            ),
            policy=self._rate_limit,
            cancel=cancel,
        )
        if not result.ok:
            self._log.error(f"Out of attempts for {service}/{model}{where}; returning None")
            return None

        value: Any = result.text
        if request.structured:
            value = self._coerce(request, value, cancel)
            if value is not None and request.json_schema is not None:
                try:
                    validate_json(value, request.json_schema)
                except LLMValidationError as e:
                    self._log.warning(f"Structured output rejected{where}: {e}")
                    value = None

        if request.use_cache and value is not None:
            self._cache.set(key, value)
        return value

    def _invoke(self, handler: ProviderHandler, request: LLMRequest) -> ProviderResult:
        try:
            return handler.call(request)
        except Exception as e:  # noqa: BLE001
            self._log.exception(f"Unexpected error from {request.service}: {e}")
            return ProviderResult.fail(FailureKind.NETWORK, f"unexpected error: {e!r}")

    def _coerce(
        self, request: LLMRequest, text: Any, cancel: Optional[threading.Event]
    ) -> Any:
        def extract(prompt: str) -> Optional[str]:
            answer = self.dispatch(
                LLMRequest(
                    prompt=prompt,
                    service=request.service,
                    model=request.model,
                    url=request.url,
                    context=request.context,
                ),
                cancel=cancel,
            )
            return answer if isinstance(answer, str) else None

        return ResponseCoercer(extract=extract).coerce(text)


def get_dispatcher() -> Dispatcher:
    """Process-wide dispatcher built from the environment on first use."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher.from_env()
    return _dispatcher


def set_dispatcher(dispatcher: Optional[Dispatcher]) -> None:
    global _dispatcher
    _dispatcher = dispatcher


def dispatch(request: Optional[LLMRequest] = None, **options: Any) -> Any:
    return get_dispatcher().dispatch(request, **options)
