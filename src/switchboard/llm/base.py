from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from switchboard import config
from switchboard import logger as logger_mod

from .errors import AuthenticationError, ProviderError
from .types import LLMRequest, ProviderResult

log = logger_mod.get_logger()


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    default_model: str
    base_url: str = ""
    timeout_s: float = 60.0


class ProviderHandler(Protocol):
    """One backend behind the uniform `call(request) -> ProviderResult` shape."""

    name: str

    def call(self, request: LLMRequest) -> ProviderResult:
        raise NotImplementedError


class BaseHandler:
    """Shared plumbing for handlers.

    Subclasses implement `_complete(request) -> str` and raise ProviderError
    subclasses for expected provider conditions; `call` converts those into
    ProviderResult failures.
    """

    name = ""

    def __init__(self, cfg: LLMConfig, *, api_key: Optional[str] = None):
        self._cfg = cfg
        self._explicit_key = api_key

    @property
    def config(self) -> LLMConfig:
        return self._cfg

    def call(self, request: LLMRequest) -> ProviderResult:
        try:
            text = self._complete(request)
        except ProviderError as e:
            log.warning(f"{self.name} call failed ({e.kind.value}): {e}")
            return ProviderResult(failure=e.to_failure())
        return ProviderResult.success(text)

    def _complete(self, request: LLMRequest) -> str:
        raise NotImplementedError

    def _model(self, request: LLMRequest) -> str:
        return request.model or self._cfg.default_model

    def _api_key(self) -> str:
        key = self._explicit_key or config.api_key(self.name)
        if not key:
            names = " or ".join(config.API_KEY_ENV.get(self.name, ()))
            raise AuthenticationError(f"Missing env var {names} for {self.name}")
        return key
