from __future__ import annotations

from switchboard import config
from switchboard import logger as logger_mod

from ..types import LLMRequest
from ._http import HttpHandler

log = logger_mod.get_logger()


class LocalLLM(HttpHandler):
    """Ollama-style local model server (`POST {url}/api/generate`).

    Best effort: a successful reply whose body is not JSON or has no
    `response` field yields empty text instead of a failure. Transport errors
    and HTTP error statuses (e.g. 404 for an unpulled model) still fail.
    """

    name = "local"

    def base_url(self, request: LLMRequest) -> str:
        url = request.url or self._cfg.base_url or config.local_llm_url()
        return url.rstrip("/")

    def _prompt(self, request: LLMRequest) -> str:
        if request.prompt:
            return request.prompt
        return "\n\n".join(f"{m.role}: {m.content}" for m in request.messages)

    def _complete(self, request: LLMRequest) -> str:
        url = self.base_url(request)
        if not config.is_production():
            log.debug(f"Local model endpoint: {url}")

        payload = {"model": self._model(request), "prompt": self._prompt(request), "stream": False}
        resp, body = self._post(f"{url}/api/generate", payload)
        self._check_status(resp, body)

        text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(text, str):
            log.warning(f"Local model at {url} returned no response field; using empty text")
            return ""
        return text
