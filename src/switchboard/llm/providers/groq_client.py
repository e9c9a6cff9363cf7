from __future__ import annotations

from typing import Optional

import requests

from ..base import LLMConfig
from ..errors import MalformedResponseError, RateLimited
from ..rate_limit import RateLimitPolicy
from ..types import LLMRequest
from ._http import HttpHandler, dig

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


class GroqLLM(HttpHandler):
    """Groq chat completions (OpenAI-compatible) with rate-limit detection.

    Groq reports throttling as `{"error": {"code": "rate_limit_exceeded"}}`
    with a `retry-after` header; that surfaces as RateLimited so the
    dispatcher can wait and call again.
    """

    name = "groq"

    def __init__(
        self,
        cfg: LLMConfig,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        rate_limit: Optional[RateLimitPolicy] = None,
    ):
        super().__init__(cfg, api_key=api_key, session=session)
        self._rate_limit = rate_limit or RateLimitPolicy()

    def _complete(self, request: LLMRequest) -> str:
        key = self._api_key()
        payload = {"model": self._model(request), "messages": request.turns()}
        resp, body = self._post(
            self._cfg.base_url or GROQ_URL,
            payload,
            headers={
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            },
        )

        wait = self._rate_limit.inspect(body, resp.headers)
        if wait is not None:
            raise RateLimited("groq rate limit reached", retry_after_s=wait)

        self._check_status(resp, body)
        text = dig(self._require_body(body), "choices", 0, "message", "content")
        if text is None:
            raise MalformedResponseError("groq response has no choices")
        return text
