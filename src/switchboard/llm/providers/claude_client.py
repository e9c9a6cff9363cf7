from __future__ import annotations

from ..errors import InvalidRequestError, MalformedResponseError
from ..types import LLMRequest
from ._http import HttpHandler, dig

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_SYSTEM = "answer in english"
MAX_TOKENS = 4096


class ClaudeLLM(HttpHandler):
    """Anthropic Messages API.

    System-role turns are not allowed in `messages`, so they are folded into
    the `system` field.
    """

    name = "claude"

    def _complete(self, request: LLMRequest) -> str:
        key = self._api_key()

        system_parts = [request.system] if request.system else []
        messages = []
        for turn in request.turns():
            if turn["role"] == "system":
                system_parts.append(turn["content"])
            else:
                messages.append(turn)
        if not messages and request.prompt:
            messages.append({"role": "user", "content": request.prompt})
        if not messages:
            raise InvalidRequestError("No messages provided")

        payload = {
            "model": self._model(request),
            "system": "\n\n".join(system_parts) or DEFAULT_SYSTEM,
            "messages": messages,
            "max_tokens": MAX_TOKENS,
        }
        resp, body = self._post(
            self._cfg.base_url or ANTHROPIC_URL,
            payload,
            headers={
                "x-api-key": key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
        )
        self._check_status(resp, body)

        text = dig(self._require_body(body), "content", 0, "text")
        if text is None:
            raise MalformedResponseError("claude response has no text content")
        return text
