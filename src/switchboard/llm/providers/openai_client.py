from __future__ import annotations

from typing import Any, Dict, Optional

import openai

from ..base import BaseHandler, LLMConfig
from ..errors import AuthenticationError, MalformedResponseError, NetworkOrHttpError
from ..types import LLMRequest


class OpenAILLM(BaseHandler):
    """OpenAI chat completions via the official SDK.

    The SDK client is built on first use so a missing key surfaces as an
    authentication failure on the call rather than at construction.
    """

    name = "openai"

    def __init__(
        self,
        cfg: LLMConfig,
        *,
        api_key: Optional[str] = None,
        client: Any = None,
    ):
        super().__init__(cfg, api_key=api_key)
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            kwargs: Dict[str, Any] = {"api_key": self._api_key()}
            if self._cfg.base_url:
                kwargs["base_url"] = self._cfg.base_url
            self._client = openai.OpenAI(**kwargs)
        return self._client

    def _complete(self, request: LLMRequest) -> str:
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": self._model(request),
            "messages": request.turns(),
            "timeout": self._cfg.timeout_s,
        }
        if request.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = client.chat.completions.create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise AuthenticationError(f"openai rejected credentials: {e}") from e
        except (openai.APIConnectionError, openai.APIStatusError) as e:
            raise NetworkOrHttpError(f"openai request failed: {e}") from e

        if not getattr(resp, "choices", None):
            raise MalformedResponseError("openai response has no choices")
        return resp.choices[0].message.content or ""
