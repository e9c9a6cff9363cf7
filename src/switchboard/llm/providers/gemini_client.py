from __future__ import annotations

import base64
import mimetypes
import os
from typing import Any, Dict, List

from ..errors import InvalidRequestError, MalformedResponseError
from ..types import LLMRequest
from ._http import HttpHandler, dig

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]

_ROLE_MAP = {"user": "user", "assistant": "model"}


def media_mime_type(path: str) -> str:
    if os.path.splitext(path)[1].lower() == ".mkv":
        return "video/x-matroska"
    guessed, _ = mimetypes.guess_type(path)
    return guessed or "video/mp4"


def _inline_media(path: str) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            data = base64.b64encode(fh.read()).decode("ascii")
    except OSError as e:
        raise InvalidRequestError(f"Cannot read media file {path}: {e}") from e
    return {"inline_data": {"mime_type": media_mime_type(path), "data": data}}


class GeminiLLM(HttpHandler):
    """Gemini generateContent over REST.

    - `system` and system-role turns become `systemInstruction`.
    - `media_path` attaches a file (usually video) to the last user turn.
    - `json_mode` asks for an application/json response.
    """

    name = "gemini"

    def _contents(self, request: LLMRequest) -> tuple[List[Dict[str, Any]], List[str]]:
        system: List[str] = [request.system] if request.system else []
        contents: List[Dict[str, Any]] = []
        for turn in request.turns():
            if turn["role"] == "system":
                system.append(turn["content"])
                continue
            contents.append(
                {"role": _ROLE_MAP.get(turn["role"], "user"), "parts": [{"text": turn["content"]}]}
            )
        if not contents:
            contents.append({"role": "user", "parts": [{"text": request.prompt or ""}]})

        if request.media_path:
            contents[-1]["parts"].append(_inline_media(request.media_path))
        return contents, system

    def _complete(self, request: LLMRequest) -> str:
        key = self._api_key()
        model = self._model(request)
        contents, system = self._contents(request)

        payload: Dict[str, Any] = {
            "contents": contents,
            "safetySettings": SAFETY_SETTINGS,
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": "\n\n".join(system)}]}
        if request.json_mode:
            payload["generationConfig"] = {"responseMimeType": "application/json"}

        url = (self._cfg.base_url or GEMINI_URL).format(model=model)
        resp, body = self._post(
            url,
            payload,
            headers={"x-goog-api-key": key, "Content-Type": "application/json"},
        )
        self._check_status(resp, body)

        text = dig(self._require_body(body), "candidates", 0, "content", "parts", 0, "text")
        if text is None:
            raise MalformedResponseError("gemini response has no candidate text")
        return text
