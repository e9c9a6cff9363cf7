from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import requests

from ..base import BaseHandler, LLMConfig
from ..errors import AuthenticationError, MalformedResponseError, NetworkOrHttpError


class HttpHandler(BaseHandler):
    """Handler that talks JSON over HTTP with a requests session."""

    def __init__(
        self,
        cfg: LLMConfig,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(cfg, api_key=api_key)
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[requests.Response, Any]:
        """POST `payload`; return the response and its decoded body (None if not JSON)."""
        try:
            resp = self.session.post(
                url, json=payload, headers=headers, timeout=self._cfg.timeout_s
            )
        except requests.exceptions.RequestException as e:
            raise NetworkOrHttpError(f"{self.name} request failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None
        return resp, body

    def _check_status(self, resp: requests.Response, body: Any) -> None:
        status = resp.status_code
        if status < 400:
            return
        detail = _error_detail(body) or (resp.text or "")[:200]
        if status in (401, 403):
            raise AuthenticationError(f"{self.name} rejected credentials ({status}): {detail}")
        raise NetworkOrHttpError(f"{self.name} HTTP {status}: {detail}")

    def _require_body(self, body: Any) -> Dict[str, Any]:
        if not isinstance(body, dict):
            raise MalformedResponseError(f"{self.name} returned a non-JSON body")
        return body


def _error_detail(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or "")
    if error:
        return str(error)
    return ""


def dig(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists; None when any step is missing."""
    for step in path:
        try:
            data = data[step]
        except (KeyError, IndexError, TypeError):
            return None
    return data
