from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional

from jsonschema import validate
from jsonschema.exceptions import ValidationError as _SchemaValidationError

from switchboard import logger as logger_mod

from .errors import LLMValidationError

log = logger_mod.get_logger()

EXTRACT_PROMPT = "Extract all the JSON from the below text:\n\n"

_FENCE = re.compile(r"```(?:[A-Za-z0-9_+-]*[ \t]*\n)?(.*?)```", re.DOTALL)
_MIN_OBJECT = re.compile(r"\{.*?\}", re.DOTALL)
_OUTER_SPAN = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)

_MISSING = object()


def parse_json(text: str) -> Any:
    """Parse JSON from a model response."""

    try:
        return json.loads(text)
    except Exception as e:  # noqa: BLE001
        raise LLMValidationError(f"Failed to parse JSON: {e}") from e


def validate_json(instance: Any, schema: dict[str, Any]) -> None:
    try:
        validate(instance=instance, schema=schema)
    except _SchemaValidationError as e:
        raise LLMValidationError(f"JSON schema validation failed: {e.message}") from e


def _try_parse(text: str) -> Any:
    try:
        return parse_json(text)
    except LLMValidationError:
        return _MISSING


def from_whole_text(text: str) -> Any:
    return _try_parse(text)


def from_fenced_block(text: str) -> Any:
    match = _FENCE.search(text)
    if not match:
        return _MISSING
    return _try_parse(match.group(1).strip())


def from_object_spans(text: str) -> Any:
    found = []
    for span in _MIN_OBJECT.findall(text):
        value = _try_parse(span)
        if value is not _MISSING:
            found.append(value)
    if not found:
        return _MISSING
    return found[0] if len(found) == 1 else found


def from_outer_span(text: str) -> Any:
    match = _OUTER_SPAN.search(text)
    if not match:
        return _MISSING
    return _try_parse(match.group(0))


STRATEGIES = (
    ("whole text", from_whole_text),
    ("fenced block", from_fenced_block),
    ("object spans", from_object_spans),
    ("outer span", from_outer_span),
)


class ResponseCoercer:
    """Best-effort conversion of free model text into JSON-like data.

    Strategies run in order and the first success wins. As a last resort the
    optional `extract` callable asks the model to pull the JSON out of its
    own text; that step runs at most once per coercion.
    """

    def __init__(self, extract: Optional[Callable[[str], Optional[str]]] = None):
        self._extract = extract

    def coerce(self, text: Any, *, allow_llm: bool = True) -> Any:
        if not isinstance(text, str) or not text.strip():
            return None

        for name, strategy in STRATEGIES:
            value = strategy(text)
            if value is not _MISSING:
                if name != "whole text":
                    log.info(f"Recovered JSON via {name}")
                return value

        if not allow_llm or self._extract is None:
            log.warning("Unable to recover JSON from model output")
            return None

        log.warning("Asking the model to extract JSON from its own output")
        try:
            cleaned = self._extract(EXTRACT_PROMPT + text)
        except Exception as e:  # noqa: BLE001
            log.error(f"JSON extraction call failed: {e}")
            return None
        return self.coerce(cleaned, allow_llm=False)
