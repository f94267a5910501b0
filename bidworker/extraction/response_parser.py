"""Tolerant parsing of model output into a JSON object.

Models wrap JSON in prose and markdown, number their answers, and get cut
off mid-object when they hit an output limit. The parser cleans that up,
closes truncated containers and retries once with a more aggressive repair
before reporting a structured failure. It never raises.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

_SNIPPET_LENGTH = 200

_CODE_FENCE = re.compile(r"```[A-Za-z]*")
_SEPARATOR_LINE = re.compile(r"^\s*(?:-{3,}|={3,}|\*{3,})\s*$", re.MULTILINE)
_NUMBERED_PREFIX = re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_BACKSLASH = re.compile(r'\\(["\\/bfnrtu])|\\')

_CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one model response."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    snippet: str = ""


def parse_model_response(text: object) -> ParseOutcome:
    """Recover the JSON object contained in a raw model response.

    When a span fails to parse, the search resumes after it, so braces in
    leading prose do not hide a well-formed object that follows them.
    """
    if not isinstance(text, str) or not text.strip():
        return ParseOutcome(success=False, error="Empty model response")

    snippet = text.strip()[:_SNIPPET_LENGTH]
    cleaned = _clean(text)
    first_error: str | None = None
    start = cleaned.find("{")
    while start != -1:
        candidate, end = _extract_object_span(cleaned, start)
        try:
            parsed = _load(candidate)
        except json.JSONDecodeError as exc:
            if first_error is None:
                first_error = f"Invalid JSON after repair: {exc}"
            start = cleaned.find("{", end)
            continue
        if not isinstance(parsed, dict):
            return ParseOutcome(
                success=False, error="JSON response must be an object", snippet=snippet
            )
        return ParseOutcome(success=True, data=parsed, snippet=snippet)

    return ParseOutcome(
        success=False,
        error=first_error or "No JSON object found in model response",
        snippet=snippet,
    )


def _load(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return json.loads(_repair(candidate))


def _clean(text: str) -> str:
    cleaned = _CODE_FENCE.sub("", text)
    cleaned = _SEPARATOR_LINE.sub("", cleaned)
    return _NUMBERED_PREFIX.sub("", cleaned)


def _extract_object_span(text: str, start: int) -> tuple[str, int]:
    """Return the ``{...}`` span opening at ``start`` and the index past it.

    A span cut off by the end of the text is closed.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]":
            if stack:
                stack.pop()
            if not stack:
                return text[start : index + 1], index + 1

    tail = text[start:]
    if in_string:
        tail += '"'
    tail = tail.rstrip()
    if tail.endswith(","):
        tail = tail[:-1]
    return tail + "".join(_CLOSERS[opener] for opener in reversed(stack)), len(text)


def _repair(candidate: str) -> str:
    repaired = _TRAILING_COMMA.sub(r"\1", candidate)
    return _BACKSLASH.sub(_escape_stray_backslash, repaired)


def _escape_stray_backslash(match: re.Match[str]) -> str:
    if match.group(1) is not None:
        return match.group(0)
    return "\\\\"
