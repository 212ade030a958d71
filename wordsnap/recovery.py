"""Recover a JSON object from noisy model output.

Bounded, best-effort repair only: fences are stripped, the outermost
``{...}`` span is taken, single quotes are swapped when no double quotes
exist, and trailing commas are dropped.  Anything else is not recoverable.
"""
from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub(lambda m: m.group(1).strip(), text)


def recover(text: str | None) -> dict | None:
    """Return the JSON object embedded in *text*, or ``None``."""
    if not text:
        return None
    text = _strip_fences(text)

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    span = text[start : end + 1]

    if "'" in span and '"' not in span:
        span = span.replace("'", '"')
    span = _TRAILING_COMMA_RE.sub(r"\1", span)

    try:
        data = json.loads(span)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_content(text: str | None) -> dict | None:
    """Parse *text* as JSON directly, falling back to :func:`recover`."""
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return recover(text)
    return data if isinstance(data, dict) else recover(text)
