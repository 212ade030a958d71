"""Call the vision model and turn its reply into an ExtractionResult.

The call policy is an ordered tuple of :class:`Attempt` objects.  Each attempt
issues one model call and parses the reply with its own parser; the first
attempt that produces an object with an ``items`` list wins.  A transport
failure on any attempt aborts immediately.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from wordsnap.config import MAX_WORDS, Settings
from wordsnap.errors import RecoveryFailure
from wordsnap.normalizer import normalize
from wordsnap.prompts import EXTRACT_SYSTEM, format_extract_prompt
from wordsnap.providers.base import ModelRequest
from wordsnap.recovery import parse_content, recover
from wordsnap.scripts import HANGUL_ENGLISH, ScriptClassifier

if TYPE_CHECKING:
    from wordsnap.models import ExtractionResult
    from wordsnap.providers.base import VisionProvider

_log = logging.getLogger("wordsnap.extract")


@dataclass(frozen=True)
class Attempt:
    label: str
    structured: bool
    parser: Callable[[str], dict | None]


DEFAULT_ATTEMPTS: tuple[Attempt, ...] = (
    Attempt("structured", structured=True, parser=parse_content),
    Attempt("fallback", structured=False, parser=recover),
)


def has_items(data) -> bool:
    return isinstance(data, dict) and isinstance(data.get("items"), list)


def build_extract_request(
    image: bytes,
    mime: str = "image/jpeg",
    max_words: int = MAX_WORDS,
    max_tokens: int = 1400,
    temperature: float = 0.0,
) -> ModelRequest:
    return ModelRequest(
        system=EXTRACT_SYSTEM,
        prompt=format_extract_prompt(max_words),
        image=image,
        mime=mime or "image/jpeg",
        max_tokens=max_tokens,
        temperature=temperature,
    )


async def run_attempts(
    provider: VisionProvider,
    request: ModelRequest,
    attempts: tuple[Attempt, ...] = DEFAULT_ATTEMPTS,
) -> dict:
    """Run *attempts* in order and return the first usable payload.

    ``TransportError`` from the provider propagates unchanged.
    """
    for i, attempt in enumerate(attempts, 1):
        _log.info("Extract via %s (attempt %d/%d: %s)",
                  provider.name(), i, len(attempts), attempt.label)
        raw = await provider.complete(request, structured=attempt.structured)
        data = attempt.parser(raw)
        if has_items(data):
            _log.info("  %s OK: %d candidates", attempt.label, len(data["items"]))
            return data
        _log.info("  %s failed: no usable JSON", attempt.label)
        _log.debug("  Raw response: %.300s", raw)
    _log.warning("Model reply could not be recovered after %d attempts", len(attempts))
    raise RecoveryFailure()


async def extract_candidates(
    provider: VisionProvider,
    image: bytes,
    mime: str = "image/jpeg",
    attempts: tuple[Attempt, ...] = DEFAULT_ATTEMPTS,
    settings: Settings | None = None,
) -> list:
    s = settings or Settings()
    request = build_extract_request(
        image, mime,
        max_words=s.word_limit,
        max_tokens=s.extract_max_tokens,
        temperature=s.temperature,
    )
    data = await run_attempts(provider, request, attempts)
    return data["items"]


async def analyze_image(
    provider: VisionProvider,
    image: bytes,
    mime: str = "image/jpeg",
    settings: Settings | None = None,
    classifier: ScriptClassifier = HANGUL_ENGLISH,
    attempts: tuple[Attempt, ...] = DEFAULT_ATTEMPTS,
) -> ExtractionResult:
    """Extract candidates from *image* and normalize them."""
    s = settings or Settings()
    candidates = await extract_candidates(provider, image, mime, attempts, settings=s)
    return normalize(candidates, classifier, limit=s.word_limit)
