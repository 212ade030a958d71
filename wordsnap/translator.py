"""Batch meaning lookup for words the image and extraction left blank."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wordsnap.errors import TranslationUnavailable, WordSnapError
from wordsnap.prompts import MEANINGS_SYSTEM, format_meanings_prompt
from wordsnap.providers.base import ModelRequest
from wordsnap.recovery import parse_content

if TYPE_CHECKING:
    from wordsnap.config import Settings
    from wordsnap.providers.base import VisionProvider

_log = logging.getLogger("wordsnap.meanings")


class MeaningTranslator:
    """Ask the model for short meanings of a whole word list in one call."""

    def __init__(self, provider: VisionProvider, max_tokens: int = 1200, temperature: float = 0.0):
        self.provider = provider
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_settings(cls, provider: VisionProvider, settings: Settings) -> MeaningTranslator:
        return cls(
            provider,
            max_tokens=settings.translate_max_tokens,
            temperature=settings.temperature,
        )

    async def translate(self, words: list[str]) -> dict[str, str]:
        words = _distinct_lower(words)
        if not words:
            return {}
        request = ModelRequest(
            system=MEANINGS_SYSTEM,
            prompt=format_meanings_prompt(words),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        _log.info("Batch meanings for %d words via %s", len(words), self.provider.name())
        try:
            raw = await self.provider.complete(request, structured=True)
        except WordSnapError as e:
            raise TranslationUnavailable(str(e)) from e

        data = parse_content(raw)
        if data is None or not isinstance(data.get("items"), list):
            raise TranslationUnavailable("Invalid JSON from model")

        mapping: dict[str, str] = {}
        for it in data["items"]:
            if not isinstance(it, dict):
                continue
            w = str(it.get("word") or "").strip().lower()
            m = str(it.get("meaning") or it.get("meaning_ko") or "").strip()
            if w and m:
                mapping.setdefault(w, m)
        _log.info("Batch meanings: %d/%d answered", len(mapping), len(words))
        return mapping


def _distinct_lower(words) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for w in words:
        key = str(w or "").strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(key)
    return out


def lookup(mapping: dict[str, str] | None, word: str) -> str:
    if not mapping:
        return ""
    return mapping.get(str(word).lower(), "")
