"""Pick the meaning shown for each extracted word.

Three sources, in order of trust:

1. the meaning copied from the image (or synthesized during extraction),
2. the batch translator, queried once for every word still without one,
3. nothing.

``translate_enabled`` switches meanings off entirely.  ``image_has_meaning``
is the caller's assertion that the sheet already printed meanings; when set,
the extracted meaning is used as-is and no fallback is consulted.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wordsnap.models import ExtractionRecord, ReconciledRecord
from wordsnap.scripts import HANGUL_ENGLISH, ScriptClassifier
from wordsnap.translator import lookup

if TYPE_CHECKING:
    from wordsnap.models import ExtractionResult
    from wordsnap.translator import MeaningTranslator

_log = logging.getLogger("wordsnap.meanings")


def choose_meaning(
    record: ExtractionRecord,
    translate_enabled: bool,
    image_has_meaning: bool,
    batch: dict[str, str] | None = None,
    classifier: ScriptClassifier = HANGUL_ENGLISH,
) -> str:
    if not translate_enabled:
        return ""
    if image_has_meaning:
        return record.meaning
    if record.meaning and classifier.is_target(record.meaning):
        return record.meaning
    return lookup(batch, record.word)


def words_needing_translation(
    result: ExtractionResult,
    classifier: ScriptClassifier = HANGUL_ENGLISH,
) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for r in result:
        key = r.word.lower()
        if key in seen or classifier.is_target(r.meaning):
            continue
        seen.add(key)
        out.append(key)
    return out


async def fetch_batch(
    translator: MeaningTranslator | None,
    words: list[str],
) -> dict[str, str]:
    """Query *translator* once; any failure yields an empty mapping."""
    if translator is None or not words:
        return {}
    try:
        return await translator.translate(words) or {}
    except Exception as e:
        _log.warning("Batch meanings unavailable (%d words blank): %s", len(words), e)
        return {}


async def reconcile(
    result: ExtractionResult,
    translate_enabled: bool,
    image_has_meaning: bool,
    translator: MeaningTranslator | None = None,
    classifier: ScriptClassifier = HANGUL_ENGLISH,
) -> list[ReconciledRecord]:
    batch: dict[str, str] = {}
    if translate_enabled and not image_has_meaning:
        batch = await fetch_batch(translator, words_needing_translation(result, classifier))

    return [
        ReconciledRecord(
            word=r.word,
            displayed_meaning=choose_meaning(
                r, translate_enabled, image_has_meaning, batch, classifier
            ),
        )
        for r in result
    ]
