"""Validate, clean and deduplicate model-reported word candidates."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from wordsnap.config import MAX_WORDS
from wordsnap.models import ExtractionRecord, ExtractionResult
from wordsnap.scripts import HANGUL_ENGLISH, ScriptClassifier

_log = logging.getLogger("wordsnap.extract")

MEANING_KEYS = ("meaning", "meaning_ko")


def clean_word(word, classifier: ScriptClassifier = HANGUL_ENGLISH) -> str:
    """Return the canonical word, or ``""`` if *word* is not vocabulary.

    Checks run in a fixed order: length, target script, numeric noise,
    stoplist, then the shape of the stripped core.
    """
    if word is None:
        return ""
    n = str(word).strip().lower()
    if len(n) < 2:
        return ""
    if classifier.is_target(n):
        return ""
    if classifier.is_numeric_noise(n):
        return ""
    if classifier.is_stopword(n):
        return ""
    core = classifier.canonicalize(n)
    if not classifier.is_source_word(core):
        return ""
    return core


def tidy_meaning(meaning, classifier: ScriptClassifier = HANGUL_ENGLISH) -> str:
    if meaning is None:
        return ""
    t = str(meaning).strip()
    if not t or not classifier.is_target(t):
        return ""
    if classifier.is_stopword(t):
        return ""
    return t


def _candidate_meaning(candidate: Mapping):
    for key in MEANING_KEYS:
        if candidate.get(key) is not None:
            return candidate[key]
    return None


def normalize(
    candidates: Iterable,
    classifier: ScriptClassifier = HANGUL_ENGLISH,
    limit: int = MAX_WORDS,
) -> ExtractionResult:
    limit = max(0, min(limit, MAX_WORDS))
    out: list[ExtractionRecord] = []
    seen: set[str] = set()
    rejected = 0

    for candidate in candidates:
        if len(out) >= limit:
            break
        if not isinstance(candidate, Mapping):
            rejected += 1
            continue
        word = clean_word(candidate.get("word"), classifier)
        if not word or word in seen:
            rejected += 1
            continue
        seen.add(word)
        meaning = tidy_meaning(_candidate_meaning(candidate), classifier)
        out.append(ExtractionRecord(word=word, meaning=meaning))

    _log.info("Normalized %d records (%d rejected)", len(out), rejected)
    return ExtractionResult(tuple(out))
