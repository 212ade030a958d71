"""Script classification for source-language words and target-language meanings.

The normalizer and reconciler never test characters directly; they ask a
``ScriptClassifier``.  Swapping the classifier retargets the pipeline to a
different language pair.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

KOREAN_HEADERS = frozenset({
    "순위", "명사", "동사", "형용사", "형용사들", "단어", "뜻", "예문", "품사",
})

ENGLISH_LABELS = frozenset({
    "rank", "noun", "verb", "adjective", "adjectives", "adverb",
    "word", "words", "meaning", "example", "part-of-speech",
})


@dataclass(frozen=True)
class ScriptClassifier:
    name: str
    target_pattern: re.Pattern
    word_pattern: re.Pattern
    edge_pattern: re.Pattern
    noise_pattern: re.Pattern = re.compile(r"^[\d.,\-–—]+$")
    stoplist: frozenset[str] = field(default_factory=frozenset)

    def is_target(self, text: str | None) -> bool:
        return bool(text) and self.target_pattern.search(text) is not None

    def is_numeric_noise(self, text: str) -> bool:
        return self.noise_pattern.match(text) is not None

    def is_stopword(self, text: str) -> bool:
        return text in self.stoplist

    def canonicalize(self, word) -> str:
        """Trimmed, lowercased core with non-word edge characters removed."""
        if word is None:
            return ""
        return self.edge_pattern.sub("", str(word).strip().lower())

    def is_source_word(self, core: str) -> bool:
        return self.word_pattern.match(core) is not None


HANGUL_ENGLISH = ScriptClassifier(
    name="ko-en",
    target_pattern=re.compile(r"[가-힣]"),
    word_pattern=re.compile(r"^[a-z][a-z'-]*[a-z]$"),
    edge_pattern=re.compile(r"^[^a-z']+|[^a-z']+$"),
    stoplist=KOREAN_HEADERS | ENGLISH_LABELS,
)
