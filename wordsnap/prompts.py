"""Prompt templates for sheet extraction and batch meanings."""
from __future__ import annotations

EXTRACT_SYSTEM = (
    "You perform OCR on printed or handwritten vocabulary sheets. "
    "Return compact JSON only."
)

EXTRACT_PROMPT = """\
Return ONLY minified JSON (no code fences, no commentary):
{{"items":[{{"word":"string","meaning":"string"}}]}}

Extraction rules:
- Extract up to {max_words} DISTINCT ENGLISH WORDS a human can read from the image.
- If a KOREAN meaning is VISIBLE near a word, COPY it VERBATIM into meaning.
- If no Korean meaning is visible, provide a SHORT Korean dictionary meaning \
for the word (do not translate sentences, just the common sense).
- STRICTLY IGNORE table headers like "순위, 명사, 동사, 형용사" and row numbers (1,2,3...).
- Words must be lowercase ASCII; allow apostrophes/hyphens; no numeric-only tokens.
- Korean is only allowed in meaning.
"""

MEANINGS_SYSTEM = (
    "You translate English vocabulary into short Korean dictionary meanings. "
    "Return only JSON."
)

MEANINGS_PROMPT = """\
Return ONLY compact JSON with Korean meanings:
{{"items":[{{"word":"string","meaning":"string"}}]}}
Rules:
- Input is English vocabulary words (no sentences).
- Provide the most common Korean dictionary meaning for each word (짧고 일반적인 의미).
- Do NOT add romanization or pronunciation. Do NOT add examples. Do NOT add POS.
Words:
{words}
"""

# Appended to the system prompt for providers without a native JSON mode.
JSON_ONLY_SUFFIX = " Respond with a single JSON object and nothing else."


def format_extract_prompt(max_words: int) -> str:
    return EXTRACT_PROMPT.format(max_words=max_words)


def format_meanings_prompt(words: list[str]) -> str:
    return MEANINGS_PROMPT.format(words=", ".join(words))
