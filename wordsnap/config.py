from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

# Hard ceiling on words per sheet; the printed sheet has 60 cells.
MAX_WORDS = 60

DEFAULTS = {
    "llm_provider": "openai",
    "llm_model": "gpt-4o-mini",
    "ollama_url": "http://localhost:11434",
    "temperature": 0.0,
    "extract_max_tokens": 1400,
    "translate_max_tokens": 1200,
    "max_words": MAX_WORDS,
    "max_upload_mb": 10,
    "sheet_rows": 30,
    "fetch_pronunciations": False,
    "dictionary_url": "https://api.dictionaryapi.dev/api/v2/entries/en",
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    temperature: float = DEFAULTS["temperature"]
    extract_max_tokens: int = DEFAULTS["extract_max_tokens"]
    translate_max_tokens: int = DEFAULTS["translate_max_tokens"]
    max_words: int = DEFAULTS["max_words"]
    max_upload_mb: int = DEFAULTS["max_upload_mb"]
    sheet_rows: int = DEFAULTS["sheet_rows"]
    fetch_pronunciations: bool = DEFAULTS["fetch_pronunciations"]
    dictionary_url: str = DEFAULTS["dictionary_url"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def word_limit(self) -> int:
        return max(0, min(self.max_words, MAX_WORDS))

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "ollama_url": self.ollama_url,
            "temperature": self.temperature,
            "extract_max_tokens": self.extract_max_tokens,
            "translate_max_tokens": self.translate_max_tokens,
            "max_words": self.max_words,
            "max_upload_mb": self.max_upload_mb,
            "sheet_rows": self.sheet_rows,
            "fetch_pronunciations": self.fetch_pronunciations,
            "dictionary_url": self.dictionary_url,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        # Migrate: model -> llm_model
        if "model" in raw:
            raw.setdefault("llm_model", raw["model"])
            del raw["model"]
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
