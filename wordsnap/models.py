from __future__ import annotations

from dataclasses import dataclass

from wordsnap.config import MAX_WORDS


@dataclass(frozen=True)
class ExtractionRecord:
    word: str
    meaning: str = ""

    def to_dict(self) -> dict:
        return {"word": self.word, "meaning": self.meaning}


@dataclass(frozen=True)
class ExtractionResult:
    """Ordered, capped, duplicate-free records from one image."""

    records: tuple[ExtractionRecord, ...] = ()

    def __post_init__(self):
        if len(self.records) > MAX_WORDS:
            raise ValueError(f"at most {MAX_WORDS} records allowed (got {len(self.records)})")
        seen: set[str] = set()
        for r in self.records:
            key = r.word.lower()
            if key in seen:
                raise ValueError(f"duplicate word: {r.word!r}")
            seen.add(key)

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, idx: int) -> ExtractionRecord:
        return self.records[idx]

    @property
    def words(self) -> list[str]:
        return [r.word for r in self.records]

    def to_list(self) -> list[dict]:
        return [r.to_dict() for r in self.records]


@dataclass
class ReconciledRecord:
    word: str
    displayed_meaning: str
    ipa: str = ""

    def to_dict(self) -> dict:
        return {"word": self.word, "meaning": self.displayed_meaning, "ipa": self.ipa}


@dataclass
class SheetRow:
    left_no: int
    right_no: int
    left: ReconciledRecord | None = None
    right: ReconciledRecord | None = None

    def to_list(self) -> list:
        def _cell(r: ReconciledRecord | None) -> tuple[str, str]:
            return (r.word, r.displayed_meaning) if r else ("", "")

        lw, lm = _cell(self.left)
        rw, rm = _cell(self.right)
        return [self.left_no, lw, lm, self.right_no, rw, rm]
