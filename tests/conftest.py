"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from wordsnap.models import ExtractionRecord, ExtractionResult


class FakeProvider:
    """Scripted provider: returns (or raises) each response in turn.

    Plain class rather than AsyncMock, which trips over the ``name`` attribute.
    """

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self.calls: list[tuple] = []

    async def complete(self, request, structured: bool = True) -> str:
        idx = min(len(self.calls), len(self._responses) - 1)
        self.calls.append((request, structured))
        resp = self._responses[idx]
        if isinstance(resp, Exception):
            raise resp
        return resp

    def name(self) -> str:
        return "fake-llm"

    @property
    def call_count(self) -> int:
        return len(self.calls)


def _items_json(*pairs) -> str:
    return json.dumps(
        {"items": [{"word": w, "meaning": m} for w, m in pairs]},
        ensure_ascii=False,
    )


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def items_json():
    return _items_json


@pytest.fixture
def sheet_reply():
    """A clean structured reply for a small sheet."""
    return _items_json(
        ("cat", "고양이"),
        ("dog", "개"),
        ("apple", ""),
        ("run", "run"),
    )


@pytest.fixture
def sample_result():
    return ExtractionResult((
        ExtractionRecord("cat", "고양이"),
        ExtractionRecord("dog", ""),
        ExtractionRecord("apple", "fruit"),
        ExtractionRecord("bird", "새"),
    ))


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
