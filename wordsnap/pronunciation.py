"""Best-effort IPA lookup from a free dictionary API."""
from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from wordsnap.models import ReconciledRecord

_log = logging.getLogger("wordsnap.ipa")


class PronunciationLookup:
    """Look up IPA transcriptions.

    The caller owns *client* and its lifetime; one client serves every
    lookup of an analysis.
    """

    def __init__(self, client: httpx.AsyncClient,
                 base_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def ipa(self, word: str) -> str:
        try:
            resp = await self.client.get(f"{self.base_url}/{quote(word)}")
            if resp.is_error:
                return ""
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            _log.debug("IPA lookup failed for %r: %s", word, e)
            return ""
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return ""
        for p in data[0].get("phonetics") or []:
            if isinstance(p, dict) and p.get("text"):
                return p["text"]
        return ""


async def annotate(records: list[ReconciledRecord], lookup: PronunciationLookup) -> list[ReconciledRecord]:
    for r in records:
        r.ipa = await lookup.ipa(r.word)
    return records
