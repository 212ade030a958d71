from __future__ import annotations

import logging
import time

import httpx

from wordsnap.errors import ModelUnreachable, TransportError
from wordsnap.providers.base import ModelRequest, VisionProvider

log = logging.getLogger("wordsnap.llm")


class OllamaProvider(VisionProvider):
    def __init__(self, base_url: str = "http://localhost:11434", model: str = "qwen2.5vl:7b",
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._transport = transport

    def _body(self, request: ModelRequest, structured: bool) -> dict:
        user: dict = {"role": "user", "content": request.prompt}
        if request.image is not None:
            user["images"] = [request.image_b64()]
        body: dict = {
            "model": self.model,
            "messages": [{"role": "system", "content": request.system}, user],
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
        }
        if structured:
            body["format"] = "json"
        return body

    async def complete(self, request: ModelRequest, structured: bool = True) -> str:
        log.info("── PROMPT (%s, structured=%s) ──\n%s", self.model, structured, request.prompt)
        t0 = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.base_url}/api/chat",
                    json=self._body(request, structured),
                )
        except httpx.HTTPError as e:
            raise ModelUnreachable("Ollama", str(e)) from e
        if resp.is_error:
            raise TransportError(resp.status_code, resp.text, source="Ollama")
        elapsed = time.monotonic() - t0
        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            # Not the envelope we expected; let the caller try to recover it.
            return resp.text
        response = (data.get("message") or {}).get("content", "")
        tokens = data.get("eval_count", "?")
        log.info("── RESPONSE (%.1fs, %s tokens) ──\n%s", elapsed, tokens, response)
        return response

    def name(self) -> str:
        return f"ollama/{self.model}"
