from __future__ import annotations

import logging
import os

from wordsnap.errors import ModelUnreachable, TransportError
from wordsnap.providers.base import ModelRequest, VisionProvider

log = logging.getLogger("wordsnap.llm")


class OpenAIProvider(VisionProvider):
    def __init__(self, model: str = "gpt-4o-mini"):
        import openai
        self._openai = openai
        self.client = openai.AsyncOpenAI(
            api_key=os.environ.get("OPENAI_API_KEY", ""),
        )
        self.model = model

    def _messages(self, request: ModelRequest) -> list[dict]:
        content: list[dict] = [{"type": "text", "text": request.prompt}]
        if request.image is not None:
            content.append({"type": "image_url", "image_url": {"url": request.data_url()}})
        return [
            {"role": "system", "content": request.system},
            {"role": "user", "content": content},
        ]

    async def complete(self, request: ModelRequest, structured: bool = True) -> str:
        kwargs: dict = {
            "model": self.model,
            "messages": self._messages(request),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if structured:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            resp = await self.client.chat.completions.create(**kwargs)
        except self._openai.APIStatusError as e:
            raise TransportError(e.status_code, e.response.text, source="OpenAI") from e
        except self._openai.APIConnectionError as e:
            raise ModelUnreachable("OpenAI", str(e)) from e
        text = resp.choices[0].message.content or ""
        log.debug("── RESPONSE (%s, structured=%s) ──\n%s", self.model, structured, text)
        return text

    def name(self) -> str:
        return f"openai/{self.model}"
