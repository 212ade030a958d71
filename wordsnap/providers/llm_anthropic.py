from __future__ import annotations

import os

from wordsnap.errors import ModelUnreachable, TransportError
from wordsnap.prompts import JSON_ONLY_SUFFIX
from wordsnap.providers.base import ModelRequest, VisionProvider


class AnthropicProvider(VisionProvider):
    def __init__(self, model: str = "claude-sonnet-4-20250514"):
        import anthropic
        self._anthropic = anthropic
        self.client = anthropic.AsyncAnthropic(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        )
        self.model = model

    async def complete(self, request: ModelRequest, structured: bool = True) -> str:
        content: list[dict] = []
        if request.image is not None:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": request.mime,
                    "data": request.image_b64(),
                },
            })
        content.append({"type": "text", "text": request.prompt})
        # No JSON mode in the Messages API; the system prompt carries the constraint.
        system = request.system + (JSON_ONLY_SUFFIX if structured else "")
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except self._anthropic.APIStatusError as e:
            raise TransportError(e.status_code, e.response.text, source="Anthropic") from e
        except self._anthropic.APIConnectionError as e:
            raise ModelUnreachable("Anthropic", str(e)) from e
        return "".join(b.text for b in message.content if getattr(b, "type", "") == "text")

    def name(self) -> str:
        return f"anthropic/{self.model}"
