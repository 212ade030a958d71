from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ModelRequest:
    system: str
    prompt: str
    image: bytes | None = None
    mime: str = "image/jpeg"
    max_tokens: int = 1400
    temperature: float = 0.0

    def image_b64(self) -> str:
        return base64.b64encode(self.image or b"").decode("ascii")

    def data_url(self) -> str:
        return f"data:{self.mime};base64,{self.image_b64()}"


class VisionProvider(ABC):
    @abstractmethod
    async def complete(self, request: ModelRequest, structured: bool = True) -> str:
        """Return the model's reply text.

        ``structured`` asks for a JSON-constrained reply where the backend
        supports it.  Non-success statuses raise ``TransportError``.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...
