"""Failures raised by the extraction pipeline."""
from __future__ import annotations


class WordSnapError(Exception):
    """Base class for errors that abort an analysis."""


class TransportError(WordSnapError):
    """A model call returned a non-success status."""

    BODY_LIMIT = 800

    def __init__(self, status: int, body: str = "", source: str = "model"):
        self.status = status
        self.body = (body or "")[: self.BODY_LIMIT]
        self.source = source
        super().__init__(f"{source} {status}: {self.body}")


class ModelUnreachable(WordSnapError):
    """A model call never got a response (connection refused, timeout)."""

    def __init__(self, source: str, detail: str = ""):
        self.source = source
        super().__init__(f"{source} unreachable: {detail or 'no response'}")


class RecoveryFailure(WordSnapError):
    """No usable JSON object could be recovered from any model attempt."""

    def __init__(self, message: str = "invalid JSON from model"):
        super().__init__(message)


class NoFileError(WordSnapError):
    """The upload carried no usable image file."""

    def __init__(self, received: list[str], accepted: tuple[str, ...] = ()):
        self.received = list(received)
        self.accepted = tuple(accepted)
        wanted = accepted[0] if accepted else "image"
        super().__init__(
            f'No file received. Send "{wanted}" as multipart/form-data. '
            f"Got keys: [{', '.join(self.received)}]"
        )


class TranslationUnavailable(Exception):
    """The batch meaning service could not answer. Never fatal."""
