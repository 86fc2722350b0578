"""Error taxonomy for the diagram-embedding pipeline.

Configuration errors abort a run.  Render errors are raised per diagram
block and fail the document they belong to; the orchestrator converts
them into :class:`DocumentError` and keeps going with sibling documents.
"""

from __future__ import annotations


class KrokiEmbedError(Exception):
    """Base class for every error raised by kroki_embed."""


class ConfigurationError(KrokiEmbedError, TypeError, ValueError):
    """Invalid site configuration (fatal for the whole run).

    Subclasses ``TypeError`` so callers written against the historical
    ``kroki_url`` contract keep working.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        if self.source:
            return f"{self.message} ({self.source})"
        return self.message


# ---------------------------------------------------------------------------
# Block-level errors
# ---------------------------------------------------------------------------

class RenderError(KrokiEmbedError):
    """A single diagram could not be turned into an embeddable image."""


class TransportError(RenderError):
    """Network failure, timeout, or error status from the Kroki server."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.attempts = attempts


class ContentTypeError(RenderError):
    """The server answered successfully but not with an SVG image."""

    def __init__(self, expected: str, received: str | None) -> None:
        super().__init__(
            f"Unexpected content type: expected '{expected}', "
            f"received '{received or 'none'}'"
        )
        self.expected = expected
        self.received = received


class SanitizeError(RenderError):
    """The returned image markup is not well-formed XML."""


# ---------------------------------------------------------------------------
# Document-level errors
# ---------------------------------------------------------------------------

class DocumentError(KrokiEmbedError):
    """Wraps the render error that made a whole document fail."""

    def __init__(self, document: str, cause: Exception) -> None:
        super().__init__(f"{document}: {cause}")
        self.document = document
        self.cause = cause
