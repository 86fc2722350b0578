"""Pydantic models shared by the scanner, the client and the pipeline.

``Document`` and ``Site`` are the thin host-facing surface: whatever
static-site generator drives the pipeline wraps its own pages in these
models, and reads ``Document.content`` back once the run finishes.
"""

from __future__ import annotations

import random
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_KROKI_URL = "https://kroki.io"
DEFAULT_HTTP_RETRIES = 3
DEFAULT_HTTP_TIMEOUT = 15
DEFAULT_MAX_CONCURRENT_DOCS = 8

_HTTP_URL = TypeAdapter(AnyHttpUrl)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OutputFormat(str, Enum):
    """Output format of a generated document."""
    HTML = "html"
    XML = "xml"
    JSON = "json"
    OTHER = "other"

    @classmethod
    def from_suffix(cls, suffix: str) -> "OutputFormat":
        suffix = suffix.lower().lstrip(".")
        if suffix in ("html", "htm"):
            return cls.HTML
        if suffix == "xml":
            return cls.XML
        if suffix == "json":
            return cls.JSON
        return cls.OTHER


class DocumentKind(str, Enum):
    """Standalone pages vs. collection documents (posts, drafts, ...)."""
    PAGE = "page"
    DOCUMENT = "document"


# ---------------------------------------------------------------------------
# Site model
# ---------------------------------------------------------------------------

class Document(BaseModel):
    """A generated output unit.

    The pipeline only ever reads ``content`` and assigns it once, after
    every diagram in the document rendered successfully.
    """
    model_config = ConfigDict(validate_assignment=True)

    name: str
    output_format: OutputFormat = OutputFormat.HTML
    kind: DocumentKind = DocumentKind.PAGE
    writable: bool = True
    content: str = ""
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path: Path, *, root: Path | None = None, **kwargs: Any) -> "Document":
        """Build a page from a file on disk, named relative to *root*."""
        path = Path(path)
        name = str(path.relative_to(root)) if root is not None else path.name
        return cls(
            name=name,
            output_format=OutputFormat.from_suffix(path.suffix),
            content=path.read_text(encoding="utf-8"),
            path=path,
            **kwargs,
        )


class Site(BaseModel):
    """The collection of documents produced by one site build."""

    config: dict[str, Any] = Field(default_factory=dict)
    documents: list[Document] = Field(default_factory=list)
    #: Where ``config`` was loaded from; only used in diagnostics.
    source: Optional[str] = None


# ---------------------------------------------------------------------------
# Connection settings
# ---------------------------------------------------------------------------

class RetryPolicy(BaseModel):
    """Exponential backoff for transient transport failures.

    The n-th retry (0-based) waits ``interval * backoff_factor ** n``
    seconds, shifted by up to ``randomness`` of itself in either
    direction.
    """
    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=DEFAULT_HTTP_RETRIES, ge=0)
    interval: float = Field(default=0.1, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    randomness: float = Field(default=0.5, ge=0, le=1)

    def delay(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        base = self.interval * self.backoff_factor ** attempt
        jitter = base * self.randomness * (2 * rng() - 1)
        return max(0.0, base + jitter)


class KrokiSettings(BaseModel):
    """Resolved, immutable connection configuration for one run."""
    model_config = ConfigDict(frozen=True)

    url: str = DEFAULT_KROKI_URL
    http_retries: int = Field(default=DEFAULT_HTTP_RETRIES, ge=0)
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    max_concurrent_docs: int = Field(default=DEFAULT_MAX_CONCURRENT_DOCS, gt=0)

    @field_validator("url", mode="before")
    @classmethod
    def _check_http_url(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("must be a string")
        value = value.strip()
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError(f"'{value}' is not a valid HTTP URL") from None
        return value.rstrip("/")

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.http_retries)


# ---------------------------------------------------------------------------
# Scan results
# ---------------------------------------------------------------------------

class DiagramBlock(BaseModel):
    """A diagram description located in a parsed document.

    ``element`` is the BeautifulSoup tag; it is only valid while the
    tree it came from is alive.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    language: str
    tag: str
    text: str
    element: Any = Field(default=None, repr=False)
