"""kroki_embed: embed Kroki-rendered diagrams into generated HTML."""

__version__ = "0.3.0"

from .core.errors import (
    ConfigurationError,
    ContentTypeError,
    DocumentError,
    KrokiEmbedError,
    RenderError,
    TransportError,
)
from .core.models import Document, DocumentKind, KrokiSettings, OutputFormat, Site
from .pipeline import embed_site, embed_site_async, is_embeddable

__all__ = [
    "__version__",
    "ConfigurationError",
    "ContentTypeError",
    "Document",
    "DocumentError",
    "DocumentKind",
    "KrokiEmbedError",
    "KrokiSettings",
    "OutputFormat",
    "RenderError",
    "Site",
    "TransportError",
    "embed_site",
    "embed_site_async",
    "is_embeddable",
]
