"""Orchestration pipeline: embed rendered diagrams across a whole site.

Usage::

    from kroki_embed import embed_site

    rendered = embed_site(site)   # after the host rendered every page

One task is spawned per eligible document; an ``asyncio.Semaphore``
caps how many are in flight at once.  A failing document is logged and
skipped, it never aborts its siblings.  Only configuration errors end
the run early, before any task starts.

Running tasks cannot be cancelled individually; the run always waits
for every admitted document to finish.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

import httpx

from .core.config import resolve_settings
from .core.errors import DocumentError
from .core.models import Document, DocumentKind, KrokiSettings, OutputFormat, Site
from .core.scanner import process_document
from .render.kroki_client import KrokiClient

logger = logging.getLogger(__name__)


def is_embeddable(doc: Document) -> bool:
    """HTML output that is either a page or an explicitly written document."""
    return doc.output_format == OutputFormat.HTML and (
        doc.kind == DocumentKind.PAGE or doc.writable
    )


@dataclass
class RunResult:
    """Outcome of one embedding run."""

    rendered: int = 0
    processed: int = 0
    failures: list[DocumentError] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.processed - len(self.failures)


class SiteEmbedder:
    """Render diagrams in many documents over one shared Kroki connection.

    Parameters
    ----------
    settings
        Resolved connection settings; ``max_concurrent_docs`` sizes the
        admission gate.
    transport
        Optional ``httpx`` transport handed to :class:`KrokiClient`.
    """

    def __init__(
        self,
        settings: KrokiSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.transport = transport

    async def run(self, documents: Iterable[Document]) -> RunResult:
        docs = [doc for doc in documents if is_embeddable(doc)]
        result = RunResult(processed=len(docs))
        if not docs:
            return result

        gate = asyncio.Semaphore(self.settings.max_concurrent_docs)
        async with KrokiClient(self.settings, transport=self.transport) as client:
            outcomes = await asyncio.gather(
                *(self._embed_one(client, gate, doc) for doc in docs)
            )

        for outcome in outcomes:
            if isinstance(outcome, DocumentError):
                result.failures.append(outcome)
            else:
                result.rendered += outcome

        if result.rendered:
            logger.info(
                "Rendered %d diagram(s) using Kroki instance '%s'",
                result.rendered, self.settings.url,
            )
        return result

    async def _embed_one(
        self,
        client: KrokiClient,
        gate: asyncio.Semaphore,
        doc: Document,
    ) -> int | DocumentError:
        async with gate:
            try:
                return await process_document(client, doc)
            except Exception as exc:
                error = DocumentError(doc.name, exc)
                logger.warning("Failed to embed diagrams in '%s': %s", doc.name, exc)
                return error


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

async def embed_site_async(
    site: Site,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Embed diagrams in every eligible document of *site*.

    Returns the number of diagrams rendered.  Raises
    :class:`~kroki_embed.core.errors.ConfigurationError` before touching
    any document if the ``kroki`` configuration is invalid.
    """
    settings = resolve_settings(site.config, source=site.source)
    result = await SiteEmbedder(settings, transport=transport).run(site.documents)
    return result.rendered


def embed_site(site: Site) -> int:
    """Synchronous wrapper around :func:`embed_site_async`."""
    return asyncio.run(embed_site_async(site))
