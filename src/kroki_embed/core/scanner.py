"""Find diagram descriptions in generated HTML and swap in rendered SVG.

A diagram block is a ``code`` or ``div`` element carrying a
``language-<lang>`` class for one of :data:`SUPPORTED_LANGUAGES`, which
is what Markdown renderers emit for fenced code blocks::

    <pre><code class="language-mermaid">graph TD; A-->B;</code></pre>
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

from bs4 import BeautifulSoup

from .languages import SUPPORTED_LANGUAGES
from .models import DiagramBlock, Document

if TYPE_CHECKING:
    from ..render.kroki_client import KrokiClient

logger = logging.getLogger(__name__)

DIAGRAM_TAGS: tuple[str, ...] = ("code", "div")

_HTML_PARSER = "html.parser"


def _attached(element, soup: BeautifulSoup) -> bool:
    return any(parent is soup for parent in element.parents)


def iter_diagram_blocks(soup: BeautifulSoup) -> Iterator[DiagramBlock]:
    """Yield diagram blocks language by language, then tag by tag, then
    in document order.

    Each (language, tag) query runs when the previous one is exhausted,
    so elements replaced by the caller in the meantime are not yielded.
    """
    for language in SUPPORTED_LANGUAGES:
        for tag in DIAGRAM_TAGS:
            for element in soup.find_all(tag, class_=f"language-{language}"):
                if not _attached(element, soup):
                    continue
                yield DiagramBlock(
                    language=language,
                    tag=tag,
                    text=element.get_text(),
                    element=element,
                )


def find_diagram_blocks(html: str) -> list[DiagramBlock]:
    """Return every diagram block in *html* without rendering anything."""
    return list(iter_diagram_blocks(BeautifulSoup(html, _HTML_PARSER)))


async def process_document(client: "KrokiClient", doc: Document) -> int:
    """Render every diagram in *doc* and return how many were embedded.

    ``doc.content`` is assigned once, after the last block rendered.  The
    first render error propagates and leaves ``doc.content`` untouched.
    """
    soup = BeautifulSoup(doc.content, _HTML_PARSER)
    rendered = 0

    for block in iter_diagram_blocks(soup):
        if rendered == 0:
            logger.info(
                "Rendering diagrams in '%s' using Kroki instance '%s'",
                doc.name, client.base_url,
            )
        svg = await client.render(block.language, block.text)
        block.element.replace_with(BeautifulSoup(svg, _HTML_PARSER))
        rendered += 1
        logger.debug("Embedded %s diagram #%d in '%s'", block.language, rendered, doc.name)

    if rendered:
        doc.content = str(soup)
    return rendered
