"""Strip ``<script>`` elements from SVG returned by the Kroki server.

This is deliberately minimal.  It does NOT neutralise event-handler
attributes (``onload=...``), ``javascript:`` links, external
references or ``<foreignObject>`` content; only trust Kroki instances
you control or consider safe.
"""

from __future__ import annotations

from lxml import etree

from ..core.errors import SanitizeError

_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=False,
    huge_tree=True,
)


def _is_script(element: etree._Element) -> bool:
    if not isinstance(element.tag, str):
        # comments and processing instructions
        return False
    return etree.QName(element).localname == "script"


def _drop(element: etree._Element) -> None:
    """Remove *element* and its subtree, keeping the text that follows it."""
    parent = element.getparent()
    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)


def sanitize_svg(markup: str) -> str:
    """Return *markup* with every ``script`` element removed.

    Matches ``script`` in any namespace and at any depth.  Raises
    :class:`SanitizeError` when *markup* is not well-formed XML.
    """
    try:
        root = etree.fromstring(markup.encode("utf-8"), parser=_PARSER)
    except etree.XMLSyntaxError as exc:
        raise SanitizeError(f"Rendered image is not well-formed XML: {exc}") from None

    if _is_script(root):
        return ""

    for script in [el for el in root.iter() if _is_script(el)]:
        _drop(script)

    return etree.tostring(root, encoding="unicode")
