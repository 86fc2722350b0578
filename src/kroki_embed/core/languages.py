"""Diagram languages understood by the Kroki rendering service.

The list is static: querying the server's ``/health`` endpoint at
start-up costs a round trip and adds a failure mode for no benefit.
Bump :data:`LANGUAGES_VERSION` whenever the list is synced with a new
Kroki release.
"""

from __future__ import annotations

LANGUAGES_VERSION = "0.28.0"

SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "actdiag",
    "blockdiag",
    "bpmn",
    "bytefield",
    "c4plantuml",
    "d2",
    "dbml",
    "ditaa",
    "erd",
    "excalidraw",
    "graphviz",
    "mermaid",
    "nomnoml",
    "nwdiag",
    "packetdiag",
    "pikchr",
    "plantuml",
    "rackdiag",
    "seqdiag",
    "structurizr",
    "svgbob",
    "symbolator",
    "tikz",
    "umlet",
    "vega",
    "vegalite",
    "wavedrom",
    "wireviz",
)
