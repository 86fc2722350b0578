"""Kroki transport: token encoding, HTTP client and SVG sanitizing."""

from .encoder import decode_diagram, encode_diagram
from .kroki_client import KrokiClient
from .sanitizer import sanitize_svg

__all__ = ["KrokiClient", "decode_diagram", "encode_diagram", "sanitize_svg"]
