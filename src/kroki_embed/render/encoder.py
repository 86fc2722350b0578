"""Encode diagram text into the token Kroki expects in a GET path.

Kroki decodes ``base64url`` then inflates, so the token is the zlib
deflate stream (default compression level) of the UTF-8 text, base64
encoded with the ``-``/``_`` alphabet and its ``=`` padding kept.
See https://docs.kroki.io/kroki/setup/encode-diagram/.
"""

from __future__ import annotations

import base64
import zlib


def encode_diagram(text: str) -> str:
    """Return the URL-safe transport token for *text*."""
    compressed = zlib.compress(text.encode("utf-8"))
    return base64.urlsafe_b64encode(compressed).decode("ascii")


def decode_diagram(token: str) -> str:
    """Inverse of :func:`encode_diagram`; raises ValueError for bad tokens."""
    compressed = base64.urlsafe_b64decode(token.encode("ascii"))
    try:
        raw = zlib.decompress(compressed)
    except zlib.error as exc:
        raise ValueError(str(exc)) from None
    return raw.decode("utf-8")
