"""Async HTTP client for a Kroki rendering server.

One :class:`KrokiClient` is opened per run and shared by every document
task; ``httpx.AsyncClient`` pools connections, so concurrent requests
reuse the same keep-alive sockets.

Usage::

    async with KrokiClient(settings) as client:
        svg = await client.render("mermaid", "graph TD; A-->B;")
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..core.errors import ContentTypeError, TransportError
from ..core.models import KrokiSettings, RetryPolicy
from .encoder import encode_diagram
from .sanitizer import sanitize_svg

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SVG_CONTENT_TYPE = "image/svg+xml"
_USER_AGENT = "kroki-embed"

_REQUEST_TIMEOUT_STATUS = 408

# Patched in tests to observe backoff without waiting
_sleep = asyncio.sleep


def _is_retryable_status(status_code: int) -> bool:
    return status_code == _REQUEST_TIMEOUT_STATUS or status_code >= 500


def render_path(language: str, text: str) -> str:
    """Request path (relative to the base URL) for one diagram."""
    return f"{language}/svg/{encode_diagram(text)}"


class KrokiClient:
    """Render diagram descriptions to SVG through a Kroki server.

    Parameters
    ----------
    settings
        Resolved connection settings (base URL, timeout, retries).
    transport
        Optional ``httpx`` transport; tests pass an ``httpx.MockTransport``.
    retry_policy
        Overrides the backoff derived from *settings*.
    """

    def __init__(
        self,
        settings: KrokiSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.settings = settings
        self.retry_policy = retry_policy or settings.retry_policy
        self._client = httpx.AsyncClient(
            base_url=settings.url,
            timeout=settings.http_timeout,
            transport=transport,
            headers={"User-Agent": _USER_AGENT},
        )

    @property
    def base_url(self) -> str:
        return self.settings.url

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "KrokiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def render(self, language: str, text: str) -> str:
        """Render *text* written in *language* and return sanitized SVG.

        Raises :class:`TransportError` once retries are exhausted (or at
        once for non-retryable error statuses) and
        :class:`ContentTypeError` when the server answers with anything
        but ``image/svg+xml``.
        """
        response = await self._get(render_path(language, text))

        content_type = response.headers.get("content-type")
        if content_type != SVG_CONTENT_TYPE:
            raise ContentTypeError(SVG_CONTENT_TYPE, content_type)

        return sanitize_svg(response.text)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get(self, path: str) -> httpx.Response:
        policy = self.retry_policy
        attempts = policy.max_retries + 1

        attempt = 0
        while True:
            logger.debug("GET %s/%s (attempt %d/%d)", self.base_url, path, attempt + 1, attempts)
            try:
                response = await self._client.get(path)
            except httpx.TransportError as exc:
                error = TransportError(
                    f"Request to Kroki failed: {exc.__class__.__name__}: {exc}",
                    attempts=attempt + 1,
                )
            else:
                if response.is_success:
                    return response
                error = TransportError(
                    f"Kroki returned HTTP {response.status_code}: {_error_body(response)}",
                    status_code=response.status_code,
                    attempts=attempt + 1,
                )
                if not _is_retryable_status(response.status_code):
                    raise error

            if attempt + 1 >= attempts:
                raise error

            wait = policy.delay(attempt)
            logger.warning(
                "Kroki request failed (attempt %d/%d): %s; retrying in %.2fs",
                attempt + 1, attempts, error, wait,
            )
            await _sleep(wait)
            attempt += 1


def _error_body(response: httpx.Response, limit: int = 500) -> str:
    body = response.text.strip()
    if len(body) > limit:
        body = body[:limit] + "..."
    return body or response.reason_phrase
