"""Resolve Kroki connection settings from a site configuration.

Settings live under a single ``kroki`` namespace::

    kroki:
      url: https://kroki.example.com
      http_retries: 3
      http_timeout: 15
      max_concurrent_docs: 8

Every key is optional.  Anything present but invalid is a
:class:`ConfigurationError`, which aborts the run before any document
is touched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .errors import ConfigurationError
from .models import DEFAULT_KROKI_URL, KrokiSettings

CONFIG_NAMESPACE = "kroki"
DEFAULT_CONFIG_FILENAME = "_config.yml"

_KNOWN_KEYS = ("url", "http_retries", "http_timeout", "max_concurrent_docs")


def _namespace(config: Mapping[str, Any] | None, source: str | None = None) -> Mapping[str, Any]:
    if not config:
        return {}
    section = config.get(CONFIG_NAMESPACE)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(
            f"'{CONFIG_NAMESPACE}' must be a mapping, got {type(section).__name__}",
            source=_where(source, CONFIG_NAMESPACE),
        )
    return section


def _where(source: str | None, key: str) -> str:
    return f"{source}: {key}" if source else key


def kroki_url(config: Mapping[str, Any] | None, *, source: str | None = None) -> str:
    """Return the base URL of the Kroki instance to render with.

    Falls back to ``https://kroki.io`` when the namespace or the ``url``
    key is missing; raises :class:`ConfigurationError` for anything that
    is not an absolute HTTP(S) URL.
    """
    url = _namespace(config, source).get("url")
    if url is None:
        return DEFAULT_KROKI_URL
    try:
        return KrokiSettings(url=url).url
    except ValidationError:
        raise ConfigurationError(
            f"'url' is not a valid HTTP URL: {url!r}",
            source=_where(source, f"{CONFIG_NAMESPACE}.url"),
        ) from None


def resolve_settings(
    config: Mapping[str, Any] | None,
    *,
    source: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> KrokiSettings:
    """Build :class:`KrokiSettings` from the ``kroki`` config namespace.

    *overrides* (e.g. CLI flags) win over values from the config; ``None``
    values in either are treated as missing.
    """
    section = dict(_namespace(config, source))
    if overrides:
        section.update({k: v for k, v in overrides.items() if v is not None})
    values = {
        key: section[key]
        for key in _KNOWN_KEYS
        if section.get(key) is not None
    }

    try:
        return KrokiSettings(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(p) for p in first["loc"]) or "?"
        raise ConfigurationError(
            f"invalid '{key}': {first['msg']}",
            source=_where(source, f"{CONFIG_NAMESPACE}.{key}"),
        ) from None


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML site configuration.  A missing file is an empty config."""
    path = Path(path).expanduser()
    if not path.exists():
        return {}

    raw = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"cannot parse YAML: {exc}", source=str(path)) from None

    if not isinstance(data, dict):
        raise ConfigurationError("top level must be a mapping", source=str(path))
    return data
