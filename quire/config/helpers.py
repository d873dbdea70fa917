"""Utility helpers shared by the quire configuration loader."""

from __future__ import annotations

import datetime as dt
import typing as typ

from .models import SiteConfigError

RESERVED_DEFAULT_FIELDS = frozenset({"title"})
_SCALAR_TYPES = (str, int, float, bool, dt.date)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _section(raw: typ.Mapping[str, typ.Any], name: str) -> typ.Mapping[str, typ.Any]:
    """Return the mapping stored under ``name`` or an empty mapping."""
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{name}' must be a mapping."
        raise SiteConfigError(msg)
    return value


def _normalize_base_path(value: object | None) -> str:
    """Return ``value`` as a URL prefix with leading and trailing slashes."""
    text = _optional_str(value)
    if text is None:
        return "/"
    if "://" in text:
        return text if text.endswith("/") else f"{text}/"
    stripped = text.strip("/")
    return f"/{stripped}/" if stripped else "/"


def _normalize_extensions(value: object | None) -> tuple[str, ...] | None:
    """Return lower-case dotted suffixes, or None when nothing was configured."""
    if value is None:
        return None
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, list):
        msg = "'content.extensions' must be a string or a list of strings."
        raise SiteConfigError(msg)
    normalized: list[str] = []
    for item in items:
        text = str(item).strip().lower()
        if not text:
            continue
        suffix = text if text.startswith(".") else f".{text}"
        if suffix not in normalized:
            normalized.append(suffix)
    if not normalized:
        msg = "'content.extensions' must name at least one extension."
        raise SiteConfigError(msg)
    return tuple(normalized)


def _normalize_authors(value: object | None) -> list[str]:
    """Normalize an author string or list into a list of non-empty names."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        msg = "'site.authors' must be a string or a list of strings."
        raise SiteConfigError(msg)
    authors: list[str] = []
    for entry in value:
        text = _optional_str(entry)
        if text:
            authors.append(text)
    return authors


def _metadata_defaults(value: object | None) -> dict[str, typ.Any]:
    """Validate the front-matter defaults mapping."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = "'defaults.metadata' must be a mapping."
        raise SiteConfigError(msg)
    defaults: dict[str, typ.Any] = {}
    for key, entry in value.items():
        name = str(key)
        if name in RESERVED_DEFAULT_FIELDS:
            msg = f"'defaults.metadata.{name}' cannot be given a site-wide default."
            raise SiteConfigError(msg)
        if not isinstance(entry, _SCALAR_TYPES):
            msg = f"'defaults.metadata.{name}' must be a scalar value."
            raise SiteConfigError(msg)
        defaults[name] = entry
    return defaults


def _positive_int(value: object | None, *, name: str, default: int) -> int:
    """Return ``value`` as a positive integer, falling back to ``default``."""
    match value:
        case None:
            return default
        case bool():
            pass
        case int() if value >= 1:
            return value
    msg = f"'{name}' must be a positive integer."
    raise SiteConfigError(msg)


__all__ = [
    "RESERVED_DEFAULT_FIELDS",
    "_metadata_defaults",
    "_normalize_authors",
    "_normalize_base_path",
    "_normalize_extensions",
    "_optional_str",
    "_positive_int",
    "_section",
]
