"""Utility helpers shared by the newsletter configuration loader."""

from __future__ import annotations

import typing as typ
from urllib.parse import SplitResult, urlsplit

from .models import InvalidBaseUrlError, NewsletterConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_str(payload: typ.Mapping[str, typ.Any], key: str, context: str) -> str:
    """Return the stripped string at ``key`` or raise when it is missing."""
    value = _optional_str(payload.get(key))
    if value is None:
        msg = f"{context} requires a non-empty '{key}'."
        raise NewsletterConfigError(msg)
    return value


def parse_base_url(value: str | None, *, label: str = "base URL") -> SplitResult:
    """Split ``value`` into URL components, rejecting anything without a host.

    Parameters
    ----------
    value : str or None
        Absolute URL such as ``https://news.example.org/app/``.
    label : str, optional
        Human readable name used in the error message.

    Returns
    -------
    SplitResult
        Parsed components of the URL.

    Raises
    ------
    InvalidBaseUrlError
        If the value is empty, lacks an ``http``/``https`` scheme or a host,
        or carries an invalid port.
    """
    text = (value or "").strip()
    if not text:
        msg = f"Missing {label}."
        raise InvalidBaseUrlError(msg)
    try:
        parsed = urlsplit(text)
        _ = parsed.port
    except ValueError as exc:
        msg = f"Invalid {label} {text!r}: {exc}"
        raise InvalidBaseUrlError(msg) from exc
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        msg = f"Invalid {label} {text!r}: expected an absolute http(s) URL."
        raise InvalidBaseUrlError(msg)
    return parsed


def _parse_template_ids(
    payload: typ.Mapping[typ.Any, typ.Any] | None,
) -> dict[int, str]:
    """Convert the ``templates.newsletters`` mapping into integer keys."""
    result: dict[int, str] = {}
    if not payload:
        return result
    for key, filename in payload.items():
        try:
            template_id = int(key)
        except (TypeError, ValueError) as exc:
            msg = f"Newsletter template id {key!r} is not an integer."
            raise NewsletterConfigError(msg) from exc
        result[template_id] = _optional_str(filename) or ""
    return result


__all__ = [
    "_optional_str",
    "_parse_template_ids",
    "_require_str",
    "parse_base_url",
]
