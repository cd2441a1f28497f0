"""Pure string helpers used around newsletter rendering and delivery."""

from __future__ import annotations

import mimetypes
import typing as typ
from urllib.parse import quote_plus, urlencode

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_CONTENT_TYPE = "application/octet-stream"
CSV_CONTENT_TYPE = "application/csv"

_JAVASCRIPT_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ('"', '\\"'),
    ("\r\n", "\\r"),
    ("\n", "\\n"),
)


def convert_for_javascript(text: str | None) -> str:
    """Escape ``text`` so it can be embedded in a JavaScript string literal.

    >>> convert_for_javascript("it's\\n")
    "it\\\\'s\\\\n"
    """
    if text is None:
        return ""
    result = text
    for needle, replacement in _JAVASCRIPT_ESCAPES:
        result = result.replace(needle, replacement)
    return result


def encode_for_url(text: str) -> str:
    """Form-encode ``text`` for use as a URL parameter value."""
    return quote_plus(text, encoding="utf-8")


def download_headers(filename: str, extension: str) -> dict[str, str]:
    """Return the response headers forcing ``filename`` to be downloaded.

    Parameters
    ----------
    filename : str
        Name proposed to the browser.
    extension : str
        File extension including the dot; ``.csv`` is always served as
        ``application/csv``.

    Returns
    -------
    dict[str, str]
        Header names mapped to values. The content type is guessed from the
        filename and defaults to ``application/octet-stream``.
    """
    if extension == ".csv":
        content_type = CSV_CONTENT_TYPE
    else:
        guessed, _encoding = mimetypes.guess_type(filename)
        content_type = guessed or DEFAULT_CONTENT_TYPE
    return {
        "Content-Disposition": f'attachment ;filename="{filename}"',
        "Content-Type": content_type,
        "Pragma": "public",
        "Expires": "0",
        "Cache-Control": "must-revalidate,post-check=0,pre-check=0",
    }


def add_parameters(url: str, name: str, values: cabc.Iterable[str]) -> str:
    """Append one ``name=value`` query parameter per value to ``url``."""
    encoded = urlencode([(name, value) for value in values])
    if not encoded:
        return url
    base, hash_mark, fragment = url.partition("#")
    separator = "&" if "?" in base else "?"
    if base.endswith(("?", "&")):
        separator = ""
    return f"{base}{separator}{encoded}{hash_mark}{fragment}"


__all__ = [
    "CSV_CONTENT_TYPE",
    "DEFAULT_CONTENT_TYPE",
    "add_parameters",
    "convert_for_javascript",
    "download_headers",
    "encode_for_url",
]
