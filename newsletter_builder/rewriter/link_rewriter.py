"""Rewrite URL references found in newsletter HTML fragments.

Newsletters are rendered inside the portal but read in email clients, so every
image, link, form, stylesheet, and script reference must survive outside the
portal's context. This module scans a fragment for the URL-bearing constructs
of one :class:`~newsletter_builder.rewriter.models.ElementKind` at a time and
rewrites the values in place:

* :meth:`HtmlDocument.convert_all_relative_urls` resolves relative URLs
  against the portal base URL.
* :meth:`HtmlDocument.convert_urls_to_unsecured_urls` moves resources stored
  under a secured folder onto a public mirror host.

Markup is located with patterns rather than a full parser so that malformed
fragments are tolerated; anything that does not match is left as is and only
the characters of a rewritten URL value change.

Examples
--------
>>> absolutize_urls('<img src="/images/a.png">', "https://news.example.org/app")
'<img src="https://news.example.org/images/a.png">'
>>> absolutize_urls('<a href="https://other.org/x">', "https://news.example.org/")
'<a href="https://other.org/x">'
"""

from __future__ import annotations

import dataclasses as dc
import functools
import posixpath
import re
import typing as typ
from urllib.parse import urljoin, urlsplit

from ..config.helpers import parse_base_url
from ..config.models import NewsletterConfigError
from .models import ABSOLUTIZE_KINDS, MIRROR_KINDS, ElementKind

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    Transform = cabc.Callable[[str], str | None]
    ValueRewrite = cabc.Callable[[str], str]

SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")
ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<name>[^\s"'<>/=]+)"""
    r"""(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=<>`]+)))?"""
)
CSS_URL_PATTERN = re.compile(
    r"""(?<![\w-])url\(\s*"""
    r"""(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^"'()\s]*))\s*\)""",
    re.IGNORECASE,
)
ANY_TAG = r"[A-Za-z][\w:-]*"
_COMMENT = r"(?P<comment><!--.*?(?:-->|\Z))"
_START_TAG_BODY = r"""(?=[\s/>])(?:"[^"]*"|'[^']*'|[^'">])*>"""
STYLE_BLOCK_PATTERN = re.compile(
    rf"{_COMMENT}|(?P<open><style{_START_TAG_BODY})(?P<body>.*?)(?=</style\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_VALUE_GROUPS = ("dq", "sq", "bare")
_DEFAULT_PORTS = {"http": 80, "https": 443}


@functools.cache
def _tag_pattern(tag: str) -> re.Pattern[str]:
    """Return a pattern matching a whole start tag or an HTML comment.

    Quoted ``>`` characters do not end the tag. Comments are matched so that
    callers can pass them through untouched.
    """
    return re.compile(
        rf"{_COMMENT}|<(?P<tag>{tag}){_START_TAG_BODY}", re.IGNORECASE | re.DOTALL
    )


def is_absolute_url(url: str) -> bool:
    """Return True when ``url`` must not be resolved against a base URL.

    Schemes (``https:``, ``mailto:``, ``javascript:``, ``data:`` ...),
    protocol-relative references, fragment-only anchors, and empty values all
    count as absolute.
    """
    if not url or url.startswith(("#", "//")):
        return True
    return SCHEME_PATTERN.match(url) is not None


def _split_suffix(url: str) -> tuple[str, str]:
    """Split ``url`` into its path part and the raw ``?query#fragment`` tail."""
    cut = len(url.split("#", 1)[0].split("?", 1)[0])
    return url[:cut], url[cut:]


def _normalize_path(path: str) -> str:
    """Collapse ``.`` and ``..`` segments of an absolute path.

    ``..`` never climbs above the root and a directory path keeps its
    trailing slash.
    """
    normalized = posixpath.normpath(path or "/")
    if normalized != "/" and path.endswith(("/", "/.", "/..")):
        normalized = f"{normalized}/"
    return normalized


def _effective_port(scheme: str, port: int | None) -> int | None:
    """Return ``port``, or None when it is the default port of ``scheme``."""
    return None if port == _DEFAULT_PORTS.get(scheme.lower()) else port


@dc.dataclass(frozen=True, slots=True)
class BaseUrl:
    """Parsed base URL split into origin and directory path."""

    origin: str
    hostname: str
    port: int | None
    directory: str

    @classmethod
    def parse(cls, value: str, *, label: str = "base URL") -> BaseUrl:
        """Parse ``value``, treating its path as a directory.

        Raises
        ------
        InvalidBaseUrlError
            If ``value`` is not an absolute http(s) URL.
        """
        parsed = parse_base_url(value, label=label)
        stripped = parsed.path.strip("/")
        directory = _normalize_path(f"/{stripped}/") if stripped else "/"
        return cls(
            origin=f"{parsed.scheme}://{parsed.netloc}",
            hostname=(parsed.hostname or "").lower(),
            port=_effective_port(parsed.scheme, parsed.port),
            directory=directory,
        )

    def resolve(self, url: str) -> str:
        """Return ``url`` resolved against this base, keeping its query/fragment."""
        path, suffix = _split_suffix(url)
        return f"{urljoin(f'{self.origin}{self.directory}', path)}{suffix}"

    def owns(self, hostname: str | None, port: int | None) -> bool:
        """Return True when ``hostname``/``port`` designate this host.

        ``port`` is expected without its scheme default, see
        :func:`_effective_port`.
        """
        return (hostname or "").lower() == self.hostname and port == self.port


@dc.dataclass(frozen=True, slots=True)
class UnsecuredMirror:
    """Destination of resources moved off the secured host."""

    target: BaseUrl
    prefixes: tuple[str, ...]
    folder: str

    @classmethod
    def build(
        cls,
        base: BaseUrl,
        unsecured_base_url: str,
        unsecured_folder_path: str,
        unsecured_folder: str | None,
    ) -> UnsecuredMirror:
        """Validate the mirror settings and precompute the eligible prefixes.

        The folder path is matched both from the host root and below the base
        URL directory; the longest prefix wins.

        Raises
        ------
        InvalidBaseUrlError
            If ``unsecured_base_url`` is not an absolute http(s) URL.
        NewsletterConfigError
            If ``unsecured_folder_path`` is empty.
        """
        target = BaseUrl.parse(unsecured_base_url, label="unsecured base URL")
        folder_path = (unsecured_folder_path or "").strip().strip("/")
        if not (unsecured_folder_path or "").strip():
            msg = "Missing unsecured folder path."
            raise NewsletterConfigError(msg)
        candidates = {
            _normalize_path(f"/{folder_path}").rstrip("/"),
            _normalize_path(f"{base.directory}{folder_path}").rstrip("/"),
        }
        prefixes = tuple(sorted(candidates, key=len, reverse=True))
        return cls(
            target=target,
            prefixes=prefixes,
            folder=(unsecured_folder or "").strip().strip("/"),
        )

    def relocate(self, path: str) -> str | None:
        """Return the mirror URL path for ``path`` or None when out of scope."""
        for prefix in self.prefixes:
            if path != prefix and not path.startswith(f"{prefix}/"):
                continue
            remainder = path[len(prefix) :]
            root = self.target.directory.rstrip("/")
            if self.folder:
                return f"{root}/{self.folder}{remainder}"
            return f"{root}{remainder or '/'}"
        return None


class HtmlDocument:
    """A mutable HTML fragment whose URL references can be rewritten.

    Each conversion processes a single element kind and operates on the
    output of the previous one; callers chain conversions to cover several
    kinds.
    """

    def __init__(self, content: str | None, base_url: str) -> None:
        """Wrap ``content`` and parse ``base_url``.

        Parameters
        ----------
        content : str or None
            HTML fragment; ``None`` is treated as an empty fragment.
        base_url : str
            Absolute http(s) URL the relative references are resolved
            against. A missing trailing slash is implied.

        Raises
        ------
        InvalidBaseUrlError
            If ``base_url`` cannot be parsed.
        """
        self.content = content or ""
        self.base = BaseUrl.parse(base_url)

    def convert_all_relative_urls(self, kind: ElementKind) -> None:
        """Resolve every relative URL of ``kind`` against the base URL."""
        self._rewrite(kind, self._absolutize)

    def convert_urls_to_unsecured_urls(
        self,
        kind: ElementKind,
        unsecured_base_url: str,
        unsecured_folder_path: str,
        unsecured_folder: str | None,
    ) -> None:
        """Move URLs of ``kind`` under the secured folder onto the mirror host.

        Parameters
        ----------
        kind : ElementKind
            Construct to process.
        unsecured_base_url : str
            Public host (and optional path) receiving the resources.
        unsecured_folder_path : str
            Folder path on the secured host marking eligible resources, such
            as ``/secure/img``.
        unsecured_folder : str or None
            Folder substituted for ``unsecured_folder_path`` on the mirror.
        """
        mirror = UnsecuredMirror.build(
            self.base, unsecured_base_url, unsecured_folder_path, unsecured_folder
        )
        self._rewrite(kind, functools.partial(self._unsecure, mirror=mirror))

    def _absolutize(self, url: str) -> str | None:
        if is_absolute_url(url):
            return None
        return self.base.resolve(url)

    def _unsecure(self, url: str, *, mirror: UnsecuredMirror) -> str | None:
        if url.startswith("#"):
            return None
        if url.startswith("//"):
            absolute = f"{self.base.origin.split('//', 1)[0]}{url}"
        elif SCHEME_PATTERN.match(url):
            absolute = url
        else:
            absolute = self.base.resolve(url)
        head, suffix = _split_suffix(absolute)
        parsed = urlsplit(head)
        if parsed.scheme.lower() not in ("http", "https"):
            return None
        try:
            port = _effective_port(parsed.scheme, parsed.port)
        except ValueError:  # malformed port in the fragment, not our host
            return None
        if not self.base.owns(parsed.hostname, port):
            return None
        path = mirror.relocate(_normalize_path(parsed.path))
        if path is None:
            return None
        return f"{mirror.target.origin}{path}{suffix}"

    def _rewrite(self, kind: ElementKind, transform: Transform) -> None:
        if not self.content:
            return
        rewrite_url = functools.partial(_rewrite_url, transform=transform)
        rewritten = _tag_pattern(kind.tag).sub(
            lambda match: _rewrite_tag(match, kind.attribute, rewrite_url),
            self.content,
        )
        if kind is ElementKind.CSS:
            rewrite_css = functools.partial(_rewrite_css, transform=transform)
            rewritten = _tag_pattern(ANY_TAG).sub(
                lambda match: _rewrite_tag(match, "style", rewrite_css), rewritten
            )
            rewritten = STYLE_BLOCK_PATTERN.sub(
                lambda match: _rewrite_style_block(match, rewrite_css), rewritten
            )
        self.content = rewritten


def _rewrite_tag(match: re.Match[str], attribute: str, rewrite: ValueRewrite) -> str:
    """Rewrite the first ``attribute`` value inside a matched start tag.

    Comments matched alongside tags are returned unchanged.
    """
    tag_text = match.group(0)
    if match.group("comment") is not None:
        return tag_text
    offset = match.end("tag") - match.start()
    for found in ATTRIBUTE_PATTERN.finditer(tag_text, offset):
        if found.group("name").lower() != attribute:
            continue
        rewritten = _replace_value(found, rewrite)
        return tag_text[: found.start()] + rewritten + tag_text[found.end() :]
    return tag_text


def _rewrite_style_block(match: re.Match[str], rewrite_css: ValueRewrite) -> str:
    if match.group("comment") is not None:
        return match.group(0)
    return match.group("open") + rewrite_css(match.group("body"))


def _rewrite_css(css: str, *, transform: Transform) -> str:
    """Rewrite every ``url(...)`` token of a stylesheet or style attribute."""
    rewrite_url = functools.partial(_rewrite_url, transform=transform)
    return CSS_URL_PATTERN.sub(lambda match: _replace_value(match, rewrite_url), css)


def _rewrite_url(value: str, *, transform: Transform) -> str:
    """Apply ``transform`` to a URL value, keeping the padding around it."""
    stripped = value.strip()
    if not stripped:
        return value
    replacement = transform(stripped)
    if replacement is None:
        return value
    leading = value[: len(value) - len(value.lstrip())]
    trailing = value[len(value.rstrip()) :]
    return f"{leading}{replacement}{trailing}"


def _replace_value(match: re.Match[str], rewrite: ValueRewrite) -> str:
    """Return the matched text with its value group passed through ``rewrite``."""
    text = match.group(0)
    group = next((name for name in _VALUE_GROUPS if match.group(name) is not None), None)
    if group is None:
        return text
    value = match.group(group)
    replacement = rewrite(value)
    if replacement == value:
        return text
    start = match.start(group) - match.start()
    end = match.end(group) - match.start()
    return f"{text[:start]}{replacement}{text[end:]}"


def absolutize_urls(
    html: str | None,
    base_url: str,
    element_kinds: cabc.Iterable[ElementKind] = ABSOLUTIZE_KINDS,
) -> str:
    """Resolve relative URLs of each kind in turn against ``base_url``.

    Parameters
    ----------
    html : str or None
        Fragment to rewrite; ``None`` or ``""`` yields ``""``.
    base_url : str
        Absolute portal URL.
    element_kinds : iterable of ElementKind, optional
        Kinds processed in order. Defaults to IMG, A, FORM, CSS, JAVASCRIPT.

    Returns
    -------
    str
        The rewritten fragment.

    Raises
    ------
    InvalidBaseUrlError
        If ``base_url`` cannot be parsed; no pass is applied.
    """
    if not html:
        return ""
    document = HtmlDocument(html, base_url)
    for kind in element_kinds:
        document.convert_all_relative_urls(kind)
    return document.content


def mirror_to_unsecured(
    html: str | None,
    base_url: str,
    unsecured_base_url: str,
    unsecured_folder_path: str,
    unsecured_folder: str | None,
    element_kinds: cabc.Iterable[ElementKind] = MIRROR_KINDS,
) -> str:
    """Move secured-folder URLs of each kind onto the unsecured mirror.

    URLs outside ``unsecured_folder_path`` on the ``base_url`` host are never
    altered.

    Raises
    ------
    InvalidBaseUrlError
        If either base URL cannot be parsed; no pass is applied.
    NewsletterConfigError
        If ``unsecured_folder_path`` is empty.
    """
    if not html:
        return ""
    document = HtmlDocument(html, base_url)
    # validate mirror settings before the first pass
    UnsecuredMirror.build(
        document.base, unsecured_base_url, unsecured_folder_path, unsecured_folder
    )
    for kind in element_kinds:
        document.convert_urls_to_unsecured_urls(
            kind, unsecured_base_url, unsecured_folder_path, unsecured_folder
        )
    return document.content


def rewrite_urls(html: str | None, base_url: str) -> str:
    """Absolutize images, links, forms, stylesheets, and scripts."""
    return absolutize_urls(html, base_url, ABSOLUTIZE_KINDS)


def rewrite_img_urls(
    html: str | None,
    base_url: str,
    unsecured_base_url: str,
    unsecured_folder_path: str,
    unsecured_folder: str | None,
) -> str:
    """Move secured image and link URLs onto the unsecured mirror."""
    return mirror_to_unsecured(
        html,
        base_url,
        unsecured_base_url,
        unsecured_folder_path,
        unsecured_folder,
        MIRROR_KINDS,
    )


__all__ = [
    "BaseUrl",
    "HtmlDocument",
    "UnsecuredMirror",
    "absolutize_urls",
    "is_absolute_url",
    "mirror_to_unsecured",
    "rewrite_img_urls",
    "rewrite_urls",
]
