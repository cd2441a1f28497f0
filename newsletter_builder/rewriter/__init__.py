"""Rewrite URL references in newsletter HTML fragments."""

from .link_rewriter import (
    HtmlDocument,
    absolutize_urls,
    is_absolute_url,
    mirror_to_unsecured,
    rewrite_img_urls,
    rewrite_urls,
)
from .models import ABSOLUTIZE_KINDS, MIRROR_KINDS, ElementKind

__all__ = [
    "ABSOLUTIZE_KINDS",
    "MIRROR_KINDS",
    "ElementKind",
    "HtmlDocument",
    "absolutize_urls",
    "is_absolute_url",
    "mirror_to_unsecured",
    "rewrite_img_urls",
    "rewrite_urls",
]
