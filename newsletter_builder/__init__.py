"""Utilities for building newsletters that render outside the portal.

This package orders newsletter sections and rewrites the URLs of rendered HTML
fragments so that images, links, forms, stylesheets, and scripts resolve in
email clients. It also exposes the CLI entry points used by ``newsletter``.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``absolutize_urls`` / ``mirror_to_unsecured``: URL rewriting passes.
- ``order_sections``: Sort sections by category, then order.

Examples
--------
>>> from newsletter_builder import absolutize_urls
>>> absolutize_urls('<img src="a.png">', "https://news.example.org/app/")
'<img src="https://news.example.org/app/a.png">'
>>> from newsletter_builder import app
>>> isinstance(app.name, tuple)  # doctest: +SKIP
True
"""

from __future__ import annotations

from .cli import app, main
from .rewriter import ElementKind, absolutize_urls, mirror_to_unsecured
from .sections import NewsletterSection, compare_sections, order_sections

__all__ = [
    "ElementKind",
    "NewsletterSection",
    "absolutize_urls",
    "app",
    "compare_sections",
    "main",
    "mirror_to_unsecured",
    "order_sections",
]
