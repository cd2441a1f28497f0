"""Load and validate newsletter configuration YAML.

This subpackage parses the project's ``newsletter.yaml`` file and produces
typed dataclasses (:class:`NewsletterConfig`, :class:`UnsecuredMirrorConfig`,
:class:`VirtualHostConfig`) consumed by the URL rewriter, the composer, and the
CLI. The primary entry point is :func:`load_newsletter_config`, which checks
that every configured base URL is an absolute ``http(s)`` URL before any
rewriting happens.

Examples
--------
>>> from pathlib import Path
>>> from newsletter_builder.config import load_newsletter_config
>>> config = load_newsletter_config(Path("config/newsletter.yaml"))  # doctest: +SKIP
>>> config.unsecured.folder  # doctest: +SKIP
'pubimg'
"""

from .helpers import parse_base_url
from .loader import load_newsletter_config
from .models import (
    InvalidBaseUrlError,
    NewsletterConfig,
    NewsletterConfigError,
    UnsecuredMirrorConfig,
    VirtualHostConfig,
)

__all__ = [
    "InvalidBaseUrlError",
    "NewsletterConfig",
    "NewsletterConfigError",
    "UnsecuredMirrorConfig",
    "VirtualHostConfig",
    "load_newsletter_config",
    "parse_base_url",
]
