"""Typed dataclasses describing newsletter configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class NewsletterConfigError(ValueError):
    """Raised when the newsletter configuration is invalid or incomplete."""


class InvalidBaseUrlError(NewsletterConfigError):
    """Raised when a base URL cannot be parsed into a scheme and host."""


@dc.dataclass(slots=True)
class VirtualHostConfig:
    """A named portal host exposed to document templates."""

    code: str
    name: str
    base_url: str


@dc.dataclass(slots=True)
class UnsecuredMirrorConfig:
    """Public mirror used for resources that sit behind the secured host."""

    base_url: str
    folder_path: str
    folder: str = ""


@dc.dataclass(slots=True)
class NewsletterConfig:
    """A fully resolved newsletter configuration sourced from YAML."""

    base_url: str
    virtual_hosts: list[VirtualHostConfig] = dc.field(default_factory=list)
    unsecured: UnsecuredMirrorConfig | None = None
    templates_dir: Path | None = None
    newsletter_templates: dict[int, str] = dc.field(default_factory=dict)
    document_template: str = "document.jinja"
    output: Path = Path("public/newsletter.html")

    def template_path(self, template_id: int) -> str | None:
        """Return the template filename registered for ``template_id``.

        ``None`` is returned when the id is unknown or maps to an empty name,
        letting callers fall back to the default newsletter template.
        """
        filename = self.newsletter_templates.get(template_id)
        if not filename:
            return None
        return filename

    def virtual_host_urls(self) -> dict[str, str]:
        """Return the virtual host names mapped to their base URLs."""
        return {host.name: host.base_url for host in self.virtual_hosts}


__all__ = [
    "InvalidBaseUrlError",
    "NewsletterConfig",
    "NewsletterConfigError",
    "UnsecuredMirrorConfig",
    "VirtualHostConfig",
]
