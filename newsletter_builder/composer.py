"""Newsletter composition pipeline.

This module turns ordered sections and their rendered HTML fragments into a
single newsletter body ready for email delivery. ``NewsletterComposer`` loads
the Jinja templates, renders document blocks and the newsletter wrapper, and
then runs the URL rewriting passes so every reference works outside the
portal: relative URLs become absolute and, when an unsecured mirror is
configured, secured images are moved onto the public host.

Typical usage mirrors the ``newsletter build`` command:

>>> from pathlib import Path
>>> from newsletter_builder.config import load_newsletter_config
>>> composer = NewsletterComposer(load_newsletter_config(Path("config/newsletter.yaml")))  # doctest: +SKIP
>>> html = composer.compose(sections, {1: "<p>Hello</p>"})  # doctest: +SKIP

Templates are read from ``newsletter_builder/templates`` unless the
configuration or the caller provides another directory. Rendering relies on
Jinja2 with autoescape enabled; section fragments are trusted HTML and are
inserted as ``Markup``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from .rewriter import rewrite_img_urls, rewrite_urls
from .sections import group_sections_by_category, order_sections

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import NewsletterConfig
    from .sections import NewsletterSection

DEFAULT_NEWSLETTER_TEMPLATE = "newsletter.jinja"


class NewsletterComposer:
    """Render newsletters and document blocks from configuration."""

    def __init__(
        self, config: NewsletterConfig, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the composer and Jinja environment.

        Parameters
        ----------
        config : NewsletterConfig
            Parsed configuration providing the base URL, virtual hosts, the
            optional unsecured mirror, and template names.
        templates_dir : Path, optional
            Directory containing Jinja templates. Defaults to the configured
            directory, then to ``newsletter_builder/templates``.
        """
        self.config = config
        self.templates_dir = (
            templates_dir
            or config.templates_dir
            or Path(__file__).parent / "templates"
        )
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_document(
        self,
        document: typ.Mapping[str, typ.Any],
        *,
        portlet_id: int = 0,
        template: str | None = None,
    ) -> str:
        """Fill the document template with ``document`` and portal metadata.

        The template receives ``document``, ``base_url``,
        ``document_thumbnail``, ``document_portlet_id``, and
        ``virtual_hosts`` (virtual host names mapped to their base URLs).
        """
        context = {
            "document": document,
            "base_url": self.config.base_url,
            "document_thumbnail": document.get("thumbnail"),
            "document_portlet_id": portlet_id,
            "virtual_hosts": self.config.virtual_host_urls(),
        }
        name = template or self.config.document_template
        return self.env.get_template(name).render(**context)

    def compose(
        self,
        sections: cabc.Iterable[NewsletterSection],
        fragments: typ.Mapping[int, str],
        *,
        template_id: int | None = None,
    ) -> str:
        """Render the newsletter body and make its URLs portable.

        Parameters
        ----------
        sections : iterable of NewsletterSection
            Sections to include; they are ordered before rendering.
        fragments : Mapping[int, str]
            Rendered HTML per section id. Sections without a fragment render
            an empty body.
        template_id : int, optional
            Newsletter template id looked up in the configuration; unknown
            ids fall back to the default template.

        Returns
        -------
        str
            Newsletter HTML with absolute URLs, and secured images moved to
            the unsecured mirror when one is configured.

        Raises
        ------
        InvalidBaseUrlError
            If the configured base URLs cannot be parsed.
        """
        ordered = order_sections(sections)
        blocks = [
            {"section": section, "html": Markup(fragments.get(section.id, ""))}
            for section in ordered
        ]
        template_name = DEFAULT_NEWSLETTER_TEMPLATE
        if template_id is not None:
            template_name = (
                self.config.template_path(template_id) or DEFAULT_NEWSLETTER_TEMPLATE
            )
        html = self.env.get_template(template_name).render(
            blocks=blocks,
            categories=group_sections_by_category(ordered),
            base_url=self.config.base_url,
            virtual_hosts=self.config.virtual_host_urls(),
        )
        html = rewrite_urls(html, self.config.base_url)
        mirror = self.config.unsecured
        if mirror is not None:
            html = rewrite_img_urls(
                html,
                self.config.base_url,
                mirror.base_url,
                mirror.folder_path,
                mirror.folder,
            )
        return html

    def run(
        self,
        sections: cabc.Iterable[NewsletterSection],
        fragments: typ.Mapping[int, str],
        *,
        template_id: int | None = None,
        output: Path | None = None,
    ) -> Path:
        """Compose the newsletter and write it, returning the output path."""
        output_path = output or self.config.output
        output_path.parent.mkdir(parents=True, exist_ok=True)
        html = self.compose(sections, fragments, template_id=template_id)
        if not html.endswith("\n"):
            html += "\n"
        output_path.write_text(html, encoding="utf-8")
        return output_path


__all__ = ["DEFAULT_NEWSLETTER_TEMPLATE", "NewsletterComposer"]
