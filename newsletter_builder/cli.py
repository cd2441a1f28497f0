"""Cyclopts CLI entrypoint for building portable newsletter HTML.

The ``newsletter`` console script defined here rewrites relative URLs in
rendered HTML fragments, moves secured images onto a public mirror, prints the
rendering order of a newsletter's sections, and composes a complete newsletter
from sections and their fragments. Settings missing from the command line are
read from ``config/newsletter.yaml``.

Examples
--------
Absolutize every reference in a fragment:

>>> from newsletter_builder.cli import app
>>> app.run(
...     ["absolutize", "fragment.html", "--base-url", "https://news.example.org/"]
... )  # doctest: +SKIP

Compose the newsletter configured in the default file:

>>> from newsletter_builder.cli import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .composer import NewsletterComposer
from .config import NewsletterConfig, NewsletterConfigError, load_newsletter_config
from .rewriter import (
    ABSOLUTIZE_KINDS,
    MIRROR_KINDS,
    ElementKind,
    absolutize_urls,
    mirror_to_unsecured,
)
from .sections import load_sections, order_sections

DEFAULT_CONFIG = Path("config/newsletter.yaml")

app = App(name="newsletter", config=cyclopts.config.Env("NEWSLETTER_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_optional_config(path: Path) -> NewsletterConfig | None:
    """Load ``path`` when it exists; a missing default file is not an error."""
    if not path.exists():
        return None
    return load_newsletter_config(path)


def _resolve_setting(
    value: str | None, fallback: str | None, name: str
) -> str:
    """Return ``value`` or the configured ``fallback``, raising when both are unset."""
    resolved = value or fallback
    if not resolved:
        msg = f"Missing {name}: pass it on the command line or set it in the config."
        raise NewsletterConfigError(msg)
    return resolved


def _parse_kinds(
    kinds: list[str] | None, default: tuple[ElementKind, ...]
) -> tuple[ElementKind, ...]:
    if not kinds:
        return default
    return tuple(ElementKind.parse(kind) for kind in kinds)


def _emit(html: str, output: Path | None) -> None:
    """Write ``html`` to ``output`` or print it when no output is given."""
    if output is None:
        print(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


@app.command(help="Rewrite relative URLs of an HTML fragment into absolute URLs.")
def absolutize(
    source: Path,
    *,
    base_url: typ.Annotated[
        str | None,
        Parameter(help="Portal base URL", env_var="NEWSLETTER_BASE_URL"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to newsletter config", env_var="NEWSLETTER_CONFIG")
    ] = DEFAULT_CONFIG,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the result here instead of stdout")
    ] = None,
    kind: typ.Annotated[
        list[str] | None,
        Parameter(help="Element kinds to process, in order (default: all)"),
    ] = None,
) -> None:
    """Absolutize the URLs of ``source`` and write or print the result.

    Parameters
    ----------
    source : Path
        HTML fragment to rewrite.
    base_url : str or None, optional
        Base URL relative references are resolved against; defaults to the
        ``base_url`` of the configuration file.
    config : Path, optional
        Path to the ``newsletter.yaml`` configuration file.
    output : Path or None, optional
        Destination file; the HTML is printed when ``None``.
    kind : list[str] or None, optional
        Element kinds (``IMG``, ``A``, ``FORM``, ``CSS``, ``JAVASCRIPT``) to
        process in the given order.

    Raises
    ------
    NewsletterConfigError
        If no base URL is available or it cannot be parsed.
    """
    settings = _load_optional_config(config)
    resolved_base = _resolve_setting(
        base_url, settings.base_url if settings else None, "base URL"
    )
    html = source.read_text(encoding="utf-8")
    rewritten = absolutize_urls(
        html, resolved_base, _parse_kinds(kind, ABSOLUTIZE_KINDS)
    )
    _emit(rewritten, output)


@app.command(help="Move secured image and link URLs onto the unsecured mirror.")
def mirror(
    source: Path,
    *,
    base_url: typ.Annotated[
        str | None,
        Parameter(help="Secured portal base URL", env_var="NEWSLETTER_BASE_URL"),
    ] = None,
    unsecured_base_url: typ.Annotated[
        str | None, Parameter(help="Public mirror base URL")
    ] = None,
    unsecured_folder_path: typ.Annotated[
        str | None, Parameter(help="Secured folder path eligible for the mirror")
    ] = None,
    unsecured_folder: typ.Annotated[
        str | None, Parameter(help="Folder name used on the mirror")
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to newsletter config", env_var="NEWSLETTER_CONFIG")
    ] = DEFAULT_CONFIG,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the result here instead of stdout")
    ] = None,
    kind: typ.Annotated[
        list[str] | None,
        Parameter(help="Element kinds to process, in order (default: IMG, A)"),
    ] = None,
) -> None:
    """Rewrite secured-folder URLs of ``source`` to the unsecured mirror."""
    settings = _load_optional_config(config)
    configured = settings.unsecured if settings else None
    resolved_base = _resolve_setting(
        base_url, settings.base_url if settings else None, "base URL"
    )
    target = _resolve_setting(
        unsecured_base_url,
        configured.base_url if configured else None,
        "unsecured base URL",
    )
    folder_path = _resolve_setting(
        unsecured_folder_path,
        configured.folder_path if configured else None,
        "unsecured folder path",
    )
    folder = unsecured_folder
    if folder is None:
        folder = configured.folder if configured else ""
    html = source.read_text(encoding="utf-8")
    rewritten = mirror_to_unsecured(
        html,
        resolved_base,
        target,
        folder_path,
        folder,
        _parse_kinds(kind, MIRROR_KINDS),
    )
    _emit(rewritten, output)


@app.command(help="Print the rendering order of newsletter sections.")
def order(
    sections: Path,
    *,
    newsletter_id: typ.Annotated[
        int | None, Parameter(help="Only list sections of this newsletter")
    ] = None,
) -> None:
    """Print ``category order id title`` for each section in rendering order."""
    loaded = load_sections(sections, newsletter_id=newsletter_id)
    for section in order_sections(loaded):
        print(f"{section.category}\t{section.order}\t{section.id}\t{section.title}")


@app.command(help="Compose a newsletter from sections and their HTML fragments.")
def build(
    sections: Path,
    *,
    fragments: typ.Annotated[
        Path, Parameter(help="Directory holding one <section id>.html per section")
    ],
    config: typ.Annotated[
        Path, Parameter(help="Path to newsletter config", env_var="NEWSLETTER_CONFIG")
    ] = DEFAULT_CONFIG,
    newsletter_id: typ.Annotated[
        int | None, Parameter(help="Only include sections of this newsletter")
    ] = None,
    template_id: typ.Annotated[
        int | None, Parameter(help="Newsletter template id from the config")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Override the configured output file")
    ] = None,
) -> None:
    """Compose the newsletter and write it to the configured output.

    Raises
    ------
    FileNotFoundError
        If the configuration or sections file does not exist.
    """
    settings = load_newsletter_config(config)
    loaded = load_sections(sections, newsletter_id=newsletter_id)
    bodies: dict[int, str] = {}
    for section in loaded:
        fragment_path = fragments / f"{section.id}.html"
        if fragment_path.exists():
            bodies[section.id] = fragment_path.read_text(encoding="utf-8")
    written = NewsletterComposer(settings).run(
        loaded, bodies, template_id=template_id, output=output
    )
    print(f"wrote {_format_path(written)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `newsletter` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
