"""Load newsletter configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _optional_str,
    _parse_template_ids,
    _require_str,
    parse_base_url,
)
from .models import (
    NewsletterConfig,
    NewsletterConfigError,
    UnsecuredMirrorConfig,
    VirtualHostConfig,
)


def load_newsletter_config(path: Path) -> NewsletterConfig:
    """Load the YAML configuration describing hosts, mirrors, and templates.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/newsletter.yaml``).

    Returns
    -------
    NewsletterConfig
        Parsed configuration with the portal base URL, virtual hosts, the
        optional unsecured mirror, and template settings.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    NewsletterConfigError
        If required fields are missing or invalid.
    InvalidBaseUrlError
        If one of the configured base URLs cannot be parsed.

    Examples
    --------
    >>> from pathlib import Path
    >>> from newsletter_builder.config import load_newsletter_config
    >>> config = load_newsletter_config(Path("config/newsletter.yaml"))  # doctest: +SKIP
    >>> config.base_url  # doctest: +SKIP
    'https://news.example.org/app/'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    base_url = _require_str(raw, "base_url", "Newsletter configuration")
    parse_base_url(base_url)

    templates_raw = raw.get("templates") or {}
    if not isinstance(templates_raw, dict):
        msg = "'templates' must be a mapping."
        raise NewsletterConfigError(msg)
    templates_dir = _optional_str(templates_raw.get("dir"))
    if templates_dir is not None and not Path(templates_dir).is_absolute():
        templates_dir = str(path.parent / templates_dir)

    return NewsletterConfig(
        base_url=base_url,
        virtual_hosts=_build_virtual_hosts(raw.get("virtual_hosts")),
        unsecured=_build_unsecured_config(raw.get("unsecured")),
        templates_dir=Path(templates_dir) if templates_dir else None,
        newsletter_templates=_parse_template_ids(templates_raw.get("newsletters")),
        document_template=_optional_str(templates_raw.get("document"))
        or "document.jinja",
        output=Path(raw.get("output") or "public/newsletter.html"),
    )


def _build_virtual_hosts(payload: object | None) -> list[VirtualHostConfig]:
    """Build the list of virtual hosts, skipping entries that are not mappings."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        msg = "'virtual_hosts' must be a list."
        raise NewsletterConfigError(msg)
    hosts: list[VirtualHostConfig] = []
    for entry in payload:
        match entry:
            case dict():
                code = _require_str(entry, "code", "Virtual host")
                base_url = _require_str(entry, "base_url", f"Virtual host '{code}'")
                parse_base_url(base_url, label=f"base URL of virtual host '{code}'")
                hosts.append(
                    VirtualHostConfig(
                        code=code,
                        name=_optional_str(entry.get("name")) or code,
                        base_url=base_url,
                    )
                )
            case _:
                continue
    return hosts


def _build_unsecured_config(
    payload: typ.Mapping[str, typ.Any] | None,
) -> UnsecuredMirrorConfig | None:
    """Build the unsecured mirror settings when the block is present."""
    if not payload:
        return None
    if not isinstance(payload, dict):
        msg = "'unsecured' must be a mapping."
        raise NewsletterConfigError(msg)
    base_url = _require_str(payload, "base_url", "Unsecured mirror")
    parse_base_url(base_url, label="unsecured base URL")
    return UnsecuredMirrorConfig(
        base_url=base_url,
        folder_path=_require_str(payload, "folder_path", "Unsecured mirror"),
        folder=_optional_str(payload.get("folder")) or "",
    )


__all__ = ["load_newsletter_config"]
