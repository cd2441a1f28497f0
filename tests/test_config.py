"""Unit tests for the newsletter configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from newsletter_builder.config import (
    InvalidBaseUrlError,
    NewsletterConfig,
    NewsletterConfigError,
    VirtualHostConfig,
    load_newsletter_config,
    parse_base_url,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FULL_CONFIG = """
base_url: https://news.example.org/app/
virtual_hosts:
  - code: public
    name: Public portal
    base_url: https://www.example.org/
  - code: intranet
    base_url: https://intra.example.org/
  - not a mapping
unsecured:
  base_url: https://public.example.org
  folder_path: /secure/img
  folder: pubimg
templates:
  dir: templates
  newsletters:
    1: weekly.jinja
    2: ""
  document: card.jinja
output: public/weekly.html
"""


@pytest.fixture
def write_config(tmp_path: Path) -> cabc.Callable[[str], Path]:
    """Return a helper writing YAML content to a temporary config file."""

    def _write(content: str) -> Path:
        path = tmp_path / "newsletter.yaml"
        path.write_text(dedent(content).strip() + "\n", encoding="utf-8")
        return path

    return _write


def test_load_full_config(write_config: cabc.Callable[[str], Path]) -> None:
    """Every block of the configuration file is parsed into dataclasses."""
    path = write_config(FULL_CONFIG)
    config = load_newsletter_config(path)

    assert config.base_url == "https://news.example.org/app/"
    assert config.virtual_hosts == [
        VirtualHostConfig("public", "Public portal", "https://www.example.org/"),
        VirtualHostConfig("intranet", "intranet", "https://intra.example.org/"),
    ], "expected non-mapping hosts to be skipped and names to default to codes"
    assert config.unsecured is not None, "expected the unsecured block to load"
    assert config.unsecured.folder_path == "/secure/img"
    assert config.unsecured.folder == "pubimg"
    assert config.templates_dir == path.parent / "templates", (
        "expected relative template dirs to resolve against the config file"
    )
    assert config.document_template == "card.jinja"
    assert config.output == Path("public/weekly.html")


def test_template_path_lookup(write_config: cabc.Callable[[str], Path]) -> None:
    """Unknown ids and empty filenames return None."""
    config = load_newsletter_config(write_config(FULL_CONFIG))
    assert config.template_path(1) == "weekly.jinja"
    assert config.template_path(2) is None
    assert config.template_path(3) is None


def test_virtual_host_urls() -> None:
    """Virtual hosts are exposed to templates as name -> base URL."""
    config = NewsletterConfig(
        base_url="https://news.example.org/",
        virtual_hosts=[VirtualHostConfig("pub", "Public", "https://www.example.org/")],
    )
    assert config.virtual_host_urls() == {"Public": "https://www.example.org/"}


def test_minimal_config_defaults(write_config: cabc.Callable[[str], Path]) -> None:
    """Only the base URL is required."""
    config = load_newsletter_config(write_config("base_url: https://news.example.org"))
    assert config.unsecured is None
    assert config.virtual_hosts == []
    assert config.templates_dir is None
    assert config.document_template == "document.jinja"
    assert config.output == Path("public/newsletter.html")


@pytest.mark.parametrize(
    ("content", "error", "message"),
    [
        ("output: x.html", NewsletterConfigError, "requires a non-empty 'base_url'"),
        ("base_url: news.example.org", InvalidBaseUrlError, "Invalid base URL"),
        (
            "base_url: https://news.example.org\nunsecured:\n  base_url: https://p.org",
            NewsletterConfigError,
            "folder_path",
        ),
        (
            "base_url: https://news.example.org\nunsecured:\n"
            "  base_url: p.org\n  folder_path: /x",
            InvalidBaseUrlError,
            "unsecured base URL",
        ),
        (
            "base_url: https://news.example.org\nvirtual_hosts: public",
            NewsletterConfigError,
            "must be a list",
        ),
        (
            "base_url: https://news.example.org\ntemplates:\n  newsletters:\n    x: a.jinja",
            NewsletterConfigError,
            "not an integer",
        ),
    ],
)
def test_invalid_configs_raise(
    write_config: cabc.Callable[[str], Path],
    content: str,
    error: type[Exception],
    message: str,
) -> None:
    """Missing or malformed values raise configuration errors."""
    with pytest.raises(error, match=message):
        load_newsletter_config(write_config(content))


def test_missing_config_file(tmp_path: Path) -> None:
    """A missing configuration file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_newsletter_config(tmp_path / "missing.yaml")


def test_top_level_must_be_mapping(write_config: cabc.Callable[[str], Path]) -> None:
    """A YAML list at the top level is rejected."""
    with pytest.raises(TypeError):
        load_newsletter_config(write_config("- base_url: https://x.org"))


def test_parse_base_url_accepts_http_and_https() -> None:
    """Absolute http(s) URLs parse into components."""
    parsed = parse_base_url("HTTPS://News.Example.org:8443/app")
    assert parsed.hostname == "news.example.org"
    assert parsed.port == 8443
    assert parse_base_url("http://localhost/").path == "/"
