"""Newsletter sections and the order they are rendered in.

Sections are grouped by ``category`` and ordered by ``order`` inside a
category. Two distinct sections sharing both values compare equal and are left
in their original relative order by the stable sort.

Examples
--------
>>> sections = [
...     NewsletterSection(1, 10, "doc", "News", category=2, order=1),
...     NewsletterSection(2, 10, "doc", "Events", category=1, order=5),
...     NewsletterSection(3, 10, "doc", "Editorial", category=1, order=2),
... ]
>>> [section.id for section in order_sections(sections)]
[3, 2, 1]
"""

from __future__ import annotations

import dataclasses as dc
import functools
import typing as typ

from ruamel.yaml import YAML

from .config import NewsletterConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

_INT_FIELDS = ("id", "newsletter_id", "category", "order")


@dc.dataclass(slots=True)
class NewsletterSection:
    """A composable newsletter block rendered by its section type.

    Attributes
    ----------
    id : int
        Unique section identifier.
    newsletter_id : int
        Identifier of the owning newsletter.
    section_type_code : str
        Key of the section type responsible for rendering.
    title : str
        Display title.
    category : int
        Grouping key; lower categories render first.
    order : int
        Position inside the category.
    """

    id: int
    newsletter_id: int
    section_type_code: str
    title: str
    category: int = 0
    order: int = 0


def compare_sections(a: NewsletterSection, b: NewsletterSection) -> int:
    """Return -1, 0, or 1 comparing ``a`` and ``b`` by category, then order.

    Sections with the same category and order compare equal even when they
    are different sections; no further field breaks the tie.
    """
    if a is b or a == b:
        return 0
    if a.category != b.category:
        return -1 if a.category < b.category else 1
    if a.order != b.order:
        return -1 if a.order < b.order else 1
    return 0


section_sort_key = functools.cmp_to_key(compare_sections)


def order_sections(
    sections: cabc.Iterable[NewsletterSection],
) -> list[NewsletterSection]:
    """Return a new list of ``sections`` in rendering order."""
    return sorted(sections, key=section_sort_key)


def group_sections_by_category(
    sections: cabc.Iterable[NewsletterSection],
) -> dict[int, list[NewsletterSection]]:
    """Return ordered sections grouped by ascending category."""
    grouped: dict[int, list[NewsletterSection]] = {}
    for section in order_sections(sections):
        grouped.setdefault(section.category, []).append(section)
    return grouped


def load_sections(
    path: Path, *, newsletter_id: int | None = None
) -> list[NewsletterSection]:
    """Load sections from a YAML list, optionally keeping one newsletter.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    NewsletterConfigError
        If the document is not a list of mappings or a numeric field is
        missing or not an integer.
    """
    if not path.exists():
        msg = f"Sections file '{path}' not found."
        raise FileNotFoundError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or []
    if not isinstance(loaded, list):
        msg = "Sections file must contain a list of sections."
        raise NewsletterConfigError(msg)

    sections = [_build_section(index, entry) for index, entry in enumerate(loaded)]
    if newsletter_id is None:
        return sections
    return [section for section in sections if section.newsletter_id == newsletter_id]


def _build_section(index: int, payload: object) -> NewsletterSection:
    """Build a NewsletterSection from one YAML entry."""
    if not isinstance(payload, dict):
        msg = f"Section #{index} must be a mapping."
        raise NewsletterConfigError(msg)
    values: dict[str, int] = {}
    for field in _INT_FIELDS:
        raw = payload.get(field, 0 if field in ("category", "order") else None)
        if isinstance(raw, bool) or raw is None:
            msg = f"Section #{index} requires an integer '{field}'."
            raise NewsletterConfigError(msg)
        try:
            values[field] = int(raw)
        except (TypeError, ValueError) as exc:
            msg = f"Section #{index} field '{field}' is not an integer: {raw!r}"
            raise NewsletterConfigError(msg) from exc
    return NewsletterSection(
        id=values["id"],
        newsletter_id=values["newsletter_id"],
        section_type_code=str(payload.get("section_type_code") or ""),
        title=str(payload.get("title") or ""),
        category=values["category"],
        order=values["order"],
    )


__all__ = [
    "NewsletterSection",
    "compare_sections",
    "group_sections_by_category",
    "load_sections",
    "order_sections",
    "section_sort_key",
]
