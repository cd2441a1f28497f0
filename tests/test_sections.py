"""Unit tests for newsletter section ordering and loading."""

from __future__ import annotations

import itertools
import typing as typ
from textwrap import dedent

import pytest

from newsletter_builder.config import NewsletterConfigError
from newsletter_builder.sections import (
    NewsletterSection,
    compare_sections,
    group_sections_by_category,
    load_sections,
    order_sections,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def _section(section_id: int, category: int, order: int) -> NewsletterSection:
    return NewsletterSection(
        id=section_id,
        newsletter_id=10,
        section_type_code="document",
        title=f"Section {section_id}",
        category=category,
        order=order,
    )


def test_sections_sort_by_category_then_order() -> None:
    """Lower categories come first, then lower orders within a category."""
    sections = [_section(1, 2, 1), _section(2, 1, 5), _section(3, 1, 2)]
    ordered = order_sections(sections)
    assert [section.id for section in ordered] == [3, 2, 1], (
        f"unexpected order {[section.id for section in ordered]!r}"
    )
    assert [section.id for section in sections] == [1, 2, 3], (
        "expected the input list to be left untouched"
    )


def test_same_section_compares_equal() -> None:
    """A section compares equal to itself and to an equal copy."""
    section = _section(1, 1, 1)
    assert compare_sections(section, section) == 0
    assert compare_sections(section, _section(1, 1, 1)) == 0


def test_distinct_sections_sharing_position_compare_equal() -> None:
    """Ties on category and order are not broken by id or any other field."""
    first = _section(1, 1, 1)
    second = _section(2, 1, 1)
    assert first != second, "expected two distinct sections"
    assert compare_sections(first, second) == 0
    assert compare_sections(second, first) == 0


@pytest.mark.parametrize("ids", [(1, 2), (2, 1)])
def test_stable_sort_keeps_tied_sections_in_input_order(ids: tuple[int, int]) -> None:
    """Tied sections keep their relative input order."""
    sections = [_section(ids[0], 1, 1), _section(9, 0, 3), _section(ids[1], 1, 1)]
    ordered = order_sections(sections)
    assert [section.id for section in ordered] == [9, *ids]


def test_comparator_is_antisymmetric_for_distinct_positions() -> None:
    """Swapping arguments flips the sign for differing (category, order)."""
    sections = [
        _section(index, category, order)
        for index, (category, order) in enumerate(
            itertools.product(range(3), range(3)), start=1
        )
    ]
    for a, b in itertools.permutations(sections, 2):
        result = compare_sections(a, b)
        assert result == -compare_sections(b, a)
        expected = (a.category, a.order) > (b.category, b.order)
        assert (result > 0) is expected, f"wrong sign comparing {a.id} and {b.id}"


def test_group_sections_by_category() -> None:
    """Grouped sections keep category order and in-category order."""
    sections = [_section(1, 2, 1), _section(2, 1, 5), _section(3, 1, 2)]
    grouped = group_sections_by_category(sections)
    assert list(grouped) == [1, 2]
    assert [section.id for section in grouped[1]] == [3, 2]
    assert [section.id for section in grouped[2]] == [1]


def test_load_sections_filters_by_newsletter(tmp_path: Path) -> None:
    """Sections load from YAML and can be restricted to one newsletter."""
    path = tmp_path / "sections.yaml"
    path.write_text(
        dedent(
            """
            - id: 1
              newsletter_id: 10
              section_type_code: document
              title: News
              category: 2
              order: 1
            - id: 2
              newsletter_id: 11
              title: Other
            - {id: 3, newsletter_id: 10, title: Editorial, category: 1, order: "4"}
            """
        ),
        encoding="utf-8",
    )
    sections = load_sections(path, newsletter_id=10)
    assert [section.id for section in sections] == [1, 3]
    assert sections[1].order == 4, "expected numeric strings to be converted"
    everything = load_sections(path)
    assert everything[1].category == 0, "expected category to default to 0"
    assert everything[1].section_type_code == ""


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("id: 1\n", "list of sections"),
        ("- just text\n", "must be a mapping"),
        ("- {newsletter_id: 1}\n", "requires an integer 'id'"),
        ("- {id: 1, newsletter_id: 1, order: later}\n", "not an integer"),
    ],
)
def test_load_sections_rejects_invalid_entries(
    tmp_path: Path, content: str, message: str
) -> None:
    """Invalid section files raise a configuration error."""
    path = tmp_path / "sections.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(NewsletterConfigError, match=message):
        load_sections(path)


def test_load_sections_missing_file(tmp_path: Path) -> None:
    """A missing sections file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_sections(tmp_path / "missing.yaml")
