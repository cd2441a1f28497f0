"""Behaviour tests for newsletter section ordering.

These scenarios check that sections render grouped by category and ordered
inside each category, and that distinct sections sharing a category and an
order are not reshuffled by the sort.

Usage:
    Run these behaviour tests with pytest, for example:

        pytest tests/bdd/test_section_ordering.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from newsletter_builder.sections import NewsletterSection, order_sections

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "section_ordering.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, list[NewsletterSection]]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _section(section_id: int, category: int, order: int) -> NewsletterSection:
    return NewsletterSection(
        section_id, 1, "document", f"Section {section_id}", category, order
    )


@given("sections spread over two categories")
def given_two_categories(scenario_state: ScenarioState) -> None:
    """Store sections listed out of rendering order."""
    scenario_state["sections"] = [_section(1, 2, 1), _section(2, 1, 5), _section(3, 1, 2)]


@given("two distinct sections sharing a category and an order")
def given_tied_sections(scenario_state: ScenarioState) -> None:
    """Store tied sections around one that sorts first."""
    scenario_state["sections"] = [_section(7, 1, 1), _section(8, 0, 9), _section(5, 1, 1)]


@when("I order the sections")
def when_order(scenario_state: ScenarioState) -> None:
    """Sort the stored sections."""
    scenario_state["ordered"] = order_sections(scenario_state["sections"])


@then("the section ids are 3, 2, 1")
def then_ids(scenario_state: ScenarioState) -> None:
    """Verify category-then-order sorting."""
    ids = [section.id for section in scenario_state["ordered"]]
    assert ids == [3, 2, 1], f"expected ids [3, 2, 1], got {ids!r}"


@then("the tied sections keep their input order")
def then_tied_order(scenario_state: ScenarioState) -> None:
    """Verify the tie is not broken by section id."""
    ids = [section.id for section in scenario_state["ordered"]]
    assert ids == [8, 7, 5], f"expected ids [8, 7, 5], got {ids!r}"
