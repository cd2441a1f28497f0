"""Element kinds understood by the newsletter URL rewriter."""

from __future__ import annotations

import enum


class ElementKind(enum.Enum):
    """Markup construct holding a URL, keyed by tag and attribute name.

    ``CSS`` covers ``<link href>`` as well as every ``url(...)`` reference
    found in inline styles and ``<style>`` blocks.
    """

    IMG = ("img", "src")
    A = ("a", "href")
    FORM = ("form", "action")
    CSS = ("link", "href")
    JAVASCRIPT = ("script", "src")

    @property
    def tag(self) -> str:
        """Return the lower-case HTML tag name for this kind."""
        return self.value[0]

    @property
    def attribute(self) -> str:
        """Return the lower-case attribute name holding the URL."""
        return self.value[1]

    @classmethod
    def parse(cls, name: str) -> ElementKind:
        """Return the kind matching ``name`` case-insensitively.

        Raises
        ------
        ValueError
            If ``name`` is not one of the known kinds.
        """
        try:
            return cls[name.strip().upper()]
        except KeyError as exc:
            known = ", ".join(kind.name for kind in cls)
            msg = f"Unknown element kind '{name}'. Known kinds: {known}"
            raise ValueError(msg) from exc


ABSOLUTIZE_KINDS: tuple[ElementKind, ...] = (
    ElementKind.IMG,
    ElementKind.A,
    ElementKind.FORM,
    ElementKind.CSS,
    ElementKind.JAVASCRIPT,
)
"""Pass order used when every reference must become fully qualified."""

MIRROR_KINDS: tuple[ElementKind, ...] = (ElementKind.IMG, ElementKind.A)
"""Pass order used when moving secured resources to the public mirror."""


__all__ = ["ABSOLUTIZE_KINDS", "MIRROR_KINDS", "ElementKind"]
