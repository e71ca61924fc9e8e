"""Speculation rule generation.

Turns a ``SpeculationSettings`` record and the context of the page being
rendered into a speculation-rules document, or ``None`` when nothing should
be emitted. Generation is a pure function: it reads its arguments, allocates
a fresh document and never raises.

The document shape is fixed::

    {
        "prerender": [
            {
                "source": "list",
                "urls": ["/products/*"],
                "eagerness": "moderate",
                "not": {"source": "list", "urls": ["/checkout"]}
            }
        ]
    }

Exactly one top-level key (the configured action) is present, holding one
list-source rule per match pattern.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from specrules.common.settings import (
    Eagerness,
    SpeculationAction,
    SpeculationSettings,
)

LIST_SOURCE = "list"


@dataclass(frozen=True)
class PageContext:
    """What the renderer knows about the page being served.

    Attributes:
        category: Content category of the page (a post type such as
            ``"product"``), or None when it cannot be determined, e.g. on
            archive and search pages.
        url: Request URL. Only shown in debug annotations.
    """

    category: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class SpeculationRule:
    """A single list-source speculation rule.

    Attributes:
        urls: URL patterns the rule covers. Generated rules always hold
            exactly one.
        eagerness: Trigger heuristic for the browser.
        exclude: Patterns for the ``not`` clause, or None for no clause.
        source: Rule source kind. Always ``"list"``.
    """

    urls: tuple[str, ...]
    eagerness: Eagerness
    exclude: tuple[str, ...] | None = None
    source: str = LIST_SOURCE

    def to_dict(self) -> dict[str, Any]:
        """Return the rule in speculation-rules JSON layout."""
        rule: dict[str, Any] = {
            "source": self.source,
            "urls": list(self.urls),
            "eagerness": self.eagerness.value,
        }
        if self.exclude:
            rule["not"] = {"source": LIST_SOURCE, "urls": list(self.exclude)}
        return rule


@dataclass(frozen=True)
class RuleDocument:
    """A speculation-rules document with a single action key.

    Attributes:
        action: The top-level key the rules are listed under.
        rules: The rules, in match-pattern order.
    """

    action: SpeculationAction
    rules: tuple[SpeculationRule, ...]

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Return the document as plain JSON-compatible data."""
        return {self.action.value: [rule.to_dict() for rule in self.rules]}

    def to_json(self, indent: int | None = 4) -> str:
        """Serialize the document.

        This is plain ``json.dumps`` output. Use
        ``specrules.render.dumps_document`` for text that is embedded in
        HTML.
        """
        return json.dumps(self.to_dict(), indent=indent)


def is_applicable(
    settings: SpeculationSettings, page: PageContext | None = None
) -> bool:
    """Check the category applicability gate.

    Rules are suppressed only when categories are configured, the page has
    a known category, and that category is not one of them. An empty
    category set means "everywhere", and pages without a category always
    pass.

    Args:
        settings: The active settings.
        page: The page being rendered. None behaves like a page with no
            category.

    Returns:
        True if rules may be emitted for the page.
    """
    if not settings.applicable_categories:
        return True
    if page is None or page.category is None:
        return True
    return page.category in settings.applicable_categories


def generate(
    settings: SpeculationSettings | None,
    page: PageContext | None = None,
) -> RuleDocument | None:
    """Build the speculation-rules document for a page.

    Args:
        settings: The active settings. None means nothing is configured.
        page: The page being rendered.

    Returns:
        The document, or None if the page is outside the configured
        categories or there are no match patterns.

    Examples:
        >>> settings = SpeculationSettings.from_raw(
        ...     {"type": "prerender", "match_urls": "/a", "exclude_urls": "/c"}
        ... )
        >>> generate(settings).to_dict()["prerender"][0]["not"]
        {'source': 'list', 'urls': ['/c']}
        >>> generate(SpeculationSettings()) is None
        True
    """
    if settings is None:
        return None

    if not is_applicable(settings, page):
        return None

    exclude = settings.exclude_patterns or None
    rules = tuple(
        SpeculationRule(
            urls=(pattern,),
            eagerness=settings.eagerness,
            exclude=exclude,
        )
        for pattern in settings.match_patterns
    )

    if not rules:
        return None

    return RuleDocument(action=settings.type, rules=rules)
