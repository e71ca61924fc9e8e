"""
Speculation rules for server-rendered sites.

This package turns administrator settings into a browser speculation-rules
document (prefetch or prerender directives) and injects it into the pages a
site serves. The core is ``specrules.generator.generate``; rendering,
settings stores, caching and the FastAPI integration build on it.
"""

from specrules.common.exceptions import (
    SettingsFormatException,
    SpeculationRulesException,
)
from specrules.common.settings import (
    Eagerness,
    SpeculationAction,
    SpeculationSettings,
)
from specrules.generator import (
    PageContext,
    RuleDocument,
    SpeculationRule,
    generate,
    is_applicable,
)
from specrules.render import inject_rules, render_rules

__all__ = [
    "Eagerness",
    "PageContext",
    "RuleDocument",
    "SettingsFormatException",
    "SpeculationAction",
    "SpeculationRule",
    "SpeculationRulesException",
    "SpeculationSettings",
    "generate",
    "inject_rules",
    "is_applicable",
    "render_rules",
]
