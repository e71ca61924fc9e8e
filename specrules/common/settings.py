"""Sanitized speculation-rules settings.

Settings arrive from a store as an untrusted raw map, in the same layout the
administration form posts::

    {
        "type": "prerender",
        "eagerness": "moderate",
        "match_urls": "/products/*\\n/services",
        "exclude_urls": "/checkout",
        "post_types": ["product", "page"],
        "debug_mode": "1",
    }

``SpeculationSettings.from_raw`` turns that into a frozen, hashable record.
Every field is coerced rather than rejected: unknown enum values fall back
to the defaults, non-list values where a list is expected become empty, and
a missing ``debug_mode`` key means debugging is off.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from specrules.common.exceptions import SettingsFormatException

logger = logging.getLogger(__name__)


class SpeculationAction(str, Enum):
    """Which directive the generated rules are emitted under."""

    PREFETCH = "prefetch"
    PRERENDER = "prerender"


class Eagerness(str, Enum):
    """How early the browser should trigger a speculative load."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    EAGER = "eager"


DEFAULT_ACTION = SpeculationAction.PREFETCH
DEFAULT_EAGERNESS = Eagerness.MODERATE

# Raw settings key -> SpeculationSettings field
RAW_KEYS: dict[str, str] = {
    "type": "type",
    "eagerness": "eagerness",
    "match_urls": "match_patterns",
    "exclude_urls": "exclude_patterns",
    "post_types": "applicable_categories",
    "debug_mode": "debug_enabled",
}

# Only LF, CRLF and CR separate patterns
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

# C0 controls except tab/newline/CR, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_TRUTHY = {"1", "true", "yes", "on"}

E = TypeVar("E", bound=Enum)


def _coerce_enum(
    enum_cls: type[E], value: Any, default: E, field_name: str
) -> E:
    """Map free text onto a closed enum, falling back to *default*."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        candidate = value.strip().lower()
        for member in enum_cls:
            if member.value == candidate:
                return member
    if value is not None:
        logger.warning(
            f"Unknown {field_name} {value!r}, "
            f"falling back to {default.value!r}"
        )
    return default


def split_patterns(value: Any) -> tuple[str, ...]:
    """Split textarea input into trimmed, non-blank pattern lines.

    Accepts either newline-delimited text or a list of strings; list items
    are split the same way, so every result fits on one stored line. Only
    ``\\n``, ``\\r\\n`` and ``\\r`` end a line. Order and duplicates are
    preserved and nothing is checked for URL syntax.

    Args:
        value: Raw field value.

    Returns:
        Tuple of pattern strings, possibly empty.

    Examples:
        >>> split_patterns("/a\\n\\n  /b  \\r\\n/a")
        ('/a', '/b', '/a')
        >>> split_patterns(42)
        ()
    """
    if isinstance(value, str):
        items: list[str] = [value]
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if isinstance(item, str)]
    else:
        return ()

    lines = (line for item in items for line in _LINE_BREAK.split(item))
    cleaned = (_CONTROL_CHARS.sub("", line).strip() for line in lines)
    return tuple(line for line in cleaned if line)


def _coerce_categories(value: Any) -> frozenset[str]:
    if isinstance(value, str):
        items: list[str] = [value]
    elif isinstance(value, Iterable) and not isinstance(
        value, (bytes, Mapping)
    ):
        items = [item for item in value if isinstance(item, str)]
    else:
        return frozenset()
    return frozenset(item.strip() for item in items if item.strip())


def _is_checked(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


class SpeculationSettings(BaseModel):
    """Validated speculation-rules configuration.

    Instances are frozen and hashable so they can be used as cache keys.
    Build them with ``from_raw`` when the input comes from a settings store;
    direct construction goes through the same field coercion.

    Attributes:
        type: Directive key the rules are emitted under.
        eagerness: Copied verbatim into every generated rule.
        match_patterns: One rule is generated per pattern, in order.
        exclude_patterns: Shared ``not`` clause attached to every rule.
        applicable_categories: Content categories the rules apply to.
            Empty means everywhere.
        debug_enabled: Append a diagnostic comment next to the rules.
    """

    model_config = ConfigDict(frozen=True)

    type: SpeculationAction = Field(
        DEFAULT_ACTION, description="prefetch or prerender"
    )
    eagerness: Eagerness = Field(
        DEFAULT_EAGERNESS, description="conservative, moderate or eager"
    )
    match_patterns: tuple[str, ...] = Field(
        (), description="URL patterns, one rule each"
    )
    exclude_patterns: tuple[str, ...] = Field(
        (), description="URL patterns excluded from every rule"
    )
    applicable_categories: frozenset[str] = Field(
        frozenset(), description="Content categories; empty means all"
    )
    debug_enabled: bool = Field(
        False, description="Emit a diagnostic comment"
    )

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> SpeculationAction:
        return _coerce_enum(SpeculationAction, value, DEFAULT_ACTION, "type")

    @field_validator("eagerness", mode="before")
    @classmethod
    def coerce_eagerness(cls, value: Any) -> Eagerness:
        return _coerce_enum(Eagerness, value, DEFAULT_EAGERNESS, "eagerness")

    @field_validator("match_patterns", "exclude_patterns", mode="before")
    @classmethod
    def coerce_patterns(cls, value: Any) -> tuple[str, ...]:
        return split_patterns(value)

    @field_validator("applicable_categories", mode="before")
    @classmethod
    def coerce_applicable_categories(cls, value: Any) -> frozenset[str]:
        return _coerce_categories(value)

    @field_validator("debug_enabled", mode="before")
    @classmethod
    def coerce_debug_enabled(cls, value: Any) -> bool:
        return _is_checked(value)

    @classmethod
    def from_raw(
        cls,
        raw: Mapping[str, Any] | None,
        source: str = "settings store",
    ) -> SpeculationSettings:
        """Build settings from an untrusted raw settings map.

        Args:
            raw: Map keyed by ``type``, ``eagerness``, ``match_urls``,
                ``exclude_urls``, ``post_types`` and ``debug_mode``.
                ``None`` means nothing has been configured.
            source: Description of where *raw* came from, for errors.

        Returns:
            Sanitized settings. Missing keys take their defaults.

        Raises:
            SettingsFormatException: If *raw* is not a mapping.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise SettingsFormatException(source, type(raw).__name__)

        fields = {
            field: raw[key] for key, field in RAW_KEYS.items() if key in raw
        }
        return cls.model_validate(fields)

    def to_raw(self) -> dict[str, Any]:
        """Render the settings back into the raw store layout.

        ``from_raw(settings.to_raw())`` reproduces an equal record.
        """
        raw: dict[str, Any] = {
            "type": self.type.value,
            "eagerness": self.eagerness.value,
            "match_urls": "\n".join(self.match_patterns),
            "exclude_urls": "\n".join(self.exclude_patterns),
            "post_types": sorted(self.applicable_categories),
        }
        if self.debug_enabled:
            raw["debug_mode"] = "1"
        return raw
