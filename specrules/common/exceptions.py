"""Exception types for speculation-rules settings errors.

Rule generation itself never raises: malformed settings fields are coerced
to their defaults at the settings boundary. The exceptions here cover the
places where there is nothing sensible to coerce, such as a settings store
that hands back something other than a key/value map.
"""

from typing import Any


class SpeculationRulesException(Exception):
    """Base class for all specrules errors.

    Carries a human-readable message plus an optional context dict that is
    appended to the formatted message, one ``key: value`` pair per line.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the problem.
            context: Optional dict of additional context (path, value, etc).
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class SettingsFormatException(SpeculationRulesException):
    """Raised when raw settings are not a key/value map.

    Individual fields are never rejected (they fall back to defaults), but
    the container itself has to be a mapping, or ``None`` for "nothing
    configured".

    Attributes:
        source: Where the settings came from (a file path, a store name).
        actual_type: Name of the type that was received instead.
    """

    def __init__(
        self,
        source: str,
        actual_type: str,
        detail: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            source: Where the settings came from.
            actual_type: Name of the type that was received.
            detail: Optional parser error text.
        """
        self.source = source
        self.actual_type = actual_type
        self.detail = detail

        message = (
            f"Settings from {source} must be a key/value map, "
            f"got {actual_type}"
        )

        context: dict[str, Any] = {
            "source": source,
            "actual_type": actual_type,
        }
        if detail:
            context["detail"] = detail

        super().__init__(message, context)
