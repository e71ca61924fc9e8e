"""FastAPI integration for specrules.

Provides ``SpeculationRulesMiddleware``, which injects rules into HTML
responses, and ``create_admin_router``, the settings page.

Requires the ``web`` extra::

    pip install specrules[web]
"""

try:
    import fastapi  # noqa: F401
except ImportError as e:
    raise ImportError(
        "Web features require the 'web' extra. "
        "Install with: pip install specrules[web]"
    ) from e

from specrules.web.admin import create_admin_router
from specrules.web.middleware import (
    SpeculationRulesMiddleware,
    category_from_state,
)

__all__ = [
    "SpeculationRulesMiddleware",
    "category_from_state",
    "create_admin_router",
]
