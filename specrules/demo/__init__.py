"""Garden-supply shop demo for specrules.

A small FastAPI storefront with the speculation-rules middleware and the
settings page wired in. Product pages, blog posts and plain pages carry
different content categories, so the category gate can be tried out from
the settings page.

Requires the ``demo`` extra::

    pip install specrules[demo]
"""

try:
    import fastapi  # noqa: F401
    import uvicorn  # noqa: F401
except ImportError as e:
    raise ImportError(
        "Demo features require the 'demo' extra. "
        "Install with: pip install specrules[demo]"
    ) from e
