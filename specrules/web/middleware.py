"""ASGI middleware that injects speculation rules into HTML responses.

Every successful ``text/html`` response gets the rendered block inserted
at the end of its ``<head>``. Settings are loaded from the store on each
request and passed explicitly to the renderer, so a save through the admin
page takes effect on the next page view.

Example::

    from fastapi import FastAPI

    from specrules.store import JsonFileSettingsStore
    from specrules.web import SpeculationRulesMiddleware

    app = FastAPI()
    app.add_middleware(
        SpeculationRulesMiddleware,
        store=JsonFileSettingsStore("speculation.json"),
    )

Route handlers tell the middleware the page category by setting
``request.state.speculation_category``; pass ``category_resolver`` to derive
it some other way.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from starlette.datastructures import MutableHeaders
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from specrules.cache import RuleCache
from specrules.common.exceptions import SpeculationRulesException
from specrules.generator import PageContext
from specrules.render import inject_rules
from specrules.store import SettingsStore, load_settings

logger = logging.getLogger(__name__)

CategoryResolver = Callable[[Request], str | None]


def category_from_state(request: Request) -> str | None:
    """Read the category a route handler stored on ``request.state``."""
    category = getattr(request.state, "speculation_category", None)
    return category if isinstance(category, str) else None


def _charset(content_type: str) -> str:
    for param in content_type.split(";")[1:]:
        name, _, value = param.strip().partition("=")
        if name.lower() == "charset" and value:
            return value.strip('"')
    return "utf-8"


class SpeculationRulesMiddleware(BaseHTTPMiddleware):
    """Inject speculation rules into HTML pages.

    Only 200 responses with a ``text/html`` content type and no content
    encoding are rewritten. Everything else passes through untouched.

    Attributes:
        store: Where settings are loaded from on each request.
        category_resolver: Maps a request to its page category.
        cache: Memoizes rendered markup across requests.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SettingsStore,
        category_resolver: CategoryResolver | None = None,
        cache: RuleCache | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The wrapped ASGI application.
            store: Settings store read on every HTML response.
            category_resolver: Callable returning the page category for a
                request, or None. Defaults to ``category_from_state``.
            cache: Rule cache to render through. A private one is created
                when omitted.
        """
        super().__init__(app)
        self.store = store
        self.category_resolver = category_resolver or category_from_state
        self.cache = cache if cache is not None else RuleCache()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        content_type = response.headers.get("content-type", "").lower()
        if (
            response.status_code != 200
            or not content_type.startswith("text/html")
            or "content-encoding" in response.headers
        ):
            return response

        try:
            settings = load_settings(self.store)
        except SpeculationRulesException as e:
            logger.warning(
                f"Serving {request.url.path} without speculation rules: "
                f"{e.message}"
            )
            return response

        page = PageContext(
            category=self.category_resolver(request),
            url=str(request.url),
        )
        markup = self.cache.render(settings, page)
        if not markup:
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        headers = MutableHeaders(raw=list(response.raw_headers))
        del headers["content-length"]

        charset = _charset(content_type)
        try:
            content = inject_rules(body.decode(charset), markup).encode(
                charset
            )
        except (LookupError, UnicodeError) as e:
            logger.warning(
                f"Cannot inject speculation rules into {request.url.path}: "
                f"{e}"
            )
            content = body

        return Response(
            content=content,
            status_code=response.status_code,
            headers=headers,
            background=getattr(response, "background", None),
        )
