"""Settings page for speculation rules.

``create_admin_router`` returns an ``APIRouter`` serving:

- ``GET {prefix}``: the settings form, filled from the store
- ``POST {prefix}``: sanitize the posted form, save it, redirect back
- ``GET {prefix}/preview``: the document a page of a given category gets

Authentication is the host application's job; mount the router behind
whatever protects the rest of its admin area.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from html import escape
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel, Field

from specrules.cache import RuleCache
from specrules.common.exceptions import SpeculationRulesException
from specrules.common.settings import (
    RAW_KEYS,
    Eagerness,
    SpeculationAction,
    SpeculationSettings,
)
from specrules.generator import PageContext, generate, is_applicable
from specrules.store import SettingsStore, load_settings

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "/admin/speculation-rules"

_ACTION_LABELS = {
    SpeculationAction.PREFETCH: (
        "Prefetch - Load the page only, no subresources"
    ),
    SpeculationAction.PRERENDER: (
        "Prerender - Fully load the page and all subresources"
    ),
}

_EAGERNESS_LABELS = {
    Eagerness.CONSERVATIVE: "Conservative (typically on click)",
    Eagerness.MODERATE: "Moderate (typically on hover)",
    Eagerness.EAGER: "Eager (on slightest suggestion)",
}

_CSS = """\
body { font-family: sans-serif; max-width: 760px; margin: 2em auto;
       padding: 0 1em; color: #1d2327; }
label { display: block; font-weight: bold; margin-top: 1.2em; }
textarea, select, input[type=text] { width: 100%; box-sizing: border-box; }
.description { color: #646970; font-size: .9em; margin: .3em 0; }
.notice { background: #edfaef; border-left: 4px solid #00a32a;
          padding: .6em 1em; }
button { margin-top: 1.5em; padding: .5em 1.2em; }
"""


class PreviewResponse(BaseModel):
    """What the preview endpoint reports for a page category."""

    category: str | None = Field(
        None, description="Category the preview was computed for"
    )
    applicable: bool = Field(
        ..., description="Whether the category gate lets rules through"
    )
    document: dict[str, list[dict[str, Any]]] | None = Field(
        None, description="The speculation-rules document, or null"
    )


def _select(name: str, labels: dict[Any, str], selected: Any) -> str:
    options = "\n".join(
        f'    <option value="{escape(member.value)}"'
        f'{" selected" if member == selected else ""}>'
        f"{escape(label)}</option>"
        for member, label in labels.items()
    )
    return f'<select name="{name}" id="{name}">\n{options}\n  </select>'


def _categories_field(
    settings: SpeculationSettings, available: list[str] | None
) -> str:
    if not available:
        value = ", ".join(sorted(settings.applicable_categories))
        return (
            '<input type="text" name="post_types" id="post_types" '
            f'value="{escape(value)}">'
        )

    boxes = "\n".join(
        f'  <div><input type="checkbox" name="post_types" '
        f'id="post_types_{escape(category)}" value="{escape(category)}"'
        f'{" checked" if category in settings.applicable_categories else ""}>'
        f' <span>{escape(category)}</span></div>'
        for category in available
    )
    return f'<fieldset id="post_types">\n{boxes}\n</fieldset>'


def render_settings_form(
    settings: SpeculationSettings,
    action_url: str,
    available_categories: list[str] | None = None,
    saved: bool = False,
) -> str:
    """Render the settings page as a complete HTML document."""
    notice = (
        '<p class="notice" id="saved-notice">Settings saved.</p>'
        if saved
        else ""
    )
    match_text = escape("\n".join(settings.match_patterns))
    exclude_text = escape("\n".join(settings.exclude_patterns))
    debug_checked = " checked" if settings.debug_enabled else ""

    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Speculation Rules Settings</title>
  <style>{_CSS}</style>
</head>
<body>
<h1>Speculation Rules Settings</h1>
{notice}
<form method="post" action="{escape(action_url)}">
  <label for="type">Type</label>
  {_select("type", _ACTION_LABELS, settings.type)}
  <p class="description">Prerendering will lead to faster load times than
  prefetching. However, in case of interactive content, prefetching may be
  a safer choice.</p>

  <label for="eagerness">Eagerness</label>
  {_select("eagerness", _EAGERNESS_LABELS, settings.eagerness)}
  <p class="description">"Eager" has the minimum delay before speculative
  loads start; "Conservative" increases the chance that only URLs the user
  actually navigates to are loaded.</p>

  <label for="match_urls">Match URLs</label>
  <textarea name="match_urls" id="match_urls" rows="5">{match_text}</textarea>
  <p class="description">URLs to prefetch or prerender, one per line.
  Example: /*, /products/*, /services</p>

  <label for="exclude_urls">Exclude URLs</label>
  <textarea name="exclude_urls" id="exclude_urls" rows="5">{exclude_text}</textarea>
  <p class="description">URLs to exclude from prefetching or prerendering,
  one per line.</p>

  <label for="post_types">Content types</label>
  {_categories_field(settings, available_categories)}
  <p class="description">Only add rules on pages of these types. Leave empty
  to add them everywhere.</p>

  <label for="debug_mode">
    <input type="checkbox" name="debug_mode" id="debug_mode" value="1"{debug_checked}>
    Debug mode
  </label>
  <p class="description">Append a diagnostic comment after the rules.</p>

  <button type="submit">Save Changes</button>
</form>
</body>
</html>"""


def _split_categories(values: Iterable[str]) -> list[str]:
    """Flatten checkbox values and comma-separated text input."""
    return [
        part.strip()
        for value in values
        for part in value.split(",")
        if part.strip()
    ]


def create_admin_router(
    store: SettingsStore,
    cache: RuleCache | None = None,
    prefix: str = DEFAULT_PREFIX,
    available_categories: Iterable[str] | None = None,
) -> APIRouter:
    """Build the settings router.

    Args:
        store: Settings store to read and write.
        cache: Cache to invalidate after a save, typically the one the
            middleware renders through.
        prefix: URL prefix. Must start with ``/`` and not end with one.
        available_categories: Categories to offer as checkboxes. When
            omitted the form uses a comma-separated text field.

    Returns:
        A router to pass to ``app.include_router``.
    """
    router = APIRouter(prefix=prefix, tags=["speculation-rules"])
    categories = (
        sorted(set(available_categories))
        if available_categories is not None
        else None
    )

    def _load() -> SpeculationSettings:
        try:
            return load_settings(store)
        except SpeculationRulesException as e:
            logger.error(f"Could not load speculation rules settings: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            ) from e

    @router.get("", response_class=HTMLResponse)
    async def settings_page(saved: bool = False) -> HTMLResponse:
        return HTMLResponse(
            render_settings_form(
                _load(),
                action_url=prefix,
                available_categories=categories,
                saved=saved,
            )
        )

    @router.post("")
    async def save_settings(request: Request) -> RedirectResponse:
        form = await request.form()

        raw: dict[str, Any] = {}
        for key in RAW_KEYS:
            if key not in form:
                continue
            if key == "post_types":
                raw[key] = _split_categories(
                    v for v in form.getlist(key) if isinstance(v, str)
                )
            else:
                raw[key] = form.get(key)

        settings = SpeculationSettings.from_raw(raw, source="admin form")
        store.save(settings.to_raw())
        if cache is not None:
            cache.invalidate()

        logger.info(
            f"Speculation rules settings saved: {settings.type.value}, "
            f"{len(settings.match_patterns)} match pattern(s)"
        )
        return RedirectResponse(
            url=f"{prefix}?saved=true",
            status_code=status.HTTP_303_SEE_OTHER,
        )

    @router.get("/preview", response_model=PreviewResponse)
    async def preview(
        category: str | None = Query(None),
    ) -> PreviewResponse:
        settings = _load()
        page = PageContext(category=category)
        document = generate(settings, page)
        return PreviewResponse(
            category=category,
            applicable=is_applicable(settings, page),
            document=document.to_dict() if document is not None else None,
        )

    return router
