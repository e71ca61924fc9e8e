"""Rendering speculation rules into page markup.

``render_rules`` produces the block that goes at the end of a page's
``<head>``: a marker comment followed by a ``<script>`` element of the
speculation-rules media type whose body is the pretty-printed document.
Nothing at all is produced when the generator returns no document, so
pages never receive an empty script block.
"""

from __future__ import annotations

import json
import logging
import re

from specrules.common.settings import SpeculationSettings
from specrules.generator import (
    PageContext,
    RuleDocument,
    generate,
    is_applicable,
)

logger = logging.getLogger(__name__)

SCRIPT_MEDIA_TYPE = "speculationrules"
MARKER_COMMENT = "<!-- Speculation Rules added by specrules -->"

# Characters that could end the script element or open a comment inside it.
# Replaced with JSON unicode escapes, which parse back to the same string.
_SCRIPT_ESCAPES = {ord(ch): "\\u%04x" % ord(ch) for ch in "<>&"}

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body[\s>]", re.IGNORECASE)


def dumps_document(document: RuleDocument, indent: int | None = 4) -> str:
    """Serialize a document for embedding in HTML.

    Args:
        document: The document to serialize.
        indent: JSON indent, None for compact output.

    Returns:
        JSON text with ``<``, ``>`` and ``&`` escaped.
    """
    text = json.dumps(document.to_dict(), indent=indent)
    return text.translate(_SCRIPT_ESCAPES)


def _comment_safe(value: str) -> str:
    return value.replace("--", "- -").replace(">", "&gt;")


def _debug_comment(
    settings: SpeculationSettings,
    page: PageContext | None,
    document: RuleDocument,
) -> str:
    category = page.category if page and page.category else "(none)"
    applicable = ", ".join(sorted(settings.applicable_categories)) or "(all)"

    lines = ["<!-- Speculation Rules debug"]
    if page is not None and page.url:
        lines.append(f"Page URL: {_comment_safe(page.url)}")
    lines.append(f"Current category: {_comment_safe(category)}")
    lines.append(f"Applicable categories: {_comment_safe(applicable)}")
    lines.append(f"Rule count: {len(document.rules)}")
    lines.append("Generated rules:")
    lines.append(dumps_document(document))
    lines.append("-->")
    return "\n".join(lines) + "\n"


def render_rules(
    settings: SpeculationSettings | None,
    page: PageContext | None = None,
) -> str:
    """Render the speculation-rules markup block for a page.

    Args:
        settings: The active settings. None means nothing is configured.
        page: The page being rendered.

    Returns:
        The markup block, followed by a debug comment when debugging is
        enabled, or an empty string when there are no rules to emit.
    """
    if settings is None:
        return ""

    document = generate(settings, page)
    if document is None:
        if not is_applicable(settings, page):
            logger.debug(
                f"Category {page.category!r} not in "
                f"{sorted(settings.applicable_categories)}, no rules emitted"
            )
        else:
            logger.debug("No match patterns configured, no rules emitted")
        return ""

    markup = (
        f"{MARKER_COMMENT}\n"
        f'<script type="{SCRIPT_MEDIA_TYPE}">\n'
        f"{dumps_document(document)}\n"
        "</script>\n"
    )
    logger.debug(
        f"Emitting {len(document.rules)} {document.action.value} rule(s)"
    )

    if settings.debug_enabled:
        markup += _debug_comment(settings, page, document)

    return markup


def inject_rules(html: str, markup: str) -> str:
    """Insert rendered markup at the end of a page's ``<head>``.

    The markup goes before the last ``</head>`` that precedes ``<body>``,
    so a closing tag quoted earlier in the head (in a comment or inline
    script) is skipped. Falls back to just before ``<body>`` when there is
    no closing head tag, and to the very start of the document when there
    is neither.

    Args:
        html: The page.
        markup: Output of ``render_rules``.

    Returns:
        The page with the markup inserted, or unchanged if *markup* is
        empty.
    """
    if not markup:
        return html

    body = _BODY_OPEN.search(html)
    limit = body.start() if body is not None else len(html)
    head_closes = list(_HEAD_CLOSE.finditer(html, 0, limit))
    match = head_closes[-1] if head_closes else body
    if match is None:
        return markup + html

    return html[: match.start()] + markup + html[match.start() :]
