"""Test utilities for parsing rendered speculation-rules markup."""

import json
from typing import Any

from lxml import html as lxml_html

SCRIPT_OPENING = '<script type="speculationrules">\n'

PAGE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Test page</title>
</head>
<body>
  <p>Hello</p>
</body>
</html>"""


def extract_script_json(markup: str) -> Any:
    """Parse the JSON body out of a rendered speculation-rules block.

    Args:
        markup: Output of ``render_rules`` or a page containing it.

    Returns:
        The parsed document.
    """
    start = markup.index(SCRIPT_OPENING) + len(SCRIPT_OPENING)
    end = markup.index("\n</script>", start)
    return json.loads(markup[start:end])


def speculation_scripts(page: str) -> list[Any]:
    """Find every speculation-rules script element in an HTML page.

    Args:
        page: A complete HTML document.

    Returns:
        The lxml elements, in document order.
    """
    tree = lxml_html.fromstring(page)
    return tree.xpath('//script[@type="speculationrules"]')
