"""Tests for rendering rules into page markup."""

import json
import logging

from specrules.common.settings import SpeculationSettings
from specrules.generator import PageContext, generate
from specrules.render import (
    MARKER_COMMENT,
    SCRIPT_MEDIA_TYPE,
    dumps_document,
    inject_rules,
    render_rules,
)
from tests.utils import extract_script_json, speculation_scripts


class TestRenderRules:
    """Tests for the markup block."""

    def test_block_structure(self, settings):
        markup = render_rules(settings)

        assert markup.startswith(
            f'{MARKER_COMMENT}\n<script type="{SCRIPT_MEDIA_TYPE}">\n{{\n'
        )
        assert markup.endswith("}\n</script>\n")

    def test_body_is_the_document(self, settings):
        markup = render_rules(settings)
        assert extract_script_json(markup) == generate(settings).to_dict()

    def test_body_is_pretty_printed(self, settings):
        markup = render_rules(settings)
        assert '\n    "prerender": [\n' in markup

    def test_no_document_renders_nothing(self):
        settings = SpeculationSettings.from_raw({"match_urls": "\n"})
        assert render_rules(settings) == ""

    def test_no_settings_renders_nothing(self):
        assert render_rules(None) == ""

    def test_gated_page_renders_nothing(self):
        settings = SpeculationSettings.from_raw(
            {"match_urls": "/a", "post_types": "post", "debug_mode": "1"}
        )
        assert render_rules(settings, PageContext(category="page")) == ""

    def test_gated_page_logs_reason(self, caplog):
        settings = SpeculationSettings.from_raw(
            {"match_urls": "/a", "post_types": "post"}
        )
        with caplog.at_level(logging.DEBUG, logger="specrules.render"):
            render_rules(settings, PageContext(category="page"))

        assert "'page' not in ['post']" in caplog.text


class TestEscaping:
    """Tests that patterns cannot break out of the script element."""

    def test_script_close_in_pattern(self):
        pattern = "/x</script><script>alert(1)</script>"
        settings = SpeculationSettings.from_raw({"match_urls": pattern})
        markup = render_rules(settings)

        assert markup.count("</script>") == 1
        assert "<script>" not in markup
        assert extract_script_json(markup)["prefetch"][0]["urls"] == [pattern]

    def test_comment_open_and_ampersand(self):
        pattern = "/a?x=1&y=<!--"
        settings = SpeculationSettings.from_raw({"match_urls": pattern})
        text = dumps_document(generate(settings))

        assert "<" not in text
        assert "&" not in text
        assert json.loads(text)["prefetch"][0]["urls"] == [pattern]

    def test_compact_output(self, settings):
        text = dumps_document(generate(settings), indent=None)
        assert "\n" not in text
        assert json.loads(text) == generate(settings).to_dict()


class TestDebugComment:
    """Tests for the debug annotation."""

    def make_settings(self, **extra) -> SpeculationSettings:
        raw = {
            "match_urls": "/products/*",
            "post_types": ["product", "page"],
            "debug_mode": "1",
        }
        raw.update(extra)
        return SpeculationSettings.from_raw(raw)

    def test_comment_follows_block(self):
        markup = render_rules(
            self.make_settings(),
            PageContext(category="product", url="https://shop.test/p/1"),
        )
        script_end = markup.index("</script>")
        debug_start = markup.index("<!-- Speculation Rules debug")

        assert debug_start > script_end
        assert "Page URL: https://shop.test/p/1" in markup
        assert "Current category: product" in markup
        assert "Applicable categories: page, product" in markup
        assert "Rule count: 1" in markup
        assert markup.endswith("-->\n")

    def test_unknown_category_and_all_categories(self):
        markup = render_rules(self.make_settings(post_types=[]))
        assert "Current category: (none)" in markup
        assert "Applicable categories: (all)" in markup

    def test_document_unchanged_by_debug(self):
        with_debug = self.make_settings()
        without_debug = self.make_settings(debug_mode="")
        page = PageContext(category="product")

        assert extract_script_json(
            render_rules(with_debug, page)
        ) == extract_script_json(render_rules(without_debug, page))

    def test_comment_cannot_be_closed_early(self):
        markup = render_rules(
            self.make_settings(post_types=[]),
            PageContext(url="https://shop.test/?q=-->"),
        )
        debug = markup[markup.index("<!-- Speculation Rules debug") :]
        assert debug.count("-->") == 1

    def test_off_by_default(self, settings):
        assert "debug" not in render_rules(settings)


class TestInjectRules:
    """Tests for inserting markup into pages."""

    def test_inserted_at_end_of_head(self, settings, page_html):
        page = inject_rules(page_html, render_rules(settings))

        scripts = speculation_scripts(page)
        assert len(scripts) == 1
        assert scripts[0].getparent().tag == "head"
        assert scripts[0].getnext() is None
        assert json.loads(scripts[0].text) == generate(settings).to_dict()

    def test_head_close_case_insensitive(self):
        page = "<html><HEAD><title>t</title></HEAD><body></body></html>"
        result = inject_rules(page, "<!-- x -->")
        assert result == (
            "<html><HEAD><title>t</title><!-- x --></HEAD>"
            "<body></body></html>"
        )

    def test_quoted_head_close_is_skipped(self):
        page = (
            "<html><head><!-- </head> -->"
            "<script>var s = '</head>';</script></head>"
            "<body><p>hi</p></body></html>"
        )
        result = inject_rules(page, "<!-- x -->")
        assert result == (
            "<html><head><!-- </head> -->"
            "<script>var s = '</head>';</script><!-- x --></head>"
            "<body><p>hi</p></body></html>"
        )

    def test_head_close_after_body_is_ignored(self):
        page = "<html><body><pre>&lt;/head&gt; </head></pre></body></html>"
        result = inject_rules(page, "<!-- x -->")
        assert result.startswith("<html><!-- x --><body>")

    def test_falls_back_to_body(self):
        page = "<html><body class='x'><p>hi</p></body></html>"
        result = inject_rules(page, "<!-- x -->")
        assert result == "<html><!-- x --><body class='x'><p>hi</p></body></html>"

    def test_falls_back_to_prepend(self):
        assert inject_rules("<p>fragment</p>", "<!-- x -->") == (
            "<!-- x --><p>fragment</p>"
        )

    def test_empty_markup_is_noop(self, page_html):
        assert inject_rules(page_html, "") == page_html
