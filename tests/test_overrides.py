"""Tests for the markdown override renderer."""

import logging

import pytest
from bs4 import BeautifulSoup

from folio.services.markdown_renderer import apply_overrides, render_markdown
from folio.services.overrides import (
    DEFAULT_OVERRIDES,
    build_override_table,
    extract_language,
    flatten_text,
    render_summary,
)


def _render(html: str) -> BeautifulSoup:
    return BeautifulSoup(apply_overrides(html), "lxml")


class TestNotes:
    def test_warning_note_with_title(self):
        soup = _render('<div class="note warning title=Heads-up"><p>Careful</p></div>')
        callout = soup.find("aside")
        assert callout is not None
        assert callout["data-variant"] == "warning"
        assert "note-warning" in callout["class"]
        assert callout.find(class_="note-title").get_text() == "Heads-up"
        assert callout.find(class_="note-content").get_text() == "Careful"

    def test_tip_variant(self):
        soup = _render('<div class="note tip"><p>Try this</p></div>')
        assert soup.find("aside")["data-variant"] == "tip"

    def test_defaults_to_info_and_note_title(self):
        soup = _render('<div class="note"><p>FYI</p></div>')
        callout = soup.find("aside")
        assert callout["data-variant"] == "info"
        assert callout.find(class_="note-title").get_text() == "Note"

    def test_note_from_markdown(self):
        source = 'Intro\n\n<div class="note warning title=Heads-up" markdown="1">\nMind the **gap**.\n</div>\n'
        soup = BeautifulSoup(render_markdown(source), "lxml")
        callout = soup.find("aside")
        assert callout["data-variant"] == "warning"
        assert callout.find(class_="note-title").get_text() == "Heads-up"
        assert callout.find(class_="note-content").find("strong").get_text() == "gap"
        assert not callout.find(class_="note-content").find(attrs={"markdown": True})

    def test_plain_div_is_untouched(self):
        soup = _render('<div class="plain"><p>Text</p></div>')
        assert soup.find("aside") is None
        assert soup.find("div", class_="plain") is not None


class TestAccordion:
    def test_summary_becomes_title_and_leaves_body(self):
        soup = _render("<details><summary>Click me</summary><p>Hidden body</p></details>")
        details = soup.find("details")
        assert details["class"] == ["accordion"]
        assert details.find("summary").get_text() == "Click me"
        body = details.find("div", class_="accordion-content")
        assert "Hidden body" in body.get_text()
        assert "Click me" not in body.get_text()

    def test_accordion_from_markdown(self):
        source = "Intro\n\n<details>\n<summary>Show more</summary>\n<p>Hidden body</p>\n</details>\n\nAfter\n"
        soup = BeautifulSoup(render_markdown(source), "lxml")
        details = soup.find("details")
        assert details["class"] == ["accordion"]
        assert details.find("summary").get_text() == "Show more"
        body = details.find("div", class_="accordion-content")
        assert "Hidden body" in body.get_text()
        assert "Show more" not in body.get_text()
        assert soup.find("p", string="After") is not None

    def test_first_summary_wins(self):
        soup = _render(
            "<details><summary>First</summary><summary>Second</summary><p>Body</p></details>"
        )
        details = soup.find("details")
        assert details.find("summary").get_text() == "First"
        body = details.find("div", class_="accordion-content")
        leftover = body.find("span", attrs={"data-accordion-summary": "true"})
        assert leftover is not None
        assert leftover.get_text() == "Second"

    def test_default_title_without_summary(self):
        soup = _render("<details><p>Only body</p></details>")
        assert soup.find("summary").get_text() == "Notes"

    def test_title_attribute_used_without_summary(self):
        soup = _render('<details title="More"><p>Only body</p></details>')
        assert soup.find("summary").get_text() == "More"

    def test_summary_handler_returns_marker(self):
        soup = BeautifulSoup("<summary>Loose <b>bold</b></summary>", "html.parser")
        marker = render_summary(soup.find("summary"), soup)
        assert marker.name == "span"
        assert marker["data-accordion-summary"] == "true"
        assert marker.get_text() == "Loose bold"


class TestTables:
    _TABLE = (
        "<table><thead><tr><th>Call</th></tr></thead>"
        "<tbody><tr><td>open</td></tr></tbody></table>"
    )

    def test_table_is_wrapped_and_styled(self):
        soup = _render(self._TABLE)
        wrapper = soup.find("div", class_="overflow-x-auto")
        assert wrapper is not None
        table = wrapper.find("table")
        assert "min-w-full" in table["class"]

    def test_cells_are_styled_and_content_kept(self):
        soup = _render(self._TABLE)
        assert "uppercase" in soup.find("th")["class"]
        assert "text-sm" in soup.find("td")["class"]
        assert soup.find("td").get_text() == "open"
        assert "bg-muted/70" in soup.find("thead")["class"]

    def test_caller_classes_are_kept(self):
        soup = _render('<table class="data"><tbody><tr><td>1</td></tr></tbody></table>')
        classes = soup.find("table")["class"]
        assert "data" in classes
        assert "min-w-full" in classes


class TestLinks:
    def test_forces_target_and_rel(self):
        soup = _render('<p><a href="https://example.com" target="_self" rel="opener">x</a></p>')
        link = soup.find("a")
        assert link["href"] == "https://example.com"
        assert link["target"] == "_blank"
        assert link["rel"] == ["noopener", "noreferrer"]
        assert link.get_text() == "x"

    def test_every_link_from_markdown(self):
        soup = BeautifulSoup(
            render_markdown("[one](https://a.example) and [two](/local)"), "lxml"
        )
        links = soup.find_all("a")
        assert len(links) == 2
        for link in links:
            assert link["target"] == "_blank"
            assert "noopener" in link["rel"]


class TestCode:
    def test_single_line_without_language_is_inline(self):
        soup = BeautifulSoup(render_markdown("Compute `x + 1` now."), "lxml")
        code = soup.find("code")
        assert code["class"] == ["inline-code"]
        assert code.get_text() == "x + 1"
        assert soup.find("div", class_="code-block") is None

    def test_fenced_python_is_a_highlighted_block(self):
        source = "```python\ndef f(x):\n    y = x + 1\n    return y\n```\n"
        soup = BeautifulSoup(render_markdown(source), "lxml")
        block = soup.find("div", class_="code-block")
        assert block is not None
        assert block["data-language"] == "python"
        assert "return y" in block.get_text()
        # Pygments wraps tokens in spans
        assert block.find("code").find("span") is not None

    def test_block_replaces_the_markdown_pre(self):
        source = "```python\na = 1\nb = 2\n```\n"
        soup = BeautifulSoup(render_markdown(source), "lxml")
        pre = soup.find("pre")
        assert pre.find_parent("pre") is None
        assert pre.parent["class"] == ["code-block"]

    def test_single_line_with_language_class_is_block(self):
        soup = _render('<p><code class="language-bash">ls -la</code></p>')
        assert soup.find("div", class_="code-block")["data-language"] == "bash"

    def test_lang_prefix_is_recognised(self):
        soup = _render('<p><code class="lang-js">f()</code></p>')
        assert soup.find("div", class_="code-block")["data-language"] == "js"

    def test_multiline_without_language_is_block(self):
        soup = _render("<pre><code>first\nsecond</code></pre>")
        block = soup.find("div", class_="code-block")
        assert block is not None
        assert not block.has_attr("data-language")
        assert "second" in block.get_text()

    def test_unknown_language_still_renders(self):
        soup = _render('<pre><code class="language-nosuchlang">a\nb</code></pre>')
        block = soup.find("div", class_="code-block")
        assert block["data-language"] == "nosuchlang"
        assert "a" in block.get_text()


class TestBlockquote:
    def test_caller_classes_kept_with_fixed_styling(self):
        soup = _render('<blockquote class="pull"><p>Quote</p></blockquote>')
        classes = soup.find("blockquote")["class"]
        assert "pull" in classes
        assert "border-primary" in classes


class TestOverrideTable:
    def test_unknown_elements_pass_through(self):
        html = "<section><p>Plain <em>text</em></p></section>"
        assert apply_overrides(html) == html

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_OVERRIDES["p"] = lambda element, soup: None

    def test_failing_override_degrades_to_default(self, caplog):
        caplog.set_level(logging.WARNING)

        def boom(element, soup):
            raise RuntimeError("kaboom")

        table = build_override_table({"em": boom})
        html = apply_overrides("<p>Keep <em>this</em></p>", table)
        assert html == "<p>Keep <em>this</em></p>"
        assert any("kaboom" in r.getMessage() for r in caplog.records)

    def test_extra_overrides_extend_defaults(self):
        def shout(element, soup):
            element.string = element.get_text().upper()
            return element

        table = build_override_table({"em": shout})
        soup = BeautifulSoup(apply_overrides('<p><em>hi</em> <a href="/x">l</a></p>', table), "lxml")
        assert soup.find("em").get_text() == "HI"
        assert soup.find("a")["target"] == "_blank"


class TestHelpers:
    def test_extract_language(self):
        assert extract_language("foo language-python") == "python"
        assert extract_language("lang-rust") == "rust"
        assert extract_language("") is None

    def test_flatten_text(self):
        assert flatten_text("abc") == "abc"
        assert flatten_text(["a", "b\n", "c"]) == "ab\nc"
