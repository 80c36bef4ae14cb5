"""Unit tests for article and webpage rendering."""

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from tui_rss.rendering.extractor import PageMetadata, extract_content, extract_metadata
from tui_rss.rendering.renderer import (
    NO_CONTENT,
    NO_READABLE_CONTENT,
    RULE,
    SUMMARY_FAILED,
    filter_noise,
    metadata_header,
    reading_minutes,
    render_summary,
    render_webpage,
)
from tui_rss.rendering.text import WRAP_WIDTH


class TestRenderSummary:
    """Tests for summary mode."""

    def test_empty_input(self):
        """Test the placeholder for missing bodies."""
        assert render_summary("") == NO_CONTENT
        assert render_summary("   \n ") == NO_CONTENT

    def test_plain_paragraphs(self):
        """Test that paragraphs are separated by one blank line."""
        assert render_summary("<p>One</p><p>Two</p>") == "One\n\nTwo"

    def test_primary_heading_uppercased(self):
        """Test that only h1 is uppercased."""
        text = render_summary("<h1>Big news</h1><h2>Sub head</h2><p>Body</p>")
        assert text == "BIG NEWS\n\nSub head\n\nBody"

    def test_unordered_list(self):
        """Test bullet list markers."""
        text = render_summary("<ul><li>Apples</li><li>Pears</li></ul>")
        assert text == "  • Apples\n  • Pears"

    def test_ordered_list(self):
        """Test numbered list markers."""
        text = render_summary("<ol><li>First</li><li>Second</li></ol>")
        assert text == "  1. First\n  2. Second"

    def test_links_render_as_text(self):
        """Test that hrefs are dropped."""
        text = render_summary('<p>Read <a href="https://example.com/x">the post</a>.</p>')
        assert text == "Read the post."

    def test_images_skipped(self):
        """Test that images leave no trace."""
        text = render_summary('<p>Before<img src="a.png" alt="An image">After</p>')
        assert text == "BeforeAfter"

    def test_preformatted_block(self):
        """Test that code keeps its layout and gets blank lines around it."""
        html = "<p>Intro</p><pre>def f():\n    return 1</pre><p>Outro</p>"
        assert render_summary(html) == "Intro\n\ndef f():\n    return 1\n\nOutro"

    def test_wraps_at_width(self):
        """Test that long paragraphs wrap."""
        html = "<p>" + " ".join(["word"] * 60) + "</p>"
        lines = render_summary(html).split("\n")

        assert len(lines) > 1
        assert all(len(line) <= WRAP_WIDTH for line in lines)

    def test_no_trailing_whitespace(self):
        """Test that every line is right-trimmed."""
        text = render_summary("<p>a   </p><blockquote><p>quoted </p></blockquote>")
        assert all(line == line.rstrip() for line in text.split("\n"))

    def test_entities_decoded(self):
        """Test that escaped entities left in text are decoded."""
        assert render_summary("<p>Tom &amp;amp; Jerry</p>") == "Tom & Jerry"

    def test_plain_text_body(self):
        """Test that a body without markup renders as is."""
        assert render_summary("Just words") == "Just words"

    @pytest.mark.parametrize("html", [
        "<p>unclosed <b>bold <i>italic",
        "<div><p>misnested</div></p> tail",
        "</span>stray closing tags</em></p>",
        "<ul><li>one<li>two</ul><table><tr><td>cell<td>other",
        "<p>hidden<!-- a comment --> text</p><script>if (a < b) {}</script>",
        "<h1 class=\"x\" data-y=\"1\">Title<h2>Sub<p>body",
    ])
    def test_tag_soup_leaves_no_markup(self, html):
        """Test that broken markup never leaks angle brackets into the text."""
        text = render_summary(html)

        assert "<" not in text
        assert ">" not in text
        assert text not in (NO_CONTENT, SUMMARY_FAILED)

    def test_failure_degrades(self):
        """Test that internal errors produce the fallback message."""
        with patch("tui_rss.rendering.renderer.html_to_text", side_effect=RuntimeError("boom")):
            assert render_summary("<p>never rendered</p>") == SUMMARY_FAILED


class TestRenderWebpage:
    """Tests for extracted mode."""

    def test_empty_input(self):
        """Test the placeholder for an empty page."""
        assert render_webpage("") == NO_CONTENT

    def test_main_content_with_header(self, article_page):
        """Test metadata header, rule and extracted body."""
        lines = render_webpage(article_page).split("\n")

        assert lines[0] == "By Jane Doe"
        assert lines[1] == "Example Site"
        assert lines[2] == "1 min read"
        assert lines[3] == RULE
        assert lines[4] == ""
        assert lines[5].startswith("The first paragraph")

    def test_navigation_removed(self, article_page):
        """Test that nav and footer text do not appear."""
        text = render_webpage(article_page)

        assert "Home" not in text
        assert "Copyright" not in text

    def test_no_header_without_metadata(self):
        """Test that the header is omitted when the page has no metadata."""
        html = (
            "<html><body><article><p>A long enough paragraph, with commas, "
            "to count as the article body.</p></article></body></html>"
        )
        text = render_webpage(html)

        assert RULE not in text
        assert text.startswith("A long enough paragraph")

    def test_no_readable_content(self):
        """Test the placeholder when nothing survives extraction."""
        html = "<html><body><script>x()</script><style>p {}</style></body></html>"
        assert render_webpage(html) == NO_READABLE_CONTENT

    def test_urls_never_shown(self):
        """Test that link targets and bare URL lines are dropped."""
        html = (
            '<html><body><div class="post"><p>See <a href="https://secret.example/">this story</a>, '
            "which is long enough to be counted as real article prose.</p>"
            "<p>https://example.com/raw-link</p></div></body></html>"
        )
        text = render_webpage(html)

        assert "secret.example" not in text
        assert "https://example.com/raw-link" not in text
        assert "this story" in text


class TestExtractor:
    """Tests for content and metadata extraction."""

    def test_keeps_every_short_paragraph(self):
        """Test that sibling paragraphs in wrapper divs are all kept."""
        paragraphs = "".join(
            f'<div class="para"><p>Paragraph {i} says something short, but real. filler filler filler</p></div>'
            for i in range(5)
        )
        html = f"<html><body><section>{paragraphs}</section></body></html>"
        text = render_webpage(html)

        for i in range(5):
            assert f"Paragraph {i} says something short" in text

    def test_prefers_prose_over_link_list(self):
        """Test that the story is extracted without the navigation links."""
        html = """
        <html><body>
            <nav><a href="/1">One</a> <a href="/2">Two</a> <a href="/3">Three</a></nav>
            <article>
                <p>This paragraph is the real story, and it has commas, clauses, and length.</p>
                <p>Another paragraph continues the story with yet more words, facts, and detail.</p>
            </article>
        </body></html>
        """
        content = extract_content(html)

        assert "real story" in content
        assert "Three" not in content

    def test_no_content(self):
        """Test that an empty page yields nothing."""
        assert extract_content("<html><body><script>x()</script></body></html>") is None

    def test_metadata(self):
        """Test byline, date and site name extraction."""
        html = """
        <html><head>
            <meta name="author" content="Sam Smith">
            <meta property="article:published_time" content="2024-05-06T07:08:09Z">
            <meta property="og:site_name" content="The Paper">
        </head><body><p>Body text of the page.</p></body></html>
        """
        metadata = extract_metadata(html)

        assert metadata.byline == "Sam Smith"
        assert metadata.published_at.date() == date(2024, 5, 6)
        assert metadata.site_name == "The Paper"

    def test_metadata_empty(self):
        """Test a page with no metadata."""
        assert extract_metadata("<html><body><p>Hi</p></body></html>").is_empty


class TestHelpers:
    """Tests for header and noise helpers."""

    def test_reading_minutes_rounds_up(self):
        """Test the 200 words per minute estimate."""
        assert reading_minutes("word " * 200) == 1
        assert reading_minutes("word " * 201) == 2

    def test_header_date_format(self):
        """Test the long-form date line."""
        metadata = PageMetadata(published_at=datetime(2024, 3, 5, tzinfo=timezone.utc))
        assert metadata_header(metadata, 3) == ["March 5, 2024", "3 min read", RULE, ""]

    def test_header_empty(self):
        """Test that no metadata means no header, not even reading time."""
        assert metadata_header(PageMetadata(), 4) == []

    def test_filter_noise(self):
        """Test that chrome lines are dropped and blank runs collapse."""
        text = "\n".join([
            "Real sentence here.",
            "",
            "",
            "https://example.com/x",
            "[Advertisement]",
            "Share on Twitter",
            "  • Tweet this",
            "|",
            "",
            "Another real line.",
        ])
        assert filter_noise(text) == "Real sentence here.\n\nAnother real line."
