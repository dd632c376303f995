"""
Unit Tests for the Release Notes Renderer
=========================================

Tests for document structure, theming, empty feeds, the fallback document
and reading rendered values back out.
"""

from bs4 import BeautifulSoup

from appcast_notes.delivery.html_renderer import HtmlRenderer, ERROR_DOCUMENT
from appcast_notes.models import ReleaseRecord


RECORDS = [
    ReleaseRecord(
        version="210",
        short_version="2.1.0",
        publish_date="2024-12-04 10:00:00",
        description="<ul><li>Dark mode</li><li>Faster sync</li></ul>",
    ),
    ReleaseRecord(
        version="201",
        short_version="2.0.1",
        publish_date="not-a-date",
        description="<p>Fixed bug</p>",
    ),
    ReleaseRecord(),
]


def _soup(document: str) -> BeautifulSoup:
    return BeautifulSoup(document, "html.parser")


class TestHtmlRenderer:
    """Test cases for HtmlRenderer."""

    def setup_method(self):
        self.renderer = HtmlRenderer()

    def test_renders_one_block_per_record_in_order(self):
        soup = _soup(self.renderer.render(RECORDS))

        blocks = soup.select("div.container > div.release")
        assert len(blocks) == 3
        assert [b.select_one(".version").get_text() for b in blocks] == [
            "Version 2.1.0 (210)",
            "Version 2.0.1 (201)",
            "Version  ()",
        ]

    def test_round_trip_reproduces_record_values(self):
        soup = _soup(self.renderer.render(RECORDS))

        for block, record in zip(soup.select("div.release"), RECORDS):
            assert block.select_one(".version").get_text() == (
                f"Version {record.short_version} ({record.version})"
            )
            assert block.select_one(".date").get_text() == record.publish_date
            assert block.select_one(".description").decode_contents() == record.description

    def test_description_markup_is_not_escaped(self):
        document = self.renderer.render(RECORDS[:1])

        assert "<ul><li>Dark mode</li><li>Faster sync</li></ul>" in document
        assert "&lt;ul&gt;" not in document

    def test_zero_records_renders_empty_container(self):
        document = self.renderer.render([])
        soup = _soup(document)

        assert document.startswith("<!DOCTYPE html>")
        container = soup.select_one("body > div.container")
        assert container is not None
        assert container.select("div.release") == []

    def test_light_and_dark_themes_embedded(self):
        style = _soup(self.renderer.render([])).select_one("head > style").get_text()

        assert "background-color: #f8f9fa" in style
        assert "@media (prefers-color-scheme: dark)" in style

    def test_document_title(self):
        soup = _soup(HtmlRenderer(document_title="Notes & News").render([]))

        assert soup.title.get_text() == "Notes & News"

    def test_document_title_from_settings(self, monkeypatch):
        from appcast_notes.config.settings import get_settings

        monkeypatch.setenv("APPCAST_NOTES_RENDER__DOCUMENT_TITLE", "What's New")
        get_settings(reload=True)

        assert _soup(HtmlRenderer().render([])).title.get_text() == "What's New"

    def test_error_document_is_fixed(self):
        document = self.renderer.render_error()

        assert document == ERROR_DOCUMENT
        soup = _soup(document)
        assert soup.h1.get_text() == "Error loading release notes"
        assert soup.select("div.release") == []
