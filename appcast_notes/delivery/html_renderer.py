"""
Release Notes Renderer
======================

Serializes release records into a self-contained HTML document for an
embedded browser surface.

Features:
- Light theme by default, dark theme via ``prefers-color-scheme``
- One block per release: version line, date line, description body
- Fixed fallback document for feeds that cannot be parsed

Record content is inserted without escaping. The feed is published by the
same party that ships the application, and descriptions carry HTML.
"""

import html
from typing import Iterable, Optional

from ..models import ReleaseRecord
from ..config.settings import get_settings
from ..utils.logging import get_logger_for_component


STYLESHEET = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
            line-height: 1.6;
            margin: 0;
            padding: 30px;
            background-color: #f8f9fa;
            color: #2c3e50;
        }

        .container {
            max-width: 800px;
            margin: 0 auto;
        }

        .release {
            background-color: #ffffff;
            border-radius: 10px;
            box-shadow: 0 2px 10px rgba(0, 0, 0, 0.05);
            margin-bottom: 25px;
            padding: 25px;
            transition: transform 0.2s ease;
        }

        .release:hover {
            transform: translateY(-2px);
            box-shadow: 0 4px 15px rgba(0, 0, 0, 0.1);
        }

        .version {
            font-size: 24px;
            font-weight: 600;
            color: #1a73e8;
            margin-bottom: 8px;
        }

        .date {
            color: #666666;
            font-size: 14px;
            margin-bottom: 15px;
            padding-bottom: 15px;
            border-bottom: 1px solid #eeeeee;
        }

        .description {
            color: #444444;
            font-size: 15px;
            line-height: 1.7;
        }

        ul {
            margin: 15px 0;
            padding-left: 20px;
        }

        li {
            margin: 8px 0;
        }

        code {
            background-color: #f6f8fa;
            border-radius: 4px;
            padding: 2px 6px;
            font-family: Menlo, Monaco, monospace;
            font-size: 0.9em;
        }

        @media (prefers-color-scheme: dark) {
            body {
                background-color: #1a1a1a;
                color: #e0e0e0;
            }

            .release {
                background-color: #2d2d2d;
                box-shadow: 0 2px 10px rgba(0, 0, 0, 0.2);
            }

            .version {
                color: #4a9eff;
            }

            .date {
                color: #999999;
                border-bottom-color: #444444;
            }

            .description {
                color: #cccccc;
            }

            code {
                background-color: #333333;
            }
        }
"""

ERROR_DOCUMENT = """<!DOCTYPE html>
<html>
<body>
    <h1>Error loading release notes</h1>
    <p>Failed to load or parse the release notes. Please try again later.</p>
</body>
</html>
"""


class HtmlRenderer:
    """Renders release records as a themed HTML document."""

    def __init__(self, document_title: Optional[str] = None):
        """Initialize renderer.

        Args:
            document_title: Text for the ``<title>`` element (default from config)
        """
        self.document_title = document_title or get_settings().render.document_title
        self.logger = get_logger_for_component("html_renderer")

    def render(self, records: Iterable[ReleaseRecord]) -> str:
        """Render records, in the given order, into one document.

        An empty sequence yields a document with an empty container.
        """
        blocks = [self._render_release(record) for record in records]
        self.logger.debug(f"Rendered {len(blocks)} release blocks")

        body = "\n".join(blocks)
        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<head>\n"
            '    <meta charset="UTF-8">\n'
            f"    <title>{html.escape(self.document_title)}</title>\n"
            f"    <style>{STYLESHEET}    </style>\n"
            "</head>\n"
            "<body>\n"
            '    <div class="container">\n'
            f"{body}\n"
            "    </div>\n"
            "</body>\n"
            "</html>\n"
        )

    def render_error(self) -> str:
        """Return the fixed fallback document."""
        return ERROR_DOCUMENT

    @staticmethod
    def _render_release(record: ReleaseRecord) -> str:
        return (
            '        <div class="release">\n'
            f'            <div class="version">Version {record.short_version} ({record.version})</div>\n'
            f'            <div class="date">{record.publish_date}</div>\n'
            f'            <div class="description">{record.description}</div>\n'
            "        </div>"
        )
