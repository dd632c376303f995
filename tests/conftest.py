"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for Appcast Notes tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Drop settings leaking in from the developer's shell before any imports
for _key in [k for k in os.environ if k.startswith("APPCAST_NOTES_")]:
    del os.environ[_key]


SAMPLE_APPCAST = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:sparkle="http://www.andymatuschak.org/xml-namespaces/sparkle">
    <channel>
        <title>Example App Changelog</title>
        <item>
            <title>Version 2.1.0</title>
            <sparkle:version>210</sparkle:version>
            <sparkle:shortVersionString>2.1.0</sparkle:shortVersionString>
            <pubDate>Wed, 04 Dec 2024 10:00:00 +0000</pubDate>
            <description><![CDATA[<ul><li>Dark mode</li><li>Faster sync</li></ul>]]></description>
            <enclosure url="https://example.com/app-2.1.0.zip" length="1024" type="application/octet-stream"/>
        </item>
        <item>
            <title>Version 2.0.1</title>
            <sparkle:version>201</sparkle:version>
            <sparkle:shortVersionString>2.0.1</sparkle:shortVersionString>
            <pubDate>Mon, 18 Nov 2024 08:30:15 +0000</pubDate>
            <description><![CDATA[<p>Fixed bug</p>]]></description>
        </item>
        <item>
            <title>Version 2.0.0</title>
            <sparkle:version>200</sparkle:version>
            <sparkle:shortVersionString>2.0.0</sparkle:shortVersionString>
            <pubDate>Fri, 01 Nov 2024 17:45:00 +0000</pubDate>
            <description><![CDATA[<p>Initial <code>2.x</code> release</p>]]></description>
        </item>
    </channel>
</rss>
"""

EMPTY_APPCAST = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:sparkle="http://www.andymatuschak.org/xml-namespaces/sparkle">
    <channel>
        <title>Example App Changelog</title>
    </channel>
</rss>
"""

# No XML document can be recovered from this
BROKEN_PAYLOAD = b"this is definitely not an appcast"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload the settings singleton so env changes in one test stay local."""
    from appcast_notes.config.settings import get_settings

    yield get_settings(reload=True)
    get_settings(reload=True)


@pytest.fixture
def sample_appcast() -> bytes:
    return SAMPLE_APPCAST


@pytest.fixture
def empty_appcast() -> bytes:
    return EMPTY_APPCAST


@pytest.fixture
def broken_payload() -> bytes:
    return BROKEN_PAYLOAD


@pytest.fixture
def mock_session_factory():
    """Build aiohttp session doubles returning a canned response.

    Usage:
        session = mock_session_factory(b"<rss/>", status=200)
        FeedFetcher(session=session)
    """

    def factory(body: bytes = b"", status: int = 200, reason: str = "OK", error=None):
        response = MagicMock()
        response.status = status
        response.reason = reason
        response.read = AsyncMock(return_value=body)

        context_manager = MagicMock()
        if error is not None:
            context_manager.__aenter__ = AsyncMock(side_effect=error)
        else:
            context_manager.__aenter__ = AsyncMock(return_value=response)
        context_manager.__aexit__ = AsyncMock(return_value=False)

        session = MagicMock()
        session.get = MagicMock(return_value=context_manager)
        return session

    return factory
