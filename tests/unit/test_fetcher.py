"""
Unit Tests for the Appcast Fetcher
==================================

Tests for successful downloads, transport failures, URL validation and
loading flag transitions.
"""

import asyncio

import aiohttp
import pytest

from appcast_notes.ingestion.fetcher import FeedFetcher
from appcast_notes.utils.exceptions import FeedFetchError, ValidationError, ErrorCode
from appcast_notes.view.load_state import LoadState, LoadStateSignal


FEED_URL = "https://updates.example.com/appcast.xml"


class TestFeedFetcher:
    """Test cases for FeedFetcher."""

    def test_initialization_uses_settings(self, monkeypatch):
        from appcast_notes.config.settings import get_settings

        monkeypatch.setenv("APPCAST_NOTES_FETCH__REQUEST_TIMEOUT", "12")
        monkeypatch.setenv("APPCAST_NOTES_FETCH__USER_AGENT", "Tester/2.0")
        get_settings(reload=True)

        fetcher = FeedFetcher()

        assert fetcher.timeout == 12
        assert fetcher.user_agent == "Tester/2.0"
        assert fetcher.ssl_context is not None

    def test_no_timeout_by_default(self):
        assert FeedFetcher().timeout is None

    @pytest.mark.asyncio
    async def test_fetch_returns_body(self, mock_session_factory, sample_appcast):
        session = mock_session_factory(sample_appcast)
        fetcher = FeedFetcher(session=session)

        content = await fetcher.fetch(FEED_URL)

        assert content == sample_appcast
        session.get.assert_called_once_with(FEED_URL)

    @pytest.mark.asyncio
    async def test_invalid_url_makes_no_request(self, mock_session_factory):
        session = mock_session_factory(b"")
        signal = LoadStateSignal()
        changes = []
        signal.subscribe(changes.append)

        with pytest.raises(ValidationError):
            await FeedFetcher(session=session).fetch("not a url", load_state=signal)

        session.get.assert_not_called()
        assert changes == []

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self, mock_session_factory):
        session = mock_session_factory(b"gone", status=404, reason="Not Found")

        with pytest.raises(FeedFetchError) as exc_info:
            await FeedFetcher(session=session).fetch(FEED_URL)

        assert exc_info.value.error_code == ErrorCode.FEED_HTTP_STATUS
        assert exc_info.value.context["status"] == 404
        assert "HTTP 404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_client_error_raises_fetch_error(self, mock_session_factory):
        session = mock_session_factory(error=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(FeedFetchError) as exc_info:
            await FeedFetcher(session=session).fetch(FEED_URL)

        assert exc_info.value.error_code == ErrorCode.FEED_NETWORK_ERROR
        assert exc_info.value.recoverable
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_error(self, mock_session_factory):
        session = mock_session_factory(error=asyncio.TimeoutError())

        with pytest.raises(FeedFetchError) as exc_info:
            await FeedFetcher(session=session).fetch(FEED_URL)

        assert exc_info.value.error_code == ErrorCode.FEED_FETCH_TIMEOUT

    @pytest.mark.asyncio
    async def test_load_state_brackets_successful_request(self, mock_session_factory):
        signal = LoadStateSignal()
        seen_during_request = []
        session = mock_session_factory(b"<rss/>")
        response_cm = session.get.return_value
        original_enter = response_cm.__aenter__

        async def observing_enter(*args, **kwargs):
            seen_during_request.append(signal.value)
            return await original_enter(*args, **kwargs)

        response_cm.__aenter__ = observing_enter

        await FeedFetcher(session=session).fetch(FEED_URL, load_state=signal)

        assert seen_during_request == [LoadState.LOADING]
        assert signal.value == LoadState.IDLE

    @pytest.mark.asyncio
    async def test_load_state_reset_after_failure(self, mock_session_factory):
        signal = LoadStateSignal()
        changes = []
        signal.subscribe(changes.append)
        session = mock_session_factory(error=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(FeedFetchError):
            await FeedFetcher(session=session).fetch(FEED_URL, load_state=signal)

        assert changes == [LoadState.LOADING, LoadState.IDLE]
