"""
Appcast Fetcher
===============

Downloads raw appcast bytes over HTTP with aiohttp and reports request
activity to a load state signal.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
import certifi

from ..config.settings import get_settings
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedFetchError, ErrorCode
from ..utils.validators import URLValidator
from ..view.load_state import LoadStateSignal


class FeedFetcher:
    """Fetches appcast documents."""

    ACCEPT_HEADER = "application/rss+xml, application/xml, text/xml, */*"

    def __init__(
        self,
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize feed fetcher.

        Args:
            timeout: Total request timeout in seconds (default from config,
                where unset means the transport's own default applies)
            user_agent: User-Agent header (default from config)
            session: Existing aiohttp session to reuse instead of opening one
                per request
        """
        settings = get_settings()
        self.timeout = timeout or settings.fetch.request_timeout
        self.user_agent = user_agent or settings.fetch.user_agent
        self.session = session
        self.logger = get_logger_for_component("fetcher")

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Yield the injected session or a freshly configured one."""
        if self.session is not None:
            yield self.session
            return

        connector = aiohttp.TCPConnector(ssl=self.ssl_context)
        headers = {
            "User-Agent": self.user_agent,
            "Accept": self.ACCEPT_HEADER,
        }
        session_kwargs = {"connector": connector, "headers": headers}
        if self.timeout:
            session_kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(**session_kwargs) as session:
            yield session

    async def fetch(
        self, feed_url: str, load_state: Optional[LoadStateSignal] = None
    ) -> bytes:
        """Download a feed.

        Args:
            feed_url: URL of the appcast
            load_state: Signal switched to loading for the request's lifetime

        Returns:
            Raw response body

        Raises:
            ValidationError: If the URL is invalid (raised before any request)
            FeedFetchError: On connection errors, timeouts and non-2xx replies
        """
        validated_url = URLValidator.validate_feed_url(feed_url)

        if load_state is not None:
            load_state.begin()
        try:
            self.logger.debug(f"Fetching feed: {validated_url}")
            async with self.get_session() as session:
                async with session.get(validated_url) as response:
                    if not 200 <= response.status < 300:
                        raise FeedFetchError(
                            f"HTTP {response.status}: {response.reason}",
                            feed_url=validated_url,
                            error_code=ErrorCode.FEED_HTTP_STATUS,
                            context={"status": response.status},
                        )
                    content = await response.read()

            self.logger.info(
                f"Fetched {len(content)} bytes from {validated_url}"
            )
            return content

        except asyncio.TimeoutError as e:
            raise FeedFetchError(
                f"Request timeout for {validated_url}",
                feed_url=validated_url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e

        except aiohttp.ClientError as e:
            raise FeedFetchError(
                f"Failed to fetch feed {validated_url}: {str(e)}",
                feed_url=validated_url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

        finally:
            if load_state is not None:
                load_state.end()
