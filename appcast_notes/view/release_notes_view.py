"""
Release Notes View
==================

Host-facing entry point of the release notes pipeline.

A host (an embedded browser widget, a preview tool, a test) creates a
``ReleaseNotesView``, points ``render_target`` at whatever displays HTML,
optionally observes ``load_state``, and calls ``render_feed(url)`` whenever it
wants the notes shown. Each call runs one cycle:

    fetch -> parse -> normalize -> render -> render_target(document)

Failures stay inside the view. An invalid URL does nothing, a transport
failure leaves the display untouched, and an unparsable feed shows the
fallback error document.
"""

import asyncio
from typing import Callable, Optional, Set

from ..config.settings import get_settings, OverlapPolicy
from ..delivery.html_renderer import HtmlRenderer
from ..ingestion.feed_parser import FeedParser
from ..ingestion.fetcher import FeedFetcher
from ..models import PipelineOutcome
from ..processing.normalizers import DateNormalizer, ReleaseRecordBuilder
from ..utils.exceptions import (
    AppcastNotesError,
    FeedFetchError,
    FeedParseError,
    handle_exception,
)
from ..utils.logging import get_logger_for_component, PerformanceLogger
from ..utils.validators import validate_url
from .load_state import LoadState, LoadStateSignal

RenderTarget = Callable[[str], None]
Dispatcher = Callable[[Callable[[], None]], None]


class ReleaseNotesView:
    """Drives fetch/parse/render cycles and hands documents to the host.

    ``last_error`` holds the mapped exception of the most recent
    ``render_feed`` task that crashed, if any.
    """

    def __init__(
        self,
        render_target: Optional[RenderTarget] = None,
        *,
        fetcher: Optional[FeedFetcher] = None,
        parser: Optional[FeedParser] = None,
        builder: Optional[ReleaseRecordBuilder] = None,
        renderer: Optional[HtmlRenderer] = None,
        load_state: Optional[LoadStateSignal] = None,
        dispatcher: Optional[Dispatcher] = None,
        overlap_policy: Optional[OverlapPolicy] = None,
        show_error_on_fetch_failure: Optional[bool] = None,
        parse_in_worker: Optional[bool] = None,
    ):
        """Initialize the view.

        Args:
            render_target: Callable receiving each finished document
            fetcher: Feed fetcher (default: configured FeedFetcher)
            parser: Feed parser
            builder: Record builder applying date/description normalization
            renderer: HTML renderer
            load_state: Loading flag to drive (default: a new signal)
            dispatcher: Runs the render_target call on the context that owns
                the display surface. Default calls it directly on the event
                loop that runs the cycle.
            overlap_policy: Behaviour for overlapping render_feed calls
            show_error_on_fetch_failure: Show the fallback document on
                transport failures instead of leaving the display untouched
            parse_in_worker: Parse and render in a worker thread
        """
        settings = get_settings()

        self._render_target = render_target
        self.fetcher = fetcher or FeedFetcher()
        self.parser = parser or FeedParser()
        self.builder = builder or ReleaseRecordBuilder(
            date_normalizer=DateNormalizer(settings.render.display_timezone)
        )
        self.renderer = renderer or HtmlRenderer()
        self.load_state = load_state or LoadStateSignal()
        self.dispatcher = dispatcher

        self.overlap_policy = OverlapPolicy(
            overlap_policy or settings.view.overlap_policy
        )
        self.show_error_on_fetch_failure = (
            settings.view.show_error_on_fetch_failure
            if show_error_on_fetch_failure is None
            else show_error_on_fetch_failure
        )
        self.parse_in_worker = (
            settings.view.parse_in_worker if parse_in_worker is None else parse_in_worker
        )

        self.logger = get_logger_for_component("release_notes_view")

        self._generation = 0
        self._displayed_generation = 0
        self._active_cycles = 0
        # Created on first use, on the loop that runs the cycles
        self._serial_lock: Optional[asyncio.Lock] = None
        self._serial_lock_loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()
        self.last_error: Optional[AppcastNotesError] = None

    # Host interface

    @property
    def render_target(self) -> Optional[RenderTarget]:
        return self._render_target

    @render_target.setter
    def render_target(self, target: Optional[RenderTarget]) -> None:
        self._render_target = target

    @property
    def is_loading(self) -> bool:
        return self.load_state.is_loading

    @is_loading.setter
    def is_loading(self, loading: bool) -> None:
        self.load_state.value = LoadState.LOADING if loading else LoadState.IDLE

    def render_feed(self, url: str) -> Optional[asyncio.Task]:
        """Start a render cycle for url without waiting for it.

        Must be called from a running event loop. Returns the scheduled task,
        or None when the URL is invalid and nothing was started.
        """
        if not validate_url(url):
            self.logger.debug(f"Ignoring invalid feed URL: {url!r}")
            return None

        task = asyncio.get_running_loop().create_task(self.load(url))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def load(self, url: str) -> PipelineOutcome:
        """Run one render cycle and report how it ended.

        Args:
            url: Appcast URL

        Returns:
            Outcome of the cycle
        """
        if not validate_url(url):
            self.logger.debug(f"Ignoring invalid feed URL: {url!r}")
            return PipelineOutcome.INVALID_URL

        if self.overlap_policy == OverlapPolicy.FIRST_WINS and self._active_cycles:
            self.logger.info(f"Fetch already in progress, skipping {url}")
            return PipelineOutcome.SKIPPED

        self._generation += 1
        generation = self._generation
        self._active_cycles += 1
        try:
            if self.overlap_policy == OverlapPolicy.SERIALIZE:
                async with self._get_serial_lock():
                    return await self._run_cycle(url, generation)
            return await self._run_cycle(url, generation)
        finally:
            self._active_cycles -= 1

    # Pipeline

    def _get_serial_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._serial_lock is None or self._serial_lock_loop is not loop:
            self._serial_lock = asyncio.Lock()
            self._serial_lock_loop = loop
        return self._serial_lock

    async def _run_cycle(self, url: str, generation: int) -> PipelineOutcome:
        with PerformanceLogger(self.logger, "release notes cycle", feed_url=url):
            try:
                content = await self.fetcher.fetch(url, load_state=self.load_state)
            except FeedFetchError as e:
                self.logger.warning(f"Feed fetch failed: {e}", extra=e.to_dict())
                if not self.show_error_on_fetch_failure:
                    return PipelineOutcome.FETCH_FAILED
                document = self.renderer.render_error()
                outcome = PipelineOutcome.ERROR_DOCUMENT
            else:
                try:
                    document = await self._build_document_async(content, url)
                    outcome = PipelineOutcome.RENDERED
                except FeedParseError as e:
                    self.logger.warning(f"Feed parse failed: {e}", extra=e.to_dict())
                    document = self.renderer.render_error()
                    outcome = PipelineOutcome.ERROR_DOCUMENT

            if not self._owns_display(generation):
                self.logger.debug(f"Discarding superseded result for {url}")
                return PipelineOutcome.SUPERSEDED

            self._displayed_generation = max(self._displayed_generation, generation)
            self._display(document)
            return outcome

    async def _build_document_async(self, content: bytes, url: str) -> str:
        if self.parse_in_worker:
            return await asyncio.to_thread(self._build_document, content, url)
        return self._build_document(content, url)

    def _build_document(self, content: bytes, url: str) -> str:
        items = self.parser.parse(content, feed_url=url)
        records = self.builder.build(items)
        self.logger.info(f"Rendering {len(records)} releases from {url}")
        return self.renderer.render(records)

    def _owns_display(self, generation: int) -> bool:
        """Whether a finished cycle may still replace the displayed document.

        Under latest_wins a document is dropped once a more recently started
        cycle has displayed one. Cycles that ended without a document do not
        count, so a newer silent fetch failure never hides an older success.
        """
        if self.overlap_policy == OverlapPolicy.LATEST_WINS:
            return generation > self._displayed_generation
        return True

    def _display(self, document: str) -> None:
        target = self._render_target
        if target is None:
            self.logger.warning("No render target set, dropping document")
            return

        if self.dispatcher is not None:
            self.dispatcher(lambda: target(document))
        else:
            target(document)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error(
                f"Release notes cycle crashed: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )
            self.last_error = handle_exception(error, self.logger, "render_feed")


async def render_release_notes(url: str) -> Optional[str]:
    """Quick function: run one cycle and return the displayed document, if any."""
    documents = []
    view = ReleaseNotesView(render_target=documents.append, parse_in_worker=False)
    await view.load(url)
    return documents[-1] if documents else None
