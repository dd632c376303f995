"""
Appcast Notes - Release Notes Renderer
======================================

Fetches a Sparkle-style appcast, extracts its releases and renders them as a
themed HTML document for an embedded browser view.

Main Components:
- Ingestion: aiohttp fetcher and tolerant lxml appcast parser
- Processing: publish date normalization and CDATA stripping
- Delivery: HTML renderer with light/dark themes
- View: host entry point and observable loading flag
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__author__ = "Appcast Notes Development Team"
__description__ = "Release notes renderer for appcast feeds"

# Core imports for easy access
from .config.settings import get_settings
from .models import ReleaseRecord, PipelineOutcome
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import AppcastNotesError
from .view.load_state import LoadState, LoadStateSignal
from .view.release_notes_view import ReleaseNotesView, render_release_notes

__all__ = [
    "get_settings",
    "ReleaseRecord",
    "PipelineOutcome",
    "configure_application_logging",
    "get_logger_for_component",
    "AppcastNotesError",
    "LoadState",
    "LoadStateSignal",
    "ReleaseNotesView",
    "render_release_notes",
]
