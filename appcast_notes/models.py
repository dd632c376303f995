"""
Appcast Notes Data Models
=========================

Pydantic models shared by the parser, the normalizers and the renderer.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ReleaseRecord(BaseModel):
    """One release entry ready for display.

    Every field may be empty; a feed item never gets dropped for missing data.
    """
    version: str = Field(default="", description="Build/internal version identifier")
    short_version: str = Field(default="", description="User-facing version label")
    publish_date: str = Field(default="", description="Normalized date, or the raw value")
    description: str = Field(default="", description="Trusted HTML release notes body")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"ReleaseRecord({self.short_version or '?'} ({self.version or '?'}))"


class PipelineOutcome(str, Enum):
    """How a render cycle ended."""
    RENDERED = "rendered"                # Document built from the feed
    ERROR_DOCUMENT = "error_document"    # Fallback document shown
    FETCH_FAILED = "fetch_failed"        # Transport failure, display untouched
    INVALID_URL = "invalid_url"          # No request made
    SUPERSEDED = "superseded"            # A newer cycle owns the display
    SKIPPED = "skipped"                  # Dropped while another cycle ran
