"""
Appcast Notes Configuration System
==================================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.
"""

from pathlib import Path
from typing import Optional
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


class OverlapPolicy(str, Enum):
    """How a new render cycle interacts with one still in flight."""
    LATEST_WINS = "latest_wins"   # Newest call owns the display
    SERIALIZE = "serialize"       # One fetch at a time, in call order
    FIRST_WINS = "first_wins"     # Calls made while busy are dropped


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class FetchSettings(BaseModel):
    """Feed download configuration."""
    request_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        le=300,
        description="Total request timeout in seconds; unset leaves the transport default"
    )
    user_agent: str = Field(
        default="AppcastNotes/1.0",
        min_length=1,
        description="User-Agent header sent with feed requests"
    )


class ViewSettings(BaseModel):
    """Host view behaviour."""
    overlap_policy: OverlapPolicy = Field(
        default=OverlapPolicy.LATEST_WINS,
        description="Policy for render_feed calls that overlap an in-flight fetch"
    )
    show_error_on_fetch_failure: bool = Field(
        default=False,
        description="Render the fallback document on transport failures too"
    )
    parse_in_worker: bool = Field(
        default=True,
        description="Parse and transform feeds in a worker thread"
    )


class RenderSettings(BaseModel):
    """Document rendering configuration."""
    document_title: str = Field(default="Release Notes", description="HTML document title")
    display_timezone: Optional[str] = Field(
        default=None,
        description="IANA zone to convert publish dates into; unset keeps the feed's wall clock"
    )

    @field_validator('display_timezone')
    @classmethod
    def validate_timezone(cls, v):
        """Ensure the zone name resolves."""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class AppcastNotesSettings(BaseSettings):
    """Main application settings."""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    view: ViewSettings = Field(default_factory=ViewSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Application metadata
    app_name: str = Field(default="AppcastNotes", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "APPCAST_NOTES_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate cross-field configuration."""
        errors = []

        if self.logging.file_path:
            try:
                log_path = Path(self.logging.file_path)
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings() -> AppcastNotesSettings:
    """Load settings from environment variables and defaults.

    Environment variables override Pydantic Field defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        # Precedence: environment, then .env, then Field defaults
        settings = AppcastNotesSettings()
        settings.validate_configuration()
        return settings

    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        )


# Global settings instance
_settings: Optional[AppcastNotesSettings] = None


def get_settings(reload: bool = False) -> AppcastNotesSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
