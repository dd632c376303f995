"""
Release Field Normalizers
=========================

Turns raw appcast item fields into display-ready release records:

- Publish dates go from RFC 2822 style (``Wed, 04 Dec 2024 10:00:00 +0000``)
  to ``2024-12-04 10:00:00``, independent of the process locale
- CDATA section markers are stripped from descriptions

Both steps are non-fatal. A value that cannot be normalized is kept as is.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from ..models import ReleaseRecord
from ..ingestion.feed_parser import RawReleaseItem
from ..utils.logging import get_logger_for_component


class DateNormalizer:
    """Reformats appcast publish dates."""

    MONTHS = {
        "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
        "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
    }

    # English names on purpose: strptime's %a/%b follow the process locale
    DATE_PATTERN = re.compile(
        r"^(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun),\s+"
        r"(?P<day>\d{1,2})\s+"
        r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+"
        r"(?P<year>\d{4})\s+"
        r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})\s+"
        r"(?P<offset>[+-]\d{4}|GMT|UTC|UT|Z)$"
    )

    OUTPUT_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, display_timezone: Optional[str] = None):
        """Initialize date normalizer.

        Args:
            display_timezone: IANA zone to convert into before formatting.
                None keeps the wall-clock time written in the feed.
        """
        self.display_timezone = ZoneInfo(display_timezone) if display_timezone else None

    def normalize(self, value: str) -> str:
        """Normalize one publish date.

        Args:
            value: Date string from the feed

        Returns:
            ``YYYY-MM-DD HH:MM:SS``, or value unchanged if it does not match
            the expected format
        """
        parsed = self.parse(value)
        if parsed is None:
            return value

        if self.display_timezone is not None:
            parsed = parsed.astimezone(self.display_timezone)
        return parsed.strftime(self.OUTPUT_FORMAT)

    def parse(self, value: str) -> Optional[datetime]:
        """Parse a feed date into an aware datetime, or None."""
        if not value or not isinstance(value, str):
            return None

        match = self.DATE_PATTERN.match(value.strip())
        if not match:
            return None

        try:
            return datetime(
                int(match.group("year")),
                self.MONTHS[match.group("month")],
                int(match.group("day")),
                int(match.group("hour")),
                int(match.group("minute")),
                int(match.group("second")),
                tzinfo=self._parse_offset(match.group("offset")),
            )
        except ValueError:
            # Out-of-range fields such as 31 Feb or 25:00:00
            return None

    @staticmethod
    def _parse_offset(offset: str) -> timezone:
        if offset in ("GMT", "UTC", "UT", "Z"):
            return timezone.utc

        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[3:5])
        if minutes >= 60:
            raise ValueError(f"Invalid UTC offset: {offset}")
        return timezone(sign * timedelta(hours=hours, minutes=minutes))


class DescriptionSanitizer:
    """Removes CDATA section markers, leaving the wrapped markup intact.

    This is a textual substitution, not an HTML sanitizer: the feed is
    trusted and its markup is rendered verbatim.
    """

    CDATA_MARKERS = ("<![CDATA[", "]]>")

    def sanitize(self, description: str) -> str:
        for marker in self.CDATA_MARKERS:
            description = description.replace(marker, "")
        return description


class ReleaseRecordBuilder:
    """Applies the normalizers to parsed items."""

    def __init__(
        self,
        date_normalizer: Optional[DateNormalizer] = None,
        sanitizer: Optional[DescriptionSanitizer] = None,
    ):
        self.date_normalizer = date_normalizer or DateNormalizer()
        self.sanitizer = sanitizer or DescriptionSanitizer()
        self.logger = get_logger_for_component("record_builder")

    def build(self, items: Iterable[RawReleaseItem]) -> List[ReleaseRecord]:
        """Build one record per item, preserving order.

        Args:
            items: Parsed feed items

        Returns:
            Release records, same length and order as items
        """
        records = []
        for item in items:
            stripped_date = item.pub_date.strip()
            publish_date = self.date_normalizer.normalize(stripped_date)
            if publish_date == stripped_date:
                # Unparsed dates pass through exactly as the feed had them
                publish_date = item.pub_date
                if stripped_date:
                    self.logger.debug(f"Keeping unparsed publish date: {item.pub_date!r}")

            records.append(
                ReleaseRecord(
                    version=item.version.strip(),
                    short_version=item.short_version.strip(),
                    publish_date=publish_date,
                    description=self.sanitizer.sanitize(item.description),
                )
            )
        return records


def normalize_publish_date(value: str, display_timezone: Optional[str] = None) -> str:
    """Quick function to normalize a single publish date."""
    return DateNormalizer(display_timezone).normalize(value)


def sanitize_description(description: str) -> str:
    """Quick function to strip CDATA markers from a description."""
    return DescriptionSanitizer().sanitize(description)
