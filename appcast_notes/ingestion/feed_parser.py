"""
Appcast Feed Parser
===================

Parses Sparkle-style appcast XML and extracts one raw release item per
``<item>`` element, in document order.

Parsing is tolerant: lxml's recovering parser repairs unclosed tags,
undeclared namespace prefixes and similar damage. Only a payload with no
recoverable document at all is treated as a feed-level failure.

Entities are never expanded and the network is never touched: a reference
to an entity declared in an internal DTD stays in the text literally, e.g.
``a &e; b``.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from lxml import etree

from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedParseError

SPARKLE_NAMESPACE = "http://www.andymatuschak.org/xml-namespaces/sparkle"

# (prefix, local name); a None prefix means an un-namespaced element
VERSION_FIELD = ("sparkle", "version")
SHORT_VERSION_FIELD = ("sparkle", "shortVersionString")
PUB_DATE_FIELD = (None, "pubDate")
DESCRIPTION_FIELD = (None, "description")


@dataclass(frozen=True)
class RawReleaseItem:
    """Field values of one feed item before normalization."""

    version: str = ""
    short_version: str = ""
    pub_date: str = ""
    description: str = ""


def _split_tag(element: etree._Element) -> Tuple[Optional[str], Optional[str], str]:
    """Return (namespace, prefix, local name) for an element.

    A prefix the recovering parser could not bind stays inside the tag text
    as ``prefix:local``.
    """
    tag = element.tag
    if tag.startswith("{"):
        namespace, local = tag[1:].split("}", 1)
        return namespace, element.prefix, local
    if ":" in tag:
        prefix, local = tag.split(":", 1)
        return None, prefix, local
    return None, None, tag


def _matches(element: etree._Element, field: Tuple[Optional[str], str]) -> bool:
    wanted_prefix, wanted_local = field
    namespace, prefix, local = _split_tag(element)
    if local != wanted_local:
        return False
    if wanted_prefix is None:
        return namespace is None and prefix is None
    return prefix == wanted_prefix or namespace == SPARKLE_NAMESPACE


def _string_value(element: etree._Element) -> str:
    """Concatenated text of the element and all its descendants."""
    return "".join(element.itertext())


class FeedParser:
    """Extracts release items from appcast documents."""

    def __init__(self):
        self.logger = get_logger_for_component("feed_parser")

    def parse(self, content: bytes, feed_url: Optional[str] = None) -> List[RawReleaseItem]:
        """Parse an appcast payload.

        Args:
            content: Raw XML bytes
            feed_url: Source URL, used for error context only

        Returns:
            One RawReleaseItem per ``<item>`` element, in document order

        Raises:
            FeedParseError: If no XML document can be recovered from content
        """
        root = self._parse_document(content, feed_url)

        items = [self._extract_item(item) for item in self._iter_items(root)]

        self.logger.debug(
            f"Extracted {len(items)} release items from {feed_url or 'payload'}"
        )
        return items

    def _parse_document(self, content: bytes, feed_url: Optional[str]) -> etree._Element:
        if isinstance(content, str):
            content = content.encode("utf-8")

        if not content or not content.strip():
            raise FeedParseError("Feed payload is empty", feed_url=feed_url)

        parser = etree.XMLParser(
            recover=True,
            resolve_entities=False,
            no_network=True,
            huge_tree=False,
        )
        try:
            root = etree.fromstring(content, parser=parser)
        except etree.XMLSyntaxError as e:
            raise FeedParseError(
                f"Feed is not parseable XML: {e}", feed_url=feed_url
            ) from e

        if root is None:
            raise FeedParseError(
                "Feed contains no recoverable XML document", feed_url=feed_url
            )

        if parser.error_log:
            self.logger.warning(
                f"Recovered from {len(parser.error_log)} XML error(s): "
                f"{parser.error_log[0].message}"
            )

        return root

    @staticmethod
    def _iter_items(root: etree._Element) -> Iterator[etree._Element]:
        for element in root.iter(etree.Element):
            namespace, prefix, local = _split_tag(element)
            if local == "item" and namespace is None and prefix is None:
                yield element

    def _extract_item(self, item: etree._Element) -> RawReleaseItem:
        enclosure = self._find_child(item, (None, "enclosure"))

        return RawReleaseItem(
            version=self._field_value(item, VERSION_FIELD, enclosure),
            short_version=self._field_value(item, SHORT_VERSION_FIELD, enclosure),
            pub_date=self._field_value(item, PUB_DATE_FIELD),
            description=self._field_value(item, DESCRIPTION_FIELD),
        )

    @staticmethod
    def _find_child(
        item: etree._Element, field: Tuple[Optional[str], str]
    ) -> Optional[etree._Element]:
        for child in item.iterchildren(etree.Element):
            if _matches(child, field):
                return child
        return None

    def _field_value(
        self,
        item: etree._Element,
        field: Tuple[Optional[str], str],
        enclosure: Optional[etree._Element] = None,
    ) -> str:
        child = self._find_child(item, field)
        if child is not None:
            return _string_value(child)

        # Older appcasts put version data on the enclosure instead
        if enclosure is not None and field[0] == "sparkle":
            value = enclosure.get(f"{{{SPARKLE_NAMESPACE}}}{field[1]}")
            if value is None:
                value = enclosure.get(f"sparkle:{field[1]}")
            if value is not None:
                return value

        return ""


def parse_feed(content: bytes, feed_url: Optional[str] = None) -> List[RawReleaseItem]:
    """Quick function to parse a single appcast payload."""
    return FeedParser().parse(content, feed_url=feed_url)
