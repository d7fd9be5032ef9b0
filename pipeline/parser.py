"""RSS 2.0 / Atom feed parser.

Entries come from ``feedparser``, which handles format dispatch, namespaces
and dates, and recovers from most malformed documents on its own. Each
entry's fields are extracted in isolation so one broken entry does not lose
the rest of the feed. When feedparser gives up on a document entirely, a
tolerant regex scan of ``<item>``/``<entry>`` bodies picks up what it can.
"""
import html
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterator, Optional, Set
import feedparser
from bs4 import BeautifulSoup
from shared.errors import ParseError
from shared.utils import ensure_utc, get_utc_now

logger = logging.getLogger(__name__)

_ATOM_MARKER = re.compile(r'<feed[\s>]|xmlns="http://www\.w3\.org/2005/Atom"')
_FEED_MARKER = re.compile(r"<(?:rss|feed|rdf:RDF|channel)[\s>]", re.I)
_CDATA = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.S)
_WHITESPACE = re.compile(r"\s+")


@dataclass
class FeedItem:
    """A single parsed feed entry."""
    title: str
    link: str
    description: str
    published_at: datetime
    source_name: str


def is_atom(raw_text: str) -> bool:
    """Detect an Atom payload; anything else is treated as RSS 2.0."""
    return bool(_ATOM_MARKER.search(raw_text))


def clean_text(text: Optional[str], markup: bool = True) -> str:
    """
    Strip CDATA wrappers and HTML tags, then unescape entities and collapse whitespace.

    Tags go first so escaped angle brackets in plain text survive as text.
    With markup=False the value is already plain text and no tags are stripped.
    """
    if not text:
        return ""
    text = _CDATA.sub(r"\1", text)
    if markup and "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(separator=" ")
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse RFC 822 (RSS) or ISO 8601 (Atom) dates into aware UTC datetimes."""
    value = (value or "").strip()
    if not value:
        return None

    try:
        return ensure_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError):
        pass

    try:
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def _is_markup(detail: Any) -> bool:
    return (detail or {}).get("type") != "text/plain"


class FeedParser:
    """Turns raw feed documents into FeedItem records."""

    def parse(self, raw_text: str, source_name: str) -> Iterator[FeedItem]:
        """
        Lazily yield items from an RSS or Atom document.

        Raises ParseError (on first iteration) when the payload is not a feed
        at all. Any other failure is logged and ends the stream early.
        """
        if not raw_text or not _FEED_MARKER.search(raw_text):
            raise ParseError(f"Payload from {source_name} is not an RSS or Atom feed")

        atom = is_atom(raw_text)

        try:
            feed = feedparser.parse(raw_text)
            if feed.bozo:
                logger.warning(f"Malformed feed from {source_name}: {feed.get('bozo_exception')}")

            if feed.entries:
                for entry in feed.entries:
                    try:
                        item = self._item_from_entry(entry, source_name)
                    except Exception as e:
                        logger.warning(f"Skipping malformed entry from {source_name}: {e}")
                        continue
                    if item is not None:
                        yield item
            elif feed.bozo:
                logger.warning(f"No entries recovered from {source_name}; switching to tolerant scan")
                yield from self._scan_items(raw_text, atom, source_name)
        except Exception as e:
            logger.error(f"Error parsing {'Atom' if atom else 'RSS'} from {source_name}: {e}")

    # feedparser entries

    def _item_from_entry(self, entry: Any, source_name: str) -> Optional[FeedItem]:
        title = clean_text(entry.get("title"), markup=_is_markup(entry.get("title_detail")))

        description = ""
        if entry.get("summary"):
            description = clean_text(entry.get("summary"), markup=_is_markup(entry.get("summary_detail")))
        if not description:
            for content in entry.get("content") or []:
                description = clean_text(content.get("value"), markup=_is_markup(content))
                if description:
                    break

        published_at = self._entry_date(entry)
        if published_at is None:
            published_at = get_utc_now()

        return self._build_item(title, self._entry_link(entry), description, published_at, source_name)

    @staticmethod
    def _entry_link(entry: Any) -> str:
        for link in entry.get("links") or []:
            href = (link.get("href") or "").strip()
            if href and link.get("rel", "alternate") == "alternate":
                return href
        return (entry.get("link") or "").strip()

    @staticmethod
    def _entry_date(entry: Any) -> Optional[datetime]:
        for key in ("published_parsed", "updated_parsed"):
            parsed = entry.get(key)
            if parsed:
                try:
                    return datetime(*parsed[:6], tzinfo=timezone.utc)
                except (TypeError, ValueError):
                    continue

        raw = entry.get("published") or entry.get("updated")
        published_at = parse_date(raw)
        if published_at is None and raw:
            logger.debug(f"Unparseable date {raw!r}; using now")
        return published_at

    # Tolerant regex scan

    def _scan_items(self, raw_text: str, atom: bool, source_name: str) -> Iterator[FeedItem]:
        wanted = "entry" if atom else "item"
        pattern = re.compile(rf"<{wanted}(?:\s[^>]*)?>(.*?)</{wanted}>", re.S | re.I)
        yielded: Set[str] = set()

        for match in pattern.finditer(raw_text):
            body = match.group(1)
            try:
                item = self._item_from_text(body, atom, source_name)
            except Exception as e:
                logger.warning(f"Skipping unreadable {wanted} from {source_name}: {e}")
                continue
            if item is not None and item.link not in yielded:
                yielded.add(item.link)
                yield item

    def _item_from_text(self, body: str, atom: bool, source_name: str) -> Optional[FeedItem]:
        title = self._extract_tag(body, "title")
        if atom:
            link_match = re.search(r'<link[^>]*href="([^"]*)"', body, re.I)
            link = link_match.group(1) if link_match else ""
            description = self._extract_tag(body, "summary") or self._extract_tag(body, "content")
            published = self._extract_tag(body, "published") or self._extract_tag(body, "updated")
        else:
            link = clean_text(self._extract_tag(body, "link"))
            description = self._extract_tag(body, "description")
            published = self._extract_tag(body, "pubDate")

        return self._build_item(
            clean_text(title),
            html.unescape(link),
            clean_text(description),
            parse_date(published) or get_utc_now(),
            source_name
        )

    @staticmethod
    def _extract_tag(body: str, tag: str) -> str:
        match = re.search(rf"<{tag}(?:\s[^>]*)?>(.*?)</{tag}>", body, re.S | re.I)
        return match.group(1) if match else ""

    # Shared

    @staticmethod
    def _build_item(
        title: str,
        link: str,
        description: str,
        published_at: datetime,
        source_name: str
    ) -> Optional[FeedItem]:
        link = (link or "").strip()
        if not title or not link:
            return None

        return FeedItem(
            title=title,
            link=link,
            description=description,
            published_at=published_at,
            source_name=source_name
        )
