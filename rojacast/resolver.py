import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from bs4 import BeautifulSoup

from .browser import open_session
from .cache import CacheStore
from .catalog import MalformedItem, list_items, parse_item, title_text
from .config import BASE_URL, CACHE_TTL_HOURS
from .errors import CacheWriteError
from .models import MatchRecord

LOGGER = logging.getLogger(__name__)

# "Liga: Team A vs Team B" -> "Team A vs Team B"; only the first line is considered
LABEL_PREFIX_RE = re.compile(r"^[^:\n]*:\s+")
# trailing "\n10:30pm", " 9:05 AM", "\n21:00"
TIME_SUFFIX_RE = re.compile(r"\s+\d{1,2}:\d{2}\s?(?:[ap]m)?$", re.IGNORECASE)


def normalize_match_text(text: str) -> str:
    previous = None
    while text != previous:
        previous = text
        text = LABEL_PREFIX_RE.sub("", text, count=1)
        text = TIME_SUFFIX_RE.sub("", text)
        text = text.strip()
    return text


def find_match(html: str, query: str, fetched_at: Optional[datetime] = None) -> Optional[MatchRecord]:
    soup = BeautifulSoup(html, "lxml")
    for item in list_items(soup):
        try:
            if normalize_match_text(title_text(item)) != query:
                continue
            return parse_item(item, fetched_at or datetime.now(timezone.utc))
        except MalformedItem as exc:
            LOGGER.debug("Skipping listing item: %s", exc)
    return None


async def fetch_match(base_url: str, query: str, session_factory: Callable = open_session) -> Optional[MatchRecord]:
    async with session_factory() as session:
        page = await session.navigate(base_url)
        html = await page.html()
    return find_match(html, query)


def cache_ttl(hours: float) -> Optional[timedelta]:
    """Zero or negative hours means cached matches never expire."""
    return timedelta(hours=hours) if hours > 0 else None


DEFAULT_TTL = cache_ttl(CACHE_TTL_HOURS)


def is_fresh(record: MatchRecord, ttl: Optional[timedelta], now: Optional[datetime] = None) -> bool:
    if ttl is None or record.fetched_at is None:
        return True
    fetched_at = record.fetched_at
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    return (now or datetime.now(timezone.utc)) - fetched_at <= ttl


async def resolve_match(
    query: str,
    base_url: str = BASE_URL,
    store: Optional[CacheStore] = None,
    ttl: Optional[timedelta] = DEFAULT_TTL,
    fetcher: Callable[[str, str], Awaitable[Optional[MatchRecord]]] = fetch_match,
    strict_cache: bool = False,
) -> Optional[MatchRecord]:
    """Cached lookup of ``query``; scrapes the listing only on a miss or a stale hit.

    A successful scrape is written back under the query exactly as typed. A
    failed write is logged and the match still returned, unless
    ``strict_cache`` is set, in which case ``CacheWriteError`` propagates.
    """
    cache = store.load() if store is not None else {}
    cached = cache.get(query)
    if cached is not None:
        if is_fresh(cached, ttl):
            LOGGER.info("Using cached entry for %r", query)
            return cached
        LOGGER.info("Cached entry for %r is stale, refreshing", query)

    match = await fetcher(base_url, query)
    if match is None:
        return None

    if store is not None:
        cache[query] = match
        try:
            store.save(cache)
        except CacheWriteError as exc:
            if strict_cache:
                raise
            LOGGER.warning("Match found but not cached: %s", exc)
    return match
