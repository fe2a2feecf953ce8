import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from .browser import open_session
from .config import BASE_URL, ITEM_SELECTOR, LINK_SELECTOR, TIME_LABEL_CLASS, TIME_SELECTOR, TITLE_SELECTOR
from .models import CandidateLink, MatchRecord

LOGGER = logging.getLogger(__name__)


class MalformedItem(ValueError):
    pass


BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "ol", "p", "section",
    "table", "tr", "ul",
}


def inner_text(el: Tag) -> str:
    """Visible text of ``el`` laid out like ``innerText``.

    Inline runs are joined; block children, the time label and ``<br>``
    start a new line. Whitespace inside a line is collapsed.
    """
    parts: List[str] = []
    for node in el.descendants:
        if type(node) is NavigableString:
            parts.append(str(node))
        elif isinstance(node, Tag):
            if node.name == "br" or node.name in BLOCK_TAGS or TIME_LABEL_CLASS in node.get("class", []):
                parts.append("\n")
    lines = (" ".join(line.split()) for line in "".join(parts).split("\n"))
    return "\n".join(line for line in lines if line)


def display_name(title_text: str) -> str:
    return " - ".join(line.strip() for line in title_text.splitlines() if line.strip())


def list_items(soup: BeautifulSoup) -> List[Tag]:
    return soup.select(ITEM_SELECTOR)


def title_text(item: Tag) -> str:
    title = item.select_one(TITLE_SELECTOR)
    if title is None:
        raise MalformedItem("item has no primary link")
    return inner_text(title)


def parse_item(item: Tag, fetched_at: Optional[datetime] = None) -> MatchRecord:
    name = display_name(title_text(item))
    if not name:
        raise MalformedItem("item has an empty display name")

    time_label = item.select_one(TIME_SELECTOR)
    if time_label is None:
        raise MalformedItem(f"{name!r} has no time label")

    links: List[CandidateLink] = []
    for a in item.select(LINK_SELECTOR):
        href = a.get("href")
        if href is None:
            continue
        links.append(CandidateLink(label=a.get_text(" ", strip=True), href=href))

    return MatchRecord(
        category=" ".join(item.get("class", [])),
        display_name=name,
        scheduled_time=time_label.get_text(" ", strip=True),
        links=links,
        fetched_at=fetched_at,
    )


def parse_catalog(html: str, fetched_at: Optional[datetime] = None) -> Tuple[List[MatchRecord], int]:
    """Return the listed matches and how many items had to be skipped."""
    soup = BeautifulSoup(html, "lxml")
    fetched_at = fetched_at or datetime.now(timezone.utc)
    records: List[MatchRecord] = []
    skipped = 0
    for item in list_items(soup):
        try:
            records.append(parse_item(item, fetched_at))
        except MalformedItem as exc:
            LOGGER.debug("Skipping listing item: %s", exc)
            skipped += 1
    return records, skipped


async def fetch_catalog(base_url: str = BASE_URL, session_factory: Callable = open_session) -> List[MatchRecord]:
    async with session_factory() as session:
        page = await session.navigate(base_url)
        html = await page.html()

    records, skipped = parse_catalog(html)
    if skipped:
        LOGGER.warning("Skipped %d malformed listing item(s) on %s", skipped, base_url)
    if not records and not skipped:
        LOGGER.info("No matches listed on %s", base_url)
    return records
