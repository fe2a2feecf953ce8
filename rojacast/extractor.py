"""Unwind the iframe chain behind a broadcast link down to its playable URL.

The listing's links open a page that embeds the player through a fixed number
of nested iframes. Each hop navigates the same tab to the current frame's
``src`` and the last page exposes the stream as a global variable. The
selectors for each hop come from :data:`rojacast.config.FRAME_HOPS`.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.parse import urljoin

import aiohttp
from bs4 import BeautifulSoup

from .browser import BrowserSession, open_session
from .config import BASE_URL, FRAME_HOPS, STREAM_VARIABLE, FrameHopSpec
from .errors import FrameNotFoundError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameHop:
    name: str
    page_url: str
    frame_url: str


def find_frame_src(html: str, selectors: Sequence[str]) -> Optional[str]:
    soup = BeautifulSoup(html, "lxml")
    for sel in selectors:
        for frame in soup.select(sel):
            src = (frame.get("src") or "").strip()
            if src and src != "about:blank":
                return src
    return None


async def descend(session: BrowserSession, url: str, hop: FrameHopSpec) -> FrameHop:
    page = await session.navigate(url)
    if not await page.wait_for_frame("iframe"):
        raise FrameNotFoundError(hop.name, page.url)

    src = find_frame_src(await page.html(), hop.selectors)
    if not src:
        raise FrameNotFoundError(hop.name, page.url)

    frame_url = urljoin(page.url, src)
    LOGGER.debug("%s frame on %s -> %s", hop.name, page.url, frame_url)
    return FrameHop(hop.name, page.url, frame_url)


async def extract_stream_url(
    entry_href: str,
    base_url: str = BASE_URL,
    hops: Sequence[FrameHopSpec] = FRAME_HOPS,
    variable: str = STREAM_VARIABLE,
    session_factory: Callable = open_session,
) -> Optional[str]:
    url = urljoin(base_url, entry_href)
    async with session_factory() as session:
        for hop in hops:
            url = (await descend(session, url, hop)).frame_url

        page = await session.navigate(url)
        stream_url = await page.read_global(variable)

    if not stream_url:
        LOGGER.warning("No %s exposed by %s", variable, url)
        return None
    LOGGER.info("Extracted video URL: %s", stream_url)
    return stream_url


async def verify_stream_url(session: aiohttp.ClientSession, url: str) -> bool:
    try:
        async with session.head(url, timeout=aiohttp.ClientTimeout(total=10), allow_redirects=True) as r:
            return r.status == 200
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        LOGGER.debug("HEAD %s failed: %s", url, exc)
        return False
