from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup

from rojacast.errors import NavigationError

BASE = "https://www.rojadirectaenvivo.pl/"

CATALOG_HTML = """
<html><body>
<ul class="menu">
  <li class="futbol">
    <a href="#">Team A - Team B<span class="t">10:30pm</span></a>
    <ul><li><a href="/match1">Feed 1</a></li></ul>
  </li>
  <li class="basket">
    <a href="#">Liga ACB: Real Madrid vs Barcelona<span class="t">9:00 PM</span></a>
    <ul>
      <li><a href="/acb-es">Spanish HD</a></li>
      <li><a href="https://other.example/acb">English</a></li>
    </ul>
  </li>
  <li class="tenis"><a href="#">Broken item</a></li>
  <li class="futbol">
    <a href="#">Team C vs Team D<span class="t">11:00</span></a>
  </li>
</ul>
</body></html>
"""

ENTRY_HTML = """
<html><body>
  <h1>Team A - Team B</h1>
  <div class="embed"><iframe src="https://relay.example/embed/1" width="100%"></iframe></div>
</body></html>
"""

RELAY_HTML = """
<html><body><iframe src="/player?id=1"></iframe></body></html>
"""

STREAM = "https://cdn.example/video.m3u8"
RELAY_URL = "https://relay.example/embed/1"
PLAYER_URL = "https://relay.example/player?id=1"


def chain_pages(final_globals: Optional[Dict[str, str]] = None) -> Dict[str, "FakePage"]:
    if final_globals is None:
        final_globals = {"playbackURL": STREAM}
    return {
        BASE: FakePage(BASE, CATALOG_HTML),
        BASE + "match1": FakePage(BASE + "match1", ENTRY_HTML),
        "https://other.example/acb": FakePage("https://other.example/acb", ENTRY_HTML),
        RELAY_URL: FakePage(RELAY_URL, RELAY_HTML),
        PLAYER_URL: FakePage(PLAYER_URL, "<html><body><video></video></body></html>", final_globals),
    }


class FakePage:
    def __init__(self, url: str, html: str = "", globals_: Optional[Dict[str, str]] = None):
        self.url = url
        self._html = html
        self._globals = globals_ or {}

    async def html(self) -> str:
        return self._html

    async def wait_for_frame(self, selector: str = "iframe") -> bool:
        return BeautifulSoup(self._html, "lxml").select_one(selector) is not None

    async def read_global(self, name: str) -> Optional[str]:
        return self._globals.get(name)


class FakeSession:
    def __init__(self, pages: Dict[str, Union[FakePage, Exception]]):
        self.pages = pages
        self.visited: List[str] = []

    async def navigate(self, url: str) -> FakePage:
        self.visited.append(url)
        page = self.pages.get(url)
        if page is None:
            raise NavigationError(url, "net::ERR_NAME_NOT_RESOLVED")
        if isinstance(page, Exception):
            raise page
        return page


class FakeBrowser:
    """Stands in for ``open_session``; counts how many sessions were opened and closed."""

    def __init__(self, pages: Dict[str, Union[FakePage, Exception]]):
        self.session = FakeSession(pages)
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        try:
            yield self.session
        finally:
            self.closed += 1

    @property
    def visited(self) -> List[str]:
        return self.session.visited
