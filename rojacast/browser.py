"""Headless Chromium sessions with a fixed outbound identity.

Every page access in rojacast goes through :func:`open_session`, which owns
the Playwright driver, the browser and its context for exactly one operation
and tears them down on every exit path.
"""

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import ACCEPT_LANGUAGE, HOP_TIMEOUT_MS, REFERER, SETTLE_WAIT_MS, USER_AGENTS
from .errors import NavigationError, NavigationTimeoutError

LOGGER = logging.getLogger(__name__)

_READ_GLOBAL_JS = """(name) => {
    const value = window[name];
    return value === undefined || value === null ? null : String(value);
}"""


@dataclass(frozen=True)
class ClientIdentity:
    user_agent: str
    accept_language: str = ACCEPT_LANGUAGE
    referer: str = REFERER
    do_not_track: bool = True

    @classmethod
    def random(cls, rng: Optional[random.Random] = None) -> "ClientIdentity":
        return cls(user_agent=(rng or random).choice(USER_AGENTS))

    def headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept-Language": self.accept_language,
            "Referer": self.referer,
        }
        if self.do_not_track:
            headers["DNT"] = "1"
        return headers


class BrowserPage:
    """The loaded document of a session, after navigation has settled."""

    def __init__(self, page: Page, timeout_ms: int):
        self._page = page
        self._timeout_ms = timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    async def html(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            raise NavigationError(self.url, str(exc)) from exc

    async def wait_for_frame(self, selector: str = "iframe") -> bool:
        """Wait until at least one element matches; False if none shows up in time."""
        try:
            await self._page.wait_for_selector(selector, state="attached", timeout=self._timeout_ms)
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as exc:
            raise NavigationError(self.url, str(exc)) from exc
        return True

    async def read_global(self, name: str) -> Optional[str]:
        try:
            return await self._page.evaluate(_READ_GLOBAL_JS, name)
        except PlaywrightError as exc:
            raise NavigationError(self.url, str(exc)) from exc


class BrowserSession:
    def __init__(self, page: Page, identity: ClientIdentity, timeout_ms: int = HOP_TIMEOUT_MS,
                 settle_ms: int = SETTLE_WAIT_MS):
        self._page = page
        self.identity = identity
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms

    async def navigate(self, url: str) -> BrowserPage:
        LOGGER.info("Visiting %s", url)
        try:
            await self._page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
            if self.settle_ms:
                await self._page.wait_for_timeout(self.settle_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeoutError(url, f"no network quiescence within {self.timeout_ms} ms") from exc
        except PlaywrightError as exc:
            raise NavigationError(url, str(exc)) from exc
        return BrowserPage(self._page, self.timeout_ms)


@asynccontextmanager
async def open_session(
    identity: Optional[ClientIdentity] = None,
    headless: bool = True,
    timeout_ms: int = HOP_TIMEOUT_MS,
) -> AsyncIterator[BrowserSession]:
    identity = identity or ClientIdentity.random()
    try:
        playwright = await async_playwright().start()
    except PlaywrightError as exc:
        raise NavigationError("about:blank", f"playwright failed to start: {exc}") from exc

    browser = None
    try:
        try:
            browser = await playwright.chromium.launch(headless=headless)
            context = await browser.new_context(
                user_agent=identity.user_agent,
                locale="en-US",
                extra_http_headers=identity.headers(),
            )
            page = await context.new_page()
        except PlaywrightError as exc:
            raise NavigationError("about:blank", f"browser startup failed: {exc}") from exc
        LOGGER.debug("Browser session opened as %s", identity.user_agent)
        yield BrowserSession(page, identity, timeout_ms=timeout_ms)
    finally:
        if browser is not None:
            await browser.close()
        await playwright.stop()
        LOGGER.debug("Browser session closed")
