class RojacastError(Exception):
    """Base class for every failure raised by the scraping core."""


class NavigationError(RojacastError):
    """A page could not be reached (browser launch, network or HTTP failure)."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        msg = f"could not load {url}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class NavigationTimeoutError(NavigationError):
    """The page did not settle within the per-hop budget."""


class FrameNotFoundError(RojacastError):
    def __init__(self, hop: str, url: str = ""):
        self.hop = hop
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(f"{hop} iframe not found{where}")


class CacheReadError(RojacastError):
    pass


class CacheWriteError(RojacastError):
    pass


class PlayerError(RojacastError):
    pass
