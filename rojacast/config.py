import os
from dataclasses import dataclass
from typing import Tuple

# ---- BASE URL / FILES ----
BASE_URL = os.getenv("ROJACAST_BASE_URL", "https://www.rojadirectaenvivo.pl/")
CACHE_FILE = os.getenv("ROJACAST_CACHE_FILE", "cache.json")
PLAYER_COMMAND = os.getenv("ROJACAST_PLAYER", "mpv")

# ⏱️ Per-hop navigation budget and the quiet window after each load
HOP_TIMEOUT_MS = int(os.getenv("ROJACAST_HOP_TIMEOUT_MS", "30000"))
SETTLE_WAIT_MS = int(os.getenv("ROJACAST_SETTLE_WAIT_MS", "500"))
CACHE_TTL_HOURS = float(os.getenv("ROJACAST_CACHE_TTL_HOURS", "12"))

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/115.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:143.0) Gecko/20100101 Firefox/143.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
)
ACCEPT_LANGUAGE = "en-US,en;q=0.5"
REFERER = "https://www.google.com/"

# ---- listing markup ----
ITEM_SELECTOR = os.getenv("ROJACAST_ITEM_SELECTOR", ".menu > li")
TITLE_SELECTOR = "a"
TIME_LABEL_CLASS = "t"
TIME_SELECTOR = f"a > .{TIME_LABEL_CLASS}"
LINK_SELECTOR = ":scope li a"

# Global injected by the final player page
STREAM_VARIABLE = os.getenv("ROJACAST_STREAM_VARIABLE", "playbackURL")


@dataclass(frozen=True)
class FrameHopSpec:
    name: str
    selectors: Tuple[str, ...]


DEFAULT_FRAME_HOPS: Tuple[FrameHopSpec, ...] = (
    FrameHopSpec("outer", ("div > iframe",)),
    FrameHopSpec("inner", ("body > iframe",)),
)

HOP_NAMES = ("outer", "inner", "third", "fourth", "fifth")


def parse_frame_hops(raw: str) -> Tuple[FrameHopSpec, ...]:
    """Build a hop table from ``"div > iframe|iframe.player;body > iframe"``.

    Hops are separated by ``;``, alternative selectors within a hop by ``|``.
    """
    hops = []
    for i, chunk in enumerate(c for c in raw.split(";") if c.strip()):
        selectors = tuple(s.strip() for s in chunk.split("|") if s.strip())
        name = HOP_NAMES[i] if i < len(HOP_NAMES) else f"hop{i + 1}"
        hops.append(FrameHopSpec(name, selectors))
    if not hops:
        raise ValueError(f"no frame selectors in {raw!r}")
    return tuple(hops)


_raw_hops = os.getenv("ROJACAST_FRAME_SELECTORS")
FRAME_HOPS = parse_frame_hops(_raw_hops) if _raw_hops else DEFAULT_FRAME_HOPS
