"""Find a match on the live listing, unwrap its player frames and play the stream."""

from .cache import CacheStore
from .catalog import fetch_catalog, parse_catalog
from .errors import (
    CacheReadError,
    CacheWriteError,
    FrameNotFoundError,
    NavigationError,
    NavigationTimeoutError,
    RojacastError,
)
from .extractor import extract_stream_url
from .models import CandidateLink, MatchRecord
from .resolver import fetch_match, normalize_match_text, resolve_match

__version__ = "0.2.0"
