import argparse
import asyncio
import logging
import sys
from functools import partial
from typing import Callable, List, Optional, Sequence

import aiohttp

from .browser import ClientIdentity, open_session
from .cache import CacheStore
from .catalog import fetch_catalog
from .config import BASE_URL, CACHE_FILE, CACHE_TTL_HOURS, HOP_TIMEOUT_MS, PLAYER_COMMAND
from .errors import RojacastError
from .extractor import extract_stream_url, verify_stream_url
from .models import CandidateLink, MatchRecord
from .player import launch_player, watch
from .resolver import cache_ttl, fetch_match, resolve_match

LOGGER = logging.getLogger(__name__)

MENU = ("Enter a match", "Select a match", "Exit")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="rojacast", description="Search and watch a football match")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-q", "--query", help="Match to look up, as listed (<home> vs <away>)")
    mode.add_argument("-l", "--list", action="store_true", help="Pick from every listed match")
    parser.add_argument("--base-url", default=BASE_URL, help="Listing page")
    parser.add_argument("--cache-file", default=CACHE_FILE, help="Query cache (JSON)")
    parser.add_argument("--no-cache", action="store_true", help="Neither read nor write the query cache")
    parser.add_argument("--cache-ttl", type=float, default=CACHE_TTL_HOURS,
                        help="Hours before a cached match is scraped again (0 = never expire)")
    parser.add_argument("--player", default=PLAYER_COMMAND, help="Player command, the URL is appended")
    parser.add_argument("--print-only", action="store_true", help="Print the stream URL instead of playing it")
    parser.add_argument("--verify", action="store_true", help="HEAD-check the stream URL before playing")
    parser.add_argument("--timeout", type=float, default=HOP_TIMEOUT_MS / 1000, help="Per-page timeout (seconds)")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def choose(prompt: str, options: Sequence[str], input_fn: Callable[[str], str] = input) -> int:
    print(prompt)
    for i, option in enumerate(options, 1):
        print(f"\t{i}. {option}")
    while True:
        answer = input_fn("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return int(answer) - 1
        print(f"Pick a number between 1 and {len(options)}.")


def select_link(links: List[CandidateLink], input_fn: Callable[[str], str] = input) -> Optional[CandidateLink]:
    if not links:
        return None
    if len(links) == 1:
        return links[0]
    idx = choose("Select a link:", [link.label or link.href for link in links], input_fn)
    return links[idx]


def pick_match(args: argparse.Namespace, session_factory: Callable,
               input_fn: Callable[[str], str] = input) -> Optional[MatchRecord]:
    """Prompts run outside any event loop; each lookup gets its own ``asyncio.run``."""
    query = args.query
    listing = args.list
    if query is None and not listing:
        choice = choose("Select an option:", MENU, input_fn)
        if choice == 2:
            return None
        if choice == 0:
            query = input_fn("Enter match (<home> vs <away>): ").strip()
            if not query:
                return None
        else:
            listing = True

    if listing:
        LOGGER.info("Searching for all available matches...")
        matches = asyncio.run(fetch_catalog(args.base_url, session_factory=session_factory))
        LOGGER.info("Found %d results.", len(matches))
        if not matches:
            return None
        return matches[choose("Select a match:", [m.display_name for m in matches], input_fn)]

    LOGGER.info("Searching for %s...", query)
    store = None if args.no_cache else CacheStore(args.cache_file)
    return asyncio.run(resolve_match(
        query,
        args.base_url,
        store=store,
        ttl=cache_ttl(args.cache_ttl),
        fetcher=partial(fetch_match, session_factory=session_factory),
    ))


async def check_stream(identity: ClientIdentity, stream_url: str) -> bool:
    async with aiohttp.ClientSession(headers=identity.headers()) as http:
        return await verify_stream_url(http, stream_url)


def obtain_stream(args: argparse.Namespace, input_fn: Callable[[str], str] = input,
                  session_factory: Optional[Callable] = None) -> Optional[str]:
    identity = ClientIdentity.random()
    if session_factory is None:
        session_factory = partial(open_session, identity=identity, headless=not args.headful,
                                  timeout_ms=int(args.timeout * 1000))

    match = pick_match(args, session_factory, input_fn)
    if match is None:
        print("No match found.")
        return None
    LOGGER.info("Found %s.", match.display_name)

    link = select_link(match.links, input_fn)
    if link is None:
        print(f"No links published for {match.display_name} yet.")
        return None

    LOGGER.info("Fetching video URL...")
    stream_url = asyncio.run(extract_stream_url(link.href, args.base_url, session_factory=session_factory))
    if not stream_url:
        print("Failed to fetch video source.")
        return None

    if args.verify and not asyncio.run(check_stream(identity, stream_url)):
        LOGGER.warning("Stream URL did not answer HEAD with 200, trying anyway")
    return stream_url


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        stream_url = obtain_stream(args)
        if not stream_url:
            return 1
        if args.print_only:
            print(stream_url)
            return 0
        watch(launch_player(stream_url, args.player))
    except (EOFError, KeyboardInterrupt):
        print("\n👋 until next time!")
        return 130
    except RojacastError as exc:
        LOGGER.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
