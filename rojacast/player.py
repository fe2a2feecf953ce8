import logging
import shlex
import signal
import subprocess
from typing import List, Optional

from .config import PLAYER_COMMAND
from .errors import PlayerError

LOGGER = logging.getLogger(__name__)


def player_argv(url: str, command: str = PLAYER_COMMAND) -> List[str]:
    return shlex.split(command) + [url]


def launch_player(url: str, command: str = PLAYER_COMMAND) -> subprocess.Popen:
    argv = player_argv(url, command)
    LOGGER.info("Streaming: %s", url)
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as exc:
        raise PlayerError(f"could not start {argv[0]}: {exc}") from exc


def watch(process: subprocess.Popen, grace: float = 5.0) -> Optional[int]:
    """Block until the player exits; Ctrl-C is forwarded to it as SIGINT."""
    try:
        return process.wait()
    except KeyboardInterrupt:
        LOGGER.warning("Cancelled by user.")
        process.send_signal(signal.SIGINT)
        try:
            process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        raise
