import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Union

from .config import CACHE_FILE
from .errors import CacheReadError, CacheWriteError
from .models import MatchRecord

LOGGER = logging.getLogger(__name__)


class CacheStore:
    """JSON file mapping a query, exactly as typed, to the match it resolved to."""

    def __init__(self, path: Union[str, Path] = CACHE_FILE):
        self.path = Path(path)

    def _read(self) -> Dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise CacheReadError(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CacheReadError(f"{self.path} does not hold a JSON object")
        return data

    def load(self) -> Dict[str, MatchRecord]:
        if not self.path.exists():
            return {}
        try:
            raw = self._read()
        except CacheReadError as exc:
            LOGGER.warning("Ignoring cache: %s", exc)
            return {}

        cache: Dict[str, MatchRecord] = {}
        for query, entry in raw.items():
            try:
                cache[query] = MatchRecord.from_dict(entry)
            except (AttributeError, TypeError, ValueError) as exc:
                LOGGER.warning("Dropping cache entry %r: %s", query, exc)
        return cache

    def save(self, cache: Dict[str, MatchRecord]) -> None:
        payload = {query: record.to_dict() for query, record in cache.items()}
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CacheWriteError(f"cannot write {self.path}: {exc}") from exc
        LOGGER.debug("Saved %d cache entries to %s", len(payload), self.path)
