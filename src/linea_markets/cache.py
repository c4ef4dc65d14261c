"""Local JSON cache of the last successful refresh."""

from __future__ import annotations

import os
import tempfile
import time
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from .logger import get_logger
from .report.records import CacheEntry, ResultRecord
from .settings import DashboardSettings

logger = get_logger(__name__)


class CacheFreshness(str, Enum):
    FRESH = "fresh"  # serve as-is
    STALE = "stale"  # serve, refresh in the background
    EXPIRED = "expired"  # refresh before serving


def now_ms() -> int:
    return int(time.time() * 1000)


class ResultCache:
    """Read-with-fallback, write-on-success cache of result records."""

    def __init__(
        self,
        path: Path,
        fresh_seconds: int,
        max_age_seconds: int,
    ):
        if fresh_seconds >= max_age_seconds:
            raise ValueError("fresh_seconds must be less than max_age_seconds")
        self.path = path
        self.fresh_ms = fresh_seconds * 1000
        self.max_age_ms = max_age_seconds * 1000

    @classmethod
    def from_settings(cls, config: DashboardSettings) -> "ResultCache":
        return cls(
            path=config.cache_path,
            fresh_seconds=config.cache_fresh_seconds,
            max_age_seconds=config.cache_max_age_seconds,
        )

    def load(self) -> CacheEntry | None:
        """Return the cached entry, or None if it is missing or unreadable."""
        if not self.path.exists():
            logger.debug("No cache file at %s", self.path)
            return None
        try:
            return CacheEntry.model_validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, exc)
            return None

    def save(self, entry: CacheEntry) -> None:
        """Atomically replace the cache file with ``entry``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(entry.model_dump_json())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Cached %d records at %s", len(entry.data), self.path)

    def store(self, records: list[ResultRecord], timestamp: int | None = None) -> CacheEntry:
        entry = CacheEntry(
            timestamp=timestamp if timestamp is not None else now_ms(), data=records
        )
        self.save(entry)
        return entry

    def freshness(self, entry: CacheEntry, now: int | None = None) -> CacheFreshness:
        """Classify ``entry`` by age: fresh, stale, or expired."""
        age = (now if now is not None else now_ms()) - entry.timestamp
        if age > self.max_age_ms:
            return CacheFreshness.EXPIRED
        if age > self.fresh_ms:
            return CacheFreshness.STALE
        return CacheFreshness.FRESH
