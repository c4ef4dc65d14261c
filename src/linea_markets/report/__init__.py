from __future__ import annotations

from .records import CacheEntry, ResultRecord

__all__ = ["CacheEntry", "ResultRecord"]
