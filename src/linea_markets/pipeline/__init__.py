from __future__ import annotations

from .context import RefreshContext
from .run import LoadResult, load_markets, refresh_quietly, run_refresh, watch

__all__ = [
    "LoadResult",
    "RefreshContext",
    "load_markets",
    "refresh_quietly",
    "run_refresh",
    "watch",
]
