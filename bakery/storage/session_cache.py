"""
Key/value cache with per-entry expiry, persisted to its own JSON file.

Entries expire a fixed TTL after they were written. Expired entries are evicted
lazily on read and in bulk by sweep(). The whole map is written on every set;
losing the file only costs a recompute.
"""
import json
import logging
import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from bakery.models import CacheEntry
from bakery.storage.snapshot import Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=15)


class SessionCache:
    def __init__(
        self,
        path: Optional[Path] = None,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock = utc_now,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._load()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            entries = {key: CacheEntry.model_validate(value) for key, value in payload.items()}
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {str(e)}")
            return

        now = self.clock()
        self._entries = {key: entry for key, entry in entries.items() if now < entry.expires}
        logger.info(f"Loaded {len(self._entries)} cache entries from {self.path}")

    def _persist(self) -> None:
        if self.path is None:
            return

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(
                    {key: entry.model_dump(mode="json") for key, entry in self._entries.items()},
                    handle,
                    indent=2,
                )
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to persist cache to {self.path}: {str(e)}", exc_info=True)

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value, or None on a miss.
        An expired entry is evicted and reported as a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self.clock() >= entry.expires:
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return entry.data

    def set(self, key: str, value: Any) -> None:
        now = self.clock()
        self._entries[key] = CacheEntry(data=value, timestamp=now, expires=now + self.ttl)
        self._persist()

    def delete(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._persist()

    def clear(self) -> None:
        self._entries = {}
        self._persist()

    def sweep(self) -> None:
        """Remove every expired entry and persist once."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires]
        for key in expired:
            del self._entries[key]

        self._persist()
        if expired:
            logger.info(f"Cache sweep removed {len(expired)} expired entries")
