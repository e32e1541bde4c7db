# Purpose: File-backed key-value store standing in for browser local storage, and the bond cache built on it.
# The bond array is kept as JSON text under a versioned key with a companion "cached at" timestamp.

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from core.io_lock import read_json_locked, update_json_locked
from portfolio.config import CACHE_KEY_BONDS, CACHE_KEY_TS
from portfolio.models import BondRecord, normalize_bonds

logger = logging.getLogger(__name__)


class LocalStore:
    """String key -> string value store persisted as one JSON object on disk."""

    def __init__(self, path: str | os.PathLike):
        self.path = path

    def _read(self) -> Dict[str, Any]:
        data = read_json_locked(self.path, default={})
        if not isinstance(data, dict):
            logger.warning(f"Local store {self.path} does not hold an object; treating it as empty")
            return {}
        return data

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def update(self, changes: Dict[str, Optional[str]]) -> None:
        """Apply several key changes as one locked write; a None value removes the key."""

        def apply(data: Any) -> Dict[str, Any]:
            if not isinstance(data, dict):
                logger.warning(f"Local store {self.path} does not hold an object; treating it as empty")
                data = {}
            for key, value in changes.items():
                if value is None:
                    data.pop(key, None)
                else:
                    data[key] = str(value)
            return data

        update_json_locked(self.path, apply, default={})

    def set_item(self, key: str, value: str) -> None:
        self.update({key: value})

    def remove_item(self, key: str) -> None:
        self.update({key: None})


def load_bonds_from_cache(store: LocalStore) -> Optional[Tuple[BondRecord, ...]]:
    """Cached bond collection, or None on a cache miss (absent, malformed or empty payload)."""
    raw = store.get_item(CACHE_KEY_BONDS)
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse cached bonds: {e}")
        return None
    if not isinstance(parsed, list) or not parsed:
        return None
    return tuple(normalize_bonds(parsed))


def save_bonds_to_cache(store: LocalStore, bonds: Iterable[BondRecord], now: Optional[datetime] = None) -> None:
    """Store the bonds and their "cached at" stamp in a single write."""
    now = now or datetime.now(timezone.utc)
    payload = json.dumps([b.to_dict() for b in bonds], ensure_ascii=False)
    store.update({CACHE_KEY_BONDS: payload, CACHE_KEY_TS: str(int(now.timestamp() * 1000))})


def clear_bonds_cache(store: LocalStore) -> None:
    store.update({CACHE_KEY_BONDS: None, CACHE_KEY_TS: None})


def cached_at(store: LocalStore) -> Optional[datetime]:
    """When the bonds were last cached (UTC), if known."""
    raw = store.get_item(CACHE_KEY_TS)
    if not raw:
        return None
    try:
        return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.warning(f"Ignoring malformed cache timestamp: {raw!r}")
        return None
