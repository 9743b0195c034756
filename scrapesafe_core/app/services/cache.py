# app/services/cache.py
# -*- coding: utf-8 -*-
"""
License-check cache.

Memoizes "does buyer X hold an active license for asset Y" for a short
TTL. Entries are keyed on the asset identifier and the lower-cased
buyer address. Expired entries are dropped lazily on read; `sweep()`
bounds memory and is driven by whatever scheduler the host runs.

With REDIS_URL set the store is Redis (expiry via SETEX); otherwise an
in-process dict guarded by a lock.
"""

import json
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import redis

from scrapesafe_core.config import LICENSE_CACHE_TTL_SECONDS, REDIS_URL


def license_cache_key(asset_id: str, buyer_address: str) -> str:
    return f"license:{asset_id}:{(buyer_address or '').lower()}"


# -------------------------
# Stores
# -------------------------
class InMemoryCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._data: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self.clock() > expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: int):
        with self._lock:
            self._data[key] = (value, self.clock() + ttl_seconds)

    def delete(self, key: str):
        with self._lock:
            self._data.pop(key, None)

    def clear(self):
        with self._lock:
            self._data.clear()

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [k for k, (_, expires_at) in self._data.items() if now > expires_at]
            for k in expired:
                del self._data[k]
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {"backend": "memory", "size": len(self._data)}


class RedisCache:
    """Redis-backed store. Errors degrade to cache misses."""

    def __init__(self, client, prefix: str = "scrapesafe:"):
        self.client = client
        self.prefix = prefix

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self.prefix + key)
            return json.loads(raw) if raw else None
        except (redis.RedisError, ValueError) as e:
            print(f"[Cache] Redis get failed for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: int):
        try:
            self.client.setex(self.prefix + key, ttl_seconds, json.dumps(value, default=str))
        except redis.RedisError as e:
            print(f"[Cache] Redis set failed for {key}: {e}")

    def delete(self, key: str):
        try:
            self.client.delete(self.prefix + key)
        except redis.RedisError as e:
            print(f"[Cache] Redis delete failed for {key}: {e}")

    def clear(self):
        try:
            for k in self.client.scan_iter(match=self.prefix + "*"):
                self.client.delete(k)
        except redis.RedisError as e:
            print(f"[Cache] Redis clear failed: {e}")

    def sweep(self) -> int:
        # SETEX expires keys server-side
        return 0

    def stats(self) -> Dict[str, Any]:
        return {"backend": "redis"}


def build_cache_store(redis_url: Optional[str] = REDIS_URL, clock: Callable[[], float] = time.time):
    if redis_url:
        try:
            client = redis.from_url(redis_url)
            print(f"[Cache] Using Redis at {redis_url}")
            return RedisCache(client)
        except (redis.RedisError, ValueError) as e:
            print(f"[Cache] Redis unavailable ({e}), using in-memory cache")
    return InMemoryCache(clock=clock)


# -------------------------
# License-check facade
# -------------------------
class LicenseCheckCache:
    def __init__(self, store=None, ttl_seconds: int = LICENSE_CACHE_TTL_SECONDS):
        self.store = store if store is not None else InMemoryCache()
        self.ttl_seconds = ttl_seconds

    def get(self, asset_id: str, buyer_address: str) -> Optional[Dict[str, Any]]:
        return self.store.get(license_cache_key(asset_id, buyer_address))

    def set(self, asset_id: str, buyer_address: str, has_license: bool, license_id: Optional[int] = None):
        self.store.set(
            license_cache_key(asset_id, buyer_address),
            {"hasLicense": bool(has_license), "licenseId": license_id},
            self.ttl_seconds,
        )

    def invalidate(self, asset_ids: Iterable[str], buyer_address: str):
        """Remove the entry for every alias of one asset."""
        if isinstance(asset_ids, str):
            asset_ids = [asset_ids]
        for asset_id in asset_ids:
            self.store.delete(license_cache_key(asset_id, buyer_address))

    def sweep(self) -> int:
        removed = self.store.sweep()
        if removed:
            print(f"[Cache] Swept {removed} expired license-check entries")
        return removed

    def clear(self):
        self.store.clear()
