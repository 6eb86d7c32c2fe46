from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_cache_dir

APP_NAME = "fantasy-forecast"
CACHE_TTL_ENV = "FANTASY_FORECAST_CACHE_TTL_SECONDS"
DEFAULT_TTL_SECONDS = 3600

logger = logging.getLogger(__name__)


def _cache_dir() -> Path:
    return Path(user_cache_dir(APP_NAME, APP_NAME))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_ttl_seconds(env_var: str = CACHE_TTL_ENV, default: int = DEFAULT_TTL_SECONDS) -> int:
    raw = os.getenv(env_var)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", env_var, raw)
        return default
    return max(0, value)


class DiskCache:
    """JSON snapshots under the user cache dir, one file per key.

    Each entry records when it was written; entries older than the TTL (read
    from ``ttl_env`` on every lookup) and unreadable files count as misses.
    Keys are namespaced so a layout change only needs a new ``namespace``.
    """

    def __init__(self, namespace: str, *, ttl_env: str = CACHE_TTL_ENV, default_ttl: int = DEFAULT_TTL_SECONDS) -> None:
        self.namespace = namespace
        self.ttl_env = ttl_env
        self.default_ttl = default_ttl

    @property
    def ttl_seconds(self) -> int:
        return get_ttl_seconds(self.ttl_env, self.default_ttl)

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(f"{self.namespace}::{key}".encode("utf-8")).hexdigest()
        return _cache_dir() / f"{digest}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text())
            written_at = datetime.fromisoformat(payload["written_at"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("Discarding unreadable cache entry %s: %s", path, exc)
            return None
        if _now() - written_at > timedelta(seconds=self.ttl_seconds):
            logger.debug("Cache entry %s::%s expired", self.namespace, key)
            return None
        logger.debug("Cache hit for %s::%s", self.namespace, key)
        return payload.get("data")

    def put(self, key: str, data: Any) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps({"written_at": _now().isoformat(), "data": data}))
        except OSError as exc:
            logger.warning("Could not write cache entry %s: %s", path, exc)
