"""In-memory cache for admin dashboard numbers (no Redis)."""
import json
import time
from typing import Any, Optional, Dict, Tuple

CACHE_PREFIX_STATS = "stats"

_memory: Dict[str, Tuple[float, str]] = {}  # key -> (expires_at, json_value)


def cache_get(key: str) -> Optional[Any]:
    now = time.time()
    if key not in _memory:
        return None
    expires_at, raw = _memory[key]
    if now > expires_at:
        del _memory[key]
        return None
    return json.loads(raw)


def cache_set(key: str, value: Any, ttl_seconds: int) -> None:
    _memory[key] = (time.time() + ttl_seconds, json.dumps(value, default=str))


def cache_delete_pattern(prefix: str) -> None:
    to_del = [k for k in _memory if k.startswith(prefix)]
    for k in to_del:
        del _memory[k]


def stats_cache_key(name: str) -> str:
    return f"{CACHE_PREFIX_STATS}:{name}"
