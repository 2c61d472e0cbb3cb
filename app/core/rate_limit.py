from threading import Lock
from time import time

_RATE_LIMIT_STORE = {}
_RATE_LIMIT_LOCK = Lock()

def rate_limit(key: str, max_requests: int, window_seconds: int) -> bool:
    now = time()
    with _RATE_LIMIT_LOCK:
        timestamps = _RATE_LIMIT_STORE.get(key, [])

        timestamps = [t for t in timestamps if now - t < window_seconds]

        if len(timestamps) >= max_requests:
            _RATE_LIMIT_STORE[key] = timestamps
            return False

        timestamps.append(now)
        _RATE_LIMIT_STORE[key] = timestamps
        return True

def make_key(request, endpoint: str) -> str:
    ip = request.client.host if request.client else "unknown"
    return f"{endpoint}:{ip}"

def reset_rate_limits() -> None:
    with _RATE_LIMIT_LOCK:
        _RATE_LIMIT_STORE.clear()
