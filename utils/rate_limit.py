"""
Модуль: `utils/rate_limit.py`.
Назначение: Ограничение частоты запросов к API по IP клиента.
"""

import time
from collections import defaultdict, deque
from threading import Lock

from flask import current_app, request


class InMemoryRateLimiter:
    """In-memory rate limiter со скользящим окном.

    Ключи, у которых все события вышли за окно, периодически удаляются,
    чтобы словарь не рос вместе с числом различных клиентов.
    """

    def __init__(self, clock=time.monotonic, sweep_interval: float = 60.0):
        self._clock = clock
        self._events = defaultdict(deque)
        self._windows = {}
        self._lock = Lock()
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def is_allowed(self, key: str, limit: int, window_seconds: int) -> bool:
        """Регистрирует событие и сообщает, укладывается ли ключ в лимит."""
        if limit <= 0 or window_seconds <= 0:
            return False

        now = self._clock()
        cutoff = now - window_seconds

        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            events = self._events[key]
            self._windows[key] = window_seconds
            while events and events[0] <= cutoff:
                events.popleft()

            if len(events) >= limit:
                return False

            events.append(now)
            return True

    def _sweep(self, now: float) -> None:
        # Вызывается под self._lock
        stale = [
            key
            for key, events in self._events.items()
            if not events or events[-1] <= now - self._windows.get(key, 0)
        ]
        for key in stale:
            del self._events[key]
            self._windows.pop(key, None)
        self._last_sweep = now


def get_client_identifier() -> str:
    """Возвращает IP клиента с учетом X-Forwarded-For."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        first_ip = forwarded_for.split(",", 1)[0].strip()
        if first_ip:
            return first_ip
    return request.remote_addr or "unknown"


def is_rate_limited(bucket: str) -> bool:
    """True, если клиент исчерпал лимит для группы запросов `bucket`."""
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return False

    limiter = current_app.extensions.get("rate_limiter")
    rule = current_app.config.get("RATE_LIMITS", {}).get(bucket)
    if limiter is None or rule is None:
        return False

    limit, window_seconds = rule
    return not limiter.is_allowed(f"{bucket}:{get_client_identifier()}", limit, window_seconds)
