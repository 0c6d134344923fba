import itertools
import threading
from typing import Any


class RequestTracker:
    """Generation counter per (user, operation).

    Every call takes a token before contacting the model. When it finishes,
    only the holder of the newest token may publish its result, so a slow
    superseded reply never replaces a newer one.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest_token: dict[tuple[str, str], int] = {}
        self._results: dict[tuple[str, str], Any] = {}
        self._lock = threading.Lock()

    def begin(self, user_id: str, operation: str) -> int:
        with self._lock:
            token = next(self._counter)
            self._latest_token[(user_id, operation)] = token
            return token

    def publish(self, user_id: str, operation: str, token: int, result) -> bool:
        """Store `result` as the latest one; False if a newer call has started."""
        with self._lock:
            if self._latest_token.get((user_id, operation)) != token:
                return False
            self._results[(user_id, operation)] = result
            return True

    def latest(self, user_id: str, operation: str):
        with self._lock:
            return self._results.get((user_id, operation))
