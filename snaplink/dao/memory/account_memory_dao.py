import threading
from collections import Counter

from beartype import beartype

from snaplink.models import AccountStatsModel
from snaplink.dao.base import AccountBaseDAO


class AccountMemoryDAO(AccountBaseDAO):
    """In-memory account counters for local runs and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._total_clicks: Counter[str] = Counter()
        self._url_counts: Counter[str] = Counter()

    @beartype
    def increment_total_clicks(self, owner_id: str, **kwargs) -> int:
        with self._lock:
            self._total_clicks[owner_id] += 1
            return self._total_clicks[owner_id]

    @beartype
    def increment_url_count(self, owner_id: str, **kwargs) -> int:
        with self._lock:
            self._url_counts[owner_id] += 1
            return self._url_counts[owner_id]

    @beartype
    def stats(self, owner_id: str, **kwargs) -> AccountStatsModel:
        with self._lock:
            return AccountStatsModel(
                owner_id=owner_id,
                total_clicks=self._total_clicks[owner_id],
                url_count=self._url_counts[owner_id],
            )
