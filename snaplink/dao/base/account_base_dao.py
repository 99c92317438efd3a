"""Abstract base class for account aggregate counter DAOs.

Account counters are secondary, best-effort data: they are updated off the
request path and a failed update never affects a link operation.
"""

from abc import ABC, abstractmethod

from snaplink.models import AccountStatsModel


class AccountBaseDAO(ABC):
    """Interface for per-account aggregate counters.

    Methods:
        increment_total_clicks(owner_id: str, **kwargs) -> int:
            Increment the account's total click counter.

        increment_url_count(owner_id: str, **kwargs) -> int:
            Increment the account's created link counter.

        stats(owner_id: str, **kwargs) -> AccountStatsModel:
            Read both counters. Unknown accounts read as zero.

    All methods raise DataStoreError on data store failures.
    """

    @abstractmethod
    def increment_total_clicks(self, owner_id: str, **kwargs) -> int:
        pass

    @abstractmethod
    def increment_url_count(self, owner_id: str, **kwargs) -> int:
        pass

    @abstractmethod
    def stats(self, owner_id: str, **kwargs) -> AccountStatsModel:
        pass
