"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory).

Responsibilities:
    - Enforce the two uniqueness constraints every backend must provide:
        (a) short codes are globally unique;
        (b) an owner holds at most one active record per target URL.
    - Apply click recording as a single atomic update per record.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from snaplink.models import ShortURLModel, ClickEvent
        >>> from snaplink.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)

        >>> short_url = ShortURLModel(id='f3a1', target='https://example.com/blog', shortcode='a1b2c3')
        >>> dao.insert(short_url)
        ShortURLModel(id='f3a1', ...)

        >>> dao.record_click('f3a1', ClickEvent(timestamp=datetime.now(UTC)))
        (1, None)
"""

from abc import ABC, abstractmethod

from snaplink.constants import Limit
from snaplink.models import ShortURLModel, ClickEvent


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Attributes:
        recent_clicks_limit (int):
            Size of the per-record sliding window of click events.
        daily_stats_limit (int):
            Maximum number of per-day rollup entries kept per record.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO or
        ShortURLMemoryDAO) must extend this class and implement all
        abstract methods.
    """

    recent_clicks_limit: int = Limit.RECENT_CLICKS
    daily_stats_limit: int = Limit.DAILY_STATS

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        """Atomically insert a new record unless a uniqueness constraint is violated.

        Args:
            short_url (ShortURLModel):
                The record to insert. Analytics fields are ignored and start empty.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: the stored record.

        Raises:
            DuplicateShortCodeError:
                If the short code is already taken.

            DuplicateOwnerURLError:
                If the owner already holds an active record for the same target.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, link_id: str, **kwargs) -> ShortURLModel:
        """Retrieve a record by its identifier.

        Raises:
            ShortURLNotFoundError:
                If no record with the given id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_by_shortcode(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a record by its short code.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def find_active_by_owner_url(self, owner_id: str, target: str, **kwargs) -> ShortURLModel | None:
        """Return the owner's active record for a target URL, or None."""
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Return True if a record with the given short code exists."""
        pass

    @abstractmethod
    def record_click(self, link_id: str, click: ClickEvent, **kwargs) -> tuple[int, str | None]:
        """Record one click as a single atomic update against the record.

        The update increments the click counter, sets the last click time,
        appends the event to the bounded recent-clicks window and increments
        (or appends) the rollup entry for the click's calendar day, evicting
        the oldest day once the daily bound is exceeded.

        Args:
            link_id (str):
                Identifier of the clicked record.

            click (ClickEvent):
                Click metadata, timestamped by the caller.

        Returns:
            tuple[int, str | None]: updated click count and the record's owner id.

        Raises:
            ShortURLNotFoundError:
                If no record with the given id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def deactivate(self, link_id: str, **kwargs) -> None:
        """Soft delete a record and release its (owner, target URL) slot.

        Raises:
            ShortURLNotFoundError:
                If no record with the given id exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass
