"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a ShortURLModel is not found in the data store.

    DuplicateShortCodeError:
        Raised when an insert violates the global short code uniqueness constraint.

    DuplicateOwnerURLError:
        Raised when an insert violates the (owner, target URL, active) uniqueness constraint.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Example:
    >>> from snaplink.dao.exceptions import DuplicateOwnerURLError
    >>> raise DuplicateOwnerURLError('Owner already has an active link.', existing_id='f3a1')
    Traceback (most recent call last):
        ...
    snaplink.dao.exceptions.DuplicateOwnerURLError: Owner already has an active link.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class ShortURLNotFoundError(DAOError):
    """Exception raised when a ShortURLModel is not found in the data store."""

    pass


class DuplicateShortCodeError(DAOError):
    """Exception raised when inserting a ShortURLModel whose short code is already taken."""

    pass


class DuplicateOwnerURLError(DAOError):
    """Exception raised when an owner already holds an active link for the same target URL.

    Attributes:
        existing_id (str | None):
            Identifier of the record already holding the (owner, target URL) slot.
    """

    def __init__(self, message: str, existing_id: str | None = None):
        super().__init__(message)
        self.existing_id = existing_id


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass
