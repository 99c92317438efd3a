"""Create, resolve and deactivate short URLs

Creation flow:
    1. Validate the target URL, the optional custom code and the optional expiry date.
    2. Pick the short code: the custom code if it is free, otherwise a generated one.
    3. Insert the record. The store enforces two uniqueness constraints:
        - short code (global): a generated code which lost the race against a
          concurrent insert is regenerated ONCE; a second collision fails with
          ShortCodeCollisionRetryFailedError, which clients may retry.
        - (owner, target URL) among active records: the pre-existing record is
          returned instead of creating a second one.
    4. Schedule a best-effort increment of the owner's URL counter.

shorten() also tells whether the record was created or reused; create_short_url()
returns the record only.
"""

import uuid
import logging
from dataclasses import dataclass, replace
from datetime import datetime, UTC

from snaplink.constants import Default
from snaplink.models import ShortURLModel
from snaplink.dao.base import ShortURLBaseDAO, AccountBaseDAO
from snaplink.dao.exceptions import DuplicateShortCodeError, DuplicateOwnerURLError
from snaplink.exceptions import InvalidExpiryError, ShortCodeUnavailableError, ShortCodeCollisionRetryFailedError
from snaplink.services.background import BackgroundTaskRunner, default_runner
from snaplink.utils.helpers import validate_target_url
from snaplink.utils.shortener import generate_shortcode, validate_shortcode


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShortenResult:
    record: ShortURLModel
    created: bool  # False when the owner's existing record for the URL was returned


class LinkService:
    def __init__(
        self,
        short_url_dao: ShortURLBaseDAO,
        account_dao: AccountBaseDAO | None = None,
        background: BackgroundTaskRunner | None = None,
        base_url: str = Default.BASE_URL,
        shortcode_length: int = Default.SHORTCODE_LENGTH,
    ):
        self.short_url_dao = short_url_dao
        self.account_dao = account_dao
        self.background = background or default_runner()
        self.base_url = base_url
        self.shortcode_length = shortcode_length

    def create_short_url(
        self,
        target: str,
        owner_id: str | None = None,
        custom_code: str | None = None,
        expires_at: datetime | None = None,
    ) -> ShortURLModel:
        """Same as shorten(), returning the record only"""
        return self.shorten(target, owner_id=owner_id, custom_code=custom_code, expires_at=expires_at).record

    def shorten(
        self,
        target: str,
        owner_id: str | None = None,
        custom_code: str | None = None,
        expires_at: datetime | None = None,
    ) -> ShortenResult:
        """Create a short URL record, or return the owner's existing one for the same URL

        Args:
            target (str):
                Absolute http(s) URL to redirect to.
            owner_id (str | None):
                Owning account. Anonymous links are never deduplicated.
            custom_code (str | None):
                Caller-chosen short code. An empty string means none.
            expires_at (datetime | None):
                Expiry date, must be in the future.

        Returns:
            ShortenResult: the new record (created=True), or the owner's active record for `target`.

        Raises:
            InvalidURLError, InvalidShortCodeFormatError, InvalidExpiryError:
                If input validation fails. Nothing is written.
            ShortCodeUnavailableError:
                If `custom_code` is already taken.
            GenerationExhaustedError:
                If no free short code could be generated.
            ShortCodeCollisionRetryFailedError:
                If the generated code collided on insert twice in a row.
            DataStoreError:
                If the store is unreachable.

        Example:
            >>> result = service.shorten('https://example.com', owner_id='user-123')
            >>> result.record.shortcode, result.created
            ('q_3Zr-', True)
        """
        now = datetime.now(UTC)
        target = validate_target_url(target)
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=UTC)
            if expires_at <= now:
                raise InvalidExpiryError(f'Expiry date must be in the future (given value: {expires_at.isoformat()}).')

        if custom_code == '':
            custom_code = None
        if custom_code is not None:
            shortcode = validate_shortcode(custom_code)
            if self.short_url_dao.exists(shortcode):
                raise ShortCodeUnavailableError(f"Short code '{shortcode}' is already taken.")
        else:
            shortcode = self._generate_shortcode()

        record = ShortURLModel(
            id=uuid.uuid4().hex,
            target=target,
            shortcode=shortcode,
            owner_id=owner_id,
            expires_at=expires_at,
            created_at=now,
        )

        try:
            created = self._insert(record, custom=custom_code is not None)
        except DuplicateOwnerURLError:
            existing = self.short_url_dao.find_active_by_owner_url(owner_id, target)
            if existing is None:
                # The conflicting record was deactivated in the meantime
                raise
            logger.info('Owner already shortened this URL. Returning existing record.', extra={'linkId': existing.id, 'shortcode': existing.shortcode})
            return ShortenResult(existing, created=False)

        logger.info('Created short URL.', extra={'linkId': created.id, 'shortcode': created.shortcode})
        if created.owner_id is not None and self.account_dao is not None:
            self.background.submit(self.account_dao.increment_url_count, created.owner_id, description='increment_url_count')
        return ShortenResult(created, created=True)

    def short_url(self, record: ShortURLModel) -> str:
        return record.short_url(self.base_url)

    def deactivate(self, link_id: str) -> None:
        self.short_url_dao.deactivate(link_id)
        logger.info('Deactivated short URL.', extra={'linkId': link_id})

    def _generate_shortcode(self) -> str:
        return generate_shortcode(self.short_url_dao.exists, length=self.shortcode_length)

    def _insert(self, record: ShortURLModel, custom: bool) -> ShortURLModel:
        try:
            return self.short_url_dao.insert(record)
        except DuplicateShortCodeError as e:
            if custom:
                raise ShortCodeUnavailableError(f"Short code '{record.shortcode}' is already taken.") from e
            logger.warning('Short code collided on insert. Regenerating once.', extra={'shortcode': record.shortcode})

        retry = replace(record, shortcode=self._generate_shortcode())
        try:
            return self.short_url_dao.insert(retry)
        except DuplicateShortCodeError as e:
            raise ShortCodeCollisionRetryFailedError('Short code collided twice on insert. Try again.') from e

