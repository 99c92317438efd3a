"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO.

Responsibilities:
    - Insert records while enforcing short code and (owner, target URL) uniqueness;
    - Retrieve records together with their click analytics;
    - Record clicks atomically (counter, sliding window, daily rollup);
    - Soft delete records;
    - Map Redis errors and script replies to DAO exceptions.

Storage layout (see RedisKeySchema):
    links:<id>                    hash: scalar record fields
    links:<id>:clicks             list: JSON click events, oldest first, bounded
    links:<id>:daily              hash: YYYY-MM-DD -> clicks
    links:<id>:days               list: YYYY-MM-DD in chronological order, bounded
    shortcodes:<code>             string: record id
    owners:<owner>:urls:<digest>  string: id of the owner's active record for a URL

Example:
    >>> from snaplink.models import ShortURLModel
    >>> from snaplink.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="snaplink:dev")
    >>> dao.insert(ShortURLModel(id='f3a1', target='https://example.com/page', shortcode='abc123'))
    ShortURLModel(id='f3a1', ...)
    >>> dao.get_by_shortcode('abc123').target
    'https://example.com/page'
"""

import json
import logging
from datetime import date, datetime, UTC

from beartype import beartype

from snaplink.models import ShortURLModel, ClickEvent, DailyStat
from snaplink.dao.base import ShortURLBaseDAO
from snaplink.dao.redis import scripts
from snaplink.dao.redis.mixins import RedisClientMixin
from snaplink.dao.redis.helpers import handle_redis_connection_error
from snaplink.dao.exceptions import DuplicateShortCodeError, DuplicateOwnerURLError, ShortURLNotFoundError


logger = logging.getLogger(__name__)


def _encode_datetime(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ''


def _decode_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _encode_record(short_url: ShortURLModel) -> dict[str, str]:
    return {
        'id': short_url.id,
        'target': short_url.target,
        'shortcode': short_url.shortcode,
        'owner_id': short_url.owner_id or '',
        'click_count': str(short_url.click_count),
        'last_clicked_at': _encode_datetime(short_url.last_clicked_at),
        'is_active': '1' if short_url.is_active else '0',
        'expires_at': _encode_datetime(short_url.expires_at),
        'created_at': _encode_datetime(short_url.created_at),
    }


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL records

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    Every mutation that must be atomic runs as a registered Lua script (see scripts.py).

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    def __init__(self, *args, recent_clicks_limit: int | None = None, daily_stats_limit: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        if recent_clicks_limit is not None:
            self.recent_clicks_limit = recent_clicks_limit
        if daily_stats_limit is not None:
            self.daily_stats_limit = daily_stats_limit
        self._create_link = self.redis.register_script(scripts.CREATE_LINK)
        self._record_click = self.redis.register_script(scripts.RECORD_CLICK)
        self._deactivate_link = self.redis.register_script(scripts.DEACTIVATE_LINK)

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        """Insert a short URL record into Redis

        Both uniqueness checks and the write happen inside one Lua script.
        A plain EXISTS-then-SET would leave a window in which two lambdas pass
        the check for the same short code and the later SET overwrites the
        earlier record:

            (lambda 1): EXISTS <app>:shortcodes:abc123  => 0
            (lambda 2): EXISTS <app>:shortcodes:abc123  => 0
            (lambda 1): SET <app>:shortcodes:abc123 <id 1>
            (lambda 2): SET <app>:shortcodes:abc123 <id 2>  => record 1 is unreachable

        Args:
            short_url (ShortURLModel):
                Record to insert. Analytics fields start empty regardless of input.

        Returns:
            ShortURLModel: the stored record.

        Raises:
            DuplicateShortCodeError:
                If the short code is already taken.
            DuplicateOwnerURLError:
                If the owner already holds an active record for the same target URL.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        stored = ShortURLModel(
            id=short_url.id,
            target=short_url.target,
            shortcode=short_url.shortcode,
            owner_id=short_url.owner_id,
            is_active=short_url.is_active,
            expires_at=short_url.expires_at,
            created_at=short_url.created_at or datetime.now(UTC),
        )
        fields = [item for pair in _encode_record(stored).items() for item in pair]
        has_owner = stored.owner_id is not None and stored.is_active

        # fmt: off
        status, ref = self._create_link(
            keys=[self.keys.shortcode_key(stored.shortcode),
                  self.keys.owner_url_key(stored.owner_id, stored.target),
                  self.keys.link_key(stored.id)],
            args=[stored.id, '1' if has_owner else '0', *fields],
        )
        # fmt: on

        if status == 'shortcode':
            raise DuplicateShortCodeError(f"Short URL with code '{stored.shortcode}' already exists.")
        if status == 'owner_url':
            raise DuplicateOwnerURLError(
                f"Owner '{stored.owner_id}' already has an active short URL for '{stored.target}'.",
                existing_id=ref,
            )
        return stored

    @handle_redis_connection_error
    @beartype
    def get(self, link_id: str, **kwargs) -> ShortURLModel:
        """Retrieve a record and its analytics by id

        All four keys are read in one MULTI/EXEC transaction so the record is
        never observed halfway through a concurrent click update.

        Raises:
            ShortURLNotFoundError:
                If the record does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hgetall(self.keys.link_key(link_id))
            pipe.lrange(self.keys.link_clicks_key(link_id), 0, -1)
            pipe.lrange(self.keys.link_days_key(link_id), 0, -1)
            pipe.hgetall(self.keys.link_daily_key(link_id))
            record, clicks, days, daily = pipe.execute()

        if not record:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

        return ShortURLModel(
            id=record['id'],
            target=record['target'],
            shortcode=record['shortcode'],
            owner_id=record.get('owner_id') or None,
            click_count=int(record.get('click_count', 0)),
            last_clicked_at=_decode_datetime(record.get('last_clicked_at')),
            is_active=record.get('is_active', '1') == '1',
            expires_at=_decode_datetime(record.get('expires_at')),
            created_at=_decode_datetime(record.get('created_at')),
            recent_clicks=tuple(ClickEvent.from_dict(json.loads(click)) for click in clicks),
            daily_stats=tuple(DailyStat(day=date.fromisoformat(day), clicks=int(daily.get(day, 0))) for day in days),
        )

    @handle_redis_connection_error
    @beartype
    def get_by_shortcode(self, shortcode: str, **kwargs) -> ShortURLModel:
        link_id = self.redis.get(self.keys.shortcode_key(shortcode))
        if link_id is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self.get(link_id)

    @handle_redis_connection_error
    @beartype
    def find_active_by_owner_url(self, owner_id: str, target: str, **kwargs) -> ShortURLModel | None:
        link_id = self.redis.get(self.keys.owner_url_key(owner_id, target))
        if link_id is None:
            return None

        try:
            short_url = self.get(link_id)
        except ShortURLNotFoundError:
            return None
        # the index key holds a 64-bit digest of the target, not the target itself
        return short_url if short_url.is_active and short_url.target == target else None

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.shortcode_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def record_click(self, link_id: str, click: ClickEvent, **kwargs) -> tuple[int, str | None]:
        """Record a click with a single atomic script invocation

        NOTE: the daily rollup step must locate today's entry before mutating it.
              Done client-side (read, then write), two concurrent first clicks of
              the day could both miss the entry and append two rollups for the
              same day. The script performs find-increment-or-append in one step.

        Args:
            link_id (str):
                Identifier of the clicked record.
            click (ClickEvent):
                Click metadata. Its timestamp determines the rollup day (UTC).

        Returns:
            tuple[int, str | None]: updated click count and owner id.

        Raises:
            ShortURLNotFoundError:
                If the record does not exist.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.record_click('f3a1', ClickEvent(timestamp=datetime.now(UTC), ip='203.0.113.9'))
            (42, 'user-123')
        """
        day = click.timestamp.astimezone(UTC).date().isoformat()
        # fmt: off
        result = self._record_click(
            keys=[self.keys.link_key(link_id),
                  self.keys.link_clicks_key(link_id),
                  self.keys.link_daily_key(link_id),
                  self.keys.link_days_key(link_id)],
            args=[click.timestamp.isoformat(),
                  json.dumps(click.to_dict()),
                  day,
                  self.recent_clicks_limit,
                  self.daily_stats_limit],
        )
        # fmt: on

        if result is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

        click_count, owner_id = result
        logger.debug('Recorded click.', extra={'linkId': link_id, 'clickCount': click_count, 'day': day})
        return int(click_count), owner_id or None

    @handle_redis_connection_error
    @beartype
    def deactivate(self, link_id: str, **kwargs) -> None:
        owner_id, target = self.redis.hmget(self.keys.link_key(link_id), ['owner_id', 'target'])
        if target is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

        # fmt: off
        deactivated = self._deactivate_link(
            keys=[self.keys.link_key(link_id),
                  self.keys.owner_url_key(owner_id or None, target)],
            args=[link_id],
        )
        # fmt: on
        if not deactivated:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
