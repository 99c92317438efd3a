from beartype import beartype

from snaplink.models import AccountStatsModel
from snaplink.dao.base import AccountBaseDAO
from snaplink.dao.redis.mixins import RedisClientMixin
from snaplink.dao.redis.helpers import handle_redis_connection_error


class AccountRedisDAO(RedisClientMixin, AccountBaseDAO):
    """Redis-based account counters, stored as one hash per account.

    Layout:
        accounts:<owner id>  hash: total_clicks, url_count
    """

    @handle_redis_connection_error
    @beartype
    def increment_total_clicks(self, owner_id: str, **kwargs) -> int:
        return self.redis.hincrby(self.keys.account_key(owner_id), 'total_clicks', 1)

    @handle_redis_connection_error
    @beartype
    def increment_url_count(self, owner_id: str, **kwargs) -> int:
        return self.redis.hincrby(self.keys.account_key(owner_id), 'url_count', 1)

    @handle_redis_connection_error
    @beartype
    def stats(self, owner_id: str, **kwargs) -> AccountStatsModel:
        counters = self.redis.hgetall(self.keys.account_key(owner_id))
        return AccountStatsModel(
            owner_id=owner_id,
            total_clicks=int(counters.get('total_clicks', 0)),
            url_count=int(counters.get('url_count', 0)),
        )
