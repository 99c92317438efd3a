from snaplink.dao.redis.redis_key_schema import RedisKeySchema
from snaplink.dao.redis.mixins import RedisClientMixin
from snaplink.dao.redis.short_url_redis_dao import ShortURLRedisDAO
from snaplink.dao.redis.account_redis_dao import AccountRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
    'AccountRedisDAO',
]
