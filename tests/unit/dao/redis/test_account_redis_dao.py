"""Unit tests for the AccountRedisDAO

Test coverage includes:
    1. Counter increments use HINCRBY on the account hash.
    2. stats() defaults missing counters to zero.
    3. Redis connectivity issues raise DataStoreError.
"""

from unittest.mock import MagicMock

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from snaplink.models import AccountStatsModel
from snaplink.dao.exceptions import DataStoreError
from snaplink.dao.redis import AccountRedisDAO


@pytest.fixture
def redis_client():
    _redis_client = MagicMock(spec=redis.Redis)
    _redis_client.connection_pool = MagicMock()
    _redis_client.connection_pool.connection_kwargs = {'host': 'redis', 'port': 6379, 'db': 0}
    return _redis_client


@pytest.fixture
def dao(redis_client):
    return AccountRedisDAO(redis_client=redis_client, prefix='testapp:test')


def test_increment_total_clicks(dao, redis_client):
    redis_client.hincrby.return_value = 7

    assert dao.increment_total_clicks('user-123') == 7
    redis_client.hincrby.assert_called_once_with('testapp:test:accounts:user-123', 'total_clicks', 1)


def test_increment_url_count(dao, redis_client):
    redis_client.hincrby.return_value = 1

    assert dao.increment_url_count('user-123') == 1
    redis_client.hincrby.assert_called_once_with('testapp:test:accounts:user-123', 'url_count', 1)


def test_stats(dao, redis_client):
    redis_client.hgetall.return_value = {'total_clicks': '42', 'url_count': '3'}
    assert dao.stats('user-123') == AccountStatsModel(owner_id='user-123', total_clicks=42, url_count=3)


def test_stats_for_unknown_account(dao, redis_client):
    redis_client.hgetall.return_value = {}
    assert dao.stats('user-123') == AccountStatsModel(owner_id='user-123')


def test_increment_with_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.increment_total_clicks(None)


def test_increment_with_redis_connection_error(dao, redis_client):
    redis_client.hincrby.side_effect = redis.exceptions.ConnectionError('Connection error')

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis:6379/0."):
        dao.increment_total_clicks('user-123')
