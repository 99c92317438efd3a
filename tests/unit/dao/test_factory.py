from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest

from snaplink.dao import factory
from snaplink.dao.memory import ShortURLMemoryDAO, AccountMemoryDAO
from snaplink.exceptions import BadConfigurationError
from snaplink.models import ShortURLModel, ClickEvent
from snaplink.utils.config import ShortenerSettings


@pytest.fixture(autouse=True)
def _reset_memory_backend():
    factory.reset_memory_backend()
    yield
    factory.reset_memory_backend()


def test_memory_backend_is_shared_per_process():
    app_config = {'active_backend': 'memory', 'memory': {}}

    first = factory.build_short_url_dao(app_config)
    second = factory.build_short_url_dao(app_config)

    assert isinstance(first, ShortURLMemoryDAO)
    assert first is second
    assert isinstance(factory.build_account_dao(app_config), AccountMemoryDAO)


def test_settings_limits_are_applied():
    settings = ShortenerSettings(recent_clicks_limit=10, daily_stats_limit=5)

    dao = factory.build_short_url_dao({'active_backend': 'memory'}, settings)

    assert dao.recent_clicks_limit == 10
    assert dao.daily_stats_limit == 5


def test_changed_limits_apply_to_existing_links():
    app_config = {'active_backend': 'memory'}
    dao = factory.build_short_url_dao(app_config, ShortenerSettings(recent_clicks_limit=10))
    dao.insert(ShortURLModel(id='link-1', target='https://example.com', shortcode='abcd'))
    for _ in range(10):
        dao.record_click('link-1', ClickEvent(timestamp=datetime(2025, 10, 15, 12, tzinfo=UTC)))

    dao = factory.build_short_url_dao(app_config, ShortenerSettings(recent_clicks_limit=3))
    dao.record_click('link-1', ClickEvent(timestamp=datetime(2025, 10, 15, 13, tzinfo=UTC)))

    record = dao.get('link-1')
    assert record.click_count == 11
    assert len(record.recent_clicks) == 3
    assert record.recent_clicks[-1].timestamp.hour == 13


def test_redis_backend(monkeypatch):
    monkeypatch.setenv('APP_NAME', 'snaplink')
    monkeypatch.setenv('APP_ENV', 'dev')
    short_url_dao_cls, account_dao_cls = MagicMock(), MagicMock()
    monkeypatch.setattr(factory, 'ShortURLRedisDAO', short_url_dao_cls)
    monkeypatch.setattr(factory, 'AccountRedisDAO', account_dao_cls)
    app_config = {'active_backend': 'redis', 'redis': {'host': 'redis.test', 'port': 6379, 'db': 0}}

    dao = factory.build_short_url_dao(app_config)
    account_dao = factory.build_account_dao(app_config)

    short_url_dao_cls.assert_called_once_with(
        redis_host='redis.test', redis_port=6379, redis_db=0, prefix='snaplink:dev', recent_clicks_limit=1000, daily_stats_limit=365
    )
    account_dao_cls.assert_called_once_with(redis_host='redis.test', redis_port=6379, redis_db=0, prefix='snaplink:dev')
    assert dao is short_url_dao_cls.return_value
    assert account_dao is account_dao_cls.return_value


@pytest.mark.parametrize('builder', [factory.build_short_url_dao, factory.build_account_dao])
def test_unsupported_backend(builder):
    with pytest.raises(BadConfigurationError):
        builder({'active_backend': 'dynamodb'})
