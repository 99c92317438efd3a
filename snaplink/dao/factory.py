"""Build DAOs for the backend selected in AppConfig.

Functions:
    build_short_url_dao(app_config, settings) -> ShortURLBaseDAO
    build_account_dao(app_config) -> AccountBaseDAO

The memory backend is kept for the lifetime of the process so that warm
lambda invocations (and a local dev server) see each other's writes.

Example:
    >>> app_config = load_config('redirect_url')
    >>> dao = build_short_url_dao(app_config, load_settings(app_config))
    >>> dao.get_by_shortcode('abc123').target
    'https://example.com/page'
"""

import logging
import threading
from typing import Any

from snaplink.dao.base import ShortURLBaseDAO, AccountBaseDAO
from snaplink.dao.memory import ShortURLMemoryDAO, AccountMemoryDAO
from snaplink.dao.redis import ShortURLRedisDAO, AccountRedisDAO
from snaplink.exceptions import BadConfigurationError
from snaplink.types import LambdaConfiguration
from snaplink.utils.config import ShortenerSettings, app_prefix


logger = logging.getLogger(__name__)

_memory_lock = threading.Lock()
_memory_daos: dict[str, Any] = {}


def _redis_kwargs(app_config: LambdaConfiguration) -> dict[str, Any]:
    return {f'redis_{k}': v for k, v in app_config['redis'].items()}


def _memory_dao(name: str, factory: type, **kwargs) -> Any:
    with _memory_lock:
        if name not in _memory_daos:
            _memory_daos[name] = factory(**kwargs)
        return _memory_daos[name]


def reset_memory_backend() -> None:
    """Drop all records held by the process-wide memory backend"""
    with _memory_lock:
        _memory_daos.clear()


def build_short_url_dao(app_config: LambdaConfiguration, settings: ShortenerSettings | None = None) -> ShortURLBaseDAO:
    settings = settings or ShortenerSettings()
    backend = app_config.get('active_backend')
    limits = {
        'recent_clicks_limit': settings.recent_clicks_limit,
        'daily_stats_limit': settings.daily_stats_limit,
    }

    if backend == 'redis':
        logger.debug('Using Redis as the backend database for short URLs.')
        return ShortURLRedisDAO(**_redis_kwargs(app_config), prefix=app_prefix(), **limits)
    elif backend == 'memory':
        logger.debug('Using process memory as the backend database for short URLs.')
        dao = _memory_dao('short_urls', ShortURLMemoryDAO, **limits)
        # a warm process keeps its records across AppConfig changes; windows are trimmed on the next click
        for name, value in limits.items():
            setattr(dao, name, value)
        return dao
    else:
        raise BadConfigurationError(f"Unsupported backend '{backend}'.")


def build_account_dao(app_config: LambdaConfiguration) -> AccountBaseDAO:
    backend = app_config.get('active_backend')

    if backend == 'redis':
        return AccountRedisDAO(**_redis_kwargs(app_config), prefix=app_prefix())
    elif backend == 'memory':
        return _memory_dao('accounts', AccountMemoryDAO)
    else:
        raise BadConfigurationError(f"Unsupported backend '{backend}'.")
