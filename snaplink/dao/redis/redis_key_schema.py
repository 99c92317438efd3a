import functools
from collections.abc import Callable

import xxhash


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing data models.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "snaplink:prod" or "snaplink:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, link_id: str) -> str:
        return f'links:{link_id}'

    @prefix_key
    def link_clicks_key(self, link_id: str) -> str:
        return f'links:{link_id}:clicks'

    @prefix_key
    def link_daily_key(self, link_id: str) -> str:
        return f'links:{link_id}:daily'

    @prefix_key
    def link_days_key(self, link_id: str) -> str:
        return f'links:{link_id}:days'

    @prefix_key
    def shortcode_key(self, shortcode: str) -> str:
        return f'shortcodes:{shortcode}'

    @prefix_key
    def owner_url_key(self, owner_id: str | None, target: str) -> str:
        # Target URLs are unbounded in length, so the key holds a digest instead
        return f'owners:{owner_id or ""}:urls:{xxhash.xxh64_hexdigest(target.encode())}'

    @prefix_key
    def account_key(self, owner_id: str) -> str:
        return f'accounts:{owner_id}'
