from snaplink.dao.memory.short_url_memory_dao import ShortURLMemoryDAO
from snaplink.dao.memory.account_memory_dao import AccountMemoryDAO


__all__ = [
    'ShortURLMemoryDAO',
    'AccountMemoryDAO',
]
