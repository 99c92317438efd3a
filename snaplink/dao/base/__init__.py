from snaplink.dao.base.short_url_base_dao import ShortURLBaseDAO
from snaplink.dao.base.account_base_dao import AccountBaseDAO


__all__ = [
    'ShortURLBaseDAO',
    'AccountBaseDAO',
]
