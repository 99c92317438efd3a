import threading

from snaplink.models import AccountStatsModel
from snaplink.dao.memory import AccountMemoryDAO


def test_counters():
    dao = AccountMemoryDAO()

    assert dao.increment_total_clicks('user-123') == 1
    assert dao.increment_total_clicks('user-123') == 2
    assert dao.increment_url_count('user-123') == 1

    assert dao.stats('user-123') == AccountStatsModel(owner_id='user-123', total_clicks=2, url_count=1)
    assert dao.stats('user-456') == AccountStatsModel(owner_id='user-456')


def test_concurrent_increments():
    dao = AccountMemoryDAO()
    threads = [threading.Thread(target=lambda: [dao.increment_total_clicks('user-123') for _ in range(500)]) for _ in range(4)]

    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert dao.stats('user-123').total_clicks == 2000
