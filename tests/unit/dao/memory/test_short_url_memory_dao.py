"""Unit tests for the ShortURLMemoryDAO

Test coverage includes:

1. Uniqueness constraints
   - Duplicate short codes are rejected regardless of owner.
   - An owner may hold one active record per target URL; anonymous links are never deduplicated.
   - Deactivation releases the owner+URL slot but keeps the short code taken.

2. Click recording
   - Counter, recent clicks and daily rollups update together.
   - The recent clicks window keeps the newest entries only.
   - Daily rollups hold one entry per UTC day, stay sorted and keep the newest days only.
   - Concurrent clicks are never lost.

3. Retrieval
   - Records are returned as immutable snapshots.
"""

import threading
from datetime import date, datetime, timedelta, UTC

import pytest
from beartype.roar import BeartypeCallHintParamViolation

from snaplink.models import ShortURLModel, ClickEvent, DailyStat
from snaplink.dao.memory import ShortURLMemoryDAO
from snaplink.dao.exceptions import DuplicateShortCodeError, DuplicateOwnerURLError, ShortURLNotFoundError


TARGET = 'https://example.com/page'
T0 = datetime(2025, 10, 15, 12, tzinfo=UTC)


@pytest.fixture
def dao():
    return ShortURLMemoryDAO()


def make_short_url(link_id='f3a1', shortcode='abc123', owner_id='user-123', target=TARGET, **kwargs):
    return ShortURLModel(id=link_id, target=target, shortcode=shortcode, owner_id=owner_id, created_at=T0, **kwargs)


# -------------------------------
# 1. Uniqueness constraints
# -------------------------------


def test_insert_and_get(dao):
    stored = dao.insert(make_short_url())

    assert dao.get('f3a1') == stored
    assert dao.get_by_shortcode('abc123') == stored
    assert dao.exists('abc123')
    assert not dao.exists('zzz999')


def test_insert_sets_created_at(dao):
    stored = dao.insert(ShortURLModel(id='f3a1', target=TARGET, shortcode='abc123'))
    assert stored.created_at is not None
    assert stored.created_at.tzinfo is not None


def test_duplicate_shortcode_is_rejected(dao):
    dao.insert(make_short_url())

    with pytest.raises(DuplicateShortCodeError):
        dao.insert(make_short_url(link_id='b2c3', owner_id='user-456', target='https://other.com'))
    assert dao.get_by_shortcode('abc123').id == 'f3a1'


def test_duplicate_owner_url_is_rejected(dao):
    dao.insert(make_short_url())

    with pytest.raises(DuplicateOwnerURLError) as exc_info:
        dao.insert(make_short_url(link_id='b2c3', shortcode='xyz789'))

    assert exc_info.value.existing_id == 'f3a1'
    assert not dao.exists('xyz789')


def test_other_owners_and_anonymous_links_are_not_deduplicated(dao):
    dao.insert(make_short_url())
    dao.insert(make_short_url(link_id='b2c3', shortcode='xyz789', owner_id='user-456'))
    dao.insert(make_short_url(link_id='c3d4', shortcode='anon01', owner_id=None))
    dao.insert(make_short_url(link_id='d4e5', shortcode='anon02', owner_id=None))

    assert dao.find_active_by_owner_url('user-123', TARGET).id == 'f3a1'
    assert dao.find_active_by_owner_url('user-456', TARGET).id == 'b2c3'


def test_deactivate_releases_owner_url_slot(dao):
    dao.insert(make_short_url())

    dao.deactivate('f3a1')

    assert dao.get('f3a1').is_active is False
    assert dao.find_active_by_owner_url('user-123', TARGET) is None
    assert dao.exists('abc123')
    dao.insert(make_short_url(link_id='b2c3', shortcode='xyz789'))
    assert dao.find_active_by_owner_url('user-123', TARGET).id == 'b2c3'


def test_deactivate_missing_record(dao):
    with pytest.raises(ShortURLNotFoundError):
        dao.deactivate('missing')


def test_missing_records(dao):
    with pytest.raises(ShortURLNotFoundError):
        dao.get('missing')
    with pytest.raises(ShortURLNotFoundError):
        dao.get_by_shortcode('missing')
    assert dao.find_active_by_owner_url('user-123', TARGET) is None


def test_insert_with_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.insert({'id': 'f3a1'})


# -------------------------------
# 2. Click recording
# -------------------------------


def test_record_click(dao):
    dao.insert(make_short_url())
    click = ClickEvent(timestamp=T0, ip='203.0.113.9', user_agent='curl/8.5.0', referer='https://news.ycombinator.com/')

    assert dao.record_click('f3a1', click) == (1, 'user-123')

    short_url = dao.get('f3a1')
    assert short_url.click_count == 1
    assert short_url.last_clicked_at == T0
    assert short_url.recent_clicks == (click,)
    assert short_url.daily_stats == (DailyStat(day=date(2025, 10, 15), clicks=1),)


def test_record_click_anonymous_link(dao):
    dao.insert(make_short_url(owner_id=None))
    assert dao.record_click('f3a1', ClickEvent(timestamp=T0)) == (1, None)


def test_record_click_on_missing_record(dao):
    with pytest.raises(ShortURLNotFoundError):
        dao.record_click('missing', ClickEvent(timestamp=T0))


def test_same_day_clicks_share_one_rollup(dao):
    dao.insert(make_short_url())

    for minutes in range(5):
        dao.record_click('f3a1', ClickEvent(timestamp=T0 + timedelta(minutes=minutes)))

    assert dao.get('f3a1').daily_stats == (DailyStat(day=date(2025, 10, 15), clicks=5),)


def test_recent_clicks_keep_newest_1000(dao):
    dao.insert(make_short_url())

    for i in range(1500):
        dao.record_click('f3a1', ClickEvent(timestamp=T0 + timedelta(seconds=i)))

    short_url = dao.get('f3a1')
    assert short_url.click_count == 1500
    assert len(short_url.recent_clicks) == 1000
    assert short_url.recent_clicks[0].timestamp == T0 + timedelta(seconds=500)
    assert short_url.recent_clicks[-1].timestamp == T0 + timedelta(seconds=1499)


def test_daily_stats_keep_newest_365_days(dao):
    dao.insert(make_short_url())
    start = datetime(2024, 1, 1, 12, tzinfo=UTC)

    for day in range(400):
        dao.record_click('f3a1', ClickEvent(timestamp=start + timedelta(days=day)))

    daily_stats = dao.get('f3a1').daily_stats
    assert len(daily_stats) == 365
    assert daily_stats[0].day == (start + timedelta(days=35)).date()
    assert daily_stats[-1].day == (start + timedelta(days=399)).date()
    assert len({stat.day for stat in daily_stats}) == 365
    assert dao.get('f3a1').click_count == 400


def test_configurable_limits():
    dao = ShortURLMemoryDAO(recent_clicks_limit=3, daily_stats_limit=2)
    dao.insert(make_short_url())

    for day in range(4):
        dao.record_click('f3a1', ClickEvent(timestamp=T0 + timedelta(days=day)))

    short_url = dao.get('f3a1')
    assert len(short_url.recent_clicks) == 3
    assert [stat.day for stat in short_url.daily_stats] == [date(2025, 10, 17), date(2025, 10, 18)]


def test_late_click_from_previous_day_keeps_rollup_sorted(dao):
    dao.insert(make_short_url())

    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 16, 0, 0, 0, 1000, tzinfo=UTC)))
    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 15, 23, 59, 59, 999000, tzinfo=UTC)))

    assert dao.get('f3a1').daily_stats == (
        DailyStat(day=date(2025, 10, 15), clicks=1),
        DailyStat(day=date(2025, 10, 16), clicks=1),
    )


def test_late_click_at_capacity_evicts_oldest_day():
    dao = ShortURLMemoryDAO(daily_stats_limit=2)
    dao.insert(make_short_url())

    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 17, 0, 0, 1, tzinfo=UTC)))
    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 18, 0, 0, 1, tzinfo=UTC)))
    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 17, 23, 59, 59, tzinfo=UTC)))
    dao.record_click('f3a1', ClickEvent(timestamp=datetime(2025, 10, 16, 23, 59, 59, tzinfo=UTC)))

    assert dao.get('f3a1').daily_stats == (
        DailyStat(day=date(2025, 10, 17), clicks=2),
        DailyStat(day=date(2025, 10, 18), clicks=1),
    )


def test_lowered_limit_trims_existing_window():
    dao = ShortURLMemoryDAO(recent_clicks_limit=5)
    dao.insert(make_short_url())
    for i in range(5):
        dao.record_click('f3a1', ClickEvent(timestamp=T0 + timedelta(seconds=i)))

    dao.recent_clicks_limit = 2
    dao.record_click('f3a1', ClickEvent(timestamp=T0 + timedelta(seconds=5)))

    assert [click.timestamp for click in dao.get('f3a1').recent_clicks] == [T0 + timedelta(seconds=4), T0 + timedelta(seconds=5)]


def test_concurrent_clicks_are_not_lost(dao):
    dao.insert(make_short_url())
    threads_count, clicks_per_thread = 8, 250

    def click():
        for _ in range(clicks_per_thread):
            dao.record_click('f3a1', ClickEvent(timestamp=T0))

    threads = [threading.Thread(target=click) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    short_url = dao.get('f3a1')
    assert short_url.click_count == threads_count * clicks_per_thread
    assert short_url.daily_stats == (DailyStat(day=date(2025, 10, 15), clicks=threads_count * clicks_per_thread),)
    assert len(short_url.recent_clicks) == 1000


# -------------------------------
# 3. Retrieval
# -------------------------------


def test_snapshots_do_not_change_after_clicks(dao):
    dao.insert(make_short_url())
    before = dao.get('f3a1')

    dao.record_click('f3a1', ClickEvent(timestamp=T0))

    assert before.click_count == 0
    assert before.recent_clicks == ()
    assert dao.get('f3a1').click_count == 1
