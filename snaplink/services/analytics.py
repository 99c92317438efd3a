"""Read-only click analytics

All figures are derived from what a record already stores: its click
counter, its bounded recent-clicks window and its daily rollups. Windows
are anchored at the current UTC day (rollups) or the current instant
(recent clicks).

Functions:
    summarize(record, now) -> AnalyticsSummary
        Compute analytics for a record as of `now`.

AnalyticsReader.get_preview() exposes the public fields of an active link
by short code and records nothing.

Example:
    >>> reader = AnalyticsReader(dao)
    >>> reader.get_analytics('f3a1').weekly_clicks
    3
"""

import math
import logging
import urllib.parse
from collections import Counter
from datetime import datetime, timedelta, UTC

from snaplink.models import ShortURLModel, AnalyticsSummary, RecentClicksSummary, LinkPreview
from snaplink.dao.base import ShortURLBaseDAO
from snaplink.dao.exceptions import ShortURLNotFoundError


logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)
DAY = timedelta(days=1)


def _referer_host(referer: str | None) -> str | None:
    if not referer:
        return None
    try:
        return urllib.parse.urlparse(referer).hostname
    except ValueError:
        return None


def summarize(record: ShortURLModel, now: datetime) -> AnalyticsSummary:
    today = now.astimezone(UTC).date()
    week_start, month_start = today - WEEK, today - MONTH

    weekly_clicks = sum(stat.clicks for stat in record.daily_stats if stat.day >= week_start)
    monthly_stats = tuple(sorted((stat for stat in record.daily_stats if stat.day >= month_start), key=lambda stat: stat.day))
    monthly_clicks = sum(stat.clicks for stat in monthly_stats)

    recent = record.recent_clicks
    recent_clicks = RecentClicksSummary(
        total=len(recent),
        last_24_hours=sum(1 for click in recent if click.timestamp >= now - DAY),
        last_7_days=sum(1 for click in recent if click.timestamp >= now - WEEK),
    )

    referrers = Counter(host for host in map(_referer_host, (click.referer for click in recent)) if host)

    # Partial days count as a whole day; creation day divides by 1
    created_at = record.created_at or now
    days_since_creation = math.ceil((now - created_at).total_seconds() / DAY.total_seconds())
    click_rate = round(record.click_count / max(1, days_since_creation), 2)

    return AnalyticsSummary(
        total_clicks=record.click_count,
        weekly_clicks=weekly_clicks,
        monthly_clicks=monthly_clicks,
        click_rate=click_rate,
        recent_clicks=recent_clicks,
        top_referrers=dict(referrers.most_common()),
        daily_stats=monthly_stats,
        is_expired=record.is_expired(now),
    )


class AnalyticsReader:
    def __init__(self, short_url_dao: ShortURLBaseDAO):
        self.short_url_dao = short_url_dao

    def get_analytics(self, link_id: str, owner_id: str | None = None, now: datetime | None = None) -> AnalyticsSummary:
        """Compute analytics for a record

        Args:
            link_id (str):
                Record identifier.
            owner_id (str | None):
                When given, records owned by anyone else are reported as missing.
            now (datetime | None):
                Reference instant, defaults to the current time.

        Raises:
            ShortURLNotFoundError: if the record does not exist (or is not owned by `owner_id`).
        """
        record = self.short_url_dao.get(link_id)
        if owner_id is not None and record.owner_id != owner_id:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")

        summary = summarize(record, now or datetime.now(UTC))
        logger.debug('Computed link analytics.', extra={'linkId': link_id, 'totalClicks': summary.total_clicks})
        return summary

    def get_preview(self, shortcode: str, now: datetime | None = None) -> LinkPreview:
        """Describe an active link without recording a click

        Raises:
            ShortURLNotFoundError: if no active record uses `shortcode`.
        """
        record = self.short_url_dao.get_by_shortcode(shortcode)
        if not record.is_active:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        return LinkPreview(
            shortcode=record.shortcode,
            target=record.target,
            click_count=record.click_count,
            last_clicked_at=record.last_clicked_at,
            created_at=record.created_at,
            expires_at=record.expires_at,
            is_expired=record.is_expired(now or datetime.now(UTC)),
        )
