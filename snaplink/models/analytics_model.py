from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from snaplink.models.short_url_model import DailyStat


@dataclass(frozen=True)
class RecentClicksSummary:
    total: int
    last_24_hours: int
    last_7_days: int


@dataclass(frozen=True)
class AnalyticsSummary:
    """Read-only analytics derived from a record's stored clicks and rollups.

    Attributes:
        total_clicks (int):
            The record's click counter.
        weekly_clicks (int):
            Sum of daily rollups dated within the last 7 days.
        monthly_clicks (int):
            Sum of daily rollups dated within the last 30 days.
        click_rate (float):
            Clicks per day since creation, rounded to two decimals.
        recent_clicks (RecentClicksSummary):
            Counts over the recent-clicks window.
        top_referrers (dict[str, int]):
            Referer hostname -> count over the recent-clicks window.
        daily_stats (tuple[DailyStat, ...]):
            Rollups dated within the last 30 days, oldest first.
        is_expired (bool):
            Whether the record's expiry date has passed.
    """

    total_clicks: int
    weekly_clicks: int
    monthly_clicks: int
    click_rate: float
    recent_clicks: RecentClicksSummary
    top_referrers: dict[str, int] = field(default_factory=dict)
    daily_stats: tuple[DailyStat, ...] = field(default_factory=tuple)
    is_expired: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            'total_clicks': self.total_clicks,
            'weekly_clicks': self.weekly_clicks,
            'monthly_clicks': self.monthly_clicks,
            'click_rate': self.click_rate,
            'recent_clicks': {
                'total': self.recent_clicks.total,
                'last_24_hours': self.recent_clicks.last_24_hours,
                'last_7_days': self.recent_clicks.last_7_days,
            },
            'top_referrers': dict(self.top_referrers),
            'daily_stats': [{'date': stat.day.isoformat(), 'clicks': stat.clicks} for stat in self.daily_stats],
            'is_expired': self.is_expired,
        }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class LinkPreview:
    shortcode: str
    target: str
    click_count: int
    last_clicked_at: datetime | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    is_expired: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            'shortcode': self.shortcode,
            'target_url': self.target,
            'click_count': self.click_count,
            'last_clicked_at': _isoformat(self.last_clicked_at),
            'created_at': _isoformat(self.created_at),
            'expires_at': _isoformat(self.expires_at),
            'is_expired': self.is_expired,
        }
