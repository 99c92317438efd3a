from snaplink.models.short_url_model import ShortURLModel, ClickEvent, DailyStat
from snaplink.models.account_model import AccountStatsModel
from snaplink.models.analytics_model import AnalyticsSummary, RecentClicksSummary, LinkPreview


__all__ = [
    'ShortURLModel',
    'ClickEvent',
    'DailyStat',
    'AccountStatsModel',
    'AnalyticsSummary',
    'RecentClicksSummary',
    'LinkPreview',
]
